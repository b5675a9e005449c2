"""근로소득 모형 - 소득 분위 + 연령 프로파일"""

import math
from statistics import NormalDist

_STANDARD_NORMAL = NormalDist()


class IncomeModel:
    """연간 총 근로소득

    분위는 가구 생성 시 고정되고, 연령에 따라 소득 수준이 변한다.
    """

    def __init__(self, cfg):
        """cfg: IncomeConfig"""
        self.cfg = cfg
        self._log_median = math.log(cfg.median_income)

    def annual_gross_income(self, age: float, percentile: float) -> float:
        cfg = self.cfg
        p = min(max(percentile, 1e-4), 1.0 - 1e-4)
        z = _STANDARD_NORMAL.inv_cdf(p)
        base = math.exp(self._log_median + cfg.income_sigma * z)
        # 정점 연령에서 멀어질수록 감소 (하한 있음)
        distance = (age - cfg.peak_age) / cfg.peak_age
        age_factor = max(1.0 - cfg.age_penalty * distance * distance, cfg.min_age_factor)
        return base * age_factor
