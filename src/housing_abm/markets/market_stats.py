"""품질 구간별 시장 통계 - 가격 EMA, 체류일수 EMA, 주택가격지수"""

import math
from statistics import NormalDist

import numpy as np


def reference_prices(n_quality: int, median: float, sigma: float) -> np.ndarray:
    """품질 구간별 기준가격 (로그정규 분위수)

    품질 q는 가격 분포의 (q+0.5)/N 분위에 대응한다.
    """
    dist = NormalDist()
    z = np.array([dist.inv_cdf((q + 0.5) / n_quality) for q in range(n_quality)])
    return np.exp(math.log(median) + sigma * z)


class QualityPriceStats:
    """품질별 평균 가격 / 평균 체류일수

    가격: 거래 1건마다 EMA 갱신 (감쇠 price_decay)
    체류일수: 매월 1회, 그달 거래된 매물의 총 등록일수와 미거래 매물의 현재 등록일수 평균으로 갱신
    """

    def __init__(self, ref_prices: np.ndarray, price_decay: float,
                 dom_decay: float, initial_days_on_market: float):
        self.ref_prices = np.asarray(ref_prices, dtype=np.float64).copy()
        self.n_quality = len(self.ref_prices)
        self.price_decay = price_decay
        self.dom_decay = dom_decay
        self.initial_days_on_market = initial_days_on_market
        self.reset()

    def reset(self):
        self.avg_price = self.ref_prices.copy()
        self.avg_days_on_market = np.full(self.n_quality, self.initial_days_on_market, dtype=np.float64)
        self.hpi_history: list[float] = []
        self._dom_observations: list[list[float]] = [[] for _ in range(self.n_quality)]

    def record_transaction(self, quality: int, price: float):
        g = self.price_decay
        self.avg_price[quality] = g * self.avg_price[quality] + (1.0 - g) * price

    def observe_days_on_market(self, quality: int, days: float):
        self._dom_observations[quality].append(days)

    def commit_month(self):
        """월말 체류일수 EMA 반영, HPI 기록"""
        d = self.dom_decay
        for q, obs in enumerate(self._dom_observations):
            if obs:
                self.avg_days_on_market[q] = d * self.avg_days_on_market[q] + (1.0 - d) * float(np.mean(obs))
                obs.clear()
        self.hpi_history.append(self.hpi())

    def hpi(self) -> float:
        """주택가격지수 (기준가격 대비 평균가 비율의 평균)"""
        return float(np.mean(self.avg_price / self.ref_prices))

    def price_appreciation(self, months: int) -> float:
        """최근 months개월 가격 상승률 (연율 아님, 기간 수익률)"""
        if len(self.hpi_history) <= months:
            return 0.0
        past = self.hpi_history[-1 - months]
        if past <= 0:
            return 0.0
        return self.hpi_history[-1] / past - 1.0

    def max_quality_given_price(self, price: float) -> int:
        """해당 가격으로 살 수 있는 최고 품질 (없으면 -1)"""
        affordable = np.nonzero(self.avg_price <= price)[0]
        if len(affordable) == 0:
            return -1
        return int(affordable.max())
