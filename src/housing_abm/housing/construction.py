"""건설 부문 - 목표 재고까지 신축 공급, 미분양 가격 인하"""

import logging

from ..core.errors import report_violation
from ..core.types import CONSTRUCTION_ID

logger = logging.getLogger(__name__)


class Construction:
    """지역 건설사 (신축 주택의 최초 소유자)

    목표 재고 = 지역 가구 수 * houses_per_household
    """
    id = CONSTRUCTION_ID

    def __init__(self, cfg, region):
        """cfg: ConstructionConfig"""
        self.cfg = cfg
        self.region = region
        self.housing_stock = 0           # 지역 누적 공급량
        self.on_market: set[int] = set()
        self.n_built_this_month = 0
        self.n_sold = 0
        self.revenue = 0.0

    def target_stock(self) -> int:
        return int(len(self.region.households) * self.cfg.houses_per_household)

    def build_initial_stock(self) -> int:
        """초기 재고 일괄 공급"""
        return self._build(self.target_stock() - self.housing_stock)

    def step(self):
        """월간 공급: 미분양 가격 인하 → 부족분 착공"""
        sale_market = self.region.sale_market
        factor = 1.0 - self.cfg.unsold_price_reduction
        for house_id in sorted(self.on_market):
            record = self.region.houses[house_id].sale_record
            if record is None:
                report_violation(f"construction house {house_id} missing from sale market", self.region.strict)
                continue
            sale_market.update_offer(record, record.price * factor)

        target = self.target_stock()
        shortfall = target - self.housing_stock
        max_builds = max(int(target * self.cfg.max_builds_per_month), 1)
        self.n_built_this_month = self._build(min(shortfall, max_builds))

    def _build(self, n: int) -> int:
        if n <= 0:
            return 0
        region = self.region
        sale_market = region.sale_market
        n_quality = sale_market.stats.n_quality
        for _ in range(n):
            quality = int(region.rng.integers(n_quality))
            house = region.houses.build(region.id, quality, CONSTRUCTION_ID)
            self.housing_stock += 1
            if sale_market.offer(house, sale_market.get_average_price(quality)) is not None:
                self.on_market.add(house.id)
        logger.debug("Region %s: built %d houses (stock %d)", region.name, n, self.housing_stock)
        return n

    # === 소유자 인터페이스 ===

    def complete_house_sale(self, record, price: float):
        self.on_market.discard(record.house_id)
        self.n_sold += 1
        self.revenue += price

    def complete_house_let(self, record, price: float):
        report_violation(f"construction sector let house {record.house_id}", self.region.strict)

    def end_of_letting_agreement(self, house, agreement):
        report_violation(f"construction sector notified about tenancy of house {house.id}", self.region.strict)
