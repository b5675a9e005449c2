"""임대시장 - 임대차 계약 체결, 공실 기간, 임대수익률 통계"""

import logging
from typing import Optional

import numpy as np

from ..core.types import MarketType, DAYS_IN_MONTH
from ..housing.house import House
from ..institutions.payments import RentalAgreement
from .housing_market import HousingMarket
from .records import HouseSaleRecord, HouseBuyerRecord, TransactionRecord, AgentSnapshot

logger = logging.getLogger(__name__)


class HouseRentalMarket(HousingMarket):
    """임대시장

    Args:
        cfg: RentalConfig
        sale_market: 같은 지역 매매시장 (수익률 계산용 평균 매매가)
    """
    market_type = MarketType.RENTAL

    def __init__(self, region, stats, bidup: float, cfg, sale_market, strict: bool = False):
        super().__init__(region, stats, bidup, strict)
        self.cfg = cfg
        self.sale_market = sale_market
        self.average_sold_gross_yield = cfg.initial_gross_yield
        self.long_term_average_gross_yield = cfg.initial_gross_yield

    def _get_marker(self, house: House) -> Optional[HouseSaleRecord]:
        return house.rental_record

    def _set_marker(self, house: House, record: Optional[HouseSaleRecord]):
        house.rental_record = record

    def _get_other_marker(self, house: House) -> Optional[HouseSaleRecord]:
        return house.sale_record

    # === 수익률 ===

    def get_average_months_on_market(self, quality: int) -> float:
        return self.get_average_days_on_market(quality) / DAYS_IN_MONTH

    def expected_occupancy(self, quality: int) -> float:
        """예상 입주율 = 계약기간 / (계약기간 + 공실기간)"""
        tenancy = self.cfg.tenancy_length_average
        return tenancy / (tenancy + self.get_average_months_on_market(quality))

    def expected_gross_yield(self, quality: int) -> float:
        sale_price = self.sale_market.get_average_price(quality)
        if sale_price <= 0:
            return 0.0
        return self.get_average_price(quality) * 12.0 * self.expected_occupancy(quality) / sale_price

    def expected_gross_yields(self) -> np.ndarray:
        return np.array([self.expected_gross_yield(q) for q in range(self.stats.n_quality)])

    def yield_trend(self) -> float:
        """단기 - 장기 평균 임대수익률"""
        return self.average_sold_gross_yield - self.long_term_average_gross_yield

    # === 매칭 ===

    def _accept_match(self, bid: HouseBuyerRecord, ask: HouseSaleRecord, price: float):
        cfg = self.cfg
        house = self.region.houses[ask.house_id]
        return RentalAgreement.draw(price, cfg.tenancy_length_average, cfg.tenancy_length_epsilon,
                                    self.region.rng, landlord_id=house.owner_id)

    def _complete_transaction(self, month: int, house: House, bid: HouseBuyerRecord,
                              ask: HouseSaleRecord, price: float, agreement) -> TransactionRecord:
        tenant = self.region.population[bid.household_id]
        landlord = self.region.get_owner(house.owner_id)
        tenant_snapshot = AgentSnapshot.of(tenant)
        landlord_snapshot = AgentSnapshot.of(landlord)

        tenant.complete_house_rental(ask, agreement)
        landlord.complete_house_let(ask, price)

        # 임대수익률 EMA
        sale_price = self.sale_market.get_average_price(house.quality)
        if sale_price > 0:
            gross_yield = price * 12.0 / sale_price
            k, kl = self.cfg.yield_decay_short, self.cfg.yield_decay_long
            self.average_sold_gross_yield = k * self.average_sold_gross_yield + (1.0 - k) * gross_yield
            self.long_term_average_gross_yield = kl * self.long_term_average_gross_yield + (1.0 - kl) * gross_yield

        return TransactionRecord(
            month=month,
            market_type=self.market_type,
            region_id=house.region_id,
            house_id=house.id,
            quality=house.quality,
            initial_listed_price=ask.initial_price,
            t_initial_listing=ask.t_initial_listing,
            price=price,
            buyer=tenant_snapshot,
            seller=landlord_snapshot,
        )
