"""주택 매매시장 - 대출 사전승인, 소유권 이전, 가격지수"""

import logging
from typing import Optional

from ..core.types import MarketType
from ..housing.house import House
from .housing_market import HousingMarket
from .records import HouseSaleRecord, HouseBuyerRecord, TransactionRecord, AgentSnapshot

logger = logging.getLogger(__name__)


class HouseSaleMarket(HousingMarket):
    """매매시장"""
    market_type = MarketType.SALE

    def __init__(self, region, stats, bidup: float, hpa_months: int = 12, strict: bool = False):
        super().__init__(region, stats, bidup, strict)
        self.hpa_months = hpa_months

    def _get_marker(self, house: House) -> Optional[HouseSaleRecord]:
        return house.sale_record

    def _set_marker(self, house: House, record: Optional[HouseSaleRecord]):
        house.sale_record = record

    def _get_other_marker(self, house: House) -> Optional[HouseSaleRecord]:
        return house.rental_record

    def btl_bid(self, household, price: float) -> Optional[HouseBuyerRecord]:
        """임대용 매수 호가"""
        return self.bid(household, price, is_buy_to_let=True)

    def house_price_appreciation(self) -> float:
        """최근 hpa_months개월 가격 상승률"""
        return self.stats.price_appreciation(self.hpa_months)

    def _accept_match(self, bid: HouseBuyerRecord, ask: HouseSaleRecord, price: float):
        # 매칭 시점에 대출 사전승인 (통계 기록은 거래 반영 시)
        buyer = self.region.population[bid.household_id]
        return buyer.arrange_mortgage(price, is_home=not bid.is_buy_to_let)

    def _complete_transaction(self, month: int, house: House, bid: HouseBuyerRecord,
                              ask: HouseSaleRecord, price: float, mortgage) -> TransactionRecord:
        buyer = self.region.population[bid.household_id]
        seller = self.region.get_owner(house.owner_id)
        buyer_snapshot = AgentSnapshot.of(buyer)
        seller_snapshot = AgentSnapshot.of(seller)

        # 매도 측 먼저 정산 (대출 상환, 퇴거) 후 소유권 이전
        seller.complete_house_sale(ask, price)
        house.owner_id = buyer.id
        buyer.complete_house_purchase(ask, price, mortgage)

        return TransactionRecord(
            month=month,
            market_type=self.market_type,
            region_id=house.region_id,
            house_id=house.id,
            quality=house.quality,
            initial_listed_price=ask.initial_price,
            t_initial_listing=ask.t_initial_listing,
            price=price,
            buyer=buyer_snapshot,
            seller=seller_snapshot,
            mortgage_down_payment=mortgage.down_payment,
            first_time_buyer_mortgage=mortgage.is_first_time_buyer,
            buy_to_let_mortgage=mortgage.is_buy_to_let,
            mortgage_principal=mortgage.principal,
        )
