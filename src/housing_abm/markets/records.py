"""주문장 레코드 - 매도 호가, 매수 호가, 거래 기록"""

from dataclasses import dataclass, asdict
from typing import Optional

from ..core.types import MarketType, CONSTRUCTION_ID


@dataclass(eq=False)
class HouseSaleRecord:
    """매도(임대) 호가 - 주택 한 채당 시장별 최대 1건"""
    house_id: int
    quality: int
    seller_id: int
    initial_price: float
    price: float
    t_initial_listing: int

    def months_on_market(self, month: int) -> int:
        """등록 월 포함 경과 개월"""
        return month - self.t_initial_listing + 1


@dataclass(eq=False)
class HouseBuyerRecord:
    """매수(임차) 호가 - 가구당 스텝별 최대 1건"""
    household_id: int
    price: float
    is_buy_to_let: bool = False


@dataclass
class AgentSnapshot:
    """거래 시점 가구 재무 상태"""
    id: int = CONSTRUCTION_ID
    is_investor: bool = False
    monthly_gross_income: float = 0.0
    monthly_employment_income: float = 0.0
    bank_balance: float = 0.0

    @classmethod
    def of(cls, agent) -> 'AgentSnapshot':
        if agent is None or agent.id == CONSTRUCTION_ID:
            return cls()
        return cls(
            id=agent.id,
            is_investor=agent.behaviour.is_investor,
            monthly_gross_income=agent.get_monthly_gross_total_income(),
            monthly_employment_income=agent.get_monthly_gross_employment_income(),
            bank_balance=agent.bank_balance,
        )


@dataclass
class TransactionRecord:
    """완료된 거래 (마이크로데이터 한 줄)"""
    month: int
    market_type: MarketType
    region_id: int
    house_id: int
    quality: int
    initial_listed_price: float
    t_initial_listing: int
    price: float
    buyer: AgentSnapshot
    seller: AgentSnapshot
    mortgage_down_payment: float = 0.0
    first_time_buyer_mortgage: bool = False
    buy_to_let_mortgage: bool = False
    mortgage_principal: Optional[float] = None

    # CSV 헤더 (export_transactions_csv)
    CSV_HEADER = (
        "Timestamp", "transactionType", "houseId", "houseQuality", "initialListedPrice",
        "timeFirstOffered", "transactionPrice", "buyerId", "buyerHasBTLGene",
        "buyerMonthlyPreTaxIncome", "buyerMonthlyEmploymentIncome", "buyerBankBalance",
        "mortgageDownpayment", "firstTimeBuyerMortgage", "buyToLetMortgage",
        "sellerId", "sellerHasBTLGene", "sellerMonthlyPreTaxIncome",
        "sellerMonthlyEmploymentIncome", "sellerBankBalance",
    )

    def to_row(self) -> list:
        seller_id = -1 if self.seller.id == CONSTRUCTION_ID else self.seller.id
        return [
            self.month,
            "sale" if self.market_type == MarketType.SALE else "rental",
            self.house_id,
            self.quality,
            self.initial_listed_price,
            self.t_initial_listing,
            self.price,
            self.buyer.id,
            str(self.buyer.is_investor).lower(),
            self.buyer.monthly_gross_income,
            self.buyer.monthly_employment_income,
            self.buyer.bank_balance,
            self.mortgage_down_payment,
            str(self.first_time_buyer_mortgage).lower(),
            str(self.buy_to_let_mortgage).lower(),
            seller_id,
            str(self.seller.is_investor).lower(),
            self.seller.monthly_gross_income,
            self.seller.monthly_employment_income,
            self.seller.bank_balance,
        ]

    def to_dict(self) -> dict:
        d = asdict(self)
        d['market_type'] = self.market_type.name.lower()
        return d
