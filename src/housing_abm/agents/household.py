"""가구 에이전트 - 월간 회계, 주택 관리, 매매/임대 계약 처리

가구는 주택을 ID로만 참조하고, 지역(시장/저장소)/은행/난수는 생성 시 주입받는다.
payments: 주택 ID → 계약 (보유 주택은 주택담보대출, 임차 주택은 임대차 계약)
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from ..core.errors import report_violation
from ..core.types import NOBODY, MONTHS_IN_YEAR, PaymentKind, TenureState
from ..housing.house import House
from ..institutions.payments import PaymentAgreement, MortgageAgreement, RentalAgreement
from .behaviour import HouseholdBehaviour

logger = logging.getLogger(__name__)


class Household:
    """가구

    Args:
        household_id: 고유 ID (1부터)
        age: 가구주 나이
        region: 소속 지역
        bank: 대출 은행
        income_model: 근로소득 모형
        cfg: HouseholdConfig
        behaviour_cfg: BehaviourConfig
        rng: 공용 난수 생성기
        income_percentile: 소득 분위 (None이면 균등분포에서 추출)
    """

    def __init__(self, household_id: int, age: float, region, bank, income_model,
                 cfg, behaviour_cfg, rng: np.random.Generator,
                 income_percentile: Optional[float] = None):
        self.id = household_id
        self.age = age
        self.region = region
        self.bank = bank
        self.income_model = income_model
        self.cfg = cfg
        self.rng = rng

        if income_percentile is None:
            income_percentile = float(rng.random())
        self.income_percentile = income_percentile
        self.behaviour = HouseholdBehaviour(behaviour_cfg, rng, income_percentile)

        self.home_id = NOBODY
        self.payments: dict[int, PaymentAgreement] = {}
        self.outstanding_debts: list[MortgageAgreement] = []   # 매각 후 남은 대출
        self.monthly_gross_rental_income = 0.0
        self.is_first_time_buyer = True
        self.is_bankrupt = False

        self.annual_gross_employment_income = income_model.annual_gross_income(age, income_percentile)
        self.bank_balance = (self.behaviour.desired_bank_balance(self.annual_gross_employment_income)
                             * cfg.initial_balance_multiplier)

    # === 상태 조회 ===

    @property
    def houses(self):
        return self.region.houses

    @property
    def home(self) -> House | None:
        if self.home_id == NOBODY:
            return None
        return self.houses[self.home_id]

    @property
    def is_in_social_housing(self) -> bool:
        return self.home_id == NOBODY

    @property
    def is_homeowner(self) -> bool:
        return self.home_id != NOBODY and self.houses[self.home_id].owner_id == self.id

    @property
    def is_renting(self) -> bool:
        return self.home_id != NOBODY and self.houses[self.home_id].owner_id != self.id

    @property
    def tenure(self) -> TenureState:
        if self.is_in_social_housing:
            return TenureState.SOCIAL_HOUSING
        if self.is_renting:
            return TenureState.RENTING
        if self.n_investment_properties > 0:
            return TenureState.OWNER_INVESTOR
        return TenureState.OWNER_OCCUPIER

    def get_age(self) -> float:
        return self.age

    def owned_house_ids(self) -> list[int]:
        return sorted(hid for hid, a in self.payments.items() if a.kind == PaymentKind.MORTGAGE)

    def owned_houses(self) -> list[House]:
        return [self.houses[hid] for hid in self.owned_house_ids()]

    @property
    def n_investment_properties(self) -> int:
        return sum(1 for hid in self.owned_house_ids() if hid != self.home_id)

    def mortgage_for(self, house: House) -> MortgageAgreement | None:
        agreement = self.payments.get(house.id)
        if agreement is None or agreement.kind != PaymentKind.MORTGAGE:
            return None
        return agreement

    def rental_agreement(self) -> RentalAgreement | None:
        if not self.is_renting:
            return None
        return self.payments.get(self.home_id)

    # === 소득/지출 ===

    def get_monthly_gross_employment_income(self) -> float:
        return self.annual_gross_employment_income / MONTHS_IN_YEAR

    def get_annual_gross_employment_income(self) -> float:
        return self.annual_gross_employment_income

    def get_monthly_gross_total_income(self) -> float:
        """근로소득 + 임대소득 + 금융자산 수익"""
        return (self.get_monthly_gross_employment_income()
                + self.monthly_gross_rental_income
                + max(self.bank_balance, 0.0) * self.cfg.return_on_financial_wealth)

    def get_annual_gross_total_income(self) -> float:
        return self.get_monthly_gross_total_income() * MONTHS_IN_YEAR

    def get_essential_consumption(self) -> float:
        return self.cfg.essential_consumption_fraction * self.cfg.income_support

    def get_monthly_payments(self) -> float:
        """현재 계약상 월 지급액 합계 (상태 변경 없음)"""
        total = sum(a.monthly_payment for a in self.payments.values() if not a.is_mature)
        total += sum(d.monthly_payment for d in self.outstanding_debts if not d.is_mature)
        return total

    def get_monthly_discretionary_income(self) -> float:
        """필수소비와 기존 지급 의무를 뺀 월 가처분소득"""
        return (self.get_monthly_gross_total_income()
                - self.get_essential_consumption()
                - self.get_monthly_payments())

    def _update_income(self):
        self.annual_gross_employment_income = self.income_model.annual_gross_income(
            self.age, self.income_percentile)

    def _monthly_cash_flow(self) -> float:
        """이번 달 순현금흐름 (계약 지급 실행)"""
        flow = self.get_monthly_gross_total_income() - self.get_essential_consumption()
        for house_id in sorted(self.payments):
            flow -= self.payments[house_id].make_monthly_payment()
        for debt in self.outstanding_debts:
            flow -= debt.make_monthly_payment()
        self.outstanding_debts = [d for d in self.outstanding_debts if not d.is_mature]
        return flow

    # === 월간 스텝 ===

    def step(self):
        """한 달 진행

        1) 소득/지급  2) 소비  3) 파산 처리  4) 보유 주택 관리  5) 주거 상태별 입찰
        """
        self.is_bankrupt = False
        self.age += 1.0 / MONTHS_IN_YEAR
        self._update_income()

        self.bank_balance += self._monthly_cash_flow()
        self.bank_balance -= self.behaviour.desired_consumption(
            self.bank_balance, self.get_annual_gross_total_income())
        if self.bank_balance < 0.0:
            logger.debug("Household %s bankrupt (balance %.2f)", self.id, self.bank_balance)
            self.bank_balance = self.cfg.bankruptcy_cash_injection
            self.is_bankrupt = True

        for house in self.owned_houses():
            self.manage_house(house)

        if self.is_in_social_housing:
            self.bid_for_a_home()
        elif self.is_renting:
            agreement = self.payments[self.home_id]
            if agreement.is_mature:
                self.end_tenancy()
                self.bid_for_a_home()
        elif self.behaviour.is_investor:
            self._consider_buy_to_let()

    def _consider_buy_to_let(self):
        desired_balance = self.behaviour.desired_bank_balance(self.get_annual_gross_total_income())
        if self.behaviour.decide_to_buy_investment_property(
                self.n_investment_properties, self.bank_balance, desired_balance,
                self.region.rental_market.yield_trend()):
            self.region.sale_market.btl_bid(self, self.bank.get_max_mortgage(self, False))

    # === 보유 주택 관리 ===

    def manage_house(self, house: House):
        """보유 주택 1채 월간 관리 (호가 재조정, 매도/임대 결정)"""
        sale_market = self.region.sale_market
        rental_market = self.region.rental_market

        record = house.sale_record
        if record is not None:
            new_price = self.behaviour.rethink_house_sale_price(record.price)
            if new_price == record.price:
                return
            mortgage = self.mortgage_for(house)
            principal = mortgage.principal if mortgage is not None else 0.0
            if new_price > principal:
                sale_market.update_offer(record, new_price)
            else:
                # 대출 잔액 이하로는 팔지 않음 → 철회 후 임대 전환
                sale_market.remove_offer(record)
                if house.id != self.home_id and house.is_vacant:
                    self._offer_for_rent(house)
            return

        if self.decide_to_sell_house(house):
            if house.rental_record is not None:
                rental_market.remove_offer(house.rental_record)
            self.put_house_for_sale(house)
        elif house.rental_record is not None:
            rental_market.update_offer(
                house.rental_record,
                self.behaviour.rethink_buy_to_let_rent(house.rental_record.price))
        elif house.id != self.home_id and house.is_vacant:
            self._offer_for_rent(house)

    def decide_to_sell_house(self, house: House) -> bool:
        if house.id == self.home_id:
            max_price = self.bank.get_max_mortgage(self, True)
            best_quality = self.region.sale_market.max_quality_given_price(max_price)
            return self.behaviour.decide_to_sell_home(best_quality - house.quality)
        return self.behaviour.decide_to_sell_investment_property(
            self.n_investment_properties, self.region.rental_market.yield_trend())

    def put_house_for_sale(self, house: House):
        sale_market = self.region.sale_market
        mortgage = self.mortgage_for(house)
        principal = mortgage.principal if mortgage is not None else 0.0
        price = self.behaviour.initial_sale_price(
            sale_market.get_average_price(house.quality),
            sale_market.get_average_days_on_market(house.quality),
            principal)
        sale_market.offer(house, price)

    def _offer_for_rent(self, house: House):
        rental_market = self.region.rental_market
        rent = self.behaviour.buy_to_let_rent(
            rental_market.get_average_price(house.quality),
            rental_market.get_average_days_on_market(house.quality))
        rental_market.offer(house, rent)

    # === 입찰 ===

    def bid_for_a_home(self):
        """자가 매입 또는 임차 입찰 (둘 중 하나만)"""
        sale_market = self.region.sale_market
        rental_market = self.region.rental_market
        monthly_income = self.get_monthly_gross_employment_income()
        hpa = sale_market.house_price_appreciation()

        price = min(self.behaviour.desired_purchase_price(monthly_income, hpa),
                    self.bank.get_max_mortgage(self, True))
        quality = sale_market.max_quality_given_price(price)
        if quality >= 0:
            annual_rent = rental_market.get_average_price(quality) * MONTHS_IN_YEAR
            ltv = self.bank.loan_to_value(self.is_first_time_buyer, True)
            if self.behaviour.decide_rent_or_purchase(
                    price, annual_rent, ltv, self.bank.get_mortgage_interest_rate(), hpa):
                sale_market.bid(self, price)
                return
        rental_market.bid(self, self.behaviour.desired_rent(monthly_income))

    def arrange_mortgage(self, price: float, is_home: bool) -> MortgageAgreement | None:
        """매칭 시점 대출 사전승인 (은행 통계 기록 없음)"""
        down_payment = self.behaviour.decide_down_payment(self.bank_balance, price, self.is_first_time_buyer)
        return self.bank.request_loan(self, price, down_payment, is_home, record=False)

    # === 매매 ===

    def complete_house_purchase(self, record, price: float, mortgage: MortgageAgreement):
        """매입 완료 (소유권은 시장이 이전)"""
        house = self.houses[record.house_id]
        if self.is_renting:
            self.end_tenancy()
        if mortgage is None:
            report_violation(f"household {self.id} bought house {house.id} without financing",
                             self.region.strict)
            mortgage = MortgageAgreement.null(price)
        self.bank_balance -= mortgage.down_payment
        self.payments[house.id] = mortgage
        self.bank.record_loan(self, mortgage)

        if self.home_id == NOBODY:
            self._move_in(house)
        elif house.is_vacant:
            self._offer_for_rent(house)
        self.is_first_time_buyer = False

    def complete_house_sale(self, record, price: float):
        """매도 완료 - 대금 수령, 대출 상환, 퇴거 처리"""
        house = self.houses[record.house_id]
        self.bank_balance += price
        agreement = self.payments.pop(house.id, None)
        if agreement is None or agreement.kind != PaymentKind.MORTGAGE:
            report_violation(f"household {self.id} sold house {house.id} it holds no mortgage for",
                             self.region.strict)
        else:
            self.bank_balance -= agreement.payoff(self.bank_balance)
            if agreement.principal > 0.0:
                logger.warning("Household %s sold house %s with %.2f debt outstanding",
                               self.id, house.id, agreement.principal)
                self.outstanding_debts.append(agreement)

        if house.rental_record is not None:
            self.region.rental_market.remove_offer(house.rental_record)

        if house.id == self.home_id:
            house.resident_id = NOBODY
            self.home_id = NOBODY
        elif house.resident_id != NOBODY:
            tenant = self.region.population[house.resident_id]
            lease = tenant.payments.get(house.id)
            if lease is not None:
                self.monthly_gross_rental_income -= lease.monthly_payment
            tenant.get_evicted()

    # === 임대차 ===

    def complete_house_rental(self, record, agreement: RentalAgreement):
        """임차 계약 체결 (세입자 측)"""
        house = self.houses[record.house_id]
        if self.home_id != NOBODY:
            report_violation(f"household {self.id} rented house {house.id} while housed", self.region.strict)
        if house.resident_id != NOBODY:
            report_violation(f"house {house.id} let while occupied by {house.resident_id}", self.region.strict)
        if house.owner_id != self.id:
            self.payments[house.id] = agreement
        self._move_in(house)

    def complete_house_let(self, record, price: float):
        """임대 완료 (임대인 측)"""
        house = self.houses[record.house_id]
        if house.sale_record is not None:
            self.region.sale_market.remove_offer(house.sale_record)
        self.monthly_gross_rental_income += price

    def end_of_letting_agreement(self, house: House, agreement: PaymentAgreement):
        """세입자 퇴거 통보 (임대인 측) - 다른 시장에 없으면 재임대"""
        self.monthly_gross_rental_income -= agreement.monthly_payment
        if house.owner_id != self.id:
            report_violation(f"household {self.id} notified about house {house.id} it does not own",
                             self.region.strict)
            return
        if not house.is_on_any_market:
            self._offer_for_rent(house)

    def end_tenancy(self):
        """임차 종료 - 임대인 통보, 계약 삭제, 퇴거"""
        house = self.houses[self.home_id]
        agreement = self.payments.pop(house.id)
        landlord = self.region.get_owner(house.owner_id)
        landlord.end_of_letting_agreement(house, agreement)
        house.resident_id = NOBODY
        self.home_id = NOBODY

    def get_evicted(self):
        """강제 퇴거 (임대인 통보 없음)"""
        if not self.is_renting:
            report_violation(f"household {self.id} evicted while not renting", self.region.strict)
            return
        house = self.houses[self.home_id]
        self.payments.pop(house.id, None)
        house.resident_id = NOBODY
        self.home_id = NOBODY

    def _move_in(self, house: House):
        house.resident_id = self.id
        self.home_id = house.id

    # === 상속 ===

    def transfer_all_wealth_to(self, beneficiary: Household):
        """사망 시 전 재산 이전

        보유 주택은 매물 철회/세입자 퇴거 후 상속, 임차 주택은 임대인에 통보,
        대출은 전액 상환하고 남은 잔고(양수분)를 상속인에게 이전한다.
        """
        if beneficiary is self:
            report_violation(f"household {self.id} bequeathing to itself", self.region.strict)
            return
        self.region.withdraw_bids(self.id)

        # 자가 주택 먼저 (상속인이 무주택이면 입주)
        house_ids = sorted(self.payments, key=lambda hid: (hid != self.home_id, hid))
        for house_id in house_ids:
            house = self.houses[house_id]
            agreement = self.payments[house_id]
            if house_id == self.home_id:
                house.resident_id = NOBODY
                self.home_id = NOBODY
            if house.owner_id == self.id:
                if house.sale_record is not None:
                    self.region.sale_market.remove_offer(house.sale_record)
                if house.rental_record is not None:
                    self.region.rental_market.remove_offer(house.rental_record)
                if house.resident_id != NOBODY:
                    self.region.population[house.resident_id].get_evicted()
                beneficiary.inherit_house(house)
            else:
                self.region.get_owner(house.owner_id).end_of_letting_agreement(house, agreement)
            if agreement.kind == PaymentKind.MORTGAGE:
                self.bank_balance -= agreement.payoff()
        self.payments.clear()
        for debt in self.outstanding_debts:
            self.bank_balance -= debt.payoff()
        self.outstanding_debts.clear()

        beneficiary.bank_balance += max(0.0, self.bank_balance)
        self.bank_balance = 0.0
        self.monthly_gross_rental_income = 0.0

    def inherit_house(self, house: House):
        """상속 주택 인수 - 무주택이면 입주, 아니면 투자 성향에 따라 임대/매도"""
        self.payments[house.id] = MortgageAgreement.null()
        house.owner_id = self.id
        if house.resident_id != NOBODY:
            report_violation(f"inherited house {house.id} still occupied by {house.resident_id}",
                             self.region.strict)
            return
        if not self.is_homeowner:
            if self.is_renting:
                self.end_tenancy()
            self._move_in(house)
        elif self.behaviour.is_investor:
            if self.decide_to_sell_house(house):
                self.put_house_for_sale(house)
            else:
                self._offer_for_rent(house)
        else:
            self.put_house_for_sale(house)

    def __repr__(self):
        return (f"Household(id={self.id}, age={self.age:.1f}, tenure={self.tenure.name}, "
                f"balance={self.bank_balance:.0f})")
