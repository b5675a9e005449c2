"""정기 지급 계약 - 주택담보대출, 임대차 계약"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar

import numpy as np

from ..core.types import PaymentKind, NOBODY


def monthly_payment_factor(monthly_rate: float, n_payments: int) -> float:
    """원리금 균등상환 계수 k (월 상환액 = 원금 * k)"""
    if n_payments <= 0:
        return 0.0
    if monthly_rate == 0.0:
        return 1.0 / n_payments
    return monthly_rate / (1.0 - (1.0 + monthly_rate) ** (-n_payments))


@dataclass
class PaymentAgreement:
    """정기 지급 계약 (남은 횟수가 0이면 만기)"""
    kind: ClassVar[PaymentKind]

    monthly_payment: float = 0.0
    n_payments: int = 0

    @property
    def is_mature(self) -> bool:
        return self.n_payments <= 0

    def make_monthly_payment(self) -> float:
        """한 달치 지급. 만기 후에는 0 반환 (횟수는 음수가 되지 않음)"""
        if self.n_payments <= 0:
            return 0.0
        self.n_payments -= 1
        return self.monthly_payment


@dataclass
class RentalAgreement(PaymentAgreement):
    """임대차 계약"""
    kind: ClassVar[PaymentKind] = PaymentKind.RENTAL

    landlord_id: int = NOBODY

    @classmethod
    def draw(cls, monthly_rent: float, average_length: int, epsilon: int,
             rng: np.random.Generator, landlord_id: int = NOBODY) -> RentalAgreement:
        """계약 기간 = 평균 + U{-eps..eps}"""
        n = average_length + int(rng.integers(-epsilon, epsilon + 1))
        return cls(monthly_payment=monthly_rent, n_payments=max(n, 1), landlord_id=landlord_id)


@dataclass
class MortgageAgreement(PaymentAgreement):
    """주택담보대출 (원리금 균등상환)"""
    kind: ClassVar[PaymentKind] = PaymentKind.MORTGAGE

    principal: float = 0.0
    monthly_interest_rate: float = 0.0
    down_payment: float = 0.0
    purchase_price: float = 0.0
    is_first_time_buyer: bool = False
    is_buy_to_let: bool = False

    @classmethod
    def null(cls, purchase_price: float = 0.0) -> MortgageAgreement:
        """원금 0 계약 (상속, 현금 구매)"""
        return cls(purchase_price=purchase_price, down_payment=purchase_price)

    @property
    def loan_to_value(self) -> float:
        if self.purchase_price <= 0:
            return 0.0
        return self.principal / self.purchase_price

    def make_monthly_payment(self) -> float:
        if self.n_payments <= 0:
            return 0.0
        interest = self.principal * self.monthly_interest_rate
        self.principal = max(self.principal - (self.monthly_payment - interest), 0.0)
        self.n_payments -= 1
        if self.n_payments == 0:
            self.principal = 0.0
        return self.monthly_payment

    def payoff(self, available: float = math.inf) -> float:
        """잔여 원금 상환

        Args:
            available: 상환에 쓸 수 있는 금액 (기본: 제한 없음)

        Returns:
            실제 상환액. 전액 상환 시 계약 종료, 일부 상환 시 잔액 재분할.
        """
        if self.principal <= 0.0:
            self.principal = 0.0
            self.n_payments = 0
            self.monthly_payment = 0.0
            return 0.0
        if available >= self.principal:
            paid = self.principal
            self.principal = 0.0
            self.n_payments = 0
            self.monthly_payment = 0.0
            return paid
        paid = max(available, 0.0)
        self.principal -= paid
        self.monthly_payment = self.principal * monthly_payment_factor(
            self.monthly_interest_rate, self.n_payments)
        return paid
