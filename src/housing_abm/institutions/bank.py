"""은행 - 주택담보대출 심사 및 대출 통계

심사는 LTV / ITV / LTI / 상환여력(PDI) 네 가지 한도의 최솟값으로 결정한다.
통계는 모니터링 전용이며 심사에 영향을 주지 않는다.
"""

import logging
import math

import numpy as np

from ..core.types import MONTHS_IN_YEAR
from .payments import MortgageAgreement, monthly_payment_factor

logger = logging.getLogger(__name__)

_BALANCE_TOLERANCE = 1e-6


class Bank:
    """대출 심사"""

    def __init__(self, cfg):
        """cfg: BankConfig"""
        self.cfg = cfg
        self.n_payments = cfg.mortgage_duration_years * MONTHS_IN_YEAR
        self.reset()

    def reset(self):
        cfg = self.cfg
        bins = cfg.histogram_bins
        # 지수감쇠 히스토그램 (0~1 구간, ITV는 소득/가격 비율)
        self.ltv_distribution = np.zeros(bins, dtype=np.float64)
        self.itv_distribution = np.zeros(bins, dtype=np.float64)
        self.lti_distribution = np.zeros(bins, dtype=np.float64)
        self.ftb_affordability = 0.0
        self.n_approved = 0
        self.n_ftb_approved = 0
        self.n_btl_approved = 0
        self.total_lending = 0.0

    # === 금리/상환계수 ===

    def get_mortgage_interest_rate(self) -> float:
        return self.cfg.interest_rate

    def get_monthly_interest_rate(self) -> float:
        return self.cfg.interest_rate / MONTHS_IN_YEAR

    def get_monthly_payment_factor(self) -> float:
        return monthly_payment_factor(self.get_monthly_interest_rate(), self.n_payments)

    def loan_to_value(self, is_first_time_buyer: bool, is_home: bool) -> float:
        """최대 LTV"""
        cfg = self.cfg
        if not is_home:
            return 1.0 - cfg.theta_btl
        if is_first_time_buyer:
            return 1.0 - cfg.theta_ftb
        return 1.0 - cfg.theta_home

    # === 심사 ===

    def get_max_mortgage(self, household, is_home: bool) -> float:
        """대출 가능 최대 주택가격 (부작용 없음)

        Returns:
            원 단위 이하 절사한 최대 구매 가능 가격
        """
        ltv = self.loan_to_value(household.is_first_time_buyer, is_home)
        balance = household.bank_balance
        annual_income = household.get_annual_gross_total_income()
        pdi = max(0.0, household.get_monthly_discretionary_income())
        k = self.get_monthly_payment_factor()

        ltv_max = balance / (1.0 - ltv)
        itv_max = annual_income / self.cfg.phi
        pdi_max = balance + (pdi / k if k > 0 else 0.0)
        lti_max = annual_income * self.cfg.lti / ltv
        max_price = min(ltv_max, itv_max, pdi_max, lti_max)
        return max(math.floor(max_price * 100.0) / 100.0, 0.0)

    def request_loan(self, household, price: float, down_payment: float,
                     is_home: bool, record: bool = True):
        """대출 신청

        Args:
            household: 차입 가구
            price: 주택 가격
            down_payment: 가구가 희망하는 계약금
            is_home: 자가 거주용 여부 (False면 임대용)
            record: True면 승인 시 통계 기록

        Returns:
            MortgageAgreement 또는 None (심사 거절)
        """
        annual_income = household.get_annual_gross_total_income()
        if price > annual_income / self.cfg.phi:
            logger.debug("Loan refused (ITV): household %s price %.0f income %.0f",
                         household.id, price, annual_income)
            return None

        ltv = self.loan_to_value(household.is_first_time_buyer, is_home)
        pdi = max(0.0, household.get_monthly_discretionary_income())
        k = self.get_monthly_payment_factor()

        principal = min(
            price - max(down_payment, 0.0),
            price * ltv,
            pdi / k if k > 0 else 0.0,
            annual_income * self.cfg.lti,
        )
        principal = max(principal, 0.0)
        required_down_payment = price - principal
        if household.bank_balance < required_down_payment - _BALANCE_TOLERANCE:
            logger.debug("Loan refused (deposit): household %s needs %.0f has %.0f",
                         household.id, required_down_payment, household.bank_balance)
            return None
        if required_down_payment > household.bank_balance:
            # 부동소수 오차 범위
            required_down_payment = household.bank_balance
            principal = price - required_down_payment

        n_payments = self.n_payments if principal > 0 else 0
        mortgage = MortgageAgreement(
            monthly_payment=principal * k if principal > 0 else 0.0,
            n_payments=n_payments,
            principal=principal,
            monthly_interest_rate=self.get_monthly_interest_rate(),
            down_payment=required_down_payment,
            purchase_price=price,
            is_first_time_buyer=household.is_first_time_buyer,
            is_buy_to_let=not is_home,
        )
        if record:
            self.record_loan(household, mortgage)
        return mortgage

    # === 통계 ===

    def _add_to_histogram(self, hist: np.ndarray, value: float):
        decay = self.cfg.stats_decay
        idx = int(min(max(value, 0.0), 1.0) * (len(hist) - 1))
        hist *= decay
        hist[idx] += 1.0 - decay

    def record_loan(self, household, mortgage: MortgageAgreement):
        """승인 대출 통계 기록"""
        self.n_approved += 1
        self.total_lending += mortgage.principal
        if mortgage.is_buy_to_let:
            self.n_btl_approved += 1
        if mortgage.is_first_time_buyer:
            self.n_ftb_approved += 1
            monthly_income = household.get_monthly_gross_employment_income()
            if monthly_income > 0:
                decay = self.cfg.affordability_decay
                self.ftb_affordability = (decay * self.ftb_affordability
                                          + (1.0 - decay) * mortgage.monthly_payment / monthly_income)

        price = mortgage.purchase_price
        annual_income = household.get_annual_gross_employment_income()
        if price > 0:
            self._add_to_histogram(self.ltv_distribution, mortgage.principal / price)
            self._add_to_histogram(self.itv_distribution, annual_income / price)
        if annual_income > 0:
            # LTI는 최대 배수 기준 정규화
            self._add_to_histogram(self.lti_distribution,
                                   mortgage.principal / annual_income / self.cfg.lti)

    def get_stats(self) -> dict:
        bins = np.linspace(0.0, 1.0, self.cfg.histogram_bins)
        ltv_mass = self.ltv_distribution.sum()
        mean_ltv = float((bins * self.ltv_distribution).sum() / ltv_mass) if ltv_mass > 0 else 0.0
        return {
            'n_approved': self.n_approved,
            'n_ftb_approved': self.n_ftb_approved,
            'n_btl_approved': self.n_btl_approved,
            'total_lending': self.total_lending,
            'ftb_affordability': self.ftb_affordability,
            'mean_ltv': mean_ltv,
        }
