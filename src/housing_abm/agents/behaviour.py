"""가구 행동 규칙 - 소비, 호가, 매도/매수, 임차 결정

생성 시 한 번 뽑는 값(투자자 여부, 목표 임대주택 수, 계약금 성향)을 빼면 상태가 없다.
모든 결정은 가구가 넘겨준 값과 자체 난수만 사용한다.
"""

import math

import numpy as np

from ..core.types import MONTHS_IN_YEAR, DAYS_IN_MONTH


def _logistic(x: float) -> float:
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    e = math.exp(x)
    return e / (1.0 + e)


class HouseholdBehaviour:
    """가구 의사결정

    Args:
        cfg: BehaviourConfig
        rng: 가구 공용 난수 생성기
        income_percentile: 가구 소득 분위 (0~1)
    """

    def __init__(self, cfg, rng: np.random.Generator, income_percentile: float):
        self.cfg = cfg
        self.rng = rng

        # 임대 투자자 성향 (상위 분위에서만)
        self.is_investor = False
        self.desired_btl_properties = 0
        if income_percentile > cfg.min_investor_percentile:
            p = cfg.p_investor / (1.0 - cfg.min_investor_percentile)
            if rng.random() < p:
                self.is_investor = True
                size = rng.lognormal(cfg.btl_portfolio_mu, cfg.btl_portfolio_sigma)
                self.desired_btl_properties = max(int(size), 1)

        # 계약금 성향 (표준정규)
        self.downpayment_propensity = float(rng.standard_normal())

    # === 소비/저축 ===

    def desired_bank_balance(self, annual_income: float) -> float:
        """소득으로 정해지는 목표 잔고"""
        if annual_income <= 0:
            return 0.0
        cfg = self.cfg
        log_balance = (cfg.saving_income_elasticity * math.log(annual_income) + cfg.saving_constant
                       + cfg.saving_noise * self.rng.standard_normal())
        return math.exp(min(log_balance, 50.0))

    def desired_consumption(self, bank_balance: float, annual_income: float) -> float:
        """목표 잔고 초과분의 일정 비율 소비"""
        excess = bank_balance - self.desired_bank_balance(annual_income)
        return self.cfg.consumption_fraction * max(excess, 0.0)

    # === 매수 ===

    def desired_purchase_price(self, monthly_income: float, hpa: float) -> float:
        """희망 구매가 - 소득 배수, 가격상승 기대 반영"""
        cfg = self.cfg
        denominator = max(1.0 - cfg.buy_weight_hpa * hpa, 0.1)
        noise = math.exp(cfg.buy_noise * self.rng.standard_normal())
        return cfg.buy_scale * MONTHS_IN_YEAR * monthly_income * noise / denominator

    def decide_down_payment(self, bank_balance: float, price: float,
                            is_first_time_buyer: bool) -> float:
        """계약금 결정 (잔고 한도)"""
        cfg = self.cfg
        if bank_balance > price * cfg.cash_downpayment_ratio:
            return price
        z = self.downpayment_propensity
        if self.is_investor and not is_first_time_buyer:
            fraction = max(cfg.downpayment_btl_mean + cfg.downpayment_btl_eps * z, 0.0)
        elif is_first_time_buyer:
            fraction = math.exp(cfg.downpayment_ftb_scale + cfg.downpayment_ftb_shape * z)
        else:
            fraction = math.exp(cfg.downpayment_oo_scale + cfg.downpayment_oo_shape * z)
        down_payment = min(fraction, 1.0) * price
        return min(down_payment, max(bank_balance, 0.0))

    def decide_rent_or_purchase(self, purchase_price: float, annual_rent: float,
                                ltv: float, interest_rate: float, hpa: float) -> bool:
        """매입(True) vs 임차(False)

        연간 보유비용 = 가격*(LTV*금리 - 가격상승률), 임차비용 = 연 임대료 + 심리적 비용
        """
        cfg = self.cfg
        cost_of_house = purchase_price * (ltv * interest_rate - hpa)
        cost_of_renting = annual_rent + cfg.psychological_cost_of_renting
        p = _logistic(cfg.rent_or_buy_sensitivity * (cost_of_renting - cost_of_house))
        return self.rng.random() < p

    # === 매도 ===

    def initial_sale_price(self, average_price: float, average_days_on_market: float,
                           principal: float) -> float:
        """최초 호가 (대출 잔액 이상)"""
        cfg = self.cfg
        log_price = (cfg.sale_markup + math.log(average_price)
                     - cfg.sale_dom_weight * math.log((average_days_on_market + 1.0) / (DAYS_IN_MONTH + 1.0))
                     + cfg.sale_noise * self.rng.standard_normal())
        return max(math.exp(log_price), principal)

    def decide_to_sell_home(self, potential_quality_change: float) -> bool:
        """이사 목적 매도 - 더 좋은 집을 살 수 있을수록 확률 증가"""
        cfg = self.cfg
        p = cfg.p_forced_to_move + (cfg.p_sell - cfg.p_forced_to_move) / (
            1.0 + math.exp(5.0 - 2.0 * potential_quality_change))
        return self.rng.random() < p

    def rethink_house_sale_price(self, price: float) -> float:
        """미판매 매물 호가 재검토 - 확률적으로 인하, 인상은 없음"""
        cfg = self.cfg
        if self.rng.random() >= cfg.p_sale_price_reduce:
            return price
        pct = math.exp(cfg.reduction_mu + cfg.reduction_sigma * self.rng.standard_normal())
        pct = min(pct, cfg.max_reduction_pct)
        return price * (1.0 - pct / 100.0)

    # === 임차 ===

    def desired_rent(self, monthly_income: float) -> float:
        cfg = self.cfg
        annual_income = monthly_income * MONTHS_IN_YEAR
        if annual_income < cfg.desired_rent_floor_income:
            rent = cfg.desired_rent_floor
        else:
            rent = cfg.desired_rent_scale * annual_income ** cfg.desired_rent_exponent
        return rent * math.exp(cfg.desired_rent_noise * self.rng.standard_normal())

    # === 임대 투자 ===

    def buy_to_let_rent(self, average_rent: float, average_days_on_market: float) -> float:
        """임대 호가"""
        cfg = self.cfg
        log_rent = (cfg.rent_markup + math.log(average_rent)
                    - cfg.rent_dom_weight * math.log((average_days_on_market + 1.0) / (DAYS_IN_MONTH + 1.0))
                    + cfg.rent_noise * self.rng.standard_normal())
        return math.exp(log_rent)

    def rethink_buy_to_let_rent(self, price: float) -> float:
        return price * (1.0 - self.cfg.rent_reduction)

    def decide_to_sell_investment_property(self, n_investment_properties: int,
                                           yield_trend: float) -> bool:
        """보유 초과 시 높은 확률로, 아니면 수익률이 하락할수록 매도"""
        cfg = self.cfg
        if n_investment_properties > self.desired_btl_properties:
            return self.rng.random() < cfg.btl_p_sell_excess
        p = 2.0 * cfg.btl_p_sell * _logistic(-cfg.btl_choice_intensity * yield_trend)
        return self.rng.random() < p

    def decide_to_buy_investment_property(self, n_investment_properties: int, bank_balance: float,
                                          desired_balance: float, yield_trend: float) -> bool:
        """목표 보유 수 미달 + 잔고 여유 시, 수익률이 오를수록 매수"""
        if not self.is_investor or n_investment_properties >= self.desired_btl_properties:
            return False
        if bank_balance < self.cfg.btl_min_balance_ratio * desired_balance:
            return False
        p = _logistic(self.cfg.btl_choice_intensity * yield_trend)
        return self.rng.random() < p
