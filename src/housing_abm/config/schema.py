"""Pydantic 기반 설정 스키마 - JSON 검증 및 기본값

모든 보정 상수는 로드 시점에 한 번 검증되고, 실행 중에는 읽기 전용으로 취급한다.
"""

import math

from pydantic import BaseModel, Field, model_validator


class SimulationConfig(BaseModel):
    """시뮬레이션 기본 설정"""
    name: str = "default"
    num_steps: int = Field(default=120, ge=0)
    seed: int = 42
    shuffle_households: bool = True      # 매월 가구 실행 순서 셔플
    strict_invariants: bool = False      # True면 불변조건 위반 시 예외
    check_invariants: bool = False       # 매 스텝 전수 검사
    record_micro_data: bool = True       # 거래 단위 기록
    progress_interval: int = Field(default=12, ge=1)


class RegionConfig(BaseModel):
    """지역 설정"""
    id: str
    name: str
    target_population: int = Field(default=1000, gt=0)


class HouseConfig(BaseModel):
    """주택 품질 구간"""
    n_quality: int = Field(default=20, ge=1)


class MarketConfig(BaseModel):
    """매매시장 (품질별 가격 통계, 매칭)"""
    bidup: float = Field(default=0.0075, ge=0.0)           # 경합 1명당 가격 인상률
    price_decay: float = Field(default=0.9, gt=0.0, lt=1.0)  # 거래당 평균가 EMA 감쇠
    days_on_market_decay: float = Field(default=0.9, gt=0.0, lt=1.0)  # 월별 체류일수 EMA 감쇠
    initial_days_on_market: float = Field(default=30.0, ge=0.0)
    reference_price_median: float = Field(default=175000.0, gt=0.0)
    reference_price_sigma: float = Field(default=0.6, gt=0.0)
    hpa_months: int = Field(default=12, ge=1)              # 주택가격상승률 계산 기간


class RentalConfig(BaseModel):
    """임대시장"""
    tenancy_length_average: int = Field(default=18, ge=1)   # 평균 계약 기간 (개월)
    tenancy_length_epsilon: int = Field(default=6, ge=0)
    initial_gross_yield: float = Field(default=0.05, gt=0.0)
    initial_months_on_market: float = Field(default=1.0, ge=0.0)
    months_on_market_decay: float = Field(default=0.9, gt=0.0, lt=1.0)
    yield_decay_short: float = Field(default=0.98, gt=0.0, lt=1.0)
    yield_decay_long: float = Field(default=0.9999, gt=0.0, lt=1.0)

    @model_validator(mode="after")
    def _check_tenancy(self):
        if self.tenancy_length_epsilon >= self.tenancy_length_average:
            raise ValueError("tenancy_length_epsilon must be smaller than tenancy_length_average")
        return self


class BankConfig(BaseModel):
    """은행 대출 심사"""
    theta_ftb: float = Field(default=0.1, gt=0.0, lt=1.0)    # 생애최초 최소 자기자본 비율
    theta_home: float = Field(default=0.2, gt=0.0, lt=1.0)   # 갈아타기
    theta_btl: float = Field(default=0.4, gt=0.0, lt=1.0)    # 임대용 (buy-to-let)
    phi: float = Field(default=0.01, gt=0.0)                 # 최소 소득/가격 비율
    lti: float = Field(default=4.5, gt=0.0)                  # 최대 대출/소득 배수
    mortgage_duration_years: int = Field(default=25, ge=1)
    interest_rate: float = Field(default=0.03, ge=0.0)
    stats_decay: float = Field(default=0.9, gt=0.0, lt=1.0)
    affordability_decay: float = Field(default=math.exp(-1.0 / 100.0), gt=0.0, lt=1.0)
    histogram_bins: int = Field(default=101, ge=2)


class IncomeConfig(BaseModel):
    """근로소득 모형 (연간 총소득)"""
    median_income: float = Field(default=30000.0, gt=0.0)
    income_sigma: float = Field(default=0.55, gt=0.0)
    peak_age: float = Field(default=50.0, gt=0.0)
    age_penalty: float = Field(default=0.6, ge=0.0)
    min_age_factor: float = Field(default=0.4, gt=0.0, le=1.0)


class BehaviourConfig(BaseModel):
    """가구 행동 규칙 보정 상수"""
    # 임대 투자자 (buy-to-let)
    p_investor: float = Field(default=0.04, ge=0.0, le=1.0)
    min_investor_percentile: float = Field(default=0.5, ge=0.0, lt=1.0)
    btl_portfolio_mu: float = math.log(3.44)
    btl_portfolio_sigma: float = Field(default=1.05, ge=0.0)
    btl_choice_intensity: float = Field(default=50.0, ge=0.0)
    btl_min_balance_ratio: float = Field(default=0.5, ge=0.0)   # 희망잔고 대비 최소 잔고
    btl_p_sell: float = Field(default=1.0 / (11 * 12), ge=0.0, le=1.0)
    btl_p_sell_excess: float = Field(default=0.1, ge=0.0, le=1.0)

    # 소비/저축
    consumption_fraction: float = Field(default=0.1, ge=0.0, le=1.0)
    saving_income_elasticity: float = 4.07
    saving_constant: float = -33.1
    saving_noise: float = Field(default=0.2, ge=0.0)

    # 구매 희망가
    buy_scale: float = Field(default=5.6, gt=0.0)       # 연소득 배수
    buy_weight_hpa: float = Field(default=0.08, ge=0.0)
    buy_noise: float = Field(default=0.36, ge=0.0)

    # 최초 호가
    sale_markup: float = 0.03
    sale_dom_weight: float = 0.02
    sale_noise: float = Field(default=0.05, ge=0.0)

    # 매도 결정 (자가)
    p_sell: float = Field(default=1.0 / (11 * 12), ge=0.0, le=1.0)
    p_forced_to_move: float = Field(default=0.1 / (11 * 12), ge=0.0, le=1.0)

    # 호가 인하
    p_sale_price_reduce: float = Field(default=0.055, ge=0.0, le=1.0)
    reduction_mu: float = 1.603
    reduction_sigma: float = Field(default=0.617, ge=0.0)
    max_reduction_pct: float = Field(default=50.0, gt=0.0, lt=100.0)

    # 계약금
    cash_downpayment_ratio: float = Field(default=2.0, gt=0.0)   # 잔고 > 가격*ratio면 현금구매
    downpayment_ftb_scale: float = math.log(0.1)
    downpayment_ftb_shape: float = Field(default=0.5, ge=0.0)
    downpayment_oo_scale: float = math.log(0.2)
    downpayment_oo_shape: float = Field(default=0.5, ge=0.0)
    downpayment_btl_mean: float = Field(default=0.4, ge=0.0, le=1.0)
    downpayment_btl_eps: float = Field(default=0.1, ge=0.0)

    # 임차 vs 매입
    rent_or_buy_sensitivity: float = Field(default=1.0 / 2000.0, gt=0.0)
    psychological_cost_of_renting: float = Field(default=600.0, ge=0.0)   # 연간 고정비용

    # 희망 임대료
    desired_rent_floor_income: float = Field(default=12000.0, ge=0.0)
    desired_rent_floor: float = Field(default=386.0, ge=0.0)
    desired_rent_scale: float = Field(default=11.72, gt=0.0)
    desired_rent_exponent: float = 0.372
    desired_rent_noise: float = Field(default=0.0826, ge=0.0)

    # 임대 호가
    rent_markup: float = 0.01
    rent_dom_weight: float = 0.02
    rent_noise: float = Field(default=0.05, ge=0.0)
    rent_reduction: float = Field(default=0.05, ge=0.0, lt=1.0)


class HouseholdConfig(BaseModel):
    """가구 회계"""
    return_on_financial_wealth: float = Field(default=0.002, ge=0.0)   # 월 수익률
    income_support: float = Field(default=500.0, ge=0.0)              # 월 정부 지원 기준액
    essential_consumption_fraction: float = Field(default=0.8, ge=0.0)
    bankruptcy_cash_injection: float = Field(default=1.0, ge=0.0)
    initial_balance_multiplier: float = Field(default=1.0, ge=0.0)    # 초기 잔고 = 희망잔고 * 배수


class ConstructionConfig(BaseModel):
    """건설 부문"""
    houses_per_household: float = Field(default=0.82, gt=0.0)
    max_builds_per_month: float = Field(default=0.01, gt=0.0)   # 목표 재고 대비 월 최대 착공 비율
    unsold_price_reduction: float = Field(default=0.05, ge=0.0, lt=1.0)


class DemographicsConfig(BaseModel):
    """인구 동학"""
    birth_rate: float = Field(default=0.012, ge=0.0)          # 연간 신규 가구 비율
    death_rate: float = Field(default=0.012, ge=0.0)          # 연간 기준 사망률
    death_age_scale: float = Field(default=math.sqrt(7500.0), gt=0.0)
    new_household_age_min: float = Field(default=18.0, ge=0.0)
    new_household_age_max: float = Field(default=28.0, ge=0.0)
    initial_age_min: float = Field(default=20.0, ge=0.0)
    initial_age_max: float = Field(default=75.0, ge=0.0)

    @model_validator(mode="after")
    def _check_ages(self):
        if self.new_household_age_max < self.new_household_age_min:
            raise ValueError("new_household_age_max < new_household_age_min")
        if self.initial_age_max < self.initial_age_min:
            raise ValueError("initial_age_max < initial_age_min")
        return self


class ScenarioConfig(BaseModel):
    """최상위 시나리오 설정"""
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    regions: list[RegionConfig] = Field(default_factory=lambda: [
        RegionConfig(id="r0", name="Region 0", target_population=1000),
    ])
    house: HouseConfig = Field(default_factory=HouseConfig)
    market: MarketConfig = Field(default_factory=MarketConfig)
    rental: RentalConfig = Field(default_factory=RentalConfig)
    bank: BankConfig = Field(default_factory=BankConfig)
    income: IncomeConfig = Field(default_factory=IncomeConfig)
    behaviour: BehaviourConfig = Field(default_factory=BehaviourConfig)
    household: HouseholdConfig = Field(default_factory=HouseholdConfig)
    construction: ConstructionConfig = Field(default_factory=ConstructionConfig)
    demographics: DemographicsConfig = Field(default_factory=DemographicsConfig)

    @model_validator(mode="after")
    def _check_regions(self):
        if not self.regions:
            raise ValueError("at least one region is required")
        ids = [r.id for r in self.regions]
        if len(set(ids)) != len(ids):
            raise ValueError(f"duplicate region ids: {ids}")
        return self

    @property
    def total_population(self) -> int:
        return sum(r.target_population for r in self.regions)
