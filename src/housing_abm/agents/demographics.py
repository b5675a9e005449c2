"""인구 동학 - 신규 가구 형성, 연령별 사망, 상속"""

import logging
from typing import Optional

import numpy as np

from ..core.events import HOUSEHOLD_BORN, HOUSEHOLD_DIED
from ..core.types import MONTHS_IN_YEAR
from .household import Household

logger = logging.getLogger(__name__)


class Demographics:
    """출생(신규 가구)과 사망 처리

    Args:
        config: ScenarioConfig
        population: 전체 가구 저장소
        bank: 은행
        income_model: 근로소득 모형
        rng: 공용 난수 생성기
        event_bus: 이벤트 버스
    """

    def __init__(self, config, population, bank, income_model, rng: np.random.Generator, event_bus):
        self.config = config
        self.cfg = config.demographics
        self.population = population
        self.bank = bank
        self.income_model = income_model
        self.rng = rng
        self.event_bus = event_bus
        self.births_this_month = 0
        self.deaths_this_month = 0

    def create_household(self, region, age: float, income_percentile: Optional[float] = None) -> Household:
        """가구 생성 및 등록"""
        household = Household(
            household_id=self.population.next_id(),
            age=age,
            region=region,
            bank=self.bank,
            income_model=self.income_model,
            cfg=self.config.household,
            behaviour_cfg=self.config.behaviour,
            rng=self.rng,
            income_percentile=income_percentile,
        )
        self.population.add(household)
        region.add_household(household)
        return household

    def populate(self, region) -> int:
        """초기 인구 (목표 가구 수, 연령 균등분포)"""
        cfg = self.cfg
        for _ in range(region.target_population):
            self.create_household(region, float(self.rng.uniform(cfg.initial_age_min, cfg.initial_age_max)))
        return region.target_population

    def death_probability(self, age: float) -> float:
        """월간 사망 확률 (연령 제곱에 비례)"""
        annual = self.cfg.death_rate * (age / self.cfg.death_age_scale) ** 2
        return min(annual, 1.0) / MONTHS_IN_YEAR

    def step(self, regions, month: int):
        self.births_this_month = 0
        self.deaths_this_month = 0
        for region in regions:
            self._births(region, month)
            self._deaths(region, month)

    def _births(self, region, month: int):
        cfg = self.cfg
        expected = region.target_population * cfg.birth_rate / MONTHS_IN_YEAR
        n = int(expected)
        if self.rng.random() < expected - n:
            n += 1
        for _ in range(n):
            age = float(self.rng.uniform(cfg.new_household_age_min, cfg.new_household_age_max))
            household = self.create_household(region, age)
            self.event_bus.emit(HOUSEHOLD_BORN, month, household_id=household.id, region=region.id)
        self.births_this_month += n

    def _deaths(self, region, month: int):
        for household_id in sorted(region.households):
            household = region.households[household_id]
            if self.rng.random() >= self.death_probability(household.age):
                continue
            if len(region.households) < 2:
                logger.warning("Region %s: last household %s cannot die without an heir",
                               region.name, household_id)
                continue
            self.kill(household, self._choose_beneficiary(region, household_id), month)

    def _choose_beneficiary(self, region, exclude_id: int) -> Household:
        candidates = [hid for hid in sorted(region.households) if hid != exclude_id]
        return region.households[candidates[int(self.rng.integers(len(candidates)))]]

    def kill(self, household: Household, beneficiary: Household, month: int):
        """사망 처리 - 전 재산 상속 후 제거"""
        household.transfer_all_wealth_to(beneficiary)
        household.region.remove_household(household.id)
        self.population.remove(household.id)
        self.deaths_this_month += 1
        self.event_bus.emit(HOUSEHOLD_DIED, month, household_id=household.id,
                            beneficiary_id=beneficiary.id, age=household.age)
        logger.debug("Household %s died at %.1f, heir %s", household.id, household.age, beneficiary.id)
