"""지역 시스템 - 지역별 매매/임대시장, 건설 부문, 입찰 장부"""

from __future__ import annotations

import logging

import numpy as np

from ..core.events import EventBus
from ..core.types import CONSTRUCTION_ID, DAYS_IN_MONTH
from ..housing.construction import Construction
from ..housing.stock import HousingStock
from ..markets.market_stats import QualityPriceStats, reference_prices
from ..markets.rental_market import HouseRentalMarket
from ..markets.sale_market import HouseSaleMarket

logger = logging.getLogger(__name__)


class Region:
    """하나의 지역

    Args:
        region_id: 지역 인덱스
        key: 설정상 지역 ID
        name: 표시 이름
        target_population: 목표 가구 수
        config: ScenarioConfig
        houses: 전체 주택 저장소 (공유)
        population: 전체 가구 저장소 (공유)
        rng: 공용 난수 생성기
        event_bus: 이벤트 버스
    """

    def __init__(self, region_id: int, key: str, name: str, target_population: int,
                 config, houses: HousingStock, population, rng: np.random.Generator,
                 event_bus: EventBus):
        self.id = region_id
        self.key = key
        self.name = name
        self.target_population = target_population
        self.config = config
        self.houses = houses
        self.population = population
        self.rng = rng
        self.event_bus = event_bus
        self.strict = config.simulation.strict_invariants
        self.month = 0

        self.households: dict[int, object] = {}   # 지역 소속 가구
        self._bidders: set[int] = set()            # 이번 스텝 입찰 가구

        # === 시장 ===
        mcfg, rcfg = config.market, config.rental
        ref = reference_prices(config.house.n_quality, mcfg.reference_price_median, mcfg.reference_price_sigma)
        sale_stats = QualityPriceStats(ref, mcfg.price_decay, mcfg.days_on_market_decay,
                                       mcfg.initial_days_on_market)
        rent_stats = QualityPriceStats(ref * rcfg.initial_gross_yield / 12.0, mcfg.price_decay,
                                       rcfg.months_on_market_decay, rcfg.initial_months_on_market * DAYS_IN_MONTH)
        self.sale_market = HouseSaleMarket(self, sale_stats, mcfg.bidup, mcfg.hpa_months, self.strict)
        self.rental_market = HouseRentalMarket(self, rent_stats, mcfg.bidup, rcfg, self.sale_market, self.strict)

        self.construction = Construction(config.construction, self)

    # === 구성원 ===

    def add_household(self, household):
        self.households[household.id] = household

    def remove_household(self, household_id: int):
        self.households.pop(household_id, None)

    def get_owner(self, owner_id: int):
        """소유자 ID → 가구 또는 건설사"""
        if owner_id == CONSTRUCTION_ID:
            return self.construction
        return self.population[owner_id]

    # === 입찰 장부 ===

    def register_bidder(self, household_id: int) -> bool:
        """이번 스텝 첫 입찰이면 True"""
        if household_id in self._bidders:
            return False
        self._bidders.add(household_id)
        return True

    def has_bid(self, household_id: int) -> bool:
        return household_id in self._bidders

    def withdraw_bids(self, household_id: int) -> int:
        return (self.sale_market.withdraw_bids(household_id)
                + self.rental_market.withdraw_bids(household_id))

    # === 월간 진행 ===

    def set_month(self, month: int):
        self.month = month

    def step_households(self, shuffle: bool = True):
        """가구 월간 스텝 (순서는 난수 또는 ID 순)"""
        ids = sorted(self.households)
        if shuffle:
            self.rng.shuffle(ids)
        for household_id in ids:
            household = self.households.get(household_id)
            if household is not None:
                household.step()

    def clear_markets(self) -> list:
        """매매시장 → 임대시장 순서로 청산, 입찰 장부 초기화"""
        transactions = self.sale_market.clear_market()
        transactions += self.rental_market.clear_market()
        self._bidders.clear()
        return transactions

    def get_stats(self) -> dict:
        sm, rm = self.sale_market, self.rental_market
        return {
            'region': self.name,
            'households': len(self.households),
            'houses': self.construction.housing_stock,
            'hpi': sm.stats.hpi(),
            'hpa': sm.house_price_appreciation(),
            'sale_listings': sm.n_listings,
            'rental_listings': rm.n_listings,
            'sales': sm.n_transactions,
            'rentals': rm.n_transactions,
            'avg_sale_price': float(np.mean(sm.stats.avg_price)),
            'avg_rent': float(np.mean(rm.stats.avg_price)),
            'avg_days_on_market': float(np.mean(sm.stats.avg_days_on_market)),
            'rental_yield': rm.average_sold_gross_yield,
        }


class RegionSet:
    """지역 집합"""

    def __init__(self, regions: list[Region]):
        self.regions = regions
        self.n = len(regions)

    @classmethod
    def from_config(cls, config, houses: HousingStock, population, rng: np.random.Generator,
                    event_bus: EventBus) -> RegionSet:
        regions = [
            Region(i, rc.id, rc.name, rc.target_population, config, houses, population, rng, event_bus)
            for i, rc in enumerate(config.regions)
        ]
        return cls(regions)

    def __getitem__(self, idx: int) -> Region:
        return self.regions[idx]

    def __iter__(self):
        return iter(self.regions)

    def __len__(self) -> int:
        return self.n

    def get_names(self) -> list[str]:
        return [r.name for r in self.regions]
