"""공용 테스트 픽스처 - 단일 지역, 엄격 모드 소규모 월드"""

import pytest

from housing_abm.config.loader import load_scenario_from_dict
from housing_abm.core.types import CONSTRUCTION_ID
from housing_abm.institutions.payments import MortgageAgreement, RentalAgreement
from housing_abm.simulation.engine import SimulationEngine


def _merge(base: dict, overrides: dict) -> dict:
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def make_config(**overrides):
    data = {
        "simulation": {
            "seed": 7,
            "strict_invariants": True,
            "check_invariants": True,
            "shuffle_households": False,
            "num_steps": 12,
        },
        "regions": [{"id": "test", "name": "Test", "target_population": 40}],
        "house": {"n_quality": 5},
    }
    return load_scenario_from_dict(_merge(data, overrides))


def make_engine(**overrides) -> SimulationEngine:
    return SimulationEngine(make_config(**overrides))


def add_household(engine, age=40.0, percentile=0.9, balance=None, investor=False):
    """지역 0에 가구 추가 (투자 성향 고정)"""
    household = engine.demographics.create_household(engine.world[0], age, percentile)
    household.behaviour.is_investor = investor
    household.behaviour.desired_btl_properties = 3 if investor else 0
    if balance is not None:
        household.bank_balance = balance
    return household


def build_house(engine, quality=0, owner=None):
    """주택 생성 (owner=None이면 건설사 소유)"""
    owner_id = CONSTRUCTION_ID if owner is None else owner.id
    house = engine.houses.build(engine.world[0].id, quality, owner_id)
    if owner is not None:
        owner.payments[house.id] = MortgageAgreement.null()
    return house


def move_in(household, house):
    house.resident_id = household.id
    household.home_id = house.id


def let_house(landlord, tenant, house, rent=500.0, n_payments=12):
    tenant.payments[house.id] = RentalAgreement(monthly_payment=rent, n_payments=n_payments,
                                                landlord_id=landlord.id)
    move_in(tenant, house)
    landlord.monthly_gross_rental_income += rent


@pytest.fixture
def engine():
    return make_engine()


@pytest.fixture
def region(engine):
    return engine.world[0]
