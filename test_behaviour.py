"""가구 행동 규칙 테스트"""

import numpy as np
import pytest

from housing_abm.agents.behaviour import HouseholdBehaviour
from housing_abm.config.schema import BehaviourConfig


def make_behaviour(percentile=0.9, seed=0, **overrides):
    return HouseholdBehaviour(BehaviourConfig(**overrides), np.random.default_rng(seed), percentile)


def test_investors_only_above_min_percentile():
    low = [make_behaviour(0.3, seed=s, p_investor=0.5) for s in range(200)]
    assert not any(b.is_investor for b in low)

    high = [make_behaviour(0.95, seed=s, p_investor=0.5) for s in range(200)]
    investors = [b for b in high if b.is_investor]
    assert investors
    assert all(b.desired_btl_properties >= 1 for b in investors)
    assert all(b.desired_btl_properties == 0 for b in high if not b.is_investor)


def test_initial_sale_price_not_below_principal():
    behaviour = make_behaviour()
    assert behaviour.initial_sale_price(100000.0, 30.0, 250000.0) == 250000.0
    price = behaviour.initial_sale_price(100000.0, 30.0, 0.0)
    assert 80000.0 < price < 130000.0


def test_longer_days_on_market_lowers_ask():
    fast = make_behaviour(seed=3).initial_sale_price(100000.0, 5.0, 0.0)
    slow = make_behaviour(seed=3).initial_sale_price(100000.0, 300.0, 0.0)
    assert slow < fast


def test_rethink_sale_price_never_increases():
    behaviour = make_behaviour(p_sale_price_reduce=0.5)
    price = 100000.0
    for _ in range(100):
        new_price = behaviour.rethink_house_sale_price(price)
        assert 0 < new_price <= price
        assert new_price >= price * (1 - behaviour.cfg.max_reduction_pct / 100.0)
        price = new_price


def test_down_payment_bounded_by_balance():
    behaviour = make_behaviour()
    assert behaviour.decide_down_payment(1000.0, 200000.0, True) <= 1000.0
    assert behaviour.decide_down_payment(-50.0, 200000.0, True) == 0.0
    # 잔고가 충분하면 현금 구매
    assert behaviour.decide_down_payment(500000.0, 200000.0, True) == 200000.0


def test_desired_rent_floor_for_low_income():
    behaviour = make_behaviour(desired_rent_noise=0.0)
    assert behaviour.desired_rent(500.0) == pytest.approx(behaviour.cfg.desired_rent_floor)
    assert behaviour.desired_rent(5000.0) > behaviour.cfg.desired_rent_floor


def test_desired_consumption_only_from_excess():
    behaviour = make_behaviour(saving_noise=0.0)
    target = behaviour.desired_bank_balance(40000.0)
    assert behaviour.desired_consumption(target * 0.5, 40000.0) == 0.0
    assert behaviour.desired_consumption(target + 1000.0, 40000.0) == pytest.approx(
        behaviour.cfg.consumption_fraction * 1000.0)


def test_rent_or_purchase_follows_costs():
    behaviour = make_behaviour()
    # 임차 비용이 압도적으로 크면 매입, 작으면 임차
    assert all(behaviour.decide_rent_or_purchase(100000.0, 1e8, 0.9, 0.03, 0.0) for _ in range(20))
    assert not any(behaviour.decide_rent_or_purchase(1e9, 0.0, 0.9, 0.03, 0.0) for _ in range(20))


def test_non_investor_never_buys_to_let():
    behaviour = make_behaviour(0.1)
    assert not behaviour.decide_to_buy_investment_property(0, 1e9, 1.0, 1.0)


def test_investor_over_target_sells_eagerly():
    behaviour = make_behaviour(btl_p_sell_excess=1.0)
    behaviour.desired_btl_properties = 1
    assert behaviour.decide_to_sell_investment_property(3, 0.0)


def test_rent_rethink_reduces():
    behaviour = make_behaviour()
    assert behaviour.rethink_buy_to_let_rent(1000.0) == pytest.approx(950.0)
