"""주택시장 테스트 (주문장, 품질 우선 매칭, 경합 가격, 체류일수 통계)"""

import pytest

from housing_abm.core.errors import InvariantViolation
from housing_abm.core.types import NOBODY
from housing_abm.simulation.invariants import check_invariants

from conftest import make_engine, add_household, build_house


# === 주문장 ===

def test_offer_sets_marker_and_listing_time(engine, region):
    region.set_month(3)
    house = build_house(engine, quality=2)
    record = region.sale_market.offer(house, 100000.0)
    assert house.sale_record is record
    assert record.t_initial_listing == 3
    assert region.sale_market.n_listings == 1

    region.set_month(5)
    region.sale_market.update_offer(record, 90000.0)
    assert record.price == 90000.0
    assert record.initial_price == 100000.0
    assert record.t_initial_listing == 3

    assert region.sale_market.remove_offer(record)
    assert house.sale_record is None
    assert region.sale_market.n_listings == 0


def test_double_listing_rejected(engine, region):
    house = build_house(engine)
    region.sale_market.offer(house, 100000.0)
    with pytest.raises(InvariantViolation):
        region.sale_market.offer(house, 120000.0)


def test_cross_listing_rejected(engine, region):
    house = build_house(engine)
    region.sale_market.offer(house, 100000.0)
    with pytest.raises(InvariantViolation):
        region.rental_market.offer(house, 700.0)
    assert house.rental_record is None


def test_double_listing_logged_when_not_strict():
    engine = make_engine(simulation={"strict_invariants": False})
    region = engine.world[0]
    house = build_house(engine)
    first = region.sale_market.offer(house, 100000.0)
    assert region.sale_market.offer(house, 80000.0) is None
    assert house.sale_record is first
    assert region.sale_market.n_listings == 1


def test_one_bid_per_household_per_step(engine, region):
    household = add_household(engine)
    assert region.sale_market.bid(household, 100000.0) is not None
    with pytest.raises(InvariantViolation):
        region.rental_market.bid(household, 600.0)

    region.clear_markets()
    assert region.rental_market.bid(household, 600.0) is not None


def test_non_positive_bid_ignored(engine, region):
    household = add_household(engine)
    assert region.sale_market.bid(household, 0.0) is None
    assert not region.has_bid(household.id)


# === 매칭 ===

def test_bidder_gets_best_quality_it_can_afford(engine, region):
    buyer = add_household(engine, balance=2e6)
    cheap_low = build_house(engine, quality=0)
    low = build_house(engine, quality=0)
    mid = build_house(engine, quality=2)
    high = build_house(engine, quality=3)
    market = region.sale_market
    market.offer(cheap_low, 90000.0)
    market.offer(low, 100000.0)
    market.offer(mid, 140000.0)
    market.offer(high, 160000.0)

    market.bid(buyer, 150000.0)
    transactions = region.clear_markets()

    assert len(transactions) == 1
    assert transactions[0].house_id == mid.id
    assert transactions[0].price == 140000.0
    assert mid.owner_id == buyer.id
    assert buyer.home_id == mid.id
    assert mid.resident_id == buyer.id
    assert market.n_listings == 3
    assert check_invariants(engine) == []


def test_competition_bids_price_up(engine, region):
    market = region.sale_market
    house = build_house(engine, quality=1)
    market.offer(house, 100000.0)
    rich = add_household(engine, balance=2e6)
    other = add_household(engine, balance=2e6)
    market.bid(other, 180000.0)
    market.bid(rich, 200000.0)

    transactions = region.clear_markets()
    assert len(transactions) == 1
    assert transactions[0].buyer.id == rich.id
    assert transactions[0].price == pytest.approx(100000.0 * (1 + engine.config.market.bidup))
    assert other.home_id == NOBODY
    assert market.bids == []


def test_single_bidder_pays_ask(engine, region):
    market = region.sale_market
    house = build_house(engine, quality=1)
    market.offer(house, 100000.0)
    buyer = add_household(engine, balance=2e6)
    market.bid(buyer, 500000.0)
    transactions = region.clear_markets()
    assert transactions[0].price == 100000.0


def test_loser_moves_to_next_cheapest(engine, region):
    market = region.sale_market
    a = build_house(engine, quality=1)
    b = build_house(engine, quality=1)
    market.offer(a, 100000.0)
    market.offer(b, 110000.0)
    first = add_household(engine, balance=2e6)
    second = add_household(engine, balance=2e6)
    market.bid(first, 150000.0)
    market.bid(second, 120000.0)

    region.clear_markets()
    assert first.home_id == a.id
    assert second.home_id == b.id
    # 한 집에 한 명, 한 명에 한 집
    assert {a.owner_id, b.owner_id} == {first.id, second.id}


def test_bid_below_every_ask_is_dropped(engine, region):
    market = region.sale_market
    house = build_house(engine, quality=1)
    market.offer(house, 100000.0)
    buyer = add_household(engine, balance=2e6)
    market.bid(buyer, 50000.0)
    assert region.clear_markets() == []
    assert market.bids == []
    assert market.n_listings == 1


def test_owner_cannot_buy_own_house(engine, region):
    owner = add_household(engine, balance=2e6)
    house = build_house(engine, quality=1, owner=owner)
    region.sale_market.offer(house, 100000.0)
    region.sale_market.bid(owner, 200000.0)
    assert region.clear_markets() == []
    assert house.owner_id == owner.id


def test_unfinanceable_winner_is_skipped(engine, region):
    market = region.sale_market
    house = build_house(engine, quality=1)
    market.offer(house, 100000.0)
    broke = add_household(engine, balance=0.0)
    solvent = add_household(engine, balance=2e6)
    market.bid(broke, 300000.0)
    market.bid(solvent, 150000.0)

    transactions = region.clear_markets()
    assert len(transactions) == 1
    assert house.owner_id == solvent.id
    assert broke.home_id == NOBODY


def test_transaction_published_to_recorder(engine, region):
    house = build_house(engine, quality=1)
    region.sale_market.offer(house, 100000.0)
    buyer = add_household(engine, balance=2e6)
    region.sale_market.bid(buyer, 150000.0)
    region.clear_markets()
    assert engine.recorder.transactions == []
    engine.event_bus.process()
    assert len(engine.recorder.transactions) == 1
    row = engine.recorder.transactions[0].to_row()
    assert row[1] == "sale"
    assert row[15] == -1


# === 임대 ===

def test_rental_transaction_creates_tenancy(engine, region):
    landlord = add_household(engine, balance=1000.0)
    tenant = add_household(engine, balance=1000.0)
    house = build_house(engine, quality=2, owner=landlord)
    region.rental_market.offer(house, 700.0)
    region.rental_market.bid(tenant, 800.0)
    cfg = engine.config.rental
    assert region.rental_market.average_sold_gross_yield == cfg.initial_gross_yield
    assert region.rental_market.long_term_average_gross_yield == cfg.initial_gross_yield
    gross_yield = 700.0 * 12 / region.sale_market.get_average_price(2)

    transactions = region.clear_markets()
    assert len(transactions) == 1
    assert tenant.home_id == house.id
    assert house.resident_id == tenant.id
    agreement = tenant.payments[house.id]
    assert agreement.monthly_payment == 700.0
    assert (cfg.tenancy_length_average - cfg.tenancy_length_epsilon
            <= agreement.n_payments
            <= cfg.tenancy_length_average + cfg.tenancy_length_epsilon)
    assert landlord.monthly_gross_rental_income == 700.0
    assert house.rental_record is None
    # 단기/장기 수익률 지수이동평균 (초기값에서 한 번 갱신)
    assert region.rental_market.average_sold_gross_yield == pytest.approx(
        cfg.yield_decay_short * cfg.initial_gross_yield + (1 - cfg.yield_decay_short) * gross_yield)
    assert region.rental_market.long_term_average_gross_yield == pytest.approx(
        cfg.yield_decay_long * cfg.initial_gross_yield + (1 - cfg.yield_decay_long) * gross_yield)
    assert region.rental_market.yield_trend() == pytest.approx(
        (cfg.yield_decay_long - cfg.yield_decay_short) * (gross_yield - cfg.initial_gross_yield))
    assert check_invariants(engine) == []


def test_expected_gross_yield(engine, region):
    rental = region.rental_market
    q = 2
    occupancy = rental.expected_occupancy(q)
    tenancy = engine.config.rental.tenancy_length_average
    assert occupancy == pytest.approx(tenancy / (tenancy + 1.0))
    expected = rental.get_average_price(q) * 12 * occupancy / region.sale_market.get_average_price(q)
    assert rental.expected_gross_yield(q) == pytest.approx(expected)


# === 통계 ===

def test_unsold_listing_raises_days_on_market():
    engine = make_engine(market={"initial_days_on_market": 0.0})
    region = engine.world[0]
    house = build_house(engine, quality=1)
    region.set_month(0)
    region.sale_market.offer(house, 1e7)

    series = []
    for month in range(12):
        region.set_month(month)
        region.clear_markets()
        series.append(region.sale_market.get_average_days_on_market(1))
    assert all(b > a for a, b in zip(series, series[1:]))
    assert series[0] > 0


def test_reference_prices_increase_with_quality(engine, region):
    prices = region.sale_market.stats.avg_price
    assert all(b > a for a, b in zip(prices, prices[1:]))
    assert region.sale_market.max_quality_given_price(prices[2] + 1.0) == 2
    assert region.sale_market.max_quality_given_price(prices[0] - 1.0) == -1


def test_price_average_tracks_transactions(engine, region):
    stats = region.sale_market.stats
    before = stats.avg_price[1]
    stats.record_transaction(1, before * 2)
    assert stats.avg_price[1] == pytest.approx(before * (1 + (1 - engine.config.market.price_decay)))
