"""가구 에이전트 테스트 (임차 만료, 매매 정산, 상속, 파산)"""

import pytest

from housing_abm.core.types import NOBODY, TenureState
from housing_abm.institutions.payments import MortgageAgreement
from housing_abm.simulation.invariants import check_invariants

from conftest import make_engine, add_household, build_house, move_in, let_house


def test_new_household_starts_in_social_housing(engine):
    household = add_household(engine)
    assert household.tenure == TenureState.SOCIAL_HOUSING
    assert household.is_first_time_buyer
    assert household.bank_balance > 0
    assert household.payments == {}


def test_tenure_states(engine):
    landlord = add_household(engine)
    tenant = add_household(engine)
    home = build_house(engine, owner=landlord)
    move_in(landlord, home)
    assert landlord.tenure == TenureState.OWNER_OCCUPIER

    let = build_house(engine, owner=landlord)
    let_house(landlord, tenant, let)
    assert landlord.tenure == TenureState.OWNER_INVESTOR
    assert landlord.n_investment_properties == 1
    assert tenant.tenure == TenureState.RENTING
    assert tenant.rental_agreement() is tenant.payments[let.id]
    assert check_invariants(engine) == []


def test_expired_tenancy_ends_and_household_bids_again(engine, region):
    landlord = add_household(engine, balance=10000.0)
    tenant = add_household(engine, balance=10000.0)
    house = build_house(engine, quality=1, owner=landlord)
    let_house(landlord, tenant, house, rent=500.0, n_payments=1)

    tenant.step()

    assert tenant.home_id == NOBODY
    assert house.resident_id == NOBODY
    assert house.id not in tenant.payments
    assert landlord.monthly_gross_rental_income == pytest.approx(0.0)
    assert house.rental_record is not None
    assert region.rental_market.get_offer(house.id) is house.rental_record
    assert region.has_bid(tenant.id)
    n_bids = sum(1 for b in region.sale_market.bids + region.rental_market.bids
                 if b.household_id == tenant.id)
    assert n_bids == 1
    assert check_invariants(engine) == []


def test_tenancy_continues_until_mature(engine, region):
    landlord = add_household(engine, balance=10000.0)
    tenant = add_household(engine, balance=10000.0)
    house = build_house(engine, quality=1, owner=landlord)
    let_house(landlord, tenant, house, rent=500.0, n_payments=3)

    tenant.step()
    assert tenant.home_id == house.id
    assert tenant.payments[house.id].n_payments == 2
    assert not region.has_bid(tenant.id)


def test_buy_then_sell_restores_balance(engine, region):
    seller = add_household(engine, balance=2e6)
    buyer = add_household(engine, balance=2e6)
    house = build_house(engine, quality=1)

    region.sale_market.offer(house, 100000.0)
    region.sale_market.bid(seller, 150000.0)
    region.clear_markets()
    assert seller.home_id == house.id
    assert seller.bank_balance == pytest.approx(2e6 - 100000.0)
    assert not seller.is_first_time_buyer
    assert region.construction.revenue == pytest.approx(100000.0)

    region.sale_market.offer(house, 100000.0)
    region.sale_market.bid(buyer, 150000.0)
    region.clear_markets()
    assert house.owner_id == buyer.id
    assert seller.home_id == NOBODY
    assert house.id not in seller.payments
    assert seller.bank_balance == pytest.approx(2e6)
    assert check_invariants(engine) == []


def test_sale_repays_mortgage_and_evicts_tenant(engine, region):
    landlord = add_household(engine, balance=1000.0)
    tenant = add_household(engine)
    buyer = add_household(engine, balance=2e6)
    house = build_house(engine, quality=1, owner=landlord)
    landlord.payments[house.id] = MortgageAgreement(
        monthly_payment=300.0, n_payments=200, principal=60000.0,
        monthly_interest_rate=0.0025, purchase_price=80000.0)
    let_house(landlord, tenant, house, rent=600.0)

    region.sale_market.offer(house, 100000.0)
    region.sale_market.bid(buyer, 150000.0)
    region.clear_markets()

    assert landlord.bank_balance == pytest.approx(1000.0 + 100000.0 - 60000.0)
    assert landlord.monthly_gross_rental_income == pytest.approx(0.0)
    assert tenant.home_id == NOBODY
    assert tenant.payments == {}
    assert buyer.home_id == house.id
    assert check_invariants(engine) == []


def test_investor_buys_to_let_and_lists_for_rent():
    engine = make_engine(behaviour={"btl_choice_intensity": 1e4, "btl_min_balance_ratio": 0.0,
                                    "p_sell": 0.0, "p_forced_to_move": 0.0,
                                    "cash_downpayment_ratio": 1000.0})
    region = engine.world[0]
    investor = add_household(engine, balance=2e6, investor=True)
    home = build_house(engine, quality=2, owner=investor)
    move_in(investor, home)
    investor.is_first_time_buyer = False
    # 단기 수익률 > 장기 수익률 → 매수 확률 ~1
    region.rental_market.average_sold_gross_yield = 0.06
    assert region.rental_market.yield_trend() > 0

    house = build_house(engine, quality=1)
    region.sale_market.offer(house, 100000.0)
    assert engine.bank.get_max_mortgage(investor, False) >= 100000.0

    investor.step()
    bids = region.sale_market.bids
    assert len(bids) == 1 and bids[0].is_buy_to_let
    assert region.rental_market.bids == []
    region.clear_markets()

    assert house.owner_id == investor.id
    assert investor.home_id == home.id
    assert home.sale_record is None
    mortgage = investor.payments[house.id]
    assert mortgage.is_buy_to_let
    assert not mortgage.is_first_time_buyer
    assert 0.0 <= mortgage.loan_to_value <= 0.6 + 1e-9
    assert mortgage.down_payment == pytest.approx(100000.0 - mortgage.principal)
    assert engine.bank.n_btl_approved == 1
    assert house.is_vacant
    assert house.rental_record is not None
    assert region.rental_market.get_offer(house.id) is house.rental_record
    assert investor.n_investment_properties == 1
    assert investor.tenure == TenureState.OWNER_INVESTOR
    assert check_invariants(engine) == []


def test_household_without_percentile_draws_one(engine):
    household = engine.demographics.create_household(engine.world[0], 30.0)
    assert 0.0 <= household.income_percentile < 1.0
    assert household.behaviour is not None
    assert household.annual_gross_employment_income > 0


def test_home_bid_capped_at_max_mortgage():
    engine = make_engine(behaviour={"buy_scale": 100.0, "psychological_cost_of_renting": 1e9})
    region = engine.world[0]
    household = add_household(engine, balance=100000.0)
    cap = engine.bank.get_max_mortgage(household, True)

    household.bid_for_a_home()

    bids = region.sale_market.bids
    assert len(bids) == 1
    assert bids[0].price == cap
    assert region.rental_market.bids == []


def test_price_reduction_never_goes_up():
    engine = make_engine(behaviour={"p_sale_price_reduce": 1.0})
    region = engine.world[0]
    owner = add_household(engine, balance=1000.0)
    house = build_house(engine, quality=1, owner=owner)
    record = region.sale_market.offer(house, 100000.0)

    prices = [record.price]
    for _ in range(5):
        owner.manage_house(house)
        prices.append(record.price)
    assert all(b < a for a, b in zip(prices, prices[1:]))
    assert record.initial_price == 100000.0


def test_listing_withdrawn_below_outstanding_principal():
    engine = make_engine(behaviour={"p_sale_price_reduce": 1.0})
    region = engine.world[0]
    owner = add_household(engine, balance=1000.0)
    house = build_house(engine, quality=1, owner=owner)
    owner.payments[house.id] = MortgageAgreement(
        monthly_payment=500.0, n_payments=300, principal=99999.0,
        monthly_interest_rate=0.0025, purchase_price=100000.0)
    region.sale_market.offer(house, 100000.0)

    owner.manage_house(house)

    assert house.sale_record is None
    assert house.rental_record is not None
    assert check_invariants(engine) == []


def test_inheritance_transfers_houses_and_wealth(engine, region):
    heir = add_household(engine, balance=5000.0)
    deceased = add_household(engine, balance=80000.0)
    tenant = add_household(engine)

    home = build_house(engine, quality=2, owner=deceased)
    deceased.payments[home.id] = MortgageAgreement(
        monthly_payment=250.0, n_payments=240, principal=50000.0,
        monthly_interest_rate=0.0025, purchase_price=150000.0)
    move_in(deceased, home)
    let = build_house(engine, quality=1, owner=deceased)
    let_house(deceased, tenant, let, rent=550.0)
    assert check_invariants(engine) == []

    engine.demographics.kill(deceased, heir, month=0)

    assert deceased.id not in engine.population
    assert deceased.id not in region.households
    assert heir.home_id == home.id
    assert home.resident_id == heir.id
    assert home.owner_id == heir.id
    assert let.owner_id == heir.id
    assert let.sale_record is not None
    assert tenant.home_id == NOBODY
    assert tenant.payments == {}
    assert heir.bank_balance == pytest.approx(5000.0 + 80000.0 - 50000.0)
    assert engine.demographics.deaths_this_month == 1
    for market in (region.sale_market, region.rental_market):
        assert all(ask.seller_id != deceased.id for ask in market.asks)
        assert all(bid.household_id != deceased.id for bid in market.bids)
    assert check_invariants(engine) == []


def test_heir_renting_moves_into_inherited_home(engine, region):
    heir = add_household(engine, balance=5000.0)
    landlord = add_household(engine, balance=5000.0)
    deceased = add_household(engine, balance=1000.0)
    rented = build_house(engine, quality=0, owner=landlord)
    let_house(landlord, heir, rented, rent=400.0)
    home = build_house(engine, quality=2, owner=deceased)
    move_in(deceased, home)

    engine.demographics.kill(deceased, heir, month=0)

    assert heir.home_id == home.id
    assert rented.resident_id == NOBODY
    assert rented.rental_record is not None
    assert landlord.monthly_gross_rental_income == pytest.approx(0.0)
    assert check_invariants(engine) == []


def test_dead_household_bids_are_withdrawn(engine, region):
    heir = add_household(engine)
    deceased = add_household(engine)
    region.rental_market.bid(deceased, 500.0)
    engine.demographics.kill(deceased, heir, month=0)
    assert region.rental_market.bids == []


def test_bankrupt_household_is_topped_up(engine):
    household = add_household(engine, balance=-1e6)
    household.step()
    assert household.is_bankrupt
    assert household.bank_balance == engine.config.household.bankruptcy_cash_injection

    engine.world[0].clear_markets()
    household.bank_balance = 1e5
    household.step()
    assert not household.is_bankrupt
