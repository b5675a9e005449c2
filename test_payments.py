"""정기 지급 계약 테스트 (대출 상환, 조기 상환, 임대차)"""

import numpy as np
import pytest

from housing_abm.institutions.payments import (
    MortgageAgreement, RentalAgreement, monthly_payment_factor,
)


def make_mortgage(principal=100000.0, rate=0.03, years=25):
    r = rate / 12
    n = years * 12
    return MortgageAgreement(
        monthly_payment=principal * monthly_payment_factor(r, n),
        n_payments=n,
        principal=principal,
        monthly_interest_rate=r,
        purchase_price=principal / 0.8,
    )


def test_payment_factor():
    assert monthly_payment_factor(0.0, 100) == pytest.approx(0.01)
    assert monthly_payment_factor(0.01, 0) == 0.0
    k = monthly_payment_factor(0.0025, 300)
    # 원리금 균등상환 월 상환액 (10만, 연 3%, 25년) ≈ 474.21
    assert 100000 * k == pytest.approx(474.21, abs=0.05)


def test_mortgage_amortizes_to_zero():
    m = make_mortgage()
    first_interest = m.principal * m.monthly_interest_rate
    payment = m.make_monthly_payment()
    assert m.principal == pytest.approx(100000.0 - (payment - first_interest))
    assert m.n_payments == 299

    for _ in range(299):
        m.make_monthly_payment()
    assert m.n_payments == 0
    assert m.principal == 0.0
    assert m.is_mature


def test_payment_after_maturity_is_noop():
    m = make_mortgage()
    m.n_payments = 1
    assert m.make_monthly_payment() > 0
    assert m.make_monthly_payment() == 0.0
    assert m.n_payments == 0

    rent = RentalAgreement(monthly_payment=600.0, n_payments=0)
    assert rent.make_monthly_payment() == 0.0
    assert rent.n_payments == 0


def test_principal_declines_monotonically():
    m = make_mortgage(principal=250000.0)
    previous = m.principal
    for _ in range(m.n_payments):
        m.make_monthly_payment()
        assert 0.0 <= m.principal <= previous
        previous = m.principal


def test_full_payoff():
    m = make_mortgage()
    for _ in range(12):
        m.make_monthly_payment()
    remaining = m.principal
    paid = m.payoff(1e9)
    assert paid == pytest.approx(remaining)
    assert m.principal == 0.0
    assert m.n_payments == 0
    assert m.monthly_payment == 0.0


def test_partial_payoff_reamortizes():
    m = make_mortgage()
    old_payment = m.monthly_payment
    paid = m.payoff(40000.0)
    assert paid == 40000.0
    assert m.principal == pytest.approx(60000.0)
    assert m.n_payments == 300
    assert m.monthly_payment == pytest.approx(old_payment * 0.6)


def test_payoff_never_negative():
    m = make_mortgage()
    assert m.payoff(-5.0) == 0.0
    assert m.principal == pytest.approx(100000.0)
    null = MortgageAgreement.null()
    assert null.payoff() == 0.0
    assert null.principal == 0.0


def test_rental_agreement_length():
    rng = np.random.default_rng(3)
    lengths = {RentalAgreement.draw(700.0, 18, 6, rng, landlord_id=5).n_payments for _ in range(500)}
    assert min(lengths) >= 12
    assert max(lengths) <= 24
    assert len(lengths) > 1
