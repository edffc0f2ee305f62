import pytest

from duration_engine.bonds import BondParams, compute_duration
from duration_engine.errors import InvalidParameter
from duration_engine.portfolio import (
    PortfolioHolding,
    holdings_from_frame,
    make_sample_portfolio,
    portfolio_duration,
    portfolio_table,
)


@pytest.fixture(scope="module")
def short_bond():
    return BondParams(face_value=1000.0, coupon_rate=0.04, years_to_maturity=2, ytm=0.045, frequency=2)


@pytest.fixture(scope="module")
def long_bond():
    return BondParams(face_value=1000.0, coupon_rate=0.06, years_to_maturity=20, ytm=0.055, frequency=2)


def test_portfolio_duration_is_weighted_sum(short_bond, long_bond):
    d_short = compute_duration(short_bond).modified_duration
    d_long = compute_duration(long_bond).modified_duration

    holdings = [PortfolioHolding(short_bond, 0.3), PortfolioHolding(long_bond, 0.7)]
    assert portfolio_duration(holdings) == pytest.approx(0.3 * d_short + 0.7 * d_long, rel=1e-12)


def test_weights_not_normalized(short_bond):
    d = compute_duration(short_bond).modified_duration
    assert portfolio_duration([(short_bond, 2.0)]) == pytest.approx(2.0 * d, rel=1e-12)


def test_empty_portfolio_has_zero_duration():
    assert portfolio_duration([]) == 0.0


def test_non_finite_weight_rejected(short_bond):
    with pytest.raises(InvalidParameter):
        portfolio_duration([(short_bond, float("nan"))])


def test_portfolio_table_contributions_sum_to_total(short_bond, long_bond):
    holdings = [(short_bond, 0.5), (long_bond, 0.5)]
    table = portfolio_table(holdings)
    assert len(table) == 2
    assert table["duration_contribution"].sum() == pytest.approx(portfolio_duration(holdings), rel=1e-12)


def test_sample_portfolio_round_trips_through_holdings():
    df = make_sample_portfolio(n=12, seed=3)
    assert len(df) == 12
    assert df["weight"].sum() == pytest.approx(1.0)

    holdings = holdings_from_frame(df)
    assert len(holdings) == 12
    dur = portfolio_duration(holdings)
    longest = max(compute_duration(h.params).modified_duration for h in holdings)
    assert 0.0 < dur <= longest, "normalized weights keep duration inside the range of holdings"
