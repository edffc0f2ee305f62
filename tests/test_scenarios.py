import numpy as np
import pytest

from duration_engine.bonds import BondParams, price_bond
from duration_engine.errors import InvalidParameter
from duration_engine.scenarios import convexity_asymmetry, run_yield_scenarios


@pytest.fixture(scope="module")
def bond():
    return BondParams(face_value=1000.0, coupon_rate=0.05, years_to_maturity=10, ytm=0.05, frequency=2)


def test_scenario_grid_sorted_and_complete(bond):
    grid = run_yield_scenarios(bond, shocks_bps=[100, -100, 0, 25])
    assert list(grid["shock_bp"]) == [-100.0, 0.0, 25.0, 100.0]
    assert {"duration_error", "convexity_error"}.issubset(grid.columns)


def test_scenario_pnl_decreases_with_rates(bond):
    grid = run_yield_scenarios(bond)
    assert np.all(np.diff(grid["dollar_change"]) < 0), "higher yields must lower the price"
    row0 = grid[grid["shock_bp"] == 0.0].iloc[0]
    assert row0["new_price"] == price_bond(bond)


def test_convexity_error_smaller_than_duration_error(bond):
    grid = run_yield_scenarios(bond)
    nonzero = grid[grid["shock_bp"] != 0.0]
    assert (nonzero["convexity_error"].abs() < nonzero["duration_error"].abs()).all()


@pytest.mark.parametrize("bps", [1, 25, 100, 200, 300])
def test_gain_from_fall_exceeds_loss_from_rise(bond, bps):
    out = convexity_asymmetry(bond, bps)
    assert out["gain_down"] > out["loss_up"] > 0.0
    assert out["asymmetry"] > 0.0


def test_asymmetry_requires_positive_shock(bond):
    with pytest.raises(InvalidParameter):
        convexity_asymmetry(bond, 0)
