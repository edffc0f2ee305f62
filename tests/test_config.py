import pytest

from duration_engine.bonds import BondParams, price_bond
from duration_engine.config import DEFAULT_CONFIG, EngineConfig
from duration_engine.curves import YieldCurvePoint, curve_point_risk, generate_curve
from duration_engine.errors import InvalidParameter
from duration_engine.risk import effective_duration, immunization_check, key_rate_duration
from duration_engine.scenarios import run_yield_scenarios


def test_defaults():
    assert DEFAULT_CONFIG.key_rate_bump == 0.0001
    assert DEFAULT_CONFIG.effective_bump == 0.01
    assert DEFAULT_CONFIG.curve_steps == 50
    assert DEFAULT_CONFIG.immunization_tolerance == 0.1


def test_from_yaml_overrides_and_keeps_defaults(tmp_path):
    cfg_file = tmp_path / "engine.yaml"
    cfg_file.write_text(
        "engine:\n"
        "  curve_steps: 20\n"
        "  immunization_tolerance: 0.25\n"
        "  scenario_shocks_bps: [-50, 0, 50]\n",
        encoding="utf-8",
    )
    cfg = EngineConfig.from_yaml(cfg_file)
    assert cfg.curve_steps == 20
    assert cfg.immunization_tolerance == 0.25
    assert cfg.scenario_shocks_bps == (-50.0, 0.0, 50.0)
    assert cfg.key_rate_bump == DEFAULT_CONFIG.key_rate_bump


def test_empty_yaml_gives_defaults(tmp_path):
    cfg_file = tmp_path / "empty.yaml"
    cfg_file.write_text("", encoding="utf-8")
    assert EngineConfig.from_yaml(cfg_file) == DEFAULT_CONFIG


def test_unknown_key_rejected():
    with pytest.raises(InvalidParameter):
        EngineConfig.from_dict({"bump": 0.01})


@pytest.fixture
def loaded_config(tmp_path):
    cfg_file = tmp_path / "engine.yaml"
    cfg_file.write_text(
        "engine:\n"
        "  period_tolerance: 0.01\n"
        "  curve_steps: 20\n"
        "  immunization_tolerance: 0.25\n"
        "  key_rate_bump: 0.01\n"
        "  scenario_shocks_bps: [-50, 0, 50]\n",
        encoding="utf-8",
    )
    return EngineConfig.from_yaml(cfg_file)


def test_loaded_tolerance_accepts_near_aligned_maturity(loaded_config):
    with pytest.raises(InvalidParameter):
        BondParams(1000.0, 0.05, 10.004, 0.05, 2)

    loose = BondParams.from_config(loaded_config, 1000.0, 0.05, 10.004, 0.05, 2)
    assert loose.total_periods == 20
    assert loose.with_ytm(0.06).total_periods == 20, "tolerance survives a yield change"
    assert price_bond(loose) == pytest.approx(price_bond(BondParams(1000.0, 0.05, 10, 0.05, 2)), rel=1e-15)


def test_loaded_config_drives_operation_defaults(loaded_config):
    bond = BondParams(1000.0, 0.05, 10, 0.05, 2)

    assert len(generate_curve(bond, config=loaded_config)) == 21
    assert len(generate_curve(bond)) == 51

    assert immunization_check(7.0, 7.2, config=loaded_config).is_immunized
    assert not immunization_check(7.0, 7.2).is_immunized

    assert key_rate_duration(bond, config=loaded_config) == effective_duration(bond)
    assert key_rate_duration(bond) != effective_duration(bond)

    grid = run_yield_scenarios(bond, config=loaded_config)
    assert list(grid["shock_bp"]) == [-50.0, 0.0, 50.0]


def test_curve_point_risk_uses_config_tolerance(loaded_config):
    pts = [YieldCurvePoint("10Y+", 10.004, 4.0)]
    with pytest.raises(InvalidParameter):
        curve_point_risk(pts)
    assert curve_point_risk(pts, config=loaded_config).loc[0, "frequency"] == 2
