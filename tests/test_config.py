import pytest

from seqstop.config import config_from_dict, load_config, load_yaml
from seqstop.errors import InvalidConfigError
from seqstop.schema import BoundaryMethod, Sided, SpendingFunction, TestConfig


def test_config_from_dict_accepts_camel_case():
    cfg = config_from_dict(
        {
            "maxLooks": 3,
            "alpha": 0.025,
            "sided": "one-sided",
            "spendingFunction": "pocock",
            "futilityThreshold": 0.2,
            "informationSchedule": [0.3, 0.6, 1.0],
            "boundaryMethod": "nominal",
        }
    )
    assert cfg.max_looks == 3
    assert cfg.alpha == 0.025
    assert cfg.sided == Sided.ONE
    assert cfg.spending_function == SpendingFunction.POCOCK
    assert cfg.futility_threshold == 0.2
    assert cfg.information_schedule == (0.3, 0.6, 1.0)
    assert cfg.boundary_method == BoundaryMethod.NOMINAL


def test_config_from_dict_defaults():
    assert config_from_dict({}) == TestConfig()


def test_unknown_keys_rejected():
    with pytest.raises(InvalidConfigError) as exc:
        config_from_dict({"maxLooks": 3, "looks": 4})
    assert "looks" in str(exc.value)


@pytest.mark.parametrize(
    "bad",
    [
        {"max_looks": 0},
        {"max_looks": 2.5},
        {"max_looks": True},
        {"alpha": 0.0},
        {"alpha": 1.0},
        {"power": 1.2},
        {"sided": "three"},
        {"rho": -1.0},
        {"futility_threshold": 1.5},
        {"futility_start": -0.1},
        {"boundary_method": "approximate"},
    ],
)
def test_invalid_values_rejected(bad):
    with pytest.raises(InvalidConfigError):
        config_from_dict(bad)


def test_load_config_reads_test_section(tmp_path):
    p = tmp_path / "design.yaml"
    p.write_text(
        "command: analyze\n"
        "test:\n"
        "  maxLooks: 4\n"
        "  spendingFunction: haybittle-peto\n"
        "  futility_start: 0.5\n",
        encoding="utf-8",
    )
    cfg = load_config(p)
    assert cfg.max_looks == 4
    assert cfg.spending_function == SpendingFunction.HAYBITTLE_PETO
    assert cfg.futility_start == 0.5


def test_load_config_reads_root_mapping(tmp_path):
    p = tmp_path / "design.yaml"
    p.write_text("max_looks: 2\nalpha: 0.1\n", encoding="utf-8")
    cfg = load_config(p)
    assert cfg.max_looks == 2
    assert cfg.alpha == 0.1


def test_load_yaml_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml(tmp_path / "missing.yaml")

    p = tmp_path / "list.yaml"
    p.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(InvalidConfigError):
        load_yaml(p)

    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")
    assert load_yaml(empty) == {}
