"""
Tests for loading, merging and validating the YAML configuration.
"""

from datetime import date, datetime
from importlib import resources

import pytest
import yaml

from fuelsim.config import ConfigError, apply_overrides, load_cfg, start_datetime, validate_cfg


def test_baseline_is_valid(base_cfg):
    assert validate_cfg(base_cfg) is base_cfg
    assert base_cfg["station"]["brands"] == ["A92", "A95", "Diesel"]
    assert base_cfg["station"]["base_price"] == {"A92": 48.0, "A95": 52.0, "Diesel": 49.5}
    assert base_cfg["customers"] == {"min_volume": 10.0, "max_volume": 50.0}
    assert base_cfg["arrivals"]["uniform"] == {"a": 0.5, "b": 4.0}


def test_apply_overrides_merges_without_mutating(base_cfg):
    merged = apply_overrides(base_cfg, {"station": {"pumps": 9, "markup_percent": {"A92": 12.0}}})
    assert merged["station"]["pumps"] == 9
    assert merged["station"]["markup_percent"] == {"A92": 12.0, "A95": 8.0, "Diesel": 6.0}
    assert merged["station"]["max_queue"] == base_cfg["station"]["max_queue"]
    assert base_cfg["station"]["pumps"] == 6
    assert base_cfg["station"]["markup_percent"]["A92"] == 7.0


def test_load_cfg_from_path(tmp_path, base_cfg):
    path = tmp_path / "run.yaml"
    path.write_text(yaml.safe_dump(apply_overrides(base_cfg, {"sim": {"days": 2}})))
    cfg = load_cfg(str(path))
    assert cfg["sim"]["days"] == 2


def test_default_config_is_packaged_with_the_module(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    packaged = resources.files("fuelsim").joinpath("baseline.yaml")
    assert packaged.is_file()
    cfg = load_cfg()
    assert cfg == yaml.safe_load(packaged.read_text(encoding="utf-8"))
    assert validate_cfg(cfg)["station"]["pumps"] == 6


def test_load_cfg_rejects_non_mapping(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ConfigError):
        load_cfg(str(path))


@pytest.mark.parametrize("overrides", [
    {"station": {"pumps": 0}},
    {"station": {"pumps": 21}},
    {"station": {"max_queue": 0}},
    {"station": {"max_queue": 25}},
    {"sim": {"days": 31}},
    {"sim": {"days": "7"}},
    {"sim": {"start_date": "03/03/2025"}},
    {"station": {"brands": []}},
    {"station": {"brands": ["A92", "A92"]}},
    {"station": {"markup_percent": {"A92": -1.0}}},
    {"station": {"inventory": {"Diesel": -5}}},
    {"station": {"base_price": {"A95": "cheap"}}},
    {"station": {"brands": ["A92", "Gas"]}},
    {"station": {"pump_access": ["Front"]}},
    {"arrivals": {"distribution": "poisson"}},
    {"arrivals": {"uniform": {"a": 5.0, "b": 1.0}}},
    {"customers": {"min_volume": 60.0}},
])
def test_invalid_values_raise(base_cfg, overrides):
    with pytest.raises(ConfigError):
        validate_cfg(apply_overrides(base_cfg, overrides))


def test_config_error_is_a_value_error():
    assert issubclass(ConfigError, ValueError)


@pytest.mark.parametrize("raw", ["2025-03-08", date(2025, 3, 8), datetime(2025, 3, 8, 14, 30)])
def test_start_datetime_is_midnight(raw):
    assert start_datetime({"sim": {"start_date": raw}}) == datetime(2025, 3, 8)
