import json

import pytest

from order_extractor.config import ExtractionConfig, load_config


@pytest.fixture()
def config_file(tmp_path):
    path = tmp_path / "order_config.json"
    path.write_text(json.dumps({
        "default": {"schema": "split", "quantity_mode": "marker"},
        "legacy": {"schema": "single", "quantity_mode": "fixed_index", "quantity_line_index": 20},
        "broken": {"quantity_mode": "both"},
        "typo": {"tolerence": 4},
    }), encoding="utf-8")
    return str(path)


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    monkeypatch.delenv("ORDER_SHEET_URL", raising=False)
    monkeypatch.delenv("ORDER_LINE_TOLERANCE", raising=False)


def test_load_profile(config_file):
    config = load_config(config_file, "legacy")
    assert config.schema == "single"
    assert config.quantity_mode == "fixed_index"
    assert config.quantity_line_index == 20
    assert config.line_tolerance == 5.0
    assert config.y_axis == "pdf"


def test_missing_file_or_key_falls_back_to_defaults(tmp_path, config_file):
    assert load_config(str(tmp_path / "nope.json")) == ExtractionConfig()
    assert load_config(config_file, "missing") == ExtractionConfig()


def test_invalid_values_raise(config_file):
    with pytest.raises(ValueError):
        load_config(config_file, "broken")
    with pytest.raises(ValueError):
        load_config(config_file, "typo")
    with pytest.raises(ValueError):
        ExtractionConfig(line_tolerance=0)


def test_env_overrides(config_file, monkeypatch):
    monkeypatch.setenv("ORDER_SHEET_URL", "https://example.com/exec")
    monkeypatch.setenv("ORDER_LINE_TOLERANCE", "3.5")
    config = load_config(config_file)
    assert config.sheet_url == "https://example.com/exec"
    assert config.line_tolerance == 3.5

    monkeypatch.setenv("ORDER_LINE_TOLERANCE", "wide")
    with pytest.raises(ValueError):
        load_config(config_file)


def test_repo_config_profiles_load():
    assert load_config(config_key="default").quantity_mode == "marker"
    assert load_config(config_key="legacy").schema == "single"
