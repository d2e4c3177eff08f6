import json

import pytest

from accountability_engine.config import EngineConfig, load_config
from accountability_engine.errors import InvalidConfiguration


def test_defaults():
    config = EngineConfig()
    assert config.streak_threshold == 100.0
    assert config.consistency_windows == (7, 30, 90)
    assert config.to_dict()["consistency_windows"] == [7, 30, 90]


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(InvalidConfiguration):
        EngineConfig.from_dict({"streak_treshold": 50})


def test_invalid_values_are_rejected():
    with pytest.raises(InvalidConfiguration):
        EngineConfig(half_life_days=0)
    with pytest.raises(InvalidConfiguration):
        EngineConfig(consistency_windows=(7, 0))
    with pytest.raises(InvalidConfiguration):
        EngineConfig(streak_threshold=120)


def test_load_config_from_file(tmp_path):
    path = tmp_path / "engine.json"
    path.write_text(json.dumps({"streak_threshold": 50, "consistency_windows": [14]}), encoding="utf-8")
    config = load_config(str(path))
    assert config.streak_threshold == 50
    assert config.consistency_windows == (14,)


def test_load_config_missing_file_uses_defaults(tmp_path):
    assert load_config(str(tmp_path / "absent.json")) == EngineConfig()
    assert load_config() == EngineConfig()


def test_load_config_malformed(tmp_path):
    path = tmp_path / "engine.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(InvalidConfiguration):
        load_config(str(path))
