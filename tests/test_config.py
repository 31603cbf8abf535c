import os, tempfile

import pytest

from treedelta.config import (
    check_config_file,
    load_config,
    load_validated_config,
    validate_config_dict,
)
from treedelta.errors import ConfigError


def _write(tmp, text):
    p = os.path.join(tmp, ".tree-delta.yml")
    with open(p, "w", encoding="utf-8") as f:
        f.write(text)
    return p


def test_defaults_when_missing():
    cfg = load_config("does/not/exist.yml")
    assert cfg["padding"] == 1250
    assert cfg["svg"] == {"node_radius": 50, "stroke_width": 20}


def test_partial_config_merges_over_defaults():
    with tempfile.TemporaryDirectory() as tmp:
        cfg = load_config(_write(tmp, "padding: 300\nsvg:\n  node_radius: 8\n"))
    assert cfg["padding"] == 300
    assert cfg["svg"] == {"node_radius": 8, "stroke_width": 20}
    assert cfg["output_dir"] == "out"


def test_malformed_yaml_falls_back_to_defaults():
    with tempfile.TemporaryDirectory() as tmp:
        cfg = load_config(_write(tmp, "padding: [1, 2\n"))
    assert cfg["padding"] == 1250


def test_config_validate_suggestions():
    errs = validate_config_dict({"paddin": 10})
    assert any("did you mean 'padding'" in e for e in errs)


def test_config_validate_nested_suggestions():
    errs = validate_config_dict({"svg": {"node_radus": 3}})
    assert any("did you mean 'node_radius'" in e for e in errs)


def test_config_validate_rejects_negative_padding():
    assert validate_config_dict({"padding": -1})
    assert validate_config_dict({"padding": 0, "log_level": "DEBUG"}) == []


def test_load_validated_config_raises():
    with tempfile.TemporaryDirectory() as tmp:
        with pytest.raises(ConfigError):
            load_validated_config(_write(tmp, "log_level: LOUD\n"))


def test_check_config_file():
    with tempfile.TemporaryDirectory() as tmp:
        assert check_config_file(_write(tmp, "padding: 10\n")) == []
        assert check_config_file(_write(tmp, "- 1\n- 2\n")) == ["config must be a mapping"]
        with pytest.raises(ConfigError):
            check_config_file(_write(tmp, "padding: [1, 2\n"))
