import difflib
import logging
import os

import yaml
from jsonschema import Draft202012Validator

from treedelta.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_PATH = ".tree-delta.yml"

SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "padding": {"type": "number", "minimum": 0},
        "output_dir": {"type": "string"},
        "svg": {
            "type": "object",
            "properties": {
                "node_radius": {"type": "number", "exclusiveMinimum": 0},
                "stroke_width": {"type": "number", "exclusiveMinimum": 0},
            },
            "additionalProperties": False,
        },
        "log_level": {"enum": ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]},
    },
    "additionalProperties": False,
}


def default_config() -> dict:
    return {
        "padding": 1250,
        "output_dir": "out",
        "svg": {"node_radius": 50, "stroke_width": 20},
        "log_level": "WARNING",
    }


def load_config(path: str = DEFAULT_PATH) -> dict:
    cfg = default_config()
    if not os.path.exists(path):
        return cfg
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.warning("ignoring malformed config %s: %s", path, e)
        return cfg
    if isinstance(data, dict):
        svg = data.get("svg")
        if isinstance(svg, dict):
            cfg["svg"].update({k: v for k, v in svg.items() if k in cfg["svg"]})
        cfg.update({k: v for k, v in data.items() if k in cfg and k != "svg"})
    return cfg


def validate_config_dict(data: dict) -> list:
    validator = Draft202012Validator(SCHEMA)
    errors = []
    for err in validator.iter_errors(data):
        msg = err.message
        if err.validator == "additionalProperties":
            valid_keys = set(err.schema.get("properties", {}).keys())
            bad_key = sorted(err.instance.keys() - valid_keys)
            if bad_key:
                suggestion = difflib.get_close_matches(bad_key[0], list(valid_keys), n=1)
                if suggestion:
                    msg += f" (did you mean '{suggestion[0]}'?)"
        errors.append(msg)
    return errors


def check_config_file(path: str) -> list:
    """Schema messages for the YAML file at ``path``; ConfigError if it does not parse."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"{path}: {e}") from e
    if not isinstance(data, dict):
        return ["config must be a mapping"]
    return validate_config_dict(data)


def load_validated_config(path: str = DEFAULT_PATH) -> dict:
    """Like load_config, but refuses a config file that fails the schema."""
    if os.path.exists(path):
        errors = check_config_file(path)
        if errors:
            raise ConfigError(f"{path}: " + "; ".join(errors))
    return load_config(path)
