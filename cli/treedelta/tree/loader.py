import json
import logging
from typing import Dict, Any, List

from jsonschema import Draft202012Validator

from treedelta.delta.delta import UrlTreeDelta
from treedelta.errors import DataIntegrityError, TreeFormatError
from treedelta.tree.model import (
    Connection,
    MasteryEffect,
    Node,
    PassiveTree,
    UrlTree,
    ViewBox,
)

logger = logging.getLogger(__name__)

PASSIVE_TREE_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "nodes": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {
                    "x": {"type": "number"},
                    "y": {"type": "number"},
                    "name": {"type": "string"},
                    "mastery": {"type": "boolean"},
                },
                "required": ["x", "y"],
            },
        },
        "connections": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {"a": {"type": "string"}, "b": {"type": "string"}},
                "required": ["a", "b"],
            },
        },
        "masteryEffects": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {"stats": {"type": "array", "items": {"type": "string"}}},
                "required": ["stats"],
            },
        },
        "viewBox": {
            "type": "object",
            "properties": {
                "x": {"type": "number"},
                "y": {"type": "number"},
                "w": {"type": "number"},
                "h": {"type": "number"},
                "width": {"type": "number"},
                "height": {"type": "number"},
            },
            "required": ["x", "y"],
        },
    },
    "required": ["nodes", "connections"],
}

URL_TREE_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "nodes": {
            "oneOf": [
                {"type": "array", "items": {"type": "string"}},
                {"type": "string"},
            ]
        },
        "masteryLookup": {
            "type": "object",
            "additionalProperties": {"type": "string"},
        },
    },
    "required": ["nodes"],
}

_ID_LIST = {"type": "array", "items": {"type": "string"}}

URL_TREE_DELTA_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "nodesActive": _ID_LIST,
        "nodesAdded": _ID_LIST,
        "nodesRemoved": _ID_LIST,
        "connectionsActive": _ID_LIST,
        "connectionsAdded": _ID_LIST,
        "connectionsRemoved": _ID_LIST,
        "masteryInfos": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {"info": {"type": "string"}},
                "required": ["info"],
            },
        },
    },
}


def _schema_errors(schema: Dict[str, Any], data: Any) -> List[str]:
    validator = Draft202012Validator(schema)
    errors = []
    found = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
    for err in found:
        where = "/".join(str(p) for p in err.absolute_path)
        errors.append(f"{where}: {err.message}" if where else err.message)
    return errors


def _read_json(path: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise TreeFormatError(path, [f"invalid JSON: {e}"]) from e


def passive_tree_from_dict(data: Dict[str, Any], source: str = "<passive tree>") -> PassiveTree:
    errors = _schema_errors(PASSIVE_TREE_SCHEMA, data)
    if errors:
        raise TreeFormatError(source, errors)

    nodes = {
        str(nid): Node(
            node_id=str(nid),
            x=float(meta["x"]),
            y=float(meta["y"]),
            name=meta.get("name", ""),
            mastery=bool(meta.get("mastery", False)),
        )
        for nid, meta in data["nodes"].items()
    }

    connections = []
    for c in data["connections"]:
        for end in (c["a"], c["b"]):
            if end not in nodes:
                raise DataIntegrityError("node", end)
        connections.append(Connection(c["a"], c["b"]))

    effects = {
        str(eid): MasteryEffect(effect_id=str(eid), stats=tuple(meta["stats"]))
        for eid, meta in (data.get("masteryEffects") or {}).items()
    }

    vb = data.get("viewBox") or {"x": 0, "y": 0}
    view_box = ViewBox(
        x=float(vb["x"]),
        y=float(vb["y"]),
        width=vb.get("width", vb.get("w")),
        height=vb.get("height", vb.get("h")),
    )

    logger.debug(
        "loaded passive tree from %s: %d nodes, %d connections, %d mastery effects",
        source,
        len(nodes),
        len(connections),
        len(effects),
    )
    return PassiveTree(
        nodes=nodes,
        connections=tuple(connections),
        mastery_effects=effects,
        view_box=view_box,
    )


def url_tree_from_dict(data: Dict[str, Any], source: str = "<url tree>") -> UrlTree:
    errors = _schema_errors(URL_TREE_SCHEMA, data)
    if errors:
        raise TreeFormatError(source, errors)
    raw = data["nodes"]
    if isinstance(raw, str):
        # URL form: "12,345,678"
        raw = [part.strip() for part in raw.split(",") if part.strip()]
    # keep first occurrence, drop repeats
    nodes = tuple(dict.fromkeys(raw))
    return UrlTree(nodes=nodes, mastery_lookup=dict(data.get("masteryLookup") or {}))


def load_passive_tree(path: str) -> PassiveTree:
    return passive_tree_from_dict(_read_json(path), source=path)


def load_url_tree(path: str) -> UrlTree:
    return url_tree_from_dict(_read_json(path), source=path)


def url_tree_delta_from_dict(data: Any, source: str = "<delta>") -> UrlTreeDelta:
    """Accepts a bare delta or the ``{"delta": ..., "bounds": ...}`` file `tdelta delta` writes."""
    if isinstance(data, dict) and "delta" in data:
        data = data["delta"]
    errors = _schema_errors(URL_TREE_DELTA_SCHEMA, data)
    if errors:
        raise TreeFormatError(source, errors)
    return UrlTreeDelta.from_dict(data)


def load_url_tree_delta(path: str) -> UrlTreeDelta:
    return url_tree_delta_from_dict(_read_json(path), source=path)
