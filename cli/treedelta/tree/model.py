"""
Passive tree data model.

The passive tree is the static graph every build is drawn on: nodes with
coordinates, undirected connections between them, the catalogue of mastery
effects and the view box the renderer anchors to. A ``UrlTree`` is one build
state on top of it (the node ids that are allocated plus the effect chosen on
each allocated mastery).

All types are frozen; loaders in ``treedelta.tree.loader`` build them from
the camelCase JSON the web client ships.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Tuple, Mapping

from treedelta.errors import DataIntegrityError


@dataclass(frozen=True)
class Node:
    node_id: str
    x: float
    y: float
    name: str = ""
    mastery: bool = False


@dataclass(frozen=True)
class Connection:
    """Undirected edge; ``id`` is the same whichever way round a and b are."""

    a: str
    b: str

    @property
    def id(self) -> str:
        return "-".join(sorted([self.a, self.b]))


@dataclass(frozen=True)
class MasteryEffect:
    effect_id: str
    stats: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ViewBox:
    x: float = 0.0
    y: float = 0.0
    width: Optional[float] = None
    height: Optional[float] = None


@dataclass(frozen=True)
class PassiveTree:
    nodes: Mapping[str, Node]
    connections: Tuple[Connection, ...] = ()
    mastery_effects: Mapping[str, MasteryEffect] = field(default_factory=dict)
    view_box: ViewBox = ViewBox()

    def node(self, node_id: str) -> Node:
        try:
            return self.nodes[node_id]
        except KeyError:
            raise DataIntegrityError("node", node_id) from None

    def mastery_effect(self, effect_id: str) -> MasteryEffect:
        try:
            return self.mastery_effects[effect_id]
        except KeyError:
            raise DataIntegrityError("mastery effect", effect_id) from None

    def to_dict(self) -> Dict[str, Any]:
        view_box: Dict[str, Any] = {"x": self.view_box.x, "y": self.view_box.y}
        if self.view_box.width is not None:
            view_box["width"] = self.view_box.width
        if self.view_box.height is not None:
            view_box["height"] = self.view_box.height
        return {
            "nodes": {
                nid: {"x": n.x, "y": n.y, "name": n.name, "mastery": n.mastery}
                for nid, n in self.nodes.items()
            },
            "connections": [{"a": c.a, "b": c.b} for c in self.connections],
            "masteryEffects": {
                eid: {"stats": list(e.stats)} for eid, e in self.mastery_effects.items()
            },
            "viewBox": view_box,
        }


@dataclass(frozen=True)
class UrlTree:
    """One build state: allocated node ids plus chosen mastery effects."""

    nodes: Tuple[str, ...] = ()
    mastery_lookup: Mapping[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"nodes": list(self.nodes), "masteryLookup": dict(self.mastery_lookup)}
