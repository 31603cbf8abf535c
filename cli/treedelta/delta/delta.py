import logging
from dataclasses import dataclass, field
from typing import Dict, Any, Tuple, Mapping

from treedelta.tree.model import PassiveTree, UrlTree

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MasteryInfo:
    info: str


@dataclass(frozen=True)
class UrlTreeDelta:
    """
    Classification of nodes and connections between two builds.

    nodes_*        node ids, pairwise disjoint
    connections_*  connection ids ("<lo>-<hi>"), in passive tree order
    mastery_infos  node id -> stat text of the chosen effect, for every
                   mastery touched by either build
    """

    nodes_active: Tuple[str, ...] = ()
    nodes_added: Tuple[str, ...] = ()
    nodes_removed: Tuple[str, ...] = ()
    connections_active: Tuple[str, ...] = ()
    connections_added: Tuple[str, ...] = ()
    connections_removed: Tuple[str, ...] = ()
    mastery_infos: Mapping[str, MasteryInfo] = field(default_factory=dict)

    @property
    def is_unchanged(self) -> bool:
        return not self.nodes_added and not self.nodes_removed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodesActive": list(self.nodes_active),
            "nodesAdded": list(self.nodes_added),
            "nodesRemoved": list(self.nodes_removed),
            "connectionsActive": list(self.connections_active),
            "connectionsAdded": list(self.connections_added),
            "connectionsRemoved": list(self.connections_removed),
            "masteryInfos": {nid: {"info": m.info} for nid, m in self.mastery_infos.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UrlTreeDelta":
        return cls(
            nodes_active=tuple(data.get("nodesActive", [])),
            nodes_added=tuple(data.get("nodesAdded", [])),
            nodes_removed=tuple(data.get("nodesRemoved", [])),
            connections_active=tuple(data.get("connectionsActive", [])),
            connections_added=tuple(data.get("connectionsAdded", [])),
            connections_removed=tuple(data.get("connectionsRemoved", [])),
            mastery_infos={
                nid: MasteryInfo(meta.get("info", ""))
                for nid, meta in (data.get("masteryInfos") or {}).items()
            },
        )


def _mastery_infos(
    current: UrlTree, previous: UrlTree, tree: PassiveTree
) -> Dict[str, MasteryInfo]:
    infos: Dict[str, MasteryInfo] = {}
    # previous first so the current choice wins
    for lookup in (previous.mastery_lookup, current.mastery_lookup):
        for node_id, effect_id in lookup.items():
            infos[node_id] = MasteryInfo("\n".join(tree.mastery_effect(effect_id).stats))
    return infos


def build_url_tree_delta(current: UrlTree, previous: UrlTree, tree: PassiveTree) -> UrlTreeDelta:
    """
    Diff two builds of the same passive tree.

    A mastery whose chosen effect differs between the builds is dropped from
    the previous side before intersecting, so it reports as added rather than
    active. Neither input is modified.
    """
    for node_id in (*current.nodes, *previous.nodes):
        tree.node(node_id)

    cur_nodes = dict.fromkeys(current.nodes)
    prev_nodes = dict.fromkeys(previous.nodes)
    for node_id, effect_id in current.mastery_lookup.items():
        if previous.mastery_lookup.get(node_id) != effect_id:
            prev_nodes.pop(node_id, None)

    mastery_infos = _mastery_infos(current, previous, tree)

    active = tuple(n for n in prev_nodes if n in cur_nodes)
    added = tuple(n for n in cur_nodes if n not in prev_nodes)
    removed = tuple(n for n in prev_nodes if n not in cur_nodes)
    active_set, added_set, removed_set = set(active), set(added), set(removed)

    conns_active, conns_added, conns_removed = [], [], []
    for conn in tree.connections:
        a, b = conn.a, conn.b
        a_active, b_active = a in active_set, b in active_set
        if a_active and b_active:
            conns_active.append(conn.id)

        a_added, b_added = a in added_set, b in added_set
        if (a_added and (b_added or b_active)) or (b_added and (a_added or a_active)):
            conns_added.append(conn.id)

        a_removed, b_removed = a in removed_set, b in removed_set
        if (a_removed and (b_removed or b_active)) or (b_removed and (a_removed or a_active)):
            conns_removed.append(conn.id)

    logger.debug(
        "delta: nodes %d active / %d added / %d removed, connections %d / %d / %d",
        len(active),
        len(added),
        len(removed),
        len(conns_active),
        len(conns_added),
        len(conns_removed),
    )
    return UrlTreeDelta(
        nodes_active=active,
        nodes_added=added,
        nodes_removed=removed,
        connections_active=tuple(conns_active),
        connections_added=tuple(conns_added),
        connections_removed=tuple(conns_removed),
        mastery_infos=mastery_infos,
    )
