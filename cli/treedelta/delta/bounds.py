import logging
from dataclasses import dataclass, asdict
from typing import Dict, Iterable

from treedelta.delta.delta import UrlTreeDelta
from treedelta.errors import EmptyBoundsError
from treedelta.tree.model import PassiveTree

logger = logging.getLogger(__name__)

DEFAULT_PADDING = 1250


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def _focus_nodes(delta: UrlTreeDelta) -> Iterable[str]:
    # an unchanged build frames the whole selection, otherwise only what changed
    if delta.is_unchanged:
        return delta.nodes_active
    return (*delta.nodes_added, *delta.nodes_removed)


def calculate_bounds(
    delta: UrlTreeDelta, tree: PassiveTree, padding: float = DEFAULT_PADDING
) -> Rect:
    """Padded box around the delta's focus nodes, anchored to the tree's view box."""
    node_ids = list(_focus_nodes(delta))
    if not node_ids:
        raise EmptyBoundsError("delta has no nodes to bound")

    nodes = [tree.node(nid) for nid in node_ids]
    min_x = min(n.x for n in nodes)
    min_y = min(n.y for n in nodes)
    max_x = max(n.x for n in nodes)
    max_y = max(n.y for n in nodes)

    rect = Rect(
        x=min_x - padding - tree.view_box.x,
        y=min_y - padding - tree.view_box.y,
        width=max_x - min_x + padding * 2,
        height=max_y - min_y + padding * 2,
    )
    logger.debug("bounds over %d nodes: %s", len(nodes), rect)
    return rect
