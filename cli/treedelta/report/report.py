from typing import Optional

from treedelta.delta.bounds import Rect
from treedelta.delta.delta import UrlTreeDelta
from treedelta.tree.model import PassiveTree


def _label(node_id: str, tree: Optional[PassiveTree]) -> str:
    if tree is not None and node_id in tree.nodes and tree.nodes[node_id].name:
        return f"`{node_id}` {tree.nodes[node_id].name}"
    return f"`{node_id}`"


def make_delta_report_md(
    delta: UrlTreeDelta, tree: Optional[PassiveTree] = None, bounds: Optional[Rect] = None
) -> str:
    md = ["# Tree Delta", "", "| | nodes | connections |", "|---|---|---|"]
    md.append(f"| active | {len(delta.nodes_active)} | {len(delta.connections_active)} |")
    md.append(f"| added | {len(delta.nodes_added)} | {len(delta.connections_added)} |")
    md.append(f"| removed | {len(delta.nodes_removed)} | {len(delta.connections_removed)} |")
    if delta.is_unchanged:
        md.append("\nNo changes.")
    md.append("\n## Added")
    md += [f"- {_label(n, tree)}" for n in delta.nodes_added] or ["- none"]
    md.append("\n## Removed")
    md += [f"- {_label(n, tree)}" for n in delta.nodes_removed] or ["- none"]
    if delta.mastery_infos:
        md.append("\n## Masteries")
        for nid, mastery in delta.mastery_infos.items():
            md.append(f"- {_label(nid, tree)}")
            for line in mastery.info.splitlines():
                md.append(f"  - {line}")
    if bounds is not None:
        md.append("\n## Viewport")
        md.append(
            f"- x={bounds.x:g} y={bounds.y:g} width={bounds.width:g} height={bounds.height:g}"
        )
    return "\n".join(md) + "\n"
