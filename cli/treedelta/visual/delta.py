import html
import os
import pathlib
from typing import Optional

from treedelta.delta.bounds import DEFAULT_PADDING, calculate_bounds
from treedelta.delta.delta import UrlTreeDelta
from treedelta.tree.model import PassiveTree

ACTIVE = "#888"
ADDED = "#0a0"
REMOVED = "#a00"


def _num(v: float) -> str:
    return f"{v:g}"


def delta_svg(
    delta: UrlTreeDelta,
    tree: PassiveTree,
    padding: float = DEFAULT_PADDING,
    node_radius: float = 50,
    stroke_width: float = 20,
) -> str:
    rect = calculate_bounds(delta, tree, padding=padding)
    # bounds are anchored to the view box; the drawing uses raw tree coordinates
    vx = rect.x + tree.view_box.x
    vy = rect.y + tree.view_box.y
    svg = [
        '<svg xmlns="http://www.w3.org/2000/svg" '
        f'viewBox="{_num(vx)} {_num(vy)} {_num(rect.width)} {_num(rect.height)}">'
    ]

    by_id = {c.id: c for c in tree.connections}
    svg.append(f'<g stroke-width="{_num(stroke_width)}" stroke-linecap="round">')
    for ids, color in (
        (delta.connections_active, ACTIVE),
        (delta.connections_removed, REMOVED),
        (delta.connections_added, ADDED),
    ):
        for cid in ids:
            conn = by_id[cid]
            na, nb = tree.node(conn.a), tree.node(conn.b)
            svg.append(
                f'<line x1="{_num(na.x)}" y1="{_num(na.y)}" x2="{_num(nb.x)}" y2="{_num(nb.y)}" '
                f'stroke="{color}" data-id="{html.escape(cid)}"/>'
            )
    svg.append("</g>")

    svg.append("<g>")
    for ids, color in (
        (delta.nodes_active, ACTIVE),
        (delta.nodes_removed, REMOVED),
        (delta.nodes_added, ADDED),
    ):
        for nid in ids:
            node = tree.node(nid)
            circle = (
                f'<circle cx="{_num(node.x)}" cy="{_num(node.y)}" r="{_num(node_radius)}" '
                f'fill="{color}" data-id="{html.escape(nid)}"'
            )
            mastery = delta.mastery_infos.get(nid)
            if mastery is None:
                svg.append(circle + "/>")
            else:
                svg.append(circle + f"><title>{html.escape(mastery.info)}</title></circle>")
    svg.append("</g>")
    svg.append("</svg>")
    return "\n".join(svg)


def write_delta_svg(
    delta: UrlTreeDelta,
    tree: PassiveTree,
    out_path: str,
    padding: Optional[float] = None,
    **style,
) -> str:
    svg = delta_svg(delta, tree, padding=DEFAULT_PADDING if padding is None else padding, **style)
    os.makedirs(pathlib.Path(out_path).parent, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(svg)
    return out_path
