import itertools

import pytest

from treedelta.delta.delta import UrlTreeDelta, build_url_tree_delta
from treedelta.errors import DataIntegrityError
from treedelta.tree.loader import passive_tree_from_dict
from treedelta.tree.model import Connection, UrlTree

DEFAULT_CONNECTIONS = [
    {"a": "A", "b": "B"},
    {"a": "B", "b": "C"},
    {"a": "C", "b": "M"},
    {"a": "D", "b": "A"},
]


def _tree(connections=None):
    return passive_tree_from_dict(
        {
            "nodes": {
                "A": {"x": 0, "y": 0},
                "B": {"x": 100, "y": 0},
                "C": {"x": 100, "y": 100},
                "D": {"x": 0, "y": 100},
                "M": {"x": 200, "y": 100, "mastery": True},
            },
            "connections": connections if connections is not None else DEFAULT_CONNECTIONS,
            "masteryEffects": {
                "1": {"stats": ["+10 to Strength"]},
                "2": {"stats": ["+5% Life", "+5% Mana"]},
            },
            "viewBox": {"x": 0, "y": 0},
        }
    )


def test_worked_example():
    tree = _tree([{"a": "A", "b": "B"}, {"a": "B", "b": "C"}])
    d = build_url_tree_delta(UrlTree(("B", "C")), UrlTree(("A", "B")), tree)
    assert d.nodes_active == ("B",)
    assert d.nodes_added == ("C",)
    assert d.nodes_removed == ("A",)
    assert d.connections_active == ()
    assert d.connections_added == ("B-C",)
    assert d.connections_removed == ("A-B",)
    assert d.mastery_infos == {}


def test_node_sets_partition_union():
    tree = _tree()
    ids = ["A", "B", "C", "D", "M"]
    for cur_n, prev_n in itertools.product(range(6), repeat=2):
        for cur in itertools.combinations(ids, cur_n):
            prev = tuple(reversed(ids))[:prev_n]
            d = build_url_tree_delta(UrlTree(cur), UrlTree(prev), tree)
            active, added, removed = set(d.nodes_active), set(d.nodes_added), set(d.nodes_removed)
            assert not active & added and not active & removed and not added & removed
            assert active | added | removed == set(cur) | set(prev)
            assert not set(d.connections_added) & set(d.connections_removed)


def test_same_mastery_choice_is_active():
    tree = _tree()
    cur = UrlTree(("C", "M"), {"M": "1"})
    prev = UrlTree(("C", "M"), {"M": "1"})
    d = build_url_tree_delta(cur, prev, tree)
    assert set(d.nodes_active) == {"C", "M"}
    assert d.connections_active == ("C-M",)
    assert d.mastery_infos["M"].info == "+10 to Strength"


def test_changed_mastery_choice_is_not_active():
    tree = _tree()
    cur = UrlTree(("C", "M"), {"M": "2"})
    prev = UrlTree(("C", "M"), {"M": "1"})
    d = build_url_tree_delta(cur, prev, tree)
    assert "M" not in d.nodes_active
    assert d.nodes_added == ("M",)
    assert d.nodes_removed == ()
    assert d.connections_added == ("C-M",)
    # current choice wins
    assert d.mastery_infos["M"].info == "+5% Life\n+5% Mana"


def test_newly_chosen_mastery_counts_as_changed():
    tree = _tree()
    d = build_url_tree_delta(UrlTree(("M",), {"M": "1"}), UrlTree(("M",)), tree)
    assert d.nodes_added == ("M",)
    assert d.nodes_active == ()


def test_mastery_infos_cover_both_builds():
    tree = _tree()
    cur = UrlTree(("M",), {"M": "2"})
    prev = UrlTree(("D",), {"D": "1"})
    d = build_url_tree_delta(cur, prev, tree)
    assert set(d.mastery_infos) == {"M", "D"}
    assert d.mastery_infos["D"].info == "+10 to Strength"


def test_inputs_not_mutated():
    tree = _tree()
    cur = UrlTree(("B", "M"), {"M": "2"})
    prev = UrlTree(("A", "B", "M"), {"M": "1"})
    build_url_tree_delta(cur, prev, tree)
    assert prev.nodes == ("A", "B", "M")
    assert prev.mastery_lookup == {"M": "1"}
    assert cur.nodes == ("B", "M")


def test_connection_classification_symmetric():
    forward = _tree([{"a": "A", "b": "B"}, {"a": "B", "b": "C"}, {"a": "C", "b": "M"}])
    backward = _tree([{"a": "B", "b": "A"}, {"a": "C", "b": "B"}, {"a": "M", "b": "C"}])
    cur, prev = UrlTree(("B", "C", "M")), UrlTree(("A", "B"))
    assert build_url_tree_delta(cur, prev, forward) == build_url_tree_delta(cur, prev, backward)
    assert Connection("M", "C").id == Connection("C", "M").id == "C-M"


def test_added_to_removed_edge_is_unclassified():
    tree = _tree([{"a": "A", "b": "B"}])
    d = build_url_tree_delta(UrlTree(("B",)), UrlTree(("A",)), tree)
    assert d.nodes_added == ("B",) and d.nodes_removed == ("A",)
    assert d.connections_active == d.connections_added == d.connections_removed == ()


def test_order_follows_builds():
    tree = _tree()
    d = build_url_tree_delta(UrlTree(("M", "C", "B")), UrlTree(("D", "C", "B", "A")), tree)
    assert d.nodes_active == ("C", "B")
    assert d.nodes_added == ("M",)
    assert d.nodes_removed == ("D", "A")


def test_unknown_effect_raises():
    tree = _tree()
    with pytest.raises(DataIntegrityError) as e:
        build_url_tree_delta(UrlTree(("M",), {"M": "999"}), UrlTree(), tree)
    assert "999" in str(e.value)


def test_unknown_node_raises():
    tree = _tree()
    with pytest.raises(KeyError):
        build_url_tree_delta(UrlTree(("Z",)), UrlTree(), tree)


def test_to_dict_from_dict():
    tree = _tree()
    d = build_url_tree_delta(UrlTree(("B", "C")), UrlTree(("A", "B"), {}), tree)
    data = d.to_dict()
    assert data["nodesAdded"] == ["C"]
    assert data["connectionsRemoved"] == ["A-B"]
    assert UrlTreeDelta.from_dict(data) == d
