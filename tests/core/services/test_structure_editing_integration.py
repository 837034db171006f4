import random

import pytest

from outline_toolkit.core.models import DropPosition, Operation, OperationKind
from outline_toolkit.core.node_store import check_invariants, collect_ids, find, iter_nodes
from outline_toolkit.core.services.history_service import HistoryService
from outline_toolkit.core.services.structure_editing_service import StructureEditingService
from outline_toolkit.core.session import EditSession


def _random_operation(rng, tree):
    """Pick a plausible operation, sometimes with stale or wrong ids."""
    ids = sorted(collect_ids(tree)) + ["ghost"]
    parents = {n.id: (p.id if p else None) for n, p, _d in iter_nodes(tree)}
    kind = rng.choice(list(OperationKind))
    target = rng.choice(ids)
    parent = parents.get(target) if rng.random() < 0.8 else rng.choice(ids)
    if kind is OperationKind.MOVE_TO:
        return Operation(
            kind,
            dragged_id=target,
            target_anchor_id=rng.choice(ids),
            drop_position=rng.choice(list(DropPosition)),
        )
    if kind is OperationKind.UPDATE:
        return Operation(kind, target, updates={"text": rng.choice(["", "x", "# h"]), "expanded": rng.choice([True, False])})
    return Operation(kind, target, parent, new_text=rng.choice([None, "typed"]))


@pytest.fixture
def seed_tree(build):
    return build([
        {"id": "a", "children": [
            {"id": "b", "children": [{"id": "e"}, {"id": "g", "expanded": False, "children": [{"id": "h"}]}]},
            {"id": "c"},
            {"id": "d"},
        ]},
        {"id": "f", "children": [{"id": "i"}]},
    ])


@pytest.mark.parametrize("seed", range(8))
def test_random_operation_sequences_preserve_invariants(seed, seed_tree, sequential_ids):
    rng = random.Random(seed)
    service = StructureEditingService(id_factory=sequential_ids)
    tree = seed_tree

    for _ in range(150):
        before_ids = collect_ids(tree)
        snapshot = [n.copy() for n in tree]
        op = _random_operation(rng, tree)

        result = service.apply(tree, op)

        assert check_invariants(result.tree) == [], op
        # The input forest is never mutated
        assert tree == snapshot, op
        if not result.changed:
            assert result.tree is tree
        # Only add/delete change the id set
        if op.kind not in (OperationKind.ADD_SIBLING, OperationKind.ADD_SIBLING_BEFORE,
                           OperationKind.ADD_CHILD, OperationKind.DELETE):
            assert collect_ids(result.tree) == before_ids, op
        tree = result.tree


@pytest.mark.parametrize("kind", list(OperationKind))
def test_stale_target_is_noop_for_every_kind(kind, seed_tree):
    service = StructureEditingService()
    op = Operation(kind, "ghost", dragged_id="ghost", target_anchor_id="a", drop_position="after")
    result = service.apply(seed_tree, op)
    assert result.changed is False
    assert result.tree is seed_tree


def test_cycle_prevention_for_every_descendant_pair(seed_tree):
    service = StructureEditingService()
    for dragged, _parent, _depth in iter_nodes(seed_tree):
        for target, _p, _d in iter_nodes([dragged]):
            result = service.move_to(seed_tree, dragged.id, target.id, "inside")
            assert result.changed is False
            assert result.tree == seed_tree


def test_indent_outdent_roundtrip_for_every_eligible_node(seed_tree):
    service = StructureEditingService()
    for node, parent, _depth in list(iter_nodes(seed_tree)):
        location = find(seed_tree, node.id)
        if location.index == 0:
            continue
        parent_id = parent.id if parent else None
        indented = service.indent(seed_tree, node.id, parent_id)
        new_parent = find(indented.tree, node.id).parent
        restored = service.outdent(indented.tree, node.id, new_parent.id)

        back = find(restored.tree, node.id)
        assert (back.parent.id if back.parent else None) == parent_id
        assert back.index == location.index
        assert restored.tree == seed_tree


def test_example_indent_then_outdent(build, shape):
    session = EditSession(build([{"id": "a", "text": "Root", "children": [
        {"id": "b", "text": "Child1"},
        {"id": "c", "text": "Child2"},
    ]}]))

    session.dispatch(Operation(OperationKind.INDENT, "c", "a"))
    assert shape(session.tree) == [("a", [("b", [("c", [])])])]

    session.dispatch(Operation(OperationKind.OUTDENT, "c", "b"))
    assert shape(session.tree) == [("a", [("b", []), ("c", [])])]
    assert [n.text for n in session.tree[0].children] == ["Child1", "Child2"]


def test_example_drag_before_non_adjacent(build, shape):
    session = EditSession(build([{"id": "a", "children": [{"id": "c"}, {"id": "b"}, {"id": "d"}]}]))
    result = session.dispatch(Operation(OperationKind.MOVE_TO, dragged_id="b", target_anchor_id="c",
                                        drop_position=DropPosition.BEFORE))
    assert result.focus_id == "b"
    assert shape(session.tree) == [("a", [("b", []), ("c", []), ("d", [])])]


def test_session_undo_walks_back_through_edit_sequence(seed_tree, sequential_ids):
    session = EditSession(
        seed_tree,
        editing_service=StructureEditingService(id_factory=sequential_ids),
        history=HistoryService(max_history=10),
    )
    rng = random.Random(42)
    states = [session.tree]
    while len(states) < 10:
        result = session.dispatch(_random_operation(rng, session.tree))
        if result.changed:
            states.append(session.tree)

    # Walk back to the initial state, then forward again
    for expected in reversed(states[:-1]):
        assert session.undo() == expected
    assert session.undo() is None
    for expected in states[1:]:
        assert session.redo() == expected
    assert session.redo() is None
