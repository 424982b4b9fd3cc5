"""Tests for webform_migration.services.hierarchy."""

import itertools

from conftest import php, record
from webform_migration.models.form import TargetFieldDefinition
from webform_migration.services.field_mapper import FieldTypeMapper
from webform_migration.services.hierarchy import HierarchyBuilder


def definition(key: str, target_type: str = "textfield") -> TargetFieldDefinition:
    return TargetFieldDefinition(key=key, label=key, target_type=target_type)


def shape(elements):
    """Reduce a tree to (key, type, children) tuples for comparison."""
    return [
        (key, element.target_type, shape(element.children))
        for key, element in elements.items()
    ]


class TestHierarchyBuilder:

    def test_flat_rows_stay_at_root_in_id_order(self):
        tree = HierarchyBuilder().build([
            (3, 0, definition("c")),
            (1, 0, definition("a")),
            (2, 0, definition("b")),
        ])
        assert list(tree) == ["a", "b", "c"]

    def test_child_moves_under_parent(self):
        tree = HierarchyBuilder().build([
            (1, 0, definition("details", "fieldset")),
            (2, 1, definition("email")),
            (3, 0, definition("notes")),
        ])
        assert list(tree) == ["details", "notes"]
        assert list(tree["details"].children) == ["email"]

    def test_children_in_ascending_id_order(self):
        tree = HierarchyBuilder().build([
            (1, 0, definition("group")),
            (5, 1, definition("late")),
            (2, 1, definition("early")),
        ])
        assert list(tree["group"].children) == ["early", "late"]

    def test_order_independent(self):
        rows = [
            (1, 0, definition("page", "wizard_page")),
            (2, 0, definition("group", "fieldset")),
            (3, 2, definition("first")),
            (4, 2, definition("second")),
            (5, 0, definition("last")),
        ]
        expected = shape(HierarchyBuilder().build(rows))
        for permutation in itertools.permutations(rows):
            assert shape(HierarchyBuilder().build(list(permutation))) == expected

    def test_self_parent_stays_at_root(self):
        tree = HierarchyBuilder().build([
            (1, 0, definition("a")),
            (2, 2, definition("loop")),
        ])
        assert list(tree) == ["a", "loop"]
        assert tree["loop"].children == {}

    def test_missing_parent_stays_at_root(self):
        tree = HierarchyBuilder().build([
            (1, 0, definition("a")),
            (2, 99, definition("orphan")),
        ])
        assert list(tree) == ["a", "orphan"]

    def test_cycle_members_stay_at_root(self):
        tree = HierarchyBuilder().build([
            (1, 2, definition("x")),
            (2, 1, definition("y")),
            (3, 1, definition("z")),
        ])
        assert list(tree) == ["x", "y"]
        assert list(tree["x"].children) == ["z"]

    def test_nested_groups(self):
        tree = HierarchyBuilder().build([
            (1, 0, definition("outer")),
            (2, 1, definition("inner")),
            (3, 2, definition("leaf")),
        ])
        assert shape(tree) == [("outer", "textfield", [("inner", "textfield", [("leaf", "textfield", [])])])]

    def test_input_definitions_are_not_mutated(self):
        parent = definition("group")
        HierarchyBuilder().build([(1, 0, parent), (2, 1, definition("child"))])
        assert parent.children == {}

    def test_empty_input(self):
        assert HierarchyBuilder().build([]) == {}


def test_pagebreak_select_and_child_end_to_end():
    """A page break, a single-item multiple select and a text field nested in the select."""
    mapper = FieldTypeMapper()
    records = [
        record(1, "field_1", type="pagebreak"),
        record(2, "field_2", type="select", extra=php({"items": "a", "multiple": 1})),
        record(3, "field_3", type="textfield", pid=2),
    ]
    tree = HierarchyBuilder().build(
        (r.legacy_id, r.parent_legacy_id, mapper.map(r)) for r in records
    )
    assert shape(tree) == [
        ("field_1", "wizard_page", []),
        ("field_2", "radios", [("field_3", "textfield", [])]),
    ]
