"""Reconstruction of the element tree from parent-linked legacy components."""

import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Tuple

from ..models.form import TargetFieldDefinition

logger = logging.getLogger(__name__)

ROOT_PARENT_ID = 0


@dataclass
class _Node:
    legacy_id: int
    parent_legacy_id: int
    definition: TargetFieldDefinition


class HierarchyBuilder:
    """
    Builds the root-level element mapping from flat (id, parent id, definition) rows.

    Works in two passes over an index keyed by legacy id: first every row is
    resolved to either a parent or the root, then the tree is emitted in
    ascending legacy id order at every level. Input definitions are copied,
    never mutated, so the same rows in any order give the same tree.

    A row stays at the root when its parent id is 0, unknown (a parent that
    was deleted or is not part of this form), or when following parent links
    leads back to the row itself (self-parent or a longer cycle).
    """

    def build(
        self,
        definitions: Iterable[Tuple[int, int, TargetFieldDefinition]]
    ) -> Dict[str, TargetFieldDefinition]:
        """
        Build the element tree.

        Args:
            definitions: (legacy_id, parent_legacy_id, definition) rows, any order

        Returns:
            Root-level elements keyed by element key, ascending by legacy id
        """
        index = self._index(definitions)
        parents = self._resolve_parents(index)

        children_of: Dict[int, List[int]] = {}
        roots: List[int] = []
        for legacy_id in sorted(index):
            parent_id = parents[legacy_id]
            if parent_id == ROOT_PARENT_ID:
                roots.append(legacy_id)
            else:
                children_of.setdefault(parent_id, []).append(legacy_id)

        return self._emit(roots, index, children_of)

    def _index(
        self,
        definitions: Iterable[Tuple[int, int, TargetFieldDefinition]]
    ) -> Dict[int, _Node]:
        """Index rows by legacy id."""
        index: Dict[int, _Node] = {}
        for legacy_id, parent_legacy_id, definition in definitions:
            if legacy_id in index:
                logger.warning(
                    f"Duplicate legacy id {legacy_id}: '{definition.key}' replaces '{index[legacy_id].definition.key}'"
                )
            index[legacy_id] = _Node(legacy_id, parent_legacy_id or ROOT_PARENT_ID, definition)
        return index

    def _resolve_parents(self, index: Dict[int, _Node]) -> Dict[int, int]:
        """Resolve each row to its effective parent id (ROOT_PARENT_ID for the root)."""
        parents: Dict[int, int] = {}
        for legacy_id, node in index.items():
            parent_id = node.parent_legacy_id
            if parent_id == ROOT_PARENT_ID:
                parents[legacy_id] = ROOT_PARENT_ID
            elif parent_id not in index:
                logger.debug(f"Parent {parent_id} of '{node.definition.key}' not found, keeping it at the root")
                parents[legacy_id] = ROOT_PARENT_ID
            elif self._links_back(legacy_id, index):
                logger.warning(
                    f"Component '{node.definition.key}' (cid {legacy_id}) is its own ancestor, keeping it at the root"
                )
                parents[legacy_id] = ROOT_PARENT_ID
            else:
                parents[legacy_id] = parent_id
        return parents

    def _links_back(self, legacy_id: int, index: Dict[int, _Node]) -> bool:
        """Check whether following parent links from a row returns to it."""
        seen = set()
        current = index[legacy_id].parent_legacy_id
        while current in index and current not in seen:
            if current == legacy_id:
                return True
            seen.add(current)
            current = index[current].parent_legacy_id
        return False

    def _emit(
        self,
        legacy_ids: List[int],
        index: Dict[int, _Node],
        children_of: Dict[int, List[int]]
    ) -> Dict[str, TargetFieldDefinition]:
        """Copy definitions into an ordered mapping, attaching their children."""
        emitted: Dict[str, TargetFieldDefinition] = {}
        for legacy_id in legacy_ids:
            node = index[legacy_id]
            children = self._emit(children_of.get(legacy_id, []), index, children_of)
            if node.definition.key in emitted:
                logger.warning(
                    f"Element key '{node.definition.key}' is used twice at the same level; cid {legacy_id} wins"
                )
            emitted[node.definition.key] = replace(node.definition, children=children)
        return emitted
