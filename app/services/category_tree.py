"""
Tree operations over a flat list of categories.

Categories are persisted as a flat table with a nullable ``parent_id``; the
functions here turn such a list into a forest and answer structural
questions about it without issuing recursive queries.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set

from app.schemas.categories import CategoryResponse, CategoryTreeNode


def filter_categories(
    categories: Iterable[CategoryResponse],
    search: Optional[str] = None,
    only_roots: bool = False,
) -> List[CategoryResponse]:
    """
    Keep categories whose name contains ``search`` (case-insensitive) and,
    when ``only_roots`` is set, that have no parent. Order is preserved.
    """
    needle = (search or "").strip().lower()
    result = []
    for category in categories:
        if needle and needle not in category.name.lower():
            continue
        if only_roots and category.parent_id:
            continue
        result.append(category)
    return result


def build_category_tree(categories: Sequence[CategoryResponse]) -> List[CategoryTreeNode]:
    """
    Build a forest from a flat list.

    Every category becomes exactly one node. A node is attached under its
    parent when the parent is part of ``categories``; otherwise (no parent, or
    the parent was filtered out of the list) it is returned as a root.
    Siblings keep the relative order of the input.
    """
    nodes: Dict[str, CategoryTreeNode] = {}
    for category in categories:
        data = category.model_dump(exclude={"children"})
        nodes[category.id] = CategoryTreeNode(**data, children=[])

    roots: List[CategoryTreeNode] = []
    for category in categories:
        node = nodes[category.id]
        parent = nodes.get(category.parent_id) if category.parent_id else None
        if parent is not None and parent is not node:
            parent.children.append(node)
        else:
            roots.append(node)
    return roots


def count_nodes(forest: Iterable[CategoryTreeNode]) -> int:
    """
    Total number of nodes in ``forest``.
    """
    total = 0
    stack = list(forest)
    while stack:
        node = stack.pop()
        total += 1
        stack.extend(node.children)
    return total


def collect_descendant_ids(parent_map: Mapping[str, Optional[str]], category_id: str) -> Set[str]:
    """
    IDs of every category below ``category_id``.

    ``parent_map`` maps each category id to its parent id.
    """
    children: Dict[str, List[str]] = {}
    for child_id, parent_id in parent_map.items():
        if parent_id is not None:
            children.setdefault(parent_id, []).append(child_id)

    found: Set[str] = set()
    stack = list(children.get(category_id, []))
    while stack:
        current = stack.pop()
        if current in found:
            continue
        found.add(current)
        stack.extend(children.get(current, []))
    return found


def creates_cycle(parent_map: Mapping[str, Optional[str]], category_id: str, new_parent_id: Optional[str]) -> bool:
    """
    Whether making ``new_parent_id`` the parent of ``category_id`` would make
    the category its own ancestor.

    Walks up from the proposed parent; the walk stops at a root, at an unknown
    id, or on an already corrupted loop that does not involve the category.
    """
    if new_parent_id is None:
        return False

    visited: Set[str] = set()
    current: Optional[str] = new_parent_id
    while current is not None and current not in visited:
        if current == category_id:
            return True
        visited.add(current)
        current = parent_map.get(current)
    return False
