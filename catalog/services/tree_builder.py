"""
Turn the flat category list into a forest.

Everything here is pure and iterative: no I/O, no recursion, no state kept
between calls. Call ``build_forest`` again whenever the flat list changes.
"""

import json
from typing import (
    Collection,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Set,
    Tuple,
)

from catalog.core.constants import DiagnosticKind
from catalog.domain.exceptions import CycleError, NotFoundError
from catalog.schemas.category_schema import CategorySchema
from catalog.schemas.tree_schema import Forest, TreeDiagnostic, TreeNode, VisibleNode


Edge = Tuple[str, Optional[str]]


def build_forest(flat: Iterable[CategorySchema.Out]) -> Forest:
    """
    Build a forest from flat records.

    Roots come out in input order and include declared roots
    (``parent_id is None``), orphans whose parent id is unknown (tagged
    ``orphan``) and members of parent-pointer cycles (tagged
    ``cycle_detected``, detached from their claimed parent). Every input
    record appears exactly once in the output, except later duplicates of
    an id, which are reported and skipped.
    """
    nodes: Dict[str, TreeNode] = {}
    order: List[str] = []
    diagnostics: List[TreeDiagnostic] = []

    for category in flat:
        if category.id in nodes:
            diagnostics.append(
                TreeDiagnostic(
                    kind=DiagnosticKind.DUPLICATE,
                    category_id=category.id,
                    parent_id=category.parent_id,
                    message=f"duplicate id {category.id} ignored",
                )
            )
            continue
        nodes[category.id] = TreeNode(category=category)
        order.append(category.id)

    root_ids: Set[str] = set()
    linked_parent: Dict[str, str] = {}

    for category_id in order:
        node = nodes[category_id]
        parent_id = node.category.parent_id
        if parent_id is None:
            root_ids.add(category_id)
        elif parent_id in nodes:
            nodes[parent_id].children.append(node)
            linked_parent[category_id] = parent_id
        else:
            node.orphan = True
            root_ids.add(category_id)
            diagnostics.append(
                TreeDiagnostic(
                    kind=DiagnosticKind.ORPHAN,
                    category_id=category_id,
                    parent_id=parent_id,
                    message=f"orphan detected: parent {parent_id} of {category_id} does not exist",
                )
            )

    reached = _walk_ids([nodes[i] for i in order if i in root_ids])

    # Anything unreached sits on a cycle or hangs below one.
    resolved: Set[str] = set(reached)
    for start in order:
        if start in resolved:
            continue
        path: List[str] = []
        position: Dict[str, int] = {}
        current: Optional[str] = start
        while current is not None and current not in resolved and current not in position:
            position[current] = len(path)
            path.append(current)
            current = linked_parent.get(current)
        if current is not None and current in position:
            for member in path[position[current]:]:
                _detach_as_cycle_root(nodes, linked_parent, member, diagnostics)
                root_ids.add(member)
        resolved.update(path)

    roots = [nodes[i] for i in order if i in root_ids]
    _assign_depths(roots)
    return Forest(roots=roots, diagnostics=diagnostics)


def _detach_as_cycle_root(
    nodes: Dict[str, TreeNode],
    linked_parent: Dict[str, str],
    member: str,
    diagnostics: List[TreeDiagnostic],
) -> None:
    node = nodes[member]
    claimed = linked_parent.pop(member)
    parent = nodes[claimed]
    parent.children = [child for child in parent.children if child is not node]
    node.cycle_detected = True
    diagnostics.append(
        TreeDiagnostic(
            kind=DiagnosticKind.CYCLE,
            category_id=member,
            parent_id=claimed,
            message=f"cycle broken at node {member} (claimed parent {claimed})",
        )
    )


def _walk_ids(roots: List[TreeNode]) -> Set[str]:
    seen: Set[str] = set()
    stack = list(roots)
    while stack:
        node = stack.pop()
        if node.id in seen:
            continue
        seen.add(node.id)
        stack.extend(node.children)
    return seen


def _assign_depths(roots: List[TreeNode]) -> None:
    stack = [(root, 0) for root in roots]
    while stack:
        node, depth = stack.pop()
        node.depth = depth
        stack.extend((child, depth + 1) for child in node.children)


class TreeBuilder:
    """Stateless wrapper so the builder can be injected like other services."""

    def build(self, flat: Iterable[CategorySchema.Out]) -> Forest:
        return build_forest(flat)


# ---- derived views --------------------------------------------------------
def flatten_forest(forest: Forest) -> List[Edge]:
    """(id, parent id) pairs realized as tree edges, in pre-order."""
    edges: List[Edge] = []
    stack: List[Tuple[TreeNode, Optional[str]]] = [
        (root, None) for root in reversed(forest.roots)
    ]
    while stack:
        node, parent_id = stack.pop()
        edges.append((node.id, parent_id))
        stack.extend((child, node.id) for child in reversed(node.children))
    return edges


def forest_to_json(forest: Forest) -> str:
    """
    Encode the forest as JSON text without recursing per tree level.

    Same document as ``forest.model_dump(by_alias=True)``, but both pydantic
    and the ``json`` module recurse once per nesting level and give up on
    long parent chains, so nodes are written from an explicit stack here.
    ``children`` is the last key of each node so it can be closed later.
    """
    parts: List[str] = ['{"roots":[']
    stack: List[object] = []
    _push_siblings(stack, forest.roots)
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
            continue
        parts.append(_node_head(item))
        stack.append("]}")
        _push_siblings(stack, item.children)
    parts.append('],"diagnostics":')
    parts.append(
        json.dumps([d.model_dump(mode="json", by_alias=True) for d in forest.diagnostics])
    )
    parts.append("}")
    return "".join(parts)


def _push_siblings(stack: List[object], nodes: List[TreeNode]) -> None:
    # pushed in reverse so the first sibling is popped first
    for index in range(len(nodes) - 1, -1, -1):
        stack.append(nodes[index])
        if index:
            stack.append(",")


def _node_head(node: TreeNode) -> str:
    category = json.dumps(node.category.model_dump(mode="json", by_alias=True))
    return (
        f'{{"category":{category},'
        f'"orphan":{json.dumps(node.orphan)},'
        f'"cycleDetected":{json.dumps(node.cycle_detected)},'
        f'"depth":{node.depth},'
        f'"children":['
    )


def visible_nodes(forest: Forest, expanded: Collection[str] = ()) -> List[VisibleNode]:
    """
    Rows of the forest as shown with the given expanded ids.

    Roots are always visible; a node's children are visible only when the
    node itself is visible and listed in ``expanded``.
    """
    rows: List[VisibleNode] = []
    stack: List[Tuple[TreeNode, Optional[str]]] = [
        (root, None) for root in reversed(forest.roots)
    ]
    while stack:
        node, parent_id = stack.pop()
        is_expanded = node.id in expanded
        rows.append(
            VisibleNode(
                id=node.id,
                name=node.category.name,
                parent_id=parent_id,
                depth=node.depth,
                active=node.category.active,
                has_children=bool(node.children),
                expanded=is_expanded,
                orphan=node.orphan,
                cycle_detected=node.cycle_detected,
            )
        )
        if is_expanded:
            stack.extend((child, node.id) for child in reversed(node.children))
    return rows


def ancestor_ids(
    categories: Mapping[str, CategorySchema.Out], category_id: str
) -> List[str]:
    """
    Ids from the immediate parent up to the root, walking parent pointers.

    Stops at a parent id that is not in ``categories`` (orphan chain) and
    raises ``CycleError`` if an id repeats, so the walk never exceeds N steps.
    """
    current = categories.get(category_id)
    if current is None:
        raise NotFoundError(category_id)
    chain: List[str] = []
    seen = {category_id}
    parent_id = current.parent_id
    while parent_id is not None:
        if parent_id in seen:
            raise CycleError(category_id, parent_id)
        parent = categories.get(parent_id)
        if parent is None:
            break
        seen.add(parent_id)
        chain.append(parent_id)
        parent_id = parent.parent_id
    return chain


def depth_of(categories: Mapping[str, CategorySchema.Out], category_id: str) -> int:
    return len(ancestor_ids(categories, category_id))


def children_index(categories: Mapping[str, CategorySchema.Out]) -> Dict[str, List[str]]:
    index: Dict[str, List[str]] = {}
    for category in categories.values():
        if category.parent_id is not None:
            index.setdefault(category.parent_id, []).append(category.id)
    return index


def subtree_height(categories: Mapping[str, CategorySchema.Out], category_id: str) -> int:
    """Edges on the longest downward path from ``category_id``; 0 for a leaf."""
    index = children_index(categories)
    height = 0
    seen = {category_id}
    stack = [(category_id, 0)]
    while stack:
        current, level = stack.pop()
        height = max(height, level)
        for child_id in index.get(current, ()):
            if child_id not in seen:
                seen.add(child_id)
                stack.append((child_id, level + 1))
    return height
