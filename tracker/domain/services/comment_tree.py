"""Comment tree traversal for cascading deletion.

Comments reference a parent on the same ticket. Deleting a comment
removes every descendant first, children before parents (post-order).
Depth is unbounded; the traversal is iterative and rejects cycles.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from tracker.domain.errors.invariant import InvariantViolatedError
from tracker.domain.models.comment import Comment


def children_index(comments: Iterable[Comment]) -> dict[str | None, list[str]]:
    """Build the parent -> children adjacency relation.

    Children keep their input order so traversal is deterministic.
    """
    index: dict[str | None, list[str]] = defaultdict(list)
    for comment in comments:
        index[comment.parent_id].append(comment.id)
    return dict(index)


def post_order(root_id: str, children: dict[str | None, list[str]]) -> list[str]:
    """Return root and all descendants, every child before its parent.

    Args:
        root_id: Comment to start from.
        children: Adjacency relation from children_index().

    Returns:
        Comment ids in deletion order; root_id is last.

    Raises:
        InvariantViolatedError: If the parent chain contains a cycle.
    """
    result: list[str] = []
    visited: set[str] = {root_id}
    stack: list[tuple[str, bool]] = [(root_id, False)]

    while stack:
        node, expanded = stack.pop()
        if expanded:
            result.append(node)
            continue
        stack.append((node, True))
        for child in reversed(children.get(node, [])):
            if child in visited:
                raise InvariantViolatedError(
                    f"Comment reply chain contains a cycle at {child}"
                )
            visited.add(child)
            stack.append((child, False))

    return result


def forest_post_order(comments: Iterable[Comment]) -> list[str]:
    """Post-order over every tree on a ticket.

    Roots are comments without a parent, or whose parent is not part of
    the given set (already deleted by an interrupted cascade).
    """
    comment_list = list(comments)
    known = {comment.id for comment in comment_list}
    children = children_index(comment_list)
    roots = [
        comment.id
        for comment in comment_list
        if comment.parent_id is None or comment.parent_id not in known
    ]

    order: list[str] = []
    for root in roots:
        order.extend(post_order(root, children))

    if len(order) != len(known):
        # Members of a closed cycle are unreachable from any root
        raise InvariantViolatedError("Comment reply chain contains a cycle")
    return order
