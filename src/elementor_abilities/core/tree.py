"""Element tree traversal and targeted replacement.

All functions walk the tree depth-first, pre-order: siblings in their stored
order, each node checked before its children. ``replace_element`` is pure;
the input tree is never modified and only the nodes on the path from the
root to the replaced node are rebuilt.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import replace
from typing import Any

from elementor_abilities.core.models import Document, Element


def iter_elements(document: Sequence[Element]) -> Iterator[tuple[int, Element]]:
    """Yield ``(depth, element)`` for every node in depth-first pre-order."""
    stack: list[tuple[int, Element]] = [(0, element) for element in reversed(document)]
    while stack:
        depth, element = stack.pop()
        yield depth, element
        if element.elements:
            stack.extend((depth + 1, child) for child in reversed(element.elements))


def find_element(document: Sequence[Element], target_id: Any) -> Element | None:
    """Return the first node whose id equals ``target_id``, or None."""
    for _, element in iter_elements(document):
        if element.id is not None and element.id == target_id:
            return element
    return None


def replace_element(
    document: Document,
    target_id: Any,
    replacement: Element,
) -> tuple[Document, bool]:
    """Replace the first node with ``id == target_id`` by ``replacement``.

    Only the first match in depth-first pre-order is replaced; traversal
    stops there, so later nodes sharing the same id are left as they are.
    The replacement is substituted verbatim, its own ``id`` included.

    Args:
        document: Top-level element sequence.
        target_id: Id to look for. Compared with ``==`` against each node's
            id, so ``"5"`` does not match a numeric id ``5``.
        replacement: Node that takes the matched node's place.

    Returns:
        ``(updated_document, found)``. When nothing matches the original
        document object is returned with ``found=False``.
    """
    updated, found = _replace_in(tuple(document), target_id, replacement)
    if not found:
        return document, False
    return updated, True


def _replace_in(
    siblings: tuple[Element, ...],
    target_id: Any,
    replacement: Element,
) -> tuple[tuple[Element, ...], bool]:
    for index, element in enumerate(siblings):
        if element.id is not None and element.id == target_id:
            return siblings[:index] + (replacement,) + siblings[index + 1 :], True
        if element.elements:
            children, found = _replace_in(element.elements, target_id, replacement)
            if found:
                rebuilt = replace(element, elements=children)
                return siblings[:index] + (rebuilt,) + siblings[index + 1 :], True
    return siblings, False
