"""Elementor document model.

An Elementor page is stored in the ``_elementor_data`` post meta as a JSON
array of element nodes. Each node carries an ``id``, an ``elType`` tag and,
for containers, an ``elements`` list of child nodes. Everything else
(``settings``, ``widgetType``, ``isInner``...) is opaque payload that must
survive a decode/encode round trip untouched.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from elementor_abilities.core.errors import EncodingError

ID_KEY = "id"
TYPE_KEY = "elType"
CHILDREN_KEY = "elements"

_RESERVED_KEYS = (ID_KEY, TYPE_KEY, CHILDREN_KEY)


def _is_element_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, Mapping) for item in value)


@dataclass(frozen=True)
class Element:
    """A node of the page layout tree.

    Attributes:
        id: Element id, unique by convention. ``None`` when the node has none.
        el_type: ``elType`` tag (``container``, ``section``, ``widget``...).
        elements: Child nodes, or ``None`` when the node has no child list.
        extra: All other fields, in their original order.
        key_order: Key order of the decoded mapping, used to re-encode it.
    """

    id: Any = None
    el_type: Any = None
    elements: tuple[Element, ...] | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    key_order: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Element:
        """Build an Element from a decoded JSON object.

        ``elements`` is only treated as a child list when it is a list of
        objects; any other value is kept verbatim in ``extra``.
        """
        children: tuple[Element, ...] | None = None
        extra: dict[str, Any] = {}
        for key, value in data.items():
            if key in (ID_KEY, TYPE_KEY):
                continue
            if key == CHILDREN_KEY and _is_element_list(value):
                children = tuple(cls.from_dict(child) for child in value)
                continue
            extra[key] = value
        return cls(
            id=data.get(ID_KEY),
            el_type=data.get(TYPE_KEY),
            elements=children,
            extra=extra,
            key_order=tuple(data.keys()),
        )

    def to_dict(self) -> dict[str, Any]:
        """Encode back to a JSON-ready dict, restoring the original key order."""
        order = self.key_order or self._default_order()
        out: dict[str, Any] = {}
        for key in order:
            if key == ID_KEY:
                out[ID_KEY] = self.id
            elif key == TYPE_KEY:
                out[TYPE_KEY] = self.el_type
            elif key == CHILDREN_KEY and self.elements is not None:
                out[CHILDREN_KEY] = [child.to_dict() for child in self.elements]
            elif key in self.extra:
                out[key] = self.extra[key]
        for key, value in self.extra.items():
            out.setdefault(key, value)
        if self.elements is not None and CHILDREN_KEY not in out:
            out[CHILDREN_KEY] = [child.to_dict() for child in self.elements]
        return out

    def _default_order(self) -> tuple[str, ...]:
        keys = [ID_KEY, TYPE_KEY]
        if self.elements is not None:
            keys.append(CHILDREN_KEY)
        return tuple(keys)


Document = tuple[Element, ...]


def parse_document(value: Any) -> Document:
    """Convert a decoded ``_elementor_data`` value into a Document.

    Raises:
        EncodingError: If the value is not a list of element objects.
    """
    if not _is_element_list(value):
        raise EncodingError("Failed to parse existing Elementor data")
    return tuple(Element.from_dict(item) for item in value)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def loads_json(text: str) -> Any:
    """Decode JSON text, rejecting the NaN and Infinity literals ``json`` allows."""
    return json.loads(text, parse_constant=_reject_constant)


def decode_document(raw_text: str) -> Document:
    """Parse raw ``_elementor_data`` JSON text into a Document."""
    try:
        value = loads_json(raw_text)
    except (TypeError, ValueError) as e:
        raise EncodingError("Failed to parse existing Elementor data", error=str(e)) from e
    return parse_document(value)


def document_to_data(document: Iterable[Element]) -> list[dict[str, Any]]:
    return [element.to_dict() for element in document]


def encode_json(value: Any) -> str:
    """Serialize a value the way Elementor data is stored (compact, UTF-8).

    Raises:
        EncodingError: If the value is not JSON-serializable (including NaN
            and infinities, which JSON cannot represent).
    """
    try:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as e:
        raise EncodingError("Failed to encode data to JSON", error=str(e)) from e


def encode_document(document: Iterable[Element]) -> str:
    return encode_json(document_to_data(document))
