"""
elementor_abilities.core - Element tree model, tree and text patchers, errors.
"""

from elementor_abilities.core.errors import (
    AbilityError,
    EncodingError,
    NotFoundError,
    PatternCompileError,
    PermissionDeniedError,
    PostConditionError,
    StoreError,
    ValidationError,
)
from elementor_abilities.core.models import (
    Document,
    Element,
    decode_document,
    encode_document,
    encode_json,
    parse_document,
)
from elementor_abilities.core.text_patch import PatchResult, compile_pattern, patch_text
from elementor_abilities.core.tree import find_element, iter_elements, replace_element

__all__ = [
    "AbilityError",
    "Document",
    "Element",
    "EncodingError",
    "NotFoundError",
    "PatchResult",
    "PatternCompileError",
    "PermissionDeniedError",
    "PostConditionError",
    "StoreError",
    "ValidationError",
    "compile_pattern",
    "decode_document",
    "encode_document",
    "encode_json",
    "find_element",
    "iter_elements",
    "parse_document",
    "patch_text",
    "replace_element",
]
