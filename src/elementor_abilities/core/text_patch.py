"""Find/replace over raw ``_elementor_data`` text.

The patch works on the serialized JSON, not the decoded tree, which makes
bulk edits (URLs, colours, copy) a one-liner. Blind text substitution can
break the JSON syntax, so any patch that changed something is re-parsed and
rejected when the result is no longer valid JSON.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from elementor_abilities.core.errors import (
    PatternCompileError,
    PostConditionError,
    ValidationError,
)
from elementor_abilities.core.models import loads_json

# PCRE-style "/pattern/flags" as accepted by preg_replace.
_DELIMITED_RE = re.compile(r"^([/#~%@!|+])(.*)\1([A-Za-z]*)$", re.DOTALL)

_MODIFIER_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
    "u": 0,
}

# Group references and backslashes in a preg_replace template.
_TEMPLATE_TOKEN_RE = re.compile(r"\\\\|\\(\d{1,2})|\$(\d{1,2})|\$\{(\d{1,2})\}|\\")


@dataclass(frozen=True)
class PatchResult:
    """Outcome of a successful patch.

    Attributes:
        text: Patched text (the input itself when ``count`` is 0).
        count: Number of substitutions performed.
    """

    text: str
    count: int

    @property
    def changed(self) -> bool:
        return self.count > 0


def compile_pattern(find: str, allow_delimited: bool = True) -> re.Pattern[str]:
    """Compile a find pattern.

    With ``allow_delimited``, a PCRE-style pattern such as ``/colou?r/i`` has
    its delimiters stripped and its modifiers mapped to ``re`` flags.
    Anything else is compiled as a plain Python regular expression.

    Raises:
        PatternCompileError: If the pattern or a modifier is invalid.
    """
    source = find
    flags = 0
    if allow_delimited:
        match = _DELIMITED_RE.match(find)
        if match:
            source = match.group(2)
            for modifier in match.group(3):
                if modifier not in _MODIFIER_FLAGS:
                    raise PatternCompileError(
                        f"Invalid regex pattern: unsupported modifier '{modifier}'"
                    )
                flags |= _MODIFIER_FLAGS[modifier]
    try:
        return re.compile(source, flags)
    except re.error as e:
        raise PatternCompileError(f"Invalid regex pattern: {e}") from e


def translate_template(replace: str) -> str:
    """Convert a ``preg_replace`` replacement into an ``re`` template.

    ``\\1``, ``$1`` and ``${1}`` become ``\\g<1>`` and ``\\\\`` becomes one
    backslash. Every other backslash is literal, so ``\\n`` or ``\\u00e9``
    inside JSON string text are copied through unchanged.
    """

    def _token(match: re.Match[str]) -> str:
        group = match.group(1) or match.group(2) or match.group(3)
        if group is not None:
            return rf"\g<{int(group)}>"
        return "\\\\"

    return _TEMPLATE_TOKEN_RE.sub(_token, replace)


def patch_text(
    raw_text: str,
    find: str,
    replace: str,
    use_pattern: bool = False,
    *,
    allow_delimited: bool = True,
) -> PatchResult:
    """Replace every non-overlapping occurrence of ``find`` in ``raw_text``.

    Args:
        raw_text: Serialized JSON document.
        find: Literal text, or a regular expression when ``use_pattern``.
        replace: Replacement text. In pattern mode it may reference groups.
        use_pattern: Treat ``find`` as a regular expression.
        allow_delimited: Accept ``/pattern/flags`` syntax in pattern mode.

    Returns:
        PatchResult with the new text and the exact substitution count. A
        count of 0 is a success and leaves the text unchanged.

    Raises:
        ValidationError: ``find`` is empty.
        PatternCompileError: The pattern or replacement template is invalid.
        PostConditionError: The patched text is no longer valid JSON.
    """
    if not find:
        raise ValidationError("Find string is required")

    if use_pattern:
        compiled = compile_pattern(find, allow_delimited=allow_delimited)
        try:
            new_text, count = compiled.subn(translate_template(replace), raw_text)
        except (re.error, IndexError) as e:
            raise PatternCompileError(f"Invalid replacement: {e}") from e
    else:
        count = raw_text.count(find)
        new_text = raw_text.replace(find, replace) if count else raw_text

    if count == 0:
        return PatchResult(text=raw_text, count=0)

    try:
        loads_json(new_text)
    except ValueError as e:
        raise PostConditionError(
            "Replacement would result in invalid JSON - aborted", error=str(e)
        ) from e

    return PatchResult(text=new_text, count=count)
