"""Column label to JSON property name rewriting.

Labels are assumed to be snake_case (for the camel/pascal modes) or
PascalCase (for snake mode). The transforms are plain regex rewrites, not
a round-trippable case model: SNAKE_CASE("UserId") is "_user_id", and no
law relates one mode's output to another's.
"""

from __future__ import annotations

import re

from schemagate.contracts.enums import PropertyNaming

# Pre-compiled regex patterns (module level for efficiency)
_UNDERSCORE_WORD_START = re.compile(r"_([a-z\d])")
_UPPER_OR_DIGIT = re.compile(r"[A-Z\d]")


def to_camel_case(label: str) -> str:
    """some_column -> someColumn (leading character unchanged)."""
    return _UNDERSCORE_WORD_START.sub(lambda m: m.group(1).upper(), label)


def to_pascal_case(label: str) -> str:
    """some_column -> SomeColumn."""
    camel = to_camel_case(label)
    # Only the first character changes; str.capitalize() would lowercase the rest
    return camel[:1].upper() + camel[1:]


def to_snake_case(label: str) -> str:
    """SomeColumn -> _some_column, column1 -> column_1."""
    return _UPPER_OR_DIGIT.sub(lambda m: "_" + m.group(0).lower(), label)


def transform_property_name(label: str, mode: PropertyNaming) -> str:
    """Rewrite a column label according to a property naming mode.

    Args:
        label: Column label from the row source
        mode: Configured naming mode

    Returns:
        JSON property name
    """
    if mode == PropertyNaming.AS_IS:
        return label
    if mode == PropertyNaming.CAMEL_CASE:
        return to_camel_case(label)
    if mode == PropertyNaming.PASCAL_CASE:
        return to_pascal_case(label)
    if mode == PropertyNaming.SNAKE_CASE:
        return to_snake_case(label)
    if mode == PropertyNaming.LOWER_CASE:
        return label.lower()
    if mode == PropertyNaming.UPPER_CASE:
        return label.upper()
    raise AssertionError(f"Unhandled PropertyNaming: {mode!r}")
