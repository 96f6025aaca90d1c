"""
Composite identifiers for association resources.

An association between two objects has no id of its own, so it is identified
externally by both endpoint ids joined with a reserved delimiter, e.g. a
job template 7 linked to credential 9 is "7-9".
"""

from ansible_collections.awx.automation.plugins.module_utils.awx.errors import (
    MalformedIdentity,
)

DELIMITER = "-"


def encode_composite_id(parent_id: int, child_id: int) -> str:
    return f"{parent_id}{DELIMITER}{child_id}"


def decode_composite_id(value: str, expected_format: str = "<parent>-<child>"):
    """
    Splits a composite identifier back into its `(parent_id, child_id)` pair.

    Both segments must be present and consist of ASCII digits only, so values
    such as "12", "-5", "12-" or "a-b" are rejected.

    Raises:
        MalformedIdentity: naming the expected format.
    """
    parts = str(value).split(DELIMITER)
    if len(parts) != 2 or not all(_is_numeric(part) for part in parts):
        raise MalformedIdentity(
            f"Unexpected format of ID ({value!r}), expected {expected_format}"
        )
    return int(parts[0]), int(parts[1])


def _is_numeric(segment: str) -> bool:
    return bool(segment) and segment.isascii() and segment.isdigit()
