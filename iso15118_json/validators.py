"""
This module contains functions used by various pydantic validators throughout
the model classes, namely the choice group and variant family resolution and
the checks of XSD string types that pydantic has no constrained type for.
Saves duplicated code.
"""

from typing import List, Optional

from pydantic_core import PydanticCustomError


def one_field_must_be_set(
    group: str, field_options: List[str], values: dict, mandatory: bool = True
) -> Optional[str]:
    """
    Many ISO 15118-20 types offer a choice between two or more fields, where
    all fields are optional on the wire but at most one (optional choice) or
    exactly one (mandatory choice) of them may be set. For example, a charging
    schedule carries either an absolute price schedule or a price level
    schedule.

    Args:
        group: The name of the choice group, used in error messages
        field_options: The JSON property names (or pythonic field names) that
                       make up the choice group
        values: The raw dict of the model that is being validated
        mandatory: If true, exactly one of the given field options must be set.
                   Otherwise, at most one of them may be set.

    Returns:
        The name of the field option that is set, or None if none is set and
        the choice group is optional.

    Raises:
        PydanticCustomError of type 'conflicting_choice' or 'missing_choice',
        which pydantic reports as a regular validation error
    """
    set_fields: List[str] = []
    for field_name in field_options:
        # Important to not check for "if field" instead of "if field is not None" to
        # avoid situations in which field evaluates to 0 (which equals to False)
        if values.get(field_name) is not None:
            set_fields.append(field_name)

    if len(set_fields) > 1:
        raise PydanticCustomError(
            "conflicting_choice",
            "At most one member of choice group '{group}' may be set, "
            "but {present_count} are set: {members}",
            {"group": group, "present_count": len(set_fields), "members": set_fields},
        )

    if not set_fields and mandatory:
        raise PydanticCustomError(
            "missing_choice",
            "Exactly one member of choice group '{group}' must be set, "
            "but none is set: {members}",
            {"group": group, "present_count": 0, "members": field_options},
        )

    return set_fields[0] if set_fields else None


def validate_hex_binary(var_name: str, value: str, max_bytes: int) -> str:
    """
    Checks whether the given string is the hexadecimal representation of at
    most max_bytes bytes (XSD type hexBinary).

    var_name
        Name of the field being checked
    value
        The string to check
    max_bytes
        The maximum number of bytes the string may represent
    """
    if len(value) % 2 != 0 or len(value) > 2 * max_bytes:
        raise ValueError(
            f"Invalid value '{value}' for {var_name} (must be the hexadecimal "
            f"representation of max {max_bytes} bytes)"
        )
    try:
        bytes.fromhex(value)
    except ValueError as exc:
        raise ValueError(
            f"Invalid value '{value}' for {var_name} (must be the hexadecimal "
            f"representation of max {max_bytes} bytes)"
        ) from exc
    return value
