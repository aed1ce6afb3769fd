from typing import Any, Optional, Sequence


class MessageFormatError(ValueError):
    """
    Base class of all errors reported when a JSON representation cannot be
    turned into a message value object. The 'field' attribute names the
    offending JSON property, or is None if the error concerns the JSON object
    as a whole (e.g. a choice group violation).
    """

    def __init__(self, field: Optional[str], message: str):
        ValueError.__init__(self, message)
        self.field = field


class MissingMandatoryField(MessageFormatError):
    """Is thrown if a mandatory property is absent or null"""

    def __init__(self, field: str):
        MessageFormatError.__init__(
            self, field, f"Mandatory property '{field}' is missing"
        )


class TypeMismatch(MessageFormatError):
    """
    Is thrown if a property is present but cannot be converted to its declared
    type. The 'expected' field describes the declared type (or the constraint
    that failed), the 'actual' field names the JSON type that was given.
    """

    def __init__(self, field: Optional[str], expected: str, actual: str):
        target = f"property '{field}'" if field else "JSON value"
        MessageFormatError.__init__(
            self, field, f"Invalid {target}: {expected} (got {actual})"
        )
        self.expected = expected
        self.actual = actual


class UnknownProperty(MessageFormatError):
    """Is thrown if a JSON object carries a property its type does not declare"""

    def __init__(self, field: str):
        MessageFormatError.__init__(self, field, f"Unknown property '{field}'")


class ChoiceViolation(MessageFormatError):
    """
    Is thrown if a choice group does not have the required number of members
    set. 'group' is the name of the choice group, 'present_count' the number
    of members that were set.
    """

    def __init__(
        self,
        group: str,
        present_count: int,
        members: Sequence[str] = (),
        message: str = "",
    ):
        MessageFormatError.__init__(
            self,
            None,
            message
            or f"Choice group '{group}' has {present_count} members set",
        )
        self.group = group
        self.present_count = present_count
        self.members = tuple(members)


class MissingChoice(ChoiceViolation):
    """Is thrown if none of the members of a mandatory choice group is set"""

    def __init__(self, group: str, members: Sequence[str] = ()):
        ChoiceViolation.__init__(
            self,
            group,
            0,
            members,
            f"Exactly one member of choice group '{group}' must be set, "
            f"but none is set. Members: {list(members)}",
        )


class ConflictingChoice(ChoiceViolation):
    """Is thrown if more than one member of a choice group is set"""

    def __init__(self, group: str, present_count: int, members: Sequence[str] = ()):
        ChoiceViolation.__init__(
            self,
            group,
            present_count,
            members,
            f"At most one member of choice group '{group}' may be set, "
            f"but {present_count} are set: {list(members)}",
        )


class CardinalityError(MessageFormatError):
    """
    Base class for repeated fields whose number of distinct elements lies
    outside the declared occurrence bounds
    """

    def __init__(self, field: Optional[str], limit: int, actual: int, message: str):
        MessageFormatError.__init__(self, field, message)
        self.limit = limit
        self.actual = actual


class CardinalityExceeded(CardinalityError):
    """Is thrown if a repeated field holds more elements than allowed"""

    def __init__(self, field: Optional[str], max_occurs: int, actual: int):
        CardinalityError.__init__(
            self,
            field,
            max_occurs,
            actual,
            f"Property '{field}' allows at most {max_occurs} elements, "
            f"but {actual} were given",
        )
        self.max_occurs = max_occurs


class CardinalityBelowMinimum(CardinalityError):
    """Is thrown if a repeated field holds fewer elements than required"""

    def __init__(self, field: Optional[str], min_occurs: int, actual: int):
        CardinalityError.__init__(
            self,
            field,
            min_occurs,
            actual,
            f"Property '{field}' requires at least {min_occurs} elements, "
            f"but {actual} were given",
        )
        self.min_occurs = min_occurs


class MalformedNested(MessageFormatError):
    """
    Is thrown if a nested JSON object (or an element of a nested array) could
    not be parsed. The 'inner' field holds the error of the nested object, so
    a chain of MalformedNested errors reflects the path from the outermost
    property down to the offending one. List indices are part of the field
    name, e.g. 'priceRuleStacks[2]'.
    """

    def __init__(self, field: str, inner: MessageFormatError):
        self.inner = inner
        if isinstance(inner, MalformedNested):
            self.path = f"{field}.{inner.path}"
        else:
            self.path = field
        MessageFormatError.__init__(
            self, field, f"Malformed nested object '{self.path}': {self.innermost}"
        )

    @property
    def innermost(self) -> MessageFormatError:
        error: MessageFormatError = self.inner
        while isinstance(error, MalformedNested):
            error = error.inner
        return error


class InvalidMessageError(Exception):
    """
    Is thrown by parse() if a JSON representation cannot be turned into the
    requested message type. The 'reason' field holds the structured
    MessageFormatError, if there is one.
    """

    def __init__(self, message: str, reason: Optional[MessageFormatError] = None):
        Exception.__init__(self, message)
        self.reason = reason


class InvalidSettingsValueError(Exception):
    """
    Is thrown when a setting is read and the value is invalid.
    The 'entity' field provides information about which settings the invalid
    value belongs to.
    """

    def __init__(self, entity: str, setting: str, invalid_value: Any):
        Exception.__init__(
            self, f"Invalid value '{invalid_value}' for {entity} setting {setting}"
        )
        self.entity = entity
        self.setting = setting
        self.invalid_value = invalid_value
