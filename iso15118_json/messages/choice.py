"""
Choice groups and variant families.

On the wire, ISO 15118-20 expresses an XSD choice as a set of sibling
properties of which at most one (optional choice) or exactly one (mandatory
choice) may be present. In memory, each choice group is a single model field
holding the chosen member, typed as a tagged union with one case per member.
The resolution from sibling properties to the tagged field happens in
BaseModel.resolve_choice_groups(), the reverse in
BaseModel.serialize_wire_format().

A variant family is a closed set of model classes sharing a base class, where
the concrete class is inferred from which discriminating property is present
(e.g. a 'selectedScheduleTupleId' makes an EV power profile a scheduled one).
"""
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Set, Tuple, Union

from pydantic import GetCoreSchemaHandler
from pydantic_core import PydanticCustomError, core_schema

from iso15118_json.validators import one_field_must_be_set

# Wire alias of each choice field -> the JSON properties of its members
_choice_aliases: Dict[str, Set[str]] = {}
# Class names used as tags of variant families
_variant_tags: Set[str] = set()


class _Chosen(NamedTuple):
    """A raw choice group member, tagged with the property it was read from"""

    key: str
    value: Any


def _unwrap(value: Any) -> Any:
    if isinstance(value, _Chosen):
        return value.value
    return value


class ChoiceGroup:
    """
    Annotated marker turning a model field into a choice group.

    Example:
        price_schedule: Annotated[
            Optional[Union[AbsolutePriceSchedule, PriceLevelSchedule]],
            ChoiceGroup(
                "PriceSchedule",
                absolutePriceSchedule=AbsolutePriceSchedule,
                priceLevelSchedule=PriceLevelSchedule,
            ),
        ] = Field(None, alias="priceSchedule")

    Each keyword names the JSON property of a member and its type. Member types
    must be distinct classes, as the type of the field value tells which member
    was chosen.
    """

    __slots__ = ("name", "mandatory", "members")

    def __init__(self, name: str, mandatory: bool = False, **members: type):
        self.name = name
        self.mandatory = mandatory
        self.members: Dict[str, type] = members

    def __repr__(self) -> str:
        return f"ChoiceGroup({self.name!r}, members={list(self.members)})"

    def key_of(self, value: Any) -> Optional[str]:
        """Returns the JSON property name of the member the value belongs to"""
        if isinstance(value, _Chosen):
            return value.key
        for key, member_type in self.members.items():
            if isinstance(value, member_type):
                return key
        return None

    def resolve(self, values: dict, field_name: str, alias: str) -> dict:
        """
        Moves the one member that is set from its sibling property into the
        choice field, tagged with the property name.

        A choice field that is given directly (by field name or alias, as
        happens when a model is instantiated in Python) counts as one more
        member being set, as long as it holds a member instance. Otherwise
        it is no JSON property of the model at all.
        """
        direct = [key for key in dict.fromkeys((field_name, alias)) if key in values]
        for key in direct:
            if key not in self.members and self.key_of(values[key]) is None:
                raise PydanticCustomError(
                    "unknown_property",
                    "Unknown property '{property}'",
                    {"property": key},
                )
        key = one_field_must_be_set(
            self.name, list(self.members) + direct, values, self.mandatory
        )
        if key is None or key in direct:
            return values

        values = dict(values)
        values[alias] = _Chosen(key, values.pop(key))
        return values

    def __get_pydantic_core_schema__(
        self, source: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        choices: Dict[Any, core_schema.CoreSchema] = {
            key: core_schema.no_info_before_validator_function(
                _unwrap, handler.generate_schema(member_type)
            )
            for key, member_type in self.members.items()
        }
        schema = core_schema.tagged_union_schema(
            choices,
            discriminator=self.key_of,
            custom_error_type="choice_member_type",
            custom_error_message=f"Value is not a member of choice group '{self.name}'",
        )
        if self.mandatory:
            return schema
        return core_schema.nullable_schema(schema)


class VariantFamily:
    """
    Annotated marker turning a Union of model classes into a variant family.

    Example:
        EVPowerProfile = Annotated[
            Union[ScheduledEVPowerProfile, DynamicEVPowerProfile],
            VariantFamily(
                "EVPowerProfile",
                default=DynamicEVPowerProfile,
                selectedScheduleTupleId=ScheduledEVPowerProfile,
            ),
        ]

    Each keyword maps a discriminating JSON property to the variant it selects.
    Properties of more than one variant must not be present at the same time.
    If no discriminating property is present, the default variant is used.
    """

    __slots__ = ("name", "default", "discriminators")

    def __init__(self, name: str, default: type, **discriminators: type):
        self.name = name
        self.default = default
        self.discriminators: Dict[str, type] = discriminators
        _variant_tags.update(variant.__name__ for variant in self.variants)

    def __repr__(self) -> str:
        return f"VariantFamily({self.name!r})"

    @property
    def variants(self) -> Tuple[type, ...]:
        return tuple(dict.fromkeys((*self.discriminators.values(), self.default)))

    def variant_of(self, value: Any) -> Optional[str]:
        if isinstance(value, dict):
            for key, variant in self.discriminators.items():
                if value.get(key) is not None:
                    return variant.__name__
            return self.default.__name__
        for variant in self.variants:
            if type(value) is variant:
                return variant.__name__
        return None

    def check_unambiguous(self, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        # One representative property per variant, so that several
        # properties of the same variant do not count as a conflict
        present: Dict[type, str] = {}
        for key, variant in self.discriminators.items():
            if value.get(key) is not None:
                present.setdefault(variant, key)
        one_field_must_be_set(self.name, list(present.values()), value, False)
        return value

    def __get_pydantic_core_schema__(
        self, source: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        choices: Dict[Any, core_schema.CoreSchema] = {
            variant.__name__: handler.generate_schema(variant)
            for variant in self.variants
        }
        return core_schema.no_info_before_validator_function(
            self.check_unambiguous,
            core_schema.tagged_union_schema(
                choices,
                discriminator=self.variant_of,
                custom_error_type="variant_type",
                custom_error_message=f"Value is not a valid {self.name}",
            ),
        )


def register_choice_field(alias: str, group: ChoiceGroup):
    _choice_aliases.setdefault(alias, set()).update(group.members)


def variant_family_of(message_type: Any) -> Optional[VariantFamily]:
    for metadata in getattr(message_type, "__metadata__", ()):
        if isinstance(metadata, VariantFamily):
            return metadata
    return None


def wire_path(loc: Sequence[Union[str, int]]) -> List[Union[str, int]]:
    """
    Strips the segments pydantic adds to an error location that do not exist
    on the wire: the alias of a choice field (followed by the property name of
    the chosen member) and the tags of variant families.
    """
    path: List[Union[str, int]] = []
    for index, segment in enumerate(loc):
        if isinstance(segment, str):
            following = loc[index + 1] if index + 1 < len(loc) else None
            if segment in _choice_aliases and following in _choice_aliases[segment]:
                continue
            if segment in _variant_tags:
                continue
        path.append(segment)
    return path
