from itertools import cycle
from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    Generic,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
)

from pydantic import BaseModel as PydanticBaseModel
from pydantic import RootModel as PydanticRootModel
from pydantic import (
    ConfigDict,
    SerializationInfo,
    SerializerFunctionWrapHandler,
    model_serializer,
    model_validator,
)

from iso15118_json.messages.choice import ChoiceGroup, register_choice_field

# Context key under which to_json() hands the custom serializers to pydantic
CUSTOM_SERIALIZERS = "custom_serializers"

# Each field's hash is weighted with its own prime, so that two fields
# swapping their values changes the hash
HASH_PRIMES = (3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53, 59, 61)

CustomSerializer = Callable[[Any, Any], Any]
M = TypeVar("M", bound="BaseModel")
T = TypeVar("T")


def find_custom_serializer(
    serializers: Mapping[type, CustomSerializer], model_type: type
) -> Optional[CustomSerializer]:
    """Looks up the serializer for the type itself first, then for its bases"""
    for klass in model_type.__mro__:
        if klass in serializers:
            return serializers[klass]
    return None


def apply_custom_serializer(model: Any, data: Any, info: SerializationInfo) -> Any:
    """Hands the serialized model to the custom serializer registered for it"""
    serializers = (info.context or {}).get(CUSTOM_SERIALIZERS)
    if serializers:
        custom_serializer = find_custom_serializer(serializers, type(model))
        if custom_serializer:
            return custom_serializer(model, data)
    return data


class BaseModel(PydanticBaseModel):
    """
    Base class of all ISO 15118-20 message value objects.

    Changes pydantic's default configuration to suit the needs of protocol
    messages and adds what every message type shares: structural equality and
    hashing, choice group handling and the JSON codec entry points.
    """

    model_config = ConfigDict(
        # Allow input by alias or field name
        populate_by_name=True,
        # Forbid extra attributes during model initialization
        extra="forbid",
        # Messages are value objects, no field can be changed once the model
        # has been instantiated
        frozen=True,
    )

    # Field name -> (JSON property, choice group) for every choice field,
    # collected once per class in __pydantic_init_subclass__
    choice_fields: ClassVar[Dict[str, Tuple[str, ChoiceGroup]]] = {}

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        choice_fields = {}
        for name, field in cls.model_fields.items():
            for metadata in field.metadata:
                if isinstance(metadata, ChoiceGroup):
                    alias = field.alias or name
                    choice_fields[name] = (alias, metadata)
                    register_choice_field(alias, metadata)
        cls.choice_fields = choice_fields

    @model_validator(mode="before")
    @classmethod
    def resolve_choice_groups(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        # A JSON null is treated just like an absent property
        values = {key: value for key, value in values.items() if value is not None}
        for name, (alias, group) in cls.choice_fields.items():
            values = group.resolve(values, name, alias)
        return values

    @model_serializer(mode="wrap")
    def serialize_wire_format(
        self, handler: SerializerFunctionWrapHandler, info: SerializationInfo
    ) -> Any:
        data = handler(self)
        if info.by_alias and self.choice_fields and isinstance(data, dict):
            data = self._emit_chosen_members(data)
        return apply_custom_serializer(self, data, info)

    def _emit_chosen_members(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Renames each choice field to the JSON property of its chosen member"""
        wire_keys: Dict[str, Optional[str]] = {}
        for name, (alias, group) in self.choice_fields.items():
            wire_keys[alias] = group.key_of(getattr(self, name))

        emitted: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in wire_keys:
                emitted[key] = value
            elif wire_keys[key] is not None:
                emitted[wire_keys[key]] = value
        return emitted

    def __eq__(self, other: Any) -> bool:
        if self is other:
            return True
        if not isinstance(other, BaseModel):
            return NotImplemented
        if type(self) is not type(other):
            return False
        return all(
            getattr(self, name) == getattr(other, name)
            for name in type(self).model_fields
        )

    def __hash__(self) -> int:
        # Seeded with the class name, so that structurally similar models of
        # different types are unlikely to collide
        result = hash(type(self).__qualname__)
        for prime, name in zip(cycle(HASH_PRIMES), type(self).model_fields):
            result ^= hash(getattr(self, name)) * prime
        return hash(result)

    @classmethod
    def parse(
        cls: Type[M],
        json_data: Any,
        custom_parser: Optional[Callable[[Any, M], M]] = None,
        cardinality_policy: Any = None,
    ) -> M:
        """See json_codec.parse()"""
        from iso15118_json import json_codec

        return json_codec.parse(cls, json_data, custom_parser, cardinality_policy)

    @classmethod
    def try_parse(
        cls,
        json_data: Any,
        custom_parser: Optional[Callable[[Any, Any], Any]] = None,
        cardinality_policy: Any = None,
    ):
        """See json_codec.try_parse()"""
        from iso15118_json import json_codec

        return json_codec.try_parse(cls, json_data, custom_parser, cardinality_policy)

    def to_json(
        self, custom_serializers: Optional[Mapping[type, CustomSerializer]] = None
    ) -> Any:
        """See json_codec.to_json()"""
        from iso15118_json import json_codec

        return json_codec.to_json(self, custom_serializers)


class RootModel(PydanticRootModel[T], Generic[T]):
    """
    Base class of the value types that wrap a single JSON value, like the
    members of the ParameterValue choice group. Frozen like BaseModel, and
    open to custom serializers just the same.
    """

    model_config = ConfigDict(frozen=True)

    @model_serializer(mode="wrap")
    def serialize_wire_format(
        self, handler: SerializerFunctionWrapHandler, info: SerializationInfo
    ) -> Any:
        return apply_custom_serializer(self, handler(self), info)
