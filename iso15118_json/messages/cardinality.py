"""
Repeated fields of ISO 15118-20 types (maxOccurs > 1 in the XSD schemas) are
represented by BoundedSet: a sequence that is ordered on the wire, but
compares and hashes like a set, and knows the occurrence bounds of its field.

Use bounded_set() to declare such a field:

    tax_rules: Optional[bounded_set(TaxRule, max_occurs=10)] = Field(
        None, alias="taxRules"
    )
"""
import logging
from typing import (
    Any,
    Iterable,
    Iterator,
    Optional,
    Sequence,
    TypeVar,
    get_args,
)

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler, ValidationInfo
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import PydanticCustomError, core_schema
from typing_extensions import Annotated

from iso15118_json.messages.enums import CardinalityPolicy
from iso15118_json.settings import SettingKey, shared_settings

logger = logging.getLogger(__name__)

# Validation context key to override the CARDINALITY_POLICY setting
CARDINALITY_POLICY = "cardinality_policy"

T = TypeVar("T")


class BoundedSet(Sequence[T]):
    """
    An immutable, deduplicated sequence.

    Elements that are equal to an earlier element are dropped at construction,
    the remaining ones keep the order in which they were first seen (which is
    the order they are serialised in). Two BoundedSets are equal if they hold
    the same elements, regardless of order, and so are their hashes.
    """

    __slots__ = ("_items", "max_occurs", "min_occurs")

    def __init__(
        self,
        items: Iterable[T] = (),
        max_occurs: Optional[int] = None,
        min_occurs: int = 0,
    ):
        # dict keys keep the first occurrence of each element, in order
        self._items = tuple(dict.fromkeys(items))
        self.max_occurs = max_occurs
        self.min_occurs = min_occurs

    @property
    def exceeds_max_occurs(self) -> bool:
        return self.max_occurs is not None and len(self._items) > self.max_occurs

    @property
    def below_min_occurs(self) -> bool:
        return len(self._items) < self.min_occurs

    def __getitem__(self, index):
        if isinstance(index, slice):
            return BoundedSet(self._items[index], self.max_occurs, self.min_occurs)
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __contains__(self, item: Any) -> bool:
        return item in self._items

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, BoundedSet):
            return NotImplemented
        # Elements are distinct and hashable
        return frozenset(self._items) == frozenset(other._items)

    def __hash__(self) -> int:
        # frozenset's hash does not depend on the order of the elements
        return hash(frozenset(self._items))

    def __repr__(self) -> str:
        return f"BoundedSet({list(self._items)!r})"

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        # A bare BoundedSet[...] annotation has no occurrence bounds
        return Occurs().__get_pydantic_core_schema__(source, handler)


def cardinality_policy(context: Optional[dict]) -> CardinalityPolicy:
    if context and context.get(CARDINALITY_POLICY) is not None:
        return CardinalityPolicy(context[CARDINALITY_POLICY])
    return CardinalityPolicy(shared_settings[SettingKey.CARDINALITY_POLICY])


def _as_list(value: Any) -> Any:
    if isinstance(value, BoundedSet):
        return list(value)
    return value


class Occurs:
    """The minOccurs / maxOccurs restriction of a repeated field"""

    __slots__ = ("min_occurs", "max_occurs")

    def __init__(self, min_occurs: int = 0, max_occurs: Optional[int] = None):
        self.min_occurs = min_occurs
        self.max_occurs = max_occurs

    def __repr__(self) -> str:
        return f"Occurs({self.min_occurs}, {self.max_occurs})"

    def __get_pydantic_core_schema__(
        self, source: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        args = get_args(source)
        item_type = args[0] if args else Any
        items_schema = core_schema.list_schema(handler.generate_schema(item_type))
        return core_schema.no_info_before_validator_function(
            _as_list,
            core_schema.with_info_after_validator_function(
                self.build_collection, items_schema
            ),
            serialization=core_schema.plain_serializer_function_ser_schema(
                list, return_schema=items_schema
            ),
        )

    def __get_pydantic_json_schema__(
        self, schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        json_schema = handler(schema)
        if self.max_occurs is not None:
            json_schema["maxItems"] = self.max_occurs
        if self.min_occurs:
            json_schema["minItems"] = self.min_occurs
        json_schema["uniqueItems"] = True
        return json_schema

    def build_collection(self, items: list, info: ValidationInfo) -> BoundedSet:
        collection: BoundedSet = BoundedSet(items, self.max_occurs, self.min_occurs)
        if not (collection.exceeds_max_occurs or collection.below_min_occurs):
            return collection

        actual = len(collection)
        if cardinality_policy(info.context) is CardinalityPolicy.ENFORCE:
            if collection.exceeds_max_occurs:
                raise PydanticCustomError(
                    "cardinality_exceeded",
                    "At most {max_occurs} elements are allowed, "
                    "but {actual} were given",
                    {"max_occurs": self.max_occurs, "actual": actual},
                )
            raise PydanticCustomError(
                "cardinality_below_minimum",
                "At least {min_occurs} elements are required, "
                "but {actual} were given",
                {"min_occurs": self.min_occurs, "actual": actual},
            )

        logger.warning(
            f"Accepting {actual} distinct elements for a field that allows "
            f"[{self.min_occurs}..{self.max_occurs}] elements"
        )
        return collection


def bounded_set(item_type: Any, max_occurs: Optional[int] = None, min_occurs: int = 0):
    """
    Type of a repeated field whose elements are of type item_type.
    Accepts any iterable of items on input, validates to a BoundedSet.
    """
    return Annotated[BoundedSet[item_type], Occurs(min_occurs, max_occurs)]
