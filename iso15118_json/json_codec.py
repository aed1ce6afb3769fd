"""
Converts ISO 15118-20 message value objects to and from their JSON
representation.

Parsing never lets a pydantic ValidationError escape: the first error pydantic
reports is translated into a MessageFormatError (see exceptions.py), wrapped in
one MalformedNested per enclosing JSON object or array element.
"""
import json
import logging
import re
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Sequence,
    Union,
)

from pydantic import TypeAdapter, ValidationError
from pydantic_core import ErrorDetails

from iso15118_json.exceptions import (
    CardinalityBelowMinimum,
    CardinalityExceeded,
    ConflictingChoice,
    InvalidMessageError,
    MalformedNested,
    MessageFormatError,
    MissingChoice,
    MissingMandatoryField,
    TypeMismatch,
    UnknownProperty,
)
from iso15118_json.logging import TRACE
from iso15118_json.messages import CUSTOM_SERIALIZERS, BaseModel, CustomSerializer
from iso15118_json.messages.cardinality import CARDINALITY_POLICY
from iso15118_json.messages.choice import variant_family_of, wire_path
from iso15118_json.messages.enums import CardinalityPolicy
from iso15118_json.messages.iso15118_20.common_messages import (
    AuthorizationReq,
    AuthorizationRes,
    AuthorizationSetupReq,
    AuthorizationSetupRes,
    CertificateInstallationReq,
    CertificateInstallationRes,
    MeteringConfirmationReq,
    MeteringConfirmationRes,
    PowerDeliveryReq,
    PowerDeliveryRes,
    ScheduleExchangeReq,
    ScheduleExchangeRes,
    ServiceDetailReq,
    ServiceDetailRes,
    ServiceDiscoveryReq,
    ServiceDiscoveryRes,
    ServiceSelectionReq,
    ServiceSelectionRes,
    SessionSetupReq,
    SessionSetupRes,
    SessionStopReq,
    SessionStopRes,
)
from iso15118_json.settings import SettingKey, shared_settings

logger = logging.getLogger(__name__)

CustomParser = Callable[[Any, Any], Any]

# The message name is the single key of a message envelope, e.g.
# {"SessionSetupReq": {...}}
MESSAGE_TYPES: Dict[str, Any] = {
    "SessionSetupReq": SessionSetupReq,
    "SessionSetupRes": SessionSetupRes,
    "AuthorizationSetupReq": AuthorizationSetupReq,
    "AuthorizationSetupRes": AuthorizationSetupRes,
    "AuthorizationReq": AuthorizationReq,
    "AuthorizationRes": AuthorizationRes,
    "ServiceDiscoveryReq": ServiceDiscoveryReq,
    "ServiceDiscoveryRes": ServiceDiscoveryRes,
    "ServiceDetailReq": ServiceDetailReq,
    "ServiceDetailRes": ServiceDetailRes,
    "ServiceSelectionReq": ServiceSelectionReq,
    "ServiceSelectionRes": ServiceSelectionRes,
    "ScheduleExchangeReq": ScheduleExchangeReq,
    "ScheduleExchangeRes": ScheduleExchangeRes,
    "PowerDeliveryReq": PowerDeliveryReq,
    "PowerDeliveryRes": PowerDeliveryRes,
    "MeteringConfirmationReq": MeteringConfirmationReq,
    "MeteringConfirmationRes": MeteringConfirmationRes,
    "CertificateInstallationReq": CertificateInstallationReq,
    "CertificateInstallationRes": CertificateInstallationRes,
    "SessionStopReq": SessionStopReq,
    "SessionStopRes": SessionStopRes,
}

_WORD_PATTERN = re.compile(r"[A-Z]+(?![a-z])|[A-Z][a-z]*|[a-z]+|\d+")

_type_adapters: Dict[Any, TypeAdapter] = {}


class ParseResult(NamedTuple):
    """
    Outcome of try_parse(). On success, 'value' holds the parsed message. On
    failure, 'error' is a human readable description and 'reason' the
    structured MessageFormatError, if the failure was a format error.
    """

    success: bool
    value: Any = None
    error: Optional[str] = None
    reason: Optional[MessageFormatError] = None


def type_adapter(message_type: Any) -> TypeAdapter:
    adapter = _type_adapters.get(message_type)
    if adapter is None:
        adapter = TypeAdapter(message_type)
        _type_adapters[message_type] = adapter
    return adapter


def type_name(message_type: Any) -> str:
    family = variant_family_of(message_type)
    if family:
        return family.name
    return getattr(message_type, "__name__", str(message_type))


def describe(message_type: Any) -> str:
    """
    A readable description of a message type, e.g. 'PnC authorization setup
    res' for PnCAuthorizationSetupRes
    """
    words = _WORD_PATTERN.findall(type_name(message_type))
    return " ".join(
        word if len(word) > 1 and word.isupper() else word.lower() for word in words
    )


def json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _segments(path: Sequence[Union[str, int]]) -> List[str]:
    """Folds list indices into the preceding property, e.g. 'taxRules[3]'"""
    segments: List[str] = []
    for segment in path:
        if isinstance(segment, int):
            if segments:
                segments[-1] = f"{segments[-1]}[{segment}]"
            else:
                segments.append(f"[{segment}]")
        else:
            segments.append(segment)
    return segments


def _leaf_error(error: ErrorDetails, field: Optional[str]) -> MessageFormatError:
    error_type = error["type"]
    ctx = error.get("ctx") or {}

    if error_type == "missing":
        return MissingMandatoryField(field)
    if error_type == "extra_forbidden":
        return UnknownProperty(field)
    if error_type == "cardinality_exceeded":
        return CardinalityExceeded(field, ctx["max_occurs"], ctx["actual"])
    if error_type == "cardinality_below_minimum":
        return CardinalityBelowMinimum(field, ctx["min_occurs"], ctx["actual"])
    if field and error.get("input", "") is None:
        return MissingMandatoryField(field)
    return TypeMismatch(field, error["msg"], json_type_name(error.get("input")))


def from_validation_error(exc: ValidationError) -> MessageFormatError:
    """Translates the first error of a ValidationError into a MessageFormatError"""
    error = exc.errors()[0]
    segments = _segments(wire_path(error["loc"]))

    if error["type"] in ("missing_choice", "conflicting_choice"):
        # Choice group errors concern the object that holds the group
        ctx = error.get("ctx") or {}
        if error["type"] == "missing_choice":
            reason: MessageFormatError = MissingChoice(ctx["group"], ctx["members"])
        else:
            reason = ConflictingChoice(
                ctx["group"], ctx["present_count"], ctx["members"]
            )
        parents = segments
    elif error["type"] == "unknown_property":
        reason = UnknownProperty((error.get("ctx") or {})["property"])
        parents = segments
    else:
        field = segments[-1] if segments else None
        reason = _leaf_error(error, field)
        parents = segments[:-1]

    for parent in reversed(parents):
        reason = MalformedNested(parent, reason)
    return reason


def _load(json_data: Any) -> Any:
    if isinstance(json_data, (str, bytes, bytearray)):
        return json.loads(json_data)
    return json_data


def try_parse(
    message_type: Any,
    json_data: Any,
    custom_parser: Optional[CustomParser] = None,
    cardinality_policy: Optional[CardinalityPolicy] = None,
) -> ParseResult:
    """
    Parses the JSON representation of a message (or of any nested type).

    Args:
        message_type: A BaseModel subclass or a variant family, e.g.
                      ScheduleExchangeRes
        json_data: The decoded JSON object, or the JSON text (str or bytes)
        custom_parser: Called as custom_parser(json_dict, value) after a
                       successful parse; its return value becomes the result
        cardinality_policy: Overrides the CARDINALITY_POLICY setting

    Returns:
        A ParseResult, this function does not raise
    """
    try:
        decoded = _load(json_data)
    except (ValueError, RecursionError) as exc:
        # JSONDecodeError and UnicodeDecodeError are ValueErrors, too deeply
        # nested text exceeds the recursion limit of the decoder
        logger.debug(f"Invalid JSON text for {type_name(message_type)}: {exc}")
        return ParseResult(False, error=f"Invalid JSON text: {exc}")

    if shared_settings[SettingKey.MESSAGE_LOG_JSON]:
        logger.info(f"Decoded {type_name(message_type)}: {decoded}")

    context = {}
    if cardinality_policy is not None:
        try:
            context[CARDINALITY_POLICY] = CardinalityPolicy(cardinality_policy)
        except ValueError:
            return ParseResult(
                False,
                error=f"Invalid cardinality policy {cardinality_policy!r}, "
                f"expected one of {[policy.value for policy in CardinalityPolicy]}",
            )

    try:
        value = type_adapter(message_type).validate_python(decoded, context=context)
    except ValidationError as exc:
        reason = from_validation_error(exc)
        logger.debug(f"Parsing {type_name(message_type)} failed: {reason}")
        return ParseResult(False, error=str(reason), reason=reason)
    except RecursionError as exc:
        logger.debug(f"Parsing {type_name(message_type)} failed: {exc}")
        return ParseResult(False, error=f"JSON value nested too deeply: {exc}")

    if custom_parser:
        try:
            value = custom_parser(decoded, value)
        except Exception as exc:
            logger.debug(f"Custom parser for {type_name(message_type)} failed: {exc}")
            reason = exc if isinstance(exc, MessageFormatError) else None
            return ParseResult(
                False,
                error=f"Custom parser failed ({exc.__class__.__name__}): {exc}",
                reason=reason,
            )

    logger.log(TRACE, f"Parsed {type_name(message_type)}: {value!r}")
    return ParseResult(True, value=value)


def parse(
    message_type: Any,
    json_data: Any,
    custom_parser: Optional[CustomParser] = None,
    cardinality_policy: Optional[CardinalityPolicy] = None,
) -> Any:
    """
    Same as try_parse(), but returns the parsed value.

    Raises:
        InvalidMessageError
    """
    result = try_parse(message_type, json_data, custom_parser, cardinality_policy)
    if not result.success:
        description = describe(message_type)
        article = "an" if description[:1].lower() in "aeiou" else "a"
        raise InvalidMessageError(
            f"The given JSON representation of {article} {description} is "
            f"invalid: {result.error}",
            result.reason,
        )
    return result.value


def to_json(
    value: Any,
    custom_serializers: Optional[Mapping[type, CustomSerializer]] = None,
) -> Any:
    """
    Returns the JSON representation of a value as a dict.

    Absent optional properties are omitted. custom_serializers maps model types
    to hooks called as hook(value, generated_json), for the value itself and
    for every nested value of that type. The return value of a hook replaces
    the generated JSON.
    """
    data = type_adapter(type(value)).dump_python(
        value,
        mode="json",
        by_alias=True,
        exclude_none=True,
        context={CUSTOM_SERIALIZERS: dict(custom_serializers or {})},
    )
    if shared_settings[SettingKey.MESSAGE_LOG_JSON]:
        logger.info(f"Encoded {type(value).__name__}: {data}")
    return data


def to_json_str(
    value: Any,
    custom_serializers: Optional[Mapping[type, CustomSerializer]] = None,
) -> str:
    """Same as to_json(), rendered as compact JSON text"""
    return json.dumps(to_json(value, custom_serializers), separators=(",", ":"))


def message_name(message: BaseModel) -> str:
    """The name of a message in a message envelope"""
    for name, message_type in MESSAGE_TYPES.items():
        family = variant_family_of(message_type)
        variants = family.variants if family else (message_type,)
        if type(message) in variants:
            return name
    raise ValueError(f"{message.__class__.__name__} is not a V2G message")


def encode_message(
    message: BaseModel,
    custom_serializers: Optional[Mapping[type, CustomSerializer]] = None,
) -> Dict[str, Any]:
    """Returns the message envelope {<message name>: <message JSON>}"""
    return {message_name(message): to_json(message, custom_serializers)}


def try_decode_message(
    json_data: Any,
    custom_parser: Optional[CustomParser] = None,
    cardinality_policy: Optional[CardinalityPolicy] = None,
) -> ParseResult:
    """
    Parses a message envelope, choosing the message type by the envelope's
    single key
    """
    try:
        envelope = _load(json_data)
    except (ValueError, RecursionError) as exc:
        return ParseResult(False, error=f"Invalid JSON text: {exc}")

    if not isinstance(envelope, dict) or len(envelope) != 1:
        return ParseResult(
            False, error="A message envelope must be an object with a single key"
        )

    msg_name = next(iter(envelope))
    message_type = MESSAGE_TYPES.get(msg_name)
    if not message_type:
        logger.error(
            "Unable to identify message to parse given the message "
            f"name {msg_name}"
        )
        return ParseResult(
            False, error=f"Unknown message '{msg_name}'", reason=UnknownProperty(msg_name)
        )

    result = try_parse(
        message_type, envelope[msg_name], custom_parser, cardinality_policy
    )
    if result.reason and not result.success:
        reason = MalformedNested(msg_name, result.reason)
        return ParseResult(False, error=str(reason), reason=reason)
    return result


def decode_message(
    json_data: Any,
    custom_parser: Optional[CustomParser] = None,
    cardinality_policy: Optional[CardinalityPolicy] = None,
) -> Any:
    """
    Same as try_decode_message(), but returns the parsed message.

    Raises:
        InvalidMessageError
    """
    result = try_decode_message(json_data, custom_parser, cardinality_policy)
    if not result.success:
        raise InvalidMessageError(
            f"The given JSON representation of a V2G message is invalid: "
            f"{result.error}",
            result.reason,
        )
    return result.value

