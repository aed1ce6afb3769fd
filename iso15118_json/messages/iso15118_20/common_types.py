"""
This modules contains classes which implement the elements of the
ISO 15118-20 XSD file V2G_CI_CommonTypes.xsd.
These are the data types used by both the header and the body elements of the
messages exchanged between the EVCC and the SECC.

All classes are ultimately subclassed from our BaseModel to ease validation
when instantiating a class and to reduce boilerplate code. Pydantic's Field
class maps each field to its camelCase JSON property through the 'alias'
attribute.
"""
import math
from abc import ABC
from enum import Enum
from typing import Optional, Tuple, Union

from pydantic import Field, conint, constr, field_validator
from typing_extensions import TypeAlias

from iso15118_json.messages import BaseModel
from iso15118_json.messages.cardinality import bounded_set
from iso15118_json.messages.datatypes import (
    PercentValue,
    Timestamp,
    base64_binary,
)
from iso15118_json.messages.enums import (
    INT_8_MAX,
    INT_8_MIN,
    INT_16_MAX,
    INT_16_MIN,
    UINT_16_MAX,
    UINT_32_MAX,
    UINT_64_MAX,
)
from iso15118_json.validators import validate_hex_binary

# https://docs.pydantic.dev/latest/api/types/
# Check Annex C.1 or V2G_CI_CommonTypes.xsd
# certificateType (a DER encoded X.509 certificate)
Certificate: TypeAlias = base64_binary(max_length=1600)
# identifierType
Identifier: TypeAlias = constr(max_length=255)  # type: ignore
# numericIDType
NumericID: TypeAlias = conint(ge=1, le=UINT_32_MAX)  # type: ignore
# nameType
Name: TypeAlias = constr(max_length=80)  # type: ignore
# descriptionType
Description: TypeAlias = constr(max_length=160)  # type: ignore
# ISO 4217 currency code
Currency: TypeAlias = constr(min_length=3, max_length=3)  # type: ignore
# ISO 639 language code
Language: TypeAlias = constr(min_length=2, max_length=3)  # type: ignore


class MessageHeader(BaseModel):
    """See section 8.3.3 in ISO 15118-20"""

    # XSD type hexBinary with max 8 bytes encoded as 16 hexadecimal characters
    session_id: str = Field(..., max_length=16, alias="sessionId")
    timestamp: Timestamp = Field(..., alias="timestamp")

    @field_validator("session_id")
    @classmethod
    def check_sessionid_is_hexbinary(cls, value):
        return validate_hex_binary("sessionId", value, 8)


class V2GMessage(BaseModel, ABC):
    """
    The base of all request and response messages. Each message carries its
    own header.
    """

    message_header: MessageHeader = Field(..., alias="messageHeader")

    def __str__(self):
        return self.__class__.__name__


class V2GRequest(V2GMessage, ABC):
    """Base class for all messages that are request messages"""


class ResponseCode(str, Enum):
    """See page 465 of Annex A in ISO 15118-20"""

    OK = "OK"
    OK_CERT_EXPIRES_SOON = "OK_CertificateExpiresSoon"
    OK_NEW_SESSION_ESTABLISHED = "OK_NewSessionEstablished"
    OK_OLD_SESSION_JOINED = "OK_OldSessionJoined"
    OK_POWER_TOLERANCE_CONFIRMED = "OK_PowerToleranceConfirmed"
    WARN_AUTH_SELECTION_INVALID = "WARNING_AuthorizationSelectionInvalid"
    WARN_CERT_EXPIRED = "WARNING_CertificateExpired"
    WARN_CERT_NOT_YET_VALID = "WARNING_CertificateNotYetValid"
    WARN_CERT_REVOKED = "WARNING_CertificateRevoked"
    WARN_CERT_VALIDATION_ERROR = "WARNING_CertificateValidationError"
    WARN_CHALLENGE_INVALID = "WARNING_ChallengeInvalid"
    WARN_EIM_AUTH_FAILED = "WARNING_EIMAuthorizationFailure"
    WARN_EMSP_UNKNOWN = "WARNING_eMSPUnknown"
    WARN_EV_POWER_PROFILE_VIOLATION = "WARNING_EVPowerProfileViolation"
    WARN_GENERAL_PNC_AUTH_ERROR = "WARNING_GeneralPnCAuthorizationError"
    WARN_NO_CERT_AVAILABLE = "WARNING_NoCertificateAvailable"
    WARN_NO_CONTRACT_MATCHING_PCID_FOUND = "WARNING_NoContractMatchingPCIDFound"
    WARN_POWER_TOLERANCE_NOT_CONFIRMED = "WARNING_PowerToleranceNotConfirmed"
    WARN_SCHEDULE_RENEGOTIATION_FAILED = "WARNING_ScheduleRenegotiationFailed"
    WARN_STANDBY_NOT_ALLOWED = "WARNING_StandbyNotAllowed"
    WARN_WPT = "WARNING_WPT"
    FAILED = "FAILED"
    FAILED_ASSOCIATION_ERROR = "FAILED_AssociationError"
    FAILED_CONTACTOR_ERROR = "FAILED_ContactorError"
    FAILED_EV_POWER_PROFILE_INVALID = "FAILED_EVPowerProfileInvalid"
    FAILED_EV_POWER_PROFILE_VIOLATION = "FAILED_EVPowerProfileViolation"
    FAILED_METERING_SIGNATURE_NOT_VALID = "FAILED_MeteringSignatureNotValid"
    FAILED_NO_ENERGY_TRANSFER_SERVICE_SELECTED = (
        "FAILED_NoEnergyTransferServiceSelected"
    )
    FAILED_NO_SERVICE_RENEGOTIATION_SUPPORTED = "FAILED_NoServiceRenegotiationSupported"
    FAILED_PAUSE_NOT_ALLOWED = "FAILED_PauseNotAllowed"
    FAILED_POWER_DELIVERY_NOT_APPLIED = "FAILED_PowerDeliveryNotApplied"
    FAILED_POWER_TOLERANCE_NOT_CONFIRMED = "FAILED_PowerToleranceNotConfirmed"
    FAILED_SCHEDULE_RENEGOTIATION = "FAILED_ScheduleRenegotiation"
    FAILED_SCHEDULE_SELECTION_INVALID = "FAILED_ScheduleSelectionInvalid"
    FAILED_SEQUENCE_ERROR = "FAILED_SequenceError"
    FAILED_SERVICE_ID_INVALID = "FAILED_ServiceIDInvalid"
    FAILED_SERVICE_SELECTION_INVALID = "FAILED_ServiceSelectionInvalid"
    FAILED_SIGNATURE_ERROR = "FAILED_SignatureError"
    FAILED_UNKNOWN_SESSION = "FAILED_UnknownSession"
    FAILED_WRONG_CHARGE_PARAMETER = "FAILED_WrongChargeParameter"


class V2GResponse(V2GMessage, ABC):
    """Base class for all messages that are response messages"""

    response_code: ResponseCode = Field(..., alias="responseCode")


class Processing(str, Enum):
    """
    See usage in sections 8.3.4.3.3.2 (AuthorizationRes),
    8.3.4.3.7.3 (ScheduleExchangeRes), 8.3.4.3.8.2 (PowerDeliveryReq) and
    8.3.4.3.9.3 (CertificateInstallationRes) in ISO 15118-20
    """

    FINISHED = "Finished"
    ONGOING = "Ongoing"
    WAITING_FOR_CUSTOMER = "Ongoing_WaitingForCustomerInteraction"


class RationalNumber(BaseModel):
    """See section 8.3.5.3.8 in ISO 15118-20"""

    # XSD type byte with value range [-128..127]
    exponent: int = Field(..., ge=INT_8_MIN, le=INT_8_MAX, alias="exponent")
    # XSD type short (16 bit integer) with value range [-32768..32767]
    value: int = Field(..., ge=INT_16_MIN, le=INT_16_MAX, alias="value")

    def get_decimal_value(self) -> float:
        return self.value * 10**self.exponent

    @classmethod
    def get_rational_repr(cls, float_value: Union[float, int, None]):
        if float_value is None:
            return None
        exponent, value = cls._convert_to_exponent_number(float_value)
        return RationalNumber(exponent=exponent, value=value)

    @classmethod
    def _convert_to_exponent_number(
        cls,
        float_value: float,
        min_limit: float = INT_16_MIN,
        max_limit: float = INT_16_MAX,
    ) -> Tuple[int, int]:
        """
        Convert to exponent number, using the smallest exponent in [-3..3]
        for which the value fits into a 16-bit integer.

        float_value = 0.0234 => exponent = -3, return value = 23
        float_value = 2.34 => exponent = -3, return value = 2340
        float_value = 234 => exponent = -2, return value = 23400
        float_value = 234000 => exponent = 1, return value = 23400

        Args:
            float_value (float): parameter value

        Returns:
           a tuple where the first item is the exponent and other is the
           int value with the applied exponent
        """
        if float_value == 0:
            return 0, 0

        # Truncate towards zero, so the value never exceeds the original one
        round_func = math.floor if float_value > 0 else math.ceil

        for exponent in range(-3, 4):
            new_value = round_func(float_value * 10 ** (-exponent))
            if min_limit <= new_value <= max_limit:
                return exponent, new_value

        # No exponent makes the value fit into a 16-bit integer
        raise ValueError(
            f"{float_value} cannot be represented as a rational number with "
            f"an exponent within [-3..3]"
        )


class EVSENotification(str, Enum):
    """See section 8.3.5.3.26 in ISO 15118-20"""

    PAUSE = "Pause"
    EXIT_STANDBY = "ExitStandby"
    TERMINATE = "Terminate"
    METERING_CONFIRMATION = "MeteringConfirmation"
    SCHEDULE_RENEGOTIATION = "ScheduleRenegotiation"
    SERVICE_RENEGOTIATION = "ServiceRenegotiation"


class EVSEStatus(BaseModel):
    """See section 8.3.5.3.26 in ISO 15118-20"""

    # XSD type unsignedShort, in seconds
    notification_max_delay: conint(ge=0, le=UINT_16_MAX) = Field(  # type: ignore
        ..., alias="notificationMaxDelay"
    )
    evse_notification: EVSENotification = Field(..., alias="evseNotification")


class DisplayParameters(BaseModel):
    """See section 8.3.5.3.28 in ISO 15118-20"""

    present_soc: Optional[PercentValue] = Field(None, alias="presentSOC")
    min_soc: Optional[PercentValue] = Field(None, alias="minimumSOC")
    target_soc: Optional[PercentValue] = Field(None, alias="targetSOC")
    max_soc: Optional[PercentValue] = Field(None, alias="maximumSOC")
    remaining_time_to_min_soc: Optional[int] = Field(
        None, ge=0, le=UINT_32_MAX, alias="remainingTimeToMinimumSOC"
    )
    remaining_time_to_target_soc: Optional[int] = Field(
        None, ge=0, le=UINT_32_MAX, alias="remainingTimeToTargetSOC"
    )
    remaining_time_to_max_soc: Optional[int] = Field(
        None, ge=0, le=UINT_32_MAX, alias="remainingTimeToMaximumSOC"
    )
    charging_complete: Optional[bool] = Field(None, alias="chargingComplete")
    battery_energy_capacity: Optional[RationalNumber] = Field(
        None, alias="batteryEnergyCapacity"
    )
    inlet_hot: Optional[bool] = Field(None, alias="inletHot")


class MeterInfo(BaseModel):
    """See section 8.3.5.3.7 in ISO 15118-20"""

    meter_id: str = Field(..., max_length=32, alias="meterId")
    # XSD type unsignedLong
    charged_energy_reading_wh: int = Field(
        ..., ge=0, le=UINT_64_MAX, alias="chargedEnergyReading"
    )
    bpt_discharged_energy_reading_wh: Optional[int] = Field(
        None, ge=0, le=UINT_64_MAX, alias="dischargedEnergyReading"
    )
    capacitive_energy_reading_varh: Optional[int] = Field(
        None, ge=0, le=UINT_64_MAX, alias="capacitiveEnergyReading"
    )
    bpt_inductive_energy_reading_varh: Optional[int] = Field(
        None, ge=0, le=UINT_64_MAX, alias="inductiveEnergyReading"
    )
    meter_signature: Optional[base64_binary(max_length=64)] = Field(
        None, alias="meterSignature"
    )
    meter_status: Optional[int] = Field(
        None, ge=INT_16_MIN, le=INT_16_MAX, alias="meterStatus"
    )
    meter_timestamp: Optional[Timestamp] = Field(None, alias="meterTimestamp")


class DetailedCost(BaseModel):
    """See section 8.3.5.3.61 in ISO 15118-20"""

    amount: RationalNumber = Field(..., alias="amount")
    cost_per_unit: RationalNumber = Field(..., alias="costPerUnit")


class DetailedTax(BaseModel):
    """See section 8.3.5.3.60 in ISO 15118-20"""

    tax_rule_id: NumericID = Field(..., alias="taxRuleId")
    amount: RationalNumber = Field(..., alias="amount")


class Receipt(BaseModel):
    """See section 8.3.5.3.59 in ISO 15118-20"""

    time_anchor: Timestamp = Field(..., alias="timeAnchor")
    energy_costs: Optional[DetailedCost] = Field(None, alias="energyCosts")
    occupancy_costs: Optional[DetailedCost] = Field(None, alias="occupancyCosts")
    additional_services_costs: Optional[DetailedCost] = Field(
        None, alias="additionalServicesCosts"
    )
    overstay_costs: Optional[DetailedCost] = Field(None, alias="overstayCosts")
    tax_costs: Optional[bounded_set(DetailedTax, max_occurs=10)] = Field(
        None, alias="taxCosts"
    )
