"""
This modules contains classes which implement the elements of the
ISO 15118-20 XSD file V2G_CI_CommonMessages.xsd: the data types and messages
shared by all energy transfer modes.

Choice groups of the XSD schema are single fields annotated with a
ChoiceGroup, holding one of several distinct member types. Where the XSD
schema distinguishes a scheduled and a dynamic control mode (or an EIM and a
PnC authorization mode) by which properties are present, this module defines
a closed variant family: a base class with one subclass per variant, and an
Annotated Union that picks the right subclass when parsing.
"""
from abc import ABC
from enum import Enum
from typing import ClassVar, Optional, Union

from pydantic import Field, conint, model_validator
from typing_extensions import Annotated, TypeAlias

from iso15118_json.messages import BaseModel, RootModel
from iso15118_json.messages.cardinality import bounded_set
from iso15118_json.messages.choice import ChoiceGroup, VariantFamily
from iso15118_json.messages.datatypes import (
    Duration,
    PercentValue,
    Timestamp,
    base64_binary,
)
from iso15118_json.messages.enums import (
    INT_8_MAX,
    INT_8_MIN,
    INT_16_MAX,
    INT_16_MIN,
    INT_32_MAX,
    INT_32_MIN,
    UINT_8_MAX,
    UINT_16_MAX,
    AuthEnum,
    ControlMode,
)
from iso15118_json.messages.iso15118_20.common_types import (
    Certificate,
    Currency,
    Description,
    EVSEStatus,
    Identifier,
    Language,
    MeterInfo,
    Name,
    NumericID,
    Processing,
    RationalNumber,
    Receipt,
    V2GRequest,
    V2GResponse,
)
from iso15118_json.messages.xmldsig import X509IssuerSerial
from iso15118_json.validators import validate_hex_binary

# XSD type unsignedShort (16 bit integer) with value range [0..65535]
ServiceID: TypeAlias = conint(ge=0, le=UINT_16_MAX)  # type: ignore
ParameterSetID: TypeAlias = conint(ge=0, le=UINT_16_MAX)  # type: ignore
GenChallenge: TypeAlias = base64_binary(min_length=16, max_length=16)
SubCertificates: TypeAlias = bounded_set(Certificate, max_occurs=3)


class ECDHCurve(str, Enum):
    """
    See section 8.3.5.3.39 in ISO 15118-20.
    Elliptic curves used for the Elliptic Curve Diffie Hellman (ECDH) key
    agreement protocol."""

    secp_521 = "SECP521"
    x448 = "X448"


class PowerToleranceAcceptance(str, Enum):
    """See section 8.3.5.3.12 in ISO 15118-20"""

    NOT_CONFIRMED = "PowerToleranceNotConfirmed"
    CONFIRMED = "PowerToleranceConfirmed"


class ChannelSelection(str, Enum):
    """See section 8.3.4.3.8.2 in ISO 15118-20"""

    CHARGE = "Charge"
    DISCHARGE = "Discharge"


class ChargeProgress(str, Enum):
    """See section 8.3.4.3.8.2 in ISO 15118-20"""

    START = "Start"
    STOP = "Stop"
    STANDBY = "Standby"
    SCHEDULE_RENEGOTIATION = "ScheduleRenegotiation"


class ChargingSession(str, Enum):
    """See section 8.3.4.3.10.2 in ISO 15118-20"""

    PAUSE = "Pause"
    TERMINATE = "Terminate"
    SERVICE_RENEGOTIATION = "ServiceRenegotiation"


# ============================================================================
# |                            CERTIFICATES                                  |
# ============================================================================


class CertificateChain(BaseModel):
    """See section 8.3.5.3.4 in ISO 15118-20"""

    certificate: Certificate = Field(..., alias="certificate")
    sub_certificates: Optional[SubCertificates] = Field(None, alias="subCertificates")


class SignedCertificateChain(BaseModel):
    """See section 8.3.5.3.5 in ISO 15118-20"""

    # 'id' is an XML attribute in the XSD schema
    id: Identifier = Field(..., alias="id")
    certificate: Certificate = Field(..., alias="certificate")
    sub_certificates: Optional[SubCertificates] = Field(None, alias="subCertificates")


class ContractCertificateChain(BaseModel):
    """See section 8.3.5.3.6 in ISO 15118-20"""

    certificate: Certificate = Field(..., alias="certificate")
    sub_certificates: SubCertificates = Field(..., alias="subCertificates")


class SECP521EncryptedPrivateKey(
    RootModel[base64_binary(min_length=94, max_length=94)]
):
    """The contract certificate's private key, encrypted with a SECP521 key"""


class X448EncryptedPrivateKey(RootModel[base64_binary(min_length=84, max_length=84)]):
    """The contract certificate's private key, encrypted with a X448 key"""


class TPMEncryptedPrivateKey(
    RootModel[base64_binary(min_length=209, max_length=209)]
):
    """The contract certificate's private key, encrypted for a TPM"""


EncryptedPrivateKey = Union[
    SECP521EncryptedPrivateKey, X448EncryptedPrivateKey, TPMEncryptedPrivateKey
]


class SignedInstallationData(BaseModel):
    """See section 8.3.5.3.39 in ISO 15118-20"""

    id: Identifier = Field(..., alias="id")
    contract_cert_chain: ContractCertificateChain = Field(
        ..., alias="contractCertificateChain"
    )
    ecdh_curve: ECDHCurve = Field(..., alias="ecdhCurve")
    dh_public_key: base64_binary(max_length=133) = Field(  # type: ignore
        ..., alias="dhPublicKey"
    )
    # Depends on the algorithm used to encrypt the private key associated
    # with the contract certificate
    encrypted_private_key: Annotated[
        EncryptedPrivateKey,
        ChoiceGroup(
            "EncryptedPrivateKey",
            mandatory=True,
            secp521EncryptedPrivateKey=SECP521EncryptedPrivateKey,
            x448EncryptedPrivateKey=X448EncryptedPrivateKey,
            tpmEncryptedPrivateKey=TPMEncryptedPrivateKey,
        ),
    ] = Field(..., alias="encryptedPrivateKey")


# ============================================================================
# |                         SERVICES AND PARAMETERS                          |
# ============================================================================


class Service(BaseModel):
    """See section 8.3.5.3.1 in ISO 15118-20"""

    service_id: ServiceID = Field(..., alias="serviceId")
    free_service: bool = Field(..., alias="freeService")


class SelectedService(BaseModel):
    """See section 8.3.5.3.25 in ISO 15118-20"""

    service_id: ServiceID = Field(..., alias="serviceId")
    parameter_set_id: ParameterSetID = Field(..., alias="parameterSetId")


class BooleanValue(RootModel[bool]):
    """XSD type boolean"""


class ByteValue(RootModel[conint(ge=INT_8_MIN, le=INT_8_MAX)]):  # type: ignore
    """XSD type byte"""


class ShortValue(RootModel[conint(ge=INT_16_MIN, le=INT_16_MAX)]):  # type: ignore
    """XSD type short"""


class IntegerValue(RootModel[conint(ge=INT_32_MIN, le=INT_32_MAX)]):  # type: ignore
    """XSD type int"""


class RationalNumberValue(RootModel[RationalNumber]):
    pass


class FiniteStringValue(RootModel[Name]):
    pass


ParameterValue = Union[
    BooleanValue,
    ByteValue,
    ShortValue,
    IntegerValue,
    RationalNumberValue,
    FiniteStringValue,
]


class Parameter(BaseModel):
    """
    See section 8.3.5.3.23 in ISO 15118-20

    The value is one of six value types, e.g.
    Parameter(name="Connector", value=IntegerValue(2))
    """

    name: Name = Field(..., alias="name")
    value: Annotated[
        ParameterValue,
        ChoiceGroup(
            "ParameterValue",
            mandatory=True,
            booleanValue=BooleanValue,
            byteValue=ByteValue,
            shortValue=ShortValue,
            integerValue=IntegerValue,
            rationalNumberValue=RationalNumberValue,
            finiteStringValue=FiniteStringValue,
        ),
    ] = Field(..., alias="value")


class ParameterSet(BaseModel):
    """See section 8.3.5.3.22 in ISO 15118-20"""

    parameter_set_id: ParameterSetID = Field(..., alias="parameterSetId")
    parameters: bounded_set(Parameter, max_occurs=32) = Field(  # type: ignore
        ..., alias="parameters"
    )


# ============================================================================
# |                          EV SCHEDULES AND OFFERS                         |
# ============================================================================


class EVPowerScheduleEntry(BaseModel):
    """See section 8.3.5.3.44 in ISO 15118-20"""

    duration: Duration = Field(..., alias="duration")
    power: RationalNumber = Field(..., alias="power")


class EVPowerSchedule(BaseModel):
    """See section 8.3.5.3.42 in ISO 15118-20"""

    time_anchor: Timestamp = Field(..., alias="timeAnchor")
    ev_power_schedule_entries: bounded_set(  # type: ignore
        EVPowerScheduleEntry, max_occurs=1024
    ) = Field(..., alias="evPowerScheduleEntries")


class EVPriceRule(BaseModel):
    """See section 8.3.5.3.48 in ISO 15118-20"""

    energy_fee: RationalNumber = Field(..., alias="energyFee")
    power_range_start: RationalNumber = Field(..., alias="powerRangeStart")


class EVPriceRuleStack(BaseModel):
    """See section 8.3.5.3.47 in ISO 15118-20"""

    duration: Duration = Field(..., alias="duration")
    ev_price_rules: bounded_set(EVPriceRule, max_occurs=8) = Field(  # type: ignore
        ..., alias="evPriceRules"
    )


class EVAbsolutePriceSchedule(BaseModel):
    """See section 8.3.5.3.45 in ISO 15118-20"""

    time_anchor: Timestamp = Field(..., alias="timeAnchor")
    currency: Currency = Field(..., alias="currency")
    price_algorithm: Identifier = Field(..., alias="priceAlgorithm")
    ev_price_rule_stacks: bounded_set(  # type: ignore
        EVPriceRuleStack, max_occurs=1024
    ) = Field(..., alias="evPriceRuleStacks")


class EVEnergyOffer(BaseModel):
    """See section 8.3.5.3.41 in ISO 15118-20"""

    ev_power_schedule: EVPowerSchedule = Field(..., alias="evPowerSchedule")
    ev_absolute_price_schedule: EVAbsolutePriceSchedule = Field(
        ..., alias="evAbsolutePriceSchedule"
    )


class ScheduledScheduleExchangeReqParams(BaseModel):
    """See section 8.3.5.3.14 in ISO 15118-20"""

    departure_time: Optional[Timestamp] = Field(None, alias="departureTime")
    ev_target_energy_request: Optional[RationalNumber] = Field(
        None, alias="evTargetEnergyRequest"
    )
    ev_max_energy_request: Optional[RationalNumber] = Field(
        None, alias="evMaximumEnergyRequest"
    )
    ev_min_energy_request: Optional[RationalNumber] = Field(
        None, alias="evMinimumEnergyRequest"
    )
    ev_energy_offer: Optional[EVEnergyOffer] = Field(None, alias="evEnergyOffer")


class DynamicScheduleExchangeReqParams(BaseModel):
    """See section 8.3.5.3.13 in ISO 15118-20"""

    departure_time: Timestamp = Field(..., alias="departureTime")
    min_soc: Optional[PercentValue] = Field(None, alias="minimumSOC")
    target_soc: Optional[PercentValue] = Field(None, alias="targetSOC")
    ev_target_energy_request: RationalNumber = Field(
        ..., alias="evTargetEnergyRequest"
    )
    ev_max_energy_request: RationalNumber = Field(..., alias="evMaximumEnergyRequest")
    ev_min_energy_request: RationalNumber = Field(..., alias="evMinimumEnergyRequest")
    ev_max_v2x_energy_request: Optional[RationalNumber] = Field(
        None, alias="evMaximumV2XEnergyRequest"
    )
    ev_min_v2x_energy_request: Optional[RationalNumber] = Field(
        None, alias="evMinimumV2XEnergyRequest"
    )

    @model_validator(mode="after")
    def both_v2x_fields_must_be_set(self):
        if (self.ev_max_v2x_energy_request is None) != (
            self.ev_min_v2x_energy_request is None
        ):
            raise ValueError(
                "evMaximumV2XEnergyRequest and evMinimumV2XEnergyRequest must "
                "either be both set or both omitted ([V2G20-2681])"
            )
        return self


# ============================================================================
# |                        SECC SCHEDULES AND PRICES                         |
# ============================================================================


class PowerScheduleEntry(BaseModel):
    """See section 8.3.5.3.20 in ISO 15118-20"""

    duration: Duration = Field(..., alias="duration")
    power: RationalNumber = Field(..., alias="power")
    power_l2: Optional[RationalNumber] = Field(None, alias="powerL2")
    power_l3: Optional[RationalNumber] = Field(None, alias="powerL3")


class PowerSchedule(BaseModel):
    """See section 8.3.5.3.18 in ISO 15118-20"""

    time_anchor: Timestamp = Field(..., alias="timeAnchor")
    available_energy: Optional[RationalNumber] = Field(None, alias="availableEnergy")
    power_tolerance: Optional[RationalNumber] = Field(None, alias="powerTolerance")
    power_schedule_entries: bounded_set(  # type: ignore
        PowerScheduleEntry, max_occurs=1024
    ) = Field(..., alias="powerScheduleEntries")


class PriceSchedule(BaseModel, ABC):
    """See sections 8.3.5.3.49 and 8.3.5.3.62 in ISO 15118-20"""

    time_anchor: Timestamp = Field(..., alias="timeAnchor")
    price_schedule_id: Identifier = Field(..., alias="priceScheduleId")
    description: Optional[Description] = Field(None, alias="description")


class PriceLevelScheduleEntry(BaseModel):
    """See section 8.3.5.3.64 in ISO 15118-20"""

    duration: Duration = Field(..., alias="duration")
    # XSD type unsignedByte with value range [0..255]
    price_level: int = Field(..., ge=0, le=UINT_8_MAX, alias="priceLevel")


class PriceLevelSchedule(PriceSchedule):
    """See section 8.3.5.3.62 in ISO 15118-20"""

    id: Optional[Identifier] = Field(None, alias="id")
    # XSD type unsignedByte with value range [0..255]
    num_price_levels: int = Field(
        ..., ge=0, le=UINT_8_MAX, alias="numberOfPriceLevels"
    )
    schedule_entries: bounded_set(  # type: ignore
        PriceLevelScheduleEntry, max_occurs=1024
    ) = Field(..., alias="priceLevelScheduleEntries")


class TaxRule(BaseModel):
    """See section 8.3.5.3.51 in ISO 15118-20"""

    tax_rule_id: NumericID = Field(..., alias="taxRuleId")
    tax_rule_name: Optional[Name] = Field(None, alias="taxRuleName")
    tax_rate: RationalNumber = Field(..., alias="taxRate")
    tax_included_in_price: Optional[bool] = Field(None, alias="taxIncludedInPrice")
    applies_to_energy_fee: bool = Field(..., alias="appliesToEnergyFee")
    applies_to_parking_fee: bool = Field(..., alias="appliesToParkingFee")
    applies_to_overstay_fee: bool = Field(..., alias="appliesToOverstayFee")
    applies_to_min_max_cost: bool = Field(..., alias="appliesMinimumMaximumCost")


class PriceRule(BaseModel):
    """See section 8.3.5.3.54 in ISO 15118-20"""

    energy_fee: RationalNumber = Field(..., alias="energyFee")
    parking_fee: Optional[RationalNumber] = Field(None, alias="parkingFee")
    parking_fee_period: Optional[Duration] = Field(None, alias="parkingFeePeriod")
    # XSD type unsignedShort, in g/kWh
    carbon_dioxide_emission: Optional[int] = Field(
        None, ge=0, le=UINT_16_MAX, alias="carbonDioxideEmission"
    )
    renewable_energy_percentage: Optional[PercentValue] = Field(
        None, alias="renewableGenerationPercentage"
    )
    power_range_start: RationalNumber = Field(..., alias="powerRangeStart")


class PriceRuleStack(BaseModel):
    """See section 8.3.5.3.53 in ISO 15118-20"""

    duration: Duration = Field(..., alias="duration")
    price_rules: bounded_set(PriceRule, max_occurs=8) = Field(  # type: ignore
        ..., alias="priceRules"
    )


class OverstayRule(BaseModel):
    """See section 8.3.5.3.56 in ISO 15118-20"""

    description: Optional[Description] = Field(None, alias="description")
    start_time: Timestamp = Field(..., alias="startTime")
    fee: RationalNumber = Field(..., alias="fee")
    fee_period: Duration = Field(..., alias="period")


class OverstayRuleList(BaseModel):
    """See section 8.3.5.3.55 in ISO 15118-20"""

    time_threshold: Optional[Duration] = Field(None, alias="overstayTimeThreshold")
    power_threshold: Optional[RationalNumber] = Field(
        None, alias="overstayPowerThreshold"
    )
    rules: bounded_set(OverstayRule, max_occurs=5) = Field(  # type: ignore
        ..., alias="overstayRules"
    )


class AdditionalService(BaseModel):
    """See section 8.3.5.3.58 in ISO 15118-20"""

    service_name: Name = Field(..., alias="serviceName")
    service_fee: RationalNumber = Field(..., alias="serviceFee")


class AbsolutePriceSchedule(PriceSchedule):
    """See section 8.3.5.3.49 in ISO 15118-20"""

    id: Identifier = Field(..., alias="id")
    currency: Currency = Field(..., alias="currency")
    language: Language = Field(..., alias="language")
    price_algorithm: Identifier = Field(..., alias="priceAlgorithmId")
    min_cost: Optional[RationalNumber] = Field(None, alias="minimumCost")
    max_cost: Optional[RationalNumber] = Field(None, alias="maximumCost")
    tax_rules: Optional[bounded_set(TaxRule, max_occurs=10)] = Field(  # type: ignore
        None, alias="taxRules"
    )
    price_rule_stacks: bounded_set(  # type: ignore
        PriceRuleStack, max_occurs=1024, min_occurs=1
    ) = Field(..., alias="priceRuleStacks")
    overstay_rules: Optional[OverstayRuleList] = Field(None, alias="overstayRules")
    additional_services: Optional[
        bounded_set(AdditionalService, max_occurs=5)  # type: ignore
    ] = Field(None, alias="additionalSelectedServices")


PriceScheduleChoice = Annotated[
    Optional[Union[AbsolutePriceSchedule, PriceLevelSchedule]],
    ChoiceGroup(
        "PriceSchedule",
        absolutePriceSchedule=AbsolutePriceSchedule,
        priceLevelSchedule=PriceLevelSchedule,
    ),
]


class ChargingSchedule(BaseModel):
    """See section 8.3.5.3.17 in ISO 15118-20"""

    power_schedule: PowerSchedule = Field(..., alias="powerSchedule")
    price_schedule: PriceScheduleChoice = Field(None, alias="priceSchedule")


class ScheduleTuple(BaseModel):
    """See section 8.3.5.3.16 in ISO 15118-20"""

    schedule_tuple_id: NumericID = Field(..., alias="id")
    charging_schedule: ChargingSchedule = Field(..., alias="chargingSchedule")
    discharging_schedule: Optional[ChargingSchedule] = Field(
        None, alias="dischargingSchedule"
    )


# ============================================================================
# |                             EV POWER PROFILE                             |
# ============================================================================


class BaseEVPowerProfile(BaseModel, ABC):
    """See section 8.3.5.3.9 in ISO 15118-20"""

    control_mode: ClassVar[ControlMode]

    time_anchor: Timestamp = Field(..., alias="timeAnchor")
    ev_power_profile_entries: bounded_set(  # type: ignore
        PowerScheduleEntry, max_occurs=2048
    ) = Field(..., alias="evPowerProfileEntries")


class ScheduledEVPowerProfile(BaseEVPowerProfile):
    """See section 8.3.5.3.12 in ISO 15118-20"""

    control_mode: ClassVar[ControlMode] = ControlMode.SCHEDULED

    selected_schedule_tuple_id: NumericID = Field(..., alias="selectedScheduleTupleId")
    power_tolerance_acceptance: Optional[PowerToleranceAcceptance] = Field(
        None, alias="powerToleranceAcceptance"
    )


class DynamicEVPowerProfile(BaseEVPowerProfile):
    """See section 8.3.5.3.11 in ISO 15118-20"""

    control_mode: ClassVar[ControlMode] = ControlMode.DYNAMIC


EVPowerProfile = Annotated[
    Union[ScheduledEVPowerProfile, DynamicEVPowerProfile],
    VariantFamily(
        "EVPowerProfile",
        default=DynamicEVPowerProfile,
        selectedScheduleTupleId=ScheduledEVPowerProfile,
        powerToleranceAcceptance=ScheduledEVPowerProfile,
    ),
]


class SignedMeteringData(BaseModel):
    """See section 8.3.5.3.38 in ISO 15118-20"""

    id: Identifier = Field(..., alias="id")
    # XSD type hexBinary with max 8 bytes
    session_id: str = Field(..., max_length=16, alias="sessionId")
    meter_info: MeterInfo = Field(..., alias="meterInfo")
    receipt: Optional[Receipt] = Field(None, alias="receipt")
    # Only set in scheduled control mode
    selected_schedule_tuple_id: Optional[NumericID] = Field(
        None, alias="selectedScheduleTupleId"
    )

    @model_validator(mode="after")
    def check_sessionid_is_hexbinary(self):
        validate_hex_binary("sessionId", self.session_id, 8)
        return self


# ============================================================================
# |                                MESSAGES                                  |
# ============================================================================


class SessionSetupReq(V2GRequest):
    """See section 8.3.4.3.1.2 in ISO 15118-20"""

    evcc_id: Identifier = Field(..., alias="evccId")


class SessionSetupRes(V2GResponse):
    """See section 8.3.4.3.1.3 in ISO 15118-20"""

    evse_id: Identifier = Field(..., alias="evseId")


class AuthorizationSetupReq(V2GRequest):
    """See section 8.3.4.3.2.1 in ISO 15118-20"""


class BaseAuthorizationSetupRes(V2GResponse, ABC):
    """See section 8.3.4.3.2.2 in ISO 15118-20"""

    authorization_mode: ClassVar[AuthEnum]

    auth_services: bounded_set(AuthEnum, max_occurs=2) = Field(  # type: ignore
        ..., alias="authorizationServices"
    )
    cert_install_service: bool = Field(..., alias="certificateInstallationService")


class EIMAuthorizationSetupRes(BaseAuthorizationSetupRes):
    """Offers External Identification Means only"""

    authorization_mode: ClassVar[AuthEnum] = AuthEnum.EIM


class PnCAuthorizationSetupRes(BaseAuthorizationSetupRes):
    """Offers Plug & Charge, see section 8.3.5.3.34 in ISO 15118-20"""

    authorization_mode: ClassVar[AuthEnum] = AuthEnum.PNC

    gen_challenge: GenChallenge = Field(..., alias="genChallenge")
    supported_providers: Optional[
        bounded_set(Name, max_occurs=128)  # type: ignore
    ] = Field(None, alias="supportedProviders")


AuthorizationSetupRes = Annotated[
    Union[PnCAuthorizationSetupRes, EIMAuthorizationSetupRes],
    VariantFamily(
        "AuthorizationSetupRes",
        default=EIMAuthorizationSetupRes,
        genChallenge=PnCAuthorizationSetupRes,
        supportedProviders=PnCAuthorizationSetupRes,
    ),
]


class EIMAuthorizationMode(BaseModel):
    """
    See section 8.3.5.3.31 in ISO 15118-20
    EIM = External Identification Means
    """


class PnCAuthorizationMode(BaseModel):
    """
    See section 8.3.5.3.32 in ISO 15118-20
    PnC = Plug and Charge
    """

    id: Identifier = Field(..., alias="id")
    gen_challenge: GenChallenge = Field(..., alias="genChallenge")
    contract_cert_chain: ContractCertificateChain = Field(
        ..., alias="contractCertificateChain"
    )


class AuthorizationReq(V2GRequest):
    """See section 8.3.4.3.3.1 in ISO 15118-20"""

    selected_auth_service: AuthEnum = Field(..., alias="selectedAuthorizationService")
    authorization_mode: Annotated[
        Union[EIMAuthorizationMode, PnCAuthorizationMode],
        ChoiceGroup(
            "AuthorizationMode",
            mandatory=True,
            eimAuthorizationMode=EIMAuthorizationMode,
            pncAuthorizationMode=PnCAuthorizationMode,
        ),
    ] = Field(..., alias="authorizationMode")


class AuthorizationRes(V2GResponse):
    """See section 8.3.4.3.3.2 in ISO 15118-20"""

    evse_processing: Processing = Field(..., alias="evseProcessing")


class ServiceDiscoveryReq(V2GRequest):
    """See section 8.3.4.3.4.2 in ISO 15118-20"""

    supported_service_ids: Optional[
        bounded_set(ServiceID, max_occurs=16)  # type: ignore
    ] = Field(None, alias="supportedServiceIds")


class ServiceDiscoveryRes(V2GResponse):
    """See section 8.3.4.3.4.3 in ISO 15118-20"""

    service_renegotiation_supported: bool = Field(
        ..., alias="serviceRenegotiationSupported"
    )
    energy_services: bounded_set(Service, max_occurs=8) = Field(  # type: ignore
        ..., alias="energyTransferServices"
    )
    value_added_services: Optional[
        bounded_set(Service, max_occurs=8)  # type: ignore
    ] = Field(None, alias="valueAddedServices")


class ServiceDetailReq(V2GRequest):
    """See section 8.3.4.3.5.1 in ISO 15118-20"""

    service_id: ServiceID = Field(..., alias="serviceId")


class ServiceDetailRes(V2GResponse):
    """See section 8.3.4.3.5.2 in ISO 15118-20"""

    service_id: ServiceID = Field(..., alias="serviceId")
    service_parameters: bounded_set(  # type: ignore
        ParameterSet, max_occurs=32
    ) = Field(..., alias="serviceParameters")


class ServiceSelectionReq(V2GRequest):
    """See section 8.3.4.3.6.2 in ISO 15118-20"""

    selected_energy_service: SelectedService = Field(
        ..., alias="selectedEnergyTransferService"
    )
    selected_vas_list: Optional[
        bounded_set(SelectedService, max_occurs=16)  # type: ignore
    ] = Field(None, alias="selectedValueAddedServices")


class ServiceSelectionRes(V2GResponse):
    """See section 8.3.4.3.6.3 in ISO 15118-20"""


class ScheduleExchangeReq(V2GRequest):
    """See section 8.3.4.3.7.2 in ISO 15118-20"""

    max_supporting_points: int = Field(
        ..., ge=12, le=1024, alias="maximumSupportingPoints"
    )
    control_mode: Annotated[
        Union[ScheduledScheduleExchangeReqParams, DynamicScheduleExchangeReqParams],
        ChoiceGroup(
            "ControlMode",
            mandatory=True,
            scheduledControlMode=ScheduledScheduleExchangeReqParams,
            dynamicControlMode=DynamicScheduleExchangeReqParams,
        ),
    ] = Field(..., alias="controlMode")


class BaseScheduleExchangeRes(V2GResponse, ABC):
    """See section 8.3.4.3.7.3 in ISO 15118-20"""

    control_mode: ClassVar[ControlMode]

    evse_processing: Processing = Field(..., alias="evseProcessing")
    go_to_pause: Optional[bool] = Field(None, alias="goToPause")


class ScheduledScheduleExchangeRes(BaseScheduleExchangeRes):
    """See section 8.3.5.3.16 in ISO 15118-20"""

    control_mode: ClassVar[ControlMode] = ControlMode.SCHEDULED

    schedule_tuples: bounded_set(ScheduleTuple, max_occurs=3) = Field(  # type: ignore
        ..., alias="scheduleTuples"
    )


class DynamicScheduleExchangeRes(BaseScheduleExchangeRes):
    """See section 8.3.5.3.15 in ISO 15118-20"""

    control_mode: ClassVar[ControlMode] = ControlMode.DYNAMIC

    departure_time: Optional[Timestamp] = Field(None, alias="departureTime")
    min_soc: Optional[PercentValue] = Field(None, alias="minimumSOC")
    target_soc: Optional[PercentValue] = Field(None, alias="targetSOC")
    price_schedule: PriceScheduleChoice = Field(None, alias="priceSchedule")


ScheduleExchangeRes = Annotated[
    Union[ScheduledScheduleExchangeRes, DynamicScheduleExchangeRes],
    VariantFamily(
        "ScheduleExchangeRes",
        default=DynamicScheduleExchangeRes,
        scheduleTuples=ScheduledScheduleExchangeRes,
        departureTime=DynamicScheduleExchangeRes,
        minimumSOC=DynamicScheduleExchangeRes,
        targetSOC=DynamicScheduleExchangeRes,
        absolutePriceSchedule=DynamicScheduleExchangeRes,
        priceLevelSchedule=DynamicScheduleExchangeRes,
    ),
]


class PowerDeliveryReq(V2GRequest):
    """See section 8.3.4.3.8.2 in ISO 15118-20"""

    ev_processing: Processing = Field(..., alias="evProcessing")
    charge_progress: ChargeProgress = Field(..., alias="chargeProgress")
    ev_power_profile: Optional[EVPowerProfile] = Field(None, alias="evPowerProfile")
    bpt_channel_selection: Optional[ChannelSelection] = Field(
        None, alias="bptChannelSelection"
    )


class PowerDeliveryRes(V2GResponse):
    """See section 8.3.4.3.8.3 in ISO 15118-20"""

    evse_status: Optional[EVSEStatus] = Field(None, alias="evseStatus")


class MeteringConfirmationReq(V2GRequest):
    """See section 8.3.4.3.11.2 in ISO 15118-20"""

    signed_metering_data: SignedMeteringData = Field(..., alias="signedMeteringData")


class MeteringConfirmationRes(V2GResponse):
    """See section 8.3.4.3.11.3 in ISO 15118-20"""


class CertificateInstallationReq(V2GRequest):
    """See section 8.3.4.3.9.2 in ISO 15118-20"""

    oem_prov_cert_chain: SignedCertificateChain = Field(
        ..., alias="oemProvisioningCertificateChain"
    )
    root_cert_ids: bounded_set(  # type: ignore
        X509IssuerSerial, max_occurs=20
    ) = Field(..., alias="rootCertificateIds")
    # XSD type unsignedByte with value range [0..255]
    max_contract_cert_chains: int = Field(
        ..., ge=0, le=UINT_8_MAX, alias="maximumContractCertificateChains"
    )
    prioritized_emaids: Optional[
        bounded_set(Identifier, max_occurs=8)  # type: ignore
    ] = Field(None, alias="prioritizedEMAIds")


class CertificateInstallationRes(V2GResponse):
    """See section 8.3.4.3.9.3 in ISO 15118-20"""

    evse_processing: Processing = Field(..., alias="evseProcessing")
    cps_certificate_chain: CertificateChain = Field(..., alias="cpsCertificateChain")
    signed_installation_data: SignedInstallationData = Field(
        ..., alias="signedInstallationData"
    )
    # XSD type unsignedByte with value range [0..255]
    remaining_contract_cert_chains: int = Field(
        ..., ge=0, le=UINT_8_MAX, alias="remainingContractCertificateChains"
    )


class SessionStopReq(V2GRequest):
    """See section 8.3.4.3.10.2 in ISO 15118-20"""

    charging_session: ChargingSession = Field(..., alias="chargingSession")
    ev_termination_code: Optional[Name] = Field(None, alias="evTerminationCode")
    ev_termination_explanation: Optional[Description] = Field(
        None, alias="evTerminationExplanation"
    )


class SessionStopRes(V2GResponse):
    """See section 8.3.4.3.10.3 in ISO 15118-20"""
