"""
JSON representations of ISO 15118-20 messages and nested types, as received
from a communication partner
"""
from base64 import b64encode
from copy import deepcopy

from iso15118_json.messages.iso15118_20.common_messages import (
    AbsolutePriceSchedule,
    AuthorizationReq,
    AuthorizationRes,
    AuthorizationSetupReq,
    AuthorizationSetupRes,
    CertificateInstallationReq,
    CertificateInstallationRes,
    ChargingSchedule,
    EVPowerProfile,
    MeteringConfirmationReq,
    MeteringConfirmationRes,
    Parameter,
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
    SignedInstallationData,
)
from tests.messages.json_message_container import JSONMessageContainer

MOCK_SESSION_ID = "82DBA3A44ED6E5B9"
TIME_ANCHOR = "2022-07-28T16:19:54+00:00"
CERTIFICATE = b64encode(b"\x30\x82\x01\x0a\x02\x82\x01\x01").decode()
GEN_CHALLENGE = b64encode(bytes(range(16))).decode()

HEADER = {"sessionId": MOCK_SESSION_ID, "timestamp": TIME_ANCHOR}


def rational(value: int, exponent: int = 0) -> dict:
    return {"exponent": exponent, "value": value}


def power_schedule_entry(duration: int = 3600, power: int = 11) -> dict:
    return {"duration": duration, "power": rational(power, 3)}


def tax_rule(tax_rule_id: int) -> dict:
    return {
        "taxRuleId": tax_rule_id,
        "taxRuleName": f"VAT {tax_rule_id}",
        "taxRate": rational(19, -2),
        "taxIncludedInPrice": True,
        "appliesToEnergyFee": True,
        "appliesToParkingFee": False,
        "appliesToOverstayFee": False,
        "appliesMinimumMaximumCost": True,
    }


def price_rule_stack(duration: int = 0, energy_fee: int = 35) -> dict:
    return {
        "duration": duration,
        "priceRules": [
            {
                "energyFee": rational(energy_fee, -2),
                "parkingFee": rational(1),
                "parkingFeePeriod": 3600,
                "carbonDioxideEmission": 120,
                "renewableGenerationPercentage": 60,
                "powerRangeStart": rational(0),
            }
        ],
    }


def absolute_price_schedule(**overrides) -> dict:
    schedule = {
        "id": "price-1",
        "timeAnchor": TIME_ANCHOR,
        "priceScheduleId": "PS-1",
        "currency": "EUR",
        "language": "de",
        "priceAlgorithmId": "urn:iso:std:iso:15118:-20:PriceAlgorithm:1-Power",
        "priceRuleStacks": [price_rule_stack()],
    }
    schedule.update(overrides)
    return schedule


def price_level_schedule() -> dict:
    return {
        "timeAnchor": TIME_ANCHOR,
        "priceScheduleId": "PS-2",
        "numberOfPriceLevels": 2,
        "priceLevelScheduleEntries": [
            {"duration": 0, "priceLevel": 1},
            {"duration": 7200, "priceLevel": 2},
        ],
    }


def power_schedule() -> dict:
    return {
        "timeAnchor": TIME_ANCHOR,
        "availableEnergy": rational(50, 3),
        "powerScheduleEntries": [power_schedule_entry(3600, 11)],
    }


def charging_schedule(**price_schedule) -> dict:
    schedule = {"powerSchedule": power_schedule()}
    schedule.update(price_schedule)
    return schedule


def ev_power_profile(**overrides) -> dict:
    profile = {
        "timeAnchor": TIME_ANCHOR,
        "evPowerProfileEntries": [
            power_schedule_entry(1800, 11),
            power_schedule_entry(1800, 7),
        ],
    }
    profile.update(overrides)
    return profile


def contract_certificate_chain() -> dict:
    return {"certificate": CERTIFICATE, "subCertificates": [CERTIFICATE]}


def parameter_set() -> dict:
    return {
        "parameterSetId": 1,
        "parameters": [
            {"name": "Connector", "integerValue": 2},
            {"name": "ControlMode", "integerValue": 1},
            {"name": "BPTChannel", "booleanValue": False},
            {"name": "Tariff", "finiteStringValue": "green"},
            {"name": "MaximumPower", "rationalNumberValue": rational(22, 3)},
        ],
    }


def signed_installation_data(**private_key) -> dict:
    data = {
        "id": "sid-1",
        "contractCertificateChain": contract_certificate_chain(),
        "ecdhCurve": "SECP521",
        "dhPublicKey": b64encode(bytes(133)).decode(),
    }
    data.update(private_key or {"secp521EncryptedPrivateKey": b64encode(bytes(94)).decode()})
    return data


def message(body: dict) -> dict:
    msg = {"messageHeader": deepcopy(HEADER)}
    msg.update(body)
    return msg


def response(body: dict, response_code: str = "OK") -> dict:
    return message({"responseCode": response_code, **body})


NESTED_TYPES = [
    JSONMessageContainer(
        message_name="AbsolutePriceSchedule",
        message_type=AbsolutePriceSchedule,
        json_dict=absolute_price_schedule(
            description="Weekday tariff",
            minimumCost=rational(1),
            maximumCost=rational(100),
            taxRules=[tax_rule(1), tax_rule(2)],
            overstayRules={
                "overstayTimeThreshold": 1800,
                "overstayRules": [
                    {
                        "startTime": TIME_ANCHOR,
                        "fee": rational(5, -1),
                        "period": 600,
                    }
                ],
            },
            additionalSelectedServices=[
                {"serviceName": "Parking", "serviceFee": rational(2)}
            ],
        ),
    ),
    JSONMessageContainer(
        message_name="ChargingSchedule",
        message_type=ChargingSchedule,
        json_dict=charging_schedule(priceLevelSchedule=price_level_schedule()),
    ),
    JSONMessageContainer(
        message_name="ChargingSchedule",
        message_type=ChargingSchedule,
        json_dict=charging_schedule(),
        description="without price schedule",
    ),
    JSONMessageContainer(
        message_name="Parameter",
        message_type=Parameter,
        json_dict={"name": "Connector", "shortValue": -2},
    ),
    JSONMessageContainer(
        message_name="SignedInstallationData",
        message_type=SignedInstallationData,
        json_dict=signed_installation_data(),
    ),
    JSONMessageContainer(
        message_name="EVPowerProfile",
        message_type=EVPowerProfile,
        json_dict=ev_power_profile(selectedScheduleTupleId=1),
        description="scheduled",
    ),
    JSONMessageContainer(
        message_name="EVPowerProfile",
        message_type=EVPowerProfile,
        json_dict=ev_power_profile(),
        description="dynamic",
    ),
]

MESSAGES = [
    JSONMessageContainer(
        message_name="SessionSetupReq",
        message_type=SessionSetupReq,
        json_dict=message({"evccId": "WMIV1234567890ABCDEX"}),
    ),
    JSONMessageContainer(
        message_name="SessionSetupRes",
        message_type=SessionSetupRes,
        json_dict=response(
            {"evseId": "DE*ABC*E1234567*1"}, "OK_NewSessionEstablished"
        ),
    ),
    JSONMessageContainer(
        message_name="AuthorizationSetupReq",
        message_type=AuthorizationSetupReq,
        json_dict=message({}),
    ),
    JSONMessageContainer(
        message_name="AuthorizationSetupRes",
        message_type=AuthorizationSetupRes,
        json_dict=response(
            {
                "authorizationServices": ["EIM", "PnC"],
                "certificateInstallationService": True,
                "genChallenge": GEN_CHALLENGE,
                "supportedProviders": ["Provider A", "Provider B"],
            }
        ),
        description="PnC",
    ),
    JSONMessageContainer(
        message_name="AuthorizationSetupRes",
        message_type=AuthorizationSetupRes,
        json_dict=response(
            {
                "authorizationServices": ["EIM"],
                "certificateInstallationService": False,
            }
        ),
        description="EIM",
    ),
    JSONMessageContainer(
        message_name="AuthorizationReq",
        message_type=AuthorizationReq,
        json_dict=message(
            {
                "selectedAuthorizationService": "PnC",
                "pncAuthorizationMode": {
                    "id": "auth-1",
                    "genChallenge": GEN_CHALLENGE,
                    "contractCertificateChain": contract_certificate_chain(),
                },
            }
        ),
        description="PnC",
    ),
    JSONMessageContainer(
        message_name="AuthorizationReq",
        message_type=AuthorizationReq,
        json_dict=message(
            {"selectedAuthorizationService": "EIM", "eimAuthorizationMode": {}}
        ),
        description="EIM",
    ),
    JSONMessageContainer(
        message_name="AuthorizationRes",
        message_type=AuthorizationRes,
        json_dict=response({"evseProcessing": "Finished"}),
    ),
    JSONMessageContainer(
        message_name="ServiceDiscoveryReq",
        message_type=ServiceDiscoveryReq,
        json_dict=message({"supportedServiceIds": [1, 5, 6]}),
    ),
    JSONMessageContainer(
        message_name="ServiceDiscoveryRes",
        message_type=ServiceDiscoveryRes,
        json_dict=response(
            {
                "serviceRenegotiationSupported": False,
                "energyTransferServices": [
                    {"serviceId": 1, "freeService": False},
                    {"serviceId": 5, "freeService": True},
                ],
                "valueAddedServices": [{"serviceId": 65, "freeService": True}],
            }
        ),
    ),
    JSONMessageContainer(
        message_name="ServiceDetailReq",
        message_type=ServiceDetailReq,
        json_dict=message({"serviceId": 1}),
    ),
    JSONMessageContainer(
        message_name="ServiceDetailRes",
        message_type=ServiceDetailRes,
        json_dict=response({"serviceId": 1, "serviceParameters": [parameter_set()]}),
    ),
    JSONMessageContainer(
        message_name="ServiceSelectionReq",
        message_type=ServiceSelectionReq,
        json_dict=message(
            {
                "selectedEnergyTransferService": {
                    "serviceId": 1,
                    "parameterSetId": 1,
                },
                "selectedValueAddedServices": [{"serviceId": 65, "parameterSetId": 2}],
            }
        ),
    ),
    JSONMessageContainer(
        message_name="ServiceSelectionRes",
        message_type=ServiceSelectionRes,
        json_dict=response({}),
    ),
    JSONMessageContainer(
        message_name="ScheduleExchangeReq",
        message_type=ScheduleExchangeReq,
        json_dict=message(
            {
                "maximumSupportingPoints": 1024,
                "dynamicControlMode": {
                    "departureTime": TIME_ANCHOR,
                    "minimumSOC": 30,
                    "targetSOC": 80,
                    "evTargetEnergyRequest": rational(40, 3),
                    "evMaximumEnergyRequest": rational(60, 3),
                    "evMinimumEnergyRequest": rational(20, 3),
                },
            }
        ),
        description="dynamic",
    ),
    JSONMessageContainer(
        message_name="ScheduleExchangeReq",
        message_type=ScheduleExchangeReq,
        json_dict=message(
            {
                "maximumSupportingPoints": 12,
                "scheduledControlMode": {
                    "departureTime": TIME_ANCHOR,
                    "evTargetEnergyRequest": rational(40, 3),
                },
            }
        ),
        description="scheduled",
    ),
    JSONMessageContainer(
        message_name="ScheduleExchangeRes",
        message_type=ScheduleExchangeRes,
        json_dict=response(
            {
                "evseProcessing": "Finished",
                "scheduleTuples": [
                    {
                        "id": 1,
                        "chargingSchedule": charging_schedule(
                            absolutePriceSchedule=absolute_price_schedule()
                        ),
                    }
                ],
            }
        ),
        description="scheduled",
    ),
    JSONMessageContainer(
        message_name="ScheduleExchangeRes",
        message_type=ScheduleExchangeRes,
        json_dict=response(
            {
                "evseProcessing": "Ongoing",
                "departureTime": TIME_ANCHOR,
                "targetSOC": 80,
                "priceLevelSchedule": price_level_schedule(),
            }
        ),
        description="dynamic",
    ),
    JSONMessageContainer(
        message_name="PowerDeliveryReq",
        message_type=PowerDeliveryReq,
        json_dict=message(
            {
                "evProcessing": "Finished",
                "chargeProgress": "Start",
                "evPowerProfile": ev_power_profile(selectedScheduleTupleId=1),
                "bptChannelSelection": "Charge",
            }
        ),
    ),
    JSONMessageContainer(
        message_name="PowerDeliveryRes",
        message_type=PowerDeliveryRes,
        json_dict=response(
            {
                "evseStatus": {
                    "notificationMaxDelay": 60,
                    "evseNotification": "Pause",
                }
            }
        ),
    ),
    JSONMessageContainer(
        message_name="MeteringConfirmationReq",
        message_type=MeteringConfirmationReq,
        json_dict=message(
            {
                "signedMeteringData": {
                    "id": "smd-1",
                    "sessionId": MOCK_SESSION_ID,
                    "meterInfo": {
                        "meterId": "meter-1",
                        "chargedEnergyReading": 12000,
                        "meterTimestamp": TIME_ANCHOR,
                    },
                    "receipt": {
                        "timeAnchor": TIME_ANCHOR,
                        "energyCosts": {
                            "amount": rational(420, -2),
                            "costPerUnit": rational(35, -2),
                        },
                        "taxCosts": [{"taxRuleId": 1, "amount": rational(80, -2)}],
                    },
                    "selectedScheduleTupleId": 1,
                }
            }
        ),
    ),
    JSONMessageContainer(
        message_name="MeteringConfirmationRes",
        message_type=MeteringConfirmationRes,
        json_dict=response({}),
    ),
    JSONMessageContainer(
        message_name="CertificateInstallationReq",
        message_type=CertificateInstallationReq,
        json_dict=message(
            {
                "oemProvisioningCertificateChain": {
                    "id": "oem-1",
                    "certificate": CERTIFICATE,
                },
                "rootCertificateIds": [
                    {"issuerName": "CN=V2G Root CA", "serialNumber": 12345}
                ],
                "maximumContractCertificateChains": 3,
                "prioritizedEMAIds": ["DE8AAC000000011"],
            }
        ),
    ),
    JSONMessageContainer(
        message_name="CertificateInstallationRes",
        message_type=CertificateInstallationRes,
        json_dict=response(
            {
                "evseProcessing": "Finished",
                "cpsCertificateChain": {"certificate": CERTIFICATE},
                "signedInstallationData": signed_installation_data(
                    x448EncryptedPrivateKey=b64encode(bytes(84)).decode()
                ),
                "remainingContractCertificateChains": 0,
            }
        ),
    ),
    JSONMessageContainer(
        message_name="SessionStopReq",
        message_type=SessionStopReq,
        json_dict=message(
            {"chargingSession": "Terminate", "evTerminationCode": "User"}
        ),
    ),
    JSONMessageContainer(
        message_name="SessionStopRes",
        message_type=SessionStopRes,
        json_dict=response({}),
    ),
]
