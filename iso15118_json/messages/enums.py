from enum import Enum

# For XSD type xs:unsignedLong with value range [0..18446744073709551615]
UINT_64_MAX = 2**64 - 1
# For XSD type xs:unsignedInt with value range [0..4294967296]
UINT_32_MAX = 2**32 - 1
# For XSD type xs:unsignedShort with value range [0..65535]
UINT_16_MAX = 2**16 - 1
# For XSD type xs:unsignedByte with value range [0..255]
UINT_8_MAX = 2**8 - 1
# For XSD type xs:short with value range [-32768..32767]
INT_16_MAX = 2**15 - 1
INT_16_MIN = -(2**15)
# For XSD type xs:byte with value range [-128..127]
INT_8_MAX = 2**7 - 1
INT_8_MIN = -(2**7)
# For XSD type xs:int with value range [-2147483648..2147483647]
INT_32_MAX = 2**31 - 1
INT_32_MIN = -(2**31)


class AuthEnum(str, Enum):
    """See section 8.3.5.3.1 in ISO 15118-20"""

    EIM = "EIM"
    PNC = "PnC"


class ControlMode(str, Enum):
    """
    The control mode decides who is in charge of the charging schedule.
    In scheduled mode the EV follows one of the schedule tuples offered by the
    SECC, in dynamic mode the SECC adjusts the power limits on the fly.
    Used as the explicit tag of the scheduled / dynamic message variants.
    """

    SCHEDULED = "Scheduled"
    DYNAMIC = "Dynamic"


class CardinalityPolicy(str, Enum):
    """
    How repeated fields handle more (or fewer) distinct elements than their
    declared occurrence bounds allow.

    ENFORCE rejects the message, FLAG accepts it, logs a warning and marks the
    collection (see BoundedSet.exceeds_max_occurs).
    """

    ENFORCE = "enforce"
    FLAG = "flag"
