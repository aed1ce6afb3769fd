"""
DataTypes borrowed from the XML signature syntax
Please check:
https://www.w3.org/TR/xmldsig-core1/
"""

from pydantic import Field, conint

from iso15118_json.messages import BaseModel


class X509IssuerSerial(BaseModel):
    """Identifies a certificate by its issuer and serial number"""

    issuer_name: str = Field(..., alias="issuerName")
    # X.509 serial numbers are positive integers of up to 20 octets
    serial_number: conint(ge=0, lt=2**160) = Field(  # type: ignore
        ..., alias="serialNumber"
    )
