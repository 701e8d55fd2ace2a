from pydantic import Field, field_validator

from tipjar.core.validators import is_valid_address
from tipjar.schemas.my_base_model import CustomBaseModel, RequestModel


def _check_address(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Address is required")
    if not is_valid_address(v):
        raise ValueError("Invalid Ethereum address")
    return v


class NonceRequest(RequestModel):
    """Request model for nonce generation - input validation"""

    address: str = Field(..., description="Wallet address")

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        return _check_address(v)


class NonceResponse(CustomBaseModel):
    """Response model for nonce generation - output"""

    nonce: str = ""
    message: str = ""


class VerifyRequest(RequestModel):
    """Request model for wallet verification - input validation"""

    address: str = Field(..., description="Wallet address")
    signature: str = Field(..., description="EIP-191 signature of the login message")

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        return _check_address(v)

    @field_validator("signature")
    @classmethod
    def validate_signature(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Signature is required")
        return v


class AuthResponse(CustomBaseModel):
    """Response model for authentication - output"""

    token: str = ""
    address: str = ""
