from pydantic import BaseModel, Field
from typing import Any, Dict, Optional


class SignedRequest(BaseModel):
    device_id: str = Field(alias="deviceID", min_length=1)

    class Config:
        populate_by_name = True

    def signed_fields(self) -> Dict[str, Any]:
        """Fields covered by the signature, in declaration order, signature dropped."""
        return self.model_dump(by_alias=True, exclude={"signature"})


class DeviceQueryIn(SignedRequest):
    signature: str = Field(min_length=1)


class DeviceQueryOut(BaseModel):
    status: int
    owner: str
    firmware: Optional[str] = None
    uri: Optional[str] = None
    version: Optional[str] = None


class TelemetryIn(SignedRequest):
    payload: str = Field(min_length=1)          # BinPackage, base64url without padding
    signature: str = Field(min_length=1)
