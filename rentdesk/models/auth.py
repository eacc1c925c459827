from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """PIN login payload. Serialized with the backend's camelCase key."""

    model_config = ConfigDict(populate_by_name=True)

    pin_code: str = Field(..., alias="pinCode", min_length=1)


class LoginResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    token: str
    user: Optional[Dict[str, Any]] = None
