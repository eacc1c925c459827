from typing import Any, Dict, Optional

from api_client import BaseResource
from models.auth import LoginRequest, LoginResponse


class AuthResource(BaseResource):
    """PIN login and session verification under /auth"""

    resource = "auth"
    path = "/auth"

    def login(self, pin_code: str) -> LoginResponse:
        payload = LoginRequest(pin_code=pin_code).model_dump(by_alias=True)
        return LoginResponse.model_validate(self.client.post(f"{self.path}/login", json=payload))

    def verify(self) -> Optional[Dict[str, Any]]:
        """Return the session descriptor if the current token is still accepted"""
        return self.client.get(f"{self.path}/verify")
