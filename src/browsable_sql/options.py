from typing import Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from browsable_sql.security.validators import QueryValidator

CORS_HEADERS: Mapping[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PATCH, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Authorization, Content-Type, X-Starbase-Source, X-Data-Source",
    "Access-Control-Max-Age": "86400",
}


class BasicAuthCredentials(BaseModel):
    """Username/password pair required by the auth gate."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: str

    def __repr__(self) -> str:
        return f"BasicAuthCredentials(username={self.username!r}, password='***')"


class BrowsableOptions(BaseModel):
    """Per-gateway configuration, fixed at construction.

    ``basic_auth`` is required unless ``dangerously_disable_auth`` is set.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    basic_auth: Optional[BasicAuthCredentials] = None
    dangerously_disable_auth: bool = False
    disable_studio: bool = False
    validator: Optional[QueryValidator] = None
    cors_headers: Dict[str, str] = Field(default_factory=lambda: dict(CORS_HEADERS))
