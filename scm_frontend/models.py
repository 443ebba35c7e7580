"""Pydantic models shared across the SCM frontend."""
from typing import Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, EmailStr


class BaseConfiguration(BaseModel):
    """Where requests go: an absolute origin and a path prefix for relative URLs."""

    model_config = ConfigDict(frozen=True)

    origin: Optional[str] = None  # scheme://host[:port], never a path
    path_prefix: str = ""  # "" or "/segment[/segment...]"

    @property
    def api_base(self) -> str:
        return f"{self.origin or ''}{self.path_prefix}"


class BrowserLocation(BaseModel):
    """The subset of the page location the resolver looks at."""

    model_config = ConfigDict(frozen=True)

    scheme: str
    hostname: str
    origin: str

    @classmethod
    def from_origin(cls, origin: str) -> "BrowserLocation":
        parts = urlsplit(origin)
        scheme = (parts.scheme or "http").lower()
        return cls(
            scheme=scheme,
            hostname=parts.hostname or "",
            origin=f"{scheme}://{parts.netloc.lower()}",
        )


class BrowserCandidates(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary: str = ""
    fallback: str = ""


class ClientSettings(BaseModel):
    """Everything an ApiClient needs, computed once per session."""

    model_config = ConfigDict(frozen=True)

    base: BaseConfiguration
    timeout: float = 15.0
    token_key: str = "token"
    login_route: str = "/login"


class DeactivateUserRequest(BaseModel):
    email: EmailStr


class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
