from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class LinkCreate(BaseModel):
    """Body of ``POST /create``.

    Fields are kept loose here; format rules (URL scheme, slug length) are
    checked by ``services.validators`` so they map onto 400 responses with
    their own messages instead of a generic schema error.
    """
    url: Optional[str] = Field(None, description="Target URL, http(s) only")
    slug: Optional[str] = Field(None, description="Custom slug, generated when empty")
    expiry: Optional[Any] = Field(None, description="ISO timestamp or relative duration like 30m, 12h, 7d")
    password: Optional[str] = Field(None, description="Creation password, also stored as the link's access password")

    model_config = ConfigDict(extra="ignore")


class LinkCreated(BaseModel):
    slug: str
    link: str


class ErrorMessage(BaseModel):
    message: str
