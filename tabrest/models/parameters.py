"""HTTP parameter model shared by data sources and endpoint queries."""

from pydantic import BaseModel, ConfigDict, Field


class HttpParameter(BaseModel):
    """A named query parameter or header value."""

    name: str = Field(..., min_length=1)
    value: str | None = None

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)
