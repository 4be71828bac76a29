"""Authentication schemas."""

from pydantic import BaseModel, ConfigDict, Field


class AuthPrincipal(BaseModel):
    """Normalized authenticated principal passed explicitly to business services."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(min_length=1)
