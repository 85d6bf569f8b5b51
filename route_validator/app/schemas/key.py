from pydantic import BaseModel, Field


class KeySchema(BaseModel):
    """A numeric ``key`` between 1 and 10."""

    key: int = Field(..., ge=1, le=10)


class KeyParams(BaseModel):
    key: int
