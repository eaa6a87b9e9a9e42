"""Strict schema baselines with forbidden extras by default."""

from pydantic import BaseModel, ConfigDict


class StrictModel(BaseModel):
    """Response DTO base; built from ORM rows, never from client input."""

    model_config = ConfigDict(extra="forbid", from_attributes=True)


class StrictRequestModel(BaseModel):
    """Request DTO base that rejects unexpected fields."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True, str_strip_whitespace=True)
