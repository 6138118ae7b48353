"""Role API schemas."""

from pydantic import BaseModel, ConfigDict, Field


class RoleCreateRequest(BaseModel):
    """Role creation request schema."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Unique role name",
        examples=["support"],
    )


class RoleResponse(BaseModel):
    """Role response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Role identifier", examples=[1])
    name: str = Field(..., description="Role name", examples=["admin"])


class RoleUpdateRequest(BaseModel):
    """Role rename request schema."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="New role name",
        examples=["support-lead"],
    )
