"""Practitioner schemas."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from scheduler.core.config import settings


class PractitionerPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    practitioner_id: str = Field(serialization_alias="id")
    display_name: str
    buffer_minutes: int
    is_active: bool


class PractitionerCreate(BaseModel):
    display_name: str = Field(..., min_length=1, max_length=100)
    buffer_minutes: int = Field(default_factory=lambda: settings.default_buffer_minutes, ge=0)
    is_active: bool = True


class PractitionerUpdate(BaseModel):
    display_name: str | None = Field(None, min_length=1, max_length=100)
    buffer_minutes: int | None = Field(None, ge=0)
    is_active: bool | None = None

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> "PractitionerUpdate":
        # Omitted fields stay untouched; sent fields must carry a value.
        cleared = sorted(name for name in self.model_fields_set if getattr(self, name) is None)
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self
