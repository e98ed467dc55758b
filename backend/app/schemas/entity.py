from datetime import datetime, timezone
from pydantic import BaseModel, Field, ConfigDict, field_serializer


class EntityRequest(BaseModel):
    # A missing name decodes to "" and is rejected by field validation.
    name: str = Field("", examples=["Test Entity"])
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Test Entity"
            }
        }
    )


class EntityResponse(BaseModel):
    id: int
    name: str
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "name": "Test Entity",
                "created_at": "2026-02-17T10:00:00+00:00",
                "updated_at": "2026-02-17T10:05:00+00:00",
            }
        },
    )

    @field_serializer("created_at", "updated_at", when_used="json")
    def serialize_datetime(self, value: datetime):
        dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return dt.isoformat()


class EntityEnvelope(BaseModel):
    data: EntityResponse


class EntityListEnvelope(BaseModel):
    data: list[EntityResponse]
    count: int
