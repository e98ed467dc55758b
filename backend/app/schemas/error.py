from pydantic import BaseModel, ConfigDict, Field


class APIError(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "code": 404,
                "message": "Entity not found",
                "details": "The requested entity could not be found",
            }
        },
    )

    code: int = Field(..., examples=[404])
    message: str
    details: str | None = None


class ErrorResponse(BaseModel):
    error: APIError
