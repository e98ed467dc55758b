"""Field rules for entity payloads.

Validation is kept apart from the pydantic request model: the model only
decodes the body, and these rules decide whether a decoded name is
acceptable. Every violated rule is reported, not just the first one.
"""
from dataclasses import dataclass

from app.models.entity import NAME_MAX_LENGTH


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ValidationFailedError(Exception):
    """Raised by handlers when a payload breaks one or more field rules."""

    def __init__(self, errors: list[FieldError]):
        super().__init__("; ".join(str(e) for e in errors))
        self.errors = errors


def validate_entity_name(name: str) -> list[FieldError]:
    errors: list[FieldError] = []
    if name == "":
        errors.append(FieldError("name", "Name is required"))
    if len(name) > NAME_MAX_LENGTH:
        errors.append(FieldError("name", f"Name must be at most {NAME_MAX_LENGTH} characters"))
    return errors


def ensure_valid_entity_name(name: str) -> None:
    errors = validate_entity_name(name)
    if errors:
        raise ValidationFailedError(errors)
