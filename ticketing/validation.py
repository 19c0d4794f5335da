"""Request body parsing and schema validation.

A body goes through two steps: JSON decoding, then validation against a
Pydantic model. Validation produces a ``ValidationOutcome`` that carries
either the parsed model or the field-level problems, so callers never have
to inspect raw Pydantic errors.
"""

import json
from dataclasses import dataclass, field
from typing import Generic, TypeVar

import pydantic
from fastapi import Request

from ticketing.exceptions import RequestBodyError

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)

INVALID_JSON_MESSAGE = "Invalid JSON in request body"
MISSING_FIELDS_MESSAGE = "Missing required fields"
VALIDATION_FAILED_MESSAGE = "Validation failed"


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


@dataclass(frozen=True)
class ValidationOutcome(Generic[ModelT]):
    value: ModelT | None = None
    missing_fields: list[str] = field(default_factory=list)
    errors: list[FieldError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.value is not None

    def unwrap(self) -> ModelT:
        if self.value is not None:
            return self.value
        if self.missing_fields:
            raise RequestBodyError(MISSING_FIELDS_MESSAGE, missing_fields=self.missing_fields)
        raise RequestBodyError(
            VALIDATION_FAILED_MESSAGE,
            field_errors=[error.as_dict() for error in self.errors],
        )


def validate_payload(model: type[ModelT], payload: object) -> ValidationOutcome[ModelT]:
    try:
        value = model.model_validate(payload)
    except pydantic.ValidationError as exc:
        missing: list[str] = []
        errors: list[FieldError] = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"]) or "body"
            if error["type"] == "missing":
                missing.append(location)
            else:
                errors.append(FieldError(field=location, message=error["msg"]))
        return ValidationOutcome(missing_fields=missing, errors=errors)
    return ValidationOutcome(value=value)


async def read_json_body(request: Request) -> object:
    raw = await request.body()
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise RequestBodyError(INVALID_JSON_MESSAGE) from None


async def parse_body(request: Request, model: type[ModelT]) -> ModelT:
    payload = await read_json_body(request)
    return validate_payload(model, payload).unwrap()
