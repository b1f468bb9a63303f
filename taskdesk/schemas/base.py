"""Base schema and validation helpers shared by request/response models."""
from typing import Any, Dict, Iterable, List, Type, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from taskdesk.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

# Segments FastAPI prepends to error locations
_REQUEST_SECTIONS = ("body", "query", "path", "header")


class CamelModel(BaseModel):
    """Schema whose JSON field names are camelCase; snake_case is accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def wire_name(name: str) -> str:
    return to_camel(name) if "_" in name else name


def field_errors(errors: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Flatten pydantic/FastAPI error dicts into ``{"field", "message"}`` entries."""
    result = []
    for error in errors:
        loc = [part for part in error.get("loc", ()) if part not in _REQUEST_SECTIONS]
        field = wire_name(str(loc[0])) if loc else "request"
        message = error.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        nested = [str(part) for part in loc[1:]]
        if nested:
            message = f"{message} (at {'.'.join(nested)})"
        result.append({"field": field, "message": message})
    return result


def validate_payload(model_cls: Type[ModelT], payload: Any) -> ModelT:
    """Validate ``payload`` against ``model_cls``, collecting every field error.

    Raises:
        ValidationError: listing each offending field and the violated rule
    """
    if isinstance(payload, model_cls):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    try:
        return model_cls.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(field_errors(exc.errors())) from None
