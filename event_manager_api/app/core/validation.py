"""
Turn pydantic validation failures into per-field messages.

The request schemas declare the constraints; this module only decides
how a violation is reported.  ``validate`` runs a schema against a raw
payload without touching any service and returns the list that the API
would send back with a 400 response.
"""

from typing import Any, Dict, Iterable, List, Mapping, Type

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticCustomError


# Human readable message per field, used instead of pydantic's generic
# wording whenever a field fails any of its constraints.
FIELD_MESSAGES: Dict[str, str] = {
    "title": "Title is required and must be less than 255 characters",
    "description": "Description must be less than 1000 characters",
    "date_time": "Date must be a valid ISO date",
    "location": "Location is required and must be less than 255 characters",
    "max_capacity": "Max capacity must be a positive integer",
    "email": "Valid email is required",
    "name": "Name is required and must be less than 255 characters",
    "password": "Password must be at least 6 characters long",
    "currentPassword": "Current password is required",
    "newPassword": "New password must be at least 6 characters long",
    "date_from": "date_from must be a valid ISO date",
    "date_to": "date_to must be a valid ISO date",
}

# Error type raised by schema validators that carry their own message,
# for rules that differ between schemas sharing a field name.
RULE_ERROR = "field_rule"

_LOCATION_ROOTS = {"body", "query", "path", "header", "cookie"}


def _field_name(loc: Iterable[Any]) -> str:
    parts = [str(p) for p in loc if str(p) not in _LOCATION_ROOTS and not isinstance(p, int)]
    return parts[-1] if parts else "body"


def rule_error(message: str) -> PydanticCustomError:
    return PydanticCustomError(RULE_ERROR, message)


def field_errors(errors: Iterable[Mapping[str, Any]]) -> List[Dict[str, str]]:
    """Collapse raw pydantic errors into one ``{field, message}`` per field."""
    result: List[Dict[str, str]] = []
    seen: set[str] = set()
    for err in errors:
        field = _field_name(err.get("loc", ()))
        if field in seen:
            continue
        seen.add(field)
        if err.get("type") == RULE_ERROR:
            message = str(err["msg"])
        else:
            message = FIELD_MESSAGES.get(field) or str(err.get("msg", "Invalid value"))
        result.append({"field": field, "message": message})
    return result


def validate(model: Type[BaseModel], payload: Mapping[str, Any]) -> List[Dict[str, str]]:
    """Validate ``payload`` against ``model``; an empty list means valid."""
    try:
        model.model_validate(payload)
    except ValidationError as exc:
        return field_errors(exc.errors())
    return []
