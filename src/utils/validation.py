"""
Translation of pydantic validation errors into API sub-errors
"""

from typing import Any, Dict, List, Optional, Sequence

from models.user import FIELD_SIZES, SubError
from utils.messages import get_message

# Error types that mean the payload could not be read at all (bad JSON, unparseable
# date, wrong JSON type) rather than a readable value violating a constraint
MALFORMED_ERROR_TYPES = {
    "json_invalid",
    "json_type",
    "model_type",
    "model_attributes_type",
    "dict_type",
    "string_type",
    "date_type",
    "date_parsing",
    "date_from_datetime_parsing",
    "date_from_datetime_inexact",
    "int_parsing",
    "int_type",
}


def _field_name(loc: Sequence[Any]) -> Optional[str]:
    """Last string element of an error location, skipping the 'body' prefix"""
    for part in reversed(tuple(loc)):
        if isinstance(part, str) and part != "body":
            return part
    return None


def _is_null(error: Dict[str, Any]) -> bool:
    if error.get("type") == "missing":
        return True
    return "input" in error and error["input"] is None


def is_malformed(errors: Sequence[Dict[str, Any]]) -> bool:
    """True when any error means the request body itself is unreadable"""
    for error in errors:
        field = _field_name(error.get("loc", ()))
        if field is None:
            # Error on the body as a whole (missing body, non-object body)
            return True
        if error.get("type") in MALFORMED_ERROR_TYPES and not _is_null(error):
            return True
    return False


def to_sub_error(error: Dict[str, Any]) -> SubError:
    field = _field_name(error.get("loc", ()))
    error_type = error.get("type", "")
    rejected = None if error_type == "missing" else error.get("input")

    if _is_null(error):
        message = get_message("not_null")
    elif error_type in ("string_too_short", "string_too_long") and field in FIELD_SIZES:
        low, high = FIELD_SIZES[field]
        message = get_message("size", min=low, max=high)
    elif error_type == "date_past":
        message = get_message("past")
    elif field == "email":
        message = get_message("email")
    else:
        message = error.get("msg", "Unknown validation error")

    return SubError(field=field, rejectedValue=rejected, message=message)


def build_sub_errors(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Map pydantic errors to sub-error dicts, one per violated field"""
    sub_errors = []
    seen = set()
    for error in errors:
        sub_error = to_sub_error(error)
        # A single field may fail several checks; report the first
        if sub_error.field in seen:
            continue
        seen.add(sub_error.field)
        sub_errors.append(sub_error.model_dump())
    return sub_errors
