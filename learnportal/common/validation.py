"""
Data Validation Utilities for LearnPortal

Boundary checks shared by the services. Every public engine operation
validates its inputs with these helpers before touching storage, so a
failed check never leaves a partial write behind.
"""

import re
import logging
import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional
from uuid import UUID

from learnportal.common.error_handling import ValidationError

logger = logging.getLogger(__name__)

# Regex patterns for common validation
PATTERNS = {
    "uuid": r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$",
}

_UUID_RE = re.compile(PATTERNS["uuid"])


def is_identifier(value: Any) -> bool:
    """Check whether value is a canonical UUID string."""
    if not isinstance(value, str) or not _UUID_RE.match(value):
        return False
    try:
        UUID(value)
    except ValueError:
        return False
    return True


def validate_identifier(value: Any, field_name: str) -> str:
    """
    Validate the syntactic shape of an identifier.

    Args:
        value: Candidate identifier
        field_name: Name reported in the error details

    Returns:
        The identifier, lower-cased

    Raises:
        ValidationError: If the value is not a UUID string
    """
    if not is_identifier(value):
        raise ValidationError(
            f"Invalid {field_name}: expected a UUID string",
            details={"field": field_name, "value": repr(value)}
        )
    return value.lower()


def validate_identifiers(**fields: Any) -> Dict[str, str]:
    """
    Validate several identifiers at once, reporting every bad field.

    Returns:
        Mapping of field name to normalized identifier

    Raises:
        ValidationError: If any value is not a UUID string
    """
    errors = {name: repr(value) for name, value in fields.items() if not is_identifier(value)}
    if errors:
        raise ValidationError(
            f"Invalid identifiers: {', '.join(sorted(errors))}",
            details={"fields": errors}
        )
    return {name: value.lower() for name, value in fields.items()}


def validate_identifier_list(values: Any, field_name: str) -> List[str]:
    """
    Validate a sequence of identifiers, dropping duplicates but keeping order.

    Raises:
        ValidationError: If values is not a list/tuple/set or holds a bad id
    """
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        raise ValidationError(f"{field_name} must be a list of identifiers", details={"field": field_name})

    result: List[str] = []
    for value in values:
        identifier = validate_identifier(value, field_name)
        if identifier not in result:
            result.append(identifier)
    return result


def validate_text(value: Any, field_name: str, max_length: Optional[int] = None) -> str:
    """
    Validate a required, non-blank string.

    Returns:
        The stripped string
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required", details={"field": field_name})
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationError(
            f"{field_name} cannot exceed {max_length} characters",
            details={"field": field_name, "max_length": max_length}
        )
    return value


def validate_int_range(
    value: Any,
    field_name: str,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None
) -> int:
    """
    Validate an integer, optionally bounded (inclusive).

    Booleans are rejected even though they are ints in Python.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name} must be an integer", details={"field": field_name})
    if minimum is not None and value < minimum:
        raise ValidationError(
            f"{field_name} must be at least {minimum}",
            details={"field": field_name, "minimum": minimum, "value": value}
        )
    if maximum is not None and value > maximum:
        raise ValidationError(
            f"{field_name} cannot exceed {maximum}",
            details={"field": field_name, "maximum": maximum, "value": value}
        )
    return value


def validate_optional_datetime(value: Any, field_name: str) -> Optional[datetime.datetime]:
    """
    Validate an optional datetime field.

    Raises:
        ValidationError: If value is neither None nor a datetime
    """
    if value is None:
        return None
    if not isinstance(value, datetime.datetime):
        raise ValidationError(f"{field_name} must be a datetime", details={"field": field_name})
    return value


def validate_answers(answers: Any) -> Dict[str, Any]:
    """
    Validate a submission payload mapping question ids to selected indexes.

    Values are not checked here: an absent or nonsensical selection scores
    zero rather than failing the submission.

    Raises:
        ValidationError: If answers is not a mapping or a key is not a string
    """
    if answers is None:
        return {}
    if not isinstance(answers, Mapping):
        raise ValidationError("answers must be a mapping of question id to option index")
    bad_keys = [key for key in answers if not isinstance(key, str)]
    if bad_keys:
        raise ValidationError(
            "answer keys must be question identifiers",
            details={"keys": [repr(key) for key in bad_keys]}
        )
    return {key.lower(): value for key, value in answers.items()}
