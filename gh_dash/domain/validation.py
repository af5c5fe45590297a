"""Validation and coercion helpers shared by the domain entities."""

import math
import re
from typing import Any, Optional, Sequence, Union

SLUG_PATTERN = re.compile(r"^[^/]+/[^/]+$")

Number = Union[int, float]


class ValidationError(ValueError):
    """Raised when repository identifiers are malformed."""
    pass


def validate_repo_slugs(repos: Sequence[str]) -> Sequence[str]:
    """
    Validate a list of ``owner/repo`` identifiers.

    Args:
        repos: Repository identifiers, in the order the report should use

    Returns:
        The same sequence, unchanged

    Raises:
        ValidationError: If the input is not a list of strings, is empty,
            contains an empty string, or has entries not shaped ``owner/repo``
    """
    if isinstance(repos, str) or not isinstance(repos, (list, tuple)):
        raise ValidationError("`repos` must be a list of strings.")
    if not all(isinstance(repo, str) for repo in repos):
        raise ValidationError("`repos` must be a list of strings.")
    if not repos:
        raise ValidationError("`repos` must contain at least one repository identifier.")
    if any(not repo for repo in repos):
        raise ValidationError("`repos` cannot contain empty strings.")

    invalid = [repo for repo in repos if not SLUG_PATTERN.fullmatch(repo)]
    if invalid:
        raise ValidationError(
            "All entries in `repos` must follow the 'owner/repo' format. "
            f"Invalid: {', '.join(invalid)}"
        )
    return repos


def first_non_empty(*candidates: Optional[str]) -> Optional[str]:
    """Return the first candidate that is a non-empty string, else None."""
    for candidate in candidates:
        if isinstance(candidate, str) and candidate:
            return candidate
    return None


def sanitize_count(value: Any) -> Number:
    """
    Coerce an API count field to a finite, non-negative number.

    None, booleans, NaN, infinities, negative values and anything that does
    not convert to a float all become 0. Integral values come back as int.
    """
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number) or number < 0:
        return 0
    if number.is_integer():
        return int(number)
    return number
