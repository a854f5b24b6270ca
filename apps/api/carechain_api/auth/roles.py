"""Portal role vocabulary and validation."""

import logging
from typing import Iterable

logger = logging.getLogger(__name__)

PATIENT = "patient"
DOCTOR = "doctor"
PHARMACY = "pharmacy"
INSURANCE = "insurance"

# Valid role names
VALID_ROLES = {PATIENT, DOCTOR, PHARMACY, INSURANCE}

# Roles that may receive access to patient records
GRANTEE_ROLES = {DOCTOR, PHARMACY, INSURANCE}


def validate_role(role: str) -> str:
    """
    Validate a role name.

    Args:
        role: Role name as supplied by the caller

    Returns:
        Normalized role name

    Raises:
        ValueError: If the role is unknown
    """
    if not isinstance(role, str):
        raise ValueError(f"Role must be a string: {role}")
    normalized = role.strip().lower()
    if normalized not in VALID_ROLES:
        raise ValueError(f"Unknown role: {role}. Expected one of {sorted(VALID_ROLES)}")
    return normalized


def has_role(role: str, allowed: Iterable[str]) -> bool:
    """Check whether role is one of the allowed roles."""
    return role in set(allowed)
