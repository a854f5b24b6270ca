"""Salted SHA-256 digests for ledger entries and resource stamps."""

import hashlib
import json
import secrets
from typing import Any

from carechain_api.settings import MIN_SALT_BYTES, get_settings


def canonical_json(data: Any) -> str:
    """Deterministic JSON representation (sorted keys, compact separators)."""
    return json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)


def salted_digest(data: Any) -> str:
    """SHA-256 hex digest of ``data`` concatenated with a fresh random salt.

    The salt is never stored, so the digest cannot be recomputed later. Two
    calls with identical data produce different digests.
    """
    salt_bytes = max(get_settings().hash_salt_bytes, MIN_SALT_BYTES)
    salt = secrets.token_hex(salt_bytes)
    return hashlib.sha256((canonical_json(data) + salt).encode()).hexdigest()


def create_resource_hash(resource_data: Any) -> str:
    """Stamp a prescription or claim with a display-only verification hash.

    Independent of the ledger chain. Callers must store the value.
    """
    return salted_digest(resource_data)
