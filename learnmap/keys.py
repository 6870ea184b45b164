"""Access key issuance."""

from __future__ import annotations

import re
import secrets

KEY_PREFIX = "learn_"
KEY_BYTES = 16
KEY_PATTERN = re.compile(rf"^{KEY_PREFIX}[0-9a-f]{{{KEY_BYTES * 2}}}$")


def issue_key() -> str:
    """Return a new opaque access key such as ``learn_<32 hex chars>``."""
    return KEY_PREFIX + secrets.token_hex(KEY_BYTES)


def is_access_key(value: object) -> bool:
    return isinstance(value, str) and KEY_PATTERN.match(value) is not None


__all__ = ["KEY_PATTERN", "KEY_PREFIX", "is_access_key", "issue_key"]
