"""Identifier generation helpers."""

from __future__ import annotations

import uuid


def new_signature_token() -> str:
    """Create a UUID4 capability token for public signing links."""
    return str(uuid.uuid4())


def new_external_reference(prefix: str = "webmarcas") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"
