"""Core types shared across titan."""

from __future__ import annotations

import uuid
from typing import TypeAlias

# ── ID Types ──────────────────────────────────────────────────────────────────

WorkerId: TypeAlias = str | int


def new_id() -> str:
    return uuid.uuid4().hex[:12]
