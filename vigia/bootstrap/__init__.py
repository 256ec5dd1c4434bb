"""Rotinas de bootstrap do Vigia."""
from __future__ import annotations

from .migrations import run as run_migrations

__all__ = ["run_migrations"]
