"""I/O utilities for asyncstate."""
from __future__ import annotations

from .yaml import read_yaml

__all__ = ["read_yaml"]
