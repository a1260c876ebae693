"""Test helper modules for the asyncstate test suite.

- machines: RecordingHandle and call-counting handler factories
- io_utils: I/O utilities for writing YAML and text files
"""
from __future__ import annotations
