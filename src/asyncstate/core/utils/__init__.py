"""Shared utilities for asyncstate."""
