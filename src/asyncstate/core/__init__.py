"""Core package for asyncstate."""
