"""
Identifier Registry Test Suite.

This package contains:
- unit/: Unit tests (in-memory and temporary-file backends)
- integration/: Integration tests (persistence across instances, CLI)
"""
