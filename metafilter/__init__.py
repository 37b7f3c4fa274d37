"""Composable, policy-aware filter expressions over key/value metadata."""

__version__ = "0.4.2"

__all__ = ["builder", "condition", "expr", "filter", "policies"]