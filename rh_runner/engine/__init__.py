"""Execution engine for repeat-harness sessions."""
