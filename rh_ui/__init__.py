"""User-facing entry points for repeat-harness."""
