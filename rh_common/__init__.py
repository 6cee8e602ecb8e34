"""Shared helpers for repeat-harness."""

from rh_common.api import RHError, configure_logging

__all__ = ["configure_logging", "RHError"]
