"""Terminal presentation for repeat-harness."""

from rh_ui.ui.console import ConsoleReporter, supports_styled_output

__all__ = ["ConsoleReporter", "supports_styled_output"]
