"""Exceptions raised by ratesched.

Input validation errors are pydantic's own ValidationError, raised while a
TaskBatch is built; it is re-exported here so callers need only one import.
"""

from pydantic import ValidationError


class TimelineViolation(Exception):
    """A produced timeline breaks one or more scheduling invariants."""

    def __init__(self, violations: list[str]):
        self.violations = violations
        super().__init__(f"{len(violations)} timeline violation(s): " + "; ".join(violations[:5]))


__all__ = ["ValidationError", "TimelineViolation"]
