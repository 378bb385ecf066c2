"""
Domain errors for the occurrence engine.
"""

from typing import Any, Optional


class OccurrenceEngineError(Exception):
    """Base class for occurrence engine errors"""


class MalformedRuleError(OccurrenceEngineError):
    """
    A single recurrence rule snapshot cannot be interpreted.

    Raised per rule so that batch callers can skip the rule and keep going.
    """

    def __init__(self, reason: str, rule_id: Optional[Any] = None):
        self.rule_id = rule_id
        self.reason = reason
        super().__init__(f"Malformed rule {rule_id!r}: {reason}")
