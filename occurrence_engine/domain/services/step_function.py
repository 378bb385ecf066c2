"""
STEP FUNCTION
Single shared date-stepping implementation

RESPONSIBILITIES:
- Map (date, frequency) to the next due date
- Advance a rule's cursor after an occurrence posts or is skipped

RULES:
❌ No I/O, no clock reads
❌ No second implementation of stepping anywhere else
✅ Forecasts and cursor advancement both call step()
✅ Month arithmetic clamps to the last day of shorter months

Month clamping is applied to the date being stepped, not to an anchor day:
Jan 31 -> Feb 28 -> Mar 28. This is the same result the posting side gets
when it advances the cursor one occurrence at a time, so forecasts never
drift from what actually posts.
"""

from datetime import date, timedelta

from occurrence_engine.domain.errors import MalformedRuleError
from occurrence_engine.domain.models import CursorAdvance, Frequency, RecurrenceRule
from occurrence_engine.utils.dates import add_months

FIXED_DAY_STEPS = {
    Frequency.DAILY: 1,
    Frequency.WEEKLY: 7,
    Frequency.BIWEEKLY: 14,
}

MONTH_STEPS = {
    Frequency.MONTHLY: 1,
    Frequency.QUARTERLY: 3,
    Frequency.YEARLY: 12,
}


def step(current: date, frequency: Frequency) -> date:
    """
    Next due date after `current` for one frequency unit

    Args:
        current: Current due date
        frequency: Frequency (enum or its string value)

    Returns:
        Strictly later date

    Raises:
        ValueError: For ONCE (no valid step) or an unknown frequency
        OverflowError: If the next date is past the supported range
    """
    frequency = Frequency(frequency)

    if frequency in FIXED_DAY_STEPS:
        return current + timedelta(days=FIXED_DAY_STEPS[frequency])

    if frequency in MONTH_STEPS:
        return add_months(current, MONTH_STEPS[frequency])

    raise ValueError(f"{frequency.value} schedules have no next occurrence")


def advance_cursor(rule: RecurrenceRule) -> CursorAdvance:
    """
    Where the cursor goes after the current occurrence posts or is skipped

    - ONCE: rule deactivates, cursor stays put
    - occurrences_remaining counts down; reaching 0 deactivates
    - next date past end_date deactivates

    Raises:
        MalformedRuleError: If the rule has no valid cursor date
    """
    if rule.cursor_date is None:
        raise MalformedRuleError("cursor date is missing or invalid", rule_id=rule.id)

    if rule.frequency == Frequency.ONCE:
        return CursorAdvance(
            rule_id=rule.id,
            next_cursor_date=rule.cursor_date,
            occurrences_remaining=rule.occurrences_remaining,
            is_active=False,
        )

    is_active = rule.is_active
    try:
        next_date = step(rule.cursor_date, rule.frequency)
    except OverflowError:
        return CursorAdvance(
            rule_id=rule.id,
            next_cursor_date=rule.cursor_date,
            occurrences_remaining=rule.occurrences_remaining,
            is_active=False,
        )

    remaining = rule.occurrences_remaining
    if remaining is not None and remaining > 0:
        remaining -= 1
        if remaining == 0:
            is_active = False

    if rule.end_date is not None and next_date > rule.end_date:
        is_active = False

    return CursorAdvance(
        rule_id=rule.id,
        next_cursor_date=next_date,
        occurrences_remaining=remaining,
        is_active=is_active,
    )
