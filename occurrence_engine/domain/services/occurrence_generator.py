"""
OCCURRENCE GENERATOR
Expand one recurrence rule into its concrete due dates

RESPONSIBILITIES:
- Walk forward from the rule's cursor using the shared step function
- Stop at the horizon, the per-rule cap, end_date or remaining count
- Apply per-date amount overrides
- NO STATUS, NO FILTERING, NO SORTING ACROSS RULES

RULES:
❌ No wall-clock reads (today arrives via ProjectionWindow)
❌ Past occurrences are NOT dropped here (overdue is the projector's job)
✅ Cap enforced unconditionally
✅ Deterministic output
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from occurrence_engine.domain.models import (
    Frequency,
    ItemType,
    Occurrence,
    ProjectionWindow,
    RecurrenceRule,
)
from occurrence_engine.domain.services.step_function import step


class OccurrenceGenerator:
    """
    Occurrence Generator
    Produces an ordered, bounded list of occurrences for a single rule
    """

    def generate(self, rule: RecurrenceRule, window: ProjectionWindow) -> list[Occurrence]:
        """
        Generate occurrences for a rule

        Args:
            rule: Rule snapshot
            window: Today, horizon and cap

        Returns:
            Occurrences in due-date order, starting exactly at the cursor
        """
        if not rule.is_active or rule.cursor_date is None:
            return []

        limit = window.max_occurrences_per_rule
        if rule.occurrences_remaining is not None:
            limit = min(limit, max(rule.occurrences_remaining, 0))

        horizon_end = window.horizon_end
        occurrences: list[Occurrence] = []
        current: Optional[date] = rule.cursor_date

        while current is not None and len(occurrences) < limit:
            if current > horizon_end:
                break
            if rule.end_date is not None and current > rule.end_date:
                break

            occurrences.append(self._build(rule, current, len(occurrences)))

            if rule.frequency == Frequency.ONCE:
                break
            current = self._next(current, rule.frequency)

        return occurrences

    @staticmethod
    def _next(current: date, frequency: Frequency) -> Optional[date]:
        try:
            return step(current, frequency)
        except OverflowError:
            return None

    @staticmethod
    def _build(rule: RecurrenceRule, due_date: date, index: int) -> Occurrence:
        amount = rule.effective_amount(due_date)

        if rule.is_transfer:
            item_type = ItemType.TRANSFER
        elif amount < Decimal('0'):
            item_type = ItemType.BILL
        else:
            item_type = ItemType.DEPOSIT

        return Occurrence(
            rule_id=rule.id,
            due_date=due_date,
            amount=amount,
            sequence_index=index,
            item_type=item_type,
            is_override=due_date in rule.overrides,
            frequency=rule.frequency,
            display_name=rule.display_name,
            currency_code=rule.currency_code,
            is_transfer=rule.is_transfer,
            auto_post=rule.auto_post,
            created_order=rule.created_order,
        )
