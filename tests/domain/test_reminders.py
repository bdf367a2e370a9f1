"""Tests for spendeasy.domain.reminders pure functions."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from spendeasy.domain.reminders import (
    After,
    DailyAt,
    ReminderKind,
    comparison_intent,
    daily_intent,
    end_of_month_advice,
    flag_key,
    is_end_of_month,
    is_inactive,
    milestone_intent,
    milestone_kind,
    plan_smart_reminders,
)


def never_shown(kind: ReminderKind) -> bool:
    return False


class TestMilestoneKind:
    """Tests for milestone_kind."""

    @pytest.mark.parametrize(
        ("total", "expected"),
        [
            (Decimal("9999.99"), None),
            (Decimal(10000), ReminderKind.MILESTONE_10K),
            (Decimal("14999.99"), ReminderKind.MILESTONE_10K),
            (Decimal(15000), ReminderKind.MILESTONE_15K),
            (Decimal(40000), ReminderKind.MILESTONE_15K),
        ],
    )
    def test_bands(self, total: Decimal, expected: ReminderKind | None) -> None:
        """Should pick at most one band, 15k superseding 10k."""
        assert milestone_kind(total) == expected


class TestMilestoneIntent:
    """Tests for milestone_intent."""

    def test_ten_thousand_body(self) -> None:
        """Should mention the day and the 10k threshold."""
        intent = milestone_intent(ReminderKind.MILESTONE_10K, 15, "₹")

        assert intent.title == "Spending Alert"
        assert intent.body == "Today is day 15 & you have already spent ₹10,000. Spend the rest of the money wisely."
        assert intent.trigger == After(1)
        assert intent.identifier == "milestone10k"

    def test_fifteen_thousand_body(self) -> None:
        """Should ask to control spending."""
        intent = milestone_intent(ReminderKind.MILESTONE_15K, 25, "₹")

        assert "₹15,000" in intent.body
        assert intent.body.endswith("Please control your spendings.")

    def test_rejects_other_kinds(self) -> None:
        """Should only build milestone kinds."""
        with pytest.raises(ValueError):
            milestone_intent(ReminderKind.END_OF_MONTH, 1, "₹")


class TestEndOfMonth:
    """Tests for is_end_of_month and end_of_month_advice."""

    def test_final_week(self) -> None:
        """Should trigger with seven or fewer days left."""
        assert is_end_of_month(7)
        assert is_end_of_month(0)
        assert not is_end_of_month(8)

    def test_advice_bands(self) -> None:
        """Should pick advice by spending band, boundaries inclusive."""
        assert end_of_month_advice(Decimal(10000)).startswith("You have money left!")
        assert end_of_month_advice(Decimal(15000)) == "Money spent this month was calculated. You are within limits."
        assert end_of_month_advice(Decimal(16000)) == "Control your spendings for the remaining days."


class TestComparisonIntent:
    """Tests for comparison_intent."""

    def test_body_shows_whole_previous_total(self) -> None:
        """Should show last month's total without decimals."""
        intent = comparison_intent(Decimal("8000.75"), "₹")

        assert intent.title == "New Month Started"
        assert intent.body == "Your last month total was ₹8000. Try to beat that this month!"


class TestDailyIntent:
    """Tests for daily_intent."""

    def test_default_time(self) -> None:
        """Should repeat at 20:00."""
        intent = daily_intent()

        assert intent.trigger == DailyAt(20, 0)
        assert intent.identifier == "dailyReminder"


class TestFlagKey:
    """Tests for flag_key."""

    def test_uses_month_start_epoch(self) -> None:
        """Should key flags by kind and month start."""
        start = datetime(2025, 4, 1)

        assert flag_key(ReminderKind.MILESTONE_10K, start) == f"alert_milestone_10k_{int(start.timestamp())}"

    def test_months_differ(self) -> None:
        """Should give each month its own key."""
        april = flag_key(ReminderKind.END_OF_MONTH, datetime(2025, 4, 1))
        may = flag_key(ReminderKind.END_OF_MONTH, datetime(2025, 5, 1))

        assert april != may


class TestIsInactive:
    """Tests for is_inactive."""

    def test_exactly_one_day(self) -> None:
        """Should count a full 24 hours as inactive."""
        now = datetime(2025, 4, 15, 9, 0)
        assert is_inactive(now - timedelta(hours=24), now)
        assert not is_inactive(now - timedelta(hours=23, minutes=59), now)


class TestPlanSmartReminders:
    """Tests for plan_smart_reminders."""

    def test_mid_month_ten_thousand(self) -> None:
        """Should plan only the 10k milestone on day 15 of a 30-day month."""
        intents = plan_smart_reminders(15, 15, Decimal(12000), None, never_shown)

        assert [i.kind for i in intents] == [ReminderKind.MILESTONE_10K]

    def test_late_month_fifteen_thousand(self) -> None:
        """Should plan the 15k milestone and the end-of-month check together."""
        intents = plan_smart_reminders(25, 5, Decimal(16000), None, never_shown)

        assert [i.kind for i in intents] == [ReminderKind.MILESTONE_15K, ReminderKind.END_OF_MONTH]
        assert intents[1].body == "Control your spendings for the remaining days."

    def test_already_shown_kinds_are_skipped(self) -> None:
        """Should not plan kinds already shown this month."""
        intents = plan_smart_reminders(25, 5, Decimal(16000), None, lambda kind: True)

        assert intents == []

    def test_comparison_needs_positive_previous_total(self) -> None:
        """Should compare only against a month with spending."""
        assert plan_smart_reminders(1, 29, Decimal(0), Decimal(0), never_shown) == []

        intents = plan_smart_reminders(1, 29, Decimal(0), Decimal(8000), never_shown)

        assert [i.kind for i in intents] == [ReminderKind.MONTHLY_COMPARISON]
        assert "8000" in intents[0].body

    def test_custom_currency(self) -> None:
        """Should use the configured currency symbol."""
        intents = plan_smart_reminders(15, 15, Decimal(12000), None, never_shown, currency="£")

        assert "£10,000" in intents[0].body
