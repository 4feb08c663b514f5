"""Unit tests for macro calculations - pure functions, no mocks needed."""

from datetime import datetime, timezone

from evolvefit.core.models import DailyLog, MacroBreakdown, MealEntry, Targets
from evolvefit.core.macros import (
    calculate_calories_from_macros,
    calculate_daily_summary,
    calculate_daily_totals,
    refold,
    with_meal,
)


def meal(calories, protein, carbs, fats, fiber=None, name="Food"):
    return MealEntry(
        name=name,
        timestamp=datetime(2025, 3, 14, 8, 0, tzinfo=timezone.utc),
        macros=MacroBreakdown(calories=calories, protein=protein, carbs=carbs, fats=fats, fiber=fiber),
    )


TARGETS = Targets(calories=2000, protein=150, carbs=200, fats=65, steps=8000)


class TestCalculateDailyTotals:
    """Tests for calculate_daily_totals."""

    def test_empty_meals(self):
        """Empty list returns zeros, fiber included."""
        totals = calculate_daily_totals([])
        assert totals == MacroBreakdown(calories=0, protein=0, carbs=0, fats=0, fiber=0)

    def test_multiple_meals(self):
        """Multiple meals are summed component-wise."""
        totals = calculate_daily_totals([
            meal(65, 4, 6.5, 2.5),
            meal(140, 12, 0, 10, fiber=1),
            meal(120, 3, 20, 3, fiber=2.5),
        ])
        assert totals == MacroBreakdown(calories=325, protein=19, carbs=26.5, fats=15.5, fiber=3.5)

    def test_missing_fiber_counts_as_zero(self):
        totals = calculate_daily_totals([meal(100, 1, 1, 1)])
        assert totals.fiber == 0


class TestWithMeal:
    """Tests for with_meal and refold."""

    def test_appends_in_order_and_refolds(self):
        """Totals always equal the fold over every meal."""
        log = DailyLog(date="2025-03-14")
        first = meal(300, 20, 30, 10, name="Breakfast")
        second = meal(500, 35, 40, 20, fiber=6, name="Lunch")

        log = with_meal(with_meal(log, first), second)

        assert [m.name for m in log.meals] == ["Breakfast", "Lunch"]
        assert log.total_macros == calculate_daily_totals(log.meals)
        assert log.total_macros.calories == 800

    def test_does_not_mutate_original(self):
        log = DailyLog(date="2025-03-14")
        with_meal(log, meal(100, 1, 1, 1))
        assert log.meals == []

    def test_refold_repairs_stale_totals(self):
        """A log with wrong totals is corrected from its meals."""
        stale = DailyLog(
            date="2025-03-14",
            meals=[meal(200, 10, 10, 10)],
            total_macros=MacroBreakdown(calories=9999, protein=0, carbs=0, fats=0),
        )
        assert refold(stale).total_macros.calories == 200


class TestCalculateDailySummary:
    """Tests for calculate_daily_summary."""

    def test_empty_day_shows_full_remaining(self):
        """Empty day shows all goals as remaining."""
        summary = calculate_daily_summary(DailyLog(date="2025-03-14"), TARGETS)

        assert summary.total_calories == 0
        assert summary.calories_remaining == 2000
        assert summary.protein_remaining == 150
        assert summary.carbs_remaining == 200
        assert summary.fats_remaining == 65

    def test_over_goal_shows_negative_remaining(self):
        """Going over goal shows negative remaining."""
        log = DailyLog(date="2025-03-14", meals=[meal(2500, 200, 250, 100)])
        summary = calculate_daily_summary(log, TARGETS)

        assert summary.calories_remaining == -500
        assert summary.protein_remaining == -50
        assert summary.carbs_remaining == -50
        assert summary.fats_remaining == -35

    def test_carries_day_fields(self):
        log = DailyLog(date="2025-03-14", water_intake=2.5, workout_completed=True)
        summary = calculate_daily_summary(log, TARGETS)

        assert summary.date == "2025-03-14"
        assert summary.water_intake == 2.5
        assert summary.workout_completed is True


class TestCalculateCaloriesFromMacros:
    """Tests for calculate_calories_from_macros."""

    def test_mixed_macros(self):
        """Mixed macros calculate correctly."""
        # 10g protein (40) + 20g carbs (80) + 5g fat (45) = 165
        assert calculate_calories_from_macros(protein=10, carbs=20, fats=5) == 165

    def test_fat_only(self):
        """9 cal per gram of fat."""
        assert calculate_calories_from_macros(protein=0, carbs=0, fats=10) == 90
