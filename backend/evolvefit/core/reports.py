"""Report Generation - Pure functions for generating reports.

All functions are pure: same input always produces same output, no side effects.
"""

from .macros import calculate_daily_totals
from .models import DailyLog, DaySummary, Targets, WeeklyReport


# A logged day counts as on target when intake is within this share of the goal.
ON_TARGET_TOLERANCE = 0.10


def generate_day_summary(log: DailyLog) -> DaySummary:
    """Generate a summary for a single day's log.

    Args:
        log: The daily log to summarize

    Returns:
        DaySummary with totals for the day
    """
    totals = calculate_daily_totals(log.meals)

    return DaySummary(
        date=log.date,
        total_calories=round(totals.calories, 1),
        total_protein=round(totals.protein, 1),
        total_carbs=round(totals.carbs, 1),
        total_fats=round(totals.fats, 1),
        meal_count=len(log.meals),
    )


def calculate_net_energy(total_calories: float, days: int, calorie_target: int) -> float:
    """Intake minus target over a period.

    Positive value = caloric surplus against the goal
    Negative value = caloric deficit against the goal

    Args:
        total_calories: Total calories consumed over the period
        days: Number of days in the period
        calorie_target: Daily calorie target

    Returns:
        Net calories (surplus or deficit)
    """
    return total_calories - days * calorie_target


def is_on_target(calories: float, calorie_target: int) -> bool:
    """Whether a day's intake is within tolerance of the target."""
    if calorie_target <= 0:
        return False
    return abs(calories - calorie_target) <= calorie_target * ON_TARGET_TOLERANCE


def generate_weekly_report(logs: list[DailyLog], targets: Targets) -> WeeklyReport:
    """Generate a report over a dense series of daily logs.

    Days with no meals appear in daily_summaries but do not count as logged,
    so the average and net energy only cover days the user actually tracked.

    Args:
        logs: Consecutive daily logs, as returned by the recent-log query
        targets: The profile's daily targets

    Returns:
        WeeklyReport with daily summaries and aggregate metrics

    Raises:
        ValueError: If logs is empty
    """
    if not logs:
        raise ValueError("At least one daily log is required")

    ordered = sorted(logs, key=lambda log: log.date)
    daily_summaries = [generate_day_summary(log) for log in ordered]
    logged = [s for s in daily_summaries if s.meal_count > 0]

    total_calories = sum(s.total_calories for s in logged)
    total_protein = sum(s.total_protein for s in logged)
    total_carbs = sum(s.total_carbs for s in logged)
    total_fats = sum(s.total_fats for s in logged)
    days_logged = len(logged)

    avg_daily_calories = total_calories / days_logged if days_logged > 0 else 0

    return WeeklyReport(
        start_date=ordered[0].date,
        end_date=ordered[-1].date,
        daily_summaries=daily_summaries,
        total_calories=round(total_calories, 1),
        avg_daily_calories=round(avg_daily_calories, 1),
        total_protein=round(total_protein, 1),
        total_carbs=round(total_carbs, 1),
        total_fats=round(total_fats, 1),
        days_logged=days_logged,
        days_on_target=sum(1 for s in logged if is_on_target(s.total_calories, targets.calories)),
        workouts_completed=sum(1 for log in ordered if log.workout_completed),
        net_energy=round(calculate_net_energy(total_calories, days_logged, targets.calories), 1),
    )
