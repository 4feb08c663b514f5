"""Macro Calculations - Pure functions for nutrition math.

All functions are pure: same input always produces same output, no side effects.
"""

from .models import DailyLog, DailySummary, MacroBreakdown, MealEntry, Targets


def calculate_daily_totals(meals: list[MealEntry]) -> MacroBreakdown:
    """Fold the macros of a day's meals into one breakdown.

    Missing fiber counts as zero, so the total always carries a fiber value.

    Args:
        meals: Meals logged for a day

    Returns:
        MacroBreakdown holding the component-wise sums
    """
    calories = protein = carbs = fats = fiber = 0.0
    for meal in meals:
        calories += meal.macros.calories
        protein += meal.macros.protein
        carbs += meal.macros.carbs
        fats += meal.macros.fats
        fiber += meal.macros.fiber or 0

    return MacroBreakdown(calories=calories, protein=protein, carbs=carbs, fats=fats, fiber=fiber)


def refold(log: DailyLog) -> DailyLog:
    """Copy of log whose total_macros is recomputed from its meals."""
    return log.model_copy(update={"total_macros": calculate_daily_totals(log.meals)})


def with_meal(log: DailyLog, meal: MealEntry) -> DailyLog:
    """Copy of log with meal appended and totals refolded."""
    return refold(log.model_copy(update={"meals": [*log.meals, meal]}))


def calculate_daily_summary(log: DailyLog, targets: Targets) -> DailySummary:
    """Calculate daily summary with totals and remaining goals.

    Args:
        log: The day's log
        targets: The profile's daily targets

    Returns:
        DailySummary with totals and remaining amounts
    """
    totals = calculate_daily_totals(log.meals)

    return DailySummary(
        date=log.date,
        total_calories=round(totals.calories, 1),
        total_protein=round(totals.protein, 1),
        total_carbs=round(totals.carbs, 1),
        total_fats=round(totals.fats, 1),
        calories_remaining=round(targets.calories - totals.calories, 1),
        protein_remaining=round(targets.protein - totals.protein, 1),
        carbs_remaining=round(targets.carbs - totals.carbs, 1),
        fats_remaining=round(targets.fats - totals.fats, 1),
        water_intake=log.water_intake,
        workout_completed=log.workout_completed,
    )


def calculate_calories_from_macros(protein: float, carbs: float, fats: float) -> int:
    """Calculate calories from macronutrients.

    Uses standard conversion: 4 cal/g protein, 4 cal/g carbs, 9 cal/g fat.

    Args:
        protein: Grams of protein
        carbs: Grams of carbohydrates
        fats: Grams of fat

    Returns:
        Estimated calories (rounded to nearest integer)
    """
    return round(protein * 4 + carbs * 4 + fats * 9)
