"""Nutrition Targets - Pure functions deriving daily goals from biometrics.

All functions are pure: same input always produces same output, no side effects.
Energy math follows Mifflin-St Jeor with standard activity multipliers.
"""

import math

from .models import ActivityLevel, FitnessProfile, Gender, Goal, Targets


CALORIE_FLOOR = 1200

ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHTLY_ACTIVE: 1.375,
    ActivityLevel.MODERATELY_ACTIVE: 1.55,
    ActivityLevel.VERY_ACTIVE: 1.725,
}

GOAL_ADJUSTMENTS: dict[Goal, int] = {
    Goal.FAT_LOSS: -500,
    Goal.MUSCLE_GAIN: 300,
    Goal.RECOMPOSITION: -100,
}

STEP_TARGETS: dict[ActivityLevel, int] = {
    ActivityLevel.SEDENTARY: 6000,
    ActivityLevel.LIGHTLY_ACTIVE: 6000,
    ActivityLevel.MODERATELY_ACTIVE: 8000,
    ActivityLevel.VERY_ACTIVE: 10000,
}

FAT_LOSS_EXTRA_STEPS = 2000

PROTEIN_G_PER_KG = 2.0
FAT_G_PER_KG = 0.8


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3).

    round() uses banker's rounding, which would make 2.5 -> 2.
    """
    return math.floor(value + 0.5)


def calculate_bmr(age: int, gender: Gender, height_cm: float, weight_kg: float) -> float:
    """Basal metabolic rate (Mifflin-St Jeor).

    Men: 10W + 6.25H - 5A + 5. Everyone else: 10W + 6.25H - 5A - 161.
    """
    bmr = 10 * weight_kg + 6.25 * height_cm - 5 * age
    if gender == Gender.MALE:
        return bmr + 5
    return bmr - 161


def calculate_tdee(bmr: float, activity: ActivityLevel) -> int:
    """Total daily energy expenditure, rounded to a whole calorie."""
    return round_half_up(bmr * ACTIVITY_MULTIPLIERS.get(activity, 1.2))


def compute_targets(
    age: int,
    gender: Gender,
    height_cm: float,
    weight_kg: float,
    activity: ActivityLevel,
    goal: Goal,
) -> Targets:
    """Compute daily calorie, macro and step targets.

    Args:
        age: Age in years
        gender: Biological sex used by the BMR formula
        height_cm: Height in centimetres
        weight_kg: Current body weight in kilograms
        activity: Activity level, selects the TDEE multiplier
        goal: Training goal, selects the calorie adjustment

    Returns:
        Targets with calories clamped at CALORIE_FLOOR and carbs never negative
    """
    tdee = calculate_tdee(calculate_bmr(age, gender, height_cm, weight_kg), activity)

    calories = tdee + GOAL_ADJUSTMENTS.get(goal, 0)
    calories = max(calories, CALORIE_FLOOR)

    protein = round_half_up(weight_kg * PROTEIN_G_PER_KG)
    fats = round_half_up(weight_kg * FAT_G_PER_KG)
    remaining = calories - (protein * 4 + fats * 9)
    carbs = max(0, round_half_up(remaining / 4))

    steps = STEP_TARGETS.get(activity, 6000)
    if goal == Goal.FAT_LOSS:
        steps += FAT_LOSS_EXTRA_STEPS

    return Targets(calories=calories, protein=protein, carbs=carbs, fats=fats, steps=steps)


def targets_for_profile(profile: FitnessProfile) -> Targets:
    """Targets for the biometric fields of a profile."""
    return compute_targets(
        age=profile.age,
        gender=profile.gender,
        height_cm=profile.height,
        weight_kg=profile.current_weight,
        activity=profile.activity,
        goal=profile.goal,
    )


def with_targets(profile: FitnessProfile) -> FitnessProfile:
    """Copy of profile whose targets match its current biometrics."""
    return profile.model_copy(update={"targets": targets_for_profile(profile)})
