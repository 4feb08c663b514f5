"""MCP Server - Tool definitions for the AI coach.

Exposes the signed-in user's profile and logs as structured context, and lets
the coach store a meal it has already analysed. The core never calls the
inference service; it only stores what the coach hands back.
"""

import logging
from datetime import datetime

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings
from pydantic import ValidationError

from ..config import load_config
from ..core.errors import EvolveFitError
from ..core.macros import calculate_calories_from_macros, calculate_daily_summary
from ..core.models import MacroBreakdown, MealEntry
from ..core.reports import generate_weekly_report
from .database import FitnessDatabase, create_store


logger = logging.getLogger(__name__)

transport_security = TransportSecuritySettings(
    enable_dns_rebinding_protection=True,
    allowed_hosts=["localhost:*", "127.0.0.1:*"],
)

mcp = FastMCP(
    "evolvefit",
    instructions="""EvolveFit - Personal fitness coach context.

Use these tools to read the signed-in user's fitness profile, targets and
nutrition logs before giving advice.

After analysing a meal photo and confirming it with the user, call log_meal
with the macros, then show the updated daily summary.""",
    stateless_http=True,
    transport_security=transport_security,
)

# Lazy-initialized database
_database: FitnessDatabase | None = None


def get_database() -> FitnessDatabase:
    """Get or create the shared database."""
    global _database
    if _database is None:
        config = load_config()
        _database = FitnessDatabase(create_store(config), config)
    return _database


def set_database(database: FitnessDatabase) -> None:
    """Share an existing database with the tools."""
    global _database
    _database = database


def _error(e: EvolveFitError) -> dict:
    return {"error": e.message, "kind": e.kind.value}


# ==================== Profile Tools ====================


@mcp.tool()
def get_profile() -> dict:
    """Retrieve the signed-in user's fitness profile and daily targets.

    Returns:
        Profile fields and targets, or an error if nobody is signed in
    """
    db = get_database()
    try:
        db.directory.require_account()
    except EvolveFitError as e:
        return _error(e)

    profile = db.directory.read_profile()
    if profile is None:
        return {"error": "Onboarding not completed. No profile yet."}
    return profile.model_dump(mode="json", exclude={"avatar"})


# ==================== Logging Tools ====================


@mcp.tool()
def log_meal(
    name: str,
    protein: float,
    carbs: float,
    fats: float,
    calories: float | None = None,
    fiber: float | None = None,
    description: str | None = None,
    eaten_at: str | None = None,
) -> dict:
    """Store an analysed meal in the log of the day it was eaten.

    Args:
        name: Name of the meal (e.g., "Paneer wrap")
        protein: Protein in grams
        carbs: Carbohydrates in grams
        fats: Fat in grams
        calories: Total calories; derived from the macros when omitted
        fiber: Optional fiber in grams
        description: Optional details about portion/preparation
        eaten_at: Optional ISO 8601 time the meal was eaten (defaults to now)

    Returns:
        The stored meal and the updated day totals
    """
    db = get_database()
    try:
        meal = MealEntry(
            name=name,
            description=description,
            macros=MacroBreakdown(
                calories=calories if calories is not None
                else calculate_calories_from_macros(protein, carbs, fats),
                protein=protein,
                carbs=carbs,
                fats=fats,
                fiber=fiber,
            ),
            timestamp=datetime.fromisoformat(eaten_at) if eaten_at else db.logs.now(),
        )
    except (ValueError, ValidationError) as e:
        return {"error": f"Invalid meal: {e}"}

    try:
        log = db.logs.append_meal(meal)
    except EvolveFitError as e:
        return _error(e)

    return {
        "meal": meal.model_dump(mode="json"),
        "date": log.date,
        "total_macros": log.total_macros.model_dump(),
    }


# ==================== Query Tools ====================


@mcp.tool()
def get_today_log() -> dict:
    """Get today's complete meal log.

    Returns:
        Dictionary with date, meals, water, workout flag and totals
    """
    db = get_database()
    return db.logs.get_log(db.logs.today_key()).model_dump(mode="json")


@mcp.tool()
def get_day(date_str: str) -> dict:
    """Get a specific day's meal log.

    Args:
        date_str: Date in YYYY-MM-DD format

    Returns:
        Dictionary with date, meals, water, workout flag and totals
    """
    try:
        return get_database().logs.get_log(date_str).model_dump(mode="json")
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}


@mcp.tool()
def get_recent_logs(days: int = 7) -> list[dict]:
    """Get per-day totals for the last N days, oldest first.

    Args:
        days: Number of days ending today (1-90)

    Returns:
        One entry per day, including days with nothing logged
    """
    days = max(1, min(days, 90))
    return [
        {
            "date": log.date,
            "meal_count": len(log.meals),
            "total_macros": log.total_macros.model_dump(),
            "water_intake": log.water_intake,
            "workout_completed": log.workout_completed,
        }
        for log in get_database().logs.get_recent_logs(days)
    ]


@mcp.tool()
def get_daily_summary() -> dict:
    """Compare today's intake with the profile targets.

    Returns:
        Totals and remaining amounts, or an error if there is no profile
    """
    db = get_database()
    profile = db.directory.read_profile()
    if profile is None or profile.targets is None:
        return {"error": "No profile configured. Complete onboarding first."}

    log = db.logs.get_log(db.logs.today_key())
    return calculate_daily_summary(log, profile.targets).model_dump()


@mcp.tool()
def get_weekly_report() -> dict:
    """Generate a report over the last 7 days against the profile targets.

    The 'net_energy' metric = (calories consumed - days logged * calorie target).
    Negative values indicate a deficit against the goal.

    Returns:
        Dictionary with dates, daily summaries, totals and net energy
    """
    db = get_database()
    profile = db.directory.read_profile()
    if profile is None or profile.targets is None:
        return {"error": "No profile configured. Complete onboarding first."}

    report = generate_weekly_report(db.logs.get_recent_logs(7), profile.targets)
    result = report.model_dump()
    result["interpretation"] = (
        f"Caloric {'surplus' if report.net_energy > 0 else 'deficit'} "
        f"of {abs(report.net_energy)} calories over {report.days_logged} days"
    )
    return result
