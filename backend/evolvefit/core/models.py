"""Core Data Models - Pydantic models for type safety.

All models are value objects with no behavior beyond validation.
Derived fields (profile targets, daily macro totals) are filled in by the
pure functions in this package, never by hand.
"""

import time
import uuid
from datetime import date as DateType
from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def feed_record_id() -> str:
    """Id for feed-style records: millisecond time plus a random suffix.

    Records created in the same millisecond still get distinct ids.
    """
    return f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


RecordId = Union[int, str]


# ==================== Enumerations ====================


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class Goal(str, Enum):
    FAT_LOSS = "Fat Loss"
    MUSCLE_GAIN = "Muscle Gain"
    RECOMPOSITION = "Recomposition"


class ActivityLevel(str, Enum):
    SEDENTARY = "Sedentary"
    LIGHTLY_ACTIVE = "Lightly Active"
    MODERATELY_ACTIVE = "Moderately Active"
    VERY_ACTIVE = "Very Active"


class DietPreference(str, Enum):
    VEGETARIAN = "Vegetarian"
    EGGITARIAN = "Eggitarian"
    NON_VEGETARIAN = "Non-Vegetarian"


class ExperienceLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class AuthProvider(str, Enum):
    PASSWORD = "password"
    FEDERATED_A = "federated-a"
    FEDERATED_B = "federated-b"


class SubmissionStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class PostCategory(str, Enum):
    MILESTONE = "Milestone"
    NUTRITION = "Nutrition"
    GENERAL = "General"


class TrainingSplit(str, Enum):
    PUSH = "Push"
    PULL = "Pull"
    LEGS = "Legs"
    FULL_BODY = "Full Body"


class TrainingEnvironment(str, Enum):
    HOME = "Home"
    GYM = "Gym"


# ==================== Accounts & Profiles ====================


class Targets(BaseModel):
    """Daily goals derived from a biometric profile."""

    calories: int = Field(ge=0, description="Daily calorie target")
    protein: int = Field(ge=0, description="Daily protein target in grams")
    carbs: int = Field(ge=0, description="Daily carbohydrate target in grams")
    fats: int = Field(ge=0, description="Daily fat target in grams")
    steps: int = Field(ge=0, description="Daily step target")


class ProfileSettings(BaseModel):
    """Privacy and notification toggles."""

    notifications: bool = True
    public_profile: bool = True
    data_sharing: bool = False


class FitnessProfile(BaseModel):
    """Biometric profile captured during onboarding."""

    name: str = Field(min_length=1)
    age: int = Field(gt=0, le=120)
    gender: Gender
    height: float = Field(gt=0, description="Height in cm")
    current_weight: float = Field(gt=0, description="Weight in kg")
    goal_weight: float = Field(gt=0, description="Goal weight in kg")
    diet: DietPreference = DietPreference.NON_VEGETARIAN
    activity: ActivityLevel
    goal: Goal
    experience: ExperienceLevel = ExperienceLevel.BEGINNER
    bio: Optional[str] = None
    avatar: Optional[str] = Field(default=None, description="Image reference or data URL")
    settings: ProfileSettings = Field(default_factory=ProfileSettings)
    created_at: datetime = Field(default_factory=utc_now)
    is_admin: bool = Field(default=False, description="View flag merged from the account")
    targets: Optional[Targets] = Field(default=None, description="Recomputed on every save")


class AccountRecord(BaseModel):
    """One entry in the user directory."""

    id: str
    email: str
    credential_proof: Optional[str] = Field(
        default=None, description="Salted password hash, password accounts only"
    )
    auth_provider: AuthProvider = AuthProvider.PASSWORD
    profile: Optional[FitnessProfile] = None
    created_at: datetime = Field(default_factory=utc_now)
    last_login_at: datetime = Field(default_factory=utc_now)
    is_admin: bool = False


class AccountSummary(BaseModel):
    """Row of the admin user table."""

    id: str
    name: str
    email: str
    joined: DateType
    status: Literal["Active", "Pending"]
    is_admin: bool


# ==================== Nutrition Logs ====================


class MacroBreakdown(BaseModel):
    """Nutrients of a meal, or of a whole day when folded."""

    calories: float = Field(ge=0)
    protein: float = Field(ge=0, description="Protein in grams")
    carbs: float = Field(ge=0, description="Carbohydrates in grams")
    fats: float = Field(ge=0, description="Fat in grams")
    fiber: Optional[float] = Field(default=None, ge=0, description="Fiber in grams")


class MealEntry(BaseModel):
    """A single meal, usually the confirmed result of a photo analysis."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=utc_now)
    name: str = Field(min_length=1)
    description: Optional[str] = None
    image_url: Optional[str] = None
    macros: MacroBreakdown
    confirmed: bool = True


class DailyLog(BaseModel):
    """One local calendar day of intake for one user."""

    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD")
    meals: list[MealEntry] = Field(default_factory=list)
    water_intake: float = Field(default=0, ge=0, description="Litres")
    workout_completed: bool = False
    total_macros: MacroBreakdown = Field(
        default_factory=lambda: MacroBreakdown(calories=0, protein=0, carbs=0, fats=0, fiber=0)
    )


class DailySummary(BaseModel):
    """Intake for a day compared with the profile targets."""

    date: str
    total_calories: float
    total_protein: float
    total_carbs: float
    total_fats: float
    calories_remaining: float = Field(description="Negative if over goal")
    protein_remaining: float = Field(description="Negative if over goal")
    carbs_remaining: float = Field(description="Negative if over goal")
    fats_remaining: float = Field(description="Negative if over goal")
    water_intake: float
    workout_completed: bool


class DaySummary(BaseModel):
    """Summary for a single day in a weekly report."""

    date: str
    total_calories: float
    total_protein: float
    total_carbs: float
    total_fats: float
    meal_count: int


class WeeklyReport(BaseModel):
    """Report over a dense run of consecutive days."""

    start_date: str
    end_date: str
    daily_summaries: list[DaySummary]
    total_calories: float
    avg_daily_calories: float
    total_protein: float
    total_carbs: float
    total_fats: float
    days_logged: int
    days_on_target: int
    workouts_completed: int
    net_energy: float = Field(description="Intake minus target over logged days. Negative = deficit.")


# ==================== Global Collections ====================


class Contest(BaseModel):
    id: RecordId = Field(default_factory=feed_record_id)
    title: str = Field(min_length=1)
    image: str = ""
    participants_count: str = "0"
    prize: str = ""
    description: str = ""
    rules: list[str] = Field(default_factory=list)
    days_left: int = Field(default=0, ge=0)
    icon: str = ""
    color: str = ""


class ContestSubmission(BaseModel):
    id: RecordId = Field(default_factory=lambda: str(uuid.uuid4()))
    contest_id: RecordId
    timestamp: datetime = Field(default_factory=utc_now)
    status: SubmissionStatus = SubmissionStatus.PENDING
    points: Union[int, str] = 0
    media_type: Literal["image", "video"] = "image"
    media_data: Optional[str] = None
    user_name: Optional[str] = None
    contest_title: Optional[str] = None
    account_id: Optional[str] = None


class Comment(BaseModel):
    id: RecordId = Field(default_factory=feed_record_id)
    user: str
    text: str
    time: str = "Just now"


class CommunityPost(BaseModel):
    id: RecordId = Field(default_factory=feed_record_id)
    user: str = Field(min_length=1, description="Display name of the author")
    badge: Optional[str] = None
    badge_type: Optional[Literal["gold", "green", "blue"]] = None
    time: str = "Just now"
    likes: int = Field(default=0, ge=0)
    is_liked: bool = False
    comments_count: int = Field(default=0, ge=0)
    image: Optional[str] = None
    caption: str = ""
    tags: list[str] = Field(default_factory=list)
    text_only: bool = False
    category: PostCategory = PostCategory.GENERAL
    is_following: bool = False
    comments: list[Comment] = Field(default_factory=list)
    author_id: Optional[str] = Field(default=None, description="Account id of the author")


# ==================== Preferences & Stats ====================


class TrainingContext(BaseModel):
    """Muscle-training preference: which split, where."""

    split: TrainingSplit
    environment: TrainingEnvironment


class PlatformStats(BaseModel):
    """Admin console snapshot. Revenue and storage are estimates only."""

    user_count: int = Field(ge=0)
    total_meals_logged: int = Field(ge=0)
    pending_verifications: int = Field(ge=0)
    active_contests: int = Field(ge=0)
    total_posts: int = Field(ge=0)
    total_submissions: int = Field(ge=0)
    estimated_revenue: float = Field(ge=0, description="Estimate: accounts times a flat rate")
    estimated_storage_bytes: int = Field(ge=0, description="Estimate: length of serialized values")
