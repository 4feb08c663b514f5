"""Platform Stats - Pure rollups for the admin console.

Revenue and storage figures are display estimates, not accounting numbers.
"""

from .models import ContestSubmission, PlatformStats, SubmissionStatus


REVENUE_PER_ACCOUNT = 10.0


def count_pending(submissions: list[ContestSubmission]) -> int:
    """Number of submissions still waiting for review."""
    return sum(1 for s in submissions if s.status == SubmissionStatus.PENDING)


def estimate_revenue(account_count: int) -> float:
    """Flat per-account revenue estimate."""
    return max(0, account_count) * REVENUE_PER_ACCOUNT


def build_platform_stats(
    account_count: int,
    meal_count: int,
    contest_count: int,
    post_count: int,
    submissions: list[ContestSubmission],
    storage_bytes: int,
) -> PlatformStats:
    """Assemble the admin snapshot from raw counts.

    Args:
        account_count: Accounts in the directory
        meal_count: Meals across every account's logs
        contest_count: Contests in the global collection
        post_count: Community posts in the global collection
        submissions: Every contest submission
        storage_bytes: Total length of the serialized store values

    Returns:
        PlatformStats snapshot
    """
    return PlatformStats(
        user_count=account_count,
        total_meals_logged=meal_count,
        pending_verifications=count_pending(submissions),
        active_contests=contest_count,
        total_posts=post_count,
        total_submissions=len(submissions),
        estimated_revenue=estimate_revenue(account_count),
        estimated_storage_bytes=max(0, storage_bytes),
    )
