"""EvolveFit Service - Entry point.

Runs the local JSON API over the fitness database, with the MCP tool server
for the AI coach mounted at /mcp. Uses Starlette and uvicorn.
"""

import logging

import uvicorn
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from .config import AppConfig, load_config
from .core.errors import ErrorKind, EvolveFitError
from .core.models import (
    AccountRecord,
    AuthProvider,
    CommunityPost,
    Contest,
    ContestSubmission,
    FitnessProfile,
    MealEntry,
    SubmissionStatus,
    TrainingContext,
)
from .core.macros import calculate_daily_summary
from .core.reports import generate_weekly_report
from .shell.database import FitnessDatabase, create_store
from .shell.mcp_server import mcp, set_database


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.DUPLICATE_EMAIL: 409,
    ErrorKind.ACCOUNT_NOT_FOUND: 404,
    ErrorKind.INVALID_CREDENTIAL: 401,
    ErrorKind.NO_ACTIVE_SESSION: 401,
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.MALFORMED_STORED_VALUE: 500,
    ErrorKind.PERSISTENCE_FAILURE: 503,
}


def _db(request: Request) -> FitnessDatabase:
    return request.app.state.db


async def _body(request: Request) -> dict:
    body = await request.json()
    if not isinstance(body, dict):
        raise ValueError("JSON object expected")
    return body


def _account_view(account: AccountRecord) -> dict:
    return account.model_dump(mode="json", exclude={"credential_proof"})


def _dump_all(records: list) -> list[dict]:
    return [r.model_dump(mode="json") for r in records]


# ==================== Error Handlers ====================


async def core_error(request: Request, exc: EvolveFitError) -> JSONResponse:
    status = ERROR_STATUS.get(exc.kind, 500)
    if status >= 500:
        logger.error("Request failed: %s", exc.message)
    return JSONResponse({"error": exc.message, "kind": exc.kind.value}, status_code=status)


async def invalid_input(request: Request, exc: ValueError) -> JSONResponse:
    if isinstance(exc, ValidationError):
        message = f"Invalid input: {exc.error_count()} validation error(s)"
    else:
        message = str(exc) or "Invalid input"
    return JSONResponse({"error": message, "kind": "invalid_input"}, status_code=400)


# ==================== Route Handlers ====================


async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse({"status": "healthy", "service": "evolvefit"})


async def register(request: Request) -> JSONResponse:
    """Create an account and sign it in."""
    body = await _body(request)
    account = _db(request).directory.register(
        body.get("email") or "",
        body.get("password"),
        AuthProvider(body.get("provider", AuthProvider.PASSWORD.value)),
    )
    return JSONResponse(_account_view(account), status_code=201)


async def login(request: Request) -> JSONResponse:
    """Sign in with email and password."""
    body = await _body(request)
    if not body.get("password"):
        raise ValueError("Password is required")
    account = _db(request).directory.login(body.get("email") or "", body["password"])
    return JSONResponse(_account_view(account))


async def federated_sign_in(request: Request) -> JSONResponse:
    """Sign in through an external identity provider."""
    body = await _body(request)
    account = _db(request).directory.federated_sign_in(
        body.get("email") or "",
        AuthProvider(body.get("provider", AuthProvider.FEDERATED_A.value)),
    )
    return JSONResponse(_account_view(account))


async def logout(request: Request) -> JSONResponse:
    _db(request).directory.logout()
    return JSONResponse({"success": True})


async def current_account(request: Request) -> JSONResponse:
    return JSONResponse(_account_view(_db(request).directory.require_account()))


async def profile(request: Request) -> JSONResponse:
    """Read or replace the signed-in user's profile."""
    directory = _db(request).directory
    if request.method == "PUT":
        saved = directory.save_profile(FitnessProfile.model_validate(await _body(request)))
        return JSONResponse(saved.model_dump(mode="json"))

    directory.require_account()
    current = directory.read_profile()
    return JSONResponse(current.model_dump(mode="json") if current else None)


async def today_log(request: Request) -> JSONResponse:
    logs = _db(request).logs
    return JSONResponse(logs.get_log(logs.today_key()).model_dump(mode="json"))


async def recent_logs(request: Request) -> JSONResponse:
    """Dense series of the last N days for charting."""
    days = int(request.query_params.get("days", "7"))
    return JSONResponse(_dump_all(_db(request).logs.get_recent_logs(days)))


async def day_log(request: Request) -> JSONResponse:
    log = _db(request).logs.get_log(request.path_params["date"])
    return JSONResponse(log.model_dump(mode="json"))


async def water_intake(request: Request) -> JSONResponse:
    body = await _body(request)
    log = _db(request).logs.set_water_intake(request.path_params["date"], float(body.get("litres", 0)))
    return JSONResponse(log.model_dump(mode="json"))


async def workout(request: Request) -> JSONResponse:
    body = await _body(request)
    log = _db(request).logs.mark_workout(request.path_params["date"], bool(body.get("completed", True)))
    return JSONResponse(log.model_dump(mode="json"))


async def log_meal(request: Request) -> JSONResponse:
    """Append an already-analysed meal to the day it was eaten."""
    db = _db(request)
    body = await _body(request)
    body.setdefault("timestamp", db.logs.now().isoformat())
    log = db.logs.append_meal(MealEntry.model_validate(body))
    return JSONResponse(log.model_dump(mode="json"), status_code=201)


async def daily_summary(request: Request) -> JSONResponse:
    db = _db(request)
    targets = _require_targets(db)
    log = db.logs.get_log(request.query_params.get("date") or db.logs.today_key())
    return JSONResponse(calculate_daily_summary(log, targets).model_dump())


async def weekly_report(request: Request) -> JSONResponse:
    db = _db(request)
    targets = _require_targets(db)
    return JSONResponse(generate_weekly_report(db.logs.get_recent_logs(7), targets).model_dump())


def _require_targets(db: FitnessDatabase):
    db.directory.require_account()
    current = db.directory.read_profile()
    if current is None or current.targets is None:
        raise ValueError("Complete onboarding first")
    return current.targets


async def contests(request: Request) -> JSONResponse:
    db = _db(request)
    if request.method == "POST":
        db.require_admin()
        contest = db.contests.create(Contest.model_validate(await _body(request)))
        return JSONResponse(contest.model_dump(mode="json"), status_code=201)
    return JSONResponse(_dump_all(db.contests.list()))


async def delete_contest(request: Request) -> JSONResponse:
    db = _db(request)
    db.require_admin()
    return JSONResponse(_dump_all(db.contests.remove(request.path_params["id"])))


async def posts(request: Request) -> JSONResponse:
    """List the feed, or publish a post as the signed-in user."""
    db = _db(request)
    if request.method == "POST":
        account = db.directory.require_account()
        body = await _body(request)
        author = db.directory.read_profile()
        body.setdefault("user", author.name if author else account.email.split("@")[0])
        body["author_id"] = account.id
        post = db.posts.create(CommunityPost.model_validate(body))
        return JSONResponse(post.model_dump(mode="json"), status_code=201)
    return JSONResponse(_dump_all(db.posts.list()))


async def post_detail(request: Request) -> JSONResponse:
    db = _db(request)
    account = db.directory.require_account()
    post_id = request.path_params["id"]
    existing = db.posts.get(post_id)
    if existing is None:
        return JSONResponse({"error": "Post not found", "kind": "not_found"}, status_code=404)

    if request.method == "DELETE":
        if existing.author_id != account.id:
            db.require_admin()
        return JSONResponse(_dump_all(db.posts.remove(post_id)))

    body = await _body(request)
    body["id"] = existing.id
    body["author_id"] = existing.author_id
    updated = CommunityPost.model_validate({**existing.model_dump(), **body})
    db.posts.update(updated)
    return JSONResponse(updated.model_dump(mode="json"))


async def submissions(request: Request) -> JSONResponse:
    db = _db(request)
    if request.method == "POST":
        account = db.directory.require_account()
        body = await _body(request)
        body["account_id"] = account.id
        body["status"] = SubmissionStatus.PENDING.value
        submission = db.submissions.create(ContestSubmission.model_validate(body))
        return JSONResponse(submission.model_dump(mode="json"), status_code=201)
    return JSONResponse(_dump_all(db.submissions.list(request.query_params.get("contest_id"))))


async def submission_status(request: Request) -> JSONResponse:
    db = _db(request)
    db.require_admin()
    body = await _body(request)
    updated = db.submissions.update_status(request.path_params["id"], SubmissionStatus(body.get("status")))
    if updated is None:
        return JSONResponse({"error": "Submission not found", "kind": "not_found"}, status_code=404)
    return JSONResponse(updated.model_dump(mode="json"))


async def training_context(request: Request) -> JSONResponse:
    training = _db(request).training
    if request.method == "PUT":
        saved = training.save(TrainingContext.model_validate(await _body(request)))
        return JSONResponse(saved.model_dump(mode="json"))
    current = training.get()
    return JSONResponse(current.model_dump(mode="json") if current else None)


# ==================== Admin Handlers ====================


async def admin_stats(request: Request) -> JSONResponse:
    db = _db(request)
    db.require_admin()
    return JSONResponse(db.aggregator.snapshot().model_dump())


async def admin_users(request: Request) -> JSONResponse:
    db = _db(request)
    db.require_admin()
    return JSONResponse(_dump_all(db.directory.account_summaries()))


async def admin_delete_user(request: Request) -> JSONResponse:
    """Remove an account; ?purge=true also removes everything keyed by its id."""
    db = _db(request)
    db.require_admin()
    account_id = request.path_params["id"]
    if request.query_params.get("purge", "").lower() == "true":
        db.purge_account(account_id)
        return JSONResponse(_dump_all(db.directory.account_summaries()))
    return JSONResponse(_dump_all(db.directory.delete_account(account_id)))


async def admin_ban(request: Request) -> JSONResponse:
    db = _db(request)
    db.require_admin()
    body = await _body(request)
    username = body.get("username")
    if not username:
        raise ValueError("username is required")
    return JSONResponse(_dump_all(db.posts.remove_all_by_user(username)))


# ==================== Create ASGI App ====================


def create_app(database: FitnessDatabase | None = None, config: AppConfig | None = None) -> Starlette:
    """Create the Starlette application with the MCP app mounted at root.

    Args:
        database: Database to serve; built from configuration when omitted
        config: Configuration; read from the environment when omitted
    """
    config = config or (database.config if database else load_config())
    database = database or FitnessDatabase(create_store(config), config)
    set_database(database)

    mcp_app = mcp.streamable_http_app()

    routes = [
        Route("/health", health_check, methods=["GET"]),
        Route("/auth/register", register, methods=["POST"]),
        Route("/auth/login", login, methods=["POST"]),
        Route("/auth/federated", federated_sign_in, methods=["POST"]),
        Route("/auth/logout", logout, methods=["POST"]),
        Route("/auth/me", current_account, methods=["GET"]),
        Route("/profile", profile, methods=["GET", "PUT"]),
        Route("/logs/today", today_log, methods=["GET"]),
        Route("/logs/recent", recent_logs, methods=["GET"]),
        Route("/logs/{date}", day_log, methods=["GET"]),
        Route("/logs/{date}/water", water_intake, methods=["POST"]),
        Route("/logs/{date}/workout", workout, methods=["POST"]),
        Route("/meals", log_meal, methods=["POST"]),
        Route("/reports/daily", daily_summary, methods=["GET"]),
        Route("/reports/weekly", weekly_report, methods=["GET"]),
        Route("/contests", contests, methods=["GET", "POST"]),
        Route("/contests/{id}", delete_contest, methods=["DELETE"]),
        Route("/posts", posts, methods=["GET", "POST"]),
        Route("/posts/{id}", post_detail, methods=["PUT", "DELETE"]),
        Route("/submissions", submissions, methods=["GET", "POST"]),
        Route("/submissions/{id}/status", submission_status, methods=["POST"]),
        Route("/training-context", training_context, methods=["GET", "PUT"]),
        Route("/admin/stats", admin_stats, methods=["GET"]),
        Route("/admin/users", admin_users, methods=["GET"]),
        Route("/admin/users/{id}", admin_delete_user, methods=["DELETE"]),
        Route("/admin/ban", admin_ban, methods=["POST"]),
        # Mount MCP app at root - it handles /mcp/ path internally
        Mount("/", app=mcp_app),
    ]

    app = Starlette(
        routes=routes,
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=config.cors_origins,
                allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
                allow_headers=["*"],
            ),
        ],
        exception_handlers={
            EvolveFitError: core_error,
            ValidationError: invalid_input,
            ValueError: invalid_input,
        },
        lifespan=mcp_app.router.lifespan_context,
    )
    app.state.db = database

    return app


def main() -> None:
    """Run the server."""
    config = load_config()
    app = create_app(config=config)

    logger.info("Starting EvolveFit service on %s:%d (%s backend)", config.host, config.port, config.backend)

    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
