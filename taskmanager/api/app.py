"""FastAPI application for taskmanager."""

import json
import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Query, Response, status
from fastapi.responses import StreamingResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from taskmanager.api.auth_models import (
    AuthResponse,
    CalendarAuthUrlResponse,
    CalendarConnectionResponse,
    GoogleSignInRequest,
    LoginRequest,
    RegisterRequest,
)
from taskmanager.api.task_models import (
    ProfileResponse,
    ReminderListResponse,
    TaskCreateRequest,
    TaskListResponse,
    TaskResponse,
    TaskStatsResponse,
    TaskUpdateRequest,
)
from taskmanager.auth.dependencies import get_current_user
from taskmanager.auth.google_oauth import (
    CALENDAR_SCOPES,
    OAuthExchangeError,
    build_calendar_auth_url,
    exchange_code_for_tokens,
    verify_google_token,
)
from taskmanager.auth.jwt import create_access_token, create_state_token, get_user_id_from_state
from taskmanager.auth.passwords import hash_password, verify_password
from taskmanager.database.database import get_db, get_session_factory, init_db
from taskmanager.database.calendar_token_repository import CalendarTokenRepository
from taskmanager.database.repository import TaskRepository
from taskmanager.database.task_feed import TaskFeed, get_task_feed
from taskmanager.database.user_repository import UserRepository
from taskmanager.engine.views import filter_tasks, sort_by_due_date, summarize_tasks
from taskmanager.integrations.calendar_sync import load_calendar_credentials, sync_task_to_calendar
from taskmanager.models.constants import FILTER_ALL
from taskmanager.models.task_factory import create_task_base
from taskmanager.models.user import User, normalize_email
from taskmanager.reminders.scheduler import (
    ReminderScheduler,
    get_reminder_scheduler,
    shutdown_reminder_scheduler,
)

logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield
    shutdown_reminder_scheduler()


# Initialize FastAPI app
app = FastAPI(
    title="taskmanager API",
    description="Personal task manager with due-date reminders and Google Calendar sync",
    version=APP_VERSION,
    lifespan=lifespan,
)


def _user_payload(user: User) -> dict:
    return {"id": user.id, "email": user.email, "name": user.name}


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(access_token=create_access_token(user.id), user=_user_payload(user))


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": APP_VERSION}


# Authentication

@app.post("/auth/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account with email and password and sign it in."""
    user_repo = UserRepository(db)
    if user_repo.get_by_email(request.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email is already registered")

    now = datetime.utcnow()
    user = User(id=str(uuid.uuid4()), email=request.email, name=request.name, created_at=now, updated_at=now)
    try:
        user = user_repo.create(user, password_hash=hash_password(request.password))
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Failed to register: {str(e)}")

    logger.info(f"Registered user {user.id}")
    return _auth_response(user)


@app.post("/auth/login", response_model=AuthResponse)
async def login(request: LoginRequest, db: Session = Depends(get_db)):
    """Sign in with email and password."""
    found = UserRepository(db).get_with_password_hash(request.email)
    if found is None or not found[1] or not verify_password(request.password, found[1]):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    return _auth_response(found[0])


@app.post("/auth/google", response_model=AuthResponse)
async def google_sign_in(request: GoogleSignInRequest, db: Session = Depends(get_db)):
    """Sign in with a Google ID token.

    An existing account with the same email is signed in; otherwise the
    Google user id becomes the new account id.
    """
    user_info = verify_google_token(request.id_token)
    if not user_info:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid Google token")
    if not user_info.get("email"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Google account has no email")

    email = normalize_email(user_info["email"])
    user_repo = UserRepository(db)
    now = datetime.utcnow()
    existing = user_repo.get_by_email(email)
    try:
        if existing:
            user = user_repo.create_or_update(
                User(
                    id=existing.id,
                    email=existing.email,
                    name=existing.name or user_info.get("name"),
                    created_at=existing.created_at,
                    updated_at=now,
                )
            )
        else:
            user = user_repo.create_or_update(
                User(
                    id=user_info["id"],
                    email=email,
                    name=user_info.get("name"),
                    created_at=now,
                    updated_at=now,
                )
            )
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Failed to sign in: {str(e)}")

    return _auth_response(user)


@app.get("/auth/me")
async def me(current_user: User = Depends(get_current_user)):
    """Return the signed-in user."""
    return _user_payload(current_user)


@app.get("/auth/google/calendar/auth-url", response_model=CalendarAuthUrlResponse)
async def calendar_auth_url(current_user: User = Depends(get_current_user)):
    """Return the Google consent URL for connecting Calendar."""
    return CalendarAuthUrlResponse(url=build_calendar_auth_url(create_state_token(current_user.id)))


@app.get("/auth/google/calendar/callback", response_model=CalendarConnectionResponse)
async def calendar_callback(
    code: str = Query(...),
    state: str = Query(...),
    db: Session = Depends(get_db),
):
    """Complete the Calendar consent flow and store the refresh token."""
    user_id = get_user_id_from_state(state)
    if not user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired state")
    if UserRepository(db).get(user_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown user")

    try:
        token_data = exchange_code_for_tokens(code)
    except OAuthExchangeError as e:
        logger.warning(f"Calendar connect failed for user {user_id}: {str(e)}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    token_repo = CalendarTokenRepository(db)
    try:
        # Google omits the refresh token when consent was granted before.
        refresh_token = token_data.get("refresh_token") or token_repo.get_refresh_token(user_id)
        if not refresh_token:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Google did not return a refresh token. Reconnect and grant consent.",
            )
        scope = token_data.get("scope")
        token_repo.save(
            user_id,
            refresh_token,
            scope.split() if scope else CALENDAR_SCOPES,
            access_token=token_data.get("access_token"),
            expiry=token_data.get("expiry"),
        )
    except (RuntimeError, SQLAlchemyError) as e:
        raise HTTPException(status_code=500, detail=f"Failed to connect calendar: {str(e)}")

    logger.info(f"Google Calendar connected for user {user_id}")
    return CalendarConnectionResponse(connected=True)


@app.delete("/auth/google/calendar", status_code=status.HTTP_204_NO_CONTENT)
async def calendar_disconnect(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Forget the stored Calendar token."""
    CalendarTokenRepository(db).delete(current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Tasks

@app.post("/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    request: TaskCreateRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
    feed: TaskFeed = Depends(get_task_feed),
):
    """Create a task, then arm its reminders and copy it to Calendar."""
    task = create_task_base(
        user_id=current_user.id,
        title=request.title,
        due_date=request.due_date,
        description=request.description,
        category=request.category,
        priority=request.priority,
    )
    try:
        created = TaskRepository(db, feed=feed).create(task)
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Failed to create task: {str(e)}")

    background_tasks.add_task(scheduler.schedule, created.id, created.title, created.due_date)
    background_tasks.add_task(sync_task_to_calendar, load_calendar_credentials(db, current_user.id), created)
    return TaskResponse(task=created)


@app.get("/tasks", response_model=TaskListResponse)
async def list_tasks(
    priority: str = Query(FILTER_ALL, description="Priority filter, or All"),
    category: str = Query(FILTER_ALL, description="Category filter, or All"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List the user's tasks ordered by due date."""
    try:
        tasks = TaskRepository(db).get_all(current_user.id)
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Failed to list tasks: {str(e)}")

    tasks = filter_tasks(sort_by_due_date(tasks), priority=priority, category=category)
    return TaskListResponse(tasks=tasks, count=len(tasks))


@app.get("/tasks/stream")
async def stream_tasks(
    current_user: User = Depends(get_current_user),
    session_factory: sessionmaker = Depends(get_session_factory),
    feed: TaskFeed = Depends(get_task_feed),
):
    """Server-sent events: the user's task list now and after every change."""
    user_id = current_user.id

    def load_snapshot() -> TaskListResponse:
        db = session_factory()
        try:
            tasks = sort_by_due_date(TaskRepository(db, feed=feed).get_all(user_id))
        finally:
            db.close()
        return TaskListResponse(tasks=tasks, count=len(tasks))

    async def event_stream():
        try:
            async for snapshot in feed.watch(user_id, load_snapshot):
                yield f"event: tasks\ndata: {snapshot.model_dump_json()}\n\n"
        except SQLAlchemyError as e:
            logger.error(f"Task stream failed for user {user_id}: {type(e).__name__}: {str(e)}")
            yield f"event: error\ndata: {json.dumps({'detail': 'Error fetching tasks'})}\n\n"

    return StreamingResponse(event_stream(), media_type="text/event-stream")


@app.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get a task by ID."""
    task = TaskRepository(db).get(current_user.id, task_id)
    if not task:
        raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
    return TaskResponse(task=task)


@app.put("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    request: TaskUpdateRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
    feed: TaskFeed = Depends(get_task_feed),
):
    """Apply a partial update, then re-arm reminders and copy to Calendar."""
    # Explicit nulls mean "unchanged"; every task column is required.
    fields = {k: v for k, v in request.model_dump(exclude_unset=True).items() if v is not None}
    try:
        updated = TaskRepository(db, feed=feed).update(current_user.id, task_id, fields)
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Failed to update task: {str(e)}")
    if not updated:
        raise HTTPException(status_code=404, detail=f"Task {task_id} not found")

    background_tasks.add_task(scheduler.reschedule, updated.id, updated.title, updated.due_date)
    background_tasks.add_task(sync_task_to_calendar, load_calendar_credentials(db, current_user.id), updated)
    return TaskResponse(task=updated)


@app.post("/tasks/{task_id}/toggle-complete", response_model=TaskResponse)
async def toggle_task_complete(
    task_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    feed: TaskFeed = Depends(get_task_feed),
):
    """Flip the completion flag of a task. Reminders are left as they are."""
    repo = TaskRepository(db, feed=feed)
    task = repo.get(current_user.id, task_id)
    if not task:
        raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
    try:
        updated = repo.set_completed(current_user.id, task_id, not task.is_completed)
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Failed to update task: {str(e)}")
    return TaskResponse(task=updated)


@app.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
    feed: TaskFeed = Depends(get_task_feed),
):
    """Delete a task and cancel its reminders."""
    try:
        deleted = TaskRepository(db, feed=feed).delete(current_user.id, task_id)
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Failed to delete task: {str(e)}")
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Task {task_id} not found")

    background_tasks.add_task(scheduler.cancel, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get("/tasks/{task_id}/reminders", response_model=ReminderListResponse)
async def list_task_reminders(
    task_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
):
    """List the reminder triggers still pending for a task."""
    if not TaskRepository(db).get(current_user.id, task_id):
        raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
    return ReminderListResponse(task_id=task_id, reminders=scheduler.pending_for_task(task_id))


@app.get("/profile", response_model=ProfileResponse)
async def profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Current user with task completion statistics."""
    try:
        tasks = TaskRepository(db).get_all(current_user.id)
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Failed to load profile: {str(e)}")

    stats = summarize_tasks(tasks)
    return ProfileResponse(
        email=current_user.email,
        name=current_user.name,
        stats=TaskStatsResponse(
            total=stats.total,
            completed=stats.completed,
            pending=stats.pending,
            completion_percentage=stats.completion_percentage,
        ),
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
