"""Cost and usage aggregation over stored sessions and messages."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import structlog

from playground_pricing.models import ChatMessage, ChatSession

if TYPE_CHECKING:
    from playground_pricing.services.storage import SessionRepository

logger = structlog.get_logger()

COST_BY_DATE_LIMIT = 30
RECENT_SESSIONS_LIMIT = 10
TOP_USERS_LIMIT = 10


@dataclass(frozen=True)
class SessionTotals:
    """Summed cost and token columns."""

    total_cost: float = 0.0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_cached_tokens: int = 0


@dataclass(frozen=True)
class DailyCost:
    date: str  # YYYY-MM-DD, UTC
    cost: float


@dataclass(frozen=True)
class DailyCount:
    date: str
    count: int


@dataclass(frozen=True)
class ModelCost:
    model: str
    cost: float
    count: int


@dataclass(frozen=True)
class ActivityCount:
    slot: int  # hour of day, or day of week with 0 = Sunday
    count: int


@dataclass(frozen=True)
class RecentSession:
    id: str
    name: str
    model: str
    message_count: int
    total_cost: float
    created_at: str


@dataclass(frozen=True)
class UserSpend:
    user_id: str
    message_count: int
    total_cost: float


@dataclass(frozen=True)
class UserAnalytics:
    """Per-user dashboard numbers."""

    total_sessions: int
    total_cost: float
    total_tokens: int
    total_input_tokens: int
    total_output_tokens: int
    total_cached_tokens: int
    avg_cost_per_session: float
    avg_tokens_per_session: float
    recent_sessions: list[RecentSession] = field(default_factory=list)
    cost_by_date: list[DailyCost] = field(default_factory=list)
    cost_by_model: list[ModelCost] = field(default_factory=list)


@dataclass(frozen=True)
class AdminSummary:
    total_messages: int
    total_cost: float
    total_sessions: int
    avg_messages_per_day: int
    avg_cost_per_day: float
    avg_sessions_per_day: int


@dataclass(frozen=True)
class AdminAnalytics:
    """Time series and breakdowns for the admin dashboard."""

    days: int
    summary: AdminSummary
    messages_over_time: list[DailyCount]
    sessions_over_time: list[DailyCount]
    cost_over_time: list[DailyCost]
    active_users_over_time: list[DailyCount]
    model_usage: list[ModelCost]
    cost_distribution: list[ModelCost]
    hourly_activity: list[ActivityCount]
    day_of_week_activity: list[ActivityCount]
    recent_sessions: list[RecentSession]
    top_users: list[UserSpend]


def summarize_message_costs(messages: Iterable[Any]) -> SessionTotals:
    """Sum cost and token columns; missing values count as zero."""
    total_cost = 0.0
    input_tokens = output_tokens = cached_tokens = 0
    for message in messages:
        total_cost += _field(message, "cost") or 0.0
        input_tokens += _field(message, "input_tokens") or 0
        output_tokens += _field(message, "output_tokens") or 0
        cached_tokens += _field(message, "cached_tokens") or 0

    return SessionTotals(
        total_cost=total_cost,
        total_input_tokens=input_tokens,
        total_output_tokens=output_tokens,
        total_cached_tokens=cached_tokens,
    )


def cost_by_date(
    sessions: Iterable[ChatSession], limit: int = COST_BY_DATE_LIMIT
) -> list[DailyCost]:
    """Sum session cost per UTC calendar date.

    Args:
        sessions: Sessions to aggregate.
        limit: Number of most recent date buckets to keep.

    Returns:
        Buckets sorted ascending by date string, at most ``limit`` long.
    """
    totals: dict[str, float] = defaultdict(float)
    for session in sessions:
        totals[_date_key(session.created_at)] += session.total_cost or 0.0

    buckets = [DailyCost(date=date, cost=cost) for date, cost in sorted(totals.items())]
    return buckets[-limit:] if limit > 0 else []


def cost_by_model(sessions: Iterable[ChatSession]) -> list[ModelCost]:
    """Sum session cost and count per model, most expensive first."""
    costs: dict[str, float] = defaultdict(float)
    counts: dict[str, int] = defaultdict(int)
    for session in sessions:
        costs[session.model] += session.total_cost or 0.0
        counts[session.model] += 1

    buckets = [ModelCost(model=model, cost=costs[model], count=counts[model]) for model in costs]
    buckets.sort(key=lambda b: b.cost, reverse=True)
    return buckets


def build_user_analytics(sessions: Sequence[ChatSession]) -> UserAnalytics:
    """Build the per-user analytics view from that user's sessions."""
    totals = summarize_message_costs(
        {
            "cost": s.total_cost,
            "input_tokens": s.input_tokens,
            "output_tokens": s.output_tokens,
            "cached_tokens": s.cached_tokens,
        }
        for s in sessions
    )
    total_sessions = len(sessions)
    total_tokens = (
        totals.total_input_tokens + totals.total_output_tokens + totals.total_cached_tokens
    )

    return UserAnalytics(
        total_sessions=total_sessions,
        total_cost=totals.total_cost,
        total_tokens=total_tokens,
        total_input_tokens=totals.total_input_tokens,
        total_output_tokens=totals.total_output_tokens,
        total_cached_tokens=totals.total_cached_tokens,
        avg_cost_per_session=totals.total_cost / total_sessions if total_sessions else 0.0,
        avg_tokens_per_session=total_tokens / total_sessions if total_sessions else 0.0,
        recent_sessions=_recent_sessions(sessions),
        cost_by_date=cost_by_date(sessions),
        cost_by_model=cost_by_model(sessions),
    )


def build_admin_analytics(
    sessions: Sequence[ChatSession],
    messages: Sequence[ChatMessage],
    days: int = 30,
    now: datetime | None = None,
) -> AdminAnalytics:
    """Build the admin dashboard view.

    Time series cover the window starting at midnight UTC ``days - 1`` days
    before ``now``. Model breakdowns, recent sessions and top users cover all
    sessions given.

    Args:
        sessions: All sessions.
        messages: Messages, at least those inside the window.
        days: Window length in days.
        now: Reference time, defaults to the current UTC time.

    Returns:
        AdminAnalytics for the window.
    """
    days = max(days, 1)
    now = _utc(now) if now else datetime.now(UTC)
    start = window_start(now, days)

    window_sessions = [s for s in sessions if _utc(s.created_at) >= start]
    window_messages = [m for m in messages if _utc(m.created_at) >= start]

    messages_by_day: dict[str, int] = defaultdict(int)
    hourly: dict[int, int] = defaultdict(int)
    weekday: dict[int, int] = defaultdict(int)
    for message in window_messages:
        created = _utc(message.created_at)
        messages_by_day[_date_key(created)] += 1
        hourly[created.hour] += 1
        weekday[(created.weekday() + 1) % 7] += 1

    sessions_by_day: dict[str, int] = defaultdict(int)
    users_by_day: dict[str, set[str]] = defaultdict(set)
    for session in window_sessions:
        key = _date_key(session.created_at)
        sessions_by_day[key] += 1
        users_by_day[key].add(session.user_id)

    messages_over_time = _daily_counts(messages_by_day)
    sessions_over_time = _daily_counts(sessions_by_day)
    cost_over_time = cost_by_date(window_sessions, limit=len(window_sessions))
    active_users = _daily_counts({day: len(users) for day, users in users_by_day.items()})

    by_model = cost_by_model(sessions)
    model_usage = sorted(by_model, key=lambda b: b.count, reverse=True)

    total_messages = len(window_messages)
    total_sessions = len(window_sessions)
    total_cost = sum(bucket.cost for bucket in cost_over_time)
    summary = AdminSummary(
        total_messages=total_messages,
        total_cost=total_cost,
        total_sessions=total_sessions,
        avg_messages_per_day=round(total_messages / days),
        avg_cost_per_day=total_cost / days,
        avg_sessions_per_day=round(total_sessions / days),
    )

    logger.debug(
        "admin_analytics_built",
        days=days,
        sessions=total_sessions,
        messages=total_messages,
    )
    return AdminAnalytics(
        days=days,
        summary=summary,
        messages_over_time=messages_over_time,
        sessions_over_time=sessions_over_time,
        cost_over_time=cost_over_time,
        active_users_over_time=active_users,
        model_usage=model_usage,
        cost_distribution=by_model,
        hourly_activity=[ActivityCount(slot=h, count=c) for h, c in sorted(hourly.items())],
        day_of_week_activity=[
            ActivityCount(slot=d, count=c) for d, c in sorted(weekday.items())
        ],
        recent_sessions=_recent_sessions(sessions),
        top_users=_top_users(sessions),
    )


class AnalyticsService:
    """Fetches stored sessions and messages and aggregates them."""

    def __init__(self, sessions: SessionRepository) -> None:
        self.sessions = sessions

    async def get_user_analytics(self, user_id: str) -> UserAnalytics:
        """Analytics for a single user."""
        sessions = await self.sessions.list_sessions(user_id=user_id)
        if not sessions:
            logger.info("user_analytics_empty", user_id=user_id)
        return build_user_analytics(sessions)

    async def get_admin_analytics(
        self, days: int = 30, now: datetime | None = None
    ) -> AdminAnalytics:
        """Analytics across all users for the last ``days`` days."""
        now = _utc(now) if now else datetime.now(UTC)
        sessions = await self.sessions.list_sessions()
        messages = await self.sessions.list_messages(since=window_start(now, max(days, 1)))
        return build_admin_analytics(sessions, messages, days=days, now=now)


def window_start(now: datetime, days: int) -> datetime:
    """Midnight UTC of the first day in a window of ``days`` ending at ``now``."""
    start = _utc(now) - timedelta(days=days - 1)
    return start.replace(hour=0, minute=0, second=0, microsecond=0)


def _recent_sessions(sessions: Iterable[ChatSession]) -> list[RecentSession]:
    newest_first = sorted(sessions, key=lambda s: _utc(s.created_at), reverse=True)
    return [
        RecentSession(
            id=s.id,
            name=s.title,
            model=s.model,
            message_count=s.message_count,
            total_cost=s.total_cost,
            created_at=_utc(s.created_at).isoformat(),
        )
        for s in newest_first[:RECENT_SESSIONS_LIMIT]
    ]


def _top_users(sessions: Iterable[ChatSession]) -> list[UserSpend]:
    message_counts: dict[str, int] = defaultdict(int)
    costs: dict[str, float] = defaultdict(float)
    for session in sessions:
        message_counts[session.user_id] += session.message_count
        costs[session.user_id] += session.total_cost or 0.0

    users = [
        UserSpend(user_id=user_id, message_count=count, total_cost=costs[user_id])
        for user_id, count in message_counts.items()
    ]
    users.sort(key=lambda u: u.message_count, reverse=True)
    return users[:TOP_USERS_LIMIT]


def _daily_counts(counts: dict[str, int]) -> list[DailyCount]:
    return [DailyCount(date=date, count=count) for date, count in sorted(counts.items())]


def _date_key(value: datetime) -> str:
    return _utc(value).date().isoformat()


def _utc(value: datetime) -> datetime:
    """Stored timestamps come back naive from some backends; they are UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _field(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)
