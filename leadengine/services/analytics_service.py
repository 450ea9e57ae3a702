"""Tenant-scoped interaction analytics.

``build_report`` is a pure, order-independent fold over event rows;
``AnalyticsService.aggregate`` only selects the rows and hands them over.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from leadengine.auth.tenant_context import enforce_tenant_match
from leadengine.core.config import ANALYTICS_PERIODS, get_config
from leadengine.core.exceptions import ValidationError
from leadengine.models import Channel, Event, EventType
from leadengine.models.base import as_utc, utcnow
from leadengine.schemas.analytics import (
    AnalyticsReport,
    BusinessValueEstimate,
    ChannelStats,
    ConversionRates,
    DailyTrendPoint,
    EffectivenessBreakdown,
    NO_DATA_INSIGHT,
    Insight,
    TodayStats,
)
from leadengine.services.base_service import BaseService

logger = logging.getLogger(__name__)

PERIOD_DAYS = {"week": 7, "month": 30, "year": 365}

BUSINESS_VALUE_WEIGHTS = {
    EventType.HOT_LEAD.value: 200,
    EventType.APPOINTMENT_SCHEDULED.value: 150,
    EventType.PHONE_REQUEST.value: 50,
    EventType.PRICING_DISCUSSED.value: 30,
    EventType.EMAIL_REQUEST.value: 25,
    EventType.URGENCY_CREATED.value: 35,
    EventType.FOLLOW_UP.value: 20,
    EventType.CTA_INCLUDED.value: 15,
    EventType.QUALIFYING_QUESTIONS.value: 15,
    EventType.ADVANTAGES_HIGHLIGHTED.value: 10,
    EventType.CONTACT_FORM.value: 25,
}

# (points per unit, cap)
ACTIVITY_WEIGHT = (1, 30)
HOT_LEAD_WEIGHT = (5, 25)
PHONE_REQUEST_WEIGHT = (4, 20)
APPOINTMENT_WEIGHT = (5, 15)
CHANNEL_DIVERSITY_WEIGHT = (3, 10)


@dataclass(frozen=True)
class EventRow:
    event_type: str
    channel: str
    created_at: datetime


def period_window(period: str, now: datetime) -> datetime | None:
    """Inclusive lower bound for ``period``; ``None`` means unbounded."""
    if period not in ANALYTICS_PERIODS:
        raise ValidationError(f"period must be one of {', '.join(sorted(ANALYTICS_PERIODS))}.")
    now = as_utc(now)
    if period == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "all":
        return None
    return now - timedelta(days=PERIOD_DAYS[period])


def _weighted(count: int, weight: tuple[int, int]) -> int:
    per_unit, cap = weight
    return min(cap, count * per_unit)


def _rate(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 1)


def effectiveness(event_counts: dict[str, int], total: int, channel_count: int) -> tuple[int, EffectivenessBreakdown]:
    if total <= 0:
        return 0, EffectivenessBreakdown()
    breakdown = EffectivenessBreakdown(
        activity=_weighted(total, ACTIVITY_WEIGHT),
        hot_leads=_weighted(event_counts.get(EventType.HOT_LEAD.value, 0), HOT_LEAD_WEIGHT),
        phone_requests=_weighted(event_counts.get(EventType.PHONE_REQUEST.value, 0), PHONE_REQUEST_WEIGHT),
        appointments=_weighted(event_counts.get(EventType.APPOINTMENT_SCHEDULED.value, 0), APPOINTMENT_WEIGHT),
        channel_diversity=_weighted(channel_count, CHANNEL_DIVERSITY_WEIGHT),
    )
    score = (
        breakdown.activity
        + breakdown.hot_leads
        + breakdown.phone_requests
        + breakdown.appointments
        + breakdown.channel_diversity
    )
    return min(100, score), breakdown


def business_value(event_counts: dict[str, int]) -> BusinessValueEstimate:
    breakdown = {
        event_type: weight * event_counts[event_type]
        for event_type, weight in BUSINESS_VALUE_WEIGHTS.items()
        if event_counts.get(event_type)
    }
    return BusinessValueEstimate(estimated_value=sum(breakdown.values()), breakdown=breakdown)


def build_insights(
    event_counts: dict[str, int],
    total: int,
    today: TodayStats,
    channel_breakdown: list[ChannelStats],
) -> list[Insight]:
    if total <= 0:
        return [NO_DATA_INSIGHT.model_copy()]

    insights: list[Insight] = []
    hot_leads = event_counts.get(EventType.HOT_LEAD.value, 0)
    phone_requests = event_counts.get(EventType.PHONE_REQUEST.value, 0)
    appointments = event_counts.get(EventType.APPOINTMENT_SCHEDULED.value, 0)

    if today.hot_leads > 0:
        insights.append(
            Insight(
                type="urgent",
                message=f"{today.hot_leads} hot lead(s) came in today. Respond right away.",
                importance="high",
            )
        )
    if hot_leads >= 3:
        insights.append(
            Insight(
                type="success",
                message=f"Your AI identified {hot_leads} hot leads this period. Follow up quickly.",
                importance="high",
            )
        )
    if appointments > 0:
        insights.append(
            Insight(
                type="success",
                message=f"{appointments} appointment(s) scheduled through AI this period.",
                importance="high",
            )
        )
    if phone_requests > total * 0.3:
        insights.append(
            Insight(
                type="success",
                message="Your AI is effectively capturing phone numbers from interested prospects.",
                importance="high",
            )
        )
    if channel_breakdown:
        top = channel_breakdown[0]
        insights.append(
            Insight(
                type="info",
                message=f"{top.channel} is your most active channel with {top.interactions} interactions.",
                importance="medium",
            )
        )
    if phone_requests > 0 and appointments > 0:
        conversion = appointments / phone_requests * 100
        if conversion > 20:
            insights.append(
                Insight(
                    type="success",
                    message=f"Strong conversion: {conversion:.0f}% of phone requests lead to appointments.",
                    importance="medium",
                )
            )
    if total > 100:
        insights.append(
            Insight(
                type="info",
                message=f"High engagement with {total} AI interactions this period.",
                importance="medium",
            )
        )
    return insights


def build_report(
    tenant_id: int,
    rows: Iterable[EventRow],
    now: datetime,
    channel: str = "all",
    period: str = "month",
    period_start: datetime | None = None,
    truncated: bool = False,
) -> AnalyticsReport:
    now = as_utc(now)
    rows = list(rows)
    if not rows:
        report = AnalyticsReport.empty(
            tenant_id=tenant_id, period_end=now, channel=channel, period=period, period_start=period_start
        )
        return report.model_copy(update={"truncated": truncated})

    today = now.date()
    event_counts = {event_type.value: 0 for event_type in EventType}
    per_channel: dict[str, Counter] = defaultdict(Counter)
    per_day: dict[str, Counter] = defaultdict(Counter)
    today_counts: Counter = Counter()

    for row in rows:
        day = as_utc(row.created_at).date()
        event_counts[row.event_type] = event_counts.get(row.event_type, 0) + 1
        per_channel[row.channel]["interactions"] += 1
        per_channel[row.channel][row.event_type] += 1
        per_day[day.isoformat()]["interactions"] += 1
        per_day[day.isoformat()][row.event_type] += 1
        if day == today:
            today_counts["interactions"] += 1
            today_counts[row.event_type] += 1

    total = len(rows)
    channel_breakdown = sorted(
        (
            ChannelStats(
                channel=name,
                interactions=counts["interactions"],
                hot_leads=counts[EventType.HOT_LEAD.value],
                phone_requests=counts[EventType.PHONE_REQUEST.value],
                appointments=counts[EventType.APPOINTMENT_SCHEDULED.value],
                ai_responses=counts[EventType.AI_RESPONSE.value],
            )
            for name, counts in per_channel.items()
        ),
        key=lambda stats: (-stats.interactions, stats.channel),
    )
    daily_trend = [
        DailyTrendPoint(
            date=day,
            interactions=counts["interactions"],
            hot_leads=counts[EventType.HOT_LEAD.value],
        )
        for day, counts in sorted(per_day.items())
    ]
    today_stats = TodayStats(
        interactions=today_counts["interactions"],
        hot_leads=today_counts[EventType.HOT_LEAD.value],
        phone_requests=today_counts[EventType.PHONE_REQUEST.value],
    )
    phone_requests = event_counts[EventType.PHONE_REQUEST.value]
    appointments = event_counts[EventType.APPOINTMENT_SCHEDULED.value]
    score, breakdown = effectiveness(event_counts, total, len(per_channel))

    return AnalyticsReport(
        tenant_id=tenant_id,
        channel=channel,
        period=period,
        period_start=period_start,
        period_end=now,
        total_interactions=total,
        active_days=len(per_day),
        channels_used=sorted(per_channel),
        event_counts=event_counts,
        channel_breakdown=channel_breakdown,
        daily_trend=daily_trend,
        today=today_stats,
        conversion_rates=ConversionRates(
            hot_lead_rate=_rate(event_counts[EventType.HOT_LEAD.value], total),
            phone_request_rate=_rate(phone_requests, total),
            appointment_rate=_rate(appointments, total),
            phone_to_appointment_rate=_rate(appointments, phone_requests),
        ),
        effectiveness_score=score,
        effectiveness_breakdown=breakdown,
        business_value=business_value(event_counts),
        insights=build_insights(event_counts, total, today_stats, channel_breakdown),
        truncated=truncated,
    )


class AnalyticsService(BaseService):
    def __init__(self, db: Session | None = None, max_rows: int | None = None) -> None:
        super().__init__(db=db)
        self.max_rows = max_rows or get_config().ANALYTICS_MAX_ROWS

    def aggregate(
        self,
        tenant_id: int,
        channel: str = "all",
        period: str | None = None,
        date_range: tuple[datetime, datetime] | None = None,
        now: datetime | None = None,
    ) -> AnalyticsReport:
        now = as_utc(now) or utcnow()
        channel_filter = None
        if channel and channel != "all":
            try:
                channel_filter = Channel.parse(channel)
            except ValueError as exc:
                raise ValidationError(f"Unknown channel: {channel}.") from exc
            channel = channel_filter.value

        if date_range is not None:
            period = "custom"
            start, end = as_utc(date_range[0]), as_utc(date_range[1])
            if start > end:
                raise ValidationError("date_range start must not be after its end.")
        else:
            period = period or get_config().ANALYTICS_DEFAULT_PERIOD
            start, end = period_window(period, now), now

        stmt = select(Event.tenant_id, Event.event_type, Event.channel, Event.created_at).where(
            Event.tenant_id == tenant_id, Event.created_at <= end
        )
        if start is not None:
            stmt = stmt.where(Event.created_at >= start)
        if channel_filter is not None:
            stmt = stmt.where(Event.channel == channel_filter)
        stmt = stmt.order_by(Event.created_at.desc(), Event.id.desc()).limit(self.max_rows + 1)

        fetched = self.db.execute(stmt).all()
        truncated = len(fetched) > self.max_rows
        rows = []
        for row_tenant_id, event_type, event_channel, created_at in fetched[: self.max_rows]:
            enforce_tenant_match(row_tenant_id, tenant_id)
            rows.append(EventRow(event_type=event_type.value, channel=event_channel.value, created_at=created_at))

        if truncated:
            logger.warning(
                "analytics.rows_truncated",
                extra={"event": "analytics.rows_truncated", "tenant_id": tenant_id, "max_rows": self.max_rows},
            )
        return build_report(
            tenant_id=tenant_id,
            rows=rows,
            now=end if date_range is not None else now,
            channel=channel or "all",
            period=period,
            period_start=start,
            truncated=truncated,
        )
