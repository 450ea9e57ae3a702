"""Analytics report models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from leadengine.models.enums import EventType


def _zero_event_counts() -> dict[str, int]:
    return {event_type.value: 0 for event_type in EventType}


class ChannelStats(BaseModel):
    channel: str
    interactions: int = 0
    hot_leads: int = 0
    phone_requests: int = 0
    appointments: int = 0
    ai_responses: int = 0


class DailyTrendPoint(BaseModel):
    date: str
    interactions: int = 0
    hot_leads: int = 0


class TodayStats(BaseModel):
    interactions: int = 0
    hot_leads: int = 0
    phone_requests: int = 0


class ConversionRates(BaseModel):
    """Percentages of total interactions, rounded to one decimal."""

    hot_lead_rate: float = 0.0
    phone_request_rate: float = 0.0
    appointment_rate: float = 0.0
    phone_to_appointment_rate: float = 0.0


class EffectivenessBreakdown(BaseModel):
    activity: int = 0
    hot_leads: int = 0
    phone_requests: int = 0
    appointments: int = 0
    channel_diversity: int = 0


class BusinessValueEstimate(BaseModel):
    estimated_value: int = 0
    breakdown: dict[str, int] = Field(default_factory=dict)
    is_estimate: bool = True
    note: str = "Estimated value based on typical conversion rates"


class Insight(BaseModel):
    type: str
    message: str
    importance: str = "medium"


NO_DATA_INSIGHT = Insight(
    type="info",
    message="No interactions processed yet. Make sure your channels are connected.",
    importance="high",
)


class AnalyticsReport(BaseModel):
    tenant_id: int
    channel: str = "all"
    period: str = "month"
    period_start: datetime | None = None
    period_end: datetime
    total_interactions: int = 0
    active_days: int = 0
    channels_used: list[str] = Field(default_factory=list)
    event_counts: dict[str, int] = Field(default_factory=_zero_event_counts)
    channel_breakdown: list[ChannelStats] = Field(default_factory=list)
    daily_trend: list[DailyTrendPoint] = Field(default_factory=list)
    today: TodayStats = Field(default_factory=TodayStats)
    conversion_rates: ConversionRates = Field(default_factory=ConversionRates)
    effectiveness_score: int = 0
    effectiveness_breakdown: EffectivenessBreakdown = Field(default_factory=EffectivenessBreakdown)
    business_value: BusinessValueEstimate = Field(default_factory=BusinessValueEstimate)
    insights: list[Insight] = Field(default_factory=list)
    truncated: bool = False

    @classmethod
    def empty(
        cls,
        tenant_id: int,
        period_end: datetime,
        channel: str = "all",
        period: str = "month",
        period_start: datetime | None = None,
    ) -> "AnalyticsReport":
        return cls(
            tenant_id=tenant_id,
            channel=channel,
            period=period,
            period_start=period_start,
            period_end=period_end,
            insights=[NO_DATA_INSIGHT.model_copy()],
        )
