"""Read-side lead listing and detail for dashboards."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import case, func, or_, select

from leadengine.auth.tenant_context import enforce_all
from leadengine.core.exceptions import ValidationError
from leadengine.models import Channel, Contact, Event, LeadTemperature
from leadengine.schemas.common import Pagination
from leadengine.schemas.events import EventResponse
from leadengine.schemas.leads import LeadDetail, LeadPage, LeadResponse, LeadSummary
from leadengine.services.base_service import BaseService
from leadengine.services.identity_service import IdentityService
from leadengine.utils.validators import sanitize_text

SORT_ORDERS = {
    "score": (Contact.lead_score.desc(), Contact.last_interaction_at.desc()),
    "recent": (Contact.last_interaction_at.desc(),),
    "value": (Contact.potential_value.desc(), Contact.lead_score.desc()),
    "name": (func.lower(Contact.name).asc(),),
}
TEMPERATURE_FILTERS = {"all", *(temperature.value for temperature in LeadTemperature)}
TIMELINE_LIMIT = 100


class LeadQueryService(BaseService):
    def _filters(self, tenant_id: int, channel: str, temperature: str, search: str) -> list:
        filters = [Contact.tenant_id == tenant_id, Contact.is_active.is_(True)]
        if channel and channel != "all":
            try:
                filters.append(Contact.source_channel == Channel.parse(channel).value)
            except ValueError as exc:
                raise ValidationError(f"Unknown channel: {channel}.") from exc
        if temperature and temperature != "all":
            if temperature not in TEMPERATURE_FILTERS:
                raise ValidationError(f"temperature must be one of {', '.join(sorted(TEMPERATURE_FILTERS))}.")
            filters.append(Contact.lead_temperature == LeadTemperature(temperature))
        term = sanitize_text(search, max_len=200).lower()
        if term:
            escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            pattern = f"%{escaped}%"
            filters.append(
                or_(
                    func.lower(Contact.name).like(pattern, escape="\\"),
                    func.lower(Contact.email).like(pattern, escape="\\"),
                    Contact.phone.like(pattern, escape="\\"),
                    func.lower(Contact.company).like(pattern, escape="\\"),
                )
            )
        return filters

    def _summary(self, filters: list) -> LeadSummary:
        total, hot, warm, cold, total_value, avg_score = self.db.execute(
            select(
                func.count(Contact.id),
                func.sum(case((Contact.lead_temperature == LeadTemperature.HOT, 1), else_=0)),
                func.sum(case((Contact.lead_temperature == LeadTemperature.WARM, 1), else_=0)),
                func.sum(case((Contact.lead_temperature == LeadTemperature.COLD, 1), else_=0)),
                func.sum(Contact.potential_value),
                func.avg(Contact.lead_score),
            ).where(*filters)
        ).one()
        return LeadSummary(
            total=total or 0,
            hot=hot or 0,
            warm=warm or 0,
            cold=cold or 0,
            total_value=Decimal(str(total_value or 0)),
            avg_score=round(float(avg_score or 0), 1),
        )

    def list_leads(
        self,
        tenant_id: int,
        channel: str = "all",
        temperature: str = "all",
        search: str = "",
        sort_by: str = "score",
        limit: int = 50,
        offset: int = 0,
    ) -> LeadPage:
        if sort_by not in SORT_ORDERS:
            raise ValidationError(f"sort_by must be one of {', '.join(sorted(SORT_ORDERS))}.")
        filters = self._filters(tenant_id, channel, temperature, search)
        rows = self.db.execute(
            select(Contact)
            .where(*filters)
            .order_by(*SORT_ORDERS[sort_by], Contact.id.asc())
            .limit(limit)
            .offset(offset)
        ).scalars().all()
        enforce_all(rows, tenant_id)

        summary = self._summary(filters)
        return LeadPage(
            leads=[LeadResponse.model_validate(row) for row in rows],
            pagination=Pagination(
                limit=limit,
                offset=offset,
                total=summary.total,
                has_more=offset + len(rows) < summary.total,
            ),
            summary=summary,
        )

    def get_lead_details(self, tenant_id: int, contact_id: int) -> LeadDetail:
        contact = IdentityService(db=self.db).get_contact(tenant_id, contact_id)
        events = self.db.execute(
            select(Event)
            .where(Event.tenant_id == tenant_id, Event.contact_id == contact.id)
            .order_by(Event.created_at.desc(), Event.id.desc())
            .limit(TIMELINE_LIMIT)
        ).scalars().all()
        enforce_all(events, tenant_id)
        return LeadDetail(
            lead=LeadResponse.model_validate(contact),
            timeline=[EventResponse.model_validate(event) for event in events],
        )
