from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
import uuid

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from leadengine.core.exceptions import ProviderResponseError, ProviderTimeoutError
from leadengine.llm.provider import ProviderReply, UrgencyAssessment
from leadengine.models import Base, Tenant


class StubProvider:
    """In-memory AI provider; ``fail`` makes every call raise a provider error."""

    def __init__(self, urgency: int = 0, reply: str = "Thanks for reaching out!", fail: bool = False) -> None:
        self.urgency = urgency
        self.reply = reply
        self.fail = fail
        self.urgency_calls = []
        self.reply_calls = []

    def classify_urgency(self, text, context):
        self.urgency_calls.append((text, list(context)))
        if self.fail:
            raise ProviderTimeoutError("stub timed out")
        return UrgencyAssessment(score=self.urgency, reasoning="stub urgency")

    def generate_reply(self, system_prompt, history, message, options):
        self.reply_calls.append((system_prompt, list(history), message, options))
        if self.fail:
            raise ProviderResponseError("stub failed")
        return ProviderReply(text=self.reply, tokens_used=42)


def _tmp_database_url() -> str:
    tmp_root = Path(".test_tmp")
    tmp_root.mkdir(exist_ok=True)
    return f"sqlite:///{tmp_root / f'leadengine_test_{uuid.uuid4().hex}.db'}"


@pytest.fixture
def session_factory():
    engine = create_engine(_tmp_database_url(), connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def add_tenant():
    def _add(session, tenant_id: int = 1, name: str = "Acme Plumbing", business_name: str | None = None) -> Tenant:
        tenant = Tenant(id=tenant_id, tenant_key=f"tenant-{tenant_id}", name=name, business_name=business_name)
        session.add(tenant)
        session.commit()
        return tenant

    return _add


@pytest.fixture
def tenant(db_session, add_tenant):
    return add_tenant(db_session, 1)


@pytest.fixture
def stub_provider():
    return StubProvider


@pytest.fixture
def isolated_session_factory(monkeypatch, session_factory):
    """Route every ``get_db_session`` user at the per-test database."""
    import leadengine.api.v1.deps as deps
    import leadengine.tasks.maintenance_tasks as maintenance_tasks

    @contextmanager
    def _get_db_session():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    monkeypatch.setattr(deps, "get_db_session", _get_db_session)
    monkeypatch.setattr(maintenance_tasks, "get_db_session", _get_db_session)
    return session_factory
