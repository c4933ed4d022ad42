"""Fixtures compartilhadas pelos testes da BabyCare API.

- Banco SQLite em memória isolado por teste
- Usuário e bebê de exemplo
- Barramento de eventos novo por teste
"""

import os

# precisa vir antes de qualquer import de config.settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SOCIAL_SIMULATED_DELAY"] = "0"
os.environ["ANALYSIS_API_KEYS"] = "sk-test-1,sk-test-2,sk-test-3"

from collections.abc import Generator
from datetime import date, datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from config.database import Base
from app.models import activity_model, auth_models, baby_model, daily_report_model, media_model, settings_model  # noqa: F401
from app.models.auth_models import User
from app.models.baby_model import Baby
from app.schemas.activity_schema import ActivityCreate
from app.utils.event_bus import EventBus
from app.utils.security import hash_password


# ─────────────────────────────────────────────────────────────────────────────
# Banco de dados
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def engine():
    """Engine em memória; StaticPool mantém a mesma conexão entre sessões."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


# ─────────────────────────────────────────────────────────────────────────────
# Dados de exemplo
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def user(db_session) -> User:
    user = User(email="mae@babycare.com.br", name="Maria", password_hash=hash_password("segredo123"))
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def baby(db_session, user) -> Baby:
    baby = Baby(
        user_id=user.id,
        name="Ana",
        birth_date=date.today() - timedelta(days=100),
        gender="female",
    )
    db_session.add(baby)
    db_session.commit()
    db_session.refresh(baby)
    return baby


@pytest.fixture
def feeding_payload(baby):
    """Mamada de mamadeira com 120 ml."""

    def build(start_time: datetime, amount: float = 120) -> ActivityCreate:
        return ActivityCreate(
            baby_id=baby.id,
            type="feeding",
            start_time=start_time,
            details={"kind": "feeding", "feeding_type": "bottle", "amount": amount, "unit": "ml"},
        )

    return build
