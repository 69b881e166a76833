import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["RULE_CACHE_ENABLED"] = "false"

from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.core.security import get_password_hash
from app.database import Base, get_db
from app.domain.enums import MealType, UserRole
from app.main import app as fastapi_app
from app.models.booking import Menu
from app.models.user import User
from app.services.booking_rule_service import seed_default_rules
from factories import SERVICE_DATE


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def data(session_factory):
    """Default rules, one user per role and a lunch menu."""
    async with session_factory() as session:
        await seed_default_rules(session)

        diner = User(
            email="diner@example.com",
            password_hash=get_password_hash("Diner@123"),
            role=UserRole.END_USER.value,
            first_name="Dana",
        )
        colleague = User(
            email="colleague@example.com",
            password_hash=get_password_hash("Colleague@123"),
            role=UserRole.END_USER.value,
        )
        chef = User(
            email="chef@example.com",
            password_hash=get_password_hash("Chef@123"),
            role=UserRole.KITCHEN_ADMIN.value,
        )
        lunch = Menu(
            name="Tuesday lunch",
            service_date=SERVICE_DATE,
            meal_type=MealType.LUNCH.value,
            max_bookings=2,
        )
        session.add_all([diner, colleague, chef, lunch])
        await session.commit()

    return SimpleNamespace(diner=diner, colleague=colleague, chef=chef, lunch=lunch)


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as ac:
        yield ac
    fastapi_app.dependency_overrides.clear()
