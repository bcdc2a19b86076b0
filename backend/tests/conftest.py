"""
Shared fixtures: in-memory SQLite store, TTL cache with a controllable
clock, and a relationship table.
"""

from __future__ import annotations

from typing import Dict, Iterator, List

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.cache import TTLCache
from app.core.config import Settings
from app.core.database import init_db
from app.models.company import Company
from app.services.companies.relationships import RelationshipEntry, RelationshipTable
from app.services.companies.repository import CompanyRepository
from app.services.companies.service import CompanyService


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


SAMPLE_COMPANIES: List[Dict] = [
    {"company_code": "C0", "company_name": "Global Holdings", "level": None,
     "country": "United States", "city": "New York", "year_founded": "1950",
     "annual_revenue": 9_800_000_000, "employees": 52_000},
    {"company_code": "C1", "company_name": "Northwind Manufacturing", "level": 1,
     "country": "United States", "city": "Chicago", "year_founded": "1972",
     "annual_revenue": 2_100_000_000, "employees": 8_400},
    {"company_code": "C2", "company_name": "Pacific Trade Group", "level": 1,
     "country": "Japan", "city": "Tokyo", "year_founded": "1981",
     "annual_revenue": 1_750_000_000, "employees": 6_100},
    {"company_code": "C11", "company_name": "Northwind Components", "level": 2,
     "country": "Mexico", "city": "  ", "year_founded": "1995",
     "annual_revenue": 320_000_000, "employees": 2_300},
    {"company_code": "C12", "company_name": "Northwind Logistics", "level": 2,
     "country": None, "city": "Dallas", "year_founded": "2001",
     "annual_revenue": 145_000_000, "employees": 900},
]

SAMPLE_RELATIONSHIPS = [
    RelationshipEntry("C0", ""),
    RelationshipEntry("C1", "C0"),
    RelationshipEntry("C2", "C0"),
    RelationshipEntry("C11", "C1"),
    RelationshipEntry("C12", "C1"),
]


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed(db):
    def _seed(rows: List[Dict]) -> None:
        for row in rows:
            db.add(Company(**row))
        db.commit()
    return _seed


@pytest.fixture
def sample_store(seed):
    seed(SAMPLE_COMPANIES)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> TTLCache:
    return TTLCache(clock=clock)


@pytest.fixture
def relationships() -> RelationshipTable:
    return RelationshipTable(SAMPLE_RELATIONSHIPS)


@pytest.fixture
def config() -> Settings:
    return Settings(
        DATABASE_URL="sqlite://",
        HIERARCHY_DEFAULT_ROOT="C0",
        HIERARCHY_DEFAULT_MAX_DEPTH=3,
        HIERARCHY_PREFIX_FALLBACK=True,
    )


@pytest.fixture
def service(db, cache, relationships, config) -> CompanyService:
    return CompanyService(CompanyRepository(db), cache, relationships, config)
