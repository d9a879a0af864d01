from __future__ import annotations

import itertools
from collections.abc import AsyncIterator
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest
import pytest_asyncio
from hubp2p_api.core.config import Settings
from hubp2p_api.db.session import build_engine, build_session_factory, init_db
from hubp2p_api.repositories.transaction_repository import TransactionRepository
from hubp2p_api.services.admin_session_service import AdminPrincipal, AdminSessionService
from hubp2p_api.services.exchange_rate_service import ExchangeRateService
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from shared.contracts import TransactionChannel
from shared.utils.ids import format_transaction_number
from tests.helpers import FakeRateClient

LOCAL_ADMIN_TOKEN = "local-admin-token"


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, local_admin_token=LOCAL_ADMIN_TOKEN)


@pytest.fixture(autouse=True)
def sequential_transaction_numbers(
    request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch
) -> None:
    # SQLite has no sequences
    if request.node.get_closest_marker("integration") is not None:
        return
    counter = itertools.count(1)

    async def next_transaction_number(
        self: TransactionRepository, channel: TransactionChannel, now: datetime
    ) -> str:
        return format_transaction_number(channel, now, next(counter))

    monkeypatch.setattr(TransactionRepository, "next_transaction_number", next_transaction_number)


@pytest_asyncio.fixture
async def engine(tmp_path: Path, settings: Settings) -> AsyncIterator[AsyncEngine]:
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'hubp2p.db'}")
    await init_db(engine, settings)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest.fixture
def rate_service(settings: Settings) -> ExchangeRateService:
    return ExchangeRateService(
        FakeRateClient({"USDTBRL": Decimal("5.69"), "BTCUSDT": Decimal("60000")}),
        None,
        rate_symbol=settings.rate_symbol,
        btc_symbol=settings.btc_symbol,
        fixed_markup=settings.fixed_markup,
        percentage_markup=settings.percentage_markup,
        fallback_base_rate=settings.fallback_base_rate,
    )


@pytest_asyncio.fixture
async def admin(session_factory: async_sessionmaker[AsyncSession]) -> AdminPrincipal:
    return await AdminSessionService(session_factory).authenticate(LOCAL_ADMIN_TOKEN)
