from __future__ import annotations

from collections import OrderedDict
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hubp2p_api.repositories.dashboard_repository import DashboardRepository
from shared.contracts import DailyVolume, DashboardStatsResponse, TransactionStatus
from shared.utils.time import days_back, ensure_aware, start_of_day, utc_now

_CHART_DAYS = 7


class DashboardStatsUseCase:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def execute(self) -> DashboardStatsResponse:
        now = utc_now()
        today = start_of_day(now)
        chart_start = days_back(now, _CHART_DAYS - 1)
        async with self._session_factory() as session:
            dashboard = DashboardRepository(session)
            today_count, today_total = await dashboard.created_since(today)
            pending_count = await dashboard.count_by_status(TransactionStatus.PENDING_PAYMENT)
            sent_today = await dashboard.count_sent_since(today)
            points = await dashboard.volume_points_since(chart_start)

        buckets: OrderedDict[date, DailyVolume] = OrderedDict()
        for offset in range(_CHART_DAYS):
            day = (chart_start + timedelta(days=offset)).date()
            buckets[day] = DailyVolume(date=day, count=0, value=Decimal("0"))
        for created_at, amount_brl in points:
            bucket = buckets.get(ensure_aware(created_at).date())
            if bucket is None:
                continue
            bucket.count += 1
            bucket.value += amount_brl

        return DashboardStatsResponse(
            today_count=today_count,
            today_total_brl=today_total,
            pending_count=pending_count,
            sent_today_count=sent_today,
            chart=list(buckets.values()),
        )
