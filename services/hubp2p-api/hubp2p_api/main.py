from __future__ import annotations

import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from opentelemetry import trace
from redis.asyncio import Redis
from redis.asyncio import from_url as redis_from_url
from starlette.responses import Response

from hubp2p_api.api.routes_admin import router as admin_router
from hubp2p_api.api.routes_kyc import router as kyc_router
from hubp2p_api.api.routes_public import router as public_router
from hubp2p_api.api.routes_quotes import router as quotes_router
from hubp2p_api.api.routes_transactions import router as transactions_router
from hubp2p_api.core.config import Settings, get_settings
from hubp2p_api.core.error_handlers import register_error_handlers
from hubp2p_api.core.metrics import error_counter, latency_histogram, request_counter
from hubp2p_api.db.session import build_engine, build_session_factory, init_db
from hubp2p_api.providers.factory import RateClientFactory
from hubp2p_api.services.exchange_rate_service import ExchangeRateService, RateClient
from shared.logging import CorrelationMiddleware, configure_logging
from shared.observability import configure_otel, current_trace_id
from shared.utils.http_security import apply_security_headers


def build_rate_service(
    settings: Settings, rate_client: RateClient, redis_client: Redis | None
) -> ExchangeRateService:
    return ExchangeRateService(
        rate_client,
        redis_client,
        rate_symbol=settings.rate_symbol,
        btc_symbol=settings.btc_symbol,
        fixed_markup=settings.fixed_markup,
        percentage_markup=settings.percentage_markup,
        fallback_base_rate=settings.fallback_base_rate,
        cache_ttl_seconds=settings.rate_cache_ttl_seconds,
        last_known_ttl_seconds=settings.rate_last_known_ttl_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging(settings.log_level, settings.service_name)
    configure_otel(settings.service_name)

    engine = build_engine(settings.postgres_dsn)
    session_factory = build_session_factory(engine)
    redis_client = redis_from_url(settings.redis_url, decode_responses=True)
    rate_client = RateClientFactory(settings).create()

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.redis_client = redis_client
    app.state.rate_client = rate_client
    app.state.rate_service = build_rate_service(settings, rate_client, redis_client)

    if settings.app_env == "local":
        await init_db(engine, settings)

    yield

    await rate_client.close()
    await redis_client.aclose()
    await engine.dispose()


app = FastAPI(title="hubp2p-api", version="0.1.0", lifespan=lifespan)
app.add_middleware(CorrelationMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "X-User-Id", "X-Admin-Session"],
)
register_error_handlers(app)
app.include_router(quotes_router)
app.include_router(transactions_router)
app.include_router(public_router)
app.include_router(kyc_router)
app.include_router(admin_router)


@app.middleware("http")
async def telemetry_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    tracer = trace.get_tracer("hubp2p-api")
    start = time.perf_counter()
    route_path = request.url.path
    request_counter.add(1, {"path": route_path, "method": request.method})

    with tracer.start_as_current_span(f"{request.method} {route_path}"):
        response = await call_next(request)

    duration_ms = (time.perf_counter() - start) * 1000
    latency_histogram.record(duration_ms, {"path": route_path, "method": request.method})
    if response.status_code >= 400:
        error_counter.add(
            1,
            {
                "path": route_path,
                "method": request.method,
                "status_code": response.status_code,
            },
        )

    response.headers["X-Trace-Id"] = current_trace_id()
    apply_security_headers(response, path=route_path)
    return response


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
