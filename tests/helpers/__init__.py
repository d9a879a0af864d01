from tests.helpers.app import build_app_with_router, override_dependencies
from tests.helpers.app_client import create_test_client
from tests.helpers.assertions import assert_error_payload
from tests.helpers.factories import (
    FIXED_NOW,
    make_profile,
    make_status_change,
    make_transaction,
    make_user_transaction_payload,
)
from tests.helpers.fakes import FakeRateClient, FakeRedis, FakeSession, FakeSessionFactory

__all__ = [
    "FIXED_NOW",
    "FakeRateClient",
    "FakeRedis",
    "FakeSession",
    "FakeSessionFactory",
    "assert_error_payload",
    "build_app_with_router",
    "create_test_client",
    "make_profile",
    "make_status_change",
    "make_transaction",
    "make_user_transaction_payload",
    "override_dependencies",
]
