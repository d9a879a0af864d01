from __future__ import annotations

from fastapi import Response

from shared.utils import SECURITY_HEADERS, apply_security_headers


def test_apply_security_headers_sets_default_headers() -> None:
    response = Response()
    apply_security_headers(response)

    for key, expected_value in SECURITY_HEADERS.items():
        assert response.headers[key] == expected_value
    assert "Cache-Control" not in response.headers


def test_apply_security_headers_does_not_override_existing_header() -> None:
    response = Response(headers={"X-Frame-Options": "SAMEORIGIN"})
    apply_security_headers(response)

    assert response.headers["X-Frame-Options"] == "SAMEORIGIN"


def test_admin_and_kyc_paths_are_not_cached() -> None:
    admin_response = Response()
    kyc_response = Response()

    apply_security_headers(admin_response, path="/admin/transactions")
    apply_security_headers(kyc_response, path="/kyc/status")

    assert admin_response.headers["Cache-Control"] == "no-store"
    assert kyc_response.headers["Cache-Control"] == "no-store"
