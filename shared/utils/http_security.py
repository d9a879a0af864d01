from __future__ import annotations

from fastapi import Response

SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'; base-uri 'none'",
    "Cross-Origin-Resource-Policy": "same-origin",
}
_NO_STORE_PREFIXES = ("/admin", "/kyc")


def apply_security_headers(response: Response, *, path: str = "") -> None:
    for header_name, header_value in SECURITY_HEADERS.items():
        response.headers.setdefault(header_name, header_value)
    if path.startswith(_NO_STORE_PREFIXES):
        response.headers.setdefault("Cache-Control", "no-store")
