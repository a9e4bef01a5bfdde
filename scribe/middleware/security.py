from __future__ import annotations

from collections.abc import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# A JSON API never serves documents meant to be rendered or framed.
API_CSP = "default-src 'none'; frame-ancestors 'none'; base-uri 'none'"


def _is_secure_request(request: Request) -> bool:
    # Honor reverse proxy headers if present
    xf_proto = request.headers.get("x-forwarded-proto")
    if xf_proto:
        return "https" in xf_proto
    return request.url.scheme == "https"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Hardened response headers for the JSON API.

    HSTS is only sent over HTTPS and never to local hosts. Interactive docs
    pages are left without a CSP so Swagger UI can load its assets.
    """

    def __init__(
        self,
        app,
        *,
        csp: str = API_CSP,
        hsts: str = "max-age=63072000; includeSubDomains",
        referrer_policy: str = "no-referrer",
        skip_hsts_hosts: set[str] | None = None,
        csp_exempt_prefixes: tuple[str, ...] = ("/docs", "/redoc"),
    ) -> None:
        super().__init__(app)
        self.csp = csp
        self.hsts = hsts
        self.referrer_policy = referrer_policy
        self.skip_hsts_hosts = skip_hsts_hosts or {"localhost", "127.0.0.1"}
        self.csp_exempt_prefixes = csp_exempt_prefixes

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        if not request.url.path.startswith(self.csp_exempt_prefixes):
            response.headers.setdefault("Content-Security-Policy", self.csp)

        if _is_secure_request(request):
            if request.url.hostname not in self.skip_hsts_hosts:
                response.headers.setdefault("Strict-Transport-Security", self.hsts)

        response.headers.setdefault("Referrer-Policy", self.referrer_policy)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Cross-Origin-Resource-Policy", "same-site")
        return response
