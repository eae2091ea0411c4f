"""Fixed CORS header set shared by every endpoint.

Any OPTIONS request is answered here with 200, an empty body and the CORS
headers; every other response gets the same headers added.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Dict

from fastapi import FastAPI, Request, Response

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS, PUT, DELETE, PATCH",
    "Access-Control-Max-Age": "86400",
    "Access-Control-Allow-Credentials": "false",
}


def install_cors(app: FastAPI) -> None:
    """Attach the CORS middleware. Call once, before routers are included."""

    @app.middleware("http")
    async def _cors(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response
