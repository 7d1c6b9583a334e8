"""Origin allow-list enforcement for browser clients."""

from collections.abc import Iterable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse


def install_cors(app: FastAPI, allowed_origins: Iterable[str]) -> None:
    """Attach CORS handling with a fixed, exact-match origin allow-list.

    Requests without an Origin header (curl, the game server, scripts) are
    always let through. Requests from any other origin get a 403 before they
    reach a route. The list is captured here, once, at app creation.
    """
    allowed = frozenset(allowed_origins)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=sorted(allowed),
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # Added last so it runs first, ahead of CORSMiddleware.
    @app.middleware("http")
    async def reject_unlisted_origins(request: Request, call_next):
        origin = request.headers.get("origin")
        if origin is not None and origin not in allowed:
            return JSONResponse(status_code=403, content={"error": "Not allowed by CORS"})
        return await call_next(request)
