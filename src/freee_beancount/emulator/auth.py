"""Bearer token gate for the emulated API."""

from fastapi import Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

PROTECTED_PREFIX = "/api/1/"


def error_response(status_code: int, error: str, description: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "error_description": description},
    )


async def bearer_token_middleware(request: Request, call_next):
    """Reject /api/1 requests without a valid, unexpired bearer token."""
    if not request.url.path.startswith(PROTECTED_PREFIX):
        return await call_next(request)

    header = request.headers.get("Authorization")
    if not header:
        return error_response(401, "unauthorized", "Missing Authorization header")

    parts = header.split(" ", 1)
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        return error_response(401, "unauthorized", "Invalid Authorization header format")

    valid = await run_in_threadpool(request.app.state.store.validate_token, parts[1])
    if not valid:
        return error_response(401, "unauthorized", "Invalid or expired token")

    return await call_next(request)
