import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class InvalidArgument(ValueError):
    """Caller supplied a value outside an operation's domain (negative fee, day 32, unknown role...)."""


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InvalidArgument)
    async def _invalid_argument(request: Request, exc: InvalidArgument):
        logger.warning("Invalid argument on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=400, content={"detail": str(exc)})
