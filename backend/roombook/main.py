import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from roombook.api.router import api_router
from roombook.core.config import settings
from roombook.core.errors import BookingError
from roombook.core.limiter import limiter
from roombook.db import init_db

logger = logging.getLogger(__name__)


def create_application() -> FastAPI:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title=settings.PROJECT_NAME, version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError):
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.on_event("startup")
    def _startup() -> None:
        init_db()

    return app


app = create_application()
