"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from meal_nutrition.api.meal_models import ParseMealRequest, ParseMealResponse
from meal_nutrition.app_logging import configure_logging
from meal_nutrition.containers import AppContainer
from meal_nutrition.domain.errors import ConfigurationError, InvalidInputError

PARSE_MEAL_PATH = "/api/parse-meal"
METHOD_NOT_ALLOWED = "Method not allowed"


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(StarletteHTTPException)
    async def http_error(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        message = str(exc.detail)
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            message = METHOD_NOT_ALLOWED
        return JSONResponse(
            {"error": message},
            status_code=exc.status_code,
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, "Missing query")

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post(PARSE_MEAL_PATH)
    async def parse_meal(body: ParseMealRequest, request: Request) -> JSONResponse:
        """Resolve a free-form meal description into items and totals."""
        state_container: AppContainer = request.app.state.container
        try:
            resolution = await state_container.meal_service.resolve_meal(body.query)
        except InvalidInputError as exc:
            return _error(status.HTTP_400_BAD_REQUEST, str(exc))
        except ConfigurationError as exc:
            logger.error("Meal parsing unavailable: %s", exc)
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
        except Exception:
            logger.exception("Meal parsing failed")
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error")
        return JSONResponse(ParseMealResponse.from_resolution(resolution).to_payload())

    @app.api_route(
        PARSE_MEAL_PATH,
        methods=["GET", "HEAD", "OPTIONS", "PUT", "PATCH", "DELETE"],
    )
    async def parse_meal_method_not_allowed() -> JSONResponse:
        return _error(status.HTTP_405_METHOD_NOT_ALLOWED, METHOD_NOT_ALLOWED)

    return app


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)
