import logging
import uuid

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

from essenza_web.app.api.routes import api_router
from essenza_web.app.core.config import get_settings

logger = logging.getLogger(__name__)


async def validation_exception_handler(request, exc: RequestValidationError):
    request_id = str(uuid.uuid4())
    details = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", []) if part is not None)
        msg = err.get("msg", "Invalid value")
        details.append({"field": loc or None, "message": msg})
    logger.info("Rejected request %s: %d validation errors", request_id, len(details))
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "validation_error",
            "message": "Invalid request payload.",
            "details": details,
            "request_id": request_id,
        },
    )


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Essenza", version="0.1.0")
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(api_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.on_event("startup")
    async def startup_event() -> None:
        logger.info("Forwarding recipes to %s", settings.recipes_api_base_url)

    return app


app = create_app()
