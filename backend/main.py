"""FastAPI application entrypoint."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.routers import get_api_router
from backend.utils.config import get_settings
from backend.utils.errors import SchedulingError
from backend.utils.logging import setup_logging

LOGGER = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(title=settings.app_name, version=settings.app_version)
app.include_router(get_api_router())


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    """Render backend failures as a JSON error body."""

    LOGGER.error("Request failed: path=%s error=%s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.get("/health")
def health_check() -> dict[str, str]:
    """Return service health status."""

    return {"status": "ok"}


@app.get("/version")
def version() -> dict[str, str]:
    """Return application version metadata."""

    return {"version": settings.app_version}


def run() -> None:
    """Serve the application with uvicorn on the configured port."""

    import uvicorn

    setup_logging(settings.log_level)
    LOGGER.info("Starting server on %s:%s", settings.http_host, settings.http_port)
    uvicorn.run(app, host=settings.http_host, port=int(settings.http_port))


if __name__ == "__main__":
    run()
