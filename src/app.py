import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from services.weather_service import REALTIME_URL, FailureKind, WeatherFailure, WeatherLookup

logger = logging.getLogger(__name__)

# Package data of ``services``, installed beside this module
DEFAULT_INDEX_PATH = Path(__file__).resolve().parent / "services" / "static" / "index.html"

_CREDENTIAL_FAILURES = (FailureKind.NOT_CONFIGURED, FailureKind.INVALID_CREDENTIAL)


def failure_status(failure: WeatherFailure) -> int:
    """Pick the HTTP status returned to the browser for a failed lookup."""
    if failure.kind in _CREDENTIAL_FAILURES or "Invalid API key" in failure.message:
        return 401
    return 404


def create_app(
    api_key: str | None = None,
    weather_api_url: str | None = None,
    index_path: str | Path | None = None,
    lookup: WeatherLookup | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application serving the weather page and JSON endpoint.

    Parameters
    ----------
    api_key : str | None, optional
        Tomorrow.io API key. If omitted, read from the ``API_KEY`` environment variable.
    weather_api_url : str | None, optional
        Realtime endpoint URL. If omitted, read from ``WEATHER_API_URL`` or use Tomorrow.io.
    index_path : str | Path | None, optional
        HTML page served at ``/``. If omitted, read from ``INDEX_HTML_PATH`` or use the bundled page.
    lookup : WeatherLookup | None, optional
        Prebuilt lookup; when given, ``api_key`` and ``weather_api_url`` are ignored.

    Returns
    -------
    FastAPI
        Configured app exposing ``/`` and ``/weather``.
    """
    load_dotenv()
    # Resolve configuration from arguments or environment
    api_key = api_key or os.getenv("API_KEY", "")
    weather_api_url = weather_api_url or os.getenv("WEATHER_API_URL") or REALTIME_URL
    index_path = Path(index_path or os.getenv("INDEX_HTML_PATH") or DEFAULT_INDEX_PATH)
    lookup = lookup or WeatherLookup(api_key, base_url=weather_api_url)

    @asynccontextmanager
    async def _lifespan(_app: FastAPI):  # noqa: D401
        if not lookup.configured:
            logger.warning("API_KEY is not set; /weather will answer 401 until it is configured")
        logger.info("Weather front-end ready (provider: %s)", lookup.base_url)
        yield

    app = FastAPI(lifespan=_lifespan)
    app.state.weather_lookup = lookup

    @app.exception_handler(StarletteHTTPException)
    async def _not_found(request: Request, exc: StarletteHTTPException):
        # Unknown paths and unsupported methods both read as plain "Not Found"
        if exc.status_code in (404, 405):
            return PlainTextResponse("Not Found", status_code=404)
        return await http_exception_handler(request, exc)

    @app.get("/")
    async def index():
        """Serve the static weather page."""
        try:
            html = index_path.read_text(encoding="utf-8")
        except OSError:
            logger.exception("Could not read %s", index_path)
            return PlainTextResponse("Internal Server Error", status_code=500)
        return HTMLResponse(html)

    @app.get("/weather")
    async def weather(request: Request, location: str | None = None):
        """Return the normalized weather summary for ``location`` as JSON."""
        if not location:
            return JSONResponse({"error": "Location parameter missing"}, status_code=400)
        try:
            result = await request.app.state.weather_lookup.fetch(location)
        except Exception:
            logger.exception("An error occurred while fetching weather for %r", location)
            return JSONResponse({"error": "Internal Server Error"}, status_code=500)

        if isinstance(result, WeatherFailure):
            return JSONResponse(result.to_dict(), status_code=failure_status(result))
        return JSONResponse(result.to_dict())

    return app


def main() -> None:
    """Run the server with uvicorn, configured from the environment."""
    import uvicorn

    load_dotenv()
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "3000"))
    logger.info("Server is running on http://localhost:%d", port)
    uvicorn.run("app:create_app", factory=True, host=host, port=port)


if __name__ == "__main__":
    main()
