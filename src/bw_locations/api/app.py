import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from bw_locations.api.routes.locations import router as locations_router
from bw_locations.api.schemas import ErrorResponse
from bw_locations.errors import LocationError, NotFoundError
from bw_locations.feature_flags import get_flags
from bw_locations.store import get_store


logger = logging.getLogger("bwloc.api")


def health():
    store = get_store()
    return {
        "status": "ok",
        "districts": len(store.districts),
        "settlements": len(store.settlements),
        "wards": len(store.wards),
        "plots": len(store.plots),
    }


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def create_app() -> FastAPI:
    app = FastAPI(title="bw_locations")
    app.include_router(locations_router, prefix="/api")

    @app.exception_handler(HTTPException)
    async def http_error_handler(_request, exc: HTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(_request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        where = ".".join(str(p) for p in first.get("loc", ()) if p not in ("query", "path", "body"))
        msg = first.get("msg") or "Invalid request"
        return _error(400, f"{where}: {msg}" if where else msg)

    @app.exception_handler(LocationError)
    async def location_error_handler(_request, exc: LocationError):
        return _error(404 if isinstance(exc, NotFoundError) else 400, str(exc))

    @app.on_event("startup")
    def _log_startup() -> None:
        flags = get_flags()
        logger.info(
            "bw_locations api ready plot_search=%s nearby=%s suggestions=%s",
            flags.plot_search,
            flags.nearby,
            flags.suggestions,
        )

    @app.get("/health")
    def health_route():
        return health()

    return app


app = create_app()
