import logging
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pymongo.database import Database
from pymongo.errors import PyMongoError

import auth
import available_dates
import bookings
from config import Settings, load_settings
from database import ensure_indexes, get_database
from errors import BookingAPIError, InternalError, ValidationError

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _error_response(error: BookingAPIError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content={"message": error.message})


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(BookingAPIError)
    async def handle_api_error(request: Request, exc: BookingAPIError):
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else "Invalid request"
        return _error_response(ValidationError(message))

    @app.exception_handler(PyMongoError)
    async def handle_database_error(request: Request, exc: PyMongoError):
        logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        return _error_response(InternalError())


def _init_database(db: Database, settings: Settings) -> None:
    try:
        ensure_indexes(db)
        auth.bootstrap_admin(db, settings)
    except PyMongoError:
        logger.exception("Error initializing database")


def create_app(settings: Optional[Settings] = None, db: Optional[Database] = None) -> FastAPI:
    settings = settings or load_settings()
    if db is None:
        db = get_database(settings)

    app = FastAPI(title="Session Booking API")
    app.state.settings = settings
    app.state.db = db

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _install_error_handlers(app)

    app.include_router(auth.router)
    app.include_router(bookings.router)
    app.include_router(available_dates.router, prefix="/api/available-dates")
    # Path used by the admin client.
    app.include_router(available_dates.router, prefix="/api/dates", include_in_schema=False)

    os.makedirs(settings.upload_dir, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")

    @app.get("/")
    def read_root():
        return {"message": "Session Booking API"}

    @app.get("/test")
    def test_database():
        response = {
            "backend": "✅ Running",
            "database": "❌ Not Available",
            "database_name": "❌ Not Set",
            "connection_status": "Not Connected",
            "collections": []
        }
        try:
            if app.state.db is not None:
                response["database"] = "✅ Available"
                response["database_name"] = app.state.db.name
                response["connection_status"] = "Connected"
                try:
                    collections = app.state.db.list_collection_names()
                    response["collections"] = collections[:10]
                    response["database"] = "✅ Connected & Working"
                except PyMongoError as e:
                    response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
        except Exception as e:
            response["database"] = f"❌ Error: {str(e)[:50]}"
        return response

    _init_database(db, settings)
    return app


if __name__ == "__main__":
    import uvicorn

    setup_logging()
    uvicorn.run(create_app(), host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
