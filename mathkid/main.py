import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mathkid.api.routes import build_router
from mathkid.config import APP_TITLE, DB_PATH, LOG_LEVEL
from mathkid.db.store import KeyValueStore
from mathkid.services.admin_service import AdminService
from mathkid.services.gate_service import ParentGate
from mathkid.services.question_service import QuestionService
from mathkid.services.settings_service import SettingsService
from mathkid.services.stats_service import StatsService

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
)
logger = logging.getLogger(__name__)


def create_app(db_path: str = DB_PATH, rng=None) -> FastAPI:
    app = FastAPI(title=APP_TITLE)

    async def _handle_404(request: Request):
        path = request.url.path or ""

        if path.startswith("/api"):
            return JSONResponse({"ok": False, "message": "Not found"}, status_code=404)

        # unknown pages go back to practice
        return RedirectResponse(url="/", status_code=303)

    @app.exception_handler(StarletteHTTPException)
    async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return await _handle_404(request)
        return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)

    @app.exception_handler(HTTPException)
    async def fastapi_http_exception_handler(request: Request, exc: HTTPException):
        if exc.status_code == 404:
            return await _handle_404(request)
        return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)

    store = KeyValueStore(db_path)
    if not store.init_db():
        logger.warning("Starting without persistent storage, defaults will be used")

    settings_svc = SettingsService(store)
    stats_svc = StatsService(store)
    q_svc = QuestionService(settings_svc, stats_svc, rng)
    gate = ParentGate(rng)
    admin_svc = AdminService(store, settings_svc)

    app.include_router(build_router(settings_svc, stats_svc, q_svc, gate, admin_svc))
    logger.info(f"{APP_TITLE} ready, storage at {db_path}")
    return app


app = create_app()
