import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from mathkid.config import APP_TITLE, PARENT_COOKIE, PRACTICE_SET_DEFAULT
from mathkid.services.admin_service import AdminService
from mathkid.services.gate_service import ParentGate
from mathkid.services.question_service import QuestionService
from mathkid.services.settings_service import SettingsService
from mathkid.services.stats_service import StatsService
from mathkid.web.pages import practice_page_html, settings_page_html

logger = logging.getLogger(__name__)

PARENTS_ONLY = {"ok": False, "message": "This area is for parents only."}


async def _json_body(request: Request):
    try:
        return await request.json()
    except ValueError:
        return {}


def _body_dict(body) -> dict:
    return body if isinstance(body, dict) else {}


def build_router(
    settings_svc: SettingsService,
    stats_svc: StatsService,
    q_svc: QuestionService,
    gate: ParentGate,
    admin_svc: AdminService,
):
    r = APIRouter()

    def is_parent(request: Request) -> bool:
        return gate.is_unlocked(request.cookies.get(PARENT_COOKIE))

    @r.get("/favicon.ico")
    def favicon():
        return Response(status_code=204)

    @r.get("/")
    def practice_page(request: Request):
        return practice_page_html(request, stats_svc.summary())

    @r.get("/settings")
    def settings_page(request: Request):
        unlocked = is_parent(request)
        preview = [p.to_dict() for p in settings_svc.preview()] if unlocked else []
        return settings_page_html(request, settings_svc.load().to_dict(), preview, unlocked)

    # Practice
    @r.get("/api/problem")
    def api_problem():
        payload, code = q_svc.next_problem()
        return JSONResponse(payload, status_code=code)

    @r.post("/api/answer")
    async def api_answer(request: Request):
        body = _body_dict(await _json_body(request))
        payload, code = q_svc.submit(body.get("answer"), body.get("timeMs"))
        return JSONResponse(payload, status_code=code)

    @r.post("/api/session/reset")
    def api_session_reset():
        q_svc.new_session()
        return JSONResponse({"ok": True})

    @r.get("/api/practice")
    def api_practice(count: int = PRACTICE_SET_DEFAULT):
        return JSONResponse({"ok": True, "problems": q_svc.practice_set(count)})

    # Settings
    @r.get("/api/settings")
    def api_settings():
        return JSONResponse({"ok": True, "settings": settings_svc.load().to_dict()})

    @r.post("/api/settings/validate")
    async def api_settings_validate(request: Request):
        body = await _json_body(request)
        return JSONResponse(settings_svc.validate(body).to_dict())

    @r.put("/api/settings")
    async def api_settings_save(request: Request):
        if not is_parent(request):
            return JSONResponse(PARENTS_ONLY, status_code=403)

        body = await _json_body(request)
        result = settings_svc.validate(body)
        if not result.valid:
            return JSONResponse({"ok": False, "errors": result.errors}, status_code=422)

        settings, saved = settings_svc.save(body)
        if not saved:
            return JSONResponse({"ok": False, "message": "Settings could not be saved."}, status_code=503)
        return JSONResponse({"ok": True, "settings": settings.to_dict()})

    @r.post("/api/settings/reset")
    def api_settings_reset(request: Request):
        if not is_parent(request):
            return JSONResponse(PARENTS_ONLY, status_code=403)
        settings, saved = settings_svc.reset()
        return JSONResponse({"ok": saved, "settings": settings.to_dict()}, status_code=200 if saved else 503)

    @r.get("/api/settings/preview")
    def api_settings_preview():
        return JSONResponse({"ok": True, "problems": [p.to_dict() for p in settings_svc.preview()]})

    # Stats
    @r.get("/api/stats")
    def api_stats():
        return JSONResponse({"ok": True, "stats": stats_svc.summary(), "progress": stats_svc.get_progress()})

    @r.post("/api/stats/reset")
    def api_stats_reset(request: Request):
        if not is_parent(request):
            return JSONResponse(PARENTS_ONLY, status_code=403)
        ok = stats_svc.reset() and stats_svc.reset_progress()
        q_svc.new_session()
        return JSONResponse({"ok": ok}, status_code=200 if ok else 503)

    # Parent gate
    @r.get("/api/gate")
    def api_gate():
        return JSONResponse(gate.challenge())

    @r.post("/api/gate")
    async def api_gate_answer(request: Request):
        body = _body_dict(await _json_body(request))
        token = gate.unlock(body.get("answer"))
        if not token:
            logger.info("Parent gate answer rejected")
            return JSONResponse({"ok": False, "message": "Incorrect answer. This area is for parents only."}, status_code=401)
        resp = JSONResponse({"ok": True})
        resp.set_cookie(PARENT_COOKIE, token, httponly=True, samesite="lax")
        return resp

    @r.post("/api/gate/lock")
    def api_gate_lock(request: Request):
        gate.lock(request.cookies.get(PARENT_COOKIE))
        resp = JSONResponse({"ok": True})
        resp.delete_cookie(PARENT_COOKIE)
        return resp

    # Backup
    @r.get("/api/export")
    def api_export(request: Request):
        if not is_parent(request):
            return JSONResponse(PARENTS_ONLY, status_code=403)
        data = admin_svc.export_data()
        if data is None:
            return JSONResponse({"ok": False, "message": "Data export not available."}, status_code=503)
        return JSONResponse(data)

    @r.post("/api/import")
    async def api_import(request: Request):
        if not is_parent(request):
            return JSONResponse(PARENTS_ONLY, status_code=403)
        ok = admin_svc.import_data(await _json_body(request))
        q_svc.new_session()
        return JSONResponse({"ok": ok}, status_code=200 if ok else 400)

    @r.get("/api/storage")
    def api_storage(request: Request):
        if not is_parent(request):
            return JSONResponse(PARENTS_ONLY, status_code=403)
        info = admin_svc.storage_info()
        if info is None:
            return JSONResponse({"ok": False, "message": "Storage is not available."}, status_code=503)
        return JSONResponse({"ok": True, **info})

    @r.post("/api/admin/clear")
    def api_admin_clear(request: Request):
        if not is_parent(request):
            return JSONResponse(PARENTS_ONLY, status_code=403)
        ok, msg = admin_svc.clear_all()
        q_svc.new_session()
        return JSONResponse({"ok": ok, "message": msg}, status_code=200 if ok else 503)

    @r.get("/manifest.json")
    @r.get("/manifest.webmanifest")
    def manifest():
        return {
            "name": APP_TITLE,
            "short_name": APP_TITLE,
            "start_url": "/",
            "display": "standalone",
            "background_color": "#4a90e2",
            "theme_color": "#4a90e2",
        }

    @r.get("/health")
    def health():
        return {"ok": True}

    return r
