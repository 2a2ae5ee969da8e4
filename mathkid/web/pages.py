from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from mathkid.config import APP_TITLE

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def practice_page_html(request: Request, stats: dict):
    return templates.TemplateResponse(
        request,
        "practice.html",
        {"title": APP_TITLE, "stats": stats},
    )


def settings_page_html(request: Request, settings: dict, preview: list, unlocked: bool):
    return templates.TemplateResponse(
        request,
        "settings.html",
        {
            "title": f"{APP_TITLE} - Parent Settings",
            "settings": settings,
            "preview": preview,
            "unlocked": unlocked,
        },
    )
