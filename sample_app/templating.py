import hashlib
from pathlib import Path
from typing import Optional

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from .config import settings
from .flash import get_flash
from .models import User

GRAVATAR_URL = "https://secure.gravatar.com/avatar/{digest}?s={size}"

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def gravatar_url(user: User, size: int = 50) -> str:
    digest = hashlib.md5(user.email.strip().lower().encode("utf-8")).hexdigest()
    return GRAVATAR_URL.format(digest=digest, size=size)


templates.env.globals["app_name"] = settings.app_name
templates.env.globals["gravatar_url"] = gravatar_url


def render(
    request: Request,
    template: str,
    context: dict,
    current_user: Optional[User] = None,
    status_code: int = 200,
) -> HTMLResponse:
    base_context = {"current_user": current_user, "flash": get_flash(request)}
    base_context.update(context)
    return templates.TemplateResponse(request, template, base_context, status_code=status_code)
