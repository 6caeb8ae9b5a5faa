import logging
from pathlib import Path

import uvicorn
from fastapi import Depends, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import HTTPException as FastAPIHTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from . import models  # noqa: F401  registers tables on Base.metadata
from .auth import RETURN_TO_KEY, AccessDenied, SigninRequired
from .config import settings
from .database import Base, engine
from .flash import NOTICE, get_flash
from .logging_config import setup_logging
from .routes import microposts as microposts_routes
from .routes import pages as pages_routes
from .routes import relationships as relationships_routes
from .routes import sessions as sessions_routes
from .routes import users as users_routes
from .templating import templates

setup_logging()
logger = logging.getLogger(__name__)

# Every request sweeps the flash so a message never outlives one hop.
app = FastAPI(title=settings.app_name, dependencies=[Depends(get_flash)])
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key,
    session_cookie=settings.session_cookie,
    max_age=settings.session_max_age,
)

static_dir = Path(__file__).resolve().parent / "static"
app.mount("/static", StaticFiles(directory=static_dir), name="static")


@app.on_event("startup")
def on_startup() -> None:
    Base.metadata.create_all(bind=engine)


def _wants_html(request: Request) -> bool:
    accept = request.headers.get("accept", "")
    return "text/html" in accept or "*/*" in accept


@app.exception_handler(SigninRequired)
async def signin_required_handler(request: Request, exc: SigninRequired):
    if exc.path:
        request.session[RETURN_TO_KEY] = exc.path
    get_flash(request).set(NOTICE, str(exc))
    return RedirectResponse(url="/signin", status_code=status.HTTP_303_SEE_OTHER)


@app.exception_handler(AccessDenied)
async def access_denied_handler(request: Request, exc: AccessDenied):
    logger.info("Access denied for %s %s", request.method, request.url.path)
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)


@app.exception_handler(FastAPIHTTPException)
async def http_exception_handler(request: Request, exc: FastAPIHTTPException):
    if _wants_html(request):
        template_name = "errors/404.html" if exc.status_code == 404 else "errors/generic.html"
        return templates.TemplateResponse(
            request,
            template_name,
            {
                "detail": exc.detail,
                "status_code": exc.status_code,
                "page_title": "Error",
                "flash": get_flash(request),
            },
            status_code=exc.status_code,
        )
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    if _wants_html(request):
        return templates.TemplateResponse(
            request,
            "errors/generic.html",
            {
                "detail": "The request parameters are invalid.",
                "status_code": status_code,
                "page_title": "Error",
                "flash": get_flash(request),
            },
            status_code=status_code,
        )
    return JSONResponse({"detail": jsonable_encoder(exc.errors())}, status_code=status_code)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled application error", exc_info=exc)
    if _wants_html(request):
        return templates.TemplateResponse(
            request,
            "errors/generic.html",
            {"detail": "Internal server error", "status_code": 500, "page_title": "Error"},
            status_code=500,
        )
    return JSONResponse({"detail": "Internal server error"}, status_code=500)


app.include_router(pages_routes.router)
app.include_router(sessions_routes.router)
app.include_router(users_routes.router)
app.include_router(microposts_routes.router)
app.include_router(relationships_routes.router)


def run() -> None:
    uvicorn.run("sample_app.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
