from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from .. import crud, models
from ..auth import get_current_user
from ..config import settings
from ..database import get_db
from ..templating import render

router = APIRouter(tags=["pages"])


def render_home(
    request: Request,
    db: Session,
    current_user: Optional[models.User],
    page: int = 1,
    errors=None,
    form_values=None,
    status_code: int = 200,
) -> HTMLResponse:
    context = {"page_title": "Home", "errors": errors or [], "form_values": form_values or {}}
    if current_user is not None:
        context.update(
            {
                "feed": crud.feed(db, current_user, page=page, per_page=settings.microposts_per_page),
                "pagination_path": "/",
                "micropost_count": crud.count_microposts(db, current_user),
                "following_count": crud.count_following(db, current_user),
                "followers_count": crud.count_followers(db, current_user),
            }
        )
    return render(request, "pages/home.html", context, current_user=current_user, status_code=status_code)


@router.get("/", response_class=HTMLResponse)
def home(
    request: Request,
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return render_home(request, db, current_user, page=page)


@router.get("/about", response_class=HTMLResponse)
def about(request: Request, current_user=Depends(get_current_user)):
    return render(request, "pages/about.html", {"page_title": "About"}, current_user=current_user)


@router.get("/contact", response_class=HTMLResponse)
def contact(request: Request, current_user=Depends(get_current_user)):
    return render(request, "pages/contact.html", {"page_title": "Contact"}, current_user=current_user)


@router.get("/help", response_class=HTMLResponse)
def help_page(request: Request, current_user=Depends(get_current_user)):
    return render(request, "pages/help.html", {"page_title": "Help"}, current_user=current_user)
