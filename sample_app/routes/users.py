import logging
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..auth import (
    authorize,
    can_destroy,
    can_modify,
    get_current_user,
    require_user,
    sign_in,
)
from ..config import settings
from ..database import get_db
from ..flash import SUCCESS, get_flash
from ..templating import render

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])

USER_FIELDS = ("name", "email", "password", "password_confirmation")
GRAVATAR_EDIT_URL = "http://gravatar.com/emails"


def _user_params(form_data) -> dict:
    """Pick ``user[...]`` fields out of a submitted form."""
    params = {}
    for key, value in form_data.multi_items():
        if key.startswith("user[") and key.endswith("]"):
            params[key[5:-1]] = value
    return params


def get_user_or_404(db: Session, user_id: int) -> models.User:
    user = crud.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    return user


def _parse(form_cls, params: dict) -> Tuple[Optional[object], List[schemas.ValidationResult]]:
    payload = {name: params.get(name) or "" for name in USER_FIELDS}
    try:
        return form_cls(**payload), []
    except ValidationError as exc:
        return None, schemas.format_errors(exc)


def _render_new(request: Request, params: dict, errors, current_user=None) -> HTMLResponse:
    return render(
        request,
        "users/new.html",
        {
            "page_title": "Sign up",
            "errors": errors,
            "form_values": {"name": params.get("name", ""), "email": params.get("email", "")},
        },
        current_user=current_user,
    )


def _render_edit(request: Request, user: models.User, form_values: dict, errors) -> HTMLResponse:
    return render(
        request,
        "users/edit.html",
        {
            "page_title": "Edit user",
            "user": user,
            "errors": errors,
            "form_values": form_values,
            "gravatar_edit_url": GRAVATAR_EDIT_URL,
        },
        current_user=user,
    )


@router.get("/users", response_class=HTMLResponse)
def index(
    request: Request,
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_user),
):
    users = crud.list_users(db, page=page, per_page=settings.users_per_page)
    return render(
        request,
        "users/index.html",
        {"page_title": "All users", "users": users, "pagination_path": "/users"},
        current_user=current_user,
    )


@router.get("/users/new", response_class=HTMLResponse)
@router.get("/signup", response_class=HTMLResponse)
def new(request: Request, current_user=Depends(get_current_user)):
    return _render_new(request, {}, [], current_user=current_user)


@router.post("/users", response_class=HTMLResponse)
async def create(request: Request, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    form = await request.form()
    params = _user_params(form)

    signup, errors = _parse(schemas.SignupForm, params)
    if signup is not None and crud.email_taken(db, signup.email):
        errors.append(schemas.ValidationResult(loc="email", msg="Email has already been taken"))
    if errors:
        return _render_new(request, params, errors, current_user=current_user)

    try:
        user = crud.create_user(db, signup)
    except IntegrityError:
        errors.append(schemas.ValidationResult(loc="email", msg="Email has already been taken"))
        return _render_new(request, params, errors, current_user=current_user)

    sign_in(request, user)
    get_flash(request).set(SUCCESS, f"Welcome to the {settings.app_name}!")
    return RedirectResponse(url=f"/users/{user.id}", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/users/{user_id}", response_class=HTMLResponse)
def show(
    request: Request,
    user_id: int,
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    user = get_user_or_404(db, user_id)
    microposts = crud.microposts_for(db, user, page=page, per_page=settings.microposts_per_page)
    following = None
    if current_user is not None and current_user.id != user.id:
        following = crud.is_following(db, current_user, user)
    return render(
        request,
        "users/show.html",
        {
            "page_title": user.name,
            "user": user,
            "microposts": microposts,
            "pagination_path": f"/users/{user.id}",
            "following_count": crud.count_following(db, user),
            "followers_count": crud.count_followers(db, user),
            "is_following": following,
        },
        current_user=current_user,
    )


@router.get("/users/{user_id}/edit", response_class=HTMLResponse)
def edit(
    request: Request,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_user),
):
    user = get_user_or_404(db, user_id)
    authorize(can_modify(current_user, user))
    return _render_edit(request, user, {"name": user.name, "email": user.email}, [])


@router.api_route("/users/{user_id}", methods=["PUT", "POST"], response_class=HTMLResponse)
async def update(
    request: Request,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_user),
):
    user = get_user_or_404(db, user_id)
    authorize(can_modify(current_user, user))

    form = await request.form()
    params = _user_params(form)
    form_values = {"name": params.get("name", ""), "email": params.get("email", "")}

    profile, errors = _parse(schemas.ProfileForm, params)
    if profile is not None and crud.email_taken(db, profile.email, exclude_id=user.id):
        errors.append(schemas.ValidationResult(loc="email", msg="Email has already been taken"))
    if errors:
        return _render_edit(request, user, form_values, errors)

    try:
        crud.update_user(db, user, profile)
    except IntegrityError:
        db.refresh(user)
        errors.append(schemas.ValidationResult(loc="email", msg="Email has already been taken"))
        return _render_edit(request, user, form_values, errors)

    get_flash(request).set(SUCCESS, "Profile updated.")
    return RedirectResponse(url=f"/users/{user.id}", status_code=status.HTTP_303_SEE_OTHER)


@router.api_route("/users/{user_id}", methods=["DELETE"])
@router.post("/users/{user_id}/delete")
def destroy(
    request: Request,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_user),
):
    user = get_user_or_404(db, user_id)
    authorize(can_destroy(current_user, user))
    crud.delete_user(db, user)
    logger.info("Admin %s destroyed user %s", current_user.id, user_id)
    get_flash(request).set(SUCCESS, "User destroyed.")
    return RedirectResponse(url="/users", status_code=status.HTTP_303_SEE_OTHER)


def _render_follow_list(request, db, user, current_user, heading, users_page, path):
    return render(
        request,
        "users/show_follow.html",
        {
            "page_title": heading,
            "heading": heading,
            "user": user,
            "users": users_page,
            "pagination_path": path,
            "following_count": crud.count_following(db, user),
            "followers_count": crud.count_followers(db, user),
        },
        current_user=current_user,
    )


@router.get("/users/{user_id}/following", response_class=HTMLResponse)
def following(
    request: Request,
    user_id: int,
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_user),
):
    user = get_user_or_404(db, user_id)
    users_page = crud.following_page(db, user, page=page, per_page=settings.users_per_page)
    return _render_follow_list(
        request, db, user, current_user, "Following", users_page, f"/users/{user.id}/following"
    )


@router.get("/users/{user_id}/followers", response_class=HTMLResponse)
def followers(
    request: Request,
    user_id: int,
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_user),
):
    user = get_user_or_404(db, user_id)
    users_page = crud.followers_page(db, user, page=page, per_page=settings.users_per_page)
    return _render_follow_list(
        request, db, user, current_user, "Followers", users_page, f"/users/{user.id}/followers"
    )
