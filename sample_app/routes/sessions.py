from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from ..auth import authenticate, get_current_user, pop_return_to, sign_in, sign_out
from ..database import get_db
from ..flash import ERROR, get_flash
from ..templating import render

router = APIRouter(tags=["sessions"])


def _render_signin(request: Request, form_values: dict, current_user=None) -> HTMLResponse:
    return render(
        request,
        "sessions/new.html",
        {"page_title": "Sign in", "form_values": form_values},
        current_user=current_user,
    )


@router.get("/signin", response_class=HTMLResponse)
def signin_form(request: Request, current_user=Depends(get_current_user)):
    return _render_signin(request, {}, current_user=current_user)


@router.post("/signin", response_class=HTMLResponse)
async def signin(request: Request, db: Session = Depends(get_db)):
    form = await request.form()
    email = (form.get("session[email]") or "").strip()
    password = form.get("session[password]") or ""

    user = authenticate(db, email, password)
    if user is None:
        get_flash(request).now(ERROR, "Invalid email/password combination.")
        return _render_signin(request, {"email": email})

    sign_in(request, user)
    return RedirectResponse(
        url=pop_return_to(request, f"/users/{user.id}"),
        status_code=status.HTTP_303_SEE_OTHER,
    )


@router.api_route("/signout", methods=["GET", "POST", "DELETE"])
def signout(request: Request):
    sign_out(request)
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)
