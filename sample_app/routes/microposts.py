from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..auth import authorize, require_user
from ..database import get_db
from ..flash import SUCCESS, get_flash
from .pages import render_home

router = APIRouter(prefix="/microposts", tags=["microposts"])


@router.post("", response_class=HTMLResponse)
async def create(
    request: Request,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_user),
):
    form = await request.form()
    content = form.get("micropost[content]") or ""
    try:
        micropost_form = schemas.MicropostForm(content=content)
    except ValidationError as exc:
        return render_home(
            request,
            db,
            current_user,
            errors=schemas.format_errors(exc),
            form_values={"content": content},
        )

    crud.create_micropost(db, current_user, micropost_form)
    get_flash(request).set(SUCCESS, "Micropost created!")
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)


@router.api_route("/{micropost_id}", methods=["DELETE"])
@router.post("/{micropost_id}/delete")
def destroy(
    micropost_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_user),
):
    micropost = crud.get_micropost(db, micropost_id)
    if micropost is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Micropost not found.")
    authorize(micropost.user_id == current_user.id)
    crud.delete_micropost(db, micropost)
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)
