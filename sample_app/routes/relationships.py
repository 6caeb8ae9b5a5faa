from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from .. import crud, models
from ..auth import require_user
from ..database import get_db
from ..flash import ERROR, get_flash
from .users import get_user_or_404

router = APIRouter(prefix="/relationships", tags=["relationships"])


@router.post("")
async def create(
    request: Request,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_user),
):
    form = await request.form()
    try:
        followed_id = int(form.get("followed_id") or "")
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="followed_id is required.")

    followed = get_user_or_404(db, followed_id)
    try:
        crud.follow(db, current_user, followed)
    except ValueError as exc:
        get_flash(request).set(ERROR, str(exc))
    return RedirectResponse(url=f"/users/{followed.id}", status_code=status.HTTP_303_SEE_OTHER)


@router.api_route("/{followed_id}", methods=["DELETE"])
@router.post("/{followed_id}/delete")
def destroy(
    followed_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(require_user),
):
    followed = get_user_or_404(db, followed_id)
    crud.unfollow(db, current_user, followed)
    return RedirectResponse(url=f"/users/{followed.id}", status_code=status.HTTP_303_SEE_OTHER)
