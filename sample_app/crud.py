import logging
from typing import List, Optional

from sqlalchemy import exists, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models, schemas
from .auth import hash_password
from .pagination import Page, paginate

logger = logging.getLogger(__name__)


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


# User CRUD


def get_user(db: Session, user_id: int) -> Optional[models.User]:
    return db.get(models.User, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    email = (email or "").strip().lower()
    return db.scalar(select(models.User).where(models.User.email == email))


def email_taken(db: Session, email: str, exclude_id: Optional[int] = None) -> bool:
    user = get_user_by_email(db, email)
    return user is not None and user.id != exclude_id


def list_users(db: Session, page: int = 1, per_page: int = 30) -> Page[models.User]:
    stmt = select(models.User).order_by(models.User.id)
    return paginate(db, stmt, page=page, per_page=per_page)


def create_user(db: Session, form: schemas.SignupForm, admin: bool = False) -> models.User:
    user = models.User(
        name=form.name,
        email=form.email,
        password_hash=hash_password(form.password),
        admin=admin,
    )
    db.add(user)
    _commit(db)
    db.refresh(user)
    logger.info("Created user %s <%s>", user.id, user.email)
    return user


def update_user(db: Session, user: models.User, form: schemas.ProfileForm) -> models.User:
    user.name = form.name
    user.email = form.email
    if form.password:
        user.password_hash = hash_password(form.password)
    _commit(db)
    db.refresh(user)
    return user


def delete_user(db: Session, user: models.User) -> None:
    user_id = user.id
    db.delete(user)
    _commit(db)
    logger.info("Deleted user %s", user_id)


# Follow relationships


def _edge(db: Session, follower_id: int, followed_id: int) -> Optional[models.Relationship]:
    return db.scalar(
        select(models.Relationship).where(
            models.Relationship.follower_id == follower_id,
            models.Relationship.followed_id == followed_id,
        )
    )


def is_following(db: Session, follower: models.User, followed: models.User) -> bool:
    return bool(
        db.scalar(
            select(
                exists().where(
                    models.Relationship.follower_id == follower.id,
                    models.Relationship.followed_id == followed.id,
                )
            )
        )
    )


def follow(db: Session, follower: models.User, followed: models.User) -> None:
    """Record that ``follower`` follows ``followed``. Following twice is a no-op."""
    if follower.id == followed.id:
        raise ValueError("Users cannot follow themselves")
    if _edge(db, follower.id, followed.id) is not None:
        return

    db.add(models.Relationship(follower_id=follower.id, followed_id=followed.id))
    try:
        db.commit()
    except IntegrityError:
        # A concurrent request inserted the same pair first.
        db.rollback()
        return
    logger.info("User %s followed user %s", follower.id, followed.id)


def unfollow(db: Session, follower: models.User, followed: models.User) -> None:
    edge = _edge(db, follower.id, followed.id)
    if edge is None:
        return
    db.delete(edge)
    _commit(db)
    logger.info("User %s unfollowed user %s", follower.id, followed.id)


def _following_stmt(user: models.User):
    return (
        select(models.User)
        .join(models.Relationship, models.Relationship.followed_id == models.User.id)
        .where(models.Relationship.follower_id == user.id)
        .order_by(models.User.id)
    )


def _followers_stmt(user: models.User):
    return (
        select(models.User)
        .join(models.Relationship, models.Relationship.follower_id == models.User.id)
        .where(models.Relationship.followed_id == user.id)
        .order_by(models.User.id)
    )


def following(db: Session, user: models.User) -> List[models.User]:
    """Users that ``user`` follows."""
    return list(db.scalars(_following_stmt(user)).all())


def followers(db: Session, user: models.User) -> List[models.User]:
    """Users that follow ``user``."""
    return list(db.scalars(_followers_stmt(user)).all())


def following_page(db: Session, user: models.User, page: int = 1, per_page: int = 30) -> Page[models.User]:
    return paginate(db, _following_stmt(user), page=page, per_page=per_page)


def followers_page(db: Session, user: models.User, page: int = 1, per_page: int = 30) -> Page[models.User]:
    return paginate(db, _followers_stmt(user), page=page, per_page=per_page)


def count_following(db: Session, user: models.User) -> int:
    return db.scalar(
        select(func.count()).select_from(models.Relationship).where(models.Relationship.follower_id == user.id)
    ) or 0


def count_followers(db: Session, user: models.User) -> int:
    return db.scalar(
        select(func.count()).select_from(models.Relationship).where(models.Relationship.followed_id == user.id)
    ) or 0


# Micropost CRUD


def get_micropost(db: Session, micropost_id: int) -> Optional[models.Micropost]:
    return db.get(models.Micropost, micropost_id)


def create_micropost(db: Session, user: models.User, form: schemas.MicropostForm) -> models.Micropost:
    micropost = models.Micropost(user_id=user.id, content=form.content)
    db.add(micropost)
    _commit(db)
    db.refresh(micropost)
    return micropost


def delete_micropost(db: Session, micropost: models.Micropost) -> None:
    db.delete(micropost)
    _commit(db)


def microposts_for(db: Session, user: models.User, page: int = 1, per_page: int = 30) -> Page[models.Micropost]:
    stmt = (
        select(models.Micropost)
        .where(models.Micropost.user_id == user.id)
        .order_by(models.Micropost.created_at.desc(), models.Micropost.id.desc())
    )
    return paginate(db, stmt, page=page, per_page=per_page)


def count_microposts(db: Session, user: models.User) -> int:
    return db.scalar(
        select(func.count()).select_from(models.Micropost).where(models.Micropost.user_id == user.id)
    ) or 0


def feed(db: Session, user: models.User, page: int = 1, per_page: int = 30) -> Page[models.Micropost]:
    """The user's own microposts plus those of everyone they follow, newest first."""
    followed_ids = select(models.Relationship.followed_id).where(
        models.Relationship.follower_id == user.id
    )
    stmt = (
        select(models.Micropost)
        .where(
            or_(
                models.Micropost.user_id == user.id,
                models.Micropost.user_id.in_(followed_ids),
            )
        )
        .order_by(models.Micropost.created_at.desc(), models.Micropost.id.desc())
    )
    return paginate(db, stmt, page=page, per_page=per_page)
