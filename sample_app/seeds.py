from __future__ import annotations

import argparse
import logging

from faker import Faker
from sqlalchemy import select

from .auth import hash_password
from .database import Base, engine, session_scope
from .logging_config import setup_logging
from .models import Micropost, Relationship, User

logger = logging.getLogger(__name__)

fake = Faker()
Faker.seed(1234)

ADMIN_EMAIL = "example@railstutorial.org"
DEFAULT_PASSWORD = "foobar"


def seed(users_count: int, posts_per_user: int) -> None:
    """Seed the database with deterministic, idempotent data.

    - The first user is the admin ``Example User``
    - Other users are identified by email: example-{n}@railstutorial.org
    - The first six users get ``posts_per_user`` microposts each
    - User 1 follows users 2..N/2 and users 3..N/3 follow user 1
    """
    Base.metadata.create_all(bind=engine)
    password_hash = hash_password(DEFAULT_PASSWORD)

    with session_scope() as session:
        existing_users = {u.email: u for u in session.scalars(select(User)).all()}

        users = []
        for i in range(1, users_count + 1):
            email = ADMIN_EMAIL if i == 1 else f"example-{i}@railstutorial.org"
            user = existing_users.get(email)
            if not user:
                user = User(
                    name="Example User" if i == 1 else fake.name()[:50],
                    email=email,
                    password_hash=password_hash,
                    admin=(i == 1),
                )
                session.add(user)
                session.flush()  # assign user.id
                existing_users[email] = user
            users.append(user)

        for user in users[:6]:
            have = session.scalar(
                select(Micropost.id).where(Micropost.user_id == user.id).limit(1)
            )
            if have:
                continue
            for _ in range(posts_per_user):
                session.add(Micropost(user_id=user.id, content=fake.sentence(nb_words=8)[:140]))

        if not users:
            return

        first = users[0]
        pairs = [(first, followed) for followed in users[1 : len(users) // 2]]
        pairs += [(follower, first) for follower in users[2 : len(users) // 3]]
        for follower, followed in pairs:
            exists = session.scalar(
                select(Relationship.id).where(
                    Relationship.follower_id == follower.id,
                    Relationship.followed_id == followed.id,
                )
            )
            if not exists:
                session.add(Relationship(follower_id=follower.id, followed_id=followed.id))

    logger.info("Seeded %s users", users_count)


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the database.")
    parser.add_argument(
        "--users",
        type=int,
        default=50,
        help="Number of users to create (default: 50).",
    )
    parser.add_argument(
        "--posts-per-user",
        type=int,
        default=5,
        help="Number of microposts for each of the first six users (default: 5).",
    )
    args = parser.parse_args()

    setup_logging()
    seed(users_count=args.users, posts_per_user=args.posts_per_user)
    print("Seeding complete.")


if __name__ == "__main__":
    main()
