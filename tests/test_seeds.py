from sample_app import crud, models
from sample_app.seeds import ADMIN_EMAIL, seed


def test_seed_is_idempotent(db_session):
    seed(users_count=9, posts_per_user=2)
    seed(users_count=9, posts_per_user=2)

    assert db_session.query(models.User).count() == 9
    assert db_session.query(models.Micropost).count() == 12

    admin = crud.get_user_by_email(db_session, ADMIN_EMAIL)
    assert admin.admin
    assert admin.name == "Example User"
    # users 2..4 followed by the admin, user 3 follows back
    assert crud.count_following(db_session, admin) == 3
    assert crud.count_followers(db_session, admin) == 1
