from http import HTTPStatus

from sample_app import crud, models


def test_create_requires_sign_in(client, db_session):
    response = client.post("/microposts", data={"micropost[content]": "Hi"}, follow_redirects=False)
    assert response.headers["location"] == "/signin"
    assert db_session.query(models.Micropost).count() == 0


def test_create_micropost(client, db_session, user_factory, sign_in):
    user = sign_in(user_factory())
    response = client.post(
        "/microposts", data={"micropost[content]": "Lorem ipsum"}, follow_redirects=False
    )
    assert response.status_code == HTTPStatus.SEE_OTHER
    assert response.headers["location"] == "/"

    micropost = db_session.query(models.Micropost).one()
    assert micropost.user_id == user.id

    home = client.get("/")
    assert "Micropost created!" in home.text
    assert '<span class="content">Lorem ipsum</span>' in home.text


def test_blank_micropost_is_rejected(client, db_session, user_factory, sign_in):
    sign_in(user_factory())
    response = client.post("/microposts", data={"micropost[content]": "   "})
    assert response.status_code == HTTPStatus.OK
    assert "Content can&#39;t be blank" in response.text
    assert db_session.query(models.Micropost).count() == 0


def test_long_micropost_is_rejected(client, db_session, user_factory, sign_in):
    sign_in(user_factory())
    response = client.post("/microposts", data={"micropost[content]": "a" * 141})
    assert response.status_code == HTTPStatus.OK
    assert "at most 140 characters" in response.text
    assert db_session.query(models.Micropost).count() == 0


def test_owner_can_delete(client, db_session, user_factory, micropost_factory, sign_in):
    user = sign_in(user_factory())
    micropost = micropost_factory(user)
    micropost_id = micropost.id

    response = client.post(f"/microposts/{micropost_id}/delete", follow_redirects=False)
    assert response.headers["location"] == "/"
    assert crud.get_micropost(db_session, micropost_id) is None


def test_others_cannot_delete(client, db_session, user_factory, micropost_factory, sign_in, next_email):
    owner = user_factory()
    micropost = micropost_factory(owner)
    sign_in(user_factory(email=next_email()))

    response = client.delete(f"/microposts/{micropost.id}", follow_redirects=False)
    assert response.headers["location"] == "/"
    assert crud.get_micropost(db_session, micropost.id) is not None


def test_feed_has_own_and_followed_posts(db_session, user_factory, micropost_factory, next_email):
    user = user_factory()
    followed = user_factory(email=next_email())
    stranger = user_factory(email=next_email())
    own = micropost_factory(user, "mine")
    theirs = micropost_factory(followed, "followed")
    unrelated = micropost_factory(stranger, "stranger")
    crud.follow(db_session, user, followed)

    feed = crud.feed(db_session, user)
    ids = [m.id for m in feed]
    assert own.id in ids
    assert theirs.id in ids
    assert unrelated.id not in ids
    # Newest first.
    assert ids == sorted(ids, reverse=True)


def test_home_page_signed_out(client):
    response = client.get("/")
    assert response.status_code == HTTPStatus.OK
    assert 'href="/signup"' in response.text


def test_static_pages(client):
    for path, title in (("/about", "About"), ("/contact", "Contact"), ("/help", "Help")):
        response = client.get(path)
        assert response.status_code == HTTPStatus.OK
        assert f"<title>Sample App | {title}</title>" in response.text
