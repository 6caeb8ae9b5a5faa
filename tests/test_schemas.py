import pytest
from pydantic import ValidationError

from sample_app.schemas import MicropostForm, ProfileForm, SignupForm, format_errors


def _signup(**overrides):
    data = {
        "name": "Example User",
        "email": "user@example.com",
        "password": "foobar",
        "password_confirmation": "foobar",
    }
    data.update(overrides)
    return SignupForm(**data)


def _messages(exc_info) -> dict:
    return {error.loc: error.msg for error in format_errors(exc_info.value)}


def test_valid_signup_normalizes_email():
    form = _signup(email="  Foo@ExAMPle.CoM ")
    assert form.email == "foo@example.com"


@pytest.mark.parametrize(
    "email",
    [
        "user@example..com",
        "user@-example.com",
        "user..dots@example.com",
        "user@example,com",
        "user_at_foo.org",
        "foo@bar_baz.com",
        "foo@bar+baz.com",
    ],
)
def test_malformed_email_is_rejected(email):
    with pytest.raises(ValidationError) as exc_info:
        _signup(email=email)
    assert "email" in _messages(exc_info)


def test_malformed_email_is_rejected_on_profile_edit():
    with pytest.raises(ValidationError) as exc_info:
        ProfileForm(name="Example User", email="user@example..com")
    assert "email" in _messages(exc_info)


def test_blank_fields_use_friendly_messages():
    with pytest.raises(ValidationError) as exc_info:
        _signup(name="  ", email="", password="", password_confirmation="")
    messages = _messages(exc_info)
    assert messages["name"] == "Name can't be blank"
    assert messages["email"] == "Email can't be blank"
    assert messages["password"] == "Password can't be blank"


def test_name_longer_than_fifty_characters_is_rejected():
    with pytest.raises(ValidationError) as exc_info:
        _signup(name="a" * 51)
    assert "at most 50 characters" in _messages(exc_info)["name"]


@pytest.mark.parametrize("password", ["a" * 5, "a" * 41])
def test_password_length_bounds(password):
    with pytest.raises(ValidationError) as exc_info:
        _signup(password=password, password_confirmation=password)
    assert "password" in _messages(exc_info)


def test_password_must_match_confirmation():
    with pytest.raises(ValidationError) as exc_info:
        _signup(password_confirmation="barfoo")
    assert _messages(exc_info)["password_confirmation"] == "Password doesn't match confirmation"


def test_profile_blank_password_keeps_current():
    form = ProfileForm(name="Example User", email="user@example.com", password="", password_confirmation="")
    assert form.password is None
    assert form.password_confirmation is None


def test_micropost_content_is_stripped_and_bounded():
    assert MicropostForm(content="  hello  ").content == "hello"
    with pytest.raises(ValidationError) as exc_info:
        MicropostForm(content="a" * 141)
    assert "at most 140 characters" in _messages(exc_info)["content"]
