from datetime import timedelta

import pytest

from app.core.errors import AuthError, ConflictError, ValidationError
from app.core.jwt import create_access_token
from app.services.credentials import CredentialService, verify_token


@pytest.fixture()
def creds(store) -> CredentialService:
    return CredentialService(store)


def test_register_issues_token_that_verifies(creds):
    user, token = creds.register("alice", "alice@example.com", "secret1")

    identity = creds.verify(token)
    assert identity.user_id == user.id
    assert identity.username == "alice"
    assert identity.email == "alice@example.com"


def test_password_is_stored_hashed(creds):
    user, _ = creds.register("bob", "bob@example.com", "hunter22")
    assert user.password_hash != "hunter22"
    assert "hunter22" not in user.password_hash


@pytest.mark.parametrize(
    "username,email,password",
    [
        ("", "a@example.com", "secret1"),
        ("   ", "a@example.com", "secret1"),
        ("alice", "", "secret1"),
        ("alice", "a@example.com", ""),
        (None, None, None),
        ("alice", "a@example.com", "12345"),
    ],
)
def test_register_validation(creds, username, email, password):
    with pytest.raises(ValidationError):
        creds.register(username, email, password)


def test_register_duplicate_username_conflicts(creds):
    creds.register("alice", "alice@example.com", "secret1")
    with pytest.raises(ConflictError):
        creds.register("alice", "other@example.com", "another1")


def test_register_duplicate_email_conflicts(creds):
    creds.register("alice", "alice@example.com", "secret1")
    with pytest.raises(ConflictError):
        creds.register("alice2", "alice@example.com", "another1")


def test_register_rejects_identifiers_that_collide_across_columns(creds):
    creds.register("alice", "alice@example.com", "secret1")

    # 다른 사람의 email을 username으로
    with pytest.raises(ConflictError, match="Username already exists"):
        creds.register("alice@example.com", "mallory@example.com", "secret1")
    # 다른 사람의 username을 email로
    with pytest.raises(ConflictError, match="Email already registered"):
        creds.register("mallory", "alice", "secret1")

    # 로그인 대상이 모호해지지 않는다
    user, _ = creds.login("alice@example.com", "secret1")
    assert user.username == "alice"


def test_login_with_username_or_email_returns_same_user(creds):
    user, _ = creds.register("carol", "carol@example.com", "secret1")

    by_name, token = creds.login("carol", "secret1")
    by_email, _ = creds.login("carol@example.com", "secret1")

    assert by_name.id == user.id
    assert by_email.id == user.id
    assert creds.verify(token).user_id == user.id


def test_login_failures_share_one_message(creds):
    creds.register("dave", "dave@example.com", "secret1")

    with pytest.raises(AuthError) as wrong_password:
        creds.login("dave", "not-the-password")
    with pytest.raises(AuthError) as unknown_user:
        creds.login("nobody", "secret1")

    assert wrong_password.value.message == unknown_user.value.message


def test_login_requires_both_fields(creds):
    with pytest.raises(ValidationError):
        creds.login("", "secret1")
    with pytest.raises(ValidationError):
        creds.login("dave", None)


@pytest.mark.parametrize("token", [None, "", "not-a-jwt", "a.b.c"])
def test_verify_rejects_missing_or_malformed(token):
    with pytest.raises(AuthError):
        verify_token(token)


def test_verify_rejects_expired_token(creds):
    user, _ = creds.register("erin", "erin@example.com", "secret1")
    expired = create_access_token(str(user.id), user.username, user.email, expires_delta=timedelta(seconds=-5))

    with pytest.raises(AuthError):
        verify_token(expired)


def test_verify_rejects_token_signed_with_other_secret():
    from jose import jwt

    forged = jwt.encode(
        {"sub": "00000000-0000-0000-0000-000000000000", "username": "x", "email": "x@x"},
        "some-other-secret",
        algorithm="HS256",
    )
    with pytest.raises(AuthError):
        verify_token(forged)
