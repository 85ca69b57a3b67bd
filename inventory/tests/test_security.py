"""
토큰 발급/검증 + 권한 가드 단위 테스트
"""
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from core.exceptions import ForbiddenError, InvalidTokenError, UnauthenticatedError
from core.security import JwtTokenService, authorize, extract_bearer
from schemas.auth import CurrentUser

SECRET = "unit-test-secret"
tokens = JwtTokenService(secret=SECRET)


def test_access_토큰_발급_검증():
    token = tokens.issue_access_token(7, "alice", "user")
    payload = tokens.verify_access_token(token)

    assert payload.user_id == 7
    assert payload.username == "alice"
    assert payload.role == "user"
    assert payload.issuer == "fruit-inventory"
    assert payload.audience == "fruit-inventory-client"
    assert payload.expires_at - payload.issued_at == timedelta(minutes=15)


def test_access_토큰_클레임_이름():
    claims = jwt.get_unverified_claims(tokens.issue_access_token(1, "bob", "admin"))
    assert set(claims) == {"userId", "username", "role", "iat", "exp", "iss", "aud"}


def test_다른_시크릿으로_서명된_토큰_거부():
    other = JwtTokenService(secret="another-secret")
    with pytest.raises(InvalidTokenError):
        tokens.verify_access_token(other.issue_access_token(1, "bob", "user"))


def test_발급자_불일치_거부():
    other = JwtTokenService(secret=SECRET, issuer="someone-else")
    with pytest.raises(InvalidTokenError):
        tokens.verify_access_token(other.issue_access_token(1, "bob", "user"))


def test_대상_불일치_거부():
    other = JwtTokenService(secret=SECRET, audience="another-client")
    with pytest.raises(InvalidTokenError):
        tokens.verify_access_token(other.issue_access_token(1, "bob", "user"))


def test_만료된_토큰_거부():
    expired = JwtTokenService(secret=SECRET, expire_minutes=-1)
    with pytest.raises(InvalidTokenError):
        tokens.verify_access_token(expired.issue_access_token(1, "bob", "user"))


def test_userId_없는_토큰_거부():
    now = datetime.now(timezone.utc)
    token = jwt.encode({
        "username": "bob",
        "role": "user",
        "iat": now,
        "exp": now + timedelta(minutes=5),
        "iss": "fruit-inventory",
        "aud": "fruit-inventory-client",
    }, SECRET, algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        tokens.verify_access_token(token)


def test_형식이_깨진_토큰_거부():
    with pytest.raises(InvalidTokenError):
        tokens.verify_access_token("not.a.jwt")


def test_refresh_토큰은_128자_hex_난수():
    first = tokens.issue_refresh_token()
    second = tokens.issue_refresh_token()
    assert len(first) == 128
    int(first, 16)
    assert first != second


@pytest.mark.parametrize("header, expected", [
    ("Bearer abc.def", "abc.def"),
    ("Bearer ", None),
    ("bearer abc.def", None),
    ("Token abc.def", None),
    ("", None),
    (None, None),
])
def test_Bearer_헤더_파싱(header, expected):
    assert extract_bearer(header) == expected


def test_역할_가드():
    admin = CurrentUser(user_id=1, username="root", role="admin")
    user = CurrentUser(user_id=2, username="bob", role="user")

    assert authorize(admin, ["admin"]) is admin
    assert authorize(user, ["admin", "user"]) is user
    with pytest.raises(ForbiddenError):
        authorize(user, ["admin"])
    with pytest.raises(UnauthenticatedError):
        authorize(None, ["admin"])
