from datetime import timedelta
from types import SimpleNamespace

import pytest
from jose import jwt

from gs_portfolio.core.config import settings
from gs_portfolio.core.security import (
    SESSION_TTL,
    clear_cookie,
    create_secure_cookie,
    extract_token_from_cookie,
    generate_jwt,
    generate_session_token,
    get_session_expiry,
    hash_password,
    utcnow,
    verify_jwt,
    verify_password,
)

USER = SimpleNamespace(id=7, username="admin", email="admin@example.com")


@pytest.mark.unit
class TestPasswordHashing:
    def test_round_trip(self):
        hashed = hash_password("s3cret-pass")
        assert hashed != "s3cret-pass"
        assert verify_password("s3cret-pass", hashed)

    def test_wrong_password(self):
        assert not verify_password("other-pass", hash_password("s3cret-pass"))

    def test_salted(self):
        assert hash_password("same") != hash_password("same")

    def test_uses_configured_rounds(self):
        assert f"${settings.PASSWORD_HASH_ROUNDS}$" in hash_password("pw")

    def test_malformed_hash_is_rejected(self):
        assert verify_password("pw", "not-a-hash") is False


@pytest.mark.unit
class TestSessionTokens:
    def test_tokens_are_random_and_long(self):
        tokens = {generate_session_token() for _ in range(50)}
        assert len(tokens) == 50
        # 32 random bytes, url-safe base64
        assert all(len(t) >= 43 for t in tokens)

    def test_expiry_is_24_hours_ahead(self):
        now = utcnow()
        assert get_session_expiry(now) - now == SESSION_TTL == timedelta(hours=24)


@pytest.mark.unit
class TestJwt:
    def test_round_trip(self):
        claims = verify_jwt(generate_jwt(USER))
        assert claims["userId"] == 7
        assert claims["username"] == "admin"
        assert claims["email"] == "admin@example.com"
        assert claims["iss"] == settings.JWT_ISSUER

    def test_wrong_secret(self):
        assert verify_jwt(generate_jwt(USER, secret="one"), secret="two") is None

    def test_expired(self):
        assert verify_jwt(generate_jwt(USER, expires_delta=timedelta(seconds=-10))) is None

    def test_wrong_issuer(self):
        token = jwt.encode({"userId": 1, "iss": "someone-else"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
        assert verify_jwt(token) is None

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_malformed(self, token):
        assert verify_jwt(token) is None


@pytest.mark.unit
class TestCookies:
    def test_extract(self):
        header = "theme=dark; session=abc123; other=x"
        assert extract_token_from_cookie(header, "session") == "abc123"

    @pytest.mark.parametrize("header", [None, "", "theme=dark", "session=", "sessionx=abc"])
    def test_extract_missing(self, header):
        assert extract_token_from_cookie(header, "session") is None

    def test_secure_cookie_attributes(self):
        cookie = create_secure_cookie("session", "tok")
        assert cookie.startswith("session=tok;")
        for attr in ("HttpOnly", "Secure", "SameSite=Strict", "Max-Age=86400", "Path=/"):
            assert attr in cookie

    def test_clear_cookie(self):
        cookie = clear_cookie("session")
        assert cookie.startswith("session=;")
        assert "Max-Age=0" in cookie
