"""Password hashing, tokens, configuration parsing and the image host client."""
from datetime import timedelta

import cloudinary.exceptions
import cloudinary.uploader
import jwt
import pytest

from config import Settings, get_settings, parse_duration
from main import app
from utils.cloudinary import PROFILE_TRANSFORMATION, CloudinaryUploader
from utils.errors import AuthError, InternalError
from utils.jwt import create_access_token, get_user_id_from_token
from utils.security import hash_password, is_valid_email, verify_password


def test_hash_password_is_salted():
    first = hash_password("secret123", rounds=4)
    second = hash_password("secret123", rounds=4)

    assert first != second
    assert "secret123" not in first
    assert verify_password("secret123", first)
    assert verify_password("secret123", second)
    assert not verify_password("secret124", first)


def test_hash_password_uses_requested_cost():
    assert hash_password("secret123", rounds=5).startswith("$2b$05$")


@pytest.mark.parametrize(
    "email, valid",
    [
        ("alice@example.com", True),
        ("a.b+c@sub.example.org", True),
        ("alice@example", False),
        ("alice example@x.com", False),
        ("@example.com", False),
        ("alice@@example.com", False),
    ],
)
def test_is_valid_email(email, valid):
    assert is_valid_email(email) is valid


def test_token_round_trip():
    token = create_access_token(42, "s3cret", timedelta(minutes=5))

    assert get_user_id_from_token(token, "s3cret") == 42


def test_expired_token_message():
    token = create_access_token(42, "s3cret", timedelta(seconds=-1))

    with pytest.raises(AuthError, match="expired"):
        get_user_id_from_token(token, "s3cret")


def test_tampered_token_message():
    token = create_access_token(42, "s3cret", timedelta(minutes=5))

    with pytest.raises(AuthError, match="Invalid token"):
        get_user_id_from_token(token.rsplit(".", 1)[0] + ".bad-signature", "s3cret")


@pytest.mark.parametrize(
    "value, expected",
    [
        ("7d", timedelta(days=7)),
        ("12h", timedelta(hours=12)),
        ("30m", timedelta(minutes=30)),
        ("45s", timedelta(seconds=45)),
        ("3600", timedelta(hours=1)),
        (" 2D ", timedelta(days=2)),
    ],
)
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


def test_parse_duration_rejects_garbage():
    with pytest.raises(ValueError):
        parse_duration("one week")


def test_token_without_expiry_is_rejected():
    token = jwt.encode({"sub": "42"}, "s3cret", algorithm="HS256")

    with pytest.raises(AuthError, match="Authentication failed"):
        get_user_id_from_token(token, "s3cret")


def test_settings_require_jwt_secret(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)

    with pytest.raises(ValueError, match="JWT_SECRET"):
        Settings(_env_file=None)


def test_settings_reject_bad_bcrypt_rounds(monkeypatch):
    monkeypatch.setenv("BCRYPT_ROUNDS", "many")

    with pytest.raises(ValueError, match="BCRYPT_ROUNDS"):
        Settings(_env_file=None)


def test_settings_defaults_to_production(monkeypatch):
    monkeypatch.delenv("ENVIRONMENT", raising=False)

    settings = Settings(_env_file=None)

    assert settings.environment == "production"
    assert settings.is_production
    assert not settings.is_development


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "Production")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")
    monkeypatch.setenv("JWT_COOKIE_EXPIRES_IN", "2")
    monkeypatch.setenv("JWT_EXPIRES_IN", "12h")
    monkeypatch.setenv("CLOUDINARY_API_KEY", "")

    settings = Settings(_env_file=None)

    assert settings.is_production
    assert settings.cors_origins == ["https://a.example", "https://b.example"]
    assert settings.cookie_max_age == 2 * 24 * 60 * 60
    assert settings.jwt_expires_in == timedelta(hours=12)
    assert settings.cloudinary_api_key is None
    with pytest.raises(ValueError):
        settings.jwt_secret = "changed"


def test_production_cookie_is_secure(make_client, settings):
    production = settings.model_copy(update={"environment": "production"})
    app.dependency_overrides[get_settings] = lambda: production

    response = make_client().post(
        "/api/auth/register",
        json={"name": "Alice", "email": "alice@example.com", "password": "secret123"},
    )

    assert response.status_code == 201
    assert "; secure" in response.headers["set-cookie"].lower()


@pytest.fixture()
def cloud_settings(settings):
    return settings.model_copy(
        update={
            "cloudinary_cloud_name": "demo",
            "cloudinary_api_key": "key",
            "cloudinary_api_secret": "secret",
        }
    )


def test_uploader_sends_profile_options(cloud_settings, monkeypatch):
    calls = []

    def fake_upload(file, **options):
        calls.append((file, options))
        return {"secure_url": "https://res.cloudinary.com/demo/user-profiles/user-7.png"}

    monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)

    url = CloudinaryUploader(cloud_settings).upload(b"img", 7, filename="me.png")

    assert url == "https://res.cloudinary.com/demo/user-profiles/user-7.png"
    [(file, options)] = calls
    assert file == b"img"
    assert options["folder"] == "user-profiles"
    assert options["public_id"] == "user-7"
    assert options["overwrite"] is True
    assert options["transformation"] == PROFILE_TRANSFORMATION
    assert (options["cloud_name"], options["api_key"], options["api_secret"]) == (
        "demo",
        "key",
        "secret",
    )


def test_uploader_wraps_host_errors(cloud_settings, monkeypatch):
    def fake_upload(file, **options):
        raise cloudinary.exceptions.Error("Server returned unexpected status code - 502")

    monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)

    with pytest.raises(InternalError, match="Failed to upload image"):
        CloudinaryUploader(cloud_settings).upload(b"img", 7)


def test_uploader_requires_credentials(settings):
    with pytest.raises(InternalError, match="not configured"):
        CloudinaryUploader(settings).upload(b"img", 7)
