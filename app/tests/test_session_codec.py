"""Tests for the signed session token codec."""

import base64
import json
import time

import pytest

from app.services.session_codec import (
    BadSignature,
    EmptyIdentity,
    MalformedToken,
    SESSION_TTL,
    SessionCodec,
    SessionUser,
    TokenExpired,
)


@pytest.fixture()
def codec() -> SessionCodec:
    return SessionCodec("unit-test-secret")


def make_user(**overrides) -> SessionUser:
    values = {
        "discord_id": "123456789",
        "username": "Player One",
        "avatar_url": "https://cdn.discordapp.com/avatars/123456789/abc.png",
    }
    values.update(overrides)
    return SessionUser(**values)


def flip_char(value: str, index: int) -> str:
    replacement = "0" if value[index] != "0" else "1"
    return value[:index] + replacement + value[index + 1 :]


class TestEncode:
    def test_round_trip(self, codec: SessionCodec):
        user = make_user(exp=int(time.time()) + 3600)
        assert codec.decode(codec.encode(user)) == user

    def test_token_shape(self, codec: SessionCodec):
        token = codec.encode(make_user())
        payload, sig = token.split(".")
        assert "=" not in payload
        assert len(sig) == 64
        int(sig, 16)

    def test_payload_is_canonical_json(self, codec: SessionCodec):
        token = codec.encode(make_user(exp=1900000000))
        payload = token.split(".")[0]
        raw = base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4))
        assert json.loads(raw) == {
            "discord_id": "123456789",
            "username": "Player One",
            "avatar_url": "https://cdn.discordapp.com/avatars/123456789/abc.png",
            "exp": 1900000000,
        }

    def test_default_expiry_is_thirty_days(self, codec: SessionCodec):
        before = time.time()
        decoded = codec.decode(codec.encode(make_user()))
        expected = before + SESSION_TTL.total_seconds()
        assert expected - 5 <= decoded.exp <= expected + 5

    def test_empty_identity_rejected(self, codec: SessionCodec):
        with pytest.raises(EmptyIdentity):
            codec.encode(make_user(discord_id=""))


class TestDecode:
    def test_flipped_signature_byte(self, codec: SessionCodec):
        token = codec.encode(make_user())
        payload, sig = token.split(".")
        for index in (0, 17, len(sig) - 1):
            with pytest.raises(BadSignature):
                codec.decode(f"{payload}.{flip_char(sig, index)}")

    def test_tampered_payload(self, codec: SessionCodec):
        other = codec.encode(make_user(discord_id="999"))
        token = codec.encode(make_user())
        forged = other.split(".")[0] + "." + token.split(".")[1]
        with pytest.raises(BadSignature):
            codec.decode(forged)

    def test_other_secret(self, codec: SessionCodec):
        token = SessionCodec("another-secret").encode(make_user())
        with pytest.raises(BadSignature):
            codec.decode(token)

    def test_expired_token(self, codec: SessionCodec):
        token = codec.encode(make_user(exp=int(time.time()) - 10))
        with pytest.raises(TokenExpired):
            codec.decode(token)

    @pytest.mark.parametrize(
        "token",
        ["", "no-separator", "a.b.c", "payload.not-hex", "payload.abc"],
    )
    def test_malformed(self, codec: SessionCodec, token: str):
        with pytest.raises(MalformedToken):
            codec.decode(token)

    def test_signed_garbage_payload(self, codec: SessionCodec):
        payload = base64.urlsafe_b64encode(b"not json").rstrip(b"=").decode()
        token = f"{payload}.{codec._sign(payload).hex()}"
        with pytest.raises(MalformedToken):
            codec.decode(token)

    def test_signed_empty_identity(self, codec: SessionCodec):
        raw = json.dumps({"discord_id": "", "username": "x", "avatar_url": "", "exp": 0})
        payload = base64.urlsafe_b64encode(raw.encode()).rstrip(b"=").decode()
        token = f"{payload}.{codec._sign(payload).hex()}"
        with pytest.raises(EmptyIdentity):
            codec.decode(token)

    def test_load_treats_failures_as_no_session(self, codec: SessionCodec):
        assert codec.load(None) is None
        assert codec.load("garbage") is None
        assert codec.load(codec.encode(make_user(exp=1))) is None
        assert codec.load(codec.encode(make_user())).discord_id == "123456789"


class TestSecret:
    def test_empty_secret_is_flagged_insecure(self):
        assert SessionCodec("").insecure is True
        assert SessionCodec("  ").insecure is True
        assert SessionCodec("real-secret").insecure is False

    def test_insecure_fallback_still_signs(self):
        codec = SessionCodec("")
        user = make_user()
        assert codec.decode(codec.encode(user)).discord_id == user.discord_id
