# ==============================================
# Tests for NonceManager
# ==============================================

import pytest

from fieldmeta.config import AppConfig, NonceConfig
from fieldmeta.security import NonceManager


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


class TestNonceManager:
    def test_create_is_ten_hex_chars(self, nonce):
        token = nonce.create("save")
        assert len(token) == 10
        int(token, 16)

    def test_verify_round_trip(self, nonce):
        assert nonce.verify(nonce.create("save"), "save") is True

    def test_verify_rejects_other_action(self, nonce):
        assert nonce.verify(nonce.create("save"), "delete") is False

    def test_verify_rejects_empty_and_non_string(self, nonce):
        assert nonce.verify("", "save") is False
        assert nonce.verify(None, "save") is False
        assert nonce.verify(["x"], "save") is False

    def test_token_depends_on_user(self):
        clock = Clock(1000.0)
        alice = NonceManager("s", clock=clock, user_id=1)
        bob = NonceManager("s", clock=clock, user_id=2)
        assert bob.verify(alice.create("save"), "save") is False

    def test_token_valid_for_next_tick_only(self):
        clock = Clock(10_000.0)
        manager = NonceManager("s", lifetime=100, clock=clock)
        token = manager.create("save")

        clock.now += 50
        assert manager.verify(token, "save") is True

        clock.now += 50
        assert manager.verify(token, "save") is False

    def test_field_markup(self, nonce):
        html = nonce.field("save", "my-nonce")
        assert html == (
            f'<input type="hidden" id="my-nonce" name="my-nonce" '
            f'value="{nonce.create("save")}" />'
        )

    def test_invalid_settings(self):
        with pytest.raises(ValueError):
            NonceManager("")
        with pytest.raises(ValueError):
            NonceManager("s", lifetime=1)

    def test_from_config(self):
        config = AppConfig(nonce=NonceConfig(secret="cfg", lifetime=600))
        manager = NonceManager.from_config(config)
        assert manager.lifetime == 600
        assert manager.secret == b"cfg"
