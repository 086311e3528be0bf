# ==============================================
# NonceManager
# ==============================================
#
# PURPOSE:
#   Create and verify short-lived anti-forgery tokens bound to an
#   action string (e.g. "fieldmanager-save-my_meta_box").
#
# HOW IT WORKS:
#   Time is cut into ticks of lifetime / 2 seconds. A nonce is the
#   first 10 hex chars of HMAC-SHA256(secret, "tick|action|user_id").
#   A nonce verifies during the tick it was made in and the next
#   one, so it lives between lifetime / 2 and lifetime seconds.
#
# CLASS: NonceManager
# -------------------
#   - __init__(secret, lifetime=86400, user_id=0, clock=time.time)
#   - tick() -> int
#   - create(action) -> str
#   - verify(nonce, action) -> bool
#   - field(action, name) -> str     (hidden <input> markup)
#
# ==============================================

import hashlib
import hmac
import math
import time
from html import escape
from typing import Callable, Optional

from fieldmeta.config import AppConfig, get_config


class NonceManager:
    def __init__(self, secret: str, lifetime: int = 86400, user_id=0,
                 clock: Callable[[], float] = time.time):
        if not secret:
            raise ValueError("Nonce secret must not be empty")
        if lifetime < 2:
            raise ValueError("Nonce lifetime must be at least 2 seconds")
        self.secret = secret.encode("utf-8")
        self.lifetime = lifetime
        self.user_id = user_id
        self._clock = clock

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None, user_id=0) -> 'NonceManager':
        config = config or get_config()
        return cls(config.nonce.secret, config.nonce.lifetime, user_id=user_id)

    def tick(self) -> int:
        return math.ceil(self._clock() / (self.lifetime / 2))

    def _hash(self, tick: int, action: str) -> str:
        message = f"{tick}|{action}|{self.user_id}".encode("utf-8")
        return hmac.new(self.secret, message, hashlib.sha256).hexdigest()[:10]

    def create(self, action: str) -> str:
        return self._hash(self.tick(), action)

    def verify(self, nonce, action: str) -> bool:
        """
        Check a submitted nonce against the current and previous tick.

        Args:
            nonce: Token taken from the request
            action: Action the token must have been created for

        Returns:
            True if the token is valid, False otherwise
        """
        if not nonce or not isinstance(nonce, str):
            return False

        tick = self.tick()
        for candidate_tick in (tick, tick - 1):
            if hmac.compare_digest(self._hash(candidate_tick, action), nonce):
                return True
        return False

    def field(self, action: str, name: str) -> str:
        # Hidden input carrying a fresh nonce
        name = escape(name, quote=True)
        return (
            f'<input type="hidden" id="{name}" name="{name}" '
            f'value="{self.create(action)}" />'
        )
