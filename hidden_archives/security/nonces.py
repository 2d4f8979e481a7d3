import hashlib
import hmac
import math
import time
from typing import Callable, Optional


class NonceManager:
    """
    Per-action, per-actor anti-forgery tokens.

    A token is an HMAC of (tick, action, user id) where the tick advances
    every half lifetime; a token verifies during the tick it was issued in
    and the one after, so it lives between lifetime/2 and lifetime seconds.
    """

    TOKEN_LENGTH = 12

    def __init__(self, secret_key: str, lifetime: int = 86400, clock: Callable[[], float] = time.time):
        if not secret_key:
            raise ValueError("NonceManager requires a secret key")
        if lifetime < 2:
            raise ValueError("Nonce lifetime must be at least 2 seconds")
        self._secret = secret_key.encode() if isinstance(secret_key, str) else secret_key
        self.lifetime = lifetime
        self._clock = clock

    def tick(self) -> int:
        return math.ceil(self._clock() / (self.lifetime / 2))

    def _digest(self, tick: int, action: str, user_id: Optional[str]) -> str:
        message = f"{tick}|{action}|{user_id or 0}".encode()
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()[: self.TOKEN_LENGTH]

    def create(self, action: str, user_id: Optional[str]) -> str:
        return self._digest(self.tick(), action, user_id)

    def verify(self, token: Optional[str], action: str, user_id: Optional[str]) -> bool:
        if not token:
            return False
        current = self.tick()
        for tick in (current, current - 1):
            if hmac.compare_digest(self._digest(tick, action, user_id), str(token)):
                return True
        return False
