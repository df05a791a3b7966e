import enum
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .links import new_id

TOKEN_BYTES = 32


class TokenStatus(str, enum.Enum):
    VALID = 'valid'
    UNKNOWN = 'unknown'
    EXPIRED = 'expired'
    ALREADY_USED = 'already_used'
    IP_MISMATCH = 'ip_mismatch'


@dataclass
class Token:
    value: str
    created_at: float
    bound_ip: str
    ttl: float
    consumed: bool = False

    def classify(self, ip: str, now: float) -> TokenStatus:
        # Order matters for the access log: used before expired before IP
        if self.consumed:
            return TokenStatus.ALREADY_USED
        if now - self.created_at > self.ttl:
            return TokenStatus.EXPIRED
        if self.bound_ip != ip:
            return TokenStatus.IP_MISMATCH
        return TokenStatus.VALID


class TokenStore:
    """In-memory single-use access tokens bound to a client IP.

    Every read and write goes through one lock. Stale entries are swept on
    access from issue(): a token is dropped only once it is older than its
    TTL plus `sweep_grace` seconds, so validate() answers the same for any
    token still inside its TTL.
    """

    def __init__(
        self,
        ttl: float,
        clock: Callable[[], float] = time.time,
        id_gen: Callable[[int], str] = new_id,
        sweep_grace: float = 3600,
        sweep_interval: float = 60,
    ):
        self.ttl = ttl
        self.sweep_grace = sweep_grace
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._id_gen = id_gen
        self._tokens: dict[str, Token] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def issue(self, ip: str) -> Token:
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self.sweep_interval:
                self._sweep(now)
            value = self._id_gen(TOKEN_BYTES)
            while value in self._tokens:
                value = self._id_gen(TOKEN_BYTES)
            tok = Token(value=value, created_at=now, bound_ip=ip, ttl=self.ttl)
            self._tokens[value] = tok
            return tok

    def get(self, value: str) -> Optional[Token]:
        with self._lock:
            return self._tokens.get(value)

    def validate(self, value: Optional[str], ip: str) -> TokenStatus:
        with self._lock:
            return self._classify(value, ip, self._clock())

    def consume(self, value: str) -> None:
        with self._lock:
            tok = self._tokens.get(value)
            if tok is not None:
                tok.consumed = True

    def redeem(self, value: Optional[str], ip: str) -> TokenStatus:
        """Classify and invalidate a presented token in one step.

        Any known token is marked consumed whatever its classification, so
        of two requests racing on the same valid token exactly one sees VALID.
        """
        with self._lock:
            status = self._classify(value, ip, self._clock())
            if status is not TokenStatus.UNKNOWN:
                self._tokens[value].consumed = True
            return status

    def sweep(self) -> int:
        with self._lock:
            return self._sweep(self._clock())

    def __len__(self):
        with self._lock:
            return len(self._tokens)

    def _classify(self, value, ip, now) -> TokenStatus:
        tok = self._tokens.get(value) if value else None
        if tok is None:
            return TokenStatus.UNKNOWN
        return tok.classify(ip, now)

    def _sweep(self, now: float) -> int:
        horizon = self.ttl + self.sweep_grace
        stale = [v for v, t in self._tokens.items() if now - t.created_at > horizon]
        for v in stale:
            del self._tokens[v]
        self._last_sweep = now
        return len(stale)
