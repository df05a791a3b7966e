import threading
from collections import deque
from datetime import datetime, timezone

from ..logging_conf import get_logger

logger = get_logger('linkgate.access')


def short(token_value) -> str:
    """Log-safe prefix of a token value."""
    if not token_value:
        return ''
    return token_value[:8] + '...'


class AccessLog:
    """Bounded, append-only record of gate decisions.

    Each entry is also emitted on the `linkgate.access` logger.
    """

    def __init__(self, maxlen: int = 10000):
        self._entries = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def record(self, event: str, level: str = 'info', **fields) -> dict:
        entry = {
            'ts': datetime.now(timezone.utc).isoformat(timespec='milliseconds'),
            'event': event,
            **fields,
        }
        with self._lock:
            self._entries.append(entry)
        getattr(logger, level)(event, extra={'event': event, **fields})
        return entry

    def entries(self) -> list:
        with self._lock:
            return list(self._entries)

    def __len__(self):
        with self._lock:
            return len(self._entries)
