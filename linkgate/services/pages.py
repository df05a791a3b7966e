import os
from typing import Iterable, Optional

from werkzeug.security import safe_join

# Minimal documents served when a landing file is absent from LANDING_DIR
FALLBACK_PAGES = {
    'welcome.html': '<!doctype html><title>Welcome</title><h1>Welcome</h1>',
    'invite.html': '<!doctype html><title>Invitation</title><h1>You are invited</h1>',
    'download.html': '<!doctype html><title>Download</title><h1>Your download is ready</h1>',
    'notice.html': '<!doctype html><title>Notice</title><h1>Notice</h1>',
    'event.html': '<!doctype html><title>Event</title><h1>Event details</h1>',
}

GENERIC_FALLBACK = '<!doctype html><title>{name}</title><h1>{name}</h1>'


class LandingPages:
    """Loads landing templates from a directory, with built-in fallbacks."""

    def __init__(self, directory: str, allowed: Optional[Iterable[str]] = None):
        self.directory = directory
        self.allowed = tuple(allowed) if allowed else tuple(FALLBACK_PAGES)

    def load(self, name: str) -> tuple[str, bool]:
        """Return (html, from_fallback) for a landing page name."""
        path = safe_join(self.directory, name)
        if path is not None and os.path.isfile(path):
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    return f.read(), False
            except OSError:
                pass
        return self.fallback(name), True

    @staticmethod
    def fallback(name: str) -> str:
        if name in FALLBACK_PAGES:
            return FALLBACK_PAGES[name]
        title = os.path.splitext(name)[0].replace('-', ' ').replace('_', ' ').title()
        return GENERIC_FALLBACK.format(name=title)
