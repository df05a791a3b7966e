import secrets
import threading
from typing import Callable, Iterable, Optional

PATH_ID_BYTES = 8


class InvalidTemplate(ValueError):
    """Landing page name is not in the registry's allow-list."""

    def __init__(self, landing_page):
        super().__init__(f'invalid landing page: {landing_page!r}')
        self.landing_page = landing_page


def new_id(nbytes: int) -> str:
    return secrets.token_hex(nbytes)


class LinkRegistry:
    """Maps opaque path ids to landing page names.

    Grows monotonically; entries live for the process lifetime.
    """

    def __init__(self, allowed_pages: Iterable[str], id_gen: Callable[[int], str] = new_id):
        self.allowed_pages = frozenset(allowed_pages)
        self._id_gen = id_gen
        self._links: dict[str, str] = {}
        self._lock = threading.Lock()

    def create(self, landing_page: str) -> str:
        if not isinstance(landing_page, str) or landing_page not in self.allowed_pages:
            raise InvalidTemplate(landing_page)
        with self._lock:
            path_id = self._id_gen(PATH_ID_BYTES)
            while path_id in self._links:
                path_id = self._id_gen(PATH_ID_BYTES)
            self._links[path_id] = landing_page
        return path_id

    def lookup(self, path_id: str) -> Optional[str]:
        with self._lock:
            return self._links.get(path_id)

    def __len__(self):
        with self._lock:
            return len(self._links)
