from dataclasses import dataclass

from flask import current_app

from .services.access_log import AccessLog
from .services.gate import Gate
from .services.links import LinkRegistry
from .services.pages import LandingPages
from .services.rate_limit import RateLimiter
from .services.tokens import TokenStore

EXTENSION_KEY = 'linkgate'


@dataclass
class GateState:
    links: LinkRegistry
    tokens: TokenStore
    pages: LandingPages
    access_log: AccessLog
    limiter: RateLimiter
    gate: Gate


def get_state() -> GateState:
    return current_app.extensions[EXTENSION_KEY]
