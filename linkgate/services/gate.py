"""Token gate in front of generated links.

A visit to /<path_id> moves through:

    no token  ->  token issued (redirect)
    bad token ->  token rotated (redirect)
    good token -> token consumed, landing page served

Unknown path ids pass through untouched.
"""
import enum
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

from .access_log import AccessLog, short
from .links import LinkRegistry
from .pages import LandingPages
from .tokens import TokenStatus, TokenStore


class Action(str, enum.Enum):
    PASS = 'pass'
    REDIRECT = 'redirect'
    SERVE = 'serve'


@dataclass
class GateDecision:
    action: Action
    location: Optional[str] = None
    body: Optional[str] = None
    landing_page: Optional[str] = None
    status: Optional[TokenStatus] = None


def token_location(path_id: str, token_value: str) -> str:
    return f'/{path_id}?{urlencode({"token": token_value})}'


class Gate:
    def __init__(self, links: LinkRegistry, tokens: TokenStore, pages: LandingPages,
                 access_log: AccessLog):
        self.links = links
        self.tokens = tokens
        self.pages = pages
        self.access_log = access_log

    def handle(self, path_id: str, token_value: Optional[str], ip: str) -> GateDecision:
        landing_page = self.links.lookup(path_id)
        if landing_page is None:
            return GateDecision(Action.PASS)

        status = self.tokens.redeem(token_value, ip)

        if status is TokenStatus.UNKNOWN:
            new = self.tokens.issue(ip)
            self.access_log.record('TOKEN_ISSUED', path_id=path_id, ip=ip,
                                   token=short(new.value),
                                   presented=bool(token_value))
            return GateDecision(Action.REDIRECT, location=token_location(path_id, new.value),
                                landing_page=landing_page, status=status)

        if status is not TokenStatus.VALID:
            # redeem() has already invalidated the presented token
            new = self.tokens.issue(ip)
            self.access_log.record('TOKEN_ROTATED', path_id=path_id, ip=ip,
                                   old=short(token_value), new=short(new.value),
                                   reason=status.value)
            return GateDecision(Action.REDIRECT, location=token_location(path_id, new.value),
                                landing_page=landing_page, status=status)

        self.access_log.record('TOKEN_CONSUMED', path_id=path_id, ip=ip,
                               token=short(token_value), landing_page=landing_page)
        body, from_fallback = self.pages.load(landing_page)
        if from_fallback:
            self.access_log.record('TEMPLATE_FALLBACK', level='warning',
                                   path_id=path_id, landing_page=landing_page)
        return GateDecision(Action.SERVE, body=body, landing_page=landing_page, status=status)
