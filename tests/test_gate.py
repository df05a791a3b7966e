import threading

import pytest

from linkgate.services.access_log import AccessLog
from linkgate.services.gate import Action, Gate
from linkgate.services.links import LinkRegistry
from linkgate.services.pages import FALLBACK_PAGES, LandingPages
from linkgate.services.tokens import TokenStatus, TokenStore

IP = '203.0.113.7'


@pytest.fixture
def landing_dir(tmp_path):
    (tmp_path / 'welcome.html').write_text('<h1>from disk</h1>', encoding='utf-8')
    return tmp_path


@pytest.fixture
def gate(clock, landing_dir):
    pages = LandingPages(str(landing_dir))
    links = LinkRegistry(pages.allowed)
    tokens = TokenStore(ttl=60, clock=clock)
    return Gate(links, tokens, pages, AccessLog())


def events(gate):
    return [e['event'] for e in gate.access_log.entries()]


def test_unknown_path_passes_through(gate):
    decision = gate.handle('0000000000000000', None, IP)
    assert decision.action is Action.PASS
    assert len(gate.tokens) == 0
    assert events(gate) == []


def test_no_token_issues_and_redirects(gate):
    path_id = gate.links.create('welcome.html')
    decision = gate.handle(path_id, None, IP)
    assert decision.action is Action.REDIRECT
    assert decision.location.startswith(f'/{path_id}?token=')
    value = decision.location.split('token=')[1]
    assert gate.tokens.get(value).bound_ip == IP
    assert events(gate) == ['TOKEN_ISSUED']


def test_unknown_token_issues_without_rotation(gate):
    path_id = gate.links.create('welcome.html')
    decision = gate.handle(path_id, 'made-up', IP)
    assert decision.action is Action.REDIRECT
    assert decision.status is TokenStatus.UNKNOWN
    assert events(gate) == ['TOKEN_ISSUED']


def test_valid_token_serves_page_from_disk(gate):
    path_id = gate.links.create('welcome.html')
    tok = gate.tokens.issue(IP)
    decision = gate.handle(path_id, tok.value, IP)
    assert decision.action is Action.SERVE
    assert decision.body == '<h1>from disk</h1>'
    assert tok.consumed is True
    assert events(gate) == ['TOKEN_CONSUMED']


def test_missing_file_serves_fallback(gate):
    path_id = gate.links.create('invite.html')
    tok = gate.tokens.issue(IP)
    decision = gate.handle(path_id, tok.value, IP)
    assert decision.action is Action.SERVE
    assert decision.body == FALLBACK_PAGES['invite.html']
    assert events(gate) == ['TOKEN_CONSUMED', 'TEMPLATE_FALLBACK']


@pytest.mark.parametrize('setup, reason', [
    ('consumed', TokenStatus.ALREADY_USED),
    ('expired', TokenStatus.EXPIRED),
    ('other_ip', TokenStatus.IP_MISMATCH),
])
def test_bad_tokens_are_rotated(gate, clock, setup, reason):
    path_id = gate.links.create('welcome.html')
    old = gate.tokens.issue('198.51.100.20' if setup == 'other_ip' else IP)
    if setup == 'consumed':
        gate.tokens.consume(old.value)
    elif setup == 'expired':
        clock.advance(61)

    decision = gate.handle(path_id, old.value, IP)

    assert decision.action is Action.REDIRECT
    assert decision.status is reason
    new_value = decision.location.split('token=')[1]
    assert new_value != old.value
    assert old.consumed is True
    assert gate.tokens.validate(new_value, IP) is TokenStatus.VALID
    rotated = gate.access_log.entries()[-1]
    assert rotated['event'] == 'TOKEN_ROTATED'
    assert rotated['reason'] == reason.value


def test_tokens_are_not_tied_to_a_link(gate):
    first = gate.links.create('welcome.html')
    second = gate.links.create('invite.html')
    tok_value = gate.handle(first, None, IP).location.split('token=')[1]
    assert gate.handle(second, tok_value, IP).action is Action.SERVE


def test_concurrent_visits_with_one_token_serve_once(gate):
    path_id = gate.links.create('welcome.html')
    tok = gate.tokens.issue(IP)
    workers = 8
    barrier = threading.Barrier(workers)
    actions = []
    lock = threading.Lock()

    def visit():
        barrier.wait()
        decision = gate.handle(path_id, tok.value, IP)
        with lock:
            actions.append(decision.action)

    threads = [threading.Thread(target=visit) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert actions.count(Action.SERVE) == 1
    assert actions.count(Action.REDIRECT) == workers - 1


def test_log_entries_do_not_carry_full_token_values(gate):
    path_id = gate.links.create('welcome.html')
    value = gate.handle(path_id, None, IP).location.split('token=')[1]
    gate.handle(path_id, value, IP)
    for entry in gate.access_log.entries():
        assert value not in entry.values()
