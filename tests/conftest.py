import pytest

from linkgate import create_app

from helpers import ADMIN_KEY


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def overrides(tmp_path):
    return {
        'TESTING': True,
        'ADMIN_API_KEY': ADMIN_KEY,
        'BASE_URL': 'https://links.example',
        'TOKEN_TTL_SECONDS': 600,
        'RATE_LIMIT_PER_MIN': 0,
        'REDIS_URL': None,
        'TRUSTED_PROXY_HOPS': 1,
    }


@pytest.fixture
def app(overrides, clock):
    return create_app(overrides, clock=clock)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers():
    return {'X-Admin-Key': ADMIN_KEY}
