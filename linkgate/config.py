import os

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f'{name} must be an integer') from e


def _list_env(name: str):
    raw = os.environ.get(name, '')
    items = [p.strip() for p in raw.split(',') if p.strip()]
    return items or None


class Config:
    """Settings read from the environment when the object is built.

    Built inside create_app() so values from a .env file and from test
    monkeypatching are both picked up.
    """

    def __init__(self):
        self.SECRET_KEY = os.environ.get('SECRET_KEY', 'dev')
        self.BASE_URL = os.environ.get('BASE_URL')
        self.ADMIN_API_KEY = os.environ.get('ADMIN_API_KEY')
        self.REDIS_URL = os.environ.get('REDIS_URL')
        self.LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

        self.TOKEN_TTL_SECONDS = _int_env('TOKEN_TTL_MIN', 10) * 60
        self.TOKEN_SWEEP_GRACE_SECONDS = _int_env('TOKEN_SWEEP_GRACE_SECONDS', 3600)
        self.TOKEN_SWEEP_INTERVAL_SECONDS = _int_env('TOKEN_SWEEP_INTERVAL_SECONDS', 60)
        self.LANDING_DIR = os.environ.get('LANDING_DIR') or os.path.join(PACKAGE_DIR, 'landing')
        # None means "every page that has a built-in fallback"
        self.LANDING_PAGES = _list_env('LANDING_PAGES')
        self.TRUSTED_PROXY_HOPS = _int_env('TRUSTED_PROXY_HOPS', 1)
        self.RATE_LIMIT_PER_MIN = _int_env('RATE_LIMIT_PER_MIN', 60)
        self.ACCESS_LOG_MAX = _int_env('ACCESS_LOG_MAX', 10000)

        # Optional fallbacks to support Secret Files on Render (/etc/secrets)
        if self.SECRET_KEY == 'dev':
            try:
                with open('/etc/secrets/secret_key', 'r') as f:
                    self.SECRET_KEY = f.read().strip()
            except OSError:
                pass
        if not self.ADMIN_API_KEY:
            try:
                with open('/etc/secrets/admin_api_key', 'r') as f:
                    self.ADMIN_API_KEY = f.read().strip()
            except OSError:
                pass
