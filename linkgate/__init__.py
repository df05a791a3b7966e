import time
import uuid

from dotenv import load_dotenv
from flask import Flask, g, request
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .extension import EXTENSION_KEY, GateState
from .logging_conf import get_logger, setup_logging
from .services.access_log import AccessLog
from .services.client_ip import client_ip
from .services.gate import Gate
from .services.links import LinkRegistry
from .services.pages import LandingPages
from .services.rate_limit import RateLimiter, RateLimitExceeded, make_counter_store
from .services.tokens import TokenStore

logger = get_logger('linkgate')


def create_app(overrides=None, clock=None):
    load_dotenv()
    app = Flask(__name__)
    app.config.from_object(Config())
    if overrides:
        app.config.update(overrides)

    setup_logging(app.config['LOG_LEVEL'])

    # Trust exactly TRUSTED_PROXY_HOPS reverse proxies for the client address
    hops = int(app.config['TRUSTED_PROXY_HOPS'])
    if hops > 0:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=1, x_host=1)

    _init_state(app, clock or time.time)
    _register_hooks(app)

    from .routes_public import bp as public_bp
    from .routes_admin import bp as admin_bp
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_blueprint(public_bp)

    @app.get('/health')
    def health():
        return {'ok': True}

    logger.info('startup', extra={'event': 'startup', 'trusted_proxy_hops': hops})
    return app


def _init_state(app, clock):
    cfg = app.config
    pages = LandingPages(cfg['LANDING_DIR'], cfg['LANDING_PAGES'])
    links = LinkRegistry(pages.allowed)
    tokens = TokenStore(
        ttl=cfg['TOKEN_TTL_SECONDS'],
        clock=clock,
        sweep_grace=cfg['TOKEN_SWEEP_GRACE_SECONDS'],
        sweep_interval=cfg['TOKEN_SWEEP_INTERVAL_SECONDS'],
    )
    access_log = AccessLog(maxlen=cfg['ACCESS_LOG_MAX'])
    limiter = RateLimiter(make_counter_store(cfg['REDIS_URL']),
                          limit=cfg['RATE_LIMIT_PER_MIN'], clock=clock)
    app.extensions[EXTENSION_KEY] = GateState(
        links=links,
        tokens=tokens,
        pages=pages,
        access_log=access_log,
        limiter=limiter,
        gate=Gate(links, tokens, pages, access_log),
    )


def _register_hooks(app):
    @app.before_request
    def _start_request():
        g.request_id = request.headers.get('X-Request-ID') or uuid.uuid4().hex
        g.started = time.perf_counter()
        if request.path != '/health':
            app.extensions[EXTENSION_KEY].limiter.check(client_ip())

    @app.after_request
    def _end_request(response):
        request_id = getattr(g, 'request_id', None)
        if request_id:
            response.headers['X-Request-ID'] = request_id
        started = getattr(g, 'started', None)
        elapsed_ms = (time.perf_counter() - started) * 1000.0 if started else 0.0
        logger.info(
            'request.end',
            extra={
                'event': 'request_end',
                'method': request.method,
                'path': request.path,
                'status_code': response.status_code,
                'elapsed_ms': round(elapsed_ms, 2),
                'request_id': request_id,
            },
        )
        return response

    @app.errorhandler(RateLimitExceeded)
    def _rate_limited(e):
        app.extensions[EXTENSION_KEY].access_log.record(
            'RATE_LIMIT_EXCEEDED', level='warning', ip=e.ip, path=request.path)
        return 'Too many requests. Try again later.', 429, {
            'Content-Type': 'text/plain',
            'Retry-After': str(e.retry_after),
            'RateLimit-Limit': str(e.limit),
            'RateLimit-Remaining': '0',
            'RateLimit-Reset': str(e.retry_after),
        }
