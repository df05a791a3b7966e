import functools
import hmac
import io

from flask import Blueprint, current_app, jsonify, request, send_file

from .extension import get_state
from .logging_conf import get_logger
from .services.links import InvalidTemplate
from .services.qr import make_qr_png

bp = Blueprint('admin', __name__)
logger = get_logger('linkgate.admin')


def require_admin_key(view):
    @functools.wraps(view)
    def wrapper(*args, **kwargs):
        expected = current_app.config.get('ADMIN_API_KEY') or ''
        api_key = request.headers.get('X-Admin-Key') or ''
        if not expected or not hmac.compare_digest(api_key.encode(), expected.encode()):
            logger.warning('admin.unauthorized',
                           extra={'event': 'admin_unauthorized', 'path': request.path})
            return jsonify({'error': 'unauthorized'}), 401
        return view(*args, **kwargs)
    return wrapper


def link_url(path_id: str) -> str:
    base = current_app.config.get('BASE_URL') or request.host_url
    return f"{base.rstrip('/')}/{path_id}"


@bp.post('/create-link')
@require_admin_key
def create_link():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    state = get_state()
    try:
        path_id = state.links.create(data.get('landingPage'))
    except InvalidTemplate:
        return jsonify({'error': 'Invalid landing page'}), 400

    url = link_url(path_id)
    state.access_log.record('NEW_LINK', path_id=path_id,
                            landing_page=data['landingPage'], url=url)

    if 'image/png' in request.headers.get('Accept', ''):
        resp = send_file(io.BytesIO(make_qr_png(url)), mimetype='image/png',
                         download_name=f'link_{path_id}.png', etag=False)
        resp.status_code = 201
        return resp
    return jsonify({'url': url, 'path_id': path_id}), 201


@bp.get('/pages')
@require_admin_key
def list_pages():
    return jsonify({'pages': sorted(get_state().links.allowed_pages)})
