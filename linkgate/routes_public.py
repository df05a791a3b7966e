from flask import Blueprint, Response, abort, jsonify, redirect, request

from .extension import get_state
from .services.client_ip import client_ip
from .services.gate import Action

bp = Blueprint('public', __name__)

GATE_HEADERS = {'Cache-Control': 'no-store', 'Referrer-Policy': 'no-referrer'}


@bp.get('/__status')
def status():
    state = get_state()
    return jsonify({
        'status': 'ok',
        'tokens_in_memory': len(state.tokens),
        'links': len(state.links),
        'logs_in_memory': len(state.access_log),
    })


@bp.get('/<path_id>')
def gated_link(path_id: str):
    decision = get_state().gate.handle(path_id, request.args.get('token'), client_ip())

    if decision.action is Action.PASS:
        abort(404)

    if decision.action is Action.REDIRECT:
        resp = redirect(decision.location, code=302)
    else:
        resp = Response(decision.body, mimetype='text/html')
    resp.headers.update(GATE_HEADERS)
    return resp
