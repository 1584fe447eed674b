"""Routes for the authorizer service."""
import logging

from flask import Blueprint, Response, current_app, request, jsonify

from . import gate

logger = logging.getLogger(__name__)

blueprint = Blueprint('authorizer', __name__, url_prefix='')


@blueprint.route('/auth', methods=['GET'])
def authorize() -> Response:
    """
    Authorize the request on whose behalf NGINX issued this sub-request.

    NGINX passes the original request line in ``X-Original-URI`` and
    ``X-Original-Method``, along with the original cookies and headers.
    """
    engine = current_app.extensions['trustgate']
    original_uri = request.headers.get('X-Original-URI')
    path = None
    if original_uri is not None:
        path = original_uri.split('?', 1)[0]
    method = request.headers.get('X-Original-Method')

    outcome = gate.evaluate(engine, gate.describe(request, path, method),
                            engine.header_name)
    if outcome.proceeds:
        logger.debug('Authorized: %s', outcome.kind)
        response: Response = jsonify({})
        return response
    logger.info('Not authorized: %s', outcome.kind)
    response = jsonify(outcome.body)
    response.status_code = outcome.status
    return response
