"""
Per-request control flow of the gate.

Each call to :func:`evaluate` runs one request through these steps and
produces exactly one :class:`.Outcome`:

- not a secure path: ``pass_through``, nothing else is consulted;
- no session identifier: ``missing_session`` (401);
- trust service allows the session: ``allowed``;
- trust service denies the session: ``denied`` (403, or the status given by
  the decision);
- trust service could not be asked: ``trust_service_unavailable`` (502).

The response bodies are fixed, so that clients learn nothing about why a
session was missing or what went wrong upstream.
"""

import json
import logging
from typing import Any, Optional

from werkzeug.wrappers import Request, Response

from .domain import Decision, Outcome, RequestDescriptor
from .exceptions import DecisionChannelError

logger = logging.getLogger(__name__)

FORBIDDEN = 403

MISSING_SESSION = Outcome(Outcome.MISSING_SESSION, 401,
                          {'error': 'missing_session'})
UNAVAILABLE = Outcome(Outcome.UNAVAILABLE, 502,
                      {'error': 'trust_service_unavailable'})
PASS_THROUGH = Outcome(Outcome.PASS_THROUGH)
ALLOWED = Outcome(Outcome.ALLOWED)


def describe(request: Request, path: Optional[str] = None,
             method: Optional[str] = None) -> RequestDescriptor:
    """
    Get a :class:`.RequestDescriptor` for a werkzeug or Flask request.

    ``path`` and ``method`` may be given to override those of the request, for
    example when authorizing a sub-request on behalf of another request.
    """
    return RequestDescriptor(
        path=path if path is not None else request.path,
        method=method if method is not None else request.method,
        cookie_header=request.headers.get('Cookie'),
        headers={name.lower(): value
                 for name, value in request.headers.items()}
    )


def evaluate(engine: Any, request: RequestDescriptor,
             header_name: Optional[str] = None) -> Outcome:
    """
    Decide whether a request may proceed.

    Parameters
    ----------
    engine : :class:`.DecisionEngine`
        Or anything else with ``is_secure``, ``extract_session_id`` and
        ``decide``.
    request : :class:`.RequestDescriptor`
    header_name : str or None
        Name of the request header that may carry the session identifier.

    Returns
    -------
    :class:`.Outcome`

    """
    if not engine.is_secure(request.path, request.method):
        return PASS_THROUGH

    header_value = None
    if header_name:
        header_value = request.headers.get(header_name.lower())
    session_id = engine.extract_session_id(request.cookie_header, header_name,
                                           header_value)
    if not session_id:
        logger.debug('No session on secure request %s %s', request.method,
                     request.path)
        return MISSING_SESSION

    try:
        decision: Decision = engine.decide(session_id)
    except DecisionChannelError as e:
        logger.warning('Trust service unavailable: %s', e)
        return UNAVAILABLE

    if decision.allow:
        return ALLOWED
    logger.debug('Request %s %s denied', request.method, request.path)
    return denied(decision)


def denied(decision: Decision) -> Outcome:
    """Generate the outcome for a negative decision."""
    body = {'error': 'forbidden'}
    if decision.message is not None:
        body['detail'] = decision.message
    status = decision.status if decision.status is not None else FORBIDDEN
    return Outcome(Outcome.DENIED, status, body)


def outcome_response(outcome: Outcome) -> Response:
    """Render an outcome that stops the request as a JSON response."""
    return Response(json.dumps(outcome.body), status=outcome.status,
                    mimetype='application/json')
