"""WSGI middleware that puts the gate in front of an application."""

import logging
from typing import Any, Callable, Iterable

from werkzeug.wrappers import Request

from . import gate
from .engine import DecisionEngine

logger = logging.getLogger(__name__)


class GateMiddleware(object):
    """
    Authorizes each request before handing it to the wrapped application.

    Requests that are not secure, or that the trust service allows, are
    passed on unchanged. Any other request is answered here with the JSON
    response for its outcome, and the application is never called.

    .. code-block:: python

       engine = DecisionEngine(GateConfig.from_mapping(app.config))
       app.wsgi_app = GateMiddleware(app.wsgi_app, engine)

    """

    def __init__(self, wsgi_app: Callable, engine: DecisionEngine) -> None:
        self.app = wsgi_app
        self.engine = engine

    def __call__(self, environ: dict, start_response: Callable) \
            -> Iterable[Any]:
        request = Request(environ)
        outcome = gate.evaluate(self.engine, gate.describe(request),
                                self.engine.header_name)
        if outcome.proceeds:
            return self.app(environ, start_response)
        logger.info('Request stopped by gate: %s', outcome.kind)
        response = gate.outcome_response(outcome)
        return response(environ, start_response)
