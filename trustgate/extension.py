"""Flask integration for the gate."""

import logging
from typing import Optional

from flask import Flask, request
from werkzeug.wrappers import Response

from . import gate
from .domain import GateConfig
from .engine import DecisionEngine

logger = logging.getLogger(__name__)


class Gate(object):
    """
    Authorizes requests before they reach the view functions of an app.

    Intended for use in a Flask application factory, for example:

    .. code-block:: python

       from flask import Flask
       from trustgate.extension import Gate
       from someapp import routes


       def create_web_app() -> Flask:
          app = Flask('someapp')
          app.config.from_pyfile('config.py')
          Gate(app)   # Reads the gate parameters from app.config.
          app.register_blueprint(routes.blueprint)
          return app

    The engine is built once, in :meth:`init_app`. A bad configuration
    therefore fails when the app is created rather than on the first request.
    """

    def __init__(self, app: Optional[Flask] = None,
                 engine: Optional[DecisionEngine] = None) -> None:
        self.engine = engine
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """
        Build the decision engine and attach :meth:`authorize` to the app.

        Raises
        ------
        :class:`.ConfigurationError`
            If the gate parameters in ``app.config`` are missing or invalid.

        """
        if self.engine is None:
            self.engine = DecisionEngine(GateConfig.from_mapping(app.config))
        app.extensions['trustgate'] = self.engine
        app.before_request(self.authorize)

    def authorize(self) -> Optional[Response]:
        """
        Evaluate the current request.

        Anything other than ``None`` is treated by Flask as the response, and
        request handling stops there.
        """
        assert self.engine is not None
        outcome = gate.evaluate(self.engine, gate.describe(request),
                                self.engine.header_name)
        if outcome.proceeds:
            return None
        logger.info('Request stopped by gate: %s', outcome.kind)
        response: Response = gate.outcome_response(outcome)
        return response
