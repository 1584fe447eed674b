"""Provides an app factory for the authorizer service."""

from typing import Any, Mapping, Optional

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound

from . import routes
from .app_logging import setup_logger
from .domain import GateConfig
from .engine import DecisionEngine


def jsonify_exception(error: HTTPException):
    exc_resp = error.get_response()
    response = jsonify(reason=error.description)
    response.status_code = exc_resp.status_code
    return response


def create_app(config: Optional[Mapping[str, Any]] = None,
               engine: Optional[DecisionEngine] = None) -> Flask:
    """
    Initialize an instance of the authorizer service.

    Parameters
    ----------
    config : mapping
        Overrides for the parameters in :mod:`trustgate.config`.
    engine : :class:`.DecisionEngine`
        Use this engine instead of building one from the configuration.

    Raises
    ------
    :class:`.ConfigurationError`
        If the gate configuration is missing or invalid.

    """
    app = Flask('trustgate')
    app.config.from_pyfile('config.py')
    if config:
        app.config.update(config)
    setup_logger(app.config['LOG_LEVEL'])

    if engine is None:
        engine = DecisionEngine(GateConfig.from_mapping(app.config))
    app.extensions['trustgate'] = engine

    app.register_blueprint(routes.blueprint)
    app.errorhandler(NotFound)(jsonify_exception)
    app.errorhandler(MethodNotAllowed)(jsonify_exception)
    return app
