"""
The decision engine that the gate consults.

:class:`DecisionEngine` bundles path classification, session extraction and
the trust-service client behind the three operations that
:func:`trustgate.gate.evaluate` needs: ``is_secure``, ``extract_session_id``
and ``decide``. Anything with those methods can stand in for it, e.g. in
tests.

An engine is built once from a :class:`.GateConfig` and shared by all
requests. It holds no per-request state.
"""

import logging
from typing import Any, Optional

from .classifier import PathClassifier
from .domain import Decision, GateConfig
from .sessions import extract_session_id
from .services.trust import Retrying, TrustServiceSession

logger = logging.getLogger(__name__)


class DecisionEngine(object):
    """Answers the gate's questions about a request."""

    def __init__(self, config: GateConfig, client: Optional[Any] = None) \
            -> None:
        """
        Set up the engine.

        Parameters
        ----------
        config : :class:`.GateConfig`
        client : object
            Provides ``decide(session_id)``. Defaults to a
            :class:`.TrustServiceSession` built from ``config``, wrapped in
            :class:`.Retrying` if ``config.retries`` is set.

        Raises
        ------
        :class:`.ConfigurationError`
            If a secure route cannot be compiled.

        """
        self.config = config
        self.classifier = PathClassifier(config.secure_routes)
        if client is None:
            client = TrustServiceSession.from_config(config)
            if config.retries > 0:
                client = Retrying(client, tries=config.retries + 1)
        self.client = client
        logger.debug('Decision engine ready with %i secure routes',
                     len(config.secure_routes))

    @property
    def header_name(self) -> Optional[str]:
        """Name of the request header that may carry the session identifier."""
        return self.config.session_extraction.header_name

    def is_secure(self, path: str, method: str) -> bool:
        return self.classifier.is_secure(path, method)

    def extract_session_id(self, cookie_header: Optional[str],
                           header_name: Optional[str],
                           header_value: Optional[str]) -> Optional[str]:
        return extract_session_id(self.config.session_extraction,
                                  cookie_header, header_name, header_value)

    def decide(self, session_id: str) -> Decision:
        """
        Get a verdict on the session from the trust service.

        Raises
        ------
        :class:`.DecisionChannelError`

        """
        decision: Decision = self.client.decide(session_id)
        return decision
