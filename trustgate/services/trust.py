"""
Integration with the trust service.

The trust service scores sessions. We ask it about one session at a time::

    GET {api_base_url}{trust_endpoint}?sid={session_id}
    Authorization: Bearer {api_key}

and expect a JSON document like ``{"session_id": "...", "trust_score": 0.9,
"reason": null}``. A session that the service does not know about (404) has
a trust score of zero.

Any other failure to get a well-formed answer, including a timeout, is a
:class:`.DecisionChannelError`. There are no retries here; see
:class:`Retrying` for a policy that can be layered on top.
"""

import json
import logging
from typing import Any, Dict, Optional

import requests
from retry.api import retry_call

from ..domain import DEFAULT_TRUST_ENDPOINT, Decision, GateConfig, \
    TrustResponse
from ..exceptions import DecisionChannelError

logger = logging.getLogger(__name__)

UNKNOWN_SESSION = 'unknown_session'


class TrustServiceSession(object):
    """An HTTP session with the trust service."""

    def __init__(self, api_base_url: str, api_key: str,
                 min_trust_score: float, timeout_ms: int,
                 endpoint: str = DEFAULT_TRUST_ENDPOINT) -> None:
        """Create a new HTTP session."""
        self.url = f'{api_base_url.rstrip("/")}{endpoint}'
        self.min_trust_score = min_trust_score
        self.timeout = timeout_ms / 1000.
        self._session = requests.Session()
        self._session.headers.update({'Authorization': f'Bearer {api_key}'})
        logger.debug('New TrustServiceSession for %s', self.url)

    @classmethod
    def from_config(cls, config: GateConfig) -> 'TrustServiceSession':
        return cls(config.api_base_url, config.api_key,
                   config.min_trust_score, config.timeout_ms,
                   endpoint=config.trust_endpoint)

    def fetch_trust(self, session_id: str) -> TrustResponse:
        """
        Get the trust assessment of a session.

        Parameters
        ----------
        session_id : str

        Returns
        -------
        :class:`.TrustResponse`

        Raises
        ------
        :class:`.DecisionChannelError`
            If the service could not be reached in time, or responded with
            something other than a trust assessment.

        """
        try:
            response = self._session.get(self.url, params={'sid': session_id},
                                         timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise DecisionChannelError('Trust service timed out') from e
        except requests.exceptions.RequestException as e:
            raise DecisionChannelError(
                f'Trust service unreachable: {type(e).__name__}'
            ) from e

        if response.status_code == requests.codes.not_found:
            return TrustResponse(session_id=session_id, trust_score=0.,
                                 reason=UNKNOWN_SESSION)
        if not 200 <= response.status_code < 300:
            raise DecisionChannelError(
                f'Trust API error {response.status_code}'
            )
        try:
            data: Dict[str, Any] = response.json()
        except (json.decoder.JSONDecodeError, ValueError) as e:
            raise DecisionChannelError('Trust response is not JSON') from e
        return _to_trust_response(data, session_id)

    def decide(self, session_id: str) -> Decision:
        """
        Decide whether the session is trusted enough to proceed.

        Raises
        ------
        :class:`.DecisionChannelError`

        """
        trust = self.fetch_trust(session_id)
        if trust.trust_score >= self.min_trust_score:
            return Decision(allow=True)
        logger.debug('Trust score %s is below %s (%s)', trust.trust_score,
                     self.min_trust_score, trust.reason)
        return Decision(allow=False, status=403,
                        message=f'Low trust score: {trust.trust_score:g}')


class Retrying(object):
    """
    Retries decisions that failed because of the channel.

    Wraps anything with a ``decide(session_id)`` method. Only
    :class:`.DecisionChannelError` is retried; once ``tries`` is exhausted the
    last error propagates.
    """

    def __init__(self, client: Any, tries: int, delay: float = 0.1,
                 backoff: float = 2) -> None:
        self.client = client
        self.tries = tries
        self.delay = delay
        self.backoff = backoff

    def decide(self, session_id: str) -> Decision:
        decision: Decision = retry_call(
            self.client.decide, fargs=[session_id],
            exceptions=DecisionChannelError, tries=self.tries,
            delay=self.delay, backoff=self.backoff, logger=None
        )
        return decision


def _to_trust_response(data: Any, session_id: str) -> TrustResponse:
    if not isinstance(data, dict):
        raise DecisionChannelError('Unexpected trust response')
    score = data.get('trust_score')
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise DecisionChannelError('Trust response has no valid trust_score')
    reason: Optional[str] = data.get('reason')
    if reason is not None and not isinstance(reason, str):
        reason = str(reason)
    return TrustResponse(session_id=data.get('session_id') or session_id,
                         trust_score=float(score), reason=reason)
