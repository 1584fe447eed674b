"""Core data structures for the request gate."""

import json
from typing import Any, Dict, Mapping, NamedTuple, Optional, Tuple

from .exceptions import ConfigurationError

DEFAULT_TIMEOUT_MS = 1500
DEFAULT_TRUST_ENDPOINT = '/eguard/trust'

_TRUE = ('1', 'true', 'yes', 'on')


class RequestDescriptor(NamedTuple):
    """The parts of an inbound request that the gate looks at."""

    path: str
    method: str
    cookie_header: Optional[str] = None
    headers: Mapping[str, str] = {}
    """Request headers, keyed by lowercase header name."""


class SecureRoute(NamedTuple):
    """
    A rule that marks requests as requiring authorization.

    Exactly one of ``path``, ``prefix`` or ``path_pattern`` is set.
    """

    path: Optional[str] = None
    """Matches this exact request path."""

    prefix: Optional[str] = None
    """Matches any request path starting with this prefix."""

    path_pattern: Optional[str] = None
    """Regular expression searched for anywhere in the request path."""

    methods: Optional[Tuple[str, ...]] = None
    """If set, only these HTTP methods are secure. ``None`` means any."""


class SessionExtraction(NamedTuple):
    """Where to look for the session identifier on a request."""

    cookie_name: Optional[str] = None
    header_name: Optional[str] = None
    header_bearer: bool = False
    """Strip a leading ``Bearer `` from the header value."""


class GateConfig(NamedTuple):
    """Process-wide gate configuration. Loaded once, never modified."""

    api_base_url: str
    api_key: str
    secure_routes: Tuple[SecureRoute, ...]
    session_extraction: SessionExtraction
    min_trust_score: float
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    retries: int = 0
    trust_endpoint: str = DEFAULT_TRUST_ENDPOINT

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> 'GateConfig':
        """
        Build a validated configuration from a Flask-style config mapping.

        Parameters
        ----------
        config : mapping
            Usually ``app.config``. See :mod:`trustgate.config` for the
            recognized keys.

        Returns
        -------
        :class:`GateConfig`

        Raises
        ------
        :class:`.ConfigurationError`
            Raised if a required parameter is missing or malformed.

        """
        api_base_url = _required_str(config, 'TRUST_API_BASE_URL')
        api_key = _required_str(config, 'TRUST_API_KEY')
        routes = _load_routes(config.get('SECURE_ROUTES'))
        extraction = SessionExtraction(
            cookie_name=config.get('GATE_SESSION_COOKIE_NAME') or None,
            header_name=config.get('GATE_SESSION_HEADER_NAME') or None,
            header_bearer=_flag(config.get('GATE_SESSION_HEADER_BEARER'))
        )
        if not (extraction.cookie_name or extraction.header_name):
            raise ConfigurationError('No session cookie or header configured')

        min_trust_score = _number(config, 'MIN_TRUST_SCORE', float, None)
        timeout_ms = _number(config, 'TRUST_TIMEOUT_MS', int,
                             DEFAULT_TIMEOUT_MS)
        if timeout_ms <= 0:
            raise ConfigurationError('TRUST_TIMEOUT_MS must be positive')
        retries = _number(config, 'TRUST_RETRIES', int, 0)
        if retries < 0:
            raise ConfigurationError('TRUST_RETRIES must not be negative')

        return cls(
            api_base_url=api_base_url.rstrip('/'),
            api_key=api_key,
            secure_routes=routes,
            session_extraction=extraction,
            min_trust_score=min_trust_score,
            timeout_ms=timeout_ms,
            retries=retries,
            trust_endpoint=config.get('TRUST_ENDPOINT')
            or DEFAULT_TRUST_ENDPOINT
        )


class TrustResponse(NamedTuple):
    """Trust assessment of a session, as reported by the trust service."""

    session_id: str
    trust_score: float
    reason: Optional[str] = None


class Decision(NamedTuple):
    """Verdict on a session."""

    allow: bool
    status: Optional[int] = None
    """Overrides the default 403 status of a denial."""

    message: Optional[str] = None
    """Safe to show to the client."""


class Outcome(NamedTuple):
    """The final disposition of one request."""

    PASS_THROUGH = 'pass_through'   # type: ignore
    ALLOWED = 'allowed'     # type: ignore
    DENIED = 'denied'   # type: ignore
    MISSING_SESSION = 'missing_session'     # type: ignore
    UNAVAILABLE = 'trust_service_unavailable'   # type: ignore

    kind: str
    status: Optional[int] = None
    body: Optional[Dict[str, Any]] = None

    @property
    def proceeds(self) -> bool:
        """Whether the request should be handed to the next stage."""
        return self.kind in (Outcome.PASS_THROUGH, Outcome.ALLOWED)


def _required_str(config: Mapping[str, Any], key: str) -> str:
    value = config.get(key)
    if not value or not isinstance(value, str):
        raise ConfigurationError(f'Missing required parameter {key}')
    return value


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE
    return bool(value)


def _number(config: Mapping[str, Any], key: str, kind: type,
            default: Optional[Any]) -> Any:
    value = config.get(key)
    if value is None or value == '':
        if default is None:
            raise ConfigurationError(f'Missing required parameter {key}')
        return default
    if isinstance(value, bool):
        raise ConfigurationError(f'{key} must be a number')
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f'{key} must be a number') from e


def _load_routes(raw: Any) -> Tuple[SecureRoute, ...]:
    """Parse the ``SECURE_ROUTES`` parameter (a JSON string or a list)."""
    if raw is None:
        raise ConfigurationError('Missing required parameter SECURE_ROUTES')
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.decoder.JSONDecodeError as e:
            raise ConfigurationError('SECURE_ROUTES is not valid JSON') from e
    if not isinstance(raw, (list, tuple)):
        raise ConfigurationError('SECURE_ROUTES must be a list of routes')
    return tuple(_load_route(item) for item in raw)


def _load_route(item: Any) -> SecureRoute:
    if isinstance(item, SecureRoute):
        return item
    if not isinstance(item, Mapping):
        raise ConfigurationError(f'Not a valid secure route: {item!r}')
    rules = {key: item.get(key) for key in ('path', 'prefix', 'path_pattern')
             if item.get(key) is not None}
    if len(rules) != 1:
        raise ConfigurationError(
            'A secure route needs exactly one of path, prefix, path_pattern:'
            f' {item!r}'
        )
    for key, value in rules.items():
        if not isinstance(value, str):
            raise ConfigurationError(f'Route {key} must be a string')

    methods = item.get('methods')
    if methods is not None:
        if isinstance(methods, str) or not all(isinstance(m, str)
                                               for m in methods):
            raise ConfigurationError('Route methods must be a list of strings')
        methods = tuple(m.upper() for m in methods)
    return SecureRoute(methods=methods, **rules)
