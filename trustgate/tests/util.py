"""Helpers for gate tests."""

from typing import Any, Dict

BASE_CONFIG: Dict[str, Any] = {
    'TRUST_API_BASE_URL': 'http://trust.local/',
    'TRUST_API_KEY': 'not-a-real-key',
    'SECURE_ROUTES': [{'path': '/admin', 'methods': ['GET', 'POST']},
                      {'prefix': '/api/'}],
    'GATE_SESSION_COOKIE_NAME': 'sid',
    'GATE_SESSION_HEADER_NAME': 'x-session',
    'MIN_TRUST_SCORE': 0.5,
}


def config(**overrides: Any) -> Dict[str, Any]:
    """Get a valid gate configuration mapping, with some overrides."""
    cfg = dict(BASE_CONFIG)
    cfg.update(overrides)
    return cfg
