"""Flask configuration for the gate and the authorizer service."""

import os

TRUST_API_BASE_URL = os.environ.get('TRUST_API_BASE_URL',
                                    'http://localhost:8080')
"""Base URL of the trust service."""

TRUST_API_KEY = os.environ.get('TRUST_API_KEY')
"""Bearer credential for the trust service. Required."""

TRUST_ENDPOINT = os.environ.get('TRUST_ENDPOINT', '/eguard/trust')
TRUST_TIMEOUT_MS = os.environ.get('TRUST_TIMEOUT_MS', '1500')
"""How long to wait for the trust service before giving up on a request."""

TRUST_RETRIES = os.environ.get('TRUST_RETRIES', '0')
"""Extra attempts after a failed trust service call. No retries by default."""

MIN_TRUST_SCORE = os.environ.get('MIN_TRUST_SCORE', '0.5')
"""Sessions scoring below this are denied."""

SECURE_ROUTES = os.environ.get('SECURE_ROUTES', '[{"prefix": "/"}]')
"""
JSON list of secure routes, e.g.
``[{"path": "/admin", "methods": ["GET"]}, {"path_pattern": "^/api/"}]``.
By default every request is secure.
"""

GATE_SESSION_COOKIE_NAME = os.environ.get('GATE_SESSION_COOKIE_NAME', 'sid')
GATE_SESSION_HEADER_NAME = os.environ.get('GATE_SESSION_HEADER_NAME')
GATE_SESSION_HEADER_BEARER = os.environ.get('GATE_SESSION_HEADER_BEARER',
                                            'false')

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
