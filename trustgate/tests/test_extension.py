"""Tests for :class:`trustgate.extension.Gate`."""

import json
from unittest import TestCase, mock

from flask import Flask, request

from trustgate.domain import Decision
from trustgate.engine import DecisionEngine
from trustgate.exceptions import ConfigurationError, DecisionChannelError
from trustgate.extension import Gate
from trustgate.services.trust import Retrying, TrustServiceSession

from .util import config


class TestGate(TestCase):
    """The extension authorizes requests before the view functions run."""

    def setUp(self):
        self.app = Flask(__name__)
        self.app.config.update(config())
        self.calls = []

        def admin():
            self.calls.append(request.method)
            return 'ok'

        self.app.add_url_rule('/admin', 'admin', admin,
                              methods=['GET', 'POST', 'DELETE'])
        self.app.add_url_rule('/public', 'public', lambda: 'public')

        with mock.patch(f'{TrustServiceSession.__module__}.requests.Session'):
            self.gate = Gate(self.app)
        self.trust = mock.MagicMock()
        self.trust.decide.return_value = Decision(allow=True)
        self.gate.engine.client = self.trust
        self.client = self.app.test_client(use_cookies=False)

    def test_engine_from_config(self):
        """The engine is built from the app configuration."""
        self.assertIsInstance(self.gate.engine, DecisionEngine)
        self.assertIs(self.app.extensions['trustgate'], self.gate.engine)
        self.assertEqual(self.gate.engine.header_name, 'x-session')

    def test_not_secure(self):
        response = self.client.get('/public')
        self.assertEqual(response.status_code, 200)
        self.trust.decide.assert_not_called()

    def test_allowed(self):
        response = self.client.get('/admin', headers={
            'Cookie': 'sid=abc123; theme=dark'
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_data(as_text=True), 'ok')
        self.trust.decide.assert_called_once_with('abc123')
        self.assertEqual(self.calls, ['GET'])

    def test_missing_session(self):
        response = self.client.get('/admin')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(json.loads(response.data),
                         {'error': 'missing_session'})
        self.assertEqual(self.calls, [])

    def test_denied(self):
        self.trust.decide.return_value = Decision(allow=False, status=403,
                                                  message='Low trust score: 0')
        response = self.client.post('/admin', headers={'X-Session': 'zzz'})
        self.assertEqual(response.status_code, 403)
        self.assertEqual(json.loads(response.data),
                         {'error': 'forbidden',
                          'detail': 'Low trust score: 0'})
        self.trust.decide.assert_called_once_with('zzz')
        self.assertEqual(self.calls, [])

    def test_unavailable(self):
        self.trust.decide.side_effect = DecisionChannelError('timed out')
        response = self.client.get('/admin', headers={'Cookie': 'sid=abc'})
        self.assertEqual(response.status_code, 502)
        self.assertEqual(json.loads(response.data),
                         {'error': 'trust_service_unavailable'})
        self.assertEqual(self.calls, [])


class TestGateConfiguration(TestCase):
    """The gate is configured when the app is set up."""

    def test_bad_configuration(self):
        """A bad configuration fails before any request is handled."""
        app = Flask(__name__)
        app.config.update(config(SECURE_ROUTES=[{'path_pattern': '('}]))
        with self.assertRaises(ConfigurationError):
            Gate(app)

    def test_missing_configuration(self):
        with self.assertRaises(ConfigurationError):
            Gate(Flask(__name__))

    @mock.patch(f'{TrustServiceSession.__module__}.requests.Session')
    def test_retries(self, mock_session):
        """Retries are layered over the trust service if configured."""
        app = Flask(__name__)
        app.config.update(config(TRUST_RETRIES='2'))
        engine = Gate(app).engine
        self.assertIsInstance(engine.client, Retrying)
        self.assertEqual(engine.client.tries, 3)
        self.assertIsInstance(engine.client.client, TrustServiceSession)
