"""API tests for the authorizer service."""

import json
from http import HTTPStatus
from unittest import TestCase, mock

from trustgate.factory import create_app
from trustgate.exceptions import ConfigurationError
from trustgate.services import trust

from .util import config


class TestAuthorize(TestCase):
    """NGINX asks whether the original request may proceed."""

    @mock.patch(f'{trust.__name__}.requests.Session')
    def setUp(self, mock_session):
        self.mock_get = mock.MagicMock()
        mock_session_instance = mock.MagicMock()
        type(mock_session_instance).get = self.mock_get
        mock_session.return_value = mock_session_instance
        self.app = create_app(config())
        self.client = self.app.test_client(use_cookies=False)

    def _trust_responds(self, status_code, payload=None):
        self.mock_get.return_value = mock.MagicMock(
            status_code=status_code, ok=200 <= status_code < 400,
            json=mock.MagicMock(return_value=payload), text=''
        )

    def _auth(self, uri='/admin', method='GET', headers=None):
        request_headers = {'X-Original-URI': uri, 'X-Original-Method': method}
        request_headers.update(headers or {})
        return self.client.get('/auth', headers=request_headers)

    def test_not_secure(self):
        """The original request is not for a secure route."""
        response = self._auth('/public?page=2')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(json.loads(response.data), {})
        self.mock_get.assert_not_called()

    def test_no_session(self):
        """Neither the session cookie nor the session header are passed."""
        response = self._auth(headers={'Cookie': 'theme=dark'})
        self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED)
        self.assertEqual(json.loads(response.data),
                         {'error': 'missing_session'})
        self.mock_get.assert_not_called()

    def test_trusted_session(self):
        """The trust service vouches for the session."""
        self._trust_responds(200, {'session_id': 'abc123',
                                   'trust_score': 0.9})
        response = self._auth('/admin?x=1', headers={
            'Cookie': 'sid=abc123; theme=dark'
        })
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(json.loads(response.data), {})
        self.mock_get.assert_called_once_with(
            'http://trust.local/eguard/trust', params={'sid': 'abc123'},
            timeout=1.5
        )

    def test_untrusted_session(self):
        """The trust score of the session is too low."""
        self._trust_responds(200, {'session_id': 'zzz', 'trust_score': 0.1})
        response = self._auth('/api/things', 'DELETE',
                              headers={'X-Session': 'zzz'})
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)
        self.assertEqual(json.loads(response.data),
                         {'error': 'forbidden',
                          'detail': 'Low trust score: 0.1'})

    def test_unknown_session(self):
        self._trust_responds(404)
        response = self._auth(headers={'Cookie': 'sid=abc123'})
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)
        self.assertEqual(json.loads(response.data),
                         {'error': 'forbidden',
                          'detail': 'Low trust score: 0'})

    def test_trust_service_error(self):
        """The trust service fails; its response is not passed on."""
        self._trust_responds(500, {'stack': 'Traceback...'})
        response = self._auth(headers={'Cookie': 'sid=abc123'})
        self.assertEqual(response.status_code, HTTPStatus.BAD_GATEWAY)
        self.assertEqual(json.loads(response.data),
                         {'error': 'trust_service_unavailable'})

    def test_no_original_request(self):
        """Without the original request line, the sub-request itself is used."""
        response = self.client.get('/auth')
        self.assertEqual(response.status_code, HTTPStatus.OK)

    @mock.patch(f'{trust.__name__}.requests.Session')
    def test_original_uri_without_path(self, mock_session):
        """The sub-request path is not used when the original has no path."""
        app = create_app(config(SECURE_ROUTES=[{'path': '/auth'}]))
        client = app.test_client(use_cookies=False)
        response = client.get('/auth', headers={'X-Original-URI': '?x',
                                                'X-Original-Method': 'GET'})
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(json.loads(response.data), {})

        response = client.get('/auth')
        self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED)

    def test_not_found(self):
        response = self.client.get('/nope')
        self.assertEqual(response.status_code, HTTPStatus.NOT_FOUND)
        self.assertIn('reason', json.loads(response.data))


class TestCreateApp(TestCase):
    """The service refuses to start with a bad configuration."""

    def test_missing_api_key(self):
        with self.assertRaises(ConfigurationError):
            create_app(config(TRUST_API_KEY=None))
