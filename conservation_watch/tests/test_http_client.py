import unittest
from unittest.mock import MagicMock, patch

import requests

from conservation_watch.http_client import HttpClient, HttpError
from conservation_watch.security import redact_secrets


def _response(status_code=200, payload=None, text="", url="https://example.com/api"):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.url = url
    response.json.return_value = payload
    return response


class HttpClientTests(unittest.TestCase):
    @patch("conservation_watch.http_client.requests.Session.get")
    def test_returns_json_and_converts_timeout(self, mock_get):
        mock_get.return_value = _response(payload={"results": []})
        client = HttpClient()

        payload = client.get_json("https://example.com/api", params={"q": "wetlands"}, timeout_ms=25000)

        self.assertEqual(payload, {"results": []})
        _, kwargs = mock_get.call_args
        self.assertEqual(kwargs["timeout"], 25.0)
        self.assertEqual(kwargs["params"], {"q": "wetlands"})

    @patch("conservation_watch.http_client.requests.Session.get")
    def test_default_timeout_is_twenty_seconds(self, mock_get):
        mock_get.return_value = _response(payload={})
        HttpClient().get_json("https://example.com/api")
        self.assertEqual(mock_get.call_args.kwargs["timeout"], 20.0)

    def test_accepts_json_by_default(self):
        client = HttpClient(user_agent="Tester/1.0")
        self.assertEqual(client.session.headers["Accept"], "application/json")
        self.assertEqual(client.session.headers["User-Agent"], "Tester/1.0")

    @patch("conservation_watch.http_client.requests.Session.get")
    def test_non_2xx_raises_with_status_url_and_excerpt(self, mock_get):
        mock_get.return_value = _response(
            status_code=503,
            text="x" * 500,
            url="https://api.regulations.gov/v4/documents?api_key=SECRET123",
        )

        with self.assertRaises(HttpError) as ctx:
            HttpClient().get_json("https://api.regulations.gov/v4/documents")

        error = ctx.exception
        self.assertIsInstance(error, requests.HTTPError)
        self.assertEqual(error.status_code, 503)
        self.assertEqual(len(error.body_excerpt), 200)
        self.assertIn("HTTP 503 for https://api.regulations.gov/v4/documents", str(error))
        self.assertNotIn("SECRET123", str(error))

    @patch("conservation_watch.http_client.requests.Session.get")
    def test_empty_body_omits_excerpt(self, mock_get):
        mock_get.return_value = _response(status_code=404, text="", url="https://example.com/missing")
        with self.assertRaises(HttpError) as ctx:
            HttpClient().get_json("https://example.com/missing")
        self.assertEqual(str(ctx.exception), "HTTP 404 for https://example.com/missing")

    @patch("conservation_watch.http_client.requests.Session.get")
    def test_transport_errors_propagate(self, mock_get):
        mock_get.side_effect = requests.Timeout("read timed out")
        with self.assertRaises(requests.Timeout):
            HttpClient().get_json("https://example.com/slow")
        self.assertEqual(mock_get.call_count, 1)


class RedactionTests(unittest.TestCase):
    def test_redacts_query_and_header_keys(self):
        text = "GET https://api.regulations.gov/v4/documents?page=1&api_key=abc123 X-API-KEY: zzz999"
        redacted = redact_secrets(text)
        self.assertNotIn("abc123", redacted)
        self.assertNotIn("zzz999", redacted)
        self.assertIn("page=1", redacted)


if __name__ == "__main__":
    unittest.main()
