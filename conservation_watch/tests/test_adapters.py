import unittest
from datetime import datetime, timezone
from unittest.mock import patch

import requests

from conservation_watch.adapters.court_listener import CourtListenerAdapter
from conservation_watch.adapters.federal_register import FederalRegisterAdapter
from conservation_watch.adapters.open_states import OpenStatesAdapter
from conservation_watch.adapters.regulations_gov import RegulationsGovAdapter
from conservation_watch.http_client import HttpError

NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


class FederalRegisterAdapterTests(unittest.TestCase):
    @patch("conservation_watch.http_client.HttpClient.get_json")
    def test_builds_query_with_repeated_fields(self, mock_get):
        mock_get.return_value = {"results": [{"title": "Wetland rule"}], "count": 1}
        adapter = FederalRegisterAdapter()

        records, status = adapter.fetch(now=NOW)

        self.assertEqual(records, [{"title": "Wetland rule"}])
        self.assertTrue(status.healthy)
        self.assertEqual(status.items_last_fetch, 1)
        url = mock_get.call_args.args[0]
        params = mock_get.call_args.kwargs["params"]
        self.assertEqual(url, "https://www.federalregister.gov/api/v1/documents.json")
        self.assertIn(("order", "newest"), params)
        self.assertIn(("per_page", "25"), params)
        self.assertIn(
            ("conditions[term]", "Texas wetlands OR waterfowl OR endangered species OR Clean Water Act"),
            params,
        )
        self.assertEqual(
            [value for key, value in params if key == "fields[]"],
            ["title", "publication_date", "html_url", "pdf_url", "agencies", "abstract", "document_number"],
        )
        self.assertEqual(mock_get.call_args.kwargs["timeout_ms"], 20000)
        self.assertEqual(adapter.limit, 12)

    @patch("conservation_watch.http_client.HttpClient.get_json")
    def test_non_list_results_become_empty(self, mock_get):
        mock_get.return_value = {"results": {"unexpected": True}}
        records, status = FederalRegisterAdapter().fetch(now=NOW)
        self.assertEqual(records, [])
        self.assertTrue(status.healthy)

    @patch("conservation_watch.http_client.HttpClient.get_json")
    def test_non_dict_entries_are_dropped(self, mock_get):
        mock_get.return_value = {"results": ["junk", None, {"title": "ok"}]}
        records, _ = FederalRegisterAdapter().fetch(now=NOW)
        self.assertEqual(records, [{"title": "ok"}])

    @patch("conservation_watch.http_client.HttpClient.get_json")
    def test_errors_are_swallowed(self, mock_get):
        for error in (requests.ConnectionError("dns"), requests.Timeout("slow"), ValueError("bad json"), HttpError(500, "https://x")):
            mock_get.side_effect = error
            with self.assertLogs("conservation_watch.adapters.base", level="ERROR"):
                records, status = FederalRegisterAdapter().fetch(now=NOW)
            self.assertEqual(records, [])
            self.assertFalse(status.healthy)
            self.assertTrue(status.last_error)


class CourtListenerAdapterTests(unittest.TestCase):
    @patch("conservation_watch.http_client.HttpClient.get_json")
    def test_sends_user_agent_and_longer_timeout(self, mock_get):
        mock_get.return_value = {"results": [], "count": 0}
        adapter = CourtListenerAdapter()
        adapter.fetch(now=NOW)

        kwargs = mock_get.call_args.kwargs
        self.assertEqual(kwargs["timeout_ms"], 25000)
        self.assertEqual(kwargs["headers"]["User-Agent"], "BlueDuckFoundation/1.0 (contact: admin@theblueduck.org)")
        self.assertEqual(kwargs["params"]["order_by"], "dateFiled desc")
        self.assertEqual(kwargs["params"]["type"], "o")
        self.assertEqual(kwargs["params"]["page_size"], "20")
        self.assertEqual(adapter.limit, 8)


class RegulationsGovAdapterTests(unittest.TestCase):
    def test_requires_key(self):
        with self.assertRaises(ValueError):
            RegulationsGovAdapter(api_key="")

    @patch("conservation_watch.http_client.HttpClient.get_json")
    def test_reads_data_envelope_and_passes_key_as_param(self, mock_get):
        mock_get.return_value = {"data": [{"id": "EPA-HQ-1"}], "meta": {"totalElements": 1}}
        adapter = RegulationsGovAdapter(api_key="KEY123")

        records, _ = adapter.fetch(now=NOW)

        self.assertEqual(records, [{"id": "EPA-HQ-1"}])
        params = mock_get.call_args.kwargs["params"]
        self.assertEqual(params["api_key"], "KEY123")
        self.assertEqual(params["page[size]"], "20")
        self.assertIn("filter[searchTerm]", params)

    @patch("conservation_watch.http_client.HttpClient.get_json")
    def test_error_log_does_not_leak_key(self, mock_get):
        mock_get.side_effect = requests.ConnectionError(
            "Max retries exceeded with url: /v4/documents?api_key=KEY123"
        )
        with self.assertLogs("conservation_watch.adapters.base", level="ERROR") as logs:
            _, status = RegulationsGovAdapter(api_key="KEY123").fetch(now=NOW)
        self.assertNotIn("KEY123", "\n".join(logs.output))
        self.assertNotIn("KEY123", status.last_error)


class OpenStatesAdapterTests(unittest.TestCase):
    @patch("conservation_watch.http_client.HttpClient.get_json")
    def test_key_travels_in_header(self, mock_get):
        mock_get.return_value = {"results": [{"id": "ocd-bill/1"}], "pagination": {"total_items": 1}}
        adapter = OpenStatesAdapter(api_key="OSKEY")

        records, _ = adapter.fetch(now=NOW)

        self.assertEqual(len(records), 1)
        kwargs = mock_get.call_args.kwargs
        self.assertEqual(kwargs["headers"], {"X-API-KEY": "OSKEY"})
        self.assertEqual(kwargs["params"]["jurisdiction"], "Texas")
        self.assertEqual(kwargs["params"]["per_page"], "20")
        self.assertNotIn("api_key", kwargs["params"])


if __name__ == "__main__":
    unittest.main()
