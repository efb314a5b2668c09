"""
Tests for the Flask app and the GET /puzzle route.

The provider is injected into create_app(), either as a MagicMock (to control the result)
or as a real PuzzleProvider over a MemoryPuzzleStore with a mocked source (end to end).

Coverage:
  - GET /puzzle     → cached / fresh / fallback bodies, default date, bad date,
                      unexpected errors, end-to-end cache behaviour
  - GET /           → welcome message
  - 404 handler     → JSON error body
  - build_store / build_provider → wiring from Config
"""

import os
import unittest
from datetime import date
from unittest.mock import MagicMock, patch

from konnections.app import build_provider, build_store, create_app
from konnections.config import Config
from konnections.models.models import get_fallback_puzzle
from konnections.services.puzzle_provider import Provenance, PuzzleProvider, PuzzleResult
from konnections.services.puzzle_source import AnthropicPuzzleSource, PuzzleSource, PuzzleSourceUnavailableError
from konnections.services.puzzle_store import MemoryPuzzleStore, SupabasePuzzleStore


def _mock_provider(result=None):
    provider = MagicMock(spec=PuzzleProvider)
    provider.obtain_puzzle.return_value = result or PuzzleResult(get_fallback_puzzle(), Provenance.CACHED)
    return provider


class TestPuzzleRoute(unittest.TestCase):

    def setUp(self):
        self.provider = _mock_provider()
        self.app = create_app(provider=self.provider)
        self.app.config["TESTING"] = True
        self.client = self.app.test_client()

    def test_cached_response(self):
        response = self.client.get("/puzzle?date=2026-10-18")

        self.assertEqual(response.status_code, 200)
        body = response.get_json()
        self.assertEqual(body["cached"], True)
        self.assertNotIn("fallback", body)
        self.assertEqual(body["puzzle"]["date"], "Fallback Puzzle")
        self.assertEqual(len(body["puzzle"]["allWords"]), 16)
        self.provider.obtain_puzzle.assert_called_once_with("2026-10-18")

    def test_fresh_response_with_cache_error(self):
        self.provider.obtain_puzzle.return_value = PuzzleResult(
            get_fallback_puzzle(), Provenance.FRESH, "quota exceeded"
        )
        body = self.client.get("/puzzle?date=2026-10-18").get_json()

        self.assertEqual(body["cached"], False)
        self.assertEqual(body["cacheError"], "quota exceeded")

    def test_fallback_response_is_200(self):
        self.provider.obtain_puzzle.return_value = PuzzleResult(get_fallback_puzzle(), Provenance.FALLBACK)
        response = self.client.get("/puzzle?date=2026-10-18")

        self.assertEqual(response.status_code, 200)
        body = response.get_json()
        self.assertEqual(body["cached"], False)
        self.assertTrue(body["fallback"])

    def test_date_defaults_to_server_date(self):
        self.client.get("/puzzle")
        self.provider.obtain_puzzle.assert_called_once_with(date.today().isoformat())

    def test_invalid_date_is_400(self):
        response = self.client.get("/puzzle?date=18-10-2026")

        self.assertEqual(response.status_code, 400)
        self.assertIn("error", response.get_json())
        self.provider.obtain_puzzle.assert_not_called()

    def test_unexpected_error_is_500(self):
        self.provider.obtain_puzzle.side_effect = RuntimeError("boom")
        response = self.client.get("/puzzle?date=2026-10-18")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.get_json(), {"error": "Failed to fetch puzzle"})

    def test_index(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("message", response.get_json())

    def test_unknown_route_is_json_404(self):
        response = self.client.get("/nope")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json(), {"error": "Not Found"})


class TestPuzzleRouteEndToEnd(unittest.TestCase):

    def setUp(self):
        self.store = MemoryPuzzleStore()
        self.source = MagicMock(spec=PuzzleSource)
        self.client = create_app(provider=PuzzleProvider(self.store, self.source)).test_client()

    def test_fresh_then_cached(self):
        self.source.fetch.return_value = get_fallback_puzzle()

        first = self.client.get("/puzzle?date=2026-10-18").get_json()
        second = self.client.get("/puzzle?date=2026-10-18").get_json()

        self.assertEqual(first["cached"], False)
        self.assertIsNone(first["cacheError"])
        self.assertEqual(second["cached"], True)
        self.assertEqual(second["puzzle"]["categories"], first["puzzle"]["categories"])
        self.source.fetch.assert_called_once_with("2026-10-18")

    def test_fallback_not_cached(self):
        self.source.fetch.side_effect = PuzzleSourceUnavailableError("timeout")

        body = self.client.get("/puzzle?date=2026-10-18").get_json()

        self.assertTrue(body["fallback"])
        self.assertFalse(self.store.exists("2026-10-18.json"))


class TestWiring(unittest.TestCase):

    def _config(self, **env):
        with patch.dict(os.environ, env, clear=True):
            return Config()

    def test_memory_store_by_default(self):
        self.assertIsInstance(build_store(self._config()), MemoryPuzzleStore)

    def test_supabase_store(self):
        store = build_store(self._config(PUZZLE_STORE="supabase", PUZZLE_BUCKET="daily"))
        self.assertIsInstance(store, SupabasePuzzleStore)
        self.assertEqual(store.bucket, "daily")

    def test_unknown_store_rejected(self):
        with self.assertRaises(ValueError):
            build_store(self._config(PUZZLE_STORE="redis"))

    def test_build_provider_uses_configured_source(self):
        provider = build_provider(self._config(ANTHROPIC_MODEL="test-model", PUZZLE_SOURCE_TIMEOUT="5"))
        self.assertIsInstance(provider.source, AnthropicPuzzleSource)
        self.assertEqual(provider.source.model, "test-model")
        self.assertEqual(provider.source.timeout, 5.0)


if __name__ == "__main__":
    unittest.main()
