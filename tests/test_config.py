"""Tests for configuration loading and validation."""

from __future__ import annotations

import tempfile
from pathlib import Path
import unittest

from completion_chat.config import DEFAULT_CONFIG, load_config


def _load(text: str) -> dict:
    with tempfile.TemporaryDirectory() as temp_dir:
        config_path = Path(temp_dir) / "config.toml"
        config_path.write_text(text.strip(), encoding="utf-8")
        return load_config(config_path=config_path)


class ConfigTests(unittest.TestCase):
    """Validate config merge and fallback behavior."""

    def test_missing_config_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config = load_config(config_path=Path(temp_dir) / "config.toml")
        self.assertEqual(config, DEFAULT_CONFIG)
        self.assertEqual(config["app"]["class"], "completion-chat")
        self.assertEqual(config["completion"]["api_key_header"], "X-API-Key")
        self.assertEqual(
            [entry["title"] for entry in config["history"]["entries"]],
            ["Chat 1", "Chat 2", "Chat 3"],
        )
        self.assertFalse(config["ui"]["dark_mode"])

    def test_partial_config_overrides_selected_values(self) -> None:
        config = _load(
            """
[completion]
endpoint_url = "https://llm.example.com/v1/completions"
response_timeout_seconds = 30

[ui]
dark_mode = true
            """
        )
        self.assertEqual(
            config["completion"]["endpoint_url"],
            "https://llm.example.com/v1/completions",
        )
        self.assertEqual(config["completion"]["response_timeout_seconds"], 30)
        self.assertTrue(config["ui"]["dark_mode"])
        self.assertEqual(config["app"]["title"], DEFAULT_CONFIG["app"]["title"])
        self.assertEqual(
            config["completion"]["api_key_env"],
            DEFAULT_CONFIG["completion"]["api_key_env"],
        )

    def test_history_entries_override(self) -> None:
        config = _load(
            """
[[history.entries]]
id = 7
title = "Release notes"
            """
        )
        self.assertEqual(config["history"]["entries"], [{"id": 7, "title": "Release notes"}])

    def test_invalid_values_fallback_to_defaults(self) -> None:
        config = _load(
            """
[logging]
level = "LOUD"
            """
        )
        self.assertEqual(config, DEFAULT_CONFIG)

    def test_duplicate_history_ids_fallback_to_defaults(self) -> None:
        config = _load(
            """
[[history.entries]]
id = 1
title = "a"

[[history.entries]]
id = 1
title = "b"
            """
        )
        self.assertEqual(config["history"], DEFAULT_CONFIG["history"])

    def test_plain_http_remote_endpoint_is_rejected(self) -> None:
        config = _load(
            """
[completion]
endpoint_url = "http://llm.example.com/v1/completions"
            """
        )
        self.assertEqual(
            config["completion"]["endpoint_url"],
            DEFAULT_CONFIG["completion"]["endpoint_url"],
        )

    def test_plain_http_allowed_when_opted_in(self) -> None:
        config = _load(
            """
[completion]
endpoint_url = "http://proxy.internal:8080/complete"

[security]
allow_insecure_http = true
            """
        )
        self.assertEqual(
            config["completion"]["endpoint_url"], "http://proxy.internal:8080/complete"
        )

    def test_loopback_proxy_allowed_over_http(self) -> None:
        config = _load(
            """
[completion]
endpoint_url = "http://127.0.0.1:9000/complete"
            """
        )
        self.assertEqual(
            config["completion"]["endpoint_url"], "http://127.0.0.1:9000/complete"
        )

    def test_unknown_auth_scheme_fallback_to_defaults(self) -> None:
        config = _load(
            """
[completion]
api_key_scheme = "Digest"
            """
        )
        self.assertEqual(config["completion"]["api_key_scheme"], "")

    def test_unparseable_toml_uses_defaults(self) -> None:
        config = _load("[completion\nendpoint_url = ")
        self.assertEqual(config, DEFAULT_CONFIG)


if __name__ == "__main__":
    unittest.main()
