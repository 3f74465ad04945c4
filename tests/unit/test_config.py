#!/usr/bin/env python3
"""Tests for Config validation and config-file loading."""

import json
import os
import tempfile
import unittest
from unittest.mock import patch

from pydantic import ValidationError

from fanatic import Config, config


class TestConfigDefaults(unittest.TestCase):
    """Tests for default values."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            cfg = Config()
        self.assertEqual(cfg.endpoint, config.DEFAULT_ENDPOINT)
        self.assertEqual(cfg.strategy, "player_json")
        self.assertIsNone(cfg.output)
        self.assertEqual(cfg.timeout, config.DEFAULT_TIMEOUT_SECONDS)
        self.assertEqual(cfg.workers, 1)
        self.assertFalse(cfg.serve)
        self.assertEqual(cfg.port, 8080)
        self.assertEqual(cfg.refresh_interval, 3600)
        self.assertEqual(cfg.log_level, "INFO")
        self.assertEqual(cfg.show_title, "Henry Rollins - KCRW")
        self.assertEqual(cfg.show_language, "EN")
        self.assertEqual(cfg.show_copyright, "KCRW")

    def test_show_link_defaults_to_endpoint(self):
        cfg = Config(endpoint="https://example.com/show")
        self.assertEqual(cfg.show_link, "https://example.com/show")

    def test_explicit_show_link_is_kept(self):
        cfg = Config(endpoint="https://example.com/show", show_link="https://example.com/")
        self.assertEqual(cfg.show_link, "https://example.com/")

    def test_blank_endpoint_uses_default(self):
        self.assertEqual(Config(endpoint="  ").endpoint, config.DEFAULT_ENDPOINT)

    def test_config_is_frozen(self):
        cfg = Config()
        with self.assertRaises(ValidationError):
            cfg.timeout = 5

    def test_unknown_field_rejected(self):
        with self.assertRaises(ValidationError):
            Config(rss_url="https://example.com/feed.xml")

    def test_writes_to_stdout(self):
        self.assertTrue(Config().writes_to_stdout)
        self.assertTrue(Config(output="-").writes_to_stdout)
        self.assertFalse(Config(output="feed.xml").writes_to_stdout)


class TestPortFromEnvironment(unittest.TestCase):
    """Tests for the PORT environment variable."""

    def test_env_port_used_when_unset(self):
        with patch.dict(os.environ, {"PORT": "9090"}):
            self.assertEqual(Config().port, 9090)

    def test_explicit_port_wins_over_env(self):
        with patch.dict(os.environ, {"PORT": "9090"}):
            self.assertEqual(Config(port=7000).port, 7000)

    def test_blank_env_port_uses_default(self):
        with patch.dict(os.environ, {"PORT": "  "}):
            self.assertEqual(Config().port, 8080)

    def test_invalid_env_port_rejected(self):
        with patch.dict(os.environ, {"PORT": "http"}):
            with self.assertRaises(ValidationError) as ctx:
                Config()
        self.assertIn("port must be an integer", str(ctx.exception))

    def test_out_of_range_port_rejected(self):
        with self.assertRaises(ValidationError):
            Config(port=70000)
        with self.assertRaises(ValidationError):
            Config(port=-1)


class TestFieldValidation(unittest.TestCase):
    """Tests for per-field normalization and validation."""

    def test_strategy_is_normalized(self):
        self.assertEqual(Config(strategy=" Player-JSON ").strategy, "player_json")
        self.assertEqual(Config(strategy="LEGACY").strategy, "legacy")

    def test_unknown_strategy_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            Config(strategy="rss")
        self.assertIn("strategy must be one of", str(ctx.exception))

    def test_timeout_is_clamped(self):
        self.assertEqual(Config(timeout=0).timeout, config.MIN_TIMEOUT_SECONDS)
        self.assertEqual(Config(timeout="30").timeout, 30)

    def test_invalid_timeout_rejected(self):
        with self.assertRaises(ValidationError):
            Config(timeout="soon")

    def test_workers_must_be_positive(self):
        self.assertEqual(Config(workers="4").workers, 4)
        with self.assertRaises(ValidationError):
            Config(workers=0)

    def test_refresh_interval_is_clamped(self):
        self.assertEqual(Config(refresh_interval=0).refresh_interval, 1)
        self.assertEqual(Config(refresh_interval=None).refresh_interval, 3600)

    def test_log_level_is_uppercased(self):
        self.assertEqual(Config(log_level="debug").log_level, "DEBUG")

    def test_invalid_log_level_rejected(self):
        with self.assertRaises(ValidationError):
            Config(log_level="LOUD")

    def test_blank_optional_paths_become_none(self):
        cfg = Config(output="  ", log_file="")
        self.assertIsNone(cfg.output)
        self.assertIsNone(cfg.log_file)

    def test_legacy_template_needs_both_fields(self):
        with self.assertRaises(ValidationError):
            Config(legacy_mp3_url_template="https://example.com/{number}.mp3")
        cfg = Config(legacy_mp3_url_template="https://example.com/{number}-{date}.mp3")
        self.assertEqual(cfg.legacy_mp3_url_template, "https://example.com/{number}-{date}.mp3")


class TestLoadConfigFile(unittest.TestCase):
    """Tests for load_config_file."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)

    def write(self, name, text):
        path = os.path.join(self.temp_dir.name, name)
        with open(path, "w", encoding="utf-8") as handle:
            handle.write(text)
        return path

    def test_json_file(self):
        path = self.write("fanatic.json", json.dumps({"strategy": "legacy", "workers": 2}))
        data = config.load_config_file(path)
        self.assertEqual(data, {"strategy": "legacy", "workers": 2})
        self.assertEqual(Config(**data).strategy, "legacy")

    def test_yaml_file(self):
        path = self.write("fanatic.yaml", "endpoint: https://example.com/show\nport: 9000\n")
        data = config.load_config_file(path)
        self.assertEqual(data["endpoint"], "https://example.com/show")
        self.assertEqual(Config(**data).port, 9000)

    def test_yml_extension(self):
        path = self.write("fanatic.yml", "timeout: 7\n")
        self.assertEqual(config.load_config_file(path), {"timeout": 7})

    def test_empty_path(self):
        with self.assertRaises(ValueError):
            config.load_config_file("")

    def test_missing_file(self):
        with self.assertRaises(ValueError) as ctx:
            config.load_config_file(os.path.join(self.temp_dir.name, "missing.yaml"))
        self.assertIn("Config file not found", str(ctx.exception))

    def test_unsupported_extension(self):
        path = self.write("fanatic.toml", "timeout = 7\n")
        with self.assertRaises(ValueError) as ctx:
            config.load_config_file(path)
        self.assertIn("Unsupported config file type", str(ctx.exception))

    def test_invalid_json(self):
        path = self.write("fanatic.json", "{not json")
        with self.assertRaises(ValueError) as ctx:
            config.load_config_file(path)
        self.assertIn("Invalid JSON config file", str(ctx.exception))

    def test_invalid_yaml(self):
        path = self.write("fanatic.yaml", "endpoint: [unclosed\n")
        with self.assertRaises(ValueError) as ctx:
            config.load_config_file(path)
        self.assertIn("Invalid YAML config file", str(ctx.exception))

    def test_top_level_must_be_mapping(self):
        path = self.write("fanatic.yaml", "- a\n- b\n")
        with self.assertRaises(ValueError) as ctx:
            config.load_config_file(path)
        self.assertIn("mapping", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
