#!/usr/bin/env python3
"""
測試設定檔載入
"""
import unittest
import json
import os
import tempfile
import shutil
from unittest.mock import patch

from classifieds.config import (
    SearchConfig,
    build_extractors,
    get_extractor_for_source,
    load_search_config,
    load_transport_settings,
)
from marketplaces.craigslist.extractor import CraigslistExtractor
from marketplaces.ksl.extractor import KslExtractor


class TestLoadSearchConfig(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = os.path.join(self.temp_dir, "notifier.json")

    def tearDown(self):
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _write(self, data):
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(data, f)

    def test_missing_file_uses_defaults(self):
        """設定檔不存在時使用預設值"""
        config = load_search_config(self.config_path)

        self.assertEqual(config.queries, ["SNES"])
        self.assertEqual(config.enabled_sources(), ["ksl", "facebookMarketplace", "craigslist"])
        self.assertEqual(config.source_options["ksl"]["zip_code"], "84093")

    def test_flags_select_sources_in_fixed_order(self):
        self._write({
            "searchKsl": False,
            "searchFacebookMarketplace": False,
            "searchCraigslist": True,
            "queries": ["SNES", "N64"],
        })

        config = load_search_config(self.config_path)

        self.assertEqual(config.enabled_sources(), ["craigslist"])
        self.assertEqual(config.queries, ["SNES", "N64"])

    def test_source_options_merge_over_defaults(self):
        """各來源參數逐欄合併"""
        self._write({"craigslist": {"region": "boston"}})

        config = load_search_config(self.config_path)

        self.assertEqual(config.source_options["craigslist"]["region"], "boston")
        self.assertEqual(config.source_options["craigslist"]["search_distance"], 60)

    def test_single_query_string(self):
        self._write({"queries": "Gameboy"})
        self.assertEqual(load_search_config(self.config_path).queries, ["Gameboy"])

    def test_empty_queries_rejected(self):
        self._write({"queries": []})
        with self.assertRaises(ValueError):
            load_search_config(self.config_path)

    def test_blank_query_rejected(self):
        self._write({"queries": ["SNES", "  "]})
        with self.assertRaises(ValueError):
            load_search_config(self.config_path)

    def test_unknown_source(self):
        config = SearchConfig(queries=["SNES"])
        with self.assertRaises(ValueError):
            config.is_enabled("ebay")


class TestExtractorFactory(unittest.TestCase):
    def test_get_extractor_for_source(self):
        extractor = get_extractor_for_source("ksl")
        self.assertIsInstance(extractor, KslExtractor)
        self.assertEqual(extractor.per_page, 96)

    def test_unknown_source(self):
        with self.assertRaises(ValueError):
            get_extractor_for_source("ebay")

    def test_build_extractors_uses_options(self):
        config = SearchConfig(
            search_ksl=False,
            search_facebook_marketplace=False,
            search_craigslist=True,
            queries=["SNES"],
            source_options={"craigslist": {"region": "boston", "postal": "02110", "search_distance": 5}},
        )

        extractors = build_extractors(config)

        self.assertEqual(list(extractors), ["craigslist"])
        self.assertIsInstance(extractors["craigslist"], CraigslistExtractor)
        self.assertEqual(extractors["craigslist"].region, "boston")


class TestTransportSettings(unittest.TestCase):
    @patch.dict(os.environ, {
        "TWILIO_ACCOUNT_SID": "AC123",
        "TWILIO_AUTH_TOKEN": "secret",
        "FROM_NUMBER": "+1",
        "TO_NUMBER": "+2",
    }, clear=True)
    def test_defaults_to_twilio(self):
        settings = load_transport_settings()

        self.assertEqual(settings.transport, "twilio")
        self.assertEqual(settings.twilio_account_sid, "AC123")
        self.assertEqual(settings.to_number, "+2")

    @patch.dict(os.environ, {"NOTIFIER_TRANSPORT": "Telegram"}, clear=True)
    def test_transport_name_is_case_insensitive(self):
        self.assertEqual(load_transport_settings().transport, "telegram")

    @patch.dict(os.environ, {"NOTIFIER_TRANSPORT": "pigeon"}, clear=True)
    def test_unknown_transport(self):
        with self.assertRaises(ValueError):
            load_transport_settings()


if __name__ == "__main__":
    unittest.main()
