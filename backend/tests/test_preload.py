"""
Unit tests for the JSON seed loader.
"""

import json
import os
import shutil
import tempfile
import unittest

from adserver.models import AdEvent, Advertisement, Campaign
from adserver.services.preload import SeedLoader
from tests.helpers import make_session_factory


class TestSeedLoader(unittest.TestCase):

    def setUp(self):
        self.engine, Session = make_session_factory()
        self.db = Session()
        self.loader = SeedLoader(self.db)
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        self.db.close()
        self.engine.dispose()
        shutil.rmtree(self.temp_dir)

    def write_json(self, name, data):
        path = os.path.join(self.temp_dir, name)
        with open(path, "w", encoding="utf-8") as f:
            if isinstance(data, str):
                f.write(data)
            else:
                json.dump(data, f)
        return path

    def path(self, name):
        return os.path.join(self.temp_dir, name)

    def test_full_load(self):
        campaigns = self.write_json("campaigns.json", [{"name": "Spring"}, {"name": ""}])
        ads = self.write_json("ads.json", [
            {"ad_type": "text", "content": "Hi", "redirect_url": "https://a.example", "tags": ["Tech"], "campaign_id": 1},
            {"ad_type": "image", "redirect_url": "https://b.example"},
            {"ad_type": "text", "content": "Yo", "redirect_url": "https://c.example", "campaign_id": 0},
        ])
        events = self.write_json("impressions.json", [
            {"ad_id": 1, "action_type": "view", "ip": "1.2.3.4", "user_agent": "ua", "viewed_at": "2025-05-01T10:00:00"},
            {"ad_id": 1, "action_type": "click"},
            {"ad_id": 1, "action_type": "skip"},
            {"ad_id": 99, "action_type": "view"},
        ])

        summary = self.loader.load_all(campaigns, ads, events)

        self.assertEqual(summary.campaigns, 1)
        self.assertEqual(summary.ads, 2)
        self.assertEqual(summary.events, 2)
        self.assertEqual(summary.skipped, 4)

        self.assertEqual(self.db.query(Campaign).count(), 1)
        first = self.db.get(Advertisement, 1)
        self.assertEqual(first.tags, ["tech"])
        self.assertEqual(first.campaign_id, 1)
        self.assertEqual(self.db.query(AdEvent).count(), 2)

    def test_missing_files_are_skipped(self):
        summary = self.loader.load_all(self.path("a.json"), self.path("b.json"), self.path("c.json"))
        self.assertEqual(summary.model_dump(), {"campaigns": 0, "ads": 0, "events": 0, "skipped": 0})

    def test_malformed_json_is_skipped(self):
        broken = self.write_json("ads.json", "[{not json")
        with self.assertLogs("adserver.services.preload", level="WARNING"):
            summary = self.loader.load_all(self.path("none.json"), broken, self.path("none.json"))
        self.assertEqual(summary.ads, 0)

    def test_non_array_is_skipped(self):
        ads = self.write_json("ads.json", {"ad_type": "text"})
        summary = self.loader.load_all(self.path("none.json"), ads, self.path("none.json"))
        self.assertEqual(summary.ads, 0)
        self.assertEqual(self.db.query(Advertisement).count(), 0)

    def test_non_object_records_skipped(self):
        campaigns = self.write_json("campaigns.json", ["Spring", {"name": "Summer"}])
        summary = self.loader.load_all(campaigns, self.path("none.json"), self.path("none.json"))
        self.assertEqual(summary.campaigns, 1)
        self.assertEqual(summary.skipped, 1)


if __name__ == '__main__':
    unittest.main()
