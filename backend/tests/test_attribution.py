"""
Unit tests for the attribution tracker.
"""

import unittest
from unittest.mock import MagicMock, patch

from adserver.errors import NotFoundError, ValidationError, RetryableError
from adserver.models import AdEvent
from adserver.services.ad_store import AdStore
from adserver.services.attribution import AttributionTracker
from tests.helpers import NOW, make_session_factory, text_ad


class TestRecordEvent(unittest.TestCase):

    def setUp(self):
        self.engine, Session = make_session_factory()
        self.db = Session()
        self.store = AdStore(self.db)
        self.tracker = AttributionTracker(self.db)
        self.ad_id = self.store.create_ad(text_ad())

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_records_metadata(self):
        event_id = self.tracker.record_event(self.ad_id, "view", "203.0.113.7", "Mozilla/5.0")

        event = self.db.get(AdEvent, event_id)
        self.assertEqual(event.ad_id, self.ad_id)
        self.assertEqual(event.event_type, "view")
        self.assertEqual(event.ip_address, "203.0.113.7")
        self.assertEqual(event.user_agent, "Mozilla/5.0")
        self.assertIsNotNone(event.occurred_at)

    def test_missing_metadata_stored_empty(self):
        event = self.db.get(AdEvent, self.tracker.record_event(self.ad_id, "click"))
        self.assertEqual(event.ip_address, "")
        self.assertEqual(event.user_agent, "")

    def test_long_user_agent_truncated(self):
        event_id = self.tracker.record_event(self.ad_id, "view", "", "x" * 2000)
        self.assertEqual(len(self.db.get(AdEvent, event_id).user_agent), 512)

    def test_repeated_calls_are_not_deduplicated(self):
        first = self.tracker.record_event(self.ad_id, "view", "1.2.3.4", "ua")
        second = self.tracker.record_event(self.ad_id, "view", "1.2.3.4", "ua")
        self.assertNotEqual(first, second)
        self.assertEqual(self.db.query(AdEvent).count(), 2)

    def test_invalid_kind(self):
        with self.assertRaises(ValidationError):
            self.tracker.record_event(self.ad_id, "skip")
        self.assertEqual(self.db.query(AdEvent).count(), 0)

    def test_unknown_ad(self):
        with self.assertRaises(NotFoundError):
            self.tracker.record_event(self.ad_id + 100, "view")
        self.assertEqual(self.db.query(AdEvent).count(), 0)

    def test_id_beyond_storage_range(self):
        with self.assertRaises(NotFoundError):
            self.tracker.record_event(2 ** 64, "view")
        self.assertEqual(self.db.query(AdEvent).count(), 0)

    def test_deleted_ad(self):
        self.store.delete_ad(self.ad_id)
        with self.assertRaises(NotFoundError):
            self.tracker.record_event(self.ad_id, "click")
        self.assertEqual(self.db.query(AdEvent).count(), 0)

    def test_ad_deleted_between_check_and_insert(self):
        # existence check passes, foreign key rejects the insert
        stale = MagicMock()
        stale.filter.return_value.first.return_value = (999,)
        with patch.object(self.db, "query", return_value=stale):
            with self.assertRaises(NotFoundError):
                self.tracker.record_event(999, "view")
        self.assertEqual(self.db.query(AdEvent).count(), 0)

    def test_occurred_at_override(self):
        event_id = self.tracker.record_event(self.ad_id, "view", occurred_at=NOW)
        self.assertEqual(self.db.get(AdEvent, event_id).occurred_at, NOW)


class TestRecordClick(unittest.TestCase):

    def setUp(self):
        self.engine, Session = make_session_factory()
        self.db = Session()
        self.tracker = AttributionTracker(self.db)
        self.ad_id = AdStore(self.db).create_ad(text_ad(redirect_url="https://example.com/deal"))

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_returns_url_and_records_click(self):
        url = self.tracker.record_click(self.ad_id, "10.0.0.1", "ua")
        self.assertEqual(url, "https://example.com/deal")
        event = self.db.query(AdEvent).one()
        self.assertEqual(event.event_type, "click")

    def test_unknown_ad(self):
        with self.assertRaises(NotFoundError):
            self.tracker.record_click(self.ad_id + 1)

    def test_failed_write_still_returns_url(self):
        with patch.object(
            AttributionTracker, "record_event", side_effect=RetryableError("locked")
        ):
            with self.assertLogs("adserver.services.attribution", level="ERROR"):
                url = self.tracker.record_click(self.ad_id)
        self.assertEqual(url, "https://example.com/deal")


if __name__ == '__main__':
    unittest.main()
