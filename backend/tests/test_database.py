"""
Unit tests for storage initialisation.
"""

import unittest
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from adserver import main
from adserver.database import Base, build_engine, init_db
from adserver.errors import FatalError


def unreachable_storage():
    return OperationalError("CREATE TABLE ads", {}, Exception("unable to open database file"))


class TestInitDb(unittest.TestCase):

    def setUp(self):
        self.engine = build_engine("sqlite://")

    def tearDown(self):
        self.engine.dispose()

    def test_creates_tables(self):
        init_db(bind=self.engine)
        with self.engine.connect() as conn:
            tables = set(self.engine.dialect.get_table_names(conn))
        self.assertTrue({"ads", "campaigns", "ad_events"} <= tables)

    def test_storage_failure_is_fatal(self):
        with patch.object(Base.metadata, "create_all", side_effect=unreachable_storage()):
            with self.assertLogs("adserver.database", level="CRITICAL"):
                with self.assertRaises(FatalError):
                    init_db(bind=self.engine)

    def test_startup_stops_on_storage_failure(self):
        with patch.object(Base.metadata, "create_all", side_effect=unreachable_storage()):
            with patch.object(main, "SeedLoader") as loader:
                with self.assertRaises(FatalError):
                    main.startup_event()
        loader.assert_not_called()


if __name__ == '__main__':
    unittest.main()
