import unittest
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from rafflewin.models import (
    DISCOVERY_70,
    DISCOVERY_80,
    Base,
    Contestant,
    Winner,
    normalize_draw_type,
)


class DBTestCase(unittest.TestCase):
    def setUp(self):
        # In-memory SQLite for isolation
        self.engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(
            bind=self.engine, future=True, expire_on_commit=False
        )

    def tearDown(self):
        self.engine.dispose()


class DrawTypeTests(unittest.TestCase):
    def test_normalizes_case_and_whitespace(self):
        self.assertEqual(normalize_draw_type("  Discovery-70 "), DISCOVERY_70)

    def test_unknown_draw_type_raises(self):
        with self.assertRaises(ValueError):
            normalize_draw_type("discovery-90")

    def test_non_string_raises(self):
        with self.assertRaises(TypeError):
            normalize_draw_type(70)  # type: ignore[arg-type]


class ContestantModelTests(DBTestCase):
    def test_get_all_by_draw_type_filters_pool(self):
        with self.Session.begin() as session:
            session.add_all(
                [
                    Contestant(name="Alice", tickets=3, draw_type=DISCOVERY_70),
                    Contestant(name="Bob", tickets=2, draw_type=DISCOVERY_80),
                    Contestant(name="Cara", tickets=1, draw_type="DISCOVERY-70"),
                ]
            )

        with self.Session() as session:
            pool = Contestant.get_all_by_draw_type(session, DISCOVERY_70)
            self.assertEqual([c.name for c in pool], ["Alice", "Cara"])
            self.assertEqual(pool[1].draw_type, DISCOVERY_70)

    def test_name_is_unique_within_pool_only(self):
        with self.Session() as session:
            session.add(Contestant(name="Alice", tickets=1, draw_type=DISCOVERY_70))
            session.add(Contestant(name="Alice", tickets=1, draw_type=DISCOVERY_80))
            session.commit()

            session.add(Contestant(name="Alice", tickets=4, draw_type=DISCOVERY_70))
            with self.assertRaises(IntegrityError):
                session.commit()

    def test_validation(self):
        with self.assertRaises(ValueError):
            Contestant(name="  ", tickets=1, draw_type=DISCOVERY_70)
        with self.assertRaises(ValueError):
            Contestant(name="Neg", tickets=-1, draw_type=DISCOVERY_70)
        with self.assertRaises(TypeError):
            Contestant(name="Float", tickets=1.5, draw_type=DISCOVERY_70)  # type: ignore[arg-type]
        with self.assertRaises(ValueError):
            Contestant(name="Pool", tickets=1, draw_type="elsewhere")

        zero = Contestant(name=" Zero ", tickets=0, draw_type=DISCOVERY_70)
        self.assertEqual(zero.name, "Zero")
        self.assertEqual(zero.tickets, 0)

    def test_get_by_name(self):
        with self.Session() as session:
            session.add(Contestant(name="Dana", tickets=2, draw_type=DISCOVERY_80))
            session.flush()
            self.assertIsNotNone(Contestant.get_by_name(session, " Dana ", DISCOVERY_80))
            self.assertIsNone(Contestant.get_by_name(session, "Dana", DISCOVERY_70))

    def test_to_json(self):
        with self.Session() as session:
            contestant = Contestant(
                name="Eve",
                department="Ops",
                supervisor="Kim",
                tickets=5,
                draw_type=DISCOVERY_70,
            )
            session.add(contestant)
            session.flush()
            data = contestant.to_json()
        self.assertEqual(data["name"], "Eve")
        self.assertEqual(data["tickets"], 5)
        self.assertEqual(data["draw_type"], DISCOVERY_70)
        self.assertIsInstance(data["created_at"], str)


class WinnerModelTests(DBTestCase):
    def test_from_contestant_snapshots_fields(self):
        drawn_at = datetime(2026, 10, 1, 12, 30, tzinfo=timezone.utc)
        with self.Session() as session:
            contestant = Contestant(
                name="Finn",
                department="Sales",
                supervisor="Ola",
                tickets=7,
                draw_type=DISCOVERY_80,
            )
            session.add(contestant)
            session.flush()

            winner = Winner.from_contestant(contestant, DISCOVERY_80, draw_date=drawn_at)
            session.add(winner)
            session.flush()

            self.assertEqual(winner.contestant_id, contestant.id)
            self.assertEqual(winner.department, "Sales")
            self.assertEqual(winner.tickets, 7)
            self.assertFalse(winner.synced)
            self.assertEqual(
                winner.to_json(),
                {
                    "name": "Finn",
                    "department": "Sales",
                    "supervisor": "Ola",
                    "tickets": 7,
                    "draw_type": DISCOVERY_80,
                    "draw_date": "2026-10-01T12:30:00+00:00",
                },
            )

    def test_winner_name_is_unique_across_pools(self):
        with self.Session() as session:
            session.add(Winner(name="Gus", tickets=1, draw_type=DISCOVERY_70))
            session.commit()
            session.add(Winner(name="Gus", tickets=1, draw_type=DISCOVERY_80))
            with self.assertRaises(IntegrityError):
                session.commit()

    def test_from_remote(self):
        winner = Winner.from_remote(
            {
                "id": 42,
                "name": "Hana",
                "department": None,
                "supervisor": "Lee",
                "tickets": "3",
                "draw_type": "discovery-80",
                "draw_date": "2026-09-30T08:00:00Z",
            }
        )
        self.assertTrue(winner.synced)
        self.assertEqual(winner.remote_id, "42")
        self.assertEqual(winner.tickets, 3)
        self.assertEqual(
            winner.draw_date, datetime(2026, 9, 30, 8, 0, tzinfo=timezone.utc)
        )

    def test_from_remote_requires_core_fields(self):
        with self.assertRaises(ValueError):
            Winner.from_remote({"name": "Ivan", "draw_type": DISCOVERY_70})

    def test_get_all_orders_by_draw_date_and_filters(self):
        early = datetime(2026, 1, 1, tzinfo=timezone.utc)
        late = datetime(2026, 2, 1, tzinfo=timezone.utc)
        with self.Session() as session:
            session.add_all(
                [
                    Winner(name="Late", tickets=1, draw_type=DISCOVERY_70, draw_date=late),
                    Winner(name="Early", tickets=1, draw_type=DISCOVERY_70, draw_date=early),
                    Winner(name="Other", tickets=1, draw_type=DISCOVERY_80, draw_date=early, synced=True),
                ]
            )
            session.flush()

            self.assertEqual(
                [w.name for w in Winner.get_all(session, DISCOVERY_70)], ["Early", "Late"]
            )
            self.assertEqual(len(Winner.get_all(session)), 3)
            self.assertEqual(
                [w.name for w in Winner.get_unsynced(session)], ["Early", "Late"]
            )
            self.assertIsNotNone(Winner.get_by_name(session, "Other"))


if __name__ == "__main__":
    unittest.main()
