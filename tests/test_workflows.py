import random
import unittest

import requests
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from rafflewin.draw import FENWICK_TREE, NoPositiveWeightError
from rafflewin.models import DISCOVERY_70, DISCOVERY_80, Base, Contestant, Winner
from rafflewin.store import WinnerStore
from rafflewin.workflows import (
    available_contestants,
    is_draw_available,
    refresh_winners,
    run_raffle_draw,
)



class DummySupabaseClient:
    def __init__(self, rows=None, *, fetch_error=None, insert_error=None):
        self.rows = list(rows or [])
        self.fetch_error = fetch_error
        self.insert_error = insert_error
        self.inserted: list[dict] = []

    def fetch_winners(self) -> list[dict]:
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.rows)

    def insert_winner(self, payload: dict) -> dict:
        if self.insert_error is not None:
            raise self.insert_error
        stored = {"id": len(self.rows) + 1, **payload}
        self.rows.append(stored)
        self.inserted.append(payload)
        return stored


class RaffleDrawWorkflowTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(
            bind=self.engine, future=True, expire_on_commit=False
        )

    def tearDown(self):
        self.engine.dispose()

    def _seed(self, session):
        session.add_all(
            [
                Contestant(name="A", department="Eng", tickets=10, draw_type=DISCOVERY_70),
                Contestant(name="B", department="Ops", tickets=5, draw_type=DISCOVERY_70),
                Contestant(name="C", department="Fin", tickets=5, draw_type=DISCOVERY_70),
                Contestant(name="X", department="Eng", tickets=4, draw_type=DISCOVERY_80),
                Contestant(name="A", department="Eng", tickets=2, draw_type=DISCOVERY_80),
            ]
        )
        session.flush()

    def test_run_raffle_draw_persists_and_syncs_winners(self):
        client = DummySupabaseClient()
        with self.Session.begin() as session:
            self._seed(session)
            outcome = run_raffle_draw(
                session, DISCOVERY_70, 2, client=client, rng=random.Random(1)
            )

            self.assertEqual(outcome.draw_type, DISCOVERY_70)
            self.assertEqual(outcome.requested, 2)
            self.assertTrue(outcome.remote_refreshed)
            self.assertEqual(len(outcome.winners), 2)
            self.assertEqual(len({w.name for w in outcome.winners}), 2)
            self.assertEqual(outcome.unsynced, [])
            self.assertEqual(len(client.inserted), 2)
            for winner in outcome.winners:
                self.assertEqual(winner.draw_type, DISCOVERY_70)
                self.assertIsNotNone(winner.draw_date)

    def test_repeated_draws_exhaust_pool_without_repeats(self):
        with self.Session.begin() as session:
            self._seed(session)
            rng = random.Random(8)
            first = run_raffle_draw(session, DISCOVERY_70, 2, rng=rng)
            second = run_raffle_draw(session, DISCOVERY_70, 2, rng=rng)
            third = run_raffle_draw(session, DISCOVERY_70, 2, rng=rng)

            names = [w.name for w in first.winners + second.winners]
            self.assertEqual(sorted(names), ["A", "B", "C"])
            self.assertEqual(len(second.winners), 1)
            self.assertEqual(third.winners, [])
            self.assertFalse(is_draw_available(session, DISCOVERY_70))

    def test_winner_is_excluded_from_other_pool(self):
        with self.Session.begin() as session:
            self._seed(session)
            store = WinnerStore(session)
            store.add_winner(
                Contestant.get_by_name(session, "A", DISCOVERY_70), DISCOVERY_70
            )

            remaining = available_contestants(session, DISCOVERY_80, store.excluded_names())
            self.assertEqual([c.name for c in remaining], ["X"])

            outcome = run_raffle_draw(session, DISCOVERY_80, 5, store=store)
            self.assertEqual([w.name for w in outcome.winners], ["X"])

    def test_remote_winners_are_excluded(self):
        client = DummySupabaseClient(
            [
                {"id": 1, "name": "A", "tickets": 10, "draw_type": DISCOVERY_70},
                {"id": 2, "name": "B", "tickets": 5, "draw_type": DISCOVERY_70},
            ]
        )
        with self.Session.begin() as session:
            self._seed(session)
            outcome = run_raffle_draw(session, DISCOVERY_70, 3, client=client)
            self.assertEqual([w.name for w in outcome.winners], ["C"])
            self.assertEqual(len(Winner.get_all(session)), 3)

    def test_remote_fetch_failure_falls_back_to_local_cache(self):
        client = DummySupabaseClient(fetch_error=requests.ConnectionError("down"))
        with self.Session.begin() as session:
            self._seed(session)
            store = WinnerStore(session, client)
            store.add_winner(
                Contestant.get_by_name(session, "A", DISCOVERY_70), DISCOVERY_70
            )

            with self.assertLogs("rafflewin.workflows", level="WARNING"):
                outcome = run_raffle_draw(
                    session, DISCOVERY_70, 5, store=store, rng=random.Random(2)
                )

            self.assertFalse(outcome.remote_refreshed)
            self.assertEqual(sorted(w.name for w in outcome.winners), ["B", "C"])

    def test_failed_persist_is_flagged_unsynced(self):
        client = DummySupabaseClient(insert_error=requests.HTTPError("500"))
        with self.Session.begin() as session:
            self._seed(session)
            outcome = run_raffle_draw(
                session, DISCOVERY_80, 1, client=client, rng=random.Random(3)
            )
            self.assertEqual(len(outcome.winners), 1)
            self.assertEqual(outcome.unsynced, outcome.winners)
            self.assertEqual(len(Winner.get_unsynced(session)), 1)

    def test_zero_weight_pool_raises(self):
        with self.Session.begin() as session:
            session.add_all(
                [
                    Contestant(name="Z1", tickets=0, draw_type=DISCOVERY_80),
                    Contestant(name="Z2", tickets=0, draw_type=DISCOVERY_80),
                ]
            )
            session.flush()
            with self.assertRaises(NoPositiveWeightError):
                run_raffle_draw(session, DISCOVERY_80, 1)
            self.assertEqual(Winner.get_all(session), [])

    def test_alternate_algorithm_and_validation(self):
        with self.Session.begin() as session:
            self._seed(session)
            outcome = run_raffle_draw(
                session,
                "Discovery-70",
                3,
                rng=random.Random(4),
                algorithm_key=FENWICK_TREE,
            )
            self.assertEqual(sorted(w.name for w in outcome.winners), ["A", "B", "C"])

            with self.assertRaises(ValueError):
                run_raffle_draw(session, DISCOVERY_70, -1)
            with self.assertRaises(ValueError):
                run_raffle_draw(session, "discovery-99", 1)

    def test_zero_count_draws_nothing(self):
        with self.Session.begin() as session:
            self._seed(session)
            outcome = run_raffle_draw(session, DISCOVERY_70, 0)
            self.assertEqual(outcome.winners, [])
            self.assertTrue(is_draw_available(session, DISCOVERY_70))

    def test_refresh_winners_without_remote(self):
        with self.Session() as session:
            self.assertFalse(refresh_winners(WinnerStore(session)))

    def test_unparseable_remote_draw_date_still_excludes_winner(self):
        client = DummySupabaseClient(
            [
                {
                    "id": 1,
                    "name": "A",
                    "tickets": 1000,
                    "draw_type": DISCOVERY_70,
                    "draw_date": 1760000000,
                }
            ]
        )
        with self.Session.begin() as session:
            session.add_all(
                [
                    Contestant(name="A", tickets=1000, draw_type=DISCOVERY_70),
                    Contestant(name="B", tickets=1, draw_type=DISCOVERY_70),
                ]
            )
            session.flush()
            with self.assertLogs("rafflewin.store", level="WARNING"):
                outcome = run_raffle_draw(
                    session, DISCOVERY_70, 1, client=client, rng=random.Random(0)
                )

            self.assertTrue(outcome.remote_refreshed)
            self.assertEqual([w.name for w in outcome.winners], ["B"])

    def test_malformed_remote_row_does_not_unexclude_later_rows(self):
        client = DummySupabaseClient(
            [
                {"id": 1, "name": "Q", "tickets": 3, "draw_type": "discovery-90"},
                {"id": 2, "name": "A", "tickets": 1000, "draw_type": DISCOVERY_70},
            ]
        )
        with self.Session.begin() as session:
            session.add_all(
                [
                    Contestant(name="A", tickets=1000, draw_type=DISCOVERY_70),
                    Contestant(name="B", tickets=1, draw_type=DISCOVERY_70),
                ]
            )
            session.flush()
            with self.assertLogs("rafflewin.store", level="WARNING"):
                outcome = run_raffle_draw(
                    session, DISCOVERY_70, 2, client=client, rng=random.Random(0)
                )

            self.assertEqual([w.name for w in outcome.winners], ["B"])
            self.assertEqual(sorted(w.name for w in Winner.get_all(session)), ["A", "B"])


if __name__ == "__main__":
    unittest.main()
