"""Retention sweeper, scheduler and worker cycle."""

from datetime import timedelta

import pytest

from src.api.app import build_store
from src.config import settings
from src.domain.entities import Account, Session
from src.domain.enums import Role
from src.domain.errors import Forbidden, NotFound
from src.domain.store import NegotiationStore
from src.infrastructure.clock import ManualClock, Scheduler
from src.infrastructure.ids import SequentialIdGenerator
from src.workers.sweeper import build_scheduler, run_cycle

WINDOW = timedelta(days=15)


class TestRetentionSweep:
    def test_old_ride_purged_with_offers_and_messages(
        self, store, clock, ride, passenger, driver
    ):
        store.submit_offer(driver, ride.id, 20)
        store.post_message(passenger, ride.id, "hello")
        clock.advance(WINDOW + timedelta(seconds=1))

        assert store.sweep() == 1
        assert store.list_rides() == []
        with pytest.raises(NotFound):
            store.messages_for_ride(ride.id)
        with pytest.raises(NotFound):
            store.offers_for_ride(ride.id)
        assert store.ledger.for_ride(ride.id) == []
        assert list(store.messaging.messages_for(ride.id)) == []

    def test_young_ride_survives(self, store, clock, ride):
        clock.advance(WINDOW - timedelta(seconds=1))
        assert store.sweep() == 0
        assert store.get_ride(ride.id).id == ride.id

    def test_ride_exactly_at_window_is_purged(self, store, clock, ride):
        clock.advance(WINDOW)
        assert store.sweep() == 1

    def test_purge_ignores_status(self, store, clock, ride, passenger, driver):
        offer = store.submit_offer(driver, ride.id, 20)
        store.accept_offer(passenger, offer.id)
        store.confirm_ride(driver, ride.id)
        clock.advance(WINDOW + timedelta(days=1))
        assert store.sweep() == 1

    def test_only_expired_rides_removed(self, store, clock, passenger, other_passenger):
        old = store.create_ride(passenger, "A", "B", 10)
        clock.advance(timedelta(days=10))
        young = store.create_ride(other_passenger, "C", "D", 12)
        clock.advance(timedelta(days=6))
        assert store.sweep() == 1
        assert [r.id for r in store.list_rides()] == [young.id]
        with pytest.raises(NotFound):
            store.get_ride(old.id)

    def test_purge_frees_passenger_for_new_ride(self, store, clock, ride, passenger):
        clock.advance(WINDOW)
        store.sweep()
        assert store.create_ride(passenger, "Home", "Work", 9).id != ride.id

    def test_custom_window_purges_on_time(self, clock):
        store = NegotiationStore(
            retention=timedelta(hours=1), clock=clock, ids=SequentialIdGenerator()
        )
        passenger = store.register_account(
            Account(name="Paula", email="paula@example.com", role=Role.PASSENGER)
        )
        ride = store.create_ride(Session(passenger.id), "A", "B", 10)

        clock.advance(timedelta(minutes=59))
        assert store.sweep() == 0
        assert store.get_ride(ride.id).id == ride.id

        clock.advance(timedelta(minutes=1))
        assert store.sweep() == 1
        assert store.list_rides() == []

    def test_window_comes_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "retention_days", 3)
        monkeypatch.setattr(settings, "seed_demo_accounts", False)
        assert build_store().sweeper.retention == timedelta(days=3)

    def test_window_must_be_positive(self, clock):
        with pytest.raises(ValueError):
            NegotiationStore(retention=timedelta(0), clock=clock)

    def test_sweep_with_session_requires_admin(self, store, clock, ride, passenger, admin):
        clock.advance(WINDOW)
        with pytest.raises(Forbidden):
            store.sweep(passenger)
        with pytest.raises(Forbidden):
            store.sweep(Session.anonymous())
        assert len(store.list_rides()) == 1
        assert store.sweep(admin) == 1


class TestScheduler:
    def test_job_runs_when_due(self):
        clock = ManualClock()
        scheduler = Scheduler(clock)
        calls = []
        scheduler.every(timedelta(minutes=1), lambda: calls.append(clock.now()))

        assert scheduler.tick() == 1  # runs immediately by default
        assert scheduler.tick() == 0
        clock.advance(timedelta(seconds=59))
        assert scheduler.tick() == 0
        clock.advance(timedelta(seconds=1))
        assert scheduler.tick() == 1
        assert len(calls) == 2

    def test_delayed_first_run(self):
        clock = ManualClock()
        scheduler = Scheduler(clock)
        calls = []
        scheduler.every(timedelta(minutes=1), lambda: calls.append(1), run_immediately=False)
        assert scheduler.tick() == 0
        clock.advance(timedelta(minutes=1))
        assert scheduler.tick() == 1

    def test_manual_clock_refuses_to_rewind(self):
        with pytest.raises(ValueError):
            ManualClock().advance(timedelta(seconds=-1))

    def test_store_scheduler_sweeps_on_tick(self, store, clock, ride):
        scheduler = build_scheduler(store, interval=timedelta(hours=1))
        assert run_cycle(scheduler) == 1
        assert len(store.list_rides()) == 1

        clock.advance(WINDOW)
        assert run_cycle(scheduler) == 1
        assert store.list_rides() == []

    def test_failing_job_is_logged_not_raised(self, clock, caplog):
        scheduler = Scheduler(clock)

        def boom():
            raise RuntimeError("boom")

        scheduler.every(timedelta(minutes=1), boom)
        assert run_cycle(scheduler) == 0
        assert "Unhandled error in retention cycle" in caplog.text
