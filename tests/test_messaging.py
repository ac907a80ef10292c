"""Chat rules on the per-ride messaging log."""

import pytest

from src.domain.entities import SYSTEM_SENDER_ID, Session
from src.domain.errors import (
    AccountBlocked,
    EmptyMessage,
    Forbidden,
    InvalidState,
    NotFound,
)


class TestPostMessage:
    def test_requester_can_chat(self, store, ride, passenger):
        message = store.post_message(passenger, ride.id, "  Hello driver  ")
        assert message.text == "Hello driver"
        assert message.sender_name == "Paula"
        assert not message.is_system

    def test_bidding_driver_can_chat(self, store, ride, driver):
        store.submit_offer(driver, ride.id, 20)
        assert store.post_message(driver, ride.id, "Can do 20").sender_name == "Dave"

    def test_admin_can_chat(self, store, ride, admin):
        assert store.post_message(admin, ride.id, "Support here").sender_id == "admin-1"

    def test_driver_can_ask_before_bidding(self, store, ride, driver):
        message = store.post_message(driver, ride.id, "Is there luggage?")
        assert message.sender_id == driver.account_id
        assert store.get_ride(ride.id).status.value == "pending"
        assert store.offers_for_ride(ride.id) == []

    def test_anonymous_session_refused(self, store, ride):
        with pytest.raises(Forbidden):
            store.post_message(Session.anonymous(), ride.id, "hi")

    def test_blocked_account_refused(self, store, ride, driver, admin):
        store.set_blocked(admin, driver.account_id, True)
        with pytest.raises(AccountBlocked):
            store.post_message(driver, ride.id, "hi")

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_text_refused(self, store, ride, passenger, text):
        before = len(store.messages_for_ride(ride.id))
        with pytest.raises(EmptyMessage):
            store.post_message(passenger, ride.id, text)
        assert len(store.messages_for_ride(ride.id)) == before

    def test_closed_ride_refuses_chat(self, store, ride, passenger):
        store.cancel_ride(passenger, ride.id)
        with pytest.raises(InvalidState):
            store.post_message(passenger, ride.id, "still there?")

    def test_closed_ride_check_precedes_blank_check(self, store, ride, passenger):
        store.cancel_ride(passenger, ride.id)
        with pytest.raises(InvalidState):
            store.post_message(passenger, ride.id, "   ")

    def test_unknown_ride(self, store, passenger):
        with pytest.raises(NotFound):
            store.post_message(passenger, "ride-404", "hi")


class TestMessageLog:
    def test_system_entries_use_sentinel_sender(self, store, ride):
        (entry,) = store.messages_for_ride(ride.id)
        assert entry.sender_id == SYSTEM_SENDER_ID
        assert entry.is_system

    def test_log_iteration_is_restartable(self, store, ride, passenger):
        store.post_message(passenger, ride.id, "one")
        store.post_message(passenger, ride.id, "two")
        first = [m.id for m in store.messaging.messages_for(ride.id)]
        second = [m.id for m in store.messaging.messages_for(ride.id)]
        assert first == second
        assert len(first) == 3

    def test_equal_timestamps_keep_append_order(self, store, ride, passenger):
        for text in ("a", "b", "c"):
            store.post_message(passenger, ride.id, text)
        assert [m.text for m in store.messages_for_ride(ride.id)][1:] == ["a", "b", "c"]
