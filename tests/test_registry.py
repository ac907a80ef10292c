"""Identity registry and access guard behaviour."""

import pytest

from src.domain.entities import Account, Session, Vehicle
from src.domain.enums import Role
from src.domain.errors import (
    AccountBlocked,
    DuplicateIdentity,
    Forbidden,
    InvalidArgument,
    NotFound,
)


class TestRegistration:
    def test_register_assigns_fresh_ids(self, store):
        a = store.register_account(Account(name="A", email="a@x.com", role=Role.PASSENGER))
        b = store.register_account(Account(name="B", email="b@x.com", role=Role.PASSENGER))
        assert a.id and b.id and a.id != b.id

    def test_email_unique_within_role(self, store, passenger):
        with pytest.raises(DuplicateIdentity):
            store.register_account(
                Account(name="Again", email="PAULA@example.com ", role=Role.PASSENGER)
            )

    def test_same_email_allowed_across_roles(self, store, passenger):
        driver = store.register_account(
            Account(
                name="Paula",
                email="paula@example.com",
                role=Role.DRIVER,
                vehicle=Vehicle("Fiat Uno", "AAA-0001"),
            )
        )
        assert driver.role == Role.DRIVER
        assert len(store.list_accounts()) == 2

    def test_driver_requires_vehicle(self, store):
        with pytest.raises(InvalidArgument):
            store.register_account(Account(name="D", email="d@x.com", role=Role.DRIVER))

    def test_blank_name_rejected(self, store):
        with pytest.raises(InvalidArgument):
            store.register_account(Account(name="  ", email="n@x.com", role=Role.PASSENGER))

    def test_admin_registration_needs_admin_session(self, store, passenger, admin):
        new_admin = Account(name="Root", email="root@x.com", role=Role.ADMIN)
        with pytest.raises(Forbidden):
            store.register_account(new_admin)
        with pytest.raises(Forbidden):
            store.register_account(new_admin, passenger)
        assert store.register_account(new_admin, admin).role == Role.ADMIN

    def test_unknown_role_rejected(self, store):
        with pytest.raises(InvalidArgument):
            store.register_account(Account(name="P", email="p@x.com", role="pilot"))
        assert store.list_accounts() == []

    def test_failed_registration_leaves_registry_unchanged(self, store, passenger):
        before = len(store.list_accounts())
        with pytest.raises(DuplicateIdentity):
            store.register_account(
                Account(name="Paula", email="paula@example.com", role=Role.PASSENGER)
            )
        assert len(store.list_accounts()) == before


class TestAuthentication:
    def test_unknown_role_rejected(self, store, passenger):
        with pytest.raises(InvalidArgument):
            store.authenticate("paula@example.com", "pilot")
        assert store.active_session().is_anonymous

    def test_authenticate_sets_active_session(self, store, passenger):
        account = store.authenticate("paula@example.com", Role.PASSENGER)
        assert account.id == passenger.account_id
        assert store.active_session() == passenger

    def test_wrong_role_is_not_found(self, store, passenger):
        with pytest.raises(NotFound):
            store.authenticate("paula@example.com", Role.DRIVER)

    def test_unknown_email_is_not_found(self, store):
        with pytest.raises(NotFound):
            store.authenticate("nobody@example.com", Role.PASSENGER)

    def test_blocked_account_cannot_sign_in(self, store, admin, passenger):
        store.set_blocked(admin, passenger.account_id, True)
        with pytest.raises(AccountBlocked):
            store.authenticate("paula@example.com", Role.PASSENGER)
        assert store.active_session().is_anonymous

    def test_logout_clears_active_session(self, store, passenger):
        store.authenticate("paula@example.com", Role.PASSENGER)
        store.logout()
        assert store.active_session() == Session.anonymous()


class TestBlocking:
    def test_only_admin_can_block(self, store, passenger, driver):
        with pytest.raises(Forbidden):
            store.set_blocked(passenger, driver.account_id, True)
        assert store.get_account(driver.account_id).blocked is False

    def test_unknown_account_not_found(self, store, admin):
        with pytest.raises(NotFound):
            store.set_blocked(admin, "ghost", True)

    def test_set_blocked_is_idempotent(self, store, admin, driver):
        store.set_blocked(admin, driver.account_id, True)
        again = store.set_blocked(admin, driver.account_id, True)
        assert again.blocked is True

    def test_toggle_flips_flag(self, store, admin, driver):
        assert store.toggle_blocked(admin, driver.account_id).blocked is True
        assert store.toggle_blocked(admin, driver.account_id).blocked is False

    def test_admins_cannot_be_blocked(self, store, admin):
        with pytest.raises(Forbidden):
            store.set_blocked(admin, "admin-1", True)

    def test_blocked_session_refused_on_commands(self, store, admin, passenger):
        store.set_blocked(admin, passenger.account_id, True)
        with pytest.raises(AccountBlocked):
            store.create_ride(passenger, "Station", "Airport", 20)
        assert store.list_rides() == []


class TestVehicleAndSearch:
    def test_driver_updates_own_vehicle(self, store, driver):
        account = store.update_vehicle(driver, Vehicle("Toyota Corolla", "new-0001"))
        assert account.vehicle == Vehicle("Toyota Corolla", "NEW-0001")

    def test_passenger_cannot_set_vehicle(self, store, passenger):
        with pytest.raises(Forbidden):
            store.update_vehicle(passenger, Vehicle("Toyota Corolla", "NEW-0001"))

    def test_offer_keeps_vehicle_snapshot(self, store, ride, driver):
        offer = store.submit_offer(driver, ride.id, 20)
        store.update_vehicle(driver, Vehicle("Toyota Corolla", "NEW-0001"))
        assert store.offers_for_ride(ride.id)[0].vehicle == offer.vehicle
        assert offer.vehicle.model == "VW Jetta"

    def test_search_excludes_admins_and_matches_name_or_email(
        self, store, admin, passenger, driver
    ):
        assert [a.name for a in store.search_accounts(admin, "DAVE")] == ["Dave"]
        assert {a.name for a in store.search_accounts(admin, "example.com")} == {
            "Paula",
            "Dave",
        }

    def test_search_is_admin_only(self, store, passenger):
        with pytest.raises(Forbidden):
            store.search_accounts(passenger, "")

    def test_returned_snapshots_do_not_alias_store_state(self, store, driver):
        snapshot = store.get_account(driver.account_id)
        snapshot.blocked = True
        assert store.get_account(driver.account_id).blocked is False
