"""Tests for recipient access checks against the database"""

import uuid

import pytest
from postgrest.exceptions import APIError

from attenthive.core.access import can_access_recipient, can_write_to_recipient, load_ownership
from attenthive.core.exceptions import InternalError
from attenthive.core.permissions import AccessKind, HiveRole


@pytest.fixture
def pet(alice, make_recipient):
    return make_recipient(alice)


class TestCanAccessRecipient:
    def test_primary_owner(self, db, alice, pet):
        result = can_access_recipient(db, alice.id, pet["id"])
        assert result.can_access
        assert result.role == HiveRole.OWNER
        assert result.kind is AccessKind.PRIMARY_OWNER
        assert result.owner_id == alice.id

    @pytest.mark.parametrize("role,kind", [
        ("OWNER", AccessKind.CO_OWNER),
        ("CAREGIVER", AccessKind.CAREGIVER),
        ("VIEWER", AccessKind.VIEWER),
    ])
    def test_member_gets_row_role(self, db, bob, pet, add_member, role, kind):
        add_member(pet, bob, role)
        result = can_access_recipient(db, bob.id, pet["id"])
        assert result.can_access
        assert result.role == HiveRole(role)
        assert result.kind is kind

    def test_stranger_denied(self, db, bob, pet):
        result = can_access_recipient(db, bob.id, pet["id"])
        assert not result.can_access
        assert result.role is None

    def test_other_members_do_not_leak(self, db, bob, carol, pet, add_member):
        add_member(pet, carol, "CAREGIVER")
        assert not can_access_recipient(db, bob.id, pet["id"]).can_access

    def test_missing_recipient(self, db, alice):
        result = can_access_recipient(db, alice.id, str(uuid.uuid4()))
        assert not result.can_access
        assert result.role is None

    def test_malformed_id_is_not_found(self, db, alice):
        result = can_access_recipient(db, alice.id, "not-a-uuid")
        assert not result.can_access

    def test_unexpected_database_error_propagates(self, db, alice, pet, monkeypatch):
        original_table = db.table

        def fail():
            raise APIError({"code": "XX000", "message": "boom", "hint": None, "details": None})

        def broken_table(name):
            query = original_table(name)
            query.execute = fail
            return query

        monkeypatch.setattr(db, "table", broken_table)
        with pytest.raises(InternalError):
            can_access_recipient(db, alice.id, pet["id"])


class TestCanWriteToRecipient:
    def test_owner_and_caregiver_write(self, db, alice, bob, carol, pet, add_member):
        add_member(pet, bob, "OWNER")
        add_member(pet, carol, "CAREGIVER")
        assert can_write_to_recipient(db, alice.id, pet["id"])
        assert can_write_to_recipient(db, bob.id, pet["id"])
        assert can_write_to_recipient(db, carol.id, pet["id"])

    def test_viewer_and_stranger_do_not(self, db, bob, carol, pet, add_member):
        add_member(pet, bob, "VIEWER")
        assert not can_write_to_recipient(db, bob.id, pet["id"])
        assert not can_write_to_recipient(db, carol.id, pet["id"])


class TestLoadOwnership:
    def test_snapshot_has_every_member(self, db, alice, bob, carol, pet, add_member):
        add_member(pet, bob, "OWNER")
        add_member(pet, carol, "VIEWER")
        ownership = load_ownership(db, pet["id"])
        assert ownership.owner_id == alice.id
        assert {(m.user_id, m.role) for m in ownership.members} == {
            (bob.id, HiveRole.OWNER),
            (carol.id, HiveRole.VIEWER),
        }

    def test_missing_recipient(self, db):
        assert load_ownership(db, str(uuid.uuid4())) is None
