import uuid

import pytest

from groupchat.core.exceptions import ConflictError, ForbiddenError, InternalError, NotFoundError
from groupchat.modules.groups.service import MembershipService
from groupchat.modules.groups.store import GroupStore
from groupchat.modules.users.service import UserService


@pytest.fixture
def service(db):
    return MembershipService(GroupStore(db), UserService(db))


def test_concurrent_add_losing_the_race_is_a_conflict(service, db, alice, bob):
    group = service.create_group("Race", alice, True)
    stale = service.get_group(group.id)
    # Another request adds bob between our read and our write
    service.store.add_member(group.id, bob)
    service.get_group = lambda group_id: stale

    with pytest.raises(ConflictError):
        service.add_member(group.id, alice, bob)

    rows = [r for r in db.rows("group_members") if r["user_id"] == bob]
    assert len(rows) == 1


def test_concurrent_joins_do_not_duplicate_membership(service, db, alice, bob):
    group = service.create_group("Race", alice, True)
    stale = service.get_group(group.id)
    service.get_group = lambda group_id: stale

    service.join_group(group.id, bob)
    service.join_group(group.id, bob)

    rows = [r for r in db.rows("group_members") if r["user_id"] == bob]
    assert len(rows) == 1


def test_duplicate_rows_are_collapsed_on_read(service, db, alice, bob):
    group = service.create_group("Dupes", alice, False)
    for _ in range(2):
        db.rows("group_members").append({
            "id": str(uuid.uuid4()),
            "group_id": group.id,
            "user_id": bob,
            "created_at": "2099-01-01T00:00:00.000000+00:00",
        })

    assert service.get_group(group.id).members == [alice, bob]


def test_admin_is_reported_as_member_even_without_a_row(service, db, alice):
    group = service.create_group("Orphan", alice, True)
    db.tables["group_members"] = []

    assert service.get_group(group.id).members == [alice]


def test_create_rolls_back_when_admin_membership_fails(service, db, alice):
    db.fail("group_members", "insert")

    with pytest.raises(InternalError):
        service.create_group("Broken", alice, True)

    assert db.rows("groups") == []


def test_remove_non_member_is_a_no_op(service, alice, carol):
    group = service.create_group("Quiet", alice, True)

    updated = service.remove_member(group.id, alice, carol)

    assert updated.members == [alice]


def test_wrong_admin_is_checked_before_target_lookup(service, alice, bob):
    group = service.create_group("Order", alice, True)

    with pytest.raises(ForbiddenError):
        service.add_member(group.id, bob, str(uuid.uuid4()))


def test_missing_group(service, alice):
    with pytest.raises(NotFoundError):
        service.list_members(str(uuid.uuid4()))
    with pytest.raises(NotFoundError):
        service.remove_member(str(uuid.uuid4()), alice, alice)


def test_list_members_skips_unknown_profiles(service, alice):
    group = service.create_group("Ghosts", alice, True)
    ghost = str(uuid.uuid4())
    service.join_group(group.id, ghost)

    members = service.list_members(group.id)

    assert [m.id for m in members] == [alice]
