"""Tests for the in-memory membership store."""

from datetime import datetime, timedelta, timezone

import pytest

from modules.store.interfaces import IMembershipStore
from modules.store.memory import InMemoryStore
from modules.store.models import (
    EmailFrequency,
    EmailPreferences,
    Group,
    GroupMember,
    HelpRequest,
    Invite,
    RequestStatus,
    User,
    UserLimits,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_group(store: InMemoryStore, group_id: str = "g1", owner: str = "alice") -> Group:
    return store.insert_group(
        Group(id=group_id, name="Maple Street", created_by=owner, created_at=NOW),
        GroupMember(group_id=group_id, user_id=owner, joined_at=NOW),
    )


def make_request(
    store: InMemoryStore,
    request_id: str,
    group_id: str = "g1",
    user_id: str = "alice",
    created_at: datetime = NOW,
    needed_by: datetime = NOW + timedelta(days=1),
    status: RequestStatus = RequestStatus.OPEN,
) -> HelpRequest:
    return store.insert_request(
        HelpRequest(
            id=request_id,
            user_id=user_id,
            group_id=group_id,
            item_description="Milk",
            needed_by=needed_by,
            status=status,
            created_at=created_at,
        )
    )


def make_invite(
    store: InMemoryStore,
    invite_id: str = "i1",
    group_id: str = "g1",
    email: str = "bob@example.com",
    expires_at: datetime = NOW + timedelta(days=7),
) -> Invite:
    return store.insert_invite(
        Invite(
            id=invite_id,
            group_id=group_id,
            email=email,
            token=f"token-{invite_id}",
            expires_at=expires_at,
            created_at=NOW,
        )
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


class TestProtocol:
    def test_implements_interface(self, store):
        assert isinstance(store, IMembershipStore)

    def test_generate_id_is_unique(self, store):
        assert len({store.generate_id() for _ in range(50)}) == 50


class TestUsers:
    def test_upsert_and_get(self, store):
        store.upsert_user(User(id="alice", email="alice@example.com", name="Alice"))
        assert store.get_user("alice").name == "Alice"
        assert store.get_user("nobody") is None

    def test_get_by_email_is_case_insensitive(self, store):
        store.upsert_user(User(id="alice", email="alice@example.com"))
        assert store.get_user_by_email(" Alice@Example.com ").id == "alice"

    def test_returned_records_are_copies(self, store):
        store.upsert_user(User(id="alice", email="alice@example.com", name="Alice"))
        copy = store.get_user("alice")
        copy.name = "Mallory"
        assert store.get_user("alice").name == "Alice"


class TestGroups:
    def test_insert_group_adds_owner_membership(self, store):
        make_group(store)
        assert store.get_member("g1", "alice") is not None
        assert store.count_members("g1") == 1
        assert store.count_groups_created("alice") == 1

    def test_list_groups_newest_first(self, store):
        make_group(store, "g1")
        make_group(store, "g2")
        assert [g.id for g in store.list_groups(["g1", "g2"])] == ["g2", "g1"]

    def test_delete_group_cascades(self, store):
        make_group(store)
        store.insert_member(GroupMember(group_id="g1", user_id="bob"), capacity=20)
        make_request(store, "r1")
        make_invite(store)

        assert store.delete_group("g1") is True

        assert store.get_group("g1") is None
        assert store.count_members("g1") == 0
        assert store.get_request("r1") is None
        assert store.get_invite_by_token("token-i1") is None

    def test_delete_missing_group(self, store):
        assert store.delete_group("missing") is False


class TestMembers:
    def test_insert_member_respects_capacity(self, store):
        make_group(store)
        assert store.insert_member(GroupMember(group_id="g1", user_id="bob"), capacity=2)
        assert not store.insert_member(GroupMember(group_id="g1", user_id="carol"), capacity=2)
        assert store.count_members("g1") == 2

    def test_insert_member_rejects_duplicates(self, store):
        make_group(store)
        assert not store.insert_member(GroupMember(group_id="g1", user_id="alice"), capacity=20)

    def test_insert_member_requires_group(self, store):
        assert not store.insert_member(GroupMember(group_id="nope", user_id="bob"), capacity=20)

    def test_memberships(self, store):
        make_group(store, "g1")
        make_group(store, "g2", owner="bob")
        store.insert_member(GroupMember(group_id="g2", user_id="alice"), capacity=20)
        assert {m.group_id for m in store.list_memberships("alice")} == {"g1", "g2"}
        assert store.count_memberships("alice") == 2
        assert store.delete_member("g2", "alice") is True
        assert store.delete_member("g2", "alice") is False


class TestRequests:
    def test_insert_requires_group(self, store):
        assert make_request(store, "r1", group_id="gone") is None
        assert store.get_request("r1") is None

    def test_list_newest_first_with_ties(self, store):
        make_group(store)
        make_request(store, "r1")
        make_request(store, "r2")
        make_request(store, "r3", created_at=NOW - timedelta(hours=1))
        assert [r.id for r in store.list_requests(group_id="g1")] == ["r2", "r1", "r3"]

    def test_list_filters(self, store):
        make_group(store)
        make_request(store, "r1", user_id="alice")
        make_request(store, "r2", user_id="bob")
        assert [r.id for r in store.list_requests(user_id="bob")] == ["r2"]
        assert store.list_requests(group_id="other") == []

    def test_count_open_requests(self, store):
        make_group(store)
        make_request(store, "r1")
        make_request(store, "r2", status=RequestStatus.EXPIRED)
        assert store.count_open_requests("alice") == 1

    def test_update_request_applies_when_condition_holds(self, store):
        make_group(store)
        make_request(store, "r1")
        updated = store.update_request(
            "r1",
            {"status": RequestStatus.CLAIMED, "claimed_by": "bob", "claimed_at": NOW},
            expected_status=RequestStatus.OPEN,
        )
        assert updated.status == RequestStatus.CLAIMED
        assert store.get_request("r1").claimed_by == "bob"

    def test_update_request_rejects_stale_status(self, store):
        make_group(store)
        make_request(store, "r1", status=RequestStatus.FULFILLED)
        result = store.update_request(
            "r1", {"status": RequestStatus.OPEN}, expected_status=RequestStatus.CLAIMED
        )
        assert result is None
        assert store.get_request("r1").status == RequestStatus.FULFILLED

    def test_update_request_checks_claimer(self, store):
        make_group(store)
        make_request(store, "r1")
        store.update_request(
            "r1",
            {"status": RequestStatus.CLAIMED, "claimed_by": "bob", "claimed_at": NOW},
            expected_status=RequestStatus.OPEN,
        )
        result = store.update_request(
            "r1",
            {"status": RequestStatus.OPEN, "claimed_by": None, "claimed_at": None},
            expected_status=RequestStatus.CLAIMED,
            expected_claimed_by="carol",
        )
        assert result is None

    def test_update_request_rejects_half_claim(self, store):
        make_group(store)
        make_request(store, "r1")
        with pytest.raises(ValueError):
            store.update_request(
                "r1",
                {"status": RequestStatus.CLAIMED, "claimed_by": "bob"},
                expected_status=RequestStatus.OPEN,
            )
        assert store.get_request("r1").status == RequestStatus.OPEN

    def test_update_missing_request(self, store):
        assert store.update_request("nope", {}, expected_status=RequestStatus.OPEN) is None

    def test_delete_request_conditional(self, store):
        make_group(store)
        make_request(store, "r1", status=RequestStatus.FULFILLED)
        make_request(store, "r2")
        allowed = [RequestStatus.OPEN, RequestStatus.CLAIMED]
        assert store.delete_request("r1", allowed) is False
        assert store.delete_request("r2", allowed) is True
        assert store.get_request("r2") is None

    def test_list_overdue_requests(self, store):
        make_group(store)
        make_request(store, "late", needed_by=NOW - timedelta(minutes=1))
        make_request(store, "future", needed_by=NOW + timedelta(minutes=1))
        make_request(
            store, "late-fulfilled", needed_by=NOW - timedelta(minutes=1),
            status=RequestStatus.FULFILLED,
        )
        assert [r.id for r in store.list_overdue_requests(NOW)] == ["late"]


class TestInvites:
    def test_mark_used_only_once(self, store):
        make_group(store)
        make_invite(store)
        assert store.mark_invite_used("i1", NOW) is True
        assert store.mark_invite_used("i1", NOW) is False

    def test_list_invites_filters(self, store):
        make_group(store, "g1")
        make_group(store, "g2", owner="bob")
        make_invite(store, "i1", "g1", email="carol@example.com")
        make_invite(store, "i2", "g2", email="Carol@Example.com")
        make_invite(store, "i3", "g2", email="dave@example.com")

        assert {i.id for i in store.list_invites(email="carol@example.com")} == {"i1", "i2"}
        assert {i.id for i in store.list_invites(group_ids=["g2"])} == {"i2", "i3"}
        assert store.list_invites(group_ids=[]) == []

    def test_delete_expired_invites_keeps_used(self, store):
        make_group(store)
        make_invite(store, "old", expires_at=NOW - timedelta(days=1))
        make_invite(store, "old-used", expires_at=NOW - timedelta(days=1))
        make_invite(store, "fresh")
        store.mark_invite_used("old-used", NOW - timedelta(days=2))

        assert store.delete_expired_invites(NOW) == 1
        assert store.get_invite_by_token("token-old") is None
        assert store.get_invite_by_token("token-old-used") is not None
        assert store.get_invite_by_token("token-fresh") is not None

    def test_is_redeemable(self):
        invite = Invite(
            id="i1", group_id="g1", email="bob@example.com", token="t",
            expires_at=NOW, created_at=NOW,
        )
        assert invite.is_redeemable(NOW)
        assert not invite.is_redeemable(NOW + timedelta(seconds=1))
        assert not invite.model_copy(update={"used_at": NOW}).is_redeemable(NOW)


class TestLimitsAndPreferences:
    def test_insert_limits_is_insert_if_absent(self, store):
        first = store.insert_limits(
            UserLimits(user_id="alice", max_open_requests=5, max_groups_created=3, max_groups_joined=5)
        )
        second = store.insert_limits(
            UserLimits(user_id="alice", max_open_requests=9, max_groups_created=9, max_groups_joined=9)
        )
        assert first.max_open_requests == 5
        assert second.max_open_requests == 5

    def test_update_limits(self, store):
        assert store.update_limits("alice", {"max_open_requests": 7}) is None
        store.insert_limits(
            UserLimits(user_id="alice", max_open_requests=5, max_groups_created=3, max_groups_joined=5)
        )
        assert store.update_limits("alice", {"max_open_requests": 7}).max_open_requests == 7

    def test_email_preferences(self, store):
        assert store.get_email_preferences("alice") is None
        store.upsert_email_preferences(
            EmailPreferences(user_id="alice", frequency=EmailFrequency.IMMEDIATE)
        )
        assert store.get_email_preferences("alice").frequency == EmailFrequency.IMMEDIATE
