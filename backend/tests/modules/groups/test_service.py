"""Tests for the group membership service."""

import asyncio
from datetime import timedelta

import pytest

from modules.groups.exceptions import (
    AlreadyMemberError,
    CannotRemoveSelfError,
    GroupFullError,
    GroupNameRequiredError,
    GroupNotFoundError,
    InvalidGroupNameError,
    InvalidInviteEmailError,
    InviteAlreadyUsedError,
    InviteEmailMismatchError,
    InviteInvalidError,
    MembershipNotFoundError,
    NotGroupMemberError,
    NotGroupOwnerError,
    OwnerCannotLeaveError,
)
from modules.groups.interfaces import IGroupService
from modules.groups.service import get_group_service, reset_group_service
from modules.quotas.exceptions import GroupsCreatedLimitError, GroupsJoinedLimitError
from modules.store.models import utc_now
from shared.exceptions import NotFoundError

from tests.conftest import add_user, request_form


async def invite_and_join(groups, group_id: str, owner_id: str, user) -> None:
    invite = await groups.create_invite(group_id, owner_id, user.email)
    await groups.join_group(invite.token, user.id)


class TestGroupServiceBasics:
    def test_implements_interface(self, groups):
        assert isinstance(groups, IGroupService)

    def test_singleton(self):
        reset_group_service()
        assert get_group_service() is get_group_service()


class TestCreateGroup:
    @pytest.mark.asyncio
    async def test_creator_becomes_owner_and_member(self, groups, store, alice):
        group = await groups.create_group(alice.id, "Maple Street")

        assert group.name == "Maple Street"
        assert group.created_by == alice.id
        assert store.get_member(group.id, alice.id) is not None

    @pytest.mark.asyncio
    async def test_name_is_sanitized(self, groups, alice):
        group = await groups.create_group(alice.id, "  <b>Book</b> Club ")
        assert group.name == "Book Club"

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, groups, alice):
        with pytest.raises(GroupNameRequiredError):
            await groups.create_group(alice.id, "   ")

    @pytest.mark.asyncio
    async def test_markup_only_name_rejected(self, groups, alice):
        with pytest.raises(InvalidGroupNameError):
            await groups.create_group(alice.id, "<script>alert(1)</script>")

    @pytest.mark.asyncio
    async def test_created_limit(self, groups, alice):
        for i in range(3):
            await groups.create_group(alice.id, f"Group {i}")

        with pytest.raises(GroupsCreatedLimitError):
            await groups.create_group(alice.id, "One too many")

    @pytest.mark.asyncio
    async def test_concurrent_creates_respect_limit(self, groups, store, alice):
        results = await asyncio.gather(
            *(groups.create_group(alice.id, f"Group {i}") for i in range(5)),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, Exception)]
        assert len(failures) == 2
        assert all(isinstance(r, GroupsCreatedLimitError) for r in failures)
        assert store.count_groups_created(alice.id) == 3


class TestListing:
    @pytest.mark.asyncio
    async def test_user_groups_newest_first(self, groups, alice):
        first = await groups.create_group(alice.id, "First")
        second = await groups.create_group(alice.id, "Second")

        listed = await groups.get_user_groups(alice.id)
        assert [g.id for g in listed] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_user_without_groups(self, groups):
        assert await groups.get_user_groups("nobody") == []

    @pytest.mark.asyncio
    async def test_members_in_join_order(self, groups, group, alice, bob, carol):
        members = await groups.get_group_members(group.id, bob.id)
        assert [m.id for m in members] == [alice.id, bob.id, carol.id]

    @pytest.mark.asyncio
    async def test_members_hidden_from_outsiders(self, groups, group, store):
        outsider = add_user(store, "dave")
        with pytest.raises(NotGroupMemberError):
            await groups.get_group_members(group.id, outsider.id)

    @pytest.mark.asyncio
    async def test_members_of_missing_group(self, groups, alice):
        with pytest.raises(GroupNotFoundError):
            await groups.get_group_members("missing", alice.id)


class TestCreateInvite:
    @pytest.mark.asyncio
    async def test_invite_fields(self, groups, alice, settings):
        group = await groups.create_group(alice.id, "Maple Street")

        invite = await groups.create_invite(group.id, alice.id, "  Dave@Example.com ")

        assert invite.email == "dave@example.com"
        assert invite.used_at is None
        assert len(invite.token) >= 43
        ttl = invite.expires_at - invite.created_at
        assert ttl == timedelta(days=settings.invite_ttl_days)

    @pytest.mark.asyncio
    async def test_tokens_are_unique(self, groups, alice):
        group = await groups.create_group(alice.id, "Maple Street")
        tokens = {
            (await groups.create_invite(group.id, alice.id, f"user{i}@example.com")).token
            for i in range(10)
        }
        assert len(tokens) == 10

    @pytest.mark.asyncio
    async def test_only_owner_can_invite(self, groups, group, bob):
        with pytest.raises(NotGroupOwnerError) as exc_info:
            await groups.create_invite(group.id, bob.id, "dave@example.com")
        assert exc_info.value.message == "Only group creators can send invites"

    @pytest.mark.asyncio
    async def test_invalid_email(self, groups, alice):
        group = await groups.create_group(alice.id, "Maple Street")
        with pytest.raises(InvalidInviteEmailError):
            await groups.create_invite(group.id, alice.id, "not-an-email")

    @pytest.mark.asyncio
    async def test_existing_member_cannot_be_invited(self, groups, group, alice, bob):
        with pytest.raises(AlreadyMemberError):
            await groups.create_invite(group.id, alice.id, bob.email.upper())

    @pytest.mark.asyncio
    async def test_missing_group(self, groups, alice):
        with pytest.raises(GroupNotFoundError):
            await groups.create_invite("missing", alice.id, "dave@example.com")


class TestValidateInvite:
    @pytest.mark.asyncio
    async def test_valid_token(self, groups, alice):
        group = await groups.create_group(alice.id, "Maple Street")
        invite = await groups.create_invite(group.id, alice.id, "dave@example.com")

        validation = await groups.validate_invite(invite.token)

        assert validation.group.id == group.id
        assert validation.invite.id == invite.id

    @pytest.mark.asyncio
    async def test_unknown_token(self, groups):
        with pytest.raises(InviteInvalidError) as exc_info:
            await groups.validate_invite("nope")
        assert isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.message == "Invalid or expired invite token"

    @pytest.mark.asyncio
    async def test_expired_token(self, groups, store, alice):
        group = await groups.create_group(alice.id, "Maple Street")
        invite = await groups.create_invite(group.id, alice.id, "dave@example.com")
        store._invites[invite.id] = invite.model_copy(
            update={"expires_at": utc_now() - timedelta(seconds=1)}
        )

        with pytest.raises(InviteInvalidError):
            await groups.validate_invite(invite.token)

    @pytest.mark.asyncio
    async def test_used_token(self, groups, store, alice):
        group = await groups.create_group(alice.id, "Maple Street")
        invite = await groups.create_invite(group.id, alice.id, "dave@example.com")
        store.mark_invite_used(invite.id, utc_now())

        with pytest.raises(InviteInvalidError):
            await groups.validate_invite(invite.token)


class TestJoinGroup:
    @pytest.mark.asyncio
    async def test_join_spends_invite(self, groups, store, alice, bob):
        group = await groups.create_group(alice.id, "Maple Street")
        invite = await groups.create_invite(group.id, alice.id, bob.email)

        joined = await groups.join_group(invite.token, bob.id)

        assert joined.id == group.id
        assert store.get_member(group.id, bob.id) is not None
        assert store.get_invite_by_token(invite.token).used_at is not None

    @pytest.mark.asyncio
    async def test_invite_is_single_use(self, groups, alice, bob, carol):
        group = await groups.create_group(alice.id, "Maple Street")
        invite = await groups.create_invite(group.id, alice.id, bob.email)
        await groups.join_group(invite.token, bob.id)

        with pytest.raises(InviteInvalidError):
            await groups.join_group(invite.token, carol.id)

    @pytest.mark.asyncio
    async def test_already_member(self, groups, store, alice):
        group = await groups.create_group(alice.id, "Maple Street")
        invite = await groups.create_invite(group.id, alice.id, "spare@example.com")

        with pytest.raises(AlreadyMemberError):
            await groups.join_group(invite.token, alice.id)
        assert store.get_invite_by_token(invite.token).used_at is None

    @pytest.mark.asyncio
    async def test_group_capacity(self, groups, store, alice, settings):
        group = await groups.create_group(alice.id, "Maple Street")
        for i in range(settings.max_group_members - 1):
            await invite_and_join(groups, group.id, alice.id, add_user(store, f"user{i}"))
        assert store.count_members(group.id) == settings.max_group_members

        late = add_user(store, "late")
        invite = await groups.create_invite(group.id, alice.id, late.email)
        with pytest.raises(GroupFullError) as exc_info:
            await groups.join_group(invite.token, late.id)

        assert exc_info.value.message == "Group is full (maximum 20 members)"
        assert store.get_invite_by_token(invite.token).used_at is None

    @pytest.mark.asyncio
    async def test_concurrent_joins_for_last_slot(self, groups, store, alice, settings):
        group = await groups.create_group(alice.id, "Maple Street")
        for i in range(settings.max_group_members - 2):
            await invite_and_join(groups, group.id, alice.id, add_user(store, f"user{i}"))

        racers = [add_user(store, "racer1"), add_user(store, "racer2")]
        invites = [await groups.create_invite(group.id, alice.id, r.email) for r in racers]

        results = await asyncio.gather(
            *(groups.join_group(i.token, r.id) for i, r in zip(invites, racers)),
            return_exceptions=True,
        )

        assert sum(1 for r in results if isinstance(r, GroupFullError)) == 1
        assert store.count_members(group.id) == settings.max_group_members

    @pytest.mark.asyncio
    async def test_concurrent_redemption_of_one_invite(self, groups, store, alice, bob, carol):
        group = await groups.create_group(alice.id, "Maple Street")
        invite = await groups.create_invite(group.id, alice.id, "shared@example.com")

        results = await asyncio.gather(
            groups.join_group(invite.token, bob.id),
            groups.join_group(invite.token, carol.id),
            return_exceptions=True,
        )

        assert sum(1 for r in results if isinstance(r, InviteInvalidError)) == 1
        assert store.count_members(group.id) == 2

    @pytest.mark.asyncio
    async def test_joined_limit(self, groups, store, alice):
        joiner = add_user(store, "joiner")
        owners = [add_user(store, f"owner{i}") for i in range(5)]
        for owner in owners:
            group = await groups.create_group(owner.id, "Group")
            await invite_and_join(groups, group.id, owner.id, joiner)

        group = await groups.create_group(alice.id, "Maple Street")
        invite = await groups.create_invite(group.id, alice.id, joiner.email)
        with pytest.raises(GroupsJoinedLimitError):
            await groups.join_group(invite.token, joiner.id)

    @pytest.mark.asyncio
    async def test_rolls_back_membership_when_invite_spent(self, groups, store, alice, bob, monkeypatch):
        group = await groups.create_group(alice.id, "Maple Street")
        invite = await groups.create_invite(group.id, alice.id, bob.email)
        monkeypatch.setattr(store, "mark_invite_used", lambda invite_id, used_at: False)

        with pytest.raises(InviteInvalidError):
            await groups.join_group(invite.token, bob.id)
        assert store.get_member(group.id, bob.id) is None


class TestLeaveGroup:
    @pytest.mark.asyncio
    async def test_member_leaves(self, groups, store, group, bob):
        result = await groups.leave_group(group.id, bob.id)

        assert result.group_deleted is False
        assert store.get_member(group.id, bob.id) is None

    @pytest.mark.asyncio
    async def test_owner_cannot_leave_with_members(self, groups, group, alice):
        with pytest.raises(OwnerCannotLeaveError):
            await groups.leave_group(group.id, alice.id)

    @pytest.mark.asyncio
    async def test_sole_owner_leaving_deletes_group(self, groups, lifecycle, store, alice):
        group = await groups.create_group(alice.id, "Maple Street")
        request = await lifecycle.create_request(alice.id, request_form(group.id))
        invite = await groups.create_invite(group.id, alice.id, "dave@example.com")

        result = await groups.leave_group(group.id, alice.id)

        assert result.group_deleted is True
        assert store.get_group(group.id) is None
        assert store.get_request(request.id) is None
        assert store.get_invite_by_token(invite.token) is None

    @pytest.mark.asyncio
    async def test_owner_leaves_after_last_member(self, groups, store, alice, bob):
        group = await groups.create_group(alice.id, "Maple Street")
        await invite_and_join(groups, group.id, alice.id, bob)
        leftover = await groups.create_invite(group.id, alice.id, "dave@example.com")
        dave = add_user(store, "dave")

        with pytest.raises(OwnerCannotLeaveError):
            await groups.leave_group(group.id, alice.id)

        await groups.leave_group(group.id, bob.id)
        result = await groups.leave_group(group.id, alice.id)

        assert result.group_deleted is True
        assert group.id not in [g.id for g in await groups.get_user_groups(alice.id)]
        with pytest.raises(InviteInvalidError):
            await groups.join_group(leftover.token, dave.id)

    @pytest.mark.asyncio
    async def test_non_member(self, groups, group, store):
        outsider = add_user(store, "dave")
        with pytest.raises(MembershipNotFoundError):
            await groups.leave_group(group.id, outsider.id)

    @pytest.mark.asyncio
    async def test_missing_group(self, groups, alice):
        with pytest.raises(GroupNotFoundError):
            await groups.leave_group("missing", alice.id)

    @pytest.mark.asyncio
    async def test_leaving_frees_join_quota(self, groups, quotas, group, bob):
        before = await quotas.get_counts(bob.id)
        await groups.leave_group(group.id, bob.id)
        after = await quotas.get_counts(bob.id)
        assert after.groups_joined_count == before.groups_joined_count - 1


class TestRemoveMember:
    @pytest.mark.asyncio
    async def test_owner_removes_member(self, groups, store, group, alice, bob):
        await groups.remove_group_member(group.id, alice.id, bob.id)
        assert store.get_member(group.id, bob.id) is None

    @pytest.mark.asyncio
    async def test_non_owner_cannot_remove(self, groups, group, bob, carol):
        with pytest.raises(NotGroupOwnerError) as exc_info:
            await groups.remove_group_member(group.id, bob.id, carol.id)
        assert exc_info.value.message == "Only group owners can remove members"

    @pytest.mark.asyncio
    async def test_owner_cannot_remove_self(self, groups, group, alice):
        with pytest.raises(CannotRemoveSelfError):
            await groups.remove_group_member(group.id, alice.id, alice.id)

    @pytest.mark.asyncio
    async def test_target_not_member(self, groups, group, alice):
        with pytest.raises(MembershipNotFoundError):
            await groups.remove_group_member(group.id, alice.id, "nobody")


class TestAddressedInvitations:
    @pytest.mark.asyncio
    async def test_accept(self, groups, store, alice, bob):
        group = await groups.create_group(alice.id, "Maple Street")
        invite = await groups.create_invite(group.id, alice.id, bob.email)

        joined = await groups.accept_invitation(invite.token, bob.id, "BOB@example.com")

        assert joined.id == group.id
        assert store.get_member(group.id, bob.id) is not None

    @pytest.mark.asyncio
    async def test_accept_wrong_email(self, groups, alice, bob, carol):
        group = await groups.create_group(alice.id, "Maple Street")
        invite = await groups.create_invite(group.id, alice.id, bob.email)

        with pytest.raises(InviteEmailMismatchError):
            await groups.accept_invitation(invite.token, carol.id, carol.email)

    @pytest.mark.asyncio
    async def test_accept_used(self, groups, alice, bob):
        group = await groups.create_group(alice.id, "Maple Street")
        invite = await groups.create_invite(group.id, alice.id, bob.email)
        await groups.accept_invitation(invite.token, bob.id, bob.email)

        with pytest.raises(InviteInvalidError):
            await groups.accept_invitation(invite.token, bob.id, bob.email)

    @pytest.mark.asyncio
    async def test_accept_expired(self, groups, store, alice, bob):
        group = await groups.create_group(alice.id, "Maple Street")
        invite = await groups.create_invite(group.id, alice.id, bob.email)
        store._invites[invite.id] = invite.model_copy(
            update={"expires_at": utc_now() - timedelta(minutes=1)}
        )

        with pytest.raises(InviteInvalidError):
            await groups.accept_invitation(invite.token, bob.id, bob.email)

    @pytest.mark.asyncio
    async def test_expired_invite_for_someone_else_looks_unknown(self, groups, store, alice, bob, carol):
        group = await groups.create_group(alice.id, "Maple Street")
        invite = await groups.create_invite(group.id, alice.id, bob.email)
        store._invites[invite.id] = invite.model_copy(
            update={"expires_at": utc_now() - timedelta(minutes=1)}
        )

        with pytest.raises(InviteInvalidError) as expired:
            await groups.accept_invitation(invite.token, carol.id, carol.email)
        with pytest.raises(InviteInvalidError) as unknown:
            await groups.accept_invitation("no-such-token", carol.id, carol.email)

        assert expired.value.to_dict() == unknown.value.to_dict()

    @pytest.mark.asyncio
    async def test_used_invite_for_someone_else_looks_unknown(self, groups, alice, bob, carol):
        group = await groups.create_group(alice.id, "Maple Street")
        invite = await groups.create_invite(group.id, alice.id, bob.email)
        await groups.accept_invitation(invite.token, bob.id, bob.email)

        with pytest.raises(InviteInvalidError):
            await groups.accept_invitation(invite.token, carol.id, carol.email)
        with pytest.raises(InviteInvalidError):
            await groups.decline_invitation(invite.token, carol.id, carol.email)

    @pytest.mark.asyncio
    async def test_decline(self, groups, store, alice, bob):
        group = await groups.create_group(alice.id, "Maple Street")
        invite = await groups.create_invite(group.id, alice.id, bob.email)

        await groups.decline_invitation(invite.token, bob.id, bob.email)

        assert store.get_member(group.id, bob.id) is None
        with pytest.raises(InviteInvalidError):
            await groups.join_group(invite.token, bob.id)

    @pytest.mark.asyncio
    async def test_decline_twice(self, groups, alice, bob):
        group = await groups.create_group(alice.id, "Maple Street")
        invite = await groups.create_invite(group.id, alice.id, bob.email)
        await groups.decline_invitation(invite.token, bob.id, bob.email)

        with pytest.raises(InviteInvalidError):
            await groups.decline_invitation(invite.token, bob.id, bob.email)

    @pytest.mark.asyncio
    async def test_decline_loses_race(self, groups, store, alice, bob, monkeypatch):
        group = await groups.create_group(alice.id, "Maple Street")
        invite = await groups.create_invite(group.id, alice.id, bob.email)
        monkeypatch.setattr(store, "mark_invite_used", lambda invite_id, used_at: False)

        with pytest.raises(InviteAlreadyUsedError):
            await groups.decline_invitation(invite.token, bob.id, bob.email)


class TestInvitationListings:
    @pytest.mark.asyncio
    async def test_pending_for_invitee(self, groups, store, alice, bob):
        group = await groups.create_group(alice.id, "Maple Street")
        invite = await groups.create_invite(group.id, alice.id, bob.email)
        spent = await groups.create_invite(group.id, alice.id, bob.email)
        store.mark_invite_used(spent.id, utc_now())

        pending = await groups.get_pending_invitations("Bob@Example.com")

        assert [p.id for p in pending] == [invite.id]
        assert pending[0].group_name == "Maple Street"
        assert pending[0].inviter_name == "Alice"
        assert pending[0].token == invite.token

    @pytest.mark.asyncio
    async def test_outgoing_for_owner(self, groups, alice, bob):
        group = await groups.create_group(alice.id, "Maple Street")
        first = await groups.create_invite(group.id, alice.id, "dave@example.com")
        second = await groups.create_invite(group.id, alice.id, "erin@example.com")

        outgoing = await groups.get_pending_outgoing_invitations(alice.id)
        assert [o.id for o in outgoing] == [second.id, first.id]

        assert await groups.get_pending_outgoing_invitations(bob.id) == []

    @pytest.mark.asyncio
    async def test_invitation_count(self, groups, alice, settings):
        group = await groups.create_group(alice.id, "Maple Street")
        await groups.create_invite(group.id, alice.id, "dave@example.com")

        count = await groups.get_invitation_count(alice.id)

        assert count.current == 1
        assert count.max == settings.max_pending_invitations

    @pytest.mark.asyncio
    async def test_cleanup_expired_invites(self, groups, store, alice):
        group = await groups.create_group(alice.id, "Maple Street")
        stale = await groups.create_invite(group.id, alice.id, "dave@example.com")
        fresh = await groups.create_invite(group.id, alice.id, "erin@example.com")

        removed = await groups.cleanup_expired_invites(now=utc_now() + timedelta(days=8))
        assert removed == 2

        assert await groups.cleanup_expired_invites() == 0
        assert store.get_invite_by_token(stale.token) is None
        assert store.get_invite_by_token(fresh.token) is None
