"""Service-level checks: transactions and best-effort writes.

Invariants:
    - A failure after the first write rolls back the whole operation
    - ``lastMessageSeen`` failures never surface to the caller
"""

import pytest

from guild_hall_api.app.core.errors import InternalStoreError, PaymentRequiredError
from guild_hall_api.app.schemas.group import GroupCreate, GroupType
from guild_hall_api.app.services import store
from guild_hall_api.app.services.chat_service import ChatService
from guild_hall_api.app.services.group_service import GroupService


def _boom(*args, **kwargs):
    raise InternalStoreError("disk on fire")


async def test_invite_rolls_back_when_transaction_fails(make_user, load_user, monkeypatch):
    alice = make_user("alice")
    bob = make_user("bob")
    party = await GroupService.create_group(
        GroupCreate(name="Fellowship", type=GroupType.PARTY), {"user_id": alice.id},
    )
    monkeypatch.setattr(store, "populate_group", _boom)

    with pytest.raises(InternalStoreError):
        await GroupService.invite(party.id, bob.id, {"user_id": alice.id})

    assert load_user(bob.id).invitations["party"] is None


async def test_failed_guild_creation_keeps_balance(make_user, load_user, monkeypatch):
    alice = make_user("alice", balance=1.0)
    monkeypatch.setattr(store, "insert_group", _boom)

    with pytest.raises(InternalStoreError):
        await GroupService.create_group(GroupCreate(name="Readers", type=GroupType.GUILD), {"user_id": alice.id})

    assert load_user(alice.id).balance == 1.0


async def test_payment_required_leaves_no_group(make_user):
    alice = make_user("alice", balance=0.5)

    with pytest.raises(PaymentRequiredError):
        await GroupService.create_group(GroupCreate(name="Readers", type=GroupType.GUILD), {"user_id": alice.id})

    listing = await GroupService.list_groups({"user_id": alice.id}, ["guilds"])
    assert listing == {"guilds": []}


async def test_list_ignores_unknown_categories(make_user):
    alice = make_user("alice")

    listing = await GroupService.list_groups({"user_id": alice.id}, ["bogus", "party", "party"])

    assert listing == {"party": []}


def test_mark_seen_failure_is_swallowed(make_user, load_user, monkeypatch):
    alice = make_user("alice")
    monkeypatch.setattr(store, "save_user", _boom)

    ChatService.mark_seen(alice.id, "message-1")

    assert load_user(alice.id).party == {}


def test_mark_seen_moves_pointer(make_user, load_user):
    alice = make_user("alice")

    ChatService.mark_seen(alice.id, "message-1")

    assert load_user(alice.id).party == {"lastMessageSeen": "message-1"}
