"""
Unit tests for message service.

Tests that messaging is gated on accepted connections and parties, content
validation, history ordering and read receipts.
"""

import pytest
import pytest_asyncio
from sparmatch.services import connection_service, message_service
from sparmatch.services.errors import ForbiddenError, NotFoundError, ValidationError
from sparmatch.utils.constants import MAX_MESSAGE_LENGTH


@pytest_asyncio.fixture
async def accepted(db_session, users):
    """An accepted connection between alice (requester) and bob (receiver)."""
    req = await connection_service.create_connection(db_session, users["alice"], users["bob"])
    await connection_service.update_status(db_session, req["id"], "accepted", users["bob"])
    return req["id"]


@pytest.mark.asyncio
async def test_cannot_message_on_pending_connection(db_session, users):
    req = await connection_service.create_connection(db_session, users["alice"], users["bob"])

    with pytest.raises(ForbiddenError, match="accepted"):
        await message_service.send_message(db_session, req["id"], users["alice"], "Hi")


@pytest.mark.asyncio
async def test_accept_then_message_flow(db_session, users, accepted):
    """Both parties can message once accepted, and history is oldest first."""
    first = await message_service.send_message(db_session, accepted, users["alice"], "Hi")
    second = await message_service.send_message(
        db_session, accepted, users["bob"], "  Ready Saturday?  "
    )
    assert first["sender_id"] == users["alice"]
    assert first["connection_id"] == accepted
    assert first["read_at"] is None
    assert second["content"] == "Ready Saturday?"

    history = await message_service.list_messages(db_session, accepted, users["bob"])
    assert [m["id"] for m in history] == [first["id"], second["id"]]
    assert [m["sender"]["first_name"] for m in history] == ["Alice", "Bob"]


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["", "   ", "\n\t"])
async def test_empty_content_rejected(db_session, users, accepted, content):
    with pytest.raises(ValidationError, match="empty"):
        await message_service.send_message(db_session, accepted, users["alice"], content)


@pytest.mark.asyncio
async def test_content_length_limit(db_session, users, accepted):
    at_limit = "a" * MAX_MESSAGE_LENGTH
    result = await message_service.send_message(db_session, accepted, users["alice"], at_limit)
    assert len(result["content"]) == MAX_MESSAGE_LENGTH

    with pytest.raises(ValidationError, match="exceed"):
        await message_service.send_message(
            db_session, accepted, users["alice"], at_limit + "a"
        )


@pytest.mark.asyncio
async def test_non_party_cannot_send_or_read(db_session, users, accepted):
    with pytest.raises(ForbiddenError):
        await message_service.send_message(db_session, accepted, users["carol"], "Hey")
    with pytest.raises(ForbiddenError):
        await message_service.list_messages(db_session, accepted, users["carol"])
    with pytest.raises(ForbiddenError):
        await message_service.mark_messages_read(db_session, accepted, users["carol"])


@pytest.mark.asyncio
async def test_missing_connection(db_session, users):
    with pytest.raises(NotFoundError):
        await message_service.send_message(db_session, 31337, users["alice"], "Hi")
    with pytest.raises(NotFoundError):
        await message_service.list_messages(db_session, 31337, users["alice"])


@pytest.mark.asyncio
async def test_history_readable_after_block_but_no_new_messages(db_session, users, accepted):
    await message_service.send_message(db_session, accepted, users["alice"], "See you there")
    await connection_service.update_status(db_session, accepted, "blocked", users["bob"])

    with pytest.raises(ForbiddenError):
        await message_service.send_message(db_session, accepted, users["alice"], "Hello?")

    history = await message_service.list_messages(db_session, accepted, users["alice"])
    assert [m["content"] for m in history] == ["See you there"]


@pytest.mark.asyncio
async def test_empty_history(db_session, users, accepted):
    assert await message_service.list_messages(db_session, accepted, users["alice"]) == []


@pytest.mark.asyncio
async def test_mark_messages_read(db_session, users, accepted):
    """Only the other party's unread messages are marked, and only once."""
    await message_service.send_message(db_session, accepted, users["alice"], "One")
    await message_service.send_message(db_session, accepted, users["alice"], "Two")
    await message_service.send_message(db_session, accepted, users["bob"], "Three")

    assert await message_service.mark_messages_read(db_session, accepted, users["bob"]) == 2
    assert await message_service.mark_messages_read(db_session, accepted, users["bob"]) == 0
    assert await message_service.mark_messages_read(db_session, accepted, users["alice"]) == 1
