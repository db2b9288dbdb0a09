"""
Direct messaging between connected fighters.

Messages can only be sent inside an accepted connection, by one of its two
parties. Message history stays readable to both parties whatever the
connection's status.
"""

from typing import Dict, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, and_
from sparmatch.database.models import Connection, ConnectionStatus, Message, User
from sparmatch.services.connection_service import get_connection_row, is_party
from sparmatch.services.errors import ForbiddenError, ValidationError
from sparmatch.services.user_service import format_user
from sparmatch.utils.constants import MAX_MESSAGE_LENGTH
from sparmatch.utils.datetime_utils import utcnow, isoformat_or_none
import logging

logger = logging.getLogger(__name__)


def format_message(message: Message, sender: Dict = None) -> Dict:
    """
    Convert a Message ORM object into a response dict.

    Args:
        message: Message ORM object
        sender: Optional sender user dict to nest under "sender"

    Returns:
        Dict matching MessageResponse schema
    """
    data = {
        "id": message.id,
        "connection_id": message.connection_id,
        "sender_id": message.sender_id,
        "content": message.content,
        "read_at": isoformat_or_none(message.read_at),
        "created_at": isoformat_or_none(message.created_at),
    }
    if sender is not None:
        data["sender"] = sender
    return data


async def _get_connection_for_party(
    session: AsyncSession, connection_id: int, user_id: int
) -> Connection:
    connection = await get_connection_row(session, connection_id)
    if not is_party(connection, user_id):
        raise ForbiddenError("Not a party to this connection")
    return connection


async def send_message(
    session: AsyncSession, connection_id: int, sender_id: int, content: str
) -> Dict:
    """
    Send a message inside a connection.

    Args:
        session: Database session
        connection_id: Connection ID
        sender_id: Sending user (authenticated caller)
        content: Message text, stored trimmed

    Returns:
        Dict with the created message

    Raises:
        NotFoundError: If the connection does not exist
        ForbiddenError: If the sender is not a party or the connection is not accepted
        ValidationError: If the content is empty after trimming or too long
    """
    connection = await _get_connection_for_party(session, connection_id, sender_id)
    if connection.status != ConnectionStatus.ACCEPTED.value:
        raise ForbiddenError("Messages can only be sent on accepted connections")

    text = (content or "").strip()
    if not text:
        raise ValidationError("Message content cannot be empty")
    if len(text) > MAX_MESSAGE_LENGTH:
        raise ValidationError(f"Message cannot exceed {MAX_MESSAGE_LENGTH} characters")

    message = Message(connection_id=connection_id, sender_id=sender_id, content=text)
    session.add(message)
    await session.flush()
    await session.refresh(message)

    logger.info("Message %s sent on connection %s", message.id, connection_id)
    return format_message(message)


async def list_messages(
    session: AsyncSession, connection_id: int, requesting_user_id: int
) -> List[Dict]:
    """
    Get the message history of a connection, oldest first.

    Args:
        session: Database session
        connection_id: Connection ID
        requesting_user_id: Authenticated caller

    Returns:
        List of message dicts, each with a nested "sender"

    Raises:
        NotFoundError: If the connection does not exist
        ForbiddenError: If the caller is not a party
    """
    await _get_connection_for_party(session, connection_id, requesting_user_id)

    result = await session.execute(
        select(Message, User)
        .join(User, Message.sender_id == User.id)
        .where(Message.connection_id == connection_id)
        .order_by(Message.created_at.asc(), Message.id.asc())
    )
    return [format_message(message, sender=format_user(sender)) for message, sender in result.all()]


async def mark_messages_read(session: AsyncSession, connection_id: int, reader_id: int) -> int:
    """
    Mark every unread message from the other party as read.

    Args:
        session: Database session
        connection_id: Connection ID
        reader_id: Authenticated caller

    Returns:
        Number of messages marked read

    Raises:
        NotFoundError: If the connection does not exist
        ForbiddenError: If the caller is not a party
    """
    await _get_connection_for_party(session, connection_id, reader_id)

    result = await session.execute(
        update(Message)
        .where(
            and_(
                Message.connection_id == connection_id,
                Message.sender_id != reader_id,
                Message.read_at.is_(None),
            )
        )
        .values(read_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount
