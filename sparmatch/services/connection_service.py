"""
Connection service for managing sparring connection requests.

Handles creating requests, moving them through the status lifecycle
(pending -> accepted/declined/blocked, accepted -> blocked), and listing a
user's connections with the other party resolved.
"""

from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased
from sparmatch.database.models import (
    Connection,
    ConnectionStatus,
    LIVE_CONNECTION_STATUSES,
    User,
)
from sparmatch.services import user_service
from sparmatch.services.errors import (
    DuplicateConnectionError,
    ForbiddenError,
    ForbiddenTransitionError,
    NotFoundError,
    SelfConnectionError,
    ValidationError,
)
from sparmatch.services.user_service import format_user
from sparmatch.utils.datetime_utils import utcnow, isoformat_or_none
import logging

logger = logging.getLogger(__name__)

# Allowed status changes. declined and blocked are terminal.
ALLOWED_TRANSITIONS = {
    ConnectionStatus.PENDING: {
        ConnectionStatus.ACCEPTED,
        ConnectionStatus.DECLINED,
        ConnectionStatus.BLOCKED,
    },
    ConnectionStatus.ACCEPTED: {ConnectionStatus.BLOCKED},
    ConnectionStatus.DECLINED: set(),
    ConnectionStatus.BLOCKED: set(),
}

# Target statuses only the receiver may set. Either party may block.
RECEIVER_ONLY_STATUSES = {ConnectionStatus.ACCEPTED, ConnectionStatus.DECLINED}


def live_pair_key(user_a: int, user_b: int) -> str:
    """Order-independent key for a pair of users."""
    low, high = sorted([user_a, user_b])
    return f"{low}:{high}"


def is_party(connection: Connection, user_id: int) -> bool:
    """True if user_id is the requester or the receiver."""
    return user_id in (connection.requester_id, connection.receiver_id)


def format_connection(connection: Connection) -> Dict:
    """
    Convert a Connection ORM object into a response dict (no user details).

    Args:
        connection: Connection ORM object

    Returns:
        Dict matching ConnectionResponse schema
    """
    return {
        "id": connection.id,
        "requester_id": connection.requester_id,
        "receiver_id": connection.receiver_id,
        "status": connection.status,
        "message": connection.message,
        "created_at": isoformat_or_none(connection.created_at),
        "updated_at": isoformat_or_none(connection.updated_at),
    }


async def get_connection_row(session: AsyncSession, connection_id: int) -> Connection:
    """
    Load a connection by id.

    Raises:
        NotFoundError: If the connection does not exist
    """
    result = await session.execute(select(Connection).where(Connection.id == connection_id))
    connection = result.scalar_one_or_none()
    if connection is None:
        raise NotFoundError("Connection not found")
    return connection


async def get_connection_between(
    session: AsyncSession, user_a: int, user_b: int, statuses=LIVE_CONNECTION_STATUSES
) -> Optional[Connection]:
    """
    Get the most recent connection between two users (in either direction)
    whose status is one of ``statuses``.

    Args:
        session: Database session
        user_a: First user ID
        user_b: Second user ID
        statuses: Status values to match (defaults to live statuses)

    Returns:
        Connection or None
    """
    result = await session.execute(
        select(Connection)
        .where(
            and_(
                Connection.status.in_(list(statuses)),
                or_(
                    and_(Connection.requester_id == user_a, Connection.receiver_id == user_b),
                    and_(Connection.requester_id == user_b, Connection.receiver_id == user_a),
                ),
            )
        )
        .order_by(Connection.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def create_connection(
    session: AsyncSession,
    requester_id: int,
    receiver_id: int,
    message: Optional[str] = None,
) -> Dict:
    """
    Send a connection request from one user to another.

    Rejects requests to yourself, to unknown users, to users you are blocked
    with, and when a pending or accepted connection already exists between
    the two users in either direction. The live-pair unique constraint backs
    up the pre-check for concurrent requests.

    Args:
        session: Database session
        requester_id: User sending the request (authenticated caller)
        receiver_id: User receiving the request
        message: Optional note to the receiver

    Returns:
        Dict with connection data

    Raises:
        SelfConnectionError: If requester and receiver are the same user
        NotFoundError: If the receiver does not exist
        ForbiddenError: If the pair has a blocked connection
        DuplicateConnectionError: If a live connection already exists
    """
    if requester_id == receiver_id:
        raise SelfConnectionError("Cannot send a connection request to yourself")

    if not await user_service.user_exists(session, receiver_id):
        raise NotFoundError("User not found")

    existing = await get_connection_between(session, requester_id, receiver_id)
    if existing:
        if existing.status == ConnectionStatus.ACCEPTED.value:
            raise DuplicateConnectionError("Already connected with this user")
        if existing.requester_id == requester_id:
            raise DuplicateConnectionError("Connection request already sent")
        raise DuplicateConnectionError(
            "This user already sent you a connection request. Accept it instead."
        )

    blocked = await get_connection_between(
        session, requester_id, receiver_id, statuses=(ConnectionStatus.BLOCKED.value,)
    )
    if blocked:
        raise ForbiddenError("Cannot send a connection request to this user")

    note = message.strip() if message else None
    connection = Connection(
        requester_id=requester_id,
        receiver_id=receiver_id,
        status=ConnectionStatus.PENDING.value,
        message=note or None,
        live_pair_key=live_pair_key(requester_id, receiver_id),
    )
    try:
        async with session.begin_nested():
            session.add(connection)
            await session.flush()
    except IntegrityError:
        # Lost a race with a concurrent request for the same pair
        raise DuplicateConnectionError("A connection between these users already exists")
    await session.refresh(connection)

    logger.info(
        "Connection %s created: user %s -> user %s", connection.id, requester_id, receiver_id
    )
    return format_connection(connection)


def _check_transition(connection: Connection, new_status: ConnectionStatus, acting_user_id: int):
    """Raise ForbiddenTransitionError unless acting_user_id may move connection to new_status."""
    if not is_party(connection, acting_user_id):
        raise ForbiddenTransitionError("Not a party to this connection")

    current = ConnectionStatus(connection.status)
    if new_status not in ALLOWED_TRANSITIONS[current]:
        raise ForbiddenTransitionError(
            f"Cannot change connection from {current.value} to {new_status.value}"
        )

    if new_status in RECEIVER_ONLY_STATUSES and acting_user_id != connection.receiver_id:
        raise ForbiddenTransitionError(
            f"Only the receiver can mark a connection as {new_status.value}"
        )


async def update_status(
    session: AsyncSession, connection_id: int, new_status: str, acting_user_id: int
) -> Dict:
    """
    Move a connection to a new status.

    The write is a conditional single-row UPDATE on the status read here, so
    two concurrent transitions cannot both succeed.

    Args:
        session: Database session
        connection_id: Connection ID
        new_status: Target status value
        acting_user_id: User performing the change (authenticated caller)

    Returns:
        Dict with updated connection data

    Raises:
        NotFoundError: If the connection does not exist
        ValidationError: If new_status is not a known status
        ForbiddenTransitionError: If the transition or the actor is not allowed
    """
    connection = await get_connection_row(session, connection_id)

    try:
        target = ConnectionStatus(new_status)
    except ValueError:
        raise ValidationError(f"Invalid connection status: {new_status}")

    _check_transition(connection, target, acting_user_id)

    current_status = connection.status
    now = utcnow()
    values = {"status": target.value, "updated_at": now}
    if target.value not in LIVE_CONNECTION_STATUSES:
        values["live_pair_key"] = None

    result = await session.execute(
        update(Connection)
        .where(and_(Connection.id == connection_id, Connection.status == current_status))
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise ForbiddenTransitionError("Connection status changed concurrently, reload and retry")

    await session.refresh(connection)
    logger.info(
        "Connection %s: %s -> %s by user %s",
        connection_id,
        current_status,
        target.value,
        acting_user_id,
    )
    return format_connection(connection)


async def get_connection(session: AsyncSession, connection_id: int, user_id: int) -> Dict:
    """
    Get one connection with both parties, as seen by user_id.

    Raises:
        NotFoundError: If the connection does not exist
        ForbiddenError: If user_id is not a party
    """
    connection = await get_connection_row(session, connection_id)
    if not is_party(connection, user_id):
        raise ForbiddenError("Not authorized to view this connection")

    users = await user_service.get_users_by_ids(
        session, [connection.requester_id, connection.receiver_id]
    )
    return _with_parties(connection, users, user_id)


def _with_parties(connection: Connection, users: Dict[int, Dict], viewer_id: int) -> Dict:
    requester = users.get(connection.requester_id)
    receiver = users.get(connection.receiver_id)
    data = format_connection(connection)
    data["requester"] = requester
    data["receiver"] = receiver
    data["other_user"] = receiver if viewer_id == connection.requester_id else requester
    return data


async def list_connections(session: AsyncSession, user_id: int) -> List[Dict]:
    """
    Get every connection (any status) the user takes part in.

    Requester and receiver come from two separate joins on the users table,
    and ``other_user`` is always the counter-party, never the caller.

    Args:
        session: Database session
        user_id: User to list connections for

    Returns:
        List of connection dicts with requester, receiver and other_user,
        most recently updated first
    """
    Requester = aliased(User)
    Receiver = aliased(User)

    result = await session.execute(
        select(Connection, Requester, Receiver)
        .join(Requester, Connection.requester_id == Requester.id)
        .join(Receiver, Connection.receiver_id == Receiver.id)
        .where(or_(Connection.requester_id == user_id, Connection.receiver_id == user_id))
        .order_by(Connection.updated_at.desc(), Connection.id.desc())
    )

    items = []
    for connection, requester, receiver in result.all():
        users = {requester.id: format_user(requester), receiver.id: format_user(receiver)}
        items.append(_with_parties(connection, users, user_id))
    return items
