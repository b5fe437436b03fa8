"""
Swimlane reordering.

Moving a client between lanes, or changing its priority inside a lane,
shifts the positions of its neighbours. The raw shifting rules live in
``shift_for_status_change`` and ``shift_for_priority_change``; afterwards
every touched lane is compacted back to positions 1..N so the board never
shows gaps or duplicates.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from .errors import ClientNotFound
from .schema import Client, Lane
from .store import ClientStore
from .validation import parse_identifier, validate_priority, validate_status

logger = logging.getLogger(__name__)


def shift_for_status_change(
    clients: List[Client],
    target_id: int,
    from_lane: Lane,
    to_lane: Lane,
    position: int,
) -> List[Client]:
    """
    Close the gap in ``from_lane`` and open one in ``to_lane``.

    Clients left behind below ``position`` move up by one; clients in the
    destination at or below ``position`` move down by one, and the target
    takes ``position`` itself. Mutates and returns ``clients``.
    """
    for c in clients:
        if c.id == target_id:
            c.position = position
        elif c.status == from_lane and c.position > position:
            c.position -= 1
        elif c.status == to_lane and c.position >= position:
            c.position += 1
    return clients


def shift_for_priority_change(
    clients: List[Client],
    target_id: int,
    lane: Lane,
    position: int,
    priority: int,
) -> List[Client]:
    """
    Redistribute the clients below the target after its priority changed.

    Below ``position``, a client that is no more urgent than the new
    priority (or has none) moves down one slot; a strictly more urgent
    one moves up one slot. Clients above the target, and the target
    itself, keep their positions. Mutates and returns ``clients``.
    """
    for c in clients:
        if c.id == target_id or c.status != lane or c.position <= position:
            continue
        if c.priority is None or c.priority >= priority:
            c.position += 1
        else:
            c.position -= 1
    return clients


def _rank_key(client: Client):
    # Ties on position go to the more urgent client, unprioritised last
    return (
        client.position,
        client.priority is None,
        client.priority if client.priority is not None else 0,
        client.id,
    )


def compact_lanes(clients: List[Client], lanes: Iterable[Lane]) -> List[Client]:
    """Renumber each of ``lanes`` to 1..N, keeping the current order."""
    for lane in lanes:
        members = sorted((c for c in clients if c.status == lane), key=_rank_key)
        for index, c in enumerate(members, start=1):
            c.position = index
    return clients


def lane_violations(clients: Iterable[Client]) -> Dict[str, List[int]]:
    """Return ``{lane: sorted positions}`` for every lane that is not exactly 1..N."""
    clients = list(clients)
    violations = {}
    for lane in Lane:
        positions = sorted(c.position for c in clients if c.status == lane)
        if positions != list(range(1, len(positions) + 1)):
            violations[lane.value] = positions
    return violations


def apply_update(
    store: ClientStore,
    client_id: Any,
    status: Optional[Any] = None,
    priority: Optional[Any] = None,
) -> List[Client]:
    """
    Change a client's lane and/or priority and rebalance positions.

    A status change wins over a priority change: the client moves to the
    new lane at its old position number and its priority is cleared. A
    priority change only applies when the lane is unchanged and the
    value differs from the stored one.

    Inputs are validated before anything is written, and the whole
    read-compute-write sequence runs in one store transaction.

    Returns:
        Every client on the board, ordered by id, with updated positions.

    Raises:
        InvalidId, InvalidStatus, InvalidPriority, ClientNotFound
    """
    client_id = parse_identifier(client_id)
    new_status = validate_status(status) if status is not None else None
    new_priority = validate_priority(priority) if priority is not None else None

    with store.transaction():
        clients = store.list_all()
        target = next((c for c in clients if c.id == client_id), None)
        if target is None:
            raise ClientNotFound()

        current_position = target.position
        current_status = target.status
        touched: List[Lane] = []

        if new_status is not None and new_status != current_status:
            store.update_fields(client_id, status=new_status, priority=None)
            clients = store.list_all()
            shift_for_status_change(
                clients, client_id, current_status, new_status, current_position
            )
            touched = [current_status, new_status]
            logger.info(
                f"Client {client_id} moved {current_status.value} → "
                f"{new_status.value} at position {current_position}"
            )
        elif new_priority is not None and new_priority != target.priority:
            store.update_fields(client_id, priority=new_priority)
            clients = store.list_all()
            shift_for_priority_change(
                clients, client_id, current_status, current_position, new_priority
            )
            touched = [current_status]
            logger.info(
                f"Client {client_id} priority {target.priority} → {new_priority} "
                f"in {current_status.value}"
            )

        if touched:
            stored = {c.id: c.position for c in store.list_all()}
            compact_lanes(clients, touched)
            changed = [c for c in clients if c.position != stored.get(c.id)]
            for c in changed:
                store.update_fields(c.id, position=c.position)
            logger.debug(f"Rewrote {len(changed)} position(s)")

    return clients
