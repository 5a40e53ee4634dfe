import uuid
from collections.abc import Iterable

from ...domain.guard import TargetState
from ...domain.ports.user import UserData, UserPort
from ...domain.roles import Actor


async def lock_users(
    user_port: UserPort, user_ids: Iterable[uuid.UUID]
) -> dict[uuid.UUID, UserData]:
    """Read and row-lock every listed account in a single ordered query."""
    rows = await user_port.get_many(list(dict.fromkeys(user_ids)), for_update=True)
    return {row.id: row for row in rows}


def actor_from(rows: dict[uuid.UUID, UserData], actor_id: uuid.UUID) -> Actor | None:
    record = rows.get(actor_id)
    return Actor.from_record(record) if record is not None else None


def target_from(rows: dict[uuid.UUID, UserData], target_id: uuid.UUID) -> TargetState | None:
    record = rows.get(target_id)
    return TargetState.from_record(record) if record is not None else None
