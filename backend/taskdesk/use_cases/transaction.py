import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Protocol

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import AppError, ConflictError, InternalError

logger = logging.getLogger(__name__)


class UnitOfWork(Protocol):
    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...


@asynccontextmanager
async def transaction(
    port: UnitOfWork,
    operation: str,
    *,
    conflict_message: str = ConflictError.message,
) -> AsyncIterator[None]:
    """Commit the block's writes, or roll every one of them back.

    Store failures leave the block as opaque ``InternalError``; a unique
    constraint hit becomes ``ConflictError``.
    """
    try:
        yield
        await port.commit()
    except AppError:
        await port.rollback()
        raise
    except IntegrityError as exc:
        await port.rollback()
        logger.warning("%s rejected by constraint", operation)
        raise ConflictError(conflict_message) from exc
    except SQLAlchemyError as exc:
        await port.rollback()
        logger.exception("%s failed", operation)
        raise InternalError() from exc
    except Exception:
        await port.rollback()
        raise
