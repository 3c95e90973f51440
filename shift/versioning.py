"""Version guard: the only write path for a shift's lifecycle fields.

Every mutation of ``status``, ``claimed_by_id`` or ``version`` goes through
:func:`conditional_update`, which compares-and-swaps on ``version``. Two writers
that read the same version can never both persist: the second ``UPDATE ... WHERE
version = :expected`` matches zero rows and is reported as a conflict.
"""
from __future__ import annotations
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from .errors import InvalidTransition, NotFound, ShiftError, TransientStoreError, VersionConflict
from .models import Shift

log = structlog.get_logger(__name__)

Predicate = Callable[[Shift], bool]
Mutation = Callable[[Shift], dict[str, Any]]
Rejection = Callable[[Shift], ShiftError]
ConflictFactory = Callable[[Shift, int], VersionConflict]

# columns a mutation may never set itself
_GUARDED = frozenset({"id", "org_id", "version"})


def load_current(db: Session, shift_id: int, org_id: Optional[int] = None) -> Shift:
    """Read the committed row, bypassing anything cached in the session."""
    stmt = select(Shift).where(Shift.id == shift_id).execution_options(populate_existing=True)
    if org_id is not None:
        stmt = stmt.where(Shift.org_id == org_id)
    row = db.scalars(stmt).first()
    if row is None:
        raise NotFound(shift_id=shift_id)
    return row


def stale(current: Shift, expected_version: int) -> VersionConflict:
    return VersionConflict(
        shift_id=current.id,
        expected_version=expected_version,
        current_version=current.version,
    )


def conditional_update(
    db: Session,
    shift_id: int,
    expected_version: int,
    predicate: Predicate,
    mutation: Mutation,
    *,
    org_id: Optional[int] = None,
    reject: Optional[Rejection] = None,
    on_conflict: Optional[ConflictFactory] = None,
) -> Shift:
    """Apply ``mutation`` to the shift if it is still at ``expected_version``.

    Checks run in a fixed order: existence (``NotFound``), version
    (``VersionConflict`` or whatever ``on_conflict`` builds), then ``predicate``
    (``reject(current)``, default ``InvalidTransition``). On success the new
    values and ``version = expected_version + 1`` are written in the caller's
    transaction and the refreshed row is returned. Nothing is committed here.
    """
    conflict = on_conflict or stale
    current = load_current(db, shift_id, org_id)

    if current.version != expected_version:
        raise conflict(current, expected_version)

    if not predicate(current):
        if reject is not None:
            raise reject(current)
        raise InvalidTransition(shift_id=shift_id)

    values = mutation(current)
    bad = _GUARDED.intersection(values)
    if bad:
        raise ValueError(f"mutation may not set {sorted(bad)}")

    stmt = (
        update(Shift)
        .where(Shift.id == shift_id, Shift.version == expected_version)
        .values(**values, version=expected_version + 1)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    if result.rowcount != 1:
        # lost the race between our read and our write
        current = load_current(db, shift_id, org_id)
        log.info(
            "shift_version_race_lost",
            shift_id=shift_id,
            expected_version=expected_version,
            current_version=current.version,
        )
        raise conflict(current, expected_version)

    db.refresh(current)
    return current


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """Commit on success, roll back on any error.

    Store-level failures (lock timeouts, dropped connections, pool exhaustion)
    surface as ``TransientStoreError``; semantic errors pass through unchanged.
    """
    try:
        yield db
        db.commit()
    except (OperationalError, PoolTimeoutError) as exc:
        db.rollback()
        log.warning("shift_store_unavailable", error=str(exc))
        raise TransientStoreError() from exc
    except Exception:
        db.rollback()
        raise
