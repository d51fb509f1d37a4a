"""
Audit stamping and soft delete at the persistence boundary.

Every write goes through save_changes(), which stamps created/updated/deleted
fields on AuditMixin entities in the pending unit of work and then commits.
The acting user is passed in explicitly; nothing is read from request state.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from listkeeper.models.base import AuditMixin

logger = logging.getLogger(__name__)

# Actor recorded when no authenticated user is attached to the write (e.g. seeding).
SYSTEM_ACTOR = "System"


def resolve_actor(actor: str | None) -> str:
    """Return the actor name to stamp, falling back to SYSTEM_ACTOR."""
    if actor is None or not actor.strip():
        return SYSTEM_ACTOR
    return actor


def utcnow() -> datetime:
    return datetime.now(UTC)


def mark_deleted(entity: AuditMixin, actor: str, now: datetime) -> None:
    """Flag entity as soft-deleted; the row stays in place."""
    entity.deleted_at = now
    entity.deleted_by = actor


def _is_soft_delete(entity: AuditMixin) -> bool:
    # A write that only sets deleted_at is a delete, not an update.
    history = inspect(entity).attrs.deleted_at.history
    return bool(history.added) and history.added[0] is not None


def stamp_audit_fields(session: Session, actor: str, now: datetime) -> int:
    """
    Stamp audit fields on pending AuditMixin entities and return how many.

    insert: created_* and updated_* set to (now, actor).
    modify: updated_* set; created_* untouched.
    delete: the physical delete is cancelled and deleted_* set instead.
    """
    stamped = 0

    for entity in list(session.deleted):
        if not isinstance(entity, AuditMixin):
            continue
        # expunge drops the pending DELETE; add re-attaches the row as persistent.
        session.expunge(entity)
        session.add(entity)
        mark_deleted(entity, actor, now)

    for entity in list(session.new):
        if not isinstance(entity, AuditMixin):
            continue
        entity.created_at = now
        entity.created_by = actor
        entity.updated_at = now
        entity.updated_by = actor
        logger.info(
            "Creating auditable entity '%s' by '%s' at %s",
            type(entity).__name__,
            actor,
            now.isoformat(),
        )
        stamped += 1

    for entity in list(session.dirty):
        if not isinstance(entity, AuditMixin) or not session.is_modified(entity):
            continue
        if _is_soft_delete(entity):
            logger.info(
                "Soft-deleting auditable entity '%s' by '%s' at %s",
                type(entity).__name__,
                entity.deleted_by,
                entity.deleted_at.isoformat(),
            )
            stamped += 1
            continue
        entity.updated_at = now
        entity.updated_by = actor
        logger.info(
            "Updating auditable entity '%s' by '%s' at %s",
            type(entity).__name__,
            actor,
            now.isoformat(),
        )
        stamped += 1

    return stamped


def save_changes(session: Session, actor: str | None, now: datetime | None = None) -> int:
    """
    Stamp audit fields for actor and commit the session's unit of work.

    Returns the number of audited entities written. On a storage failure the
    session is rolled back and the original exception re-raised; the whole
    batch must be treated as failed.
    """
    actor = resolve_actor(actor)
    now = now or utcnow()
    try:
        stamped = stamp_audit_fields(session, actor, now)
        session.commit()
    except IntegrityError as exc:
        # Constraint violations are reported to callers as conflicts.
        logger.warning("Constraint violation saving changes (actor=%s): %s", actor, exc.orig)
        session.rollback()
        raise
    except SQLAlchemyError:
        logger.exception("Error saving changes to the database (actor=%s)", actor)
        session.rollback()
        raise
    return stamped
