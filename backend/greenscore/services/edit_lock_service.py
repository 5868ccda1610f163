# Overview: Advisory, time-boxed edit locks on material records.

"""
Edit lock state machine

    UNLOCKED --acquire(U)--> LOCKED(U, T)
    LOCKED(U, T) --acquire(U)--> LOCKED(U, now)          same holder re-acquires
    LOCKED(U, T) --release(U) / edit(U)--> UNLOCKED
    LOCKED(U, T) --now - T >= timeout--> EXPIRED
    EXPIRED --check / acquire(V) / edit(V)--> UNLOCKED / LOCKED(V, now)

EXPIRED is never written; it is how a LOCKED row reads once its timeout has
passed, and the next access clears or overrides it.

The lock gates the seller edit form (edit_with_lock) and seller deletes only.
Allocation and internal transfers change quantity regardless of who holds it.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime

from flask import current_app

from ..extensions import db
from ..errors import EditConflictError
from ..models import Material
from greenscore.time_utils import minutes_between, to_utc_z, utcnow
from ..validation import require_id
from . import material_service
from .concurrency import atomic, lock_for_update, run_with_retry

DEFAULT_TIMEOUT_MINUTES = 15


class LockState(str, enum.Enum):
    UNLOCKED = "UNLOCKED"
    LOCKED = "LOCKED"
    EXPIRED = "EXPIRED"


@dataclass(frozen=True)
class EditLock:
    state: LockState
    holder: str | None = None
    since: datetime | None = None

    def blocks(self, user_id: str) -> bool:
        """True if user_id may not edit: an active lock held by someone else."""
        return self.state is LockState.LOCKED and self.holder != user_id

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "locked": self.state is LockState.LOCKED,
            "edited_by": self.holder,
            "edit_started_at": to_utc_z(self.since),
        }


def _timeout_minutes() -> int:
    return current_app.config.get("EDIT_LOCK_TIMEOUT_MINUTES", DEFAULT_TIMEOUT_MINUTES)


def current_lock(material: Material, now: datetime | None = None) -> EditLock:
    """Read the lock state of a loaded material without changing it."""
    if not material.is_being_edited:
        return EditLock(LockState.UNLOCKED)
    now = now or utcnow()
    if minutes_between(material.edit_started_at, now) >= _timeout_minutes():
        return EditLock(LockState.EXPIRED, material.edited_by, material.edit_started_at)
    return EditLock(LockState.LOCKED, material.edited_by, material.edit_started_at)


def _set_locked(material: Material, user_id: str, now: datetime) -> None:
    material.is_being_edited = True
    material.edited_by = user_id
    material.edit_started_at = now


def _clear(material: Material) -> None:
    material.is_being_edited = False
    material.edited_by = None
    material.edit_started_at = None


def lock_for_edit(material_id: str, user_id: str, now: datetime | None = None) -> EditLock:
    """
    Acquire the edit lock for user_id.

    Succeeds when unlocked, already held by user_id, or expired.
    Raises EditConflictError while another user's lock is active.
    """
    user_id = require_id(user_id, "user_id")

    def _op():
        with atomic():
            ts = now or utcnow()
            material = material_service.get_material(material_id, for_update=True)
            lock = current_lock(material, ts)
            if lock.blocks(user_id):
                raise EditConflictError(
                    "Material is currently being edited by another user",
                    details={"edited_by": lock.holder, "edit_started_at": to_utc_z(lock.since)},
                )
            if lock.state is LockState.EXPIRED:
                current_app.logger.info(
                    "Overriding expired edit lock on material %s held by %s", material.id, lock.holder
                )
            _set_locked(material, user_id, ts)
            return EditLock(LockState.LOCKED, user_id, ts)

    return run_with_retry(_op)


def unlock(material_id: str, user_id: str) -> bool:
    """
    Release the lock if user_id holds it (or nobody does).

    Releasing someone else's lock, or a lock on a missing material, is a
    no-op success. Returns whether anything was cleared.
    """
    user_id = require_id(user_id, "user_id")

    def _op():
        with atomic():
            changed = (
                db.session.query(Material)
                .filter(
                    Material.id == material_id,
                    db.or_(Material.edited_by == user_id, Material.edited_by.is_(None)),
                    Material.is_being_edited.is_(True),
                )
                .update(
                    {
                        Material.is_being_edited: False,
                        Material.edited_by: None,
                        Material.edit_started_at: None,
                        Material.version_id: Material.version_id + 1,
                    },
                    synchronize_session="fetch",
                )
            )
        return bool(changed)

    return run_with_retry(_op)


def check_lock(material_id: str, now: datetime | None = None) -> dict:
    """
    Report the lock; an expired lock is cleared as a side effect and reported
    as unlocked with timed_out=True.
    """
    def _op():
        with atomic():
            ts = now or utcnow()
            material = material_service.get_material(material_id, for_update=True)
            lock = current_lock(material, ts)
            if lock.state is LockState.EXPIRED:
                _clear(material)
                current_app.logger.info("Edit lock on material %s timed out (held by %s)", material.id, lock.holder)
                return {**EditLock(LockState.UNLOCKED).to_dict(), "timed_out": True}
            return {**lock.to_dict(), "timed_out": False}

    return run_with_retry(_op)


def edit_with_lock(material_id: str, user_id: str, patch: dict, now: datetime | None = None) -> Material:
    """
    Apply a seller edit and release the lock in the same write.

    Rejected with EditConflictError while another user's lock is active.
    """
    user_id = require_id(user_id, "user_id")

    def _op():
        with atomic():
            ts = now or utcnow()
            material = material_service.get_material(material_id, for_update=True)
            lock = current_lock(material, ts)
            if lock.blocks(user_id):
                raise EditConflictError(
                    "Material is being edited by another user",
                    details={"edited_by": lock.holder, "edit_started_at": to_utc_z(lock.since)},
                )
            material_service.apply_fields(material, patch, Material.EDITABLE_FIELDS)
            _clear(material)
        return material

    return run_with_retry(_op)


def release_stale_locks(now: datetime | None = None) -> int:
    """Sweep every expired lock. Returns how many were cleared."""
    def _op():
        with atomic():
            ts = now or utcnow()
            released = 0
            locked = lock_for_update(
                db.session.query(Material).filter(Material.is_being_edited.is_(True))
            ).all()
            for material in locked:
                if current_lock(material, ts).state is LockState.EXPIRED:
                    _clear(material)
                    released += 1
        return released

    released = run_with_retry(_op)
    if released:
        current_app.logger.info("Released %s stale edit lock(s)", released)
    return released
