# Overview: Internal transfers; moves stock between two projects of the same seller.

"""
Internal transfer invariants (authoritative)

- One transfer is one unit of work: source decrement, destination
  create-or-increment, InternalTransfer row, history row and seller
  notification all commit together or not at all.
- Preconditions (ids present, quantity > 0, distinct projects, projects owned
  by the seller, source owned by the seller, enough stock) are all checked
  before the first write.
- A source drained to 0 is DELETED, not zeroed and marked sold: nothing of
  the listing remains in the source project. Pending requests that pointed at
  it lose their material and are declined when next approved.
- Destination match is (seller, project, material name, brand, condition).
  A new destination row copies the source's descriptive fields, gets a fresh
  listing id, and is ACQUIRED/ACQUIRED so it stays off the buyer marketplace
  until the seller re-lists it.
- Sum of quantity across both projects is conserved.
- The edit lock is not consulted (out-of-band inventory control).
"""
from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from ..extensions import db
from ..errors import InsufficientQuantityError, InvalidArgumentError, SameProjectError
from ..models import (
    AcquisitionType,
    InternalTransfer,
    ListingType,
    Material,
    NotificationType,
    TransactionType,
)
from ..validation import quantize_money, require_id, require_positive_int
from . import history_service, material_service, notification_service
from .concurrency import atomic, lock_for_update, run_with_retry
from .identifier_service import generate_listing_id


@dataclass(frozen=True)
class TransferResult:
    transfer: InternalTransfer
    destination_material_id: str
    created_destination: bool
    source_deleted: bool

    def to_dict(self) -> dict:
        return {
            "success": True,
            "transfer_id": self.transfer.id,
            "destination_material_id": self.destination_material_id,
            "created_destination": self.created_destination,
            "source_deleted": self.source_deleted,
            "transfer": self.transfer.to_dict(),
        }


def _find_destination(source_snapshot: dict, seller_id: str, to_project_id: str, exclude_id: str) -> Material | None:
    return lock_for_update(
        db.session.query(Material).filter(
            Material.seller_id == seller_id,
            Material.project_id == to_project_id,
            Material.material == source_snapshot["material"],
            Material.brand == source_snapshot["brand"],
            Material.condition == source_snapshot["condition"],
            Material.id != exclude_id,
        )
    ).first()


def create_internal_transfer(
    user_id: str,
    material_id: str,
    from_project_id: str,
    to_project_id: str,
    quantity_transferred,
    notes: str | None = None,
) -> TransferResult:
    """
    Move quantity_transferred units of a material to another of the seller's projects.

    Raises:
        InvalidArgumentError / SameProjectError: bad input, before any read
        NotFoundError: material or project missing, or not the seller's
        InsufficientQuantityError: source holds less than requested
    """
    user_id = require_id(user_id, "user_id")
    material_id = require_id(material_id, "material_id")
    from_project_id = require_id(from_project_id, "from_project_id")
    to_project_id = require_id(to_project_id, "to_project_id")
    quantity = require_positive_int(quantity_transferred, "quantity_transferred")
    if from_project_id == to_project_id:
        raise SameProjectError("Cannot transfer to the same project")
    notes = (notes or "").strip()

    def _op():
        with atomic():
            # Preconditions
            source = material_service.get_material(material_id, seller_id=user_id, for_update=True)
            from_project = material_service.get_seller_project(from_project_id, user_id)
            to_project = material_service.get_seller_project(to_project_id, user_id)
            if source.project_id is not None and source.project_id != from_project.id:
                raise InvalidArgumentError(
                    f"Material {source.id} is not in project {from_project.id}",
                    details={"material_project_id": source.project_id},
                )
            if source.quantity < quantity:
                raise InsufficientQuantityError(
                    "Insufficient quantity available",
                    details={"available": source.quantity, "requested": quantity},
                )

            snapshot = {field: getattr(source, field) for field in Material.DESCRIPTIVE_FIELDS}
            source_listing_id = source.listing_id

            # Source leg
            source.quantity -= quantity
            source_deleted = source.quantity <= 0
            if source_deleted:
                db.session.delete(source)
            db.session.flush()

            # Destination leg
            destination = _find_destination(snapshot, user_id, to_project.id, material_id)
            created_destination = destination is None
            if destination is not None:
                destination.quantity += quantity
            else:
                destination = Material(
                    **snapshot,
                    seller_id=user_id,
                    project_id=to_project.id,
                    listing_id=generate_listing_id(),
                    quantity=quantity,
                    inventory_value=quantize_money(snapshot["price_today"] * quantity),
                    listing_type=ListingType.ACQUIRED,
                    acquisition_type=AcquisitionType.ACQUIRED,
                )
                db.session.add(destination)
            db.session.flush()

            transfer = InternalTransfer(
                user_id=user_id,
                material_id=material_id,
                destination_material_id=destination.id,
                material_name=snapshot["material"],
                from_project_id=from_project.id,
                to_project_id=to_project.id,
                quantity_transferred=quantity,
                notes=notes,
            )
            db.session.add(transfer)
            db.session.flush()

            history_service.record(
                seller_id=user_id,
                transaction_type=TransactionType.INTERNAL_TRANSFER,
                material_id=material_id,
                listing_id=source_listing_id,
                material_name=snapshot["material"],
                quantity=quantity,
                transfer_id=transfer.id,
                from_project_id=from_project.id,
                to_project_id=to_project.id,
                notes=notes,
            )

            notification_service.notify(
                user_id,
                "Internal Transfer Completed",
                f"Successfully transferred {quantity} units of {snapshot['material']} "
                f"from {from_project.name} to {to_project.name}",
                NotificationType.INTERNAL_TRANSFER,
                related_id=transfer.id,
            )

        return TransferResult(
            transfer=transfer,
            destination_material_id=destination.id,
            created_destination=created_destination,
            source_deleted=source_deleted,
        )

    result = run_with_retry(_op)
    current_app.logger.info(
        "Internal transfer %s: %s units of material %s from project %s to %s",
        result.transfer.id, quantity, material_id, from_project_id, to_project_id,
    )
    return result


def list_transfers(user_id: str) -> list[InternalTransfer]:
    """A seller's internal transfers, newest first."""
    return (
        db.session.query(InternalTransfer)
        .filter_by(user_id=user_id)
        .order_by(InternalTransfer.created_at.desc())
        .all()
    )
