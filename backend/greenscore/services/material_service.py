# Overview: Service-layer operations for materials; creation, catalogue queries and listing changes.

from __future__ import annotations

from flask import current_app
from sqlalchemy import or_

from ..extensions import db
from ..errors import EditConflictError, InvalidArgumentError, NotFoundError
from ..models import (
    AcquisitionType,
    InventoryType,
    ListingType,
    Material,
    OrderRequest,
    Project,
    RequestStatus,
    TransactionType,
    User,
)
from ..validation import (
    coerce_enum,
    quantize_money,
    require_id,
    require_non_negative_int,
    to_measure,
    to_money,
)
from . import edit_lock_service, history_service
from .concurrency import atomic, lock_for_update, run_with_retry
from .identifier_service import generate_listing_id

_MONEY_FIELDS = {"price_today", "mrp", "price_purchased", "inventory_value"}
_ENUM_FIELDS = {
    "inventory_type": InventoryType,
    "listing_type": ListingType,
    "acquisition_type": AcquisitionType,
}
_TEXT_FIELDS = {
    "material", "brand", "category", "condition", "unit", "specs", "photo",
    "specs_photo", "dimensions", "location_details",
}


def get_material(material_id: str, *, seller_id: str | None = None, for_update: bool = False) -> Material:
    """Load a material or raise NotFoundError (optionally scoped to a seller)."""
    q = db.session.query(Material).filter_by(id=material_id)
    if seller_id is not None:
        q = q.filter_by(seller_id=seller_id)
    if for_update:
        q = lock_for_update(q)
    material = q.first()
    if not material:
        raise NotFoundError(f"Material {material_id} not found")
    return material


def get_seller_project(project_id: str, seller_id: str) -> Project:
    project = db.session.query(Project).filter_by(id=project_id, seller_id=seller_id).first()
    if not project:
        raise NotFoundError(f"Project {project_id} not found for seller {seller_id}")
    return project


def apply_fields(material: Material, fields: dict, allowed: tuple[str, ...]) -> None:
    """
    Validate and assign client-supplied fields onto a material.

    Unknown or non-writable keys are rejected rather than ignored.
    """
    unknown = sorted(set(fields) - set(allowed))
    if unknown:
        raise InvalidArgumentError(
            "Fields not writable: " + ", ".join(unknown),
            details={"fields": unknown},
        )

    for key, value in fields.items():
        if key in _MONEY_FIELDS:
            value = to_money(value, key)
        elif key in _ENUM_FIELDS:
            value = coerce_enum(_ENUM_FIELDS[key], value, key)
        elif key == "quantity":
            value = require_non_negative_int(value, key)
        elif key == "weight":
            value = to_measure(value, key)
        elif key == "project_id":
            if value is not None:
                value = get_seller_project(require_id(value, key), material.seller_id).id
        elif key in _TEXT_FIELDS:
            value = str(value).strip() if value is not None else None
            if key == "material" and not value:
                raise InvalidArgumentError("material name is required")
        setattr(material, key, value)


def create_material(seller_id: str, fields: dict) -> Material:
    """
    Manual single-item entry.

    Assigns a listing id and records a listing_created history row.
    inventory_value defaults to price_today * quantity.
    """
    seller_id = require_id(seller_id, "seller_id")
    fields = dict(fields)
    for required in ("material", "quantity", "price_today"):
        if fields.get(required) in (None, ""):
            raise InvalidArgumentError(f"{required} is required")

    def _op():
        with atomic():
            if not db.session.get(User, seller_id):
                raise NotFoundError(f"Seller {seller_id} not found")

            material = Material(seller_id=seller_id, listing_id=generate_listing_id())
            apply_fields(material, fields, Material.EDITABLE_FIELDS)
            if "inventory_value" not in fields:
                material.inventory_value = quantize_money(material.price_today * material.quantity)
            db.session.add(material)
            db.session.flush()

            history_service.record(
                seller_id=seller_id,
                transaction_type=TransactionType.LISTING_CREATED,
                material_id=material.id,
                listing_id=material.listing_id,
                material_name=material.material,
                quantity=material.quantity,
                unit_price=material.price_today,
                total_amount=material.inventory_value,
            )
        return material

    return run_with_retry(_op)


def list_marketplace_materials(category: str | None = None, search: str | None = None) -> list[Material]:
    """
    Buyer-facing catalogue: in stock, listed for resale, not transferred-in stock.
    """
    q = db.session.query(Material).filter(
        Material.quantity > 0,
        Material.listing_type == ListingType.RESALE,
        Material.acquisition_type != AcquisitionType.ACQUIRED,
    )
    if category and category != "all":
        q = q.filter(Material.category == category)
    if search:
        term = f"%{search.strip()}%"
        q = q.filter(or_(Material.material.ilike(term), Material.brand.ilike(term), Material.specs.ilike(term)))
    return q.order_by(Material.created_at.desc(), Material.id).all()


def list_seller_materials(seller_id: str, project_id: str | None = None) -> list[Material]:
    q = db.session.query(Material).filter_by(seller_id=seller_id)
    if project_id:
        q = q.filter_by(project_id=project_id)
    return q.order_by(Material.created_at.desc(), Material.id).all()


def update_listing(
    material_id: str,
    seller_id: str,
    listing_type,
    acquisition_type=None,
) -> Material:
    """
    Change how a material is offered, e.g. re-list transferred-in stock for resale.
    """
    listing_type = coerce_enum(ListingType, listing_type, "listing_type")
    if acquisition_type is not None:
        acquisition_type = coerce_enum(AcquisitionType, acquisition_type, "acquisition_type")

    def _op():
        with atomic():
            material = get_material(material_id, seller_id=seller_id, for_update=True)
            previous = material.listing_type
            material.listing_type = listing_type
            if acquisition_type is not None:
                material.acquisition_type = acquisition_type

            history_service.record(
                seller_id=seller_id,
                transaction_type=TransactionType.LISTING_UPDATED,
                material_id=material.id,
                listing_id=material.listing_id,
                material_name=material.material,
                quantity=material.quantity,
                notes=f"listing_type {previous.value} -> {listing_type.value}",
            )
        return material

    return run_with_retry(_op)


def delete_material(material_id: str, seller_id: str) -> None:
    """
    Seller-initiated delete.

    Refused while buyers have pending requests against the material, or while
    another user holds its edit lock.
    """
    def _op():
        with atomic():
            material = get_material(material_id, for_update=True)
            if material.seller_id != seller_id:
                raise InvalidArgumentError("You can only delete your own materials")

            lock = edit_lock_service.current_lock(material)
            if lock.blocks(seller_id):
                raise EditConflictError(
                    "Material is currently being edited by another user",
                    details={"edited_by": lock.holder},
                )

            pending = (
                db.session.query(OrderRequest)
                .filter_by(material_id=material.id, status=RequestStatus.PENDING)
                .count()
            )
            if pending:
                raise InvalidArgumentError(
                    f"Material has {pending} pending order request(s); decline them first",
                    details={"pending_requests": pending},
                )

            db.session.delete(material)
        current_app.logger.info("Material %s deleted by seller %s", material_id, seller_id)

    run_with_retry(_op)
