from __future__ import annotations

from ..extensions import db
from greenscore.time_utils import to_utc_z
from ..services.identifier_service import new_id
from .enums import AcquisitionType, InventoryType, ListingType, enum_column


def _money(value):
    return float(value) if value is not None else None


class Material(db.Model):
    """
    A lot of surplus construction material held by a seller in one project.

    QUANTITY:
    Material.quantity is the mutable stock figure. It never goes negative.
    Allocation zeroes it and flips listing_type to SOLD; the source leg of an
    internal transfer deletes the row instead of zeroing it.

    EDIT LOCK:
    is_being_edited / edited_by / edit_started_at form an advisory lock that
    gates the seller edit form only (see services/edit_lock_service.py).

    CONCURRENCY:
    version_id is an optimistic-locking counter; a stale writer gets
    StaleDataError at flush and the unit of work is retried.
    """
    __tablename__ = "materials"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_materials_quantity_non_negative"),
        db.Index("ix_materials_seller_project", "seller_id", "project_id"),
        db.Index("ix_materials_listing", "listing_type", "acquisition_type"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    listing_id = db.Column(db.String(32), nullable=True, unique=True)

    seller_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
    project_id = db.Column(db.String(36), db.ForeignKey("projects.id"), nullable=True, index=True)

    material = db.Column(db.String(255), nullable=False)
    brand = db.Column(db.String(255), nullable=False, default="")
    category = db.Column(db.String(128), nullable=False, default="Other")
    condition = db.Column(db.String(32), nullable=False, default="good")

    quantity = db.Column(db.Integer, nullable=False, default=0)
    unit = db.Column(db.String(32), nullable=False, default="pcs")

    price_today = db.Column(db.Numeric(12, 2), nullable=False)
    mrp = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    price_purchased = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    inventory_value = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    inventory_type = enum_column(InventoryType, nullable=False, default=InventoryType.SURPLUS)
    listing_type = enum_column(ListingType, nullable=False, default=ListingType.RESALE, index=True)
    acquisition_type = enum_column(AcquisitionType, nullable=False, default=AcquisitionType.PURCHASED)

    specs = db.Column(db.Text, nullable=True)
    photo = db.Column(db.String(512), nullable=True)
    specs_photo = db.Column(db.String(512), nullable=True)
    dimensions = db.Column(db.String(255), nullable=True)
    weight = db.Column(db.Float, nullable=True)
    location_details = db.Column(db.String(255), nullable=True)

    # Advisory edit lock
    is_being_edited = db.Column(db.Boolean, nullable=False, default=False)
    edited_by = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)
    edit_started_at = db.Column(db.DateTime(timezone=True), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    seller = db.relationship("User", foreign_keys=[seller_id])
    project = db.relationship("Project", backref=db.backref("materials", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    # Descriptive fields copied onto the destination row of an internal transfer
    DESCRIPTIVE_FIELDS = (
        "material", "brand", "category", "condition", "unit",
        "price_today", "mrp", "price_purchased", "inventory_type",
        "specs", "photo", "specs_photo", "dimensions", "weight", "location_details",
    )

    # Fields a seller may change through the locked edit form
    EDITABLE_FIELDS = DESCRIPTIVE_FIELDS + (
        "quantity", "inventory_value", "listing_type", "acquisition_type", "project_id",
    )

    def __repr__(self) -> str:
        return f"<Material id={self.id} listing_id={self.listing_id!r} material={self.material!r} qty={self.quantity}>"

    @property
    def is_listed(self) -> bool:
        """Visible in the buyer marketplace."""
        return (
            self.quantity > 0
            and self.listing_type == ListingType.RESALE
            and self.acquisition_type != AcquisitionType.ACQUIRED
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "listing_id": self.listing_id,
            "seller_id": self.seller_id,
            "project_id": self.project_id,
            "project_name": self.project.name if self.project else None,
            "material": self.material,
            "brand": self.brand,
            "category": self.category,
            "condition": self.condition,
            "quantity": self.quantity,
            "unit": self.unit,
            "price_today": _money(self.price_today),
            "mrp": _money(self.mrp),
            "price_purchased": _money(self.price_purchased),
            "inventory_value": _money(self.inventory_value),
            "inventory_type": self.inventory_type.value,
            "listing_type": self.listing_type.value,
            "acquisition_type": self.acquisition_type.value,
            "specs": self.specs,
            "photo": self.photo,
            "specs_photo": self.specs_photo,
            "dimensions": self.dimensions,
            "weight": self.weight,
            "location_details": self.location_details,
            "is_being_edited": self.is_being_edited,
            "edited_by": self.edited_by,
            "edit_started_at": to_utc_z(self.edit_started_at),
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
