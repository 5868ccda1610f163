from __future__ import annotations

from ..extensions import db
from greenscore.time_utils import to_utc_z, utcnow
from ..services.identifier_service import new_id
from .enums import OrderStatus, RequestStatus, enum_column
from .inventory import _money


class OrderRequest(db.Model):
    """
    A buyer's request to purchase part of a material lot.

    LIFECYCLE:
    PENDING -> APPROVED | PARTIALLY_APPROVED | DECLINED (one way, exactly once)

    unit_price is the material's price_today at submission time and is not
    re-read on approval. Buyer contact fields are a snapshot taken at
    submission and never change afterwards.

    created_at is stamped in Python (microsecond resolution) because it is
    the first-come-first-served sort key.
    """
    __tablename__ = "order_requests"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_order_requests_quantity_positive"),
        db.Index("ix_order_requests_material_status", "material_id", "status"),
        db.Index("ix_order_requests_seller_status", "seller_id", "status"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    material_id = db.Column(db.String(36), db.ForeignKey("materials.id", ondelete="SET NULL"), nullable=True)
    buyer_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
    seller_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    total_amount = db.Column(db.Numeric(14, 2), nullable=False)

    status = enum_column(RequestStatus, nullable=False, default=RequestStatus.PENDING)
    fulfilled_quantity = db.Column(db.Integer, nullable=True)

    # Buyer contact snapshot
    buyer_company = db.Column(db.String(255), nullable=True)
    buyer_contact_person = db.Column(db.String(255), nullable=True)
    buyer_email = db.Column(db.String(255), nullable=True)
    buyer_phone = db.Column(db.String(64), nullable=True)
    delivery_address = db.Column(db.Text, nullable=True)
    delivery_notes = db.Column(db.Text, nullable=True)

    seller_notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    approved_at = db.Column(db.DateTime(timezone=True), nullable=True)

    material = db.relationship("Material", backref=db.backref("order_requests", lazy=True))
    buyer = db.relationship("User", foreign_keys=[buyer_id])

    def __repr__(self) -> str:
        return f"<OrderRequest id={self.id} material_id={self.material_id} qty={self.quantity} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "material_id": self.material_id,
            "buyer_id": self.buyer_id,
            "seller_id": self.seller_id,
            "quantity": self.quantity,
            "unit_price": _money(self.unit_price),
            "total_amount": _money(self.total_amount),
            "status": self.status.value,
            "fulfilled_quantity": self.fulfilled_quantity,
            "buyer_company": self.buyer_company,
            "buyer_contact_person": self.buyer_contact_person,
            "buyer_email": self.buyer_email,
            "buyer_phone": self.buyer_phone,
            "delivery_address": self.delivery_address,
            "delivery_notes": self.delivery_notes,
            "seller_notes": self.seller_notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "approved_at": to_utc_z(self.approved_at),
        }


class Order(db.Model):
    """
    A confirmed sale, created exactly once when a request is (partially) approved.

    quantity/unit_price/total_amount/platform_fee are fixed at creation.
    status is advisory: CONFIRMED -> SHIPPED -> DELIVERED -> COMPLETED.
    """
    __tablename__ = "orders"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    order_request_id = db.Column(db.String(36), db.ForeignKey("order_requests.id"), nullable=False, unique=True)
    buyer_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
    seller_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
    material_id = db.Column(db.String(36), db.ForeignKey("materials.id", ondelete="SET NULL"), nullable=True, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    total_amount = db.Column(db.Numeric(14, 2), nullable=False)
    platform_fee = db.Column(db.Numeric(14, 2), nullable=False)

    status = enum_column(OrderStatus, nullable=False, default=OrderStatus.CONFIRMED, index=True)
    shipping_address = db.Column(db.Text, nullable=True)
    delivery_notes = db.Column(db.Text, nullable=True)
    tracking_number = db.Column(db.String(128), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    shipped_at = db.Column(db.DateTime(timezone=True), nullable=True)
    delivered_at = db.Column(db.DateTime(timezone=True), nullable=True)

    order_request = db.relationship("OrderRequest", backref=db.backref("order", uselist=False))

    def __repr__(self) -> str:
        return f"<Order id={self.id} request={self.order_request_id} qty={self.quantity} total={self.total_amount}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_request_id": self.order_request_id,
            "buyer_id": self.buyer_id,
            "seller_id": self.seller_id,
            "material_id": self.material_id,
            "quantity": self.quantity,
            "unit_price": _money(self.unit_price),
            "total_amount": _money(self.total_amount),
            "platform_fee": _money(self.platform_fee),
            "status": self.status.value,
            "shipping_address": self.shipping_address,
            "delivery_notes": self.delivery_notes,
            "tracking_number": self.tracking_number,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "shipped_at": to_utc_z(self.shipped_at),
            "delivered_at": to_utc_z(self.delivered_at),
        }
