from __future__ import annotations

from ..extensions import db
from greenscore.time_utils import to_utc_z, utcnow
from ..services.identifier_service import new_id
from .enums import NotificationType, TransactionType, enum_column
from .inventory import _money


class Notification(db.Model):
    """
    User-facing event. Append-only; only the read flag ever changes.

    related_id points at the request/order/transfer the event is about.
    data is an opaque JSON payload for the client.
    """
    __tablename__ = "notifications"
    __table_args__ = (
        db.Index("ix_notifications_user_read", "user_id", "read"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    type = enum_column(NotificationType, nullable=False, default=NotificationType.INFO)
    read = db.Column(db.Boolean, nullable=False, default=False)
    data = db.Column(db.JSON, nullable=True)
    related_id = db.Column(db.String(36), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "message": self.message,
            "type": self.type.value,
            "read": self.read,
            "data": self.data,
            "related_id": self.related_id,
            "created_at": to_utc_z(self.created_at),
        }


class TransactionHistory(db.Model):
    """
    Append-only audit row per sale, transfer or listing change.

    Denormalizes material name and counterparty details so reporting never
    needs to join back to rows that may since have been edited or deleted.
    """
    __tablename__ = "transaction_history"
    __table_args__ = (
        db.Index("ix_transaction_history_seller_created", "seller_id", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    seller_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False)
    material_id = db.Column(db.String(36), nullable=True)
    listing_id = db.Column(db.String(32), nullable=True)
    transaction_type = enum_column(TransactionType, nullable=False, index=True)

    # Sales
    buyer_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)
    order_id = db.Column(db.String(36), db.ForeignKey("orders.id"), nullable=True)

    # Transfers
    transfer_id = db.Column(db.String(36), db.ForeignKey("internal_transfers.id"), nullable=True)
    from_project_id = db.Column(db.String(36), db.ForeignKey("projects.id"), nullable=True)
    to_project_id = db.Column(db.String(36), db.ForeignKey("projects.id"), nullable=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=True)
    total_amount = db.Column(db.Numeric(14, 2), nullable=True)

    material_name = db.Column(db.String(255), nullable=False)
    buyer_company = db.Column(db.String(255), nullable=True)
    buyer_contact = db.Column(db.String(255), nullable=True)
    delivery_address = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    from_project = db.relationship("Project", foreign_keys=[from_project_id])
    to_project = db.relationship("Project", foreign_keys=[to_project_id])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "seller_id": self.seller_id,
            "material_id": self.material_id,
            "listing_id": self.listing_id,
            "transaction_type": self.transaction_type.value,
            "buyer_id": self.buyer_id,
            "order_id": self.order_id,
            "transfer_id": self.transfer_id,
            "from_project_id": self.from_project_id,
            "from_project_name": self.from_project.name if self.from_project else None,
            "to_project_id": self.to_project_id,
            "to_project_name": self.to_project.name if self.to_project else None,
            "quantity": self.quantity,
            "unit_price": _money(self.unit_price),
            "total_amount": _money(self.total_amount),
            "material_name": self.material_name,
            "buyer_company": self.buyer_company,
            "buyer_contact": self.buyer_contact,
            "delivery_address": self.delivery_address,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
        }
