from __future__ import annotations

from ..extensions import db
from greenscore.time_utils import to_utc_z, utcnow
from ..services.identifier_service import new_id


class InternalTransfer(db.Model):
    """
    Immutable record of stock moved between two projects of one seller.

    material_id names the source row, which may no longer exist once the
    transfer drained it; material_name keeps the record readable.
    destination_material_id is the row that received the stock.
    """
    __tablename__ = "internal_transfers"
    __table_args__ = (
        db.CheckConstraint("quantity_transferred > 0", name="ck_internal_transfers_quantity_positive"),
        db.CheckConstraint("from_project_id <> to_project_id", name="ck_internal_transfers_distinct_projects"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)

    material_id = db.Column(db.String(36), nullable=False, index=True)
    destination_material_id = db.Column(db.String(36), nullable=False)
    material_name = db.Column(db.String(255), nullable=False)

    from_project_id = db.Column(db.String(36), db.ForeignKey("projects.id"), nullable=False)
    to_project_id = db.Column(db.String(36), db.ForeignKey("projects.id"), nullable=False)

    quantity_transferred = db.Column(db.Integer, nullable=False)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    from_project = db.relationship("Project", foreign_keys=[from_project_id])
    to_project = db.relationship("Project", foreign_keys=[to_project_id])

    def __repr__(self) -> str:
        return (
            f"<InternalTransfer id={self.id} material_id={self.material_id} "
            f"{self.from_project_id}->{self.to_project_id} qty={self.quantity_transferred}>"
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "material_id": self.material_id,
            "destination_material_id": self.destination_material_id,
            "material_name": self.material_name,
            "from_project_id": self.from_project_id,
            "from_project_name": self.from_project.name if self.from_project else None,
            "to_project_id": self.to_project_id,
            "to_project_name": self.to_project.name if self.to_project else None,
            "quantity_transferred": self.quantity_transferred,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
        }
