from __future__ import annotations

from ..extensions import db
from greenscore.time_utils import to_utc_z
from ..services.identifier_service import new_id
from .enums import UserType, enum_column


class User(db.Model):
    """
    Marketplace participant (seller, buyer or admin).

    Identity only: credentials and sessions live outside this service.
    """
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    email = db.Column(db.String(255), nullable=False, unique=True)
    name = db.Column(db.String(255), nullable=False)
    company_name = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(64), nullable=True)
    user_type = enum_column(UserType, nullable=False, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} type={self.user_type}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "company_name": self.company_name,
            "phone": self.phone,
            "user_type": self.user_type.value,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class Project(db.Model):
    """A seller's construction site; materials are held per project."""
    __tablename__ = "projects"
    __table_args__ = (
        db.Index("ix_projects_seller_name", "seller_id", "name"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    seller_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    location = db.Column(db.String(255), nullable=True)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(16), nullable=False, default="active")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    seller = db.relationship("User", backref=db.backref("projects", lazy=True))

    def __repr__(self) -> str:
        return f"<Project id={self.id} name={self.name!r} seller_id={self.seller_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "seller_id": self.seller_id,
            "name": self.name,
            "location": self.location,
            "description": self.description,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
        }
