from __future__ import annotations

import enum

from ..extensions import db


class UserType(str, enum.Enum):
    SELLER = "seller"
    BUYER = "buyer"
    ADMIN = "admin"


class InventoryType(str, enum.Enum):
    SURPLUS = "surplus"
    DAMAGED = "damaged"
    LIQUIDATION = "liquidation"
    NEW = "new"
    USED = "used"
    MANUAL = "manual"


class ListingType(str, enum.Enum):
    RESALE = "resale"
    INTERNAL_TRANSFER = "internal_transfer"
    SOLD = "sold"
    # Stock moved in from another project; hidden from buyers until re-listed
    ACQUIRED = "acquired"


class AcquisitionType(str, enum.Enum):
    PURCHASED = "purchased"
    ACQUIRED = "acquired"


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    PARTIALLY_APPROVED = "partially_approved"
    DECLINED = "declined"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING


class OrderStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"


class TransactionType(str, enum.Enum):
    SALE = "sale"
    INTERNAL_TRANSFER = "internal_transfer"
    LISTING_CREATED = "listing_created"
    LISTING_UPDATED = "listing_updated"


class NotificationType(str, enum.Enum):
    INFO = "info"
    ORDER_REQUEST = "order_request"
    ORDER_APPROVED = "order_approved"
    ORDER_DECLINED = "order_declined"
    ORDER_STATUS = "order_status"
    INTERNAL_TRANSFER = "internal_transfer"


def enum_column(enum_cls, **kwargs):
    """String-backed enum column storing the member value (not the name)."""
    return db.Column(
        db.Enum(
            enum_cls,
            native_enum=False,
            length=32,
            values_callable=lambda members: [m.value for m in members],
            validate_strings=True,
        ),
        **kwargs,
    )
