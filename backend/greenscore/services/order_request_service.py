# Overview: Buyer order requests (the request ledger) and advisory order status updates.

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..errors import InsufficientQuantityError, InvalidArgumentError, NotFoundError
from ..models import (
    AcquisitionType,
    ListingType,
    Material,
    NotificationType,
    Order,
    OrderRequest,
    OrderStatus,
    RequestStatus,
    User,
)
from greenscore.time_utils import utcnow
from ..validation import coerce_enum, quantize_money, require_id, require_positive_int
from . import notification_service
from .concurrency import atomic, run_with_retry

CONTACT_FIELDS = {
    "company_name": "buyer_company",
    "contact_person": "buyer_contact_person",
    "email": "buyer_email",
    "phone": "buyer_phone",
    "delivery_address": "delivery_address",
    "delivery_notes": "delivery_notes",
}


def submit_order_request(
    buyer_id: str,
    material_id: str,
    quantity,
    contact: dict | None = None,
) -> OrderRequest:
    """
    Record a pending purchase request and tell the seller about it.

    unit_price is snapshotted from the material's current price_today; later
    price changes do not affect this request. Quantity is checked against
    stock at submission time only; approval re-allocates first-come-first-served.
    """
    buyer_id = require_id(buyer_id, "buyer_id")
    material_id = require_id(material_id, "material_id")
    quantity = require_positive_int(quantity, "quantity")
    contact = contact or {}

    def _op():
        with atomic():
            if not db.session.get(User, buyer_id):
                raise NotFoundError(f"Buyer {buyer_id} not found")
            material = db.session.get(Material, material_id)
            if not material:
                raise NotFoundError(f"Material {material_id} not found")
            if material.seller_id == buyer_id:
                raise InvalidArgumentError("Sellers cannot request their own materials")
            if material.listing_type != ListingType.RESALE or material.acquisition_type == AcquisitionType.ACQUIRED:
                raise InvalidArgumentError("Material is not listed for sale")
            if quantity > material.quantity:
                raise InsufficientQuantityError(
                    "Insufficient quantity available",
                    details={"available": material.quantity, "requested": quantity},
                )

            unit_price = material.price_today
            request = OrderRequest(
                material_id=material.id,
                buyer_id=buyer_id,
                seller_id=material.seller_id,
                quantity=quantity,
                unit_price=unit_price,
                total_amount=quantize_money(unit_price * quantity),
                status=RequestStatus.PENDING,
                **{column: contact.get(key) for key, column in CONTACT_FIELDS.items()},
            )
            db.session.add(request)
            db.session.flush()

            who = contact.get("contact_person") or "A buyer"
            company = contact.get("company_name") or "Unknown Company"
            notification_service.notify(
                material.seller_id,
                "New Order Request!",
                f"{who} from {company} wants to purchase {quantity} units of "
                f"{material.material} ({material.listing_id or 'N/A'})",
                NotificationType.ORDER_REQUEST,
                related_id=request.id,
                data={
                    "request_id": request.id,
                    "material_id": material.id,
                    "buyer_id": buyer_id,
                    "quantity": quantity,
                    "unit_price": float(unit_price),
                    "total_amount": float(request.total_amount),
                },
            )
        current_app.logger.info(
            "Order request %s: buyer %s wants %s of material %s", request.id, buyer_id, quantity, material_id
        )
        return request

    return run_with_retry(_op)


def list_pending_requests_for_seller(seller_id: str) -> list[OrderRequest]:
    """Pending requests across a seller's materials, oldest first."""
    return (
        db.session.query(OrderRequest)
        .filter_by(seller_id=seller_id, status=RequestStatus.PENDING)
        .order_by(OrderRequest.created_at.asc(), OrderRequest.id.asc())
        .all()
    )


def list_pending_requests_for_material(material_id: str) -> list[OrderRequest]:
    return (
        db.session.query(OrderRequest)
        .filter_by(material_id=material_id, status=RequestStatus.PENDING)
        .order_by(OrderRequest.created_at.asc(), OrderRequest.id.asc())
        .all()
    )


def list_orders_for_seller(seller_id: str) -> list[Order]:
    return (
        db.session.query(Order)
        .filter_by(seller_id=seller_id)
        .order_by(Order.created_at.desc())
        .all()
    )


def update_order_status(order_id: str, status) -> Order:
    """
    Move an order along confirmed -> shipped -> delivered -> completed.

    Transitions are advisory and not enforced; shipped_at/delivered_at are
    stamped the first time those states are reached.
    """
    status = coerce_enum(OrderStatus, status, "status")

    def _op():
        with atomic():
            order = db.session.get(Order, order_id)
            if not order:
                raise NotFoundError(f"Order {order_id} not found")
            order.status = status
            if status is OrderStatus.SHIPPED and order.shipped_at is None:
                order.shipped_at = utcnow()
            if status in (OrderStatus.DELIVERED, OrderStatus.COMPLETED) and order.delivered_at is None:
                order.delivered_at = utcnow()

            notification_service.notify(
                order.buyer_id,
                "Order Status Updated",
                f"Your order {order.id} is now {status.value}",
                NotificationType.ORDER_STATUS,
                related_id=order.id,
            )
        return order

    return run_with_retry(_op)
