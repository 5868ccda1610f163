# Overview: Order-request fulfillment engine; first-come-first-served allocation of seller stock.

"""
Allocation invariants (authoritative)

- A batch of request ids is resolved in ONE unit of work. Any failure rolls
  back every material group in the batch; nothing is partially committed.
- Requests are grouped by material. Each group allocates against that
  material's quantity as read inside the unit of work (row locked, version
  checked), so a concurrent batch always sees already-decremented stock.
- Within a group, requests are served in created_at order (id breaks ties).
  Each gets min(remaining, requested). Once remaining hits 0, every later
  request in the group is declined, not left pending.
- Exactly one Order per approved or partially approved request.
  Order.total_amount = fulfilled / requested * request.total_amount and
  Order.platform_fee = total_amount * PLATFORM_FEE_RATE, both in cents half-up.
- Material.quantity never goes negative; a material drawn down to 0 is
  marked SOLD (never deleted here).
- Only PENDING requests are allocated. Requests that already reached a
  terminal status are reported as skipped and left untouched.
- Unit price is the one snapshotted on the request at submission time.
- The edit lock is not consulted: allocation is out-of-band inventory control.
"""
from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence

from flask import current_app

from ..extensions import db
from ..errors import InvalidArgumentError, NotFoundError
from ..models import (
    ListingType,
    Material,
    NotificationType,
    Order,
    OrderRequest,
    RequestStatus,
    TransactionType,
)
from greenscore.time_utils import utcnow
from ..validation import quantize_money, require_id
from . import history_service, notification_service
from .concurrency import atomic, lock_for_update, run_with_retry

OUT_OF_STOCK_NOTE = "Out of stock - no quantity available"
MATERIAL_GONE_NOTE = "Material no longer available"
DEFAULT_PLATFORM_FEE_RATE = Decimal("0.05")


@dataclass(frozen=True)
class Demand:
    """One request's claim on a material, as seen by the planner."""
    request_id: str
    created_at: object
    quantity: int


@dataclass(frozen=True)
class AllocationLine:
    request_id: str
    requested_qty: int
    fulfilled_qty: int

    @property
    def status(self) -> RequestStatus:
        if self.fulfilled_qty == 0:
            return RequestStatus.DECLINED
        if self.fulfilled_qty < self.requested_qty:
            return RequestStatus.PARTIALLY_APPROVED
        return RequestStatus.APPROVED


def allocate_fcfs(available: int, demands: Iterable[Demand]) -> tuple[list[AllocationLine], int]:
    """
    Pure first-come-first-served plan.

    Returns (lines in service order, remaining quantity).
    """
    if available < 0:
        raise ValueError("available quantity cannot be negative")
    remaining = available
    lines = []
    for demand in sorted(demands, key=lambda d: (d.created_at, d.request_id)):
        fulfilled = min(remaining, demand.quantity)
        remaining -= fulfilled
        lines.append(AllocationLine(demand.request_id, demand.quantity, fulfilled))
    return lines, remaining


@dataclass(frozen=True)
class AllocationOutcome:
    request_id: str
    status: RequestStatus
    requested_qty: int
    fulfilled_qty: int
    order_id: str | None = None
    skipped: bool = False
    reason: str | None = None

    @property
    def is_partial(self) -> bool:
        return self.status is RequestStatus.PARTIALLY_APPROVED

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "order_id": self.order_id,
            "status": self.status.value,
            "fulfilled_qty": self.fulfilled_qty,
            "requested_qty": self.requested_qty,
            "is_partial": self.is_partial,
            "skipped": self.skipped,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class AllocationResult:
    outcomes: list[AllocationOutcome]

    @property
    def total_processed(self) -> int:
        return sum(1 for o in self.outcomes if not o.skipped)

    @property
    def total_approved(self) -> int:
        return sum(
            1 for o in self.outcomes
            if not o.skipped and o.status in (RequestStatus.APPROVED, RequestStatus.PARTIALLY_APPROVED)
        )

    def to_dict(self) -> dict:
        return {
            "results": [o.to_dict() for o in self.outcomes],
            "total_processed": self.total_processed,
            "total_approved": self.total_approved,
        }


def _platform_fee_rate() -> Decimal:
    return Decimal(str(current_app.config.get("PLATFORM_FEE_RATE", DEFAULT_PLATFORM_FEE_RATE)))


def fulfilled_total(request: OrderRequest, fulfilled_qty: int) -> Decimal:
    """Order value for a (possibly partial) fulfilment, proportional to the request total."""
    if fulfilled_qty == request.quantity:
        return quantize_money(Decimal(request.total_amount))
    return quantize_money(Decimal(fulfilled_qty) / Decimal(request.quantity) * Decimal(request.total_amount))


def _approval_note(seller_notes: str, line: AllocationLine) -> str:
    if line.status is RequestStatus.PARTIALLY_APPROVED:
        return f"{seller_notes} [Partial: {line.fulfilled_qty}/{line.requested_qty} units fulfilled]".strip()
    return seller_notes


def _decline(request: OrderRequest, note: str) -> AllocationOutcome:
    request.status = RequestStatus.DECLINED
    request.seller_notes = note
    notification_service.notify(
        request.buyer_id,
        "Order Request Declined",
        f"Your order request for {request.quantity} units has been declined. Reason: {note}",
        NotificationType.ORDER_DECLINED,
        related_id=request.id,
    )
    return AllocationOutcome(
        request_id=request.id,
        status=RequestStatus.DECLINED,
        requested_qty=request.quantity,
        fulfilled_qty=0,
        reason=note,
    )


def _fulfil(request: OrderRequest, material: Material, line: AllocationLine, seller_notes: str, now) -> AllocationOutcome:
    status = line.status
    request.status = status
    request.fulfilled_quantity = line.fulfilled_qty
    request.approved_at = now
    request.seller_notes = _approval_note(seller_notes, line)

    total = fulfilled_total(request, line.fulfilled_qty)
    order = Order(
        order_request_id=request.id,
        buyer_id=request.buyer_id,
        seller_id=request.seller_id,
        material_id=material.id,
        quantity=line.fulfilled_qty,
        unit_price=request.unit_price,
        total_amount=total,
        platform_fee=quantize_money(total * _platform_fee_rate()),
        shipping_address=request.delivery_address,
        delivery_notes=request.delivery_notes,
        created_at=now,
    )
    db.session.add(order)
    db.session.flush()

    history_service.record(
        seller_id=request.seller_id,
        transaction_type=TransactionType.SALE,
        material_id=material.id,
        listing_id=material.listing_id,
        material_name=material.material,
        quantity=line.fulfilled_qty,
        buyer_id=request.buyer_id,
        order_id=order.id,
        unit_price=request.unit_price,
        total_amount=total,
        buyer_company=request.buyer_company,
        buyer_contact=request.buyer_contact_person,
        delivery_address=request.delivery_address,
        notes=request.seller_notes,
    )

    if status is RequestStatus.PARTIALLY_APPROVED:
        title = "Order Partially Fulfilled!"
        message = (
            f"Your order for {material.material} has been partially fulfilled. "
            f"{line.fulfilled_qty}/{line.requested_qty} units approved. Order ID: {order.id}"
        )
    else:
        title = "Order Approved!"
        message = (
            f"Your order for {line.fulfilled_qty} units of {material.material} "
            f"has been approved. Order ID: {order.id}"
        )
    notification_service.notify(
        request.buyer_id,
        title,
        message,
        NotificationType.ORDER_APPROVED,
        related_id=order.id,
        data={"order_id": order.id, "request_id": request.id, "fulfilled_qty": line.fulfilled_qty},
    )

    return AllocationOutcome(
        request_id=request.id,
        status=status,
        requested_qty=line.requested_qty,
        fulfilled_qty=line.fulfilled_qty,
        order_id=order.id,
    )


def _allocate_group(material: Material | None, requests: list[OrderRequest], seller_notes: str, now) -> list[AllocationOutcome]:
    outcomes = []
    pending = []
    for request in requests:
        if request.status != RequestStatus.PENDING:
            outcomes.append(AllocationOutcome(
                request_id=request.id,
                status=request.status,
                requested_qty=request.quantity,
                fulfilled_qty=request.fulfilled_quantity or 0,
                skipped=True,
                reason=f"Request already {request.status.value}",
            ))
        else:
            pending.append(request)

    if material is None:
        return outcomes + [_decline(r, MATERIAL_GONE_NOTE) for r in pending]

    by_id = {r.id: r for r in pending}
    lines, remaining = allocate_fcfs(
        material.quantity,
        [Demand(r.id, r.created_at, r.quantity) for r in pending],
    )
    for line in lines:
        request = by_id[line.request_id]
        if line.fulfilled_qty == 0:
            outcomes.append(_decline(request, OUT_OF_STOCK_NOTE))
        else:
            outcomes.append(_fulfil(request, material, line, seller_notes, now))

    if remaining != material.quantity:
        material.quantity = remaining
    if remaining == 0 and pending and material.listing_type != ListingType.SOLD:
        material.listing_type = ListingType.SOLD
    return outcomes


def approve_requests(request_ids: Sequence[str], seller_notes: str | None = "") -> AllocationResult:
    """
    Approve a batch of order requests first-come-first-served.

    Raises NotFoundError if none of the ids exist; the whole batch is then
    aborted with nothing written.
    """
    if isinstance(request_ids, str) or not request_ids:
        raise InvalidArgumentError("No request IDs provided")
    ids = list(OrderedDict.fromkeys(require_id(rid, "request_id") for rid in request_ids))
    seller_notes = (seller_notes or "").strip()

    def _op():
        with atomic():
            now = utcnow()
            requests = lock_for_update(
                db.session.query(OrderRequest).filter(OrderRequest.id.in_(ids))
            ).all()
            if not requests:
                raise NotFoundError("No order requests found", details={"request_ids": ids})

            groups: OrderedDict[str | None, list[OrderRequest]] = OrderedDict()
            for request in sorted(requests, key=lambda r: (r.created_at, r.id)):
                groups.setdefault(request.material_id, []).append(request)

            outcomes = []
            for material_id, group in groups.items():
                material = None
                if material_id is not None:
                    material = lock_for_update(
                        db.session.query(Material).filter_by(id=material_id)
                    ).first()
                outcomes.extend(_allocate_group(material, group, seller_notes, now))
            db.session.flush()
        return AllocationResult(outcomes)

    result = run_with_retry(_op)
    current_app.logger.info(
        "Approval batch: %s/%s requests approved (%s skipped)",
        result.total_approved,
        result.total_processed,
        len(result.outcomes) - result.total_processed,
    )
    return result


def approve_request(request_id: str, seller_notes: str | None = "") -> AllocationResult:
    """Single approval; the one-element case of approve_requests."""
    return approve_requests([request_id], seller_notes)


def decline_request(request_id: str, seller_notes: str | None = "") -> OrderRequest:
    """
    Decline one pending request. No inventory or order effect.

    Raises NotFoundError for unknown ids and InvalidArgumentError if the
    request is no longer pending.
    """
    request_id = require_id(request_id, "request_id")
    seller_notes = (seller_notes or "").strip()

    def _op():
        with atomic():
            request = lock_for_update(
                db.session.query(OrderRequest).filter_by(id=request_id)
            ).first()
            if not request:
                raise NotFoundError(f"Order request {request_id} not found")
            if request.status != RequestStatus.PENDING:
                raise InvalidArgumentError(
                    f"Cannot decline a request that is already {request.status.value}",
                    details={"status": request.status.value},
                )
            request.status = RequestStatus.DECLINED
            request.seller_notes = seller_notes
            notification_service.notify(
                request.buyer_id,
                "Order Request Declined",
                f"Your order request for {request.quantity} units has been declined by the seller. "
                f"Reason: {seller_notes or 'No reason provided'}",
                NotificationType.ORDER_DECLINED,
                related_id=request.id,
            )
        return request

    return run_with_retry(_op)
