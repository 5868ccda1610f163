# Overview: Append-only transaction history and the unified seller activity feed.

"""
Transaction history invariants

- Rows are appended inside the same unit of work as the change they record.
- No updates or deletes.
- Sales and internal transfers share one feed, told apart by HistoryKind.
  Transfers are never dressed up as zero-priced order requests.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from ..extensions import db
from ..models import TransactionHistory, TransactionType
from greenscore.time_utils import to_utc_z


class HistoryKind(str, enum.Enum):
    SALE = "SALE"
    TRANSFER = "TRANSFER"
    LISTING = "LISTING"


_KIND_BY_TYPE = {
    TransactionType.SALE: HistoryKind.SALE,
    TransactionType.INTERNAL_TRANSFER: HistoryKind.TRANSFER,
    TransactionType.LISTING_CREATED: HistoryKind.LISTING,
    TransactionType.LISTING_UPDATED: HistoryKind.LISTING,
}


@dataclass(frozen=True)
class HistoryEntry:
    kind: HistoryKind
    occurred_at: datetime
    material_name: str
    quantity: int
    summary: str
    record: TransactionHistory = field(repr=False)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "occurred_at": to_utc_z(self.occurred_at),
            "material_name": self.material_name,
            "quantity": self.quantity,
            "summary": self.summary,
            **{k: v for k, v in self.record.to_dict().items() if k not in {"material_name", "quantity"}},
        }


def record(
    *,
    seller_id: str,
    transaction_type: TransactionType,
    material_name: str,
    quantity: int,
    material_id: str | None = None,
    listing_id: str | None = None,
    buyer_id: str | None = None,
    order_id: str | None = None,
    transfer_id: str | None = None,
    from_project_id: str | None = None,
    to_project_id: str | None = None,
    unit_price: Decimal | None = None,
    total_amount: Decimal | None = None,
    buyer_company: str | None = None,
    buyer_contact: str | None = None,
    delivery_address: str | None = None,
    notes: str | None = None,
) -> TransactionHistory:
    row = TransactionHistory(
        seller_id=seller_id,
        transaction_type=transaction_type,
        material_name=material_name,
        quantity=quantity,
        material_id=material_id,
        listing_id=listing_id,
        buyer_id=buyer_id,
        order_id=order_id,
        transfer_id=transfer_id,
        from_project_id=from_project_id,
        to_project_id=to_project_id,
        unit_price=unit_price,
        total_amount=total_amount,
        buyer_company=buyer_company,
        buyer_contact=buyer_contact,
        delivery_address=delivery_address,
        notes=notes or "",
    )
    db.session.add(row)
    db.session.flush()
    return row


def _summarize(row: TransactionHistory) -> str:
    if row.transaction_type == TransactionType.SALE:
        buyer = row.buyer_company or row.buyer_contact or "buyer"
        return f"Sold {row.quantity} x {row.material_name} to {buyer}"
    if row.transaction_type == TransactionType.INTERNAL_TRANSFER:
        src = row.from_project.name if row.from_project else "Unknown Project"
        dst = row.to_project.name if row.to_project else "Unknown Project"
        return f"Moved {row.quantity} x {row.material_name} from {src} to {dst}"
    if row.transaction_type == TransactionType.LISTING_CREATED:
        return f"Listed {row.quantity} x {row.material_name}"
    if row.transaction_type == TransactionType.LISTING_UPDATED:
        return f"Updated listing for {row.material_name}"
    raise ValueError(f"Unhandled transaction type {row.transaction_type!r}")


def list_activity(seller_id: str, kind: HistoryKind | None = None) -> list[HistoryEntry]:
    """All of a seller's history, newest first, optionally one kind only."""
    q = db.session.query(TransactionHistory).filter_by(seller_id=seller_id)
    if kind is not None:
        types = [t for t, k in _KIND_BY_TYPE.items() if k == kind]
        q = q.filter(TransactionHistory.transaction_type.in_(types))
    rows = q.order_by(TransactionHistory.created_at.desc()).all()
    return [
        HistoryEntry(
            kind=_KIND_BY_TYPE[row.transaction_type],
            occurred_at=row.created_at,
            material_name=row.material_name,
            quantity=row.quantity,
            summary=_summarize(row),
            record=row,
        )
        for row in rows
    ]
