# Overview: Flask API routes for order requests and orders; parses input and returns JSON responses.

# backend/greenscore/routes/order_requests.py
"""Buyer request submission, seller approval/decline, and order status routes."""

from flask import Blueprint, current_app, jsonify, request

from ..errors import InvalidArgumentError, MarketplaceError
from ..services import allocation_service, order_request_service
from ..services.order_request_service import CONTACT_FIELDS


order_requests_bp = Blueprint("order_requests", __name__, url_prefix="/api")


@order_requests_bp.post("/order-requests")
def submit_order_request_route():
    """
    Submit a purchase request (status: pending).

    Request body:
    {
        "buyer_id": str,
        "material_id": str,
        "quantity": int,
        "company_name", "contact_person", "email", "phone",
        "delivery_address", "delivery_notes": str (optional)
    }
    """
    try:
        data = request.get_json() or {}
        order_request = order_request_service.submit_order_request(
            buyer_id=data.get("buyer_id"),
            material_id=data.get("material_id"),
            quantity=data.get("quantity"),
            contact={key: data.get(key) for key in CONTACT_FIELDS},
        )
        return jsonify({
            "success": True,
            "request_id": order_request.id,
            "request": order_request.to_dict(),
        }), 201
    except MarketplaceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to submit order request")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@order_requests_bp.get("/sellers/<seller_id>/order-requests")
def list_seller_requests_route(seller_id: str):
    try:
        requests = order_request_service.list_pending_requests_for_seller(seller_id)
        return jsonify({"success": True, "requests": [r.to_dict() for r in requests]}), 200
    except Exception:
        current_app.logger.exception("Failed to list order requests")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@order_requests_bp.get("/materials/<material_id>/order-requests")
def list_material_requests_route(material_id: str):
    try:
        requests = order_request_service.list_pending_requests_for_material(material_id)
        return jsonify({"success": True, "requests": [r.to_dict() for r in requests]}), 200
    except Exception:
        current_app.logger.exception("Failed to list material order requests")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@order_requests_bp.put("/order-requests/bulk-approve")
def bulk_approve_route():
    """
    Approve many requests first-come-first-served.

    Request body: {"request_ids": [str], "seller_notes": str (optional)}
    """
    try:
        data = request.get_json() or {}
        request_ids = data.get("request_ids")
        if not isinstance(request_ids, list) or not request_ids:
            raise InvalidArgumentError("No request IDs provided")
        result = allocation_service.approve_requests(
            request_ids, data.get("seller_notes") or "Bulk approved by seller"
        )
        return jsonify({
            "success": True,
            "message": (
                f"Successfully processed {result.total_processed} requests. "
                f"{result.total_approved} approved."
            ),
            **result.to_dict(),
        }), 200
    except MarketplaceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to bulk approve order requests")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@order_requests_bp.put("/order-requests/<request_id>/approve")
def approve_request_route(request_id: str):
    """Request body: {"seller_notes": str (optional)}"""
    try:
        data = request.get_json(silent=True) or {}
        result = allocation_service.approve_request(request_id, data.get("seller_notes"))
        return jsonify({"success": True, **result.to_dict()}), 200
    except MarketplaceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to approve order request")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@order_requests_bp.put("/order-requests/<request_id>/decline")
def decline_request_route(request_id: str):
    """Request body: {"seller_notes": str (optional)}"""
    try:
        data = request.get_json(silent=True) or {}
        order_request = allocation_service.decline_request(request_id, data.get("seller_notes"))
        return jsonify({"success": True, "request": order_request.to_dict()}), 200
    except MarketplaceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to decline order request")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@order_requests_bp.get("/sellers/<seller_id>/orders")
def list_seller_orders_route(seller_id: str):
    try:
        orders = order_request_service.list_orders_for_seller(seller_id)
        return jsonify({"success": True, "orders": [o.to_dict() for o in orders]}), 200
    except Exception:
        current_app.logger.exception("Failed to list orders")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@order_requests_bp.put("/orders/<order_id>/status")
def update_order_status_route(order_id: str):
    """Request body: {"status": "confirmed" | "shipped" | "delivered" | "completed"}"""
    try:
        data = request.get_json() or {}
        if not data.get("status"):
            raise InvalidArgumentError("status required")
        order = order_request_service.update_order_status(order_id, data["status"])
        return jsonify({"success": True, "order": order.to_dict()}), 200
    except MarketplaceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update order status")
        return jsonify({"success": False, "error": "Internal server error"}), 500
