# Overview: Flask API routes for internal transfers; parses input and returns JSON responses.

# backend/greenscore/routes/transfers.py
"""Internal (project-to-project) transfer API routes."""

from flask import Blueprint, current_app, jsonify, request

from ..errors import MarketplaceError
from ..services import transfer_service


transfers_bp = Blueprint("transfers", __name__, url_prefix="/api")


@transfers_bp.post("/internal-transfers")
def create_transfer_route():
    """
    Move stock between two of the seller's projects.

    Request body:
    {
        "user_id": str,
        "material_id": str,
        "from_project_id": str,
        "to_project_id": str,
        "quantity_transferred": int,
        "notes": str (optional)
    }

    Returns:
        201: Transfer completed
        400: Invalid request (missing fields, same project, bad quantity)
        404: Material or project not found
        409: Insufficient quantity
    """
    try:
        data = request.get_json() or {}
        result = transfer_service.create_internal_transfer(
            user_id=data.get("user_id"),
            material_id=data.get("material_id"),
            from_project_id=data.get("from_project_id"),
            to_project_id=data.get("to_project_id"),
            quantity_transferred=data.get("quantity_transferred"),
            notes=data.get("notes"),
        )
        return jsonify(result.to_dict()), 201
    except MarketplaceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create internal transfer")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@transfers_bp.get("/users/<user_id>/internal-transfers")
def list_transfers_route(user_id: str):
    try:
        transfers = transfer_service.list_transfers(user_id)
        return jsonify({"success": True, "transfers": [t.to_dict() for t in transfers]}), 200
    except Exception:
        current_app.logger.exception("Failed to list internal transfers")
        return jsonify({"success": False, "error": "Internal server error"}), 500
