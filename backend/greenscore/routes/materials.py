# Overview: Flask API routes for materials and their edit locks; parses input and returns JSON responses.

# backend/greenscore/routes/materials.py
"""Material catalogue, seller inventory and edit-lock API routes."""

from flask import Blueprint, current_app, jsonify, request

from ..errors import InvalidArgumentError, MarketplaceError
from ..services import edit_lock_service, material_service


materials_bp = Blueprint("materials", __name__, url_prefix="/api")


def _user_id(data: dict) -> str:
    user_id = data.get("user_id")
    if not user_id:
        raise InvalidArgumentError("user_id required")
    return user_id


@materials_bp.get("/materials")
def list_marketplace_route():
    """Buyer marketplace. Query: category, search."""
    try:
        materials = material_service.list_marketplace_materials(
            category=request.args.get("category"),
            search=request.args.get("search"),
        )
        return jsonify({"success": True, "materials": [m.to_dict() for m in materials]}), 200
    except Exception:
        current_app.logger.exception("Failed to list marketplace materials")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@materials_bp.post("/materials")
def create_material_route():
    """
    Create a material by manual entry.

    Request body: {"seller_id": str, "material": str, "quantity": int, "price_today": number, ...}
    """
    try:
        data = dict(request.get_json() or {})
        seller_id = data.pop("seller_id", None)
        material = material_service.create_material(seller_id, data)
        return jsonify({"success": True, "material": material.to_dict()}), 201
    except MarketplaceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create material")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@materials_bp.get("/sellers/<seller_id>/materials")
def list_seller_materials_route(seller_id: str):
    try:
        materials = material_service.list_seller_materials(seller_id, project_id=request.args.get("project_id"))
        return jsonify({"success": True, "materials": [m.to_dict() for m in materials]}), 200
    except Exception:
        current_app.logger.exception("Failed to list seller materials")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@materials_bp.put("/materials/<material_id>/listing")
def update_listing_route(material_id: str):
    """Request body: {"user_id": str, "listing_type": str, "acquisition_type": str (optional)}"""
    try:
        data = request.get_json() or {}
        if not data.get("listing_type"):
            raise InvalidArgumentError("listing_type required")
        material = material_service.update_listing(
            material_id,
            _user_id(data),
            data["listing_type"],
            data.get("acquisition_type"),
        )
        return jsonify({"success": True, "material": material.to_dict()}), 200
    except MarketplaceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update listing")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@materials_bp.delete("/sellers/<seller_id>/materials/<material_id>")
def delete_material_route(seller_id: str, material_id: str):
    try:
        material_service.delete_material(material_id, seller_id)
        return jsonify({"success": True}), 200
    except MarketplaceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete material")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@materials_bp.post("/materials/<material_id>/lock")
def lock_material_route(material_id: str):
    """
    Acquire the edit lock.

    Returns:
        200: {"success": true, "locked": true}
        404: Material not found
        409: Locked by another user
    """
    try:
        data = request.get_json() or {}
        lock = edit_lock_service.lock_for_edit(material_id, _user_id(data))
        return jsonify({"success": True, **lock.to_dict()}), 200
    except MarketplaceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to lock material")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@materials_bp.post("/materials/<material_id>/unlock")
def unlock_material_route(material_id: str):
    """Release the edit lock. Releasing a lock held by someone else is a no-op."""
    try:
        data = request.get_json() or {}
        released = edit_lock_service.unlock(material_id, _user_id(data))
        return jsonify({"success": True, "unlocked": True, "released": released}), 200
    except MarketplaceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to unlock material")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@materials_bp.get("/materials/<material_id>/lock-status")
def lock_status_route(material_id: str):
    try:
        status = edit_lock_service.check_lock(material_id)
        return jsonify({"success": True, **status}), 200
    except MarketplaceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to check lock status")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@materials_bp.put("/materials/<material_id>/edit")
def edit_material_route(material_id: str):
    """
    Apply a seller edit under the edit lock; the lock is released on success.

    Request body: {"user_id": str, <material fields>...}
    """
    try:
        data = dict(request.get_json() or {})
        user_id = _user_id(data)
        data.pop("user_id")
        material = edit_lock_service.edit_with_lock(material_id, user_id, data)
        return jsonify({"success": True, "material": material.to_dict()}), 200
    except MarketplaceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to edit material")
        return jsonify({"success": False, "error": "Internal server error"}), 500
