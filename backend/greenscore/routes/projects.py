# Overview: Flask API routes for seller projects; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..errors import MarketplaceError
from ..services import project_service


projects_bp = Blueprint("projects", __name__, url_prefix="/api")


@projects_bp.post("/projects")
def create_project_route():
    """
    Create a project for a seller.

    Request body: {"seller_id": str, "name": str, "location": str (optional), "description": str (optional)}
    """
    try:
        data = dict(request.get_json() or {})
        seller_id = data.pop("seller_id", None)
        project = project_service.create_project(seller_id, data)
        return jsonify({"success": True, "project": project.to_dict()}), 201
    except MarketplaceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create project")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@projects_bp.get("/sellers/<seller_id>/projects")
@projects_bp.get("/projects/<seller_id>")
def list_projects_route(seller_id: str):
    try:
        projects = project_service.list_projects(seller_id)
        return jsonify({"success": True, "projects": [p.to_dict() for p in projects]}), 200
    except Exception:
        current_app.logger.exception("Failed to list projects")
        return jsonify({"success": False, "error": "Internal server error"}), 500
