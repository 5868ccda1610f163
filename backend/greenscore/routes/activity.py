# Overview: Flask API routes for seller activity history and user notifications.

from flask import Blueprint, current_app, jsonify, request

from ..errors import InvalidArgumentError, MarketplaceError
from ..services import history_service, notification_service
from ..services.history_service import HistoryKind


activity_bp = Blueprint("activity", __name__, url_prefix="/api")


@activity_bp.get("/sellers/<seller_id>/activity")
def seller_activity_route(seller_id: str):
    """Unified sale/transfer/listing feed. Query: kind=SALE|TRANSFER|LISTING"""
    try:
        kind = request.args.get("kind")
        if kind:
            try:
                kind = HistoryKind(kind.upper())
            except ValueError:
                raise InvalidArgumentError("kind must be one of: SALE, TRANSFER, LISTING")
        entries = history_service.list_activity(seller_id, kind=kind or None)
        return jsonify({"success": True, "activity": [e.to_dict() for e in entries]}), 200
    except MarketplaceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to load seller activity")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@activity_bp.get("/users/<user_id>/notifications")
def list_notifications_route(user_id: str):
    """Query: unread_only=true"""
    try:
        unread_only = request.args.get("unread_only", "false").lower() == "true"
        notifications = notification_service.list_notifications(user_id, unread_only=unread_only)
        return jsonify({"success": True, "notifications": [n.to_dict() for n in notifications]}), 200
    except Exception:
        current_app.logger.exception("Failed to list notifications")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@activity_bp.put("/notifications/<notification_id>/read")
def mark_notification_read_route(notification_id: str):
    try:
        notification_service.mark_read(notification_id)
        return jsonify({"success": True}), 200
    except MarketplaceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to mark notification read")
        return jsonify({"success": False, "error": "Internal server error"}), 500


@activity_bp.put("/users/<user_id>/notifications/read-all")
def mark_all_read_route(user_id: str):
    try:
        changed = notification_service.mark_all_read(user_id)
        return jsonify({"success": True, "changes": changed}), 200
    except Exception:
        current_app.logger.exception("Failed to mark notifications read")
        return jsonify({"success": False, "error": "Internal server error"}), 500
