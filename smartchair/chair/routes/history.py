from flask import Blueprint, jsonify, request

from ..extensions import logger
from .. import get_services
from ..errors import InvalidInput, StorageUnavailable
from . import parse_time

bp = Blueprint("history", __name__, url_prefix="/api")


@bp.route("/history/<source_id>", methods=["GET"])
def get_history(source_id: str):
    try:
        limit = request.args.get("limit", type=int)
        if "limit" in request.args and limit is None:
            return jsonify({"error": "limit must be an integer"}), 400

        order = request.args.get("order", "newest")
        if order not in ("newest", "oldest"):
            return jsonify({"error": "order must be newest or oldest"}), 400

        records = get_services().history.history(
            source_id,
            from_time=parse_time(request.args.get("from")),
            to_time=parse_time(request.args.get("to"), end_of_day=True),
            limit=limit,
            newest_first=order == "newest",
        )
        return jsonify([record.to_dict() for record in records]), 200

    except InvalidInput as e:
        return jsonify({"error": str(e)}), 400
    except StorageUnavailable as e:
        return jsonify({"error": str(e), "retryable": True}), 503
    except Exception as e:
        logger.error(f"Error retrieving history: {e}")
        return jsonify({"error": "Server error"}), 500
