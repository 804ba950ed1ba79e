from flask import Blueprint, jsonify, request

from ..extensions import logger
from .. import get_services
from ..domain import SensorReading
from ..errors import InvalidInput, StorageUnavailable
from . import parse_time

bp = Blueprint("chair", __name__)


@bp.route("/chair", methods=["POST"])
def receive_chair_data():
    try:
        data = request.get_json(silent=True)
        logger.info(f"Received chair data: {data}")
        if not isinstance(data, dict):
            return jsonify({"error": "Invalid sensor data format"}), 400

        reading = SensorReading(
            source_id=str(data.get("id") or "unknown"),
            values=data.get("sensors"),
            captured_at=parse_time(data.get("timestamp")),
        )
        verdict = get_services().pipeline.submit_sensor_reading(reading)

        return jsonify({
            "message": "Data received successfully",
            "postureStatus": verdict.status.value,
        }), 200

    except InvalidInput as e:
        logger.error(f"Invalid sensor data: {e}")
        return jsonify({"error": str(e)}), 400
    except StorageUnavailable as e:
        return jsonify({"error": str(e), "retryable": True}), 503
    except Exception as e:
        logger.error(f"Error processing chair data: {e}")
        return jsonify({"error": "Server error"}), 500


@bp.route("/posenet", methods=["POST"])
def receive_posenet_data():
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or "keypoints" not in data:
            return jsonify({"error": "Invalid keypoints data"}), 400

        verdict = get_services().pipeline.submit_keypoints(
            str(data.get("chairId") or "unknown"),
            data["keypoints"],
            captured_at=parse_time(data.get("timestamp")),
        )
        logger.info(f"PoseNet posture analysis for {verdict.source_id}: {verdict.status.value}")

        return jsonify({
            "message": "PoseNet data received successfully",
            "postureStatus": verdict.status.value,
        }), 200

    except InvalidInput as e:
        return jsonify({"error": str(e)}), 400
    except StorageUnavailable as e:
        return jsonify({"error": str(e), "retryable": True}), 503
    except Exception as e:
        logger.error(f"Error processing PoseNet data: {e}")
        return jsonify({"error": "Server error"}), 500
