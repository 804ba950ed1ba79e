from __future__ import annotations

import threading
from typing import Any

from flask import request

from .extensions import logger, socketio
from . import get_services
from .domain import PostureVerdict
from .errors import PostureServiceError
from .hub import Subscription

_subscriptions: dict[str, Subscription] = {}
_subscriptions_lock = threading.Lock()


def live_event(verdict: PostureVerdict) -> tuple[str, dict[str, Any]]:
    if verdict.has_pose_data:
        return "postureUpdate", {
            "sourceId": verdict.source_id,
            "postureStatus": verdict.status.value,
            "hasPoseData": True,
            "timestamp": verdict.timestamp.isoformat(),
        }
    return "chairData", verdict.to_payload()


def forward_verdicts(sid: str, subscription: Subscription) -> None:
    for verdict in subscription:
        name, data = live_event(verdict)
        try:
            socketio.emit(name, data, to=sid)
        except Exception as e:
            logger.error(f"Failed to emit {name} to {sid}: {e}")
    logger.info(f"Stopped forwarding verdicts to {sid}")


@socketio.on("connect")
def handle_connect(auth=None):
    subscription = get_services().hub.subscribe()
    with _subscriptions_lock:
        _subscriptions[request.sid] = subscription
    socketio.start_background_task(forward_verdicts, request.sid, subscription)
    logger.info(f"Client {request.sid} connected")


@socketio.on("disconnect")
def handle_disconnect(reason=None):
    with _subscriptions_lock:
        subscription = _subscriptions.pop(request.sid, None)
    if subscription is not None:
        subscription.close()
    logger.info(f"Client {request.sid} disconnected")


@socketio.on("poseData")
def handle_pose_data(data):
    try:
        if not isinstance(data, dict) or "keypoints" not in data:
            logger.error("Invalid keypoints data received via socket")
            return
        verdict = get_services().pipeline.submit_keypoints(
            str(data.get("chairId") or "unknown"), data["keypoints"]
        )
        logger.info(f"PoseNet posture analysis via socket: {verdict.status.value}")
    except PostureServiceError as e:
        logger.error(f"Error processing PoseNet data via socket: {e}")
