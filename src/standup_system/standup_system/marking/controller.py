from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import current_operator, operator_required, session_date_from_path
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/standups/<day>/attendance/<participant_id>", methods=["PUT"], endpoint="attendance_set_status")
    @operator_required
    def attendance_set_status(day: str, participant_id: str):
        data = request.get_json(silent=True) or {}
        standup = container.marking_service.set_status(
            session_date_from_path(day),
            participant_id,
            str(data.get("status") or ""),
            operator=current_operator(),
        )
        return jsonify({"success": True, "standup": standup.to_dict()})

    @app.route(
        "/api/standups/<day>/attendance/<participant_id>/unavailable",
        methods=["PUT"],
        endpoint="attendance_set_unavailable",
    )
    @operator_required
    def attendance_set_unavailable(day: str, participant_id: str):
        data = request.get_json(silent=True) or {}
        standup = container.marking_service.set_unavailable(
            session_date_from_path(day),
            participant_id,
            data.get("reason"),
            operator=current_operator(),
        )
        return jsonify({"success": True, "standup": standup.to_dict()})

    @app.route("/api/standups/<day>/stats", methods=["GET"], endpoint="attendance_stats")
    @operator_required
    def attendance_stats(day: str):
        stats = container.marking_service.live_stats(session_date_from_path(day))
        return jsonify({"success": True, "stats": stats.to_dict()})
