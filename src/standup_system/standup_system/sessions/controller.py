from __future__ import annotations

from datetime import datetime

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local, parse_hhmm
from ..common.web import current_operator, operator_required, session_date_from_path
from ..core.exceptions import SessionNotFound, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/standups/<day>", methods=["GET"], endpoint="standup_query")
    @operator_required
    def standup_query(day: str):
        session_date = session_date_from_path(day)
        standup = container.session_service.query(session_date)
        if standup is None:
            raise SessionNotFound(f"No standup for {day}")
        return jsonify({"success": True, "standup": standup.to_dict(now=now_local(container.timezone))})

    @app.route("/api/standups/<day>/schedule", methods=["POST"], endpoint="standup_schedule")
    @operator_required
    def standup_schedule(day: str):
        session_date = session_date_from_path(day)
        data = request.get_json(silent=True) or {}
        try:
            at = parse_hhmm(str(data.get("time") or ""))
        except ValueError as e:
            raise ValidationError("Please enter a valid time in HH:MM format (24-hour)") from e

        standup = container.session_service.schedule(
            session_date,
            scheduled_time=datetime.combine(session_date, at),
            scheduled_by=current_operator(),
        )
        return jsonify({"success": True, "standup": standup.to_dict()}), 201

    @app.route("/api/standups/<day>/activate", methods=["POST"], endpoint="standup_activate")
    @operator_required
    def standup_activate(day: str):
        standup = container.session_service.activate(session_date_from_path(day))
        return jsonify({"success": True, "standup": standup.to_dict()})
