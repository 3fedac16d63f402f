from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_operator, operator_required, session_date_from_path
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/standups/<day>/stop", methods=["POST"], endpoint="standup_stop")
    @operator_required
    def standup_stop(day: str):
        outcome = container.finalize_service.stop(session_date_from_path(day), operator=current_operator())
        return jsonify({"success": True, **outcome.to_dict()})
