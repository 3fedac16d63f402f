from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import operator_required, session_date_from_path
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/standups/<day>/records", methods=["GET"], endpoint="ledger_records")
    @operator_required
    def ledger_records(day: str):
        records = container.ledger_service.list_for_session(session_date_from_path(day))
        return jsonify({"success": True, "records": [r.to_dict() for r in records]})

    @app.route("/api/standups/<day>/summary", methods=["GET"], endpoint="ledger_summary")
    @operator_required
    def ledger_summary(day: str):
        summary = container.ledger_service.summary(session_date_from_path(day))
        return jsonify({"success": True, "summary": summary.to_dict()})
