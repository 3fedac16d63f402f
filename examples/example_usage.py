"""Example: drive one standup through the service layer (no Flask, no MySQL).

Controllers are thin; the lifecycle lives in the services.
"""

from datetime import date, datetime

from src.standup_system.standup_system.container import build_container
from src.standup_system.standup_system.core.enums import AttendanceStatus
from src.standup_system.standup_system.roster.model import Participant


def main():
    container = build_container(session_store="memory")
    for i in range(1, 11):
        container.roster.upsert(Participant(f"E{i}", f"Employee {i}", f"e{i}@example.com", f"EMP-{i:03d}"))

    day = date(2026, 3, 2)
    container.session_service.schedule(
        day,
        scheduled_time=datetime(2026, 3, 2, 8, 45),
        scheduled_by="Admin",
        now=datetime(2026, 3, 2, 8, 0),
    )
    container.session_service.activate(day, now=datetime(2026, 3, 2, 8, 45))
    container.marking_service.set_status(day, "E1", AttendanceStatus.PRESENT)
    container.marking_service.set_unavailable(day, "E2", "On leave")

    outcome = container.finalize_service.stop(day, now=datetime(2026, 3, 2, 8, 50))
    print(outcome.result.value, container.ledger_service.summary(day).to_dict())


if __name__ == "__main__":
    main()
