from __future__ import annotations

import importlib
import json
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.standup_system.standup_system.database.bootstrap import upsert_participants


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    seed_path = Path(sys.argv[1]) if len(sys.argv) > 1 else REPO_ROOT / "database" / "seed_roster.json"
    participants = json.loads(seed_path.read_text(encoding="utf-8"))
    count = upsert_participants(db_config, participants)

    print(
        f"OK: Seeded {count} participants -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
