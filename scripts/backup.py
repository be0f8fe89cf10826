"""Backup the store.

Note: Runs the same boot migration as the app (so the backup is the repaired,
canonical snapshot) and writes it to backups/ as JSON.
"""

from __future__ import annotations

import importlib
import json
from datetime import datetime
from pathlib import Path

from config import get_settings_module

from employee_portal.container import build_storage
from employee_portal.store.store import Store


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    storage = build_storage(
        backend=settings.STORAGE_BACKEND,
        path=settings.STORAGE_PATH,
        db_config=settings.DB_CONFIG,
    )
    store = Store(storage)
    store.initialize()

    out_dir = Path(__file__).resolve().parents[1] / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"employee_portal_{ts}.json"
    out_file.write_text(json.dumps(store.export_snapshot(), indent=2, ensure_ascii=False), encoding="utf-8")
    print(f"OK: Backup created: {out_file}")


if __name__ == "__main__":
    main()
