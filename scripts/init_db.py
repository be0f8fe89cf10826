from __future__ import annotations

import importlib

from config import get_settings_module

from employee_portal.storage.bootstrap import apply_schema, list_tables


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config)

    print(
        "OK: Initialized kv_store -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
        f" (tables={len(list_tables(db_config))})"
    )


if __name__ == "__main__":
    main()
