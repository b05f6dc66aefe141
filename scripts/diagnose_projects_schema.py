"""Check the live `projects` table against the columns the API reads and writes.

Usage: python scripts/diagnose_projects_schema.py

Exits 1 when required columns are missing, 2 when the database settings are
incomplete or the database cannot be reached.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import mysql.connector
from dotenv import load_dotenv

from src.erp_portal.erp_portal.database.bootstrap import describe_table
from src.erp_portal.erp_portal.database.schema_check import PROJECTS_EXPECTED_COLUMNS, compare_columns

REQUIRED_ENV = ("DB_HOST", "DB_USER", "DB_NAME")


def main() -> int:
    load_dotenv(override=False)

    missing = [name for name in REQUIRED_ENV if not os.getenv(name)]
    if missing:
        print(f"Missing environment variables: {', '.join(missing)}")
        return 2

    db_config = {
        "host": os.getenv("DB_HOST"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER"),
        "password": os.getenv("DB_PASSWORD", ""),
        "database": os.getenv("DB_NAME"),
    }

    try:
        rows = describe_table(db_config, "projects")
    except mysql.connector.Error as e:
        print(f"Could not read `projects`: {e}")
        return 2

    report = compare_columns("projects", PROJECTS_EXPECTED_COLUMNS, rows)
    for line in report.lines():
        print(line)
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
