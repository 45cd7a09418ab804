import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from retirement_backend.schemas.projection import ProjectionParameters


def _connect(db_path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = _connect(db_path)
    try:
        conn.execute(
            """
            create table if not exists saved_parameters (
                id integer primary key autoincrement,
                payload text not null,
                created_at text not null
            )
            """
        )
        conn.commit()
    finally:
        conn.close()


def save_parameters(params: ProjectionParameters, db_path: Path) -> None:
    conn = _connect(db_path)
    try:
        conn.execute(
            """
            insert into saved_parameters (payload, created_at)
            values (?, ?)
            """,
            (
                json.dumps(params.model_dump()),
                datetime.utcnow().isoformat(timespec="seconds"),
            ),
        )
        conn.commit()
    finally:
        conn.close()


def fetch_latest_parameters(db_path: Path) -> Optional[ProjectionParameters]:
    """Most recently saved parameters, or None when nothing is stored."""
    conn = _connect(db_path)
    try:
        row = conn.execute(
            """
            select payload
            from saved_parameters
            order by id desc
            limit 1
            """
        ).fetchone()
        if row is None:
            return None
        return ProjectionParameters.model_validate(json.loads(row["payload"]))
    finally:
        conn.close()
