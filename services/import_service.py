# services/import_service.py
"""
Bulk task import from CSV, with undo of the most recent batch.

The file must carry the columns
``service, engineer, week, month, year, status, priority`` and may carry
``notes``. Invalid rows are reported back and skipped; valid rows are
inserted in one transaction and recorded as an import batch.
"""

import io
import json
import logging
from typing import Any, Dict, List

import pandas as pd

from services.catalog_service import CatalogService
from services.engineer_service import EngineerService
from services.errors import NotFoundError, ValidationError
from services.task_service import REQUIRED_FIELDS, insert_task, recount, validate_task

logger = logging.getLogger(__name__)

OPTIONAL_COLUMNS = ("notes",)


def read_rows(content: bytes) -> List[Dict[str, Any]]:
    """Parse CSV bytes into row dicts with normalized column names."""
    if not content:
        raise ValidationError("Uploaded file is empty")
    try:
        frame = pd.read_csv(io.BytesIO(content), dtype=str, keep_default_na=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise ValidationError("Could not parse CSV file: {0}".format(e))

    frame.columns = [str(c).strip().lower() for c in frame.columns]
    missing = [c for c in REQUIRED_FIELDS if c not in frame.columns]
    if missing:
        raise ValidationError("Missing columns", details={"missing": missing})

    columns = list(REQUIRED_FIELDS) + [c for c in OPTIONAL_COLUMNS if c in frame.columns]
    frame = frame[columns].apply(lambda col: col.str.strip())
    return frame.to_dict(orient="records")


class ImportService:

    def __init__(self, db):
        self.db = db
        self.engineers = EngineerService(db)
        self.services = CatalogService(db)

    def import_csv(self, content: bytes, user: Dict[str, Any]) -> Dict[str, Any]:
        """
        Returns:
            {"batchId", "imported", "errors": [{"row", "error"}]}
        """
        rows = read_rows(content)

        valid, errors = [], []
        for index, row in enumerate(rows, start=2):  # row 1 is the header
            try:
                valid.append(validate_task(row))
            except ValidationError as e:
                errors.append({"row": index, "error": e.message})

        if not valid:
            return {"batchId": None, "imported": 0, "errors": errors}

        with self.db.transaction() as conn:
            for task in valid:
                self.engineers.ensure_engineer(conn, task["engineer"])
                self.services.ensure_service(conn, task["service"])
            task_ids = [insert_task(conn, task) for task in valid]
            recount(conn, [t["engineer"] for t in valid], [t["service"] for t in valid])
            cursor = conn.execute(
                "INSERT INTO import_batches (created_by, task_ids) VALUES (?, ?)",
                (user["id"], json.dumps(task_ids)),
            )
            batch_id = cursor.lastrowid

        logger.info("Import batch %s: %d rows imported, %d rejected", batch_id, len(task_ids), len(errors))
        return {"batchId": batch_id, "imported": len(task_ids), "errors": errors}

    def undo_last(self) -> Dict[str, Any]:
        """Delete the tasks of the most recent batch that is not undone yet."""
        batch = self.db.query_one(
            "SELECT * FROM import_batches WHERE undone = 0 ORDER BY id DESC LIMIT 1"
        )
        if batch is None:
            raise NotFoundError("Import batch")

        task_ids = json.loads(batch["task_ids"])
        with self.db.transaction() as conn:
            touched = []
            if task_ids:
                placeholders = ", ".join("?" for _ in task_ids)
                touched = conn.execute(
                    "SELECT engineer, service FROM tasks WHERE id IN ({0})".format(placeholders),
                    task_ids,
                ).fetchall()
                conn.execute("DELETE FROM tasks WHERE id IN ({0})".format(placeholders), task_ids)
            recount(conn, [r["engineer"] for r in touched], [r["service"] for r in touched])
            conn.execute("UPDATE import_batches SET undone = 1 WHERE id = ?", (batch["id"],))

        logger.info("Import batch %s undone (%d tasks removed)", batch["id"], len(touched))
        return {"batchId": batch["id"], "deleted": len(touched)}
