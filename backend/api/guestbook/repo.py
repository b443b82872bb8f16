from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import DateTime, bindparam, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from guestbook.errors import ContentNotFound, RepositoryError
from guestbook.models import ContentRecord
from guestbook.workflow import CONTENT_TYPES, PENDING, STATUSES, normalize_status


# ----------------------------
# Helpers
# ----------------------------

_CONTENT_COLUMNS = """
    id,
    user_id,
    type,
    status,
    created_at,
    media_url,
    text_content,
    approved_at
"""

_TS = DateTime(timezone=True)


def _typed(sql: str, *binds):
    # Attach result types so backends that store timestamps as text
    # still hand back datetimes.
    return text(sql).bindparams(*binds).columns(created_at=_TS, approved_at=_TS)


def _to_record(row: Any) -> ContentRecord:
    return ContentRecord(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        type=row["type"],
        status=row["status"],
        created_at=row["created_at"],
        media_url=row["media_url"],
        text_content=row["text_content"],
        approved_at=row["approved_at"],
    )


def _require_status(status: str) -> str:
    s = normalize_status(status)
    if s not in STATUSES:
        raise ValueError(f"Unknown status: {status}")
    return s


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _content_key(content_id: str) -> str:
    # Ids are UUIDs; anything else cannot match a row, and Postgres would
    # reject it as a data error before answering "no rows".
    try:
        return str(uuid.UUID(str(content_id)))
    except ValueError:
        raise ContentNotFound(content_id) from None


class ContentRepository:
    """
    Queries over the `content` table.

    Every SQLAlchemy failure leaves this class as a RepositoryError so
    callers never depend on driver exceptions.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    # ----------------------------
    # Reads
    # ----------------------------

    def find_by_status_older_than(self, status: str, cutoff: datetime) -> List[ContentRecord]:
        sql = _typed(f"""
            SELECT {_CONTENT_COLUMNS}
            FROM content
            WHERE status = :status
              AND created_at < :cutoff
            ORDER BY created_at ASC
        """, bindparam("cutoff", type_=_TS))

        try:
            with self.engine.begin() as conn:
                rows = conn.execute(
                    sql, {"status": _require_status(status), "cutoff": cutoff}
                ).mappings().all()
        except SQLAlchemyError as e:
            raise RepositoryError(str(e)) from e

        return [_to_record(r) for r in rows]

    def count_by_status(self, status: str) -> int:
        sql = text("""
            SELECT COUNT(*) AS total
            FROM content
            WHERE status = :status
        """)

        try:
            with self.engine.begin() as conn:
                total = conn.execute(sql, {"status": _require_status(status)}).mappings().one()["total"]
        except SQLAlchemyError as e:
            raise RepositoryError(str(e)) from e

        return int(total)

    def count_by_status_older_than(self, status: str, cutoff: datetime) -> int:
        sql = text("""
            SELECT COUNT(*) AS total
            FROM content
            WHERE status = :status
              AND created_at < :cutoff
        """).bindparams(bindparam("cutoff", type_=_TS))

        try:
            with self.engine.begin() as conn:
                total = conn.execute(
                    sql, {"status": _require_status(status), "cutoff": cutoff}
                ).mappings().one()["total"]
        except SQLAlchemyError as e:
            raise RepositoryError(str(e)) from e

        return int(total)

    def get_content(self, content_id: str) -> ContentRecord:
        key = _content_key(content_id)
        sql = _typed(f"""
            SELECT {_CONTENT_COLUMNS}
            FROM content
            WHERE id = :content_id
        """)

        try:
            with self.engine.begin() as conn:
                row = conn.execute(sql, {"content_id": key}).mappings().first()
        except SQLAlchemyError as e:
            raise RepositoryError(str(e)) from e

        if row is None:
            raise ContentNotFound(content_id)
        return _to_record(row)

    # ----------------------------
    # Writes
    # ----------------------------

    def create_content(
        self,
        user_id: str,
        type: str,
        text_content: Optional[str] = None,
        media_url: Optional[str] = None,
        status: str = PENDING,
        created_at: Optional[datetime] = None,
    ) -> ContentRecord:
        if type not in CONTENT_TYPES:
            raise ValueError(f"Unknown content type: {type}")

        content_id = str(uuid.uuid4())
        sql = text("""
            INSERT INTO content
                (id, user_id, type, text_content, media_url, status, created_at)
            VALUES
                (:id, :user_id, :type, :text_content, :media_url, :status, :created_at)
        """).bindparams(bindparam("created_at", type_=_TS))

        params: Dict[str, Any] = {
            "id": content_id,
            "user_id": str(user_id),
            "type": type,
            "text_content": text_content,
            "media_url": media_url,
            "status": _require_status(status),
            "created_at": created_at or _utcnow(),
        }

        try:
            with self.engine.begin() as conn:
                conn.execute(sql, params)
        except SQLAlchemyError as e:
            raise RepositoryError(str(e)) from e

        return self.get_content(content_id)

    def set_status(
        self,
        content_id: str,
        status: str,
        approved_at: Optional[datetime] = None,
    ) -> ContentRecord:
        """
        Update status (and approved_at). Assumes the caller validated the transition.
        """
        key = _content_key(content_id)
        sql = text("""
            UPDATE content
            SET status = :status,
                approved_at = :approved_at
            WHERE id = :content_id
        """).bindparams(bindparam("approved_at", type_=_TS))

        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    sql,
                    {
                        "content_id": key,
                        "status": _require_status(status),
                        "approved_at": approved_at,
                    },
                )
        except SQLAlchemyError as e:
            raise RepositoryError(str(e)) from e

        if result.rowcount == 0:
            raise ContentNotFound(content_id)
        return self.get_content(content_id)

    def delete_by_ids(self, ids: List[str]) -> int:
        if not ids:
            return 0

        sql = text("""
            DELETE FROM content
            WHERE id IN :ids
        """).bindparams(bindparam("ids", expanding=True))

        try:
            with self.engine.begin() as conn:
                result = conn.execute(sql, {"ids": [str(i) for i in ids]})
        except SQLAlchemyError as e:
            raise RepositoryError(str(e)) from e

        return int(result.rowcount)
