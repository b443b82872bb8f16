from __future__ import annotations

import html
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse

from guestbook.config import Settings, configure_logging, get_settings
from guestbook.db import db_ping, get_engine
from guestbook.deps import (
    get_reaper,
    get_repository,
    get_storage_monitor,
    get_token_codec,
    require_admin,
)
from guestbook.errors import RepositoryError
from guestbook.reaper import RejectedContentReaper
from guestbook.repo import ContentRepository
from guestbook.schemas import ApprovalLinkOut, CleanupOut, RejectedStatsOut, StorageStatsOut
from guestbook.storage_monitor import StorageMonitor
from guestbook.tokens import ApprovalTokenCodec, Valid, approval_url
from guestbook.workflow import APPROVED, WorkflowError, validate_transition

configure_logging()
log = logging.getLogger(__name__)

app = FastAPI(title="Guestbook API", version="0.1.0")


def _page(title: str, message: str, status_code: int, links: Optional[dict[str, str]] = None) -> HTMLResponse:
    anchors = "".join(
        f'<a href="{html.escape(href)}">{html.escape(label)}</a>' for label, href in (links or {}).items()
    )
    body = f"""<!DOCTYPE html>
<html>
  <head>
    <title>{html.escape(title)}</title>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
  </head>
  <body>
    <h1>{html.escape(title)}</h1>
    <p>{html.escape(message)}</p>
    <div>{anchors}</div>
  </body>
</html>
"""
    return HTMLResponse(content=body, status_code=status_code)


# -----------------------------
# Health checks
# -----------------------------
@app.get("/healthz")
def healthz():
    return {"status": "ok"}


@app.get("/readyz")
def readyz():
    engine = get_engine()
    db_ping(engine)
    return {"status": "ready", "db": "ok"}


# -----------------------------
# E-mail approval link
# -----------------------------
@app.get("/admin/approve-email", response_class=HTMLResponse)
def approve_from_email(
    token: Optional[str] = Query(default=None),
    codec: ApprovalTokenCodec = Depends(get_token_codec),
    repository: ContentRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    dashboard = {"Admin dashboard": f"{settings.app_url}/admin/approve-content"}

    if not token:
        return _page("Missing token", "Invalid link. Please use the link from the notification e-mail.", 400)

    result = codec.verify(token)
    if not isinstance(result, Valid):
        return _page(
            "Invalid or expired token",
            "This approval link is no longer valid. Links expire after 7 days; "
            "approve the content from the admin dashboard instead.",
            400,
            dashboard,
        )

    try:
        content = repository.get_content(result.content_id)
    except KeyError:
        return _page("Content not found", "The content does not exist or has been deleted.", 404)
    except RepositoryError as e:
        log.error("Error loading content %s: %s", result.content_id, e)
        return _page("Approval failed", "Something went wrong. Try again later or use the admin dashboard.", 500)

    gallery = {"Gallery": f"{settings.app_url}/gallery"}

    if content.approved_at is not None or content.status == APPROVED:
        return _page("Already approved", "This content was already approved.", 200, gallery)

    try:
        validate_transition(content.status, APPROVED)
        repository.set_status(content.id, APPROVED, approved_at=datetime.now(timezone.utc))
    except WorkflowError as e:
        return _page("Approval failed", str(e), 400, dashboard)
    except KeyError:
        return _page("Content not found", "The content does not exist or has been deleted.", 404)
    except RepositoryError as e:
        log.error("Error approving content %s: %s", content.id, e)
        return _page("Approval failed", "Something went wrong. Try again later or use the admin dashboard.", 500)

    log.info("Content %s approved from e-mail link", content.id)
    return _page("Content approved", "The content is approved and now visible in the gallery.", 200, {**gallery, **dashboard})


# -----------------------------
# Admin endpoints
# -----------------------------
@app.post(
    "/admin/content/{content_id}/approval-link",
    response_model=ApprovalLinkOut,
    dependencies=[Depends(require_admin)],
)
def create_approval_link(
    content_id: str,
    codec: ApprovalTokenCodec = Depends(get_token_codec),
    repository: ContentRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    try:
        token = codec.issue(content_id)
        repository.get_content(content_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RepositoryError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {"content_id": content_id, "token": token, "url": approval_url(token, settings.app_url)}


@app.post("/admin/cleanup-rejected", response_model=CleanupOut, dependencies=[Depends(require_admin)])
def cleanup_rejected(
    retention_days: Optional[int] = Query(default=None, ge=0),
    reaper: RejectedContentReaper = Depends(get_reaper),
):
    return asdict(reaper.cleanup(retention_days))


@app.get("/admin/rejected-stats", response_model=RejectedStatsOut, dependencies=[Depends(require_admin)])
def rejected_stats(
    retention_days: Optional[int] = Query(default=None, ge=0),
    reaper: RejectedContentReaper = Depends(get_reaper),
):
    stats = reaper.stats(retention_days)
    if stats is None:
        raise HTTPException(status_code=500, detail="Failed to fetch rejected content stats")
    return asdict(stats)


@app.get("/storage/stats", response_model=StorageStatsOut, dependencies=[Depends(require_admin)])
def storage_stats(monitor: StorageMonitor = Depends(get_storage_monitor)):
    stats = monitor.get_stats()
    if stats is None:
        raise HTTPException(status_code=500, detail="Failed to fetch storage stats")
    return asdict(stats)
