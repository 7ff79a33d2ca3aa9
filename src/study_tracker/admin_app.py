from __future__ import annotations

import logging
from typing import Any

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from study_tracker.config import load_settings
from study_tracker.db import Database
from study_tracker.i18n import normalize_language_code
from study_tracker.logging_setup import setup_logging
from study_tracker.ranks import NextRank
from study_tracker.service import evaluate_profile
from study_tracker.time_utils import now_local

logger = logging.getLogger(__name__)


def _require_auth(request: Request, token: str | None) -> None:
    if not token:
        return
    header = request.headers.get("x-admin-token")
    query = request.query_params.get("token")
    if header == token or query == token:
        return
    raise HTTPException(status_code=401, detail="Unauthorized")


class RestoreRequest(BaseModel):
    backup: dict[str, Any] = Field(default_factory=dict)
    actor: str = "admin"


def _next_rank_payload(rank: NextRank | None) -> dict[str, Any] | None:
    if rank is None:
        return None
    return {"title": rank.title, "needed": rank.needed, "remaining": rank.remaining}


def build_admin_app(db: Database, admin_token: str | None, tz: str = "Europe/Lisbon") -> FastAPI:
    app = FastAPI(title="Study Tracker Admin", version="1.0.0")

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request) -> str:
        _require_auth(request, admin_token)
        return """
<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Study Tracker Admin</title>
  <style>
    body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif; margin: 24px; background: #f5f7fb; }
    .card { background: #fff; border-radius: 12px; padding: 16px; margin-bottom: 16px; box-shadow: 0 2px 12px rgba(0,0,0,0.08); }
    table { width: 100%; border-collapse: collapse; }
    td, th { text-align: left; padding: 6px; border-bottom: 1px solid #e2e8f0; }
    pre { white-space: pre-wrap; background: #0f172a; color: #e2e8f0; padding: 12px; border-radius: 8px; max-height: 320px; overflow: auto; }
  </style>
</head>
<body>
  <h1>Study Tracker Admin</h1>
  <div class="card">
    <table>
      <thead><tr><th>User</th><th>Last seen</th><th></th></tr></thead>
      <tbody id="users"></tbody>
    </table>
  </div>
  <div class="card"><pre id="output"></pre></div>
  <script>
    const token = new URLSearchParams(window.location.search).get("token");
    const withToken = (url) => token ? `${url}${url.includes("?") ? "&" : "?"}token=${encodeURIComponent(token)}` : url;

    async function showProfile(userId) {
      const res = await fetch(withToken(`/api/users/${userId}/profile`));
      document.getElementById("output").textContent = JSON.stringify(await res.json(), null, 2);
    }

    async function loadUsers() {
      const res = await fetch(withToken("/api/users"));
      const data = await res.json();
      const body = document.getElementById("users");
      body.innerHTML = "";
      for (const user of data.users) {
        const row = document.createElement("tr");
        row.innerHTML = `<td>${user.user_id}</td><td>${user.last_seen_at}</td>
          <td><a href="${withToken(`/api/users/${user.user_id}/backup`)}">backup</a>
          <a href="#" data-user="${user.user_id}">profile</a></td>`;
        row.querySelector("[data-user]").addEventListener("click", (e) => { e.preventDefault(); showProfile(user.user_id); });
        body.appendChild(row);
      }
    }

    loadUsers();
  </script>
</body>
</html>
        """

    @app.get("/api/users")
    async def api_users(request: Request) -> dict[str, Any]:
        _require_auth(request, admin_token)
        return {"users": db.get_all_user_profiles()}

    @app.get("/api/users/{user_id}/backup")
    async def api_backup(user_id: int, request: Request) -> dict[str, Any]:
        _require_auth(request, admin_token)
        return db.create_backup(user_id, now_local(tz))

    @app.post("/api/users/{user_id}/restore")
    async def api_restore(user_id: int, request: Request, payload: RestoreRequest) -> dict[str, Any]:
        _require_auth(request, admin_token)
        if not db.restore_backup(user_id, payload.backup):
            raise HTTPException(status_code=400, detail="Invalid backup")
        logger.info("backup restored for user %s by %s", user_id, payload.actor)
        return {"ok": True}

    @app.get("/api/users/{user_id}/profile")
    async def api_profile(user_id: int, request: Request) -> dict[str, Any]:
        _require_auth(request, admin_token)
        lang = normalize_language_code(db.get_language(user_id))
        view = evaluate_profile(db.get_sessions(user_id), db.get_subjects(user_id), now_local(tz), lang=lang)
        return {
            "streak": view.streak,
            "longest_streak": view.longest_streak,
            "rank": view.rank,
            "next_rank": _next_rank_payload(view.next_rank),
            "unlocked": view.unlocked,
            "total": view.total,
            "total_minutes": view.total_minutes,
            "session_count": view.session_count,
            "achievements": [
                {
                    "id": a.id,
                    "title": a.title,
                    "description": a.description,
                    "is_unlocked": a.is_unlocked,
                }
                for a in view.achievements
            ],
        }

    return app


def run_admin() -> None:
    setup_logging()
    settings = load_settings(require_token=False)
    db = Database(settings.database_path, tz=settings.tz)
    app = build_admin_app(db, settings.admin_panel_token, tz=settings.tz)
    uvicorn.run(app, host=settings.admin_host, port=settings.admin_port)
