"""
REST API for the league engine.
Thin wrappers around TournamentService and persistence.
"""
from __future__ import annotations

import os
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncGenerator, Generator

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from league_engine.auth import decode_token
from league_engine.models import FixtureDraft, PlayerRole
from league_engine.persistence import PlayerRepository, get_connection, init_db
from league_engine.persistence.db import get_db_path
from league_engine.services import TournamentService
from league_engine.services.errors import EngineError, MatchesAlreadyExist, NotFoundError


@contextmanager
def db_conn() -> Generator:
    """Yield a DB connection, ensure close on exit."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    init_db(db_path=get_db_path())
    yield


def _cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
    return [o.strip() for o in raw.split(",") if o.strip()]


# ---------- FastAPI app ----------
app = FastAPI(
    title="League Engine API",
    description="Fixtures, draw, results and standings for league tournaments",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

security = HTTPBearer(auto_error=False)
service = TournamentService()


# ---------- Request/Response models ----------


class FixtureDraftIn(BaseModel):
    match_number: int = Field(..., ge=1)
    home_team_id: str | None = None
    away_team_id: str | None = None


class SaveRoundOneRequest(BaseModel):
    drafts: list[FixtureDraftIn]


class RoundRobinRequest(BaseModel):
    double: bool = Field(False, description="Add a mirrored second leg (home/away swapped)")


class ResultRequest(BaseModel):
    # Raw JSON values; parse_score rejects bools, negatives and fractions (InvalidScore)
    home_score: Any
    away_score: Any


# ---------- Identity ----------


def _get_current_email(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> str:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Unauthorized (missing Bearer token)")
    email = decode_token(credentials.credentials)
    if email is None:
        raise HTTPException(status_code=401, detail="Unauthorized (invalid token)")
    return email


def _require_admin(email: str = Depends(_get_current_email)) -> str:
    with db_conn() as conn:
        role = PlayerRepository().get_role(conn, email)
    if role != PlayerRole.ADMIN:
        raise HTTPException(status_code=403, detail="Forbidden (not admin)")
    return email


def _http_error(exc: EngineError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, MatchesAlreadyExist):
        return HTTPException(status_code=409, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


# ---------- Roster gate ----------


@app.get("/tournaments/{tournament_id}/roster")
def get_roster_state(tournament_id: str, _: str = Depends(_get_current_email)) -> dict[str, Any]:
    with db_conn() as conn:
        return {"tournament_id": tournament_id, "state": service.roster_state(conn, tournament_id).value}


@app.post("/tournaments/{tournament_id}/roster/lock")
def lock_roster(tournament_id: str, _: str = Depends(_require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            return service.lock_roster(conn, tournament_id).to_dict()
        except EngineError as e:
            raise _http_error(e)


@app.post("/tournaments/{tournament_id}/roster/unlock")
def unlock_roster(tournament_id: str, _: str = Depends(_require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            return service.unlock_roster(conn, tournament_id).to_dict()
        except EngineError as e:
            raise _http_error(e)


# ---------- Draw ----------


@app.get("/tournaments/{tournament_id}/draw")
def get_draw(tournament_id: str, _: str = Depends(_get_current_email)) -> dict[str, Any]:
    with db_conn() as conn:
        assignments = service.list_draw(conn, tournament_id)
    return {"assignments": [a.to_dict() for a in assignments]}


@app.post("/tournaments/{tournament_id}/draw")
def run_draw(tournament_id: str, _: str = Depends(_require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            assignments = service.run_draw(conn, tournament_id)
        except EngineError as e:
            raise _http_error(e)
    return {"assignments": [a.to_dict() for a in assignments]}


@app.delete("/tournaments/{tournament_id}/draw")
def reset_draw(tournament_id: str, _: str = Depends(_require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            service.reset_draw(conn, tournament_id)
        except EngineError as e:
            raise _http_error(e)
    return {"ok": True}


# ---------- Fixtures ----------


@app.get("/tournaments/{tournament_id}/fixtures")
def get_fixtures(tournament_id: str, _: str = Depends(_get_current_email)) -> dict[str, Any]:
    with db_conn() as conn:
        fixtures = service.list_fixtures(conn, tournament_id)
    return {"fixtures": [f.to_dict() for f in fixtures]}


@app.put("/tournaments/{tournament_id}/fixtures/round1")
def save_round_one(
    tournament_id: str, req: SaveRoundOneRequest, _: str = Depends(_require_admin)
) -> dict[str, Any]:
    drafts = [FixtureDraft(d.match_number, d.home_team_id, d.away_team_id) for d in req.drafts]
    with db_conn() as conn:
        try:
            fixtures = service.save_round_one(conn, tournament_id, drafts)
        except EngineError as e:
            raise _http_error(e)
    return {
        "round1": [f.to_dict() for f in fixtures.round1],
        "round2": [f.to_dict() for f in fixtures.round2],
    }


@app.delete("/tournaments/{tournament_id}/fixtures")
def reset_fixtures(tournament_id: str, _: str = Depends(_require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            service.reset_fixtures(conn, tournament_id)
        except EngineError as e:
            raise _http_error(e)
    return {"ok": True}


# ---------- Schedule ----------


@app.get("/tournaments/{tournament_id}/matches")
def get_matches(tournament_id: str, _: str = Depends(_get_current_email)) -> dict[str, Any]:
    with db_conn() as conn:
        matches = service.list_matches(conn, tournament_id)
    return {"matches": [m.to_dict() for m in matches]}


@app.post("/tournaments/{tournament_id}/schedule/round-robin")
def generate_round_robin_schedule(
    tournament_id: str, req: RoundRobinRequest, _: str = Depends(_require_admin)
) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            matches = service.generate_round_robin_matches(conn, tournament_id, double=req.double)
        except EngineError as e:
            raise _http_error(e)
    return {"matches": [m.to_dict() for m in matches]}


@app.post("/tournaments/{tournament_id}/schedule/from-fixtures")
def generate_schedule_from_fixtures(tournament_id: str, _: str = Depends(_require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            matches = service.generate_matches_from_fixtures(conn, tournament_id)
        except EngineError as e:
            raise _http_error(e)
    return {"matches": [m.to_dict() for m in matches]}


@app.delete("/tournaments/{tournament_id}/schedule")
def reset_schedule(tournament_id: str, _: str = Depends(_require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            service.reset_schedule(conn, tournament_id)
        except EngineError as e:
            raise _http_error(e)
    return {"ok": True}


@app.post("/tournaments/{tournament_id}/schedule/assign-players")
def assign_players(tournament_id: str, _: str = Depends(_require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            updated = service.assign_players(conn, tournament_id)
        except EngineError as e:
            raise _http_error(e)
    return {"updated": [m.to_dict() for m in updated]}


# ---------- Results ----------


@app.put("/matches/{match_id}/result")
def record_result(match_id: str, req: ResultRequest, _: str = Depends(_require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            match = service.record_result(conn, match_id, req.home_score, req.away_score)
        except EngineError as e:
            raise _http_error(e)
    return match.to_dict()


@app.delete("/matches/{match_id}/result")
def clear_result(match_id: str, _: str = Depends(_require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            match = service.clear_result(conn, match_id)
        except EngineError as e:
            raise _http_error(e)
    return match.to_dict()


# ---------- Standings ----------


@app.get("/tournaments/{tournament_id}/standings")
def get_standings(tournament_id: str, _: str = Depends(_get_current_email)) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            rows = service.standings(conn, tournament_id)
        except EngineError as e:
            raise _http_error(e)
    return {"standings": [r.to_dict() for r in rows]}


@app.get("/tournaments/{tournament_id}/me/summary")
def get_my_summary(tournament_id: str, email: str = Depends(_get_current_email)) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            summary = service.team_summary_for_player(conn, tournament_id, email)
        except EngineError as e:
            raise _http_error(e)
    return {"email": email, "summary": summary.to_dict() if summary else None}


# ---------- Run with: uvicorn league_engine.api:app --reload ----------
