import logging
from datetime import date, datetime
from typing import Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from . import config
from .grid import bucket, bucket_by_day, filter_in_range, preview
from .models import Granularity, Status, Urgency
from .navigation import current_range, days_in_view
from .repository import DemandeRepository, demo_repository
from .slots import COMPACT_GRID, WEEK_GRID
from .stats import period_stats, planning_counts

logger = logging.getLogger(__name__)


class UpdateDateRequest(BaseModel):
    # all optional so that missing fields get the service's own 400 answer
    id: Optional[str] = None
    dateRdv: Optional[datetime] = None
    heureRdv: Optional[str] = None


# HTTPBearer scheme so Swagger-UI can attach the Authorization header globally
auth_scheme = HTTPBearer(auto_error=False)

app = FastAPI(title="Demandes Planning Service")

if config.OFFLINE_MODE:
    _repository = demo_repository()
elif config.SEED_FILE:
    _repository = DemandeRepository.from_json(config.SEED_FILE)
else:
    _repository = DemandeRepository()


def get_repository() -> DemandeRepository:
    return _repository


def verify_staff(credentials: HTTPAuthorizationCredentials = Depends(auth_scheme)):
    """Validate Bearer token provided via Authorization header"""
    if credentials is None or credentials.scheme.lower() != "bearer" or credentials.credentials != config.API_KEY:
        raise HTTPException(status_code=401, detail="Invalid API key")


def _failure(error: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse({"success": False, "error": error}, status_code=status_code)


@app.get("/demandes", dependencies=[Depends(verify_staff)])
async def list_demandes(
    date_debut: Optional[datetime] = Query(None, alias="dateDebut"),
    date_fin: Optional[datetime] = Query(None, alias="dateFin"),
    statut: Optional[Status] = Query(None),
    urgence: Optional[Urgency] = Query(None),
    include_sans_date: bool = Query(False, alias="includeSansDate"),
    repo: DemandeRepository = Depends(get_repository),
):
    """Demandes ordered by date, undated ones last."""
    found = repo.find(date_debut, date_fin, statut, urgence, include_sans_date)
    return {"success": True, "data": [a.model_dump(by_alias=True, mode="json") for a in found]}


@app.get("/demandes/{demande_id}", dependencies=[Depends(verify_staff)])
async def get_demande(demande_id: str, repo: DemandeRepository = Depends(get_repository)):
    demande = repo.get(demande_id)
    if demande is None:
        return _failure("Demande introuvable", status_code=404)
    return {"success": True, "data": demande.model_dump(by_alias=True, mode="json")}


@app.patch("/demandes/update-date", dependencies=[Depends(verify_staff)])
async def update_date(
    req: UpdateDateRequest = Body(...),
    repo: DemandeRepository = Depends(get_repository),
):
    """Move a demande to a new date and time slot (drag and drop)."""
    if not req.id or not req.dateRdv or not req.heureRdv:
        return _failure("Les champs id, dateRdv et heureRdv sont requis")
    try:
        result = repo.update_schedule(req.id, req.dateRdv, req.heureRdv)
    except Exception as exc:
        logger.exception("update-date failed for %s", req.id)
        return _failure(str(exc) or "Une erreur est survenue lors de la mise à jour", status_code=500)
    if not result.success:
        return _failure(result.error)
    return {"success": True, "data": result.data}


@app.get("/planning", dependencies=[Depends(verify_staff)])
async def planning(
    anchor: Optional[date] = Query(None, description="Any day of the period, defaults to today"),
    view: Granularity = Query(Granularity.WEEK),
    grid: str = Query("week", pattern="^(week|compact)$"),
    repo: DemandeRepository = Depends(get_repository),
):
    """Planning grid for the period around ``anchor``."""
    today = date.today()
    date_range = current_range(anchor or today, view)
    days = days_in_view(date_range, view)
    appointments = filter_in_range(repo.find(), date_range)
    body = {
        "title": date_range.title,
        "start": date_range.start.isoformat(),
        "end": date_range.end.isoformat(),
        "days": [d.isoformat() for d in days],
        "stats": period_stats(appointments, date_range).model_dump(),
        "counts": planning_counts(repo.find(), today).model_dump(),
    }
    if view == Granularity.WEEK:
        rows = (WEEK_GRID if grid == "week" else COMPACT_GRID).slots()
        cells = bucket(appointments, days, rows)
        body["rows"] = [s.key for s in rows]
        body["cells"] = {
            f"{d.isoformat()}:{s.key}": [a.id for a in items]
            for (d, s), items in cells.items() if items
        }
    else:
        cells = {}
        for d, items in bucket_by_day(appointments, days).items():
            visible, overflow = preview(items)
            if items:
                cells[d.isoformat()] = {"ids": [a.id for a in visible], "overflow": overflow}
        body["cells"] = cells
    return body
