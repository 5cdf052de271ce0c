"""Async client for the demandes persistence API.
Assumes OAuth2 client-credentials flow when credentials are configured.
"""
from __future__ import annotations
import time
from datetime import datetime
import httpx
from . import config
from .errors import PersistenceError
from .models import Appointment, RescheduleIntent, Status, UpdateResult, Urgency

_TOKEN_CACHE: dict[str, float | str] = {"token": None, "exp": 0.0}

async def _get_token() -> str | None:
    """Fetch and cache bearer token until five minutes before expiry."""
    if not config.CLIENT_ID:
        return None
    now = time.time()
    if _TOKEN_CACHE["token"] and now < _TOKEN_CACHE["exp"]:
        return _TOKEN_CACHE["token"]  # type: ignore

    async with httpx.AsyncClient(http2=True, timeout=config.HTTP_TIMEOUT) as client:
        resp = await client.post(
            config.TOKEN_URL,
            data={"grant_type": "client_credentials"},
            auth=(config.CLIENT_ID, config.CLIENT_SECRET or ""),
        )
        resp.raise_for_status()
        data = resp.json()
        token = data["access_token"]
        _TOKEN_CACHE.update(token=token, exp=now + data.get("expires_in", 3600) - 300)
        return token

async def _headers(**extra: str) -> dict[str, str]:
    headers = {"Accept": "application/json", **extra}
    token = await _get_token()
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers

async def list_appointments(
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    status: Status | None = None,
    urgency: Urgency | None = None,
    include_undated: bool = False,
) -> list[Appointment]:
    """Return demandes, optionally restricted to a date window."""
    params: dict[str, str] = {}
    if date_from:
        params["dateDebut"] = date_from.isoformat()
    if date_to:
        params["dateFin"] = date_to.isoformat()
    if status:
        params["statut"] = status.value
    if urgency:
        params["urgence"] = urgency.value
    if include_undated:
        params["includeSansDate"] = "true"

    async with httpx.AsyncClient(http2=True, timeout=config.HTTP_TIMEOUT) as client:
        resp = await client.get(f"{config.BASE_URL}/demandes", headers=await _headers(), params=params)
        resp.raise_for_status()
        payload = resp.json()

    if not payload.get("success"):
        raise PersistenceError(payload.get("error") or "Impossible de récupérer les demandes")
    return [Appointment.model_validate(item) for item in payload.get("data", [])]

async def fetch_appointment(appt_id: str) -> Appointment:
    """Fetch a single demande by ID."""
    async with httpx.AsyncClient(http2=True, timeout=config.HTTP_TIMEOUT) as client:
        resp = await client.get(f"{config.BASE_URL}/demandes/{appt_id}", headers=await _headers())
        resp.raise_for_status()
        payload = resp.json()

    if not payload.get("success"):
        raise PersistenceError(payload.get("error") or "Demande introuvable")
    return Appointment.model_validate(payload["data"])

async def update_schedule(intent: RescheduleIntent) -> UpdateResult:
    """PATCH the new date and slot. A ``success: false`` body is returned, not raised."""
    headers = await _headers(**{"Content-Type": "application/json"})
    async with httpx.AsyncClient(http2=True, timeout=config.HTTP_TIMEOUT) as client:
        resp = await client.patch(f"{config.BASE_URL}/demandes/update-date", headers=headers, json=intent.to_payload())

    # the service reports business failures as 400 with a JSON body
    if resp.headers.get("content-type", "").startswith("application/json"):
        body = resp.json()
        if isinstance(body, dict) and body.get("success") is False:
            return UpdateResult(success=False, error=body.get("error"))
    resp.raise_for_status()
    return UpdateResult.model_validate(resp.json())
