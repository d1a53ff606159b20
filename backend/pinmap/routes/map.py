# backend/pinmap/routes/map.py
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from opentelemetry import trace

from pinmap.runtime import get_session
from pinmap.routes.deps import require_ready

router = APIRouter(prefix="/map", tags=["map"])
tracer = trace.get_tracer(__name__)


class ClickIn(BaseModel):
    lat: float = Field(..., description="Latitude of the clicked point")
    lng: float = Field(..., description="Longitude of the clicked point")


@router.get("")
async def map_state():
    session = get_session()
    state = session.snapshot()
    state["style"] = session.map_cfg.style_url
    camera = getattr(session.map_view, "camera", None)
    state["camera"] = (
        {"lng": camera.lng, "lat": camera.lat, "zoom": camera.zoom} if camera is not None else None
    )
    return state


@router.get("/markers")
async def map_markers():
    session = require_ready()
    to_geojson = getattr(session.map_view, "to_geojson", None)
    if to_geojson is None:
        raise HTTPException(status_code=501, detail="Map view does not export markers")
    return to_geojson()


@router.post("/click")
async def map_click(click: ClickIn):
    session = require_ready()
    with tracer.start_as_current_span("map.click"):
        draft = session.click(click.lat, click.lng)
    return {"ok": True, "draft": draft.model_dump() if draft is not None else None}
