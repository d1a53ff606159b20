# backend/pinmap/routes/pins.py
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from pinmap.routes.deps import require_ready

router = APIRouter(tags=["pins"])


class RemarksIn(BaseModel):
    remarks: str = Field(default="", description="Free text shown in the marker popup")


@router.get("/pins")
async def list_pins():
    session = require_ready()
    return [p.model_dump() for p in session.store.pins]


@router.post("/pins/{pin_id}/fly-to")
async def fly_to_pin(pin_id: int):
    session = require_ready()
    if not session.navigate_to_pin(pin_id):
        raise HTTPException(status_code=404, detail=f"Unknown pin {pin_id}")
    return {"ok": True, "id": pin_id}


@router.get("/draft")
async def get_draft():
    session = require_ready()
    draft = session.controller.draft
    return {
        "state": session.controller.state.value,
        "draft": draft.model_dump() if draft is not None else None,
    }


@router.patch("/draft")
async def update_draft(body: RemarksIn):
    session = require_ready()
    draft = session.set_remarks(body.remarks)
    if draft is None:
        raise HTTPException(status_code=409, detail="No editable draft pin")
    return {"ok": True, "draft": draft.model_dump()}


@router.post("/draft/submit")
async def submit_draft():
    session = require_ready()
    pin = await session.submit()
    return {"ok": pin is not None, "pin": pin.model_dump() if pin is not None else None}
