# api/v1/catalogue.py
from __future__ import annotations
from typing import List

from fastapi import APIRouter, HTTPException, Query

from core import knowledge_base as kb
from api.v1.schemas import CatalogueRow

router = APIRouter()


@router.get("", response_model=List[CatalogueRow])
async def list_catalogue(
    slot: str | None = Query(None, description="breakfast, mid_morning_snack, lunch, evening_snack or dinner"),
    diet_type: str | None = None,
    allergies: str | None = None,
) -> List[CatalogueRow]:
    if slot and slot not in kb.SLOT_TIMES:
        raise HTTPException(status_code=422, detail=f"Unknown slot '{slot}'")
    df = kb.catalogue_frame(slot, diet_type, allergies)
    return [CatalogueRow(**row) for row in df.to_dict("records")]
