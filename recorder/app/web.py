# recorder/app/web.py
from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from recorder.capture.models import ClearOutcome
from recorder.service import BlueprintRecorder

logger = logging.getLogger(__name__)

__all__ = ["RecordingRequest", "parseSlugList", "parseSequenceList", "createRouter"]



class RecordingRequest(BaseModel):
    enabled: bool



def parseSlugList(value: str | None) -> list[str]:
    """'a, b,,c' → ['a', 'b', 'c']"""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]



def parseSequenceList(value: str | None) -> tuple[list[int], bool]:
    """
    Parses the `mutations` query parameter.
    Returns (sequences, replayAll); "all" selects every captured mutation.
    """
    if not value:
        return [], False
    if value.strip().lower() == "all":
        return [], True
    sequences: list[int] = []
    for part in parseSlugList(value):
        try:
            sequences.append(int(part))
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Invalid mutation sequence '{part}'")
    return sequences, False



def createRouter(recorder: BlueprintRecorder, *, prefix: str = "/playground/v1") -> APIRouter:
    router = APIRouter(prefix=prefix)

    @router.get("/blueprint")
    def getBlueprint(
        ignore: str | None = Query(default=None),
        ignore_all_plugins: str | None = Query(default=None),
        ignore_theme: str | None = Query(default=None),
        mutations: str | None = Query(default=None),
    ):
        # Flags count as set when present at all, even with an empty value
        sequences, replayAll = parseSequenceList(mutations)
        context = recorder.buildContext(
            exclude=parseSlugList(ignore),
            excludeAllUnits=ignore_all_plugins is not None,
            excludeTheme=ignore_theme is not None,
            selectedMutations=sequences,
            replayAllMutations=replayAll,
        )
        blueprint, _result = recorder.generateWithNotice(context)
        return JSONResponse(blueprint.toDict(), status_code=200)

    @router.get("/mutations")
    def listMutations():
        records = recorder.capturedMutations()
        return {
            "state": recorder.captureLog.state.value,
            "mutations": [record.model_dump(mode="json") for record in records],
        }

    @router.post("/recording")
    def setRecording(body: RecordingRequest):
        state = recorder.setRecording(body.enabled)
        return {"state": state.value}

    @router.delete("/mutations")
    def clearMutations():
        outcome = recorder.clearCapturedMutations()
        if outcome is ClearOutcome.DENIED:
            raise HTTPException(status_code=403, detail="Permission denied")
        return {"outcome": outcome.value}

    return router
