from __future__ import annotations

import logging
import math
from functools import lru_cache

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import ChartsResponse, MetaListResponse, SelectionRequest, SelectionResponse
from salesboard.charts import SpecCanvas
from salesboard.data import DataCache
from salesboard.errors import LoadError
from salesboard.filters import list_categories
from salesboard.selection import SelectionController
from salesboard.settings import CHART_IDS, load_settings


app = FastAPI(title="Coffee Sales Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_controller() -> SelectionController:
    settings = load_settings()
    cache = DataCache.from_path(settings.data_path, ttl_seconds=settings.cache_seconds)
    return SelectionController(cache, SpecCanvas(), settings=settings)


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _load_error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _selection_response(controller: SelectionController, rendered: bool) -> SelectionResponse:
    return SelectionResponse(category=controller.selection, version=controller.version, rendered=rendered)


@app.get("/meta/categories", response_model=MetaListResponse)
def meta_categories(controller: SelectionController = Depends(get_controller)):
    try:
        return MetaListResponse(values=list_categories(controller.cache.get()))
    except LoadError as exc:
        logger.exception("meta_categories failed")
        return _load_error(exc)


@app.get("/selection", response_model=SelectionResponse)
def get_selection(controller: SelectionController = Depends(get_controller)):
    return _selection_response(controller, rendered=True)


@app.post("/selection", response_model=SelectionResponse)
def set_selection(body: SelectionRequest, controller: SelectionController = Depends(get_controller)):
    rendered = controller.select(body.category)
    return _selection_response(controller, rendered)


@app.post("/selection/toggle", response_model=SelectionResponse)
def toggle_selection(body: SelectionRequest, controller: SelectionController = Depends(get_controller)):
    rendered = controller.toggle(body.category)
    return _selection_response(controller, rendered)


@app.post("/selection/reset", response_model=SelectionResponse)
def reset_selection(controller: SelectionController = Depends(get_controller)):
    rendered = controller.reset()
    return _selection_response(controller, rendered)


@app.post("/resize", status_code=202)
def resize(controller: SelectionController = Depends(get_controller)):
    controller.schedule_refresh()
    return {"scheduled": True}


@app.get("/charts", response_model=ChartsResponse)
def charts(controller: SelectionController = Depends(get_controller)):
    canvas = controller.canvas
    if not isinstance(canvas, SpecCanvas):
        return JSONResponse(status_code=500, content={"error": "Canvas does not keep specs", "type": "TypeError"})
    if not canvas.specs and not controller.refresh():
        return JSONResponse(status_code=500, content={"error": "Sales data could not be loaded", "type": "LoadError"})
    # A timer-driven refresh may clear a chart between lookups.
    specs = {chart_id: canvas.specs.get(chart_id) for chart_id in CHART_IDS}
    specs = {chart_id: spec for chart_id, spec in specs.items() if spec is not None}
    return ChartsResponse(selection=controller.selection, version=controller.version, charts=specs)


@app.get("/aggregations")
def aggregations(controller: SelectionController = Depends(get_controller)):
    try:
        return _json(controller.snapshot())
    except LoadError as exc:
        logger.exception("aggregations failed")
        return _load_error(exc)


@app.get("/export")
def export_selection(controller: SelectionController = Depends(get_controller)):
    try:
        export_df = controller.current_subset()
    except LoadError as exc:
        logger.exception("export failed")
        return _load_error(exc)
    filename = f"sales_{controller.selection or 'all'}.csv".replace(" ", "_")
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
