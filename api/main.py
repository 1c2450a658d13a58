"""FastAPI service exposing reconciled economic indicators per presidential term."""

from __future__ import annotations

import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from fastapi import BackgroundTasks, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from jobs.config import build_row_source, load_config
from pipelines.compare import compare_terms, overlay_histories, radar_scores
from pipelines.errors import ReconciliationError, SchemaError
from pipelines.model import Dashboard, MetricKind
from pipelines.service import RowSource, ensure_required_tables, load_dashboard
from pipelines.tables import SheetTables
from storage.exports import export_series

ALLOWED_FORMATS = {"json", "csv", "parquet"}
UNAVAILABLE_DETAIL = "Economic data is temporarily unavailable. Please try again later."
METRIC_DESCRIPTION = "Metric key: " + ", ".join(kind.value for kind in MetricKind)


def _configure_cors(app: FastAPI) -> None:
    raw_origins = os.getenv("API_CORS_ORIGINS", "*")
    origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )


def _parse_metric(raw: str) -> MetricKind:
    try:
        return MetricKind(raw)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Unknown metric '{raw}'.") from exc


def _parse_term_ids(raw: str) -> list[str]:
    term_ids = [item.strip() for item in raw.split(",") if item.strip()]
    if not term_ids:
        raise HTTPException(status_code=400, detail="Select at least one term.")
    return term_ids


def _require_known(dashboard: Dashboard, term_ids: list[str]) -> None:
    unknown = [term_id for term_id in term_ids if dashboard.indicator_for(term_id) is None]
    if unknown:
        raise HTTPException(status_code=404, detail=f"Unknown term ids: {', '.join(unknown)}")


async def _dashboard(request: Request) -> Dashboard:
    source: RowSource = request.app.state.row_source
    tables: SheetTables = request.app.state.tables
    try:
        return await load_dashboard(source, tables)
    except (ReconciliationError, SchemaError) as exc:
        raise HTTPException(status_code=503, detail=UNAVAILABLE_DETAIL) from exc


def create_app(row_source: RowSource | None = None, tables: SheetTables | None = None) -> FastAPI:
    """Build the API; without an explicit source, configuration is read at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        source = row_source
        resolved_tables = tables
        if source is None:
            load_dotenv()
            config = load_config()
            source = build_row_source(config)
            resolved_tables = resolved_tables or config.tables
        resolved_tables = resolved_tables or SheetTables()
        await ensure_required_tables(source, resolved_tables)
        app.state.row_source = source
        app.state.tables = resolved_tables
        yield

    app = FastAPI(title="Presidential Term Indicators API", version="0.1.0", lifespan=lifespan)
    _configure_cors(app)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/dashboard")
    async def get_dashboard(request: Request):
        dashboard = await _dashboard(request)
        items = [entry.model_dump(mode="json") for entry in dashboard.entries()]
        return JSONResponse(content={"count": len(items), "items": items})

    @app.get("/terms")
    async def get_terms(request: Request):
        dashboard = await _dashboard(request)
        items = [term.model_dump(mode="json") for term in dashboard.terms]
        return JSONResponse(content={"count": len(items), "items": items})

    @app.get("/terms/{term_id}")
    async def get_term(term_id: str, request: Request):
        dashboard = await _dashboard(request)
        term = dashboard.term(term_id)
        if term is None:
            raise HTTPException(status_code=404, detail=f"Unknown term id '{term_id}'")
        indicator = dashboard.indicator_for(term_id)
        payload: dict[str, Any] = {
            "term": term.model_dump(mode="json"),
            "indicator": indicator.model_dump(mode="json") if indicator else None,
        }
        return JSONResponse(content=payload)

    @app.get("/terms/{term_id}/history")
    async def get_term_history(
        term_id: str,
        request: Request,
        background_tasks: BackgroundTasks,
        metric: str = Query(..., description=METRIC_DESCRIPTION),
        format: str = Query("json", description="Response format: json, csv, or parquet"),
    ):
        fmt = format.lower()
        if fmt not in ALLOWED_FORMATS:
            raise HTTPException(status_code=400, detail=f"Unsupported format '{format}'.")
        kind = _parse_metric(metric)
        dashboard = await _dashboard(request)
        indicator = dashboard.indicator_for(term_id)
        if indicator is None:
            raise HTTPException(status_code=404, detail=f"Unknown term id '{term_id}'")
        history = indicator.metric(kind).history

        if fmt == "json":
            items = [point.model_dump(mode="json") for point in history]
            return JSONResponse(content={"count": len(items), "items": items})

        suffix = f".{fmt}"
        media_type = "text/csv" if fmt == "csv" else "application/vnd.apache.parquet"
        with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as tmp:
            dest = Path(tmp.name)
        export_series(history, dest, fmt=fmt)

        def _cleanup(path: Path) -> None:
            try:
                path.unlink()
            except FileNotFoundError:
                pass

        background_tasks.add_task(_cleanup, dest)
        filename = f"{term_id}_{kind.value}{suffix}"
        return FileResponse(dest, media_type=media_type, filename=filename, background=background_tasks)

    @app.get("/compare")
    async def get_comparison(
        request: Request,
        metric: str = Query(MetricKind.INFLATION.value, description=METRIC_DESCRIPTION),
        terms: str = Query(..., description="Comma-separated term ids to compare"),
    ):
        kind = _parse_metric(metric)
        term_ids = _parse_term_ids(terms)
        dashboard = await _dashboard(request)
        _require_known(dashboard, term_ids)
        items = [entry.model_dump(mode="json") for entry in compare_terms(dashboard, term_ids, kind)]
        return JSONResponse(content={"metric": kind.value, "count": len(items), "items": items})

    @app.get("/radar")
    async def get_radar(
        request: Request,
        terms: str = Query(..., description="Comma-separated term ids to compare"),
    ):
        term_ids = _parse_term_ids(terms)
        dashboard = await _dashboard(request)
        _require_known(dashboard, term_ids)
        axes = [axis.model_dump(mode="json") for axis in radar_scores(dashboard, term_ids)]
        return JSONResponse(content={"axes": axes})

    @app.get("/overlay")
    async def get_overlay(
        request: Request,
        metric: str = Query(..., description=METRIC_DESCRIPTION),
        terms: str = Query(..., description="Comma-separated term ids to overlay"),
    ):
        kind = _parse_metric(metric)
        term_ids = _parse_term_ids(terms)
        dashboard = await _dashboard(request)
        _require_known(dashboard, term_ids)
        rows = [row.model_dump(mode="json") for row in overlay_histories(dashboard, term_ids, kind)]
        return JSONResponse(content={"metric": kind.value, "count": len(rows), "items": rows})

    return app


app = create_app()
