"""
FastAPI application exposing ResearchLens Regulatory over HTTP.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from anyio import to_thread
from fastapi import Depends, FastAPI, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware

from researchlens.alerts import ALERT_CATEGORIES, SEVERITY_LEVELS, AlertManager
from researchlens.compliance import PATHWAYS, ComplianceChecklist, recommend_pathway
from researchlens.evidence import SAMPLE_EVIDENCE, find_study
from researchlens.export import compliance_csv, compliance_json, export_filename, studies_csv
from researchlens.models import to_plain

from .deps import Settings, get_alert_manager, get_checklist, get_settings
from .schemas import (
    AlertPayload,
    AlertSummary,
    AnalyzeRequest,
    AnalyzeResponse,
    ComplianceItemPayload,
    ExportStudiesRequest,
    IntelligenceRequest,
    PathwayRequest,
    PathwayResponse,
    StudiesRequest,
    StudiesResponse,
    StudyEvidenceRequest,
    ValidationRequest,
)
from .services import (
    load_feed,
    regenerate_studies,
    run_analysis,
    run_intelligence,
    study_from_dict,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="ResearchLens Regulatory API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Allow local frontend development by default.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

EXPORT_MEDIA_TYPES = {
    "csv": "text/csv",
    "json": "application/json",
    "audit": "text/plain",
}


async def _run(label: str, func: Callable, *args):
    try:
        return await to_thread.run_sync(func, *args)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Failed to run %s", label)
        raise HTTPException(status_code=500, detail="Internal server error") from exc


def _attachment(content: str, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.get("/health")
async def health_check(settings: Settings = Depends(get_settings)) -> dict:
    return {
        "status": "ok",
        "seeded": settings.seed is not None,
        "keywords_file": settings.keywords_file,
        "offline_feed": settings.offline_feed,
        "fda_base_url": settings.fda_base_url,
        "clinicaltrials_url": settings.clinicaltrials_url,
    }


# ----- literature analysis -----
@app.post("/analyze", response_model=AnalyzeResponse)
async def analyze(request: AnalyzeRequest, settings: Settings = Depends(get_settings)) -> AnalyzeResponse:
    result = await _run("analysis", run_analysis, request.query, request.filters.model_dump(), settings)
    return AnalyzeResponse(**result)


@app.post("/analyze/studies", response_model=StudiesResponse)
async def analyze_studies(request: StudiesRequest, settings: Settings = Depends(get_settings)) -> StudiesResponse:
    result = await _run(
        "study regeneration",
        regenerate_studies,
        request.therapeutic.value,
        request.product_type.value,
        request.concepts,
        request.filters.model_dump(),
        settings,
    )
    return StudiesResponse(**result)


@app.post("/intelligence")
async def intelligence(
    request: IntelligenceRequest,
    settings: Settings = Depends(get_settings),
    alerts: AlertManager = Depends(get_alert_manager),
) -> dict:
    report = await _run("strategic intelligence", run_intelligence, request.query, request.filters.model_dump(), settings)
    alerts.record_strategic_report()
    return report


# ----- regulatory feed -----
@app.get("/feed")
async def feed(settings: Settings = Depends(get_settings)) -> dict:
    return await _run("regulatory feed", load_feed, settings)


# ----- alerts -----
@app.get("/alerts", response_model=List[AlertPayload])
async def list_alerts(
    category: str = Query("all"),
    severity: str = Query("all"),
    alerts: AlertManager = Depends(get_alert_manager),
) -> list:
    if category not in ALERT_CATEGORIES:
        raise HTTPException(status_code=400, detail=f"Unknown alert category '{category}'.")
    if severity not in SEVERITY_LEVELS:
        raise HTTPException(status_code=400, detail=f"Unknown alert severity '{severity}'.")
    return to_plain(alerts.filter_alerts(category, severity))


@app.get("/alerts/summary", response_model=AlertSummary)
async def alert_summary(alerts: AlertManager = Depends(get_alert_manager)) -> dict:
    return alerts.summary()


@app.post("/alerts/{alert_id}/acknowledge", response_model=AlertPayload)
async def acknowledge_alert(alert_id: int, alerts: AlertManager = Depends(get_alert_manager)) -> dict:
    if not alerts.acknowledge(alert_id):
        raise HTTPException(status_code=404, detail=f"Alert {alert_id} not found.")
    return to_plain(alerts.get(alert_id))


@app.post("/validation", response_model=AlertPayload)
async def run_validation(request: ValidationRequest, alerts: AlertManager = Depends(get_alert_manager)) -> dict:
    studies = [study_from_dict(s.model_dump()) for s in request.studies]
    return to_plain(alerts.run_validation(studies))


# ----- compliance -----
@app.get("/compliance", response_model=List[ComplianceItemPayload])
async def compliance(checklist: ComplianceChecklist = Depends(get_checklist)) -> list:
    return to_plain(checklist.items())


@app.get("/compliance/export")
async def compliance_export(
    fmt: str = Query("csv", alias="format", description="csv | json | audit"),
    checklist: ComplianceChecklist = Depends(get_checklist),
) -> Response:
    if fmt == "csv":
        content, prefix, ext = compliance_csv(checklist.items()), "eu-mdr-compliance", "csv"
    elif fmt == "json":
        content, prefix, ext = compliance_json(checklist.items()), "eu-mdr-compliance", "json"
    elif fmt == "audit":
        content, prefix, ext = checklist.audit_trail(), "eu-mdr-audit-trail", "txt"
    else:
        raise HTTPException(status_code=400, detail=f"Unknown export format '{fmt}'.")
    return _attachment(content, EXPORT_MEDIA_TYPES[fmt], export_filename(prefix, ext))


@app.post("/compliance/{section}/update", response_model=ComplianceItemPayload)
async def update_compliance(section: str, checklist: ComplianceChecklist = Depends(get_checklist)) -> dict:
    item = checklist.mark_in_progress(section)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Compliance section '{section}' not found.")
    return to_plain(item)


# ----- pathway wizard -----
@app.post("/pathway", response_model=PathwayResponse)
async def pathway(request: PathwayRequest) -> PathwayResponse:
    recommendation = recommend_pathway(request.product_type, request.risk_level, request.target_market)
    if recommendation is None:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown product type '{request.product_type}'. Choose one of: {', '.join(PATHWAYS)}.",
        )
    return PathwayResponse(**to_plain(recommendation), report=recommendation.report())


# ----- exports -----
@app.post("/export/studies")
async def export_studies(request: ExportStudiesRequest) -> Response:
    studies = [study_from_dict(s.model_dump()) for s in request.studies]
    return _attachment(studies_csv(studies), "text/csv", export_filename("fda-evidence-table", "csv"))


@app.post("/export/studies/{study_id}")
async def export_study(study_id: str, request: Optional[StudyEvidenceRequest] = None) -> Response:
    current = [study_from_dict(s.model_dump()) for s in request.studies] if request else []
    study = find_study(study_id, SAMPLE_EVIDENCE, current)
    if study is None:
        raise HTTPException(status_code=404, detail=f"Study '{study_id}' not found")
    return _attachment(studies_csv([study]), "text/csv", f"study-evidence-{study.id}.csv")
