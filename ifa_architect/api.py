"""
FastAPI backend for the IFA proposal builder.
Exposes recommendation, proposal generation, editing, import and export to the
wizard frontend.
"""
import dataclasses
import json
import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from pydantic import ValidationError

from ifa_architect import __version__, config
from ifa_architect.capabilities import ProposalCapabilities, default_capabilities
from ifa_architect.catalog import search_catalog
from ifa_architect.deck_exporter import export_deck
from ifa_architect.editing import rewrite_slide
from ifa_architect.importer import import_document
from ifa_architect.models import (
    Asset,
    CamelModel,
    ClientProfile,
    PresentationData,
    ProposalSettings,
    SlideContent,
)
from ifa_architect.normalizer import normalize_slide
from ifa_architect.orchestration import generate_investment_proposal
from ifa_architect.recommendations import fetch_recommendations
from ifa_architect.utils.error_handler import RecommendationError

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="IFA Proposal Architect API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_capabilities() -> ProposalCapabilities:
    """LLM-backed capabilities; overridden in tests via app.dependency_overrides."""
    return default_capabilities()


class RecommendationRequest(CamelModel):
    profile: ClientProfile = ClientProfile()
    settings: ProposalSettings = ProposalSettings()


class ProposalRequestBody(CamelModel):
    profile: ClientProfile = ClientProfile()
    proposed_assets: List[Asset] = []
    settings: ProposalSettings = ProposalSettings()
    session_id: Optional[str] = None


class RewriteRequest(CamelModel):
    presentation: PresentationData
    slide_index: int
    instruction: str


class SlideViewRequest(CamelModel):
    slide: SlideContent


@app.post("/api/recommendations")
async def recommendations(req: RecommendationRequest, caps: ProposalCapabilities = Depends(get_capabilities)):
    try:
        assets = await fetch_recommendations(req.profile, req.settings, caps.recommend)
    except RecommendationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"recommendations": [a.to_payload() for a in assets]}


@app.post("/api/proposals")
async def proposals(req: ProposalRequestBody, caps: ProposalCapabilities = Depends(get_capabilities)):
    """Run the research -> generate -> validate graph. Always returns a deck."""
    presentation = await generate_investment_proposal(
        req.profile,
        req.proposed_assets,
        req.settings,
        caps.research,
        caps.generate,
        session_id=req.session_id,
    )
    return presentation.to_payload()


@app.post("/api/proposals/rewrite")
async def rewrite(req: RewriteRequest, caps: ProposalCapabilities = Depends(get_capabilities)):
    updated = await rewrite_slide(req.presentation, req.slide_index, req.instruction, caps.rewrite)
    return updated.to_payload()


@app.post("/api/import")
async def import_file(
    file: UploadFile = File(...),
    profile: str = Form("{}"),
    caps: ProposalCapabilities = Depends(get_capabilities),
):
    try:
        current = ClientProfile.model_validate(json.loads(profile or "{}"))
    except (ValueError, ValidationError) as e:
        raise HTTPException(status_code=422, detail=f"Invalid profile: {e}")

    content = await file.read()
    outcome = await import_document(
        current,
        content,
        file.content_type or "application/octet-stream",
        file.filename or "document",
        caps.parse_document,
    )
    return {
        "profile": outcome.profile.to_payload(),
        "importedCount": outcome.imported_count,
        "notice": outcome.notice,
    }


@app.get("/api/catalog")
def catalog(q: str = ""):
    return {"results": [dataclasses.asdict(s) for s in search_catalog(q)]}


@app.post("/api/slides/view")
def slide_view(req: SlideViewRequest):
    view = normalize_slide(req.slide)
    return {"view": type(view).__name__, **dataclasses.asdict(view)}


@app.post("/api/export")
def export(presentation: PresentationData):
    path = export_deck(presentation)
    return FileResponse(
        path,
        media_type="application/vnd.openxmlformats-officedocument.presentationml.presentation",
        filename=path.name,
    )


@app.get("/api/health")
def health():
    return {
        "status": "ok",
        "engine": "LangGraph",
        "llm": config.LLM_PROVIDER,
        "version": __version__,
    }

