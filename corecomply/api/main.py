"""
HTTP surface over the CoreComply core - setup progress, key personnel, RASCI
adoption and evidence review.
"""

from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from .schemas import (
    DirectoryResponse,
    DiscoveryRequest,
    DiscoveryResponse,
    EvidenceListResponse,
    HandOverRequest,
    HandOverResponse,
    HealthResponse,
    LinkRequest,
    RasciAdoptRequest,
    RasciAdoptResponse,
    RasciGroupResponse,
    RoleAssignmentRequest,
    SetupResponse,
    StepStatus,
)
from ..context import AppContext
from ..core.config import VERSION, debug_enabled
from ..core.errors import UnknownStepError
from ..core.schema import EvidenceArtifact, EvidenceSource, Footprint, Period, RoleKey
from ..evidence.adapters import get_sample_obligations
from ..util.logging import logger


def get_context(request: Request) -> AppContext:
    """Application context, built from configuration on first use."""
    if request.app.state.context is None:
        request.app.state.context = AppContext.from_config()
    return request.app.state.context


def _role_key(role_key: str) -> RoleKey:
    try:
        return RoleKey(role_key)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown role key: {role_key}")


def _step_status(context: AppContext, status: dict) -> StepStatus:
    return StepStatus(visited=status["key"] in context.setup.visited, **status)


def _directory_response(context: AppContext) -> DirectoryResponse:
    return DirectoryResponse(
        key_personnel=context.people.role_directory(),
        configured=context.people.has_key_personnel(),
    )


def _artifact_or_404(context: AppContext, artifact_id: str) -> EvidenceArtifact:
    artifact = context.evidence.get_artifact(artifact_id)
    if artifact is None:
        raise HTTPException(status_code=404, detail="Evidence artifact not found")
    return artifact


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    app = FastAPI(
        title="CoreComply API",
        version=VERSION,
        description="Compliance setup, RASCI adoption and evidence discovery",
        docs_url="/docs" if debug_enabled() else None,
        redoc_url="/redoc" if debug_enabled() else None
    )
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthResponse)
    def health_check_endpoint(ctx: AppContext = Depends(get_context)):
        """Check system health."""
        if ctx.repository is None:
            return HealthResponse(status="healthy", version=VERSION)

        db_health = ctx.repository.health_check()
        return HealthResponse(
            status="healthy" if db_health else "unhealthy",
            version=VERSION,
            db_health=db_health,
            persisted_stores=ctx.repository.list_states() if db_health else [],
        )

    @app.get("/setup", response_model=SetupResponse)
    def setup_status_endpoint(ctx: AppContext = Depends(get_context)):
        return SetupResponse(
            completion=ctx.calculator.calculate_completion(),
            last_step=ctx.setup.last_step,
            steps=[_step_status(ctx, s) for s in ctx.calculator.step_statuses()],
        )

    @app.get("/setup/steps/{key}", response_model=StepStatus)
    def get_step_endpoint(key: str, ctx: AppContext = Depends(get_context)):
        step = ctx.calculator.get_step(key)
        if step is None:
            raise HTTPException(status_code=404, detail=f"Unknown setup step: {key}")

        for status in ctx.calculator.step_statuses():
            if status["key"] == step.key:
                return _step_status(ctx, status)

    @app.post("/setup/steps/{key}/visit", response_model=SetupResponse)
    def visit_step_endpoint(key: str, ctx: AppContext = Depends(get_context)):
        try:
            completion = ctx.setup.visit_step(key)
        except UnknownStepError as e:
            raise HTTPException(status_code=404, detail=str(e))

        return SetupResponse(
            completion=completion,
            last_step=ctx.setup.last_step,
            steps=[_step_status(ctx, s) for s in ctx.calculator.step_statuses()],
        )

    @app.put("/people/roles/{role_key}", response_model=DirectoryResponse)
    def assign_role_endpoint(role_key: str, request: RoleAssignmentRequest,
                             ctx: AppContext = Depends(get_context)):
        ctx.people.assign_role(_role_key(role_key), request.user_id)
        ctx.setup.recalc_completion()
        return _directory_response(ctx)

    @app.delete("/people/roles/{role_key}", response_model=DirectoryResponse)
    def unassign_role_endpoint(role_key: str, ctx: AppContext = Depends(get_context)):
        ctx.people.unassign_role(_role_key(role_key))
        ctx.setup.recalc_completion()
        return _directory_response(ctx)

    @app.post("/people/handover", response_model=HandOverResponse)
    def hand_over_endpoint(request: HandOverRequest, ctx: AppContext = Depends(get_context)):
        moved = ctx.people.hand_over(request.from_user_id, request.to_user_id)
        ctx.setup.recalc_completion()
        return HandOverResponse(
            moved_roles=moved,
            rasci_readopted=bool(moved) and ctx.rasci.adopted,
        )

    @app.post("/rasci/adopt", response_model=RasciAdoptResponse)
    def adopt_rasci_endpoint(request: RasciAdoptRequest, ctx: AppContext = Depends(get_context)):
        ctx.adopt_rasci(request.directory)
        state = ctx.rasci.state
        return RasciAdoptResponse(
            adopted=state.adopted,
            adopted_at=state.adopted_at,
            assignments=sum(len(a) for a in state.default_assignments.values()),
        )

    @app.get("/rasci/{key}", response_model=RasciGroupResponse)
    def get_rasci_endpoint(key: str, ctx: AppContext = Depends(get_context)):
        return RasciGroupResponse(key=key, **ctx.rasci.rasci_for(key))

    @app.post("/evidence/discovery", response_model=DiscoveryResponse)
    async def run_discovery_endpoint(request: DiscoveryRequest, ctx: AppContext = Depends(get_context)):
        period = Period(start=request.start, end=request.end)
        footprint = Footprint(states=request.states) if request.states is not None else None
        obligations = request.obligations if request.obligations is not None else get_sample_obligations()

        report = await ctx.run_discovery(period, obligations, footprint=footprint)
        if report.failed_adapters:
            logger.warning(f"Discovery finished with failed adapters: {report.failed_adapters}")

        return DiscoveryResponse(
            artifacts_added=report.artifacts_added,
            per_adapter=report.per_adapter,
            failed_adapters=report.failed_adapters,
            completion=ctx.setup.completion,
        )

    @app.get("/evidence", response_model=EvidenceListResponse)
    def list_evidence_endpoint(source: Optional[EvidenceSource] = None, accepted: Optional[bool] = None,
                               ctx: AppContext = Depends(get_context)):
        return EvidenceListResponse(artifacts=ctx.evidence.list_artifacts(source=source, accepted=accepted))

    @app.post("/evidence/{artifact_id}/accept", response_model=EvidenceArtifact)
    def accept_evidence_endpoint(artifact_id: str, ctx: AppContext = Depends(get_context)):
        if not ctx.evidence.accept_artifact(artifact_id):
            raise HTTPException(status_code=404, detail="Evidence artifact not found")
        return _artifact_or_404(ctx, artifact_id)

    @app.post("/evidence/{artifact_id}/reject", response_model=EvidenceArtifact)
    def reject_evidence_endpoint(artifact_id: str, ctx: AppContext = Depends(get_context)):
        if not ctx.evidence.reject_artifact(artifact_id):
            raise HTTPException(status_code=404, detail="Evidence artifact not found")
        return _artifact_or_404(ctx, artifact_id)

    @app.post("/evidence/{artifact_id}/links", response_model=EvidenceArtifact)
    def link_evidence_endpoint(artifact_id: str, request: LinkRequest, ctx: AppContext = Depends(get_context)):
        if not ctx.evidence.link_to_obligation(artifact_id, request.obligation_ref):
            raise HTTPException(status_code=404, detail="Evidence artifact not found")
        return _artifact_or_404(ctx, artifact_id)

    @app.delete("/evidence/{artifact_id}")
    def delete_evidence_endpoint(artifact_id: str, ctx: AppContext = Depends(get_context)):
        if not ctx.evidence.remove_artifact(artifact_id):
            raise HTTPException(status_code=404, detail="Evidence artifact not found")
        ctx.setup.recalc_completion()
        return {"deleted": artifact_id}

    return app


app = create_app()
