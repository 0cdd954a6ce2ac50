"""
Generate Route

Starts proposal generation runs.
"""

from datetime import datetime

from fastapi import APIRouter, BackgroundTasks, Depends

from proposal_engine.llm.structured import StructuredCaller

from backend.api.deps import get_structured_caller
from backend.api.schemas import GenerateRequest, GenerateResponse
from backend.services import pipeline_runner, storage

router = APIRouter()


@router.post("/generate", response_model=GenerateResponse, status_code=202)
async def generate_proposal(
    request: GenerateRequest,
    background_tasks: BackgroundTasks,
    caller: StructuredCaller = Depends(get_structured_caller),
) -> GenerateResponse:
    """
    Start generating a proposal.

    The run executes in the background. Use the returned run_id to poll
    progress and fetch the document once it completes.
    """
    run_id = await storage.create_run(
        contract_id=request.contract.reference_number,
        company_name=request.entity.business_name,
        inputs=request.model_dump(mode="json", by_alias=True),
    )
    metadata = await storage.get_run_metadata(run_id)

    background_tasks.add_task(
        pipeline_runner.run_pipeline,
        run_id,
        request.contract,
        request.entity,
        caller,
        request.documents,
    )

    return GenerateResponse(
        run_id=run_id,
        status="queued",
        started_at=datetime.fromisoformat(metadata["started_at"]),
    )
