"""
PDF Jobs API - create document jobs and poll their status.
"""
from pathlib import Path

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import FileResponse

from ..services import JobStatus, PdfJobNotFoundError, QuoteNotFoundError
from .schemas import PdfJobCreate
from .state import AppState, get_state

router = APIRouter(prefix="/api/pdf-jobs", tags=["pdf-jobs"])


@router.get("")
async def list_jobs(state: AppState = Depends(get_state)):
    """List all document jobs."""
    return jsonable_encoder({"jobs": [j.to_dict() for j in state.pdf_jobs.list_jobs()]})


@router.post("", status_code=201)
async def create_job(job_data: PdfJobCreate, background_tasks: BackgroundTasks,
                     state: AppState = Depends(get_state)):
    """Create a job and fire it once in the background."""
    try:
        job = state.pdf_jobs.create_job(job_data.quote_id)
    except QuoteNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    payload = jsonable_encoder(job.to_dict())
    background_tasks.add_task(state.pdf_jobs.process_job, job.job_id)
    return payload


@router.get("/quote/{quote_id}")
async def list_jobs_for_quote(quote_id: str, state: AppState = Depends(get_state)):
    """Document jobs for a specific quote."""
    jobs = state.pdf_jobs.list_jobs_for_quote(quote_id)
    return jsonable_encoder({"jobs": [j.to_dict() for j in jobs]})


@router.get("/{job_id}")
async def get_job(job_id: str, state: AppState = Depends(get_state)):
    """Get a single job by ID."""
    try:
        job = state.pdf_jobs.get_job(job_id)
    except PdfJobNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return jsonable_encoder(job.to_dict())


@router.get("/{job_id}/download")
async def download_document(job_id: str, state: AppState = Depends(get_state)):
    """Download the rendered document of a completed job."""
    try:
        job = state.pdf_jobs.get_job(job_id)
    except PdfJobNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if job.status != JobStatus.COMPLETED or not job.file_path:
        raise HTTPException(status_code=409, detail=f"Job '{job_id}' is {job.status.value}")

    path = Path(job.file_path)
    return FileResponse(path, media_type="text/html", filename=path.name)
