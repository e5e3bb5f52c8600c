import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from hiring_compass.core.errors import ResumeInputError
from hiring_compass.core.history_store import HistoryRepository, get_history_repository
from hiring_compass.core.security import require_api_token
from hiring_compass.schemas.history import HistoryItem, HistorySaveRequest, HistoryStatistics
from hiring_compass.services.resume_input import clean_role_and_company, sanitize_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/history", dependencies=[Depends(require_api_token)])


@router.get("", response_model=list[HistoryItem])
async def list_history(
    q: str | None = Query(default=None, max_length=120),
    repository: HistoryRepository = Depends(get_history_repository),
):
    if q and q.strip():
        return repository.search(q)
    return repository.list()


@router.get("/stats", response_model=HistoryStatistics)
async def history_statistics(repository: HistoryRepository = Depends(get_history_repository)):
    return repository.statistics()


@router.get("/{item_id}", response_model=HistoryItem)
async def get_history_item(item_id: str, repository: HistoryRepository = Depends(get_history_repository)):
    item = repository.get(item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="History item not found.")
    return item


@router.post("", response_model=HistoryItem, status_code=status.HTTP_201_CREATED)
async def save_history_item(
    payload: HistorySaveRequest,
    repository: HistoryRepository = Depends(get_history_repository),
):
    try:
        job_role, company = clean_role_and_company(payload.job_role, payload.company)
    except ResumeInputError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    item = repository.save(
        job_role=job_role,
        company=company,
        resume_text=sanitize_text(payload.resume_text, 1000),
        analysis_result=payload.analysis_result,
    )
    logger.info("history_saved id=%s score=%s", item.id, item.overall_score)
    return item


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_history_item(item_id: str, repository: HistoryRepository = Depends(get_history_repository)):
    if not repository.delete(item_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="History item not found.")


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_history(repository: HistoryRepository = Depends(get_history_repository)):
    repository.clear()
    logger.info("history_cleared")
