"""FastAPI routes for reading interview outcomes."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException

from api.schemas import QuestionAnswerOut, ResultResponse
from storage.results import load_result


router = APIRouter(prefix="/api/interview-sessions")


@router.get("/{session_id}/result", response_model=ResultResponse)
def get_result(session_id: int) -> ResultResponse:
    try:
        result = load_result(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Result not found") from None
    return ResultResponse(
        session_id=result.session_id,
        score=result.score,
        evaluation=result.evaluation,
        created_at=result.created_at,
        questions=[QuestionAnswerOut(**item.model_dump()) for item in result.questions],
    )
