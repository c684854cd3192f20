from fastapi import APIRouter, HTTPException, Query, status

from psychometric.models.report import ScoredReportResponse
from psychometric.models.session import (
    CreateSessionRequest,
    CreateSessionResponse,
    Question,
    SessionResponse,
    SessionStatusResponse,
    SubmitAnswersRequest,
    SubmitAnswersResponse,
)
from psychometric.services.orchestrator import (
    SubmissionConflictError,
    SubmissionError,
    session_orchestrator,
)

router = APIRouter(prefix="/psychometric/sessions", tags=["Psychometric Sessions"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")


@router.post("", response_model=CreateSessionResponse, status_code=status.HTTP_201_CREATED)
def create_session(payload: CreateSessionRequest) -> CreateSessionResponse:
    session = session_orchestrator.create_session(payload.userProfile)
    return CreateSessionResponse(sessionId=session["sessionId"], status=session["status"])


@router.get("/{sessionId}", response_model=SessionResponse)
def get_session(sessionId: str) -> SessionResponse:
    session = session_orchestrator.get_session(sessionId)
    if session is None:
        raise _not_found()
    return SessionResponse(
        sessionId=session["sessionId"],
        status=session["status"],
        userProfile=session["userProfile"],
        progress=session.get("sectionReady") or {},
        questions=[Question(**question) for question in session.get("questions") or []],
        startedAt=session["startedAt"],
        completedAt=session.get("completedAt"),
    )


@router.get("/{sessionId}/status", response_model=SessionStatusResponse)
def get_session_status(sessionId: str) -> SessionStatusResponse:
    status_payload = session_orchestrator.get_status(sessionId)
    if status_payload is None:
        raise _not_found()
    return SessionStatusResponse(**status_payload)


@router.get("/{sessionId}/questions", response_model=list[Question])
def get_session_questions(
    sessionId: str,
    section: int | None = Query(default=None, ge=1, le=3),
) -> list[Question]:
    questions = session_orchestrator.get_questions(sessionId, section)
    if questions is None:
        raise _not_found()
    return [Question(**question) for question in questions]


@router.post("/{sessionId}/submit", response_model=SubmitAnswersResponse)
def submit_session(sessionId: str, payload: SubmitAnswersRequest) -> SubmitAnswersResponse:
    try:
        result = session_orchestrator.submit_answers(sessionId, payload)
    except SubmissionConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except SubmissionError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if result is None:
        raise _not_found()
    return SubmitAnswersResponse(**result)


@router.get("/{sessionId}/report", response_model=ScoredReportResponse)
def get_session_report(sessionId: str) -> ScoredReportResponse:
    report = session_orchestrator.get_report(sessionId)
    if report is None:
        raise _not_found()
    return ScoredReportResponse(**report)
