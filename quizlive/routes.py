import logging

from fastapi import APIRouter, Request

from quizlive.catalog import QuizCatalog
from quizlive.errors import InvalidQuizData, RegistryFull
from quizlive.registry import SessionRegistry
from quizlive.session_machine import SessionStateMachine

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/quizzes", status_code=201)
async def create_quiz(request: Request):
    """Create a quiz and open a session for it in one step"""
    try:
        payload = await request.json()
    except ValueError:
        raise InvalidQuizData() from None
    if not isinstance(payload, dict):
        raise InvalidQuizData()

    catalog: QuizCatalog = request.app.state.catalog
    registry: SessionRegistry = request.app.state.registry

    # Refuse before storing anything, so a full registry leaves no orphan quiz
    if registry.is_full:
        raise RegistryFull()

    quiz_id = catalog.create(payload.get("title"), payload.get("questions"))
    pin_code = registry.create_session(quiz_id)

    logger.info("Created quiz %r with PIN: %s", payload.get("title"), pin_code)
    return {"quizId": quiz_id, "pinCode": pin_code}


@router.get("/quizzes/{quiz_id}")
async def get_quiz(quiz_id: str, request: Request):
    """Public view of a quiz, without the correct options"""
    catalog: QuizCatalog = request.app.state.catalog
    return catalog.get(quiz_id).public()


@router.get("/sessions/{pin_code}")
async def get_session(pin_code: str, request: Request):
    """Current state and roster of a session"""
    machine: SessionStateMachine = request.app.state.machine
    return machine.summary(pin_code)
