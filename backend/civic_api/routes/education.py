"""Education and quiz routes."""

from __future__ import annotations

from typing import Dict, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select

from .. import auth
from ..database import get_session
from ..metrics import QUIZ_ANSWERS
from ..models import Quiz, QuizCategory, User, UserQuizProgress
from ..quiz_utils import category_progress, is_correct_answer, options_in_range

logger = logging.getLogger("app.education")

router = APIRouter(prefix="/api/v1/education")


class CategoryProgress(BaseModel):
    completed: int
    total: int
    correct: int
    ratio: float


class CategoryPublic(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    question_count: int
    progress: Optional[CategoryProgress] = None


class QuizPublic(BaseModel):
    id: str
    question: str
    options: List[str]
    points: int
    answered: Optional[bool] = None


class AnswerRequest(BaseModel):
    answer_index: int


class AnswerResult(BaseModel):
    quiz_id: str
    is_correct: bool
    correct_answer: int
    points: int
    recorded: bool
    already_answered: bool


async def _progress_map(session, user_id: str) -> Dict[str, bool]:
    statement = select(UserQuizProgress.quiz_id, UserQuizProgress.is_correct).where(
        UserQuizProgress.user_id == user_id
    )
    result = await session.exec(statement)
    return {quiz_id: bool(ok) for quiz_id, ok in result.all()}


@router.get("/categories", response_model=List[CategoryPublic])
async def list_categories(
    user: Optional[User] = Depends(auth.get_optional_user),
    session=Depends(get_session),
):
    result = await session.exec(select(QuizCategory).order_by(col(QuizCategory.name).asc()))
    categories = result.all()

    result = await session.exec(select(Quiz.id, Quiz.category_id))
    quiz_ids_by_category: Dict[str, List[str]] = {}
    for quiz_id, category_id in result.all():
        quiz_ids_by_category.setdefault(category_id, []).append(quiz_id)

    progress = await _progress_map(session, user.id) if user else None

    items = []
    for category in categories:
        quiz_ids = quiz_ids_by_category.get(category.id, [])
        items.append(
            CategoryPublic(
                id=category.id,
                name=category.name,
                description=category.description,
                icon=category.icon,
                question_count=len(quiz_ids),
                progress=CategoryProgress(**category_progress(quiz_ids, progress)) if progress is not None else None,
            )
        )
    return items


@router.get("/categories/{category_id}/quizzes", response_model=List[QuizPublic])
async def list_category_quizzes(
    category_id: str,
    user: Optional[User] = Depends(auth.get_optional_user),
    session=Depends(get_session),
):
    """Questions of one category in a stable order, without the answers."""
    category = await session.get(QuizCategory, category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Quiz category not found")

    statement = (
        select(Quiz)
        .where(Quiz.category_id == category_id)
        .order_by(col(Quiz.created_at).asc(), col(Quiz.id).asc())
    )
    result = await session.exec(statement)
    quizzes = result.all()

    progress = await _progress_map(session, user.id) if user else None
    return [
        QuizPublic(
            id=q.id,
            question=q.question,
            options=list(q.options or []),
            points=q.points or 0,
            answered=(q.id in progress) if progress is not None else None,
        )
        for q in quizzes
    ]


@router.post("/quizzes/{quiz_id}/answer", response_model=AnswerResult)
async def answer_quiz(
    quiz_id: str,
    body: AnswerRequest,
    user: Optional[User] = Depends(auth.get_optional_user),
    session=Depends(get_session),
):
    """
    Check an answer and record the outcome once per (user, question).

    Repeat answers still get feedback but never replace the first recorded
    outcome. The unique constraint on (user_id, quiz_id) makes the insert
    safe against concurrent submissions. Anonymous callers get feedback only.
    """
    quiz = await session.get(Quiz, quiz_id)
    if not quiz:
        raise HTTPException(status_code=404, detail="Quiz not found")
    if not options_in_range(quiz.options or [], body.answer_index):
        raise HTTPException(status_code=400, detail="Answer index is out of range")

    # Plain values: a rollback below expires every instance in the session
    result = AnswerResult(
        quiz_id=quiz.id,
        is_correct=is_correct_answer(quiz.correct_answer, body.answer_index),
        correct_answer=quiz.correct_answer,
        points=quiz.points or 0,
        recorded=False,
        already_answered=False,
    )
    QUIZ_ANSWERS.labels(correct=str(result.is_correct).lower()).inc()

    if user:
        user_id = user.id
        statement = select(UserQuizProgress).where(
            UserQuizProgress.user_id == user_id, UserQuizProgress.quiz_id == result.quiz_id
        )
        existing = (await session.exec(statement)).first()
        if existing:
            result.already_answered = True
        else:
            session.add(
                UserQuizProgress(user_id=user_id, quiz_id=result.quiz_id, is_correct=result.is_correct)
            )
            try:
                await session.commit()
                result.recorded = True
            except IntegrityError:
                # Another request recorded this question first
                await session.rollback()
                result.already_answered = True
                logger.info("Duplicate answer for quiz %s by %s ignored", result.quiz_id, user_id)

    return result
