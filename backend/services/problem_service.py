"""
problem_service.py — Problem catalog
CRUD for system-design problems plus the gapless display_id numbering:
create appends at count + 1, delete shifts every later problem down by one.
"""

import json
import logging
import threading

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from errors import Conflict, NotFound
from models.problem import Problem
from models.user_progress import UserProgress

logger = logging.getLogger(__name__)

# Serializes numbering changes inside this process; the unique index on
# display_id catches collisions across processes.
_numbering_lock = threading.Lock()

_JSON_FIELDS = ("functional_requirements", "non_functional_requirements", "hints")
_CONTENT_FIELDS = (
    "title", "difficulty", "category", "description", "reference_solution",
) + _JSON_FIELDS


def problem_to_dict(p: Problem) -> dict:
    return {
        "id": p.id,
        "display_id": p.display_id,
        "title": p.title,
        "difficulty": p.difficulty,
        "category": p.category,
        "description": p.description,
        "functional_requirements": json.loads(p.functional_requirements or "[]"),
        "non_functional_requirements": json.loads(p.non_functional_requirements or "[]"),
        "hints": json.loads(p.hints or "[]"),
        "reference_solution": p.reference_solution,
    }


def problem_summary(p: Problem) -> dict:
    return {
        "id": p.id,
        "display_id": p.display_id,
        "title": p.title,
        "difficulty": p.difficulty,
        "description": p.description,
        "category": p.category,
    }


def _apply(problem: Problem, data: dict):
    for key in _CONTENT_FIELDS:
        if key not in data or data[key] is None:
            continue
        value = data[key]
        if key in _JSON_FIELDS:
            value = json.dumps(value)
        setattr(problem, key, value)


class ProblemService:
    @staticmethod
    def get(db: Session, problem_id: str) -> Problem:
        problem = db.query(Problem).filter_by(id=problem_id).first()
        if not problem:
            raise NotFound("Problem not found")
        return problem

    @staticmethod
    def list_all(db: Session, difficulty: str | None = None, category: str | None = None) -> list[Problem]:
        query = db.query(Problem)
        if difficulty:
            query = query.filter(Problem.difficulty == difficulty)
        if category:
            query = query.filter(Problem.category == category)
        return query.order_by(Problem.display_id).all()

    @staticmethod
    def list_for_user(db: Session, user_id: str | None, difficulty: str | None = None,
                      category: str | None = None) -> list[dict]:
        """Problem summaries with attempted/completed flags for the given user."""
        problems = ProblemService.list_all(db, difficulty, category)
        statuses = {}
        if user_id:
            rows = db.query(UserProgress.problem_id, UserProgress.status).filter_by(user_id=user_id).all()
            statuses = {problem_id: status for problem_id, status in rows}

        items = []
        for p in problems:
            status = statuses.get(p.id, "not_started")
            items.append({
                **problem_summary(p),
                "attempted": status != "not_started",
                "completed": status == "completed",
            })
        return items

    @staticmethod
    def create(db: Session, data: dict) -> Problem:
        """Persist a new problem at display_id = count + 1."""
        with _numbering_lock:
            display_id = db.query(Problem).count() + 1
            problem = Problem(display_id=display_id)
            _apply(problem, data)
            db.add(problem)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise Conflict(f"display_id {display_id} was taken by a concurrent creation")
            db.refresh(problem)

        logger.info(f"Created problem {problem.id} with display_id {display_id}")
        return problem

    @staticmethod
    def update(db: Session, problem_id: str, data: dict) -> Problem:
        problem = ProblemService.get(db, problem_id)
        _apply(problem, data)
        db.commit()
        db.refresh(problem)
        return problem

    @staticmethod
    def delete(db: Session, problem_id: str) -> int:
        """Delete a problem and close the gap it leaves in the numbering.

        The delete, the progress cleanup and the renumbering share one
        transaction. Returns the number of problems that were renumbered.
        """
        with _numbering_lock:
            problem = ProblemService.get(db, problem_id)
            removed_display_id = problem.display_id
            try:
                db.query(UserProgress).filter_by(problem_id=problem.id).delete(synchronize_session=False)
                db.delete(problem)
                db.flush()

                # Ascending order, one row per flush: each row moves into the
                # slot freed by the previous one, so the unique index holds.
                later = (
                    db.query(Problem)
                    .filter(Problem.display_id > removed_display_id)
                    .order_by(Problem.display_id)
                    .all()
                )
                for p in later:
                    p.display_id -= 1
                    db.flush()
                db.commit()
            except IntegrityError:
                db.rollback()
                raise Conflict("Problem numbering changed concurrently; nothing was deleted")

        logger.info(f"Deleted problem {problem_id} (display_id {removed_display_id}); renumbered {len(later)}")
        return len(later)
