"""
progress_service.py — Progress ledger
One record per (user, problem): status and the draft solution. Records are
created lazily on the first save. Status transitions are driven by the client.
"""

from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from errors import NotFound, ValidationFailed
from models.problem import Problem
from models.user_progress import UserProgress

STATUSES = ("not_started", "in_progress", "completed")

DEFAULT_PROGRESS = {"status": "not_started", "solution": "", "last_updated": None}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def progress_to_dict(p: UserProgress) -> dict:
    return {
        "id": p.id,
        "problem_id": p.problem_id,
        "status": p.status,
        "solution": p.solution,
        "last_updated": p.last_updated,
    }


class ProgressService:
    @staticmethod
    def _find(db: Session, user_id: str, problem_id: str) -> UserProgress | None:
        return db.query(UserProgress).filter_by(user_id=user_id, problem_id=problem_id).first()

    @staticmethod
    def get(db: Session, user_id: str, problem_id: str) -> dict:
        """Existing record, or the not_started default. Never creates a row."""
        progress = ProgressService._find(db, user_id, problem_id)
        if not progress:
            return dict(DEFAULT_PROGRESS)
        return progress_to_dict(progress)

    @staticmethod
    def upsert(db: Session, user_id: str, problem_id: str,
               solution: str | None = None, status: str | None = None) -> dict:
        """Create or update the (user, problem) record; omitted fields stay unchanged."""
        if status is not None and status not in STATUSES:
            raise ValidationFailed(f"Unknown progress status: {status}")
        if not db.query(Problem.id).filter_by(id=problem_id).first():
            raise NotFound("Problem not found")

        progress = ProgressService._find(db, user_id, problem_id)
        if progress is None:
            progress = UserProgress(
                user_id=user_id,
                problem_id=problem_id,
                solution=solution if solution is not None else "",
                status=status or "in_progress",
                last_updated=_utcnow(),
            )
            db.add(progress)
            try:
                db.commit()
            except IntegrityError:
                # Lost the insert race on (user_id, problem_id): write over the winner.
                db.rollback()
                progress = ProgressService._find(db, user_id, problem_id)
                if progress is None:
                    raise NotFound("Progress record was removed concurrently")
                ProgressService._apply(progress, solution, status)
                db.commit()
        else:
            ProgressService._apply(progress, solution, status)
            db.commit()

        db.refresh(progress)
        return progress_to_dict(progress)

    @staticmethod
    def _apply(progress: UserProgress, solution: str | None, status: str | None):
        if solution is not None:
            progress.solution = solution
        if status is not None:
            progress.status = status
        progress.last_updated = _utcnow()

    @staticmethod
    def mark_completed(db: Session, user_id: str, problem_id: str, solution: str | None = None) -> dict:
        return ProgressService.upsert(db, user_id, problem_id, solution=solution, status="completed")

    @staticmethod
    def reset(db: Session, user_id: str, problem_id: str) -> dict:
        return ProgressService.upsert(db, user_id, problem_id, solution="", status="not_started")

    @staticmethod
    def list_for_user(db: Session, user_id: str) -> list[dict]:
        """All progress of a user joined with problem summaries."""
        rows = (
            db.query(UserProgress, Problem)
            .join(Problem, UserProgress.problem_id == Problem.id)
            .filter(UserProgress.user_id == user_id)
            .order_by(Problem.display_id)
            .all()
        )
        return [
            {
                "id": problem.id,
                "display_id": problem.display_id,
                "title": problem.title,
                "difficulty": problem.difficulty,
                "category": problem.category,
                "status": progress.status,
                "last_updated": progress.last_updated,
            }
            for progress, problem in rows
        ]
