from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from auth import get_active_user
from database import get_db, parse_id
from services.progress_service import ProgressService

router = APIRouter(prefix="/api/progress", tags=["Progress"])

Status = Literal["not_started", "in_progress", "completed"]


class ProgressSave(BaseModel):
    problem_id: str
    solution: str
    status: Optional[Status] = None


class ProgressUpdate(BaseModel):
    solution: Optional[str] = None
    status: Optional[Status] = None


@router.get("")
async def list_progress(current: dict = Depends(get_active_user), db: Session = Depends(get_db)):
    """All progress of the signed-in user, joined with problem summaries."""
    return {"status": "success", "data": ProgressService.list_for_user(db, current["user_id"])}


@router.post("")
async def save_progress(body: ProgressSave, current: dict = Depends(get_active_user),
                        db: Session = Depends(get_db)):
    """Workspace save: stores the draft and marks the problem in progress."""
    problem_id = parse_id(body.problem_id, "problem ID")
    result = ProgressService.upsert(db, current["user_id"], problem_id,
                                    solution=body.solution, status=body.status or "in_progress")
    return {"status": "success", "message": "Progress saved successfully", "data": result}


@router.get("/{problem_id}")
async def get_progress(problem_id: str, current: dict = Depends(get_active_user),
                       db: Session = Depends(get_db)):
    return {"status": "success", "data": ProgressService.get(db, current["user_id"], parse_id(problem_id, "problem ID"))}


@router.put("/{problem_id}")
async def update_progress(problem_id: str, body: ProgressUpdate, current: dict = Depends(get_active_user),
                          db: Session = Depends(get_db)):
    result = ProgressService.upsert(db, current["user_id"], parse_id(problem_id, "problem ID"),
                                    solution=body.solution, status=body.status)
    return {"status": "success", "message": "Progress updated successfully", "data": result}


@router.post("/{problem_id}/complete")
async def complete_problem(problem_id: str, current: dict = Depends(get_active_user),
                           db: Session = Depends(get_db)):
    result = ProgressService.mark_completed(db, current["user_id"], parse_id(problem_id, "problem ID"))
    return {"status": "success", "data": result}


@router.post("/{problem_id}/reset")
async def reset_problem(problem_id: str, current: dict = Depends(get_active_user),
                        db: Session = Depends(get_db)):
    """Clear the draft and return the problem to not_started."""
    result = ProgressService.reset(db, current["user_id"], parse_id(problem_id, "problem ID"))
    return {"status": "success", "data": result}
