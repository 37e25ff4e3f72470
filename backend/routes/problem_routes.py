from typing import List, Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth import get_optional_user, require_admin
from database import get_db, parse_id
from services.problem_service import ProblemService, problem_to_dict

router = APIRouter(prefix="/api/problems", tags=["Problems"])

Difficulty = Literal["Easy", "Medium", "Hard"]


class Hint(BaseModel):
    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)


class ProblemCreate(BaseModel):
    title: str = Field(..., min_length=1)
    difficulty: Difficulty
    category: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    functional_requirements: List[str] = Field(..., min_length=1)
    non_functional_requirements: List[str] = Field(..., min_length=1)
    hints: List[Hint] = Field(..., min_length=1)
    reference_solution: str = Field(..., min_length=1)


class ProblemUpdate(BaseModel):
    title: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    category: Optional[str] = None
    description: Optional[str] = None
    functional_requirements: Optional[List[str]] = None
    non_functional_requirements: Optional[List[str]] = None
    hints: Optional[List[Hint]] = None
    reference_solution: Optional[str] = None


@router.get("")
async def list_problems(difficulty: Optional[Difficulty] = None, category: Optional[str] = None,
                        current: dict | None = Depends(get_optional_user),
                        db: Session = Depends(get_db)):
    """Problem summaries; signed-in users also get attempted/completed flags."""
    user_id = current["user_id"] if current else None
    return {"status": "success", "data": ProblemService.list_for_user(db, user_id, difficulty, category)}


@router.get("/{problem_id}")
async def get_problem(problem_id: str, db: Session = Depends(get_db)):
    problem = ProblemService.get(db, parse_id(problem_id, "problem ID"))
    return {"status": "success", "data": problem_to_dict(problem)}


@router.post("", status_code=201)
async def create_problem(body: ProblemCreate, admin=Depends(require_admin), db: Session = Depends(get_db)):
    problem = ProblemService.create(db, body.model_dump())
    return {"status": "success", "data": problem_to_dict(problem)}


@router.put("/{problem_id}")
async def update_problem(problem_id: str, body: ProblemUpdate, admin=Depends(require_admin),
                         db: Session = Depends(get_db)):
    problem = ProblemService.update(db, parse_id(problem_id, "problem ID"), body.model_dump(exclude_unset=True))
    return {"status": "success", "data": problem_to_dict(problem)}


@router.delete("/{problem_id}")
async def delete_problem(problem_id: str, admin=Depends(require_admin), db: Session = Depends(get_db)):
    renumbered = ProblemService.delete(db, parse_id(problem_id, "problem ID"))
    return {"status": "success", "data": {"renumbered": renumbered}}
