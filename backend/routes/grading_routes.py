from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth import get_active_user
from database import get_db, parse_id
from dependencies import get_grading_service
from services.grading_service import GradingService, classify
from services.problem_service import ProblemService, problem_to_dict
from services.progress_service import ProgressService

router = APIRouter(prefix="/api/grading", tags=["Grading"])


class CheckSolutionRequest(BaseModel):
    problem_id: str
    user_solution: str = Field(..., min_length=1)


@router.post("/check-solution")
async def check_solution(body: CheckSolutionRequest, current: dict = Depends(get_active_user),
                         db: Session = Depends(get_db),
                         grader: GradingService = Depends(get_grading_service)):
    """Grade a solution against the problem's reference solution.

    A score at or above the completion threshold marks the problem completed.
    Lower scores only return advisory feedback.
    """
    problem = problem_to_dict(ProblemService.get(db, parse_id(body.problem_id, "problem ID")))
    result = await grader.evaluate(body.user_solution, problem["reference_solution"], problem)
    verdict = classify(result.matchPercentage)

    progress = None
    if verdict["tier"] == "complete":
        progress = ProgressService.mark_completed(db, current["user_id"], problem["id"],
                                                  solution=body.user_solution)

    return {
        "status": "success",
        "data": {
            "matchPercentage": result.matchPercentage,
            "feedback": result.feedback,
            "tier": verdict["tier"],
            "message": verdict["message"],
            "completed": progress is not None,
            "progress": progress,
        },
    }
