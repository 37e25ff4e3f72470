"""
grading_service.py — LLM solution grading
Builds the comparison prompt for a user's solution against the reference
solution, calls the provider once and parses the JSON verdict. The score
itself comes entirely from the model.
"""

import json
import logging
import time

from pydantic import BaseModel, Field, ValidationError

from errors import GradingFailure

logger = logging.getLogger(__name__)

# Result policy
COMPLETE_THRESHOLD = 95
GOOD_THRESHOLD = 80
PARTIAL_THRESHOLD = 50

SYSTEM_PROMPT = "You are an expert code reviewer who provides accurate and helpful feedback on solutions."


class GradingResult(BaseModel):
    matchPercentage: float = Field(..., ge=0, le=100, strict=True)
    feedback: str


def classify(match_percentage: float) -> dict:
    """Map a score to its advisory tier. Only "complete" changes progress."""
    pct = round(match_percentage)
    if match_percentage >= COMPLETE_THRESHOLD:
        return {
            "tier": "complete",
            "message": f"Congratulations! Your solution matches the reference solution by {pct}%. "
                       "This problem is now marked as completed!",
        }
    if match_percentage >= GOOD_THRESHOLD:
        return {
            "tier": "good",
            "message": f"Congratulations! Your solution matches the reference solution by {pct}%. "
                       "See what you can improve on!",
        }
    if match_percentage >= PARTIAL_THRESHOLD:
        return {
            "tier": "partial",
            "message": f"Your solution matches the reference solution by {pct}%. See what you missed!",
        }
    return {
        "tier": "low",
        "message": f"Your solution only matches the reference solution by {pct}%. Practice more to improve!",
    }


def build_prompt(user_solution: str, reference_solution: str, context: dict) -> str:
    functional = "\n".join(f"- {req}" for req in context.get("functional_requirements", []))
    non_functional = "\n".join(f"- {req}" for req in context.get("non_functional_requirements", []))
    return (
        "You are an expert code reviewer. Compare the user's solution with the reference solution "
        "for the following problem:\n\n"
        f"Problem Title: {context.get('title', '')}\n"
        f"Problem Description: {context.get('description', '')}\n\n"
        f"Functional Requirements:\n{functional}\n\n"
        f"Non-Functional Requirements:\n{non_functional}\n\n"
        f"User's Solution:\n{user_solution}\n\n"
        f"Reference Solution:\n{reference_solution}\n\n"
        "Please analyze the user's solution compared to the reference solution and provide:\n"
        "1. A match percentage (0-100) based on how well the user's solution addresses the problem "
        "requirements and matches the approach of the reference solution. Don't require exact word "
        "matching, focus on the approach and key concepts.\n"
        "2. Detailed feedback explaining the match percentage, highlighting strengths and areas for "
        "improvement.\n\n"
        "Format your response as JSON:\n"
        '{\n  "matchPercentage": number,\n  "feedback": "detailed feedback here"\n}\n'
    )


def parse_result(text: str | None) -> GradingResult:
    if not text:
        raise GradingFailure("No content in grading response")
    try:
        return GradingResult.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Malformed grading payload: {e}")
        raise GradingFailure("Malformed grading response")


class GradingService:
    def __init__(self, provider, model: str | None = None):
        self.provider = provider
        self.model = model

    async def evaluate(self, user_solution: str, reference_solution: str, context: dict) -> GradingResult:
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_prompt(user_solution, reference_solution, context)},
        ]
        t0 = time.time()
        result = await self.provider.chat(messages, self.model)
        elapsed = round(time.time() - t0, 3)

        if result.get("status") != "success":
            logger.error(f"Grading call via {result.get('provider')} failed after {elapsed}s: {result.get('error')}")
            raise GradingFailure()

        graded = parse_result(result.get("text"))
        logger.info(f"Graded solution via {result.get('provider')} in {elapsed}s: {graded.matchPercentage}%")
        return graded
