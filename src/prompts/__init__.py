"""
AI prompt templates

Contains structured prompts for:
- Question generation
- Answer judgment and follow-up decisions
- Feedback generation
"""

from src.prompts.interviewer import InterviewerPrompts
from src.prompts.evaluator import EvaluatorPrompts
from src.prompts.report import ReportPrompts

__all__ = [
    "InterviewerPrompts",
    "EvaluatorPrompts",
    "ReportPrompts",
]
