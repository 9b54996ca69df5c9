"""
Role, interview type, difficulty and interviewer definitions.

Defines the taxonomy used to configure a session:
- Target roles
- Interview categories
- Difficulty levels
- Interviewer personalities
"""

from enum import Enum


class Role(str, Enum):
    """Target role definitions."""

    FRONTEND_DEVELOPER = "frontend-developer"
    BACKEND_DEVELOPER = "backend-developer"
    FULL_STACK_DEVELOPER = "full-stack-developer"
    SOFTWARE_ENGINEER = "software-engineer"
    DATA_SCIENTIST = "data-scientist"
    PRODUCT_MANAGER = "product-manager"
    DESIGNER = "designer"
    MARKETING = "marketing"
    SALES = "sales"
    DEVOPS_ENGINEER = "devops-engineer"
    QA_ENGINEER = "qa-engineer"
    AI_ML_ENGINEER = "ai-ml-engineer"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        """Human-readable role name."""
        names = {
            "frontend-developer": "Frontend Developer",
            "backend-developer": "Backend Developer",
            "full-stack-developer": "Full-Stack Developer",
            "software-engineer": "Software Engineer",
            "data-scientist": "Data Scientist",
            "product-manager": "Product Manager",
            "designer": "Designer",
            "marketing": "Marketing",
            "sales": "Sales",
            "devops-engineer": "DevOps Engineer",
            "qa-engineer": "QA Engineer",
            "ai-ml-engineer": "AI/ML Engineer",
        }
        return names.get(self.value, "Candidate")

    @classmethod
    def _missing_(cls, value):
        # "fullstack-developer" is accepted as an alias
        if value == "fullstack-developer":
            return cls.FULL_STACK_DEVELOPER
        return None


class InterviewType(str, Enum):
    """Interview category."""

    TECHNICAL = "technical"
    BEHAVIORAL = "behavioral"
    HR = "hr"
    MIXED = "mixed"
    CASE_STUDY = "case-study"


class Difficulty(str, Enum):
    """Difficulty levels."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class InterviewerPersonality(str, Enum):
    """Tone the AI interviewer adopts. Affects prompts only."""

    FRIENDLY = "friendly"
    PROFESSIONAL = "professional"
    TECHNICAL = "technical"
    CHALLENGING = "challenging"

    @property
    def tone(self) -> str:
        tones = {
            "friendly": "warm and encouraging",
            "professional": "formal and structured",
            "technical": "focused and analytical",
            "challenging": "rigorous and demanding",
        }
        return tones[self.value]

    @property
    def question_style(self) -> str:
        styles = {
            "friendly": "conversational and supportive",
            "professional": "direct and methodical",
            "technical": "detailed and probing",
            "challenging": "pushing for deeper answers",
        }
        return styles[self.value]

    @property
    def phrases(self) -> list[str]:
        phrases = {
            "friendly": [
                "That's great!",
                "I'd love to hear more about that",
                "That sounds interesting",
                "Tell me more",
            ],
            "professional": [
                "Please elaborate",
                "Can you provide more details",
                "That's helpful",
                "I understand",
            ],
            "technical": [
                "How exactly did you implement that?",
                "What were the technical challenges?",
                "Can you walk me through the process?",
            ],
            "challenging": [
                "Can you be more specific?",
                "What if the situation was different?",
                "How would you handle failure?",
            ],
        }
        return phrases[self.value]


# Topics the question generator is steered towards for each interview type
INTERVIEW_TYPE_FOCUS: dict[InterviewType, list[str]] = {
    InterviewType.TECHNICAL: [
        "core technical fundamentals",
        "problem solving and debugging",
        "system and code design",
    ],
    InterviewType.BEHAVIORAL: [
        "teamwork and conflict",
        "ownership and accountability",
        "learning from failure",
    ],
    InterviewType.HR: [
        "motivation for the role",
        "career goals",
        "work environment preferences",
    ],
    InterviewType.MIXED: [
        "technical fundamentals",
        "past projects",
        "collaboration and communication",
    ],
    InterviewType.CASE_STUDY: [
        "structuring an ambiguous problem",
        "estimation and trade-offs",
        "communicating a recommendation",
    ],
}


def get_type_focus_areas(interview_type: InterviewType) -> list[str]:
    """Get the focus areas for an interview type."""
    return INTERVIEW_TYPE_FOCUS.get(interview_type, [])
