from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from psychometric.generation.categories import unknown_tags


class UserProfile(BaseModel):
    name: str = Field(..., min_length=1)
    email: str | None = None
    degree: str = Field(..., min_length=1)
    specialization: str = Field(..., min_length=1)
    careerInterest: str = Field(..., min_length=1)
    technicalSkills: list[str] = Field(default_factory=list)
    softSkills: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    hobbies: list[str] = Field(default_factory=list)
    studyAreas: list[str] = Field(default_factory=list)

    @field_validator("technicalSkills", "softSkills", "interests", "hobbies", "studyAreas")
    @classmethod
    def _tags_must_be_declared(cls, value: list[str], info) -> list[str]:
        normalized = [str(tag).strip().lower() for tag in value if str(tag).strip()]
        rejected = unknown_tags(info.field_name, normalized)
        if rejected:
            raise ValueError(f"unknown {info.field_name} tags: {', '.join(sorted(rejected))}")
        return normalized


class CreateSessionRequest(BaseModel):
    userProfile: UserProfile


class CreateSessionResponse(BaseModel):
    sessionId: str
    status: str


class Question(BaseModel):
    id: str
    sectionNumber: int = Field(..., ge=1, le=3)
    category: str
    type: str
    prompt: str
    options: list[str] = Field(..., min_length=2)
    scenario: str | None = None
    correctOptionIndex: int | None = None
    traitImpactScores: list[int] | None = None
    rationales: list[str] | None = None
    source: str = "provider"


class SectionProgress(BaseModel):
    aptitude: bool = False
    behavioral: bool = False
    domain: bool = False


class SessionStatusResponse(BaseModel):
    sessionId: str
    status: str
    progress: SectionProgress
    questionCounts: dict[str, int] = Field(default_factory=dict)
    failedSections: list[int] = Field(default_factory=list)


class SessionResponse(BaseModel):
    sessionId: str
    status: str
    userProfile: UserProfile
    progress: SectionProgress
    questions: list[Question] = Field(default_factory=list)
    startedAt: datetime
    completedAt: datetime | None = None


class Answer(BaseModel):
    questionId: str = Field(..., min_length=1)
    selectedOptionIndex: int | None = None


class SubmissionResults(BaseModel):
    totalQuestions: int = Field(..., ge=0)
    attempted: int = Field(..., ge=0)
    notAttempted: int = Field(..., ge=0)
    correct: int = Field(..., ge=0)
    wrong: int = Field(..., ge=0)
    markedForReview: int = Field(default=0, ge=0)
    answeredAndMarkedForReview: int = Field(default=0, ge=0)
    submittedAt: datetime


class SubmitAnswersRequest(BaseModel):
    userId: str = Field(..., min_length=1)
    testId: str = Field(..., min_length=1)
    answers: list[Answer]
    results: SubmissionResults
    warnings: int = Field(default=0, ge=0)
    submittedBy: str = Field(default="user", pattern="^(user|timer|proctor)$")


class SubmitAnswersResponse(BaseModel):
    sessionId: str
    userId: str
    testId: str
    status: str
    totalQuestions: int
    attempted: int
    notAttempted: int
    correct: int
    wrong: int
    markedForReview: int
    answeredAndMarkedForReview: int
    warnings: int
    submittedBy: str
    submittedAt: datetime
    overallScore: float
    performanceBucket: str
