from datetime import datetime

from pydantic import BaseModel, Field


class BigFiveScores(BaseModel):
    openness: int
    conscientiousness: int
    extraversion: int
    agreeableness: int
    neuroticism: int


class SectionScores(BaseModel):
    aptitude: float
    behavioral: float
    domain: float


class SectionStats(BaseModel):
    total: int = 0
    attempted: int = 0
    notAttempted: int = 0
    correct: int = 0
    wrong: int = 0


class ScoredReportResponse(BaseModel):
    sessionId: str
    status: str
    bigFive: BigFiveScores
    sectionScores: SectionScores
    sectionStats: dict[str, SectionStats] = Field(default_factory=dict)
    totalQuestions: int
    attempted: int
    notAttempted: int
    correct: int
    wrong: int
    overallScore: float
    candidatePercentage: float
    candidatePercentile: float
    performanceBucket: str
    resultSource: str
    generatedAt: datetime
