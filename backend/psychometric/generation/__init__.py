from psychometric.generation.engine import QuestionGenerationEngine, SectionGenerationResult, plan_batches
from psychometric.generation.provider import ContentProvider

__all__ = [
    "ContentProvider",
    "QuestionGenerationEngine",
    "SectionGenerationResult",
    "plan_batches",
]
