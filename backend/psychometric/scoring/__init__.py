from psychometric.scoring.score_calculator import (
    calculate_aggregate,
    calculate_percentile,
    calculate_section_scores,
    calculate_section_stats,
    calculate_trait_scores,
    determine_performance_bucket,
    score_session,
)

__all__ = [
    "calculate_aggregate",
    "calculate_percentile",
    "calculate_section_scores",
    "calculate_section_stats",
    "calculate_trait_scores",
    "determine_performance_bucket",
    "score_session",
]
