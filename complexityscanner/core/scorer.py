"""
Complexity scorer.

Maps raw complexity metrics (CCN, NLOC) onto a normalized 1-10 review
score:

- 1-3: low complexity, likely doesn't need review
- 4-6: medium complexity, quick review recommended
- 7-8: high complexity, thorough review needed
- 9-10: very high complexity, requires careful attention
"""

import math
from typing import Optional

from complexityscanner.config import ScoringConfig
from complexityscanner.core.analyzer import ComplexityAnalyzer
from complexityscanner.core.types import AnalysisResult, ComplexityScore


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


class ComplexityScorer:
    """Converts analysis results into 1-10 scores."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()

    def score_code(self, source_code: str, filename: str) -> ComplexityScore:
        """Analyze source text and score it."""
        analyzer = ComplexityAnalyzer.for_file(filename)
        return self.score_analysis(analyzer.analyze(source_code))

    def score_analysis(self, analysis: AnalysisResult) -> ComplexityScore:
        """Score an existing analysis result."""
        ccn_score = self.score_ccn(analysis.total_ccn)
        size_score = self.score_size(analysis.nloc)

        score = round_half_up(
            ccn_score * self.config.ccn_weight + size_score * self.config.size_weight
        )

        return ComplexityScore(
            score=max(1, min(10, score)),
            ccn=analysis.total_ccn,
            nloc=analysis.nloc,
            function_count=len(analysis.functions),
            ccn_score=ccn_score,
            size_score=size_score,
        )

    def score_ccn(self, ccn: int) -> int:
        """
        Map CCN to a 1-10 score.

        CCN up to the first threshold scores 1-3, up to the second 4-6,
        up to the third 7-8, up to the fourth 9 and anything above 10.
        """
        low, moderate, high, very_high = self.config.ccn_thresholds

        if ccn <= low:
            return math.ceil(ccn / low * 3)
        if ccn <= moderate:
            return 4 + math.floor((ccn - low) / (moderate - low) * 2)
        if ccn <= high:
            return 7 + math.floor((ccn - moderate) / (high - moderate))
        if ccn <= very_high:
            return 9
        return 10

    def score_size(self, nloc: int) -> int:
        """Map NLOC to a 1-10 score; larger segments are harder to review."""
        small, medium, large, very_large = self.config.nloc_thresholds

        if nloc <= small:
            return math.ceil(nloc / small * 2)
        if nloc <= medium:
            return 3 + math.floor((nloc - small) / (medium - small) * 2)
        if nloc <= large:
            return 6 + math.floor((nloc - medium) / (large - medium) * 2)
        if nloc <= very_large:
            return 9
        return 10

    @staticmethod
    def complexity_level(score: int) -> str:
        """Human-readable complexity level for a score."""
        if score <= 3:
            return "Low"
        if score <= 6:
            return "Medium"
        if score <= 8:
            return "High"
        return "Very High"

    def should_show_segment(self, score: int, threshold: Optional[int] = None) -> bool:
        """Whether a score reaches the review threshold."""
        if threshold is None:
            threshold = self.config.show_threshold
        return score >= threshold
