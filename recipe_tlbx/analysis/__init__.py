"""Analysis modules backing the recipe steps."""

from .correlation_analyzer import CorrelationAnalyzer, CorrelationResult
from .pca_analyzer import PCAAnalyzer, PCAResult
from .variance_analyzer import VarianceAnalyzer, VarianceResult


__all__ = [
    "CorrelationAnalyzer",
    "CorrelationResult",
    "PCAAnalyzer",
    "PCAResult",
    "VarianceAnalyzer",
    "VarianceResult",
]
