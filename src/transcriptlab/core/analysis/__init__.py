from transcriptlab.core.analysis.client import AnalysisClient
from transcriptlab.core.analysis.payload import NormalizedAnalysis, normalize_analysis

__all__ = ["AnalysisClient", "NormalizedAnalysis", "normalize_analysis"]
