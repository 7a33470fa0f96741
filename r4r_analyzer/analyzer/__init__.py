"""R4R analyzer orchestration: fetching, scoring and batch runs."""

from .core import R4RAnalyzer, AnalysisError, subject_from_input

__all__ = ['R4RAnalyzer', 'AnalysisError', 'subject_from_input']
