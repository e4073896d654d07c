"""
Alternatives Service

Same-class therapy substitution ranked by safety and efficacy.
"""

from .models import AlternativeSuggestion, AlternativeRanking, PatientContext
from .ranker import AlternativeRanker

__all__ = [
    'AlternativeSuggestion',
    'AlternativeRanking',
    'PatientContext',
    'AlternativeRanker',
]
