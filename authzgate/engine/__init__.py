"""
Authorization evaluation, decision mapping and applicability queries.
"""

from .evaluator import AuthorizationEvaluator
from .decision import ChallengeIssuer, BasicChallengeIssuer, DecisionMapper
from .applicability import ApplicabilityQuery

__all__ = [
    "AuthorizationEvaluator",
    "ChallengeIssuer",
    "BasicChallengeIssuer",
    "DecisionMapper",
    "ApplicabilityQuery",
]
