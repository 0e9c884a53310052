"""
Service/post_process/union/__init__.py

선형 피처의 끝점 후보 추출, 점수 산정, 병합 및 진단 관련 모듈들을 외부로 노출합니다.
"""
from .processor import UnionProcessor
from .candidates import (
    CandidateExtractor,
    CandidatePair,
    CurveApproximator,
    EndpointCandidate,
    Position,
    make_pair,
    propose_pairs,
)
from .strategies import (
    MAX_SCORE,
    ScoredPairs,
    acute_score,
    greedy_score,
    obtuse_score,
    score_candidates,
)
from .executor import UnionExecutor, cull
from .diagnostics import UnionDiagnostics

__all__ = [
    "UnionProcessor",
    "CandidateExtractor",
    "CandidatePair",
    "CurveApproximator",
    "EndpointCandidate",
    "Position",
    "make_pair",
    "propose_pairs",
    "MAX_SCORE",
    "ScoredPairs",
    "acute_score",
    "greedy_score",
    "obtuse_score",
    "score_candidates",
    "UnionExecutor",
    "cull",
    "UnionDiagnostics",
]
