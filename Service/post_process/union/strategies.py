"""
Service/post_process/union/strategies.py

병합 후보 쌍에 0~255 범위의 점수를 매기는 휴리스틱(greedy, obtuse, acute) 모듈입니다. 점수가 낮을수록 먼저 병합됩니다.
"""
from __future__ import annotations

import math
from typing import Callable, Dict, Iterable, Iterator, List

from Service.config import UnionHeuristic

from .candidates import CandidatePair, Position

MAX_SCORE = 255


def greedy_score(pair: CandidatePair) -> int:
    """병합 작업이 쉬운 순서(앞-뒤, 뒤-뒤, 앞-앞)로 점수를 매깁니다."""
    if pair.first.position != pair.second.position:
        return 0
    if pair.first.position is Position.BACK:
        return MAX_SCORE // 2
    return MAX_SCORE


def _unit_dot(pair: CandidatePair) -> float:
    a, b = pair.first, pair.second
    norm = math.hypot(a.dx, a.dy) * math.hypot(b.dx, b.dy)
    dot = (a.dx * b.dx + a.dy * b.dy) / norm
    return max(-1.0, min(1.0, dot))


def obtuse_score(pair: CandidatePair) -> int:
    """두 끝점의 진행 방향이 반대(직선으로 이어짐)일수록 낮은 점수를 줍니다."""
    if pair.first.is_degenerate or pair.second.is_degenerate:
        return MAX_SCORE
    return int(MAX_SCORE * ((_unit_dot(pair) + 1.0) * 0.5))


def acute_score(pair: CandidatePair) -> int:
    """두 끝점의 진행 방향이 같을수록(급격히 꺾일수록) 낮은 점수를 줍니다."""
    if pair.first.is_degenerate or pair.second.is_degenerate:
        return MAX_SCORE
    return MAX_SCORE - obtuse_score(pair)


_SCORERS: Dict[UnionHeuristic, Callable[[CandidatePair], int]] = {
    UnionHeuristic.GREEDY: greedy_score,
    UnionHeuristic.OBTUSE: obtuse_score,
    UnionHeuristic.ACUTE: acute_score,
}


def score_pair(heuristic: UnionHeuristic, pair: CandidatePair) -> int:
    return _SCORERS[heuristic](pair)


class ScoredPairs:
    """
    점수를 키로 여러 쌍을 보관하며 점수 오름차순(동점은 입력 순서)으로 순회합니다.
    """

    def __init__(self):
        self._buckets: Dict[int, List[CandidatePair]] = {}

    def add(self, pair: CandidatePair) -> None:
        self._buckets.setdefault(pair.score, []).append(pair)

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    def __iter__(self) -> Iterator[CandidatePair]:
        for score in sorted(self._buckets):
            yield from self._buckets[score]


def score_candidates(pairs: Iterable[CandidatePair], heuristic: UnionHeuristic) -> ScoredPairs:
    scored = ScoredPairs()
    for pair in pairs:
        pair.score = score_pair(heuristic, pair)
        scored.add(pair)
    return scored
