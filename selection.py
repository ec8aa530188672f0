"""
分片选择策略

- RarestFirst：选择全网持有数最少的分片；
- MostCommonFirst：选择全网持有数最多的分片；
- Uniform：在候选中均匀随机选择。
持有数统计的是所有节点（不论其是否为合格上传源），平局通过 RandomSource.choose_one 在升序候选上打破。
"""
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from common.datastructures import Strategy
from randomness import RandomSource


def _by_count(pick: Callable[[Iterable[int]], int]):
    def select(candidates: List[int], possession_counts: Sequence[int], rng: RandomSource) -> int:
        target = pick(possession_counts[c] for c in candidates)
        return rng.choose_one(c for c in candidates if possession_counts[c] == target)
    return select


def _uniform(candidates: List[int], possession_counts: Sequence[int], rng: RandomSource) -> int:
    return rng.choose_one(candidates)


_SELECTORS: Dict[Strategy, Callable[[List[int], Sequence[int], RandomSource], int]] = {
    Strategy.RAREST_FIRST: _by_count(min),
    Strategy.MOST_COMMON_FIRST: _by_count(max),
    Strategy.UNIFORM: _uniform,
}


class ChunkSelector:
    """根据节点策略从候选集合中选出一个分片。"""

    def __init__(self, rng: RandomSource):
        self.rng = rng

    def select(self, strategy: Strategy, candidates: Iterable[int],
               possession_counts: Sequence[int]) -> Optional[int]:
        """
        :param strategy: 请求方的分片选择策略。
        :param candidates: 请求方缺少、且至少有一个合格上传源持有的分片。
        :param possession_counts: 每个分片的全网持有数。
        :return: 选中的分片；候选为空时返回None。
        """
        ordered = sorted(candidates)
        if not ordered:
            return None
        return _SELECTORS[strategy](ordered, possession_counts, self.rng)
