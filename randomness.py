"""
确定性随机源

整个模拟只使用一个 RandomSource 实例：分片选择的平局打破与上传源选择都从这里取随机数。
choose_one 总是先对候选集合排序再抽取，因此结果只取决于种子，与容器的迭代顺序无关。
"""
import random
from typing import Iterable, Optional, TypeVar

T = TypeVar("T")


def generate_seed() -> int:
    """从操作系统熵源生成一个64位种子。"""
    return random.SystemRandom().getrandbits(64)


class RandomSource:
    """以种子完全确定的伪随机数生成器。"""

    def __init__(self, seed: Optional[int] = None):
        self.seed = generate_seed() if seed is None else int(seed)
        if self.seed < 0:
            # random.Random 以 abs(seed) 播种，负数种子会与其绝对值产生相同的随机流
            raise ValueError(f"random seed must be non-negative, got {self.seed}")
        self._rng = random.Random(self.seed)

    def reseed(self):
        """恢复到初始种子对应的状态。"""
        self._rng.seed(self.seed)

    def uniform_index(self, n: int) -> int:
        """返回 [0, n) 中的均匀随机整数。"""
        if n <= 0:
            raise ValueError(f"uniform_index needs a positive bound, got {n}")
        return self._rng.randrange(n)

    def choose_one(self, items: Iterable[T]) -> T:
        """按升序排列候选后均匀选取一个。"""
        ordered = sorted(items)
        if not ordered:
            raise ValueError("choose_one called with no candidates")
        return ordered[self.uniform_index(len(ordered))]
