from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class Behavior(Enum):
    """节点的上传意愿。"""
    ALTRUISTIC = "altruistic"
    SELFISH = "selfish"      # 下载完成后停止上传
    FREERIDER = "freerider"  # 从不上传


class Strategy(Enum):
    """选择下一个请求分片的策略。"""
    RAREST_FIRST = "rarest-first"
    MOST_COMMON_FIRST = "most-common-first"
    UNIFORM = "uniform"


class Tier(Enum):
    """网络速度等级，决定传输一个分片所需的轮数。"""
    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"


@dataclass
class Transfer:
    """一次进行中的分片传输：uploader -> downloader。"""
    downloader_id: int
    uploader_id: int
    chunk: int
    rounds_remaining: int


@dataclass
class RoundStats:
    """单轮统计。execution_time 为墙钟时间（秒），不参与相等比较，以便比较确定性运行。"""
    completed_peers: int
    completed_chunks: int
    exchanged_chunks: int
    execution_time: float = field(default=0.0, compare=False)


@dataclass
class RunSummary:
    """一次完整运行的汇总结果。"""
    random_seed: int
    total_rounds: int
    final_round: RoundStats
    rounds: List[RoundStats] = field(default_factory=list)
    # peer_id -> 完成轮次（种子为0）
    peer_completion_rounds: Dict[int, Optional[int]] = field(default_factory=dict)
    # chunk -> 所有节点都持有该分片的首个轮次
    chunk_completion_rounds: Dict[int, Optional[int]] = field(default_factory=dict)
    uploads_per_peer: Dict[int, int] = field(default_factory=dict)

    @property
    def total_exchanged_chunks(self) -> int:
        return sum(r.exchanged_chunks for r in self.rounds)

    @property
    def total_execution_time(self) -> float:
        return sum(r.execution_time for r in self.rounds)
