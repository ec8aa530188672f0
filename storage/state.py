from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from common.datastructures import Behavior, Strategy, Tier
from config import Config, SEED_ID


@dataclass
class PeerState:
    """单个节点的可变状态：持有的分片位图、完成轮次与上传计数。"""
    peer_id: int
    behavior: Behavior
    strategy: Strategy
    tier: Tier
    is_seed: bool
    chunk_count: int
    possession: List[bool] = field(default_factory=list)
    held: int = 0
    completion_round: Optional[int] = None
    uploads: int = 0

    def __post_init__(self):
        if not self.possession:
            self.reset()

    def reset(self):
        """恢复到初始状态：种子持有全部分片，其余节点为空。"""
        self.possession = [self.is_seed] * self.chunk_count
        self.held = self.chunk_count if self.is_seed else 0
        self.completion_round = 0 if self.is_seed else None
        self.uploads = 0

    def is_complete(self) -> bool:
        return self.held == self.chunk_count

    def missing_chunks(self) -> List[int]:
        return [c for c, has in enumerate(self.possession) if not has]

    def receive_chunk(self, chunk: int, round_number: int) -> bool:
        """设置分片位；返回该节点是否因此完成下载。"""
        if self.is_seed:
            raise RuntimeError(f"seed {self.peer_id} cannot receive chunk {chunk}")
        if self.possession[chunk]:
            raise RuntimeError(f"peer {self.peer_id} already holds chunk {chunk}")
        self.possession[chunk] = True
        self.held += 1
        if self.is_complete():
            self.completion_round = round_number
            return True
        return False

    def is_source_for(self, chunk: int) -> bool:
        """能否作为该分片的上传源：持有分片，且不是搭便车者，且（非自私或尚未完成）。"""
        if not self.possession[chunk] or self.behavior is Behavior.FREERIDER:
            return False
        return self.behavior is not Behavior.SELFISH or not self.is_complete()

    def uploads_anything(self) -> bool:
        """是否可能为任意分片提供上传。"""
        if self.held == 0 or self.behavior is Behavior.FREERIDER:
            return False
        return self.behavior is not Behavior.SELFISH or not self.is_complete()


@dataclass
class SwarmState:
    """所有节点状态的容器，并维护每个分片的全网持有数。"""
    chunk_count: int
    peers: List[PeerState] = field(default_factory=list)
    possession_counts: List[int] = field(default_factory=list)
    chunk_completion_rounds: List[Optional[int]] = field(default_factory=list)
    completed_peers: int = 0
    completed_chunks: int = 0

    @classmethod
    def from_config(cls, config: Config) -> 'SwarmState':
        peers = [
            PeerState(peer_id=i,
                      behavior=config.behaviors[i],
                      strategy=config.strategies[i],
                      tier=config.tiers[i],
                      is_seed=(i == SEED_ID),
                      chunk_count=config.chunk_count)
            for i in range(config.peer_count)
        ]
        swarm = cls(chunk_count=config.chunk_count, peers=peers)
        swarm.reset()
        return swarm

    @property
    def peer_count(self) -> int:
        return len(self.peers)

    def reset(self):
        for p in self.peers:
            p.reset()
        self.possession_counts = [sum(p.possession[c] for p in self.peers) for c in range(self.chunk_count)]
        self.chunk_completion_rounds = [
            0 if n == self.peer_count else None for n in self.possession_counts
        ]
        self.completed_peers = sum(1 for p in self.peers if p.is_complete())
        self.completed_chunks = sum(1 for r in self.chunk_completion_rounds if r is not None)

    def record_receipt(self, peer_id: int, chunk: int, round_number: int) -> Tuple[bool, bool]:
        """登记一次分片接收；返回 (节点是否完成, 分片是否已被所有节点持有)。"""
        peer_done = self.peers[peer_id].receive_chunk(chunk, round_number)
        if peer_done:
            self.completed_peers += 1
        self.possession_counts[chunk] += 1
        chunk_done = self.possession_counts[chunk] == self.peer_count
        if chunk_done:
            self.chunk_completion_rounds[chunk] = round_number
            self.completed_chunks += 1
        return peer_done, chunk_done

    def is_finished(self) -> bool:
        """所有非种子节点都已完成。"""
        return self.completed_peers == self.peer_count

    def eligible_sources(self, chunk: int) -> List[int]:
        """当前可为该分片提供上传的节点ID，升序。"""
        return [p.peer_id for p in self.peers if p.is_source_for(chunk)]

    def available_chunks(self) -> List[bool]:
        """每个分片是否至少有一个合格上传源。"""
        available = [False] * self.chunk_count
        for p in self.peers:
            if not p.uploads_anything():
                continue
            for c, has in enumerate(p.possession):
                if has:
                    available[c] = True
        return available
