"""
单轮传输匹配

- 推进进行中的传输，完成的分片写入下载方的位图；
- 为每个空闲的下载者（按节点ID升序）选择分片与上传源，建立新的传输；
- 容量模型是非对称的：传输集合以下载方为键（每个节点同时最多一个下载），
  上传方同时参与的传输数不设上限。若要限制上传容量，只需修改 match_idle_peers 中的上传源筛选。
"""
from typing import Dict, List, Optional

from common.datastructures import Transfer
from network import SpeedModel
from observers import RunObserver
from randomness import RandomSource
from selection import ChunkSelector
from storage.state import SwarmState


class TransferMatcher:
    """负责单轮传输的推进与匹配。"""

    def __init__(self, swarm: SwarmState, speed: SpeedModel, rng: RandomSource):
        self.swarm = swarm
        self.speed = speed
        self.rng = rng
        self.selector = ChunkSelector(rng)
        self.transfers: Dict[int, Transfer] = {}  # downloader_id -> Transfer
        self.observer: RunObserver = RunObserver()

    def bind_observer(self, observer: Optional[RunObserver]):
        """绑定观察者。返回 self 以便链式调用。"""
        self.observer = observer or RunObserver()
        return self

    def reset(self):
        self.transfers.clear()

    def eligible_downloaders(self) -> List[int]:
        """非种子、未完成、且没有进行中下载的节点，升序。"""
        return [p.peer_id for p in self.swarm.peers
                if not p.is_seed and not p.is_complete() and p.peer_id not in self.transfers]

    def candidate_chunks(self, peer_id: int, available: Optional[List[bool]] = None) -> List[int]:
        """该节点缺少、且至少有一个合格上传源持有的分片，升序。"""
        if available is None:
            available = self.swarm.available_chunks()
        return [c for c in self.swarm.peers[peer_id].missing_chunks() if available[c]]

    def match_idle_peers(self) -> List[Transfer]:
        """
        为所有空闲下载者建立新传输。

        匹配期间持有位图不变，因此分片持有数与上传源资格在本步内是一致的快照；
        随机数严格按下载者ID升序消耗，以保证同一种子下结果可复现。
        """
        available = self.swarm.available_chunks()
        sources_by_chunk: Dict[int, List[int]] = {}
        started = []
        for peer_id in self.eligible_downloaders():
            candidates = self.candidate_chunks(peer_id, available)
            chunk = self.selector.select(self.swarm.peers[peer_id].strategy, candidates,
                                         self.swarm.possession_counts)
            if chunk is None:
                # 暂时没有可下载的分片，本轮空闲
                continue
            if chunk not in sources_by_chunk:
                sources_by_chunk[chunk] = self.swarm.eligible_sources(chunk)
            uploader_id = self.rng.choose_one(sources_by_chunk[chunk])
            transfer = Transfer(
                downloader_id=peer_id,
                uploader_id=uploader_id,
                chunk=chunk,
                rounds_remaining=self.speed.transfer_duration(self.swarm.peers[uploader_id].tier,
                                                              self.swarm.peers[peer_id].tier),
            )
            self._start(transfer)
            started.append(transfer)
        return started

    def _start(self, transfer: Transfer):
        if transfer.downloader_id in self.transfers:
            raise RuntimeError(f"peer {transfer.downloader_id} already has a transfer in flight")
        self.transfers[transfer.downloader_id] = transfer
        self.observer.chunk_transfer(transfer.chunk, transfer.uploader_id, transfer.downloader_id,
                                     transfer.rounds_remaining)

    def advance_transfers(self, round_number: int) -> int:
        """所有进行中的传输推进一轮；返回本轮完成的分片数。"""
        finished = []
        for downloader_id in sorted(self.transfers):
            transfer = self.transfers[downloader_id]
            transfer.rounds_remaining -= 1
            if transfer.rounds_remaining <= 0:
                finished.append(transfer)
        for transfer in finished:
            del self.transfers[transfer.downloader_id]
            peer_done, chunk_done = self.swarm.record_receipt(transfer.downloader_id, transfer.chunk, round_number)
            self.swarm.peers[transfer.uploader_id].uploads += 1
            self.observer.chunk_received(transfer.chunk, transfer.uploader_id, transfer.downloader_id)
            if peer_done:
                self.observer.peer_completed(transfer.downloader_id)
            if chunk_done:
                self.observer.chunk_completed(transfer.chunk)
        return len(finished)

    def run_round(self, round_number: int) -> int:
        """
        执行一轮：先为空闲节点建立传输，再推进所有传输（包括刚建立的）。
        传输建立的当轮即计为其第一轮，因此时长为1的传输在当轮完成。
        返回本轮完成的分片数。
        """
        self.match_idle_peers()
        return self.advance_transfers(round_number)
