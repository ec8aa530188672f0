"""
运行观察者

RunObserver 定义引擎在运行过程中回调的钩子，默认全部为空操作；
调用方按需覆盖。内置实现：
- EmptyRunObserver：静默；
- SummaryRunObserver：每轮一行统计；
- DebugRunObserver：输出所有事件；
- CollectingRunObserver：在内存中记录所有轮次与事件，便于分析。
"""
from typing import List, Optional, Tuple

from common.datastructures import RoundStats, RunSummary
from utils import log_msg


class RunObserver:
    """观察者基类：所有钩子默认为空操作，按轮次顺序被调用。"""

    def random_seed(self, seed: int):
        pass

    def round_start(self, round_number: int):
        pass

    def chunk_transfer(self, chunk: int, uploader: int, downloader: int, rounds: int):
        """新建了一次传输，rounds 为所需轮数。"""
        pass

    def chunk_received(self, chunk: int, uploader: int, downloader: int):
        pass

    def peer_completed(self, peer: int):
        pass

    def chunk_completed(self, chunk: int):
        pass

    def round_end(self, round_number: int, stats: RoundStats):
        pass

    def run_complete(self, summary: RunSummary):
        pass


class EmptyRunObserver(RunObserver):
    pass


class SummaryRunObserver(RunObserver):
    def random_seed(self, seed: int):
        log_msg("INFO", "RUN", None, f"Random seed: {seed}")

    def round_end(self, round_number: int, stats: RoundStats):
        log_msg("INFO", "ROUND", round_number,
                f"completed_peers={stats.completed_peers} completed_chunks={stats.completed_chunks} "
                f"exchanged_chunks={stats.exchanged_chunks} time={stats.execution_time * 1000:.3f}ms")


class DebugRunObserver(RunObserver):
    def random_seed(self, seed: int):
        log_msg("INFO", "RUN", None, f"Random seed: {seed}")

    def round_start(self, round_number: int):
        log_msg("INFO", "ROUND", round_number, "Start round")

    def chunk_transfer(self, chunk: int, uploader: int, downloader: int, rounds: int):
        log_msg("INFO", "PEER", downloader, f"Transfer of chunk {chunk} from {uploader} ({rounds} rounds)")

    def chunk_received(self, chunk: int, uploader: int, downloader: int):
        log_msg("INFO", "PEER", downloader, f"Received chunk {chunk} from {uploader}")

    def peer_completed(self, peer: int):
        log_msg("INFO", "PEER", peer, "Completed")

    def chunk_completed(self, chunk: int):
        log_msg("INFO", "CHUNK", chunk, "Fully distributed")

    def round_end(self, round_number: int, stats: RoundStats):
        log_msg("INFO", "ROUND", round_number, f"End round time {stats.execution_time * 1000:.3f}ms")


class CollectingRunObserver(RunObserver):
    """在内存中记录所有回调。"""

    def __init__(self):
        self.seeds: List[int] = []
        self.rounds: List[Tuple[int, RoundStats]] = []
        self.transfers: List[Tuple[int, int, int, int, int]] = []  # (round, chunk, uploader, downloader, rounds)
        self.receipts: List[Tuple[int, int, int, int]] = []  # (round, chunk, uploader, downloader)
        self.completed_peers: List[Tuple[int, int]] = []
        self.completed_chunks: List[Tuple[int, int]] = []
        self.summaries: List[RunSummary] = []
        self._round: Optional[int] = None

    def random_seed(self, seed: int):
        self.seeds.append(seed)

    def round_start(self, round_number: int):
        self._round = round_number

    def chunk_transfer(self, chunk: int, uploader: int, downloader: int, rounds: int):
        self.transfers.append((self._round, chunk, uploader, downloader, rounds))

    def chunk_received(self, chunk: int, uploader: int, downloader: int):
        self.receipts.append((self._round, chunk, uploader, downloader))

    def peer_completed(self, peer: int):
        self.completed_peers.append((self._round, peer))

    def chunk_completed(self, chunk: int):
        self.completed_chunks.append((self._round, chunk))

    def round_end(self, round_number: int, stats: RoundStats):
        self.rounds.append((round_number, stats))

    def run_complete(self, summary: RunSummary):
        self.summaries.append(summary)
        self._round = None

    def round_stats(self) -> List[RoundStats]:
        return [stats for _, stats in self.rounds]
