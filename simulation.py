"""
分发模拟主循环

Distribution 持有所有节点状态、速度模型、随机源和进行中的传输，
以 SimPy 环境作为轮次时钟：每一轮是一个 env.timeout(1)，env.now 即当前轮次。
每次 run() 都从配置定义的初始状态开始，结束后恢复到同样的干净基线（轮次为0、无进行中传输）。
"""
import time
from typing import Generator, List, Optional

import simpy

from common.datastructures import RoundStats, RunSummary
from config import Config
from coordinator import TransferMatcher
from observers import RunObserver
from randomness import RandomSource
from storage.state import SwarmState
from utils import log_msg


class Distribution:
    """分发模拟的聚合根。"""

    def __init__(self, config: Config, reseed_each_run: bool = True):
        """
        :param config: 经过校验的模拟配置。
        :param reseed_each_run: 为True时每次 run() 都把随机源恢复到初始种子（逐位可复现）；
                                为False时随机流在多次运行间延续。
        """
        self.config = config
        self.reseed_each_run = reseed_each_run
        self.rng = RandomSource(config.random_seed)
        self.speed = config.speed
        self.swarm = SwarmState.from_config(config)
        self.matcher = TransferMatcher(self.swarm, self.speed, self.rng)
        self.current_round = 0
        self._running = False

    @property
    def random_seed(self) -> int:
        return self.rng.seed

    @property
    def peers(self):
        return self.swarm.peers

    @property
    def transfers(self):
        return self.matcher.transfers

    def reset(self):
        """恢复到配置定义的初始状态。"""
        self.swarm.reset()
        self.matcher.reset()
        self.current_round = 0

    def measure(self, exchanged_chunks: int, execution_time: float = 0.0) -> RoundStats:
        return RoundStats(
            completed_peers=self.swarm.completed_peers,
            completed_chunks=self.swarm.completed_chunks,
            exchanged_chunks=exchanged_chunks,
            execution_time=execution_time,
        )

    def run(self, observer: Optional[RunObserver] = None) -> RunSummary:
        """运行模拟直到所有非种子节点下载完成，返回汇总结果。"""
        if self._running:
            raise RuntimeError("Distribution.run() is not reentrant")
        observer = observer or RunObserver()
        self._running = True
        try:
            self.reset()
            if self.reseed_each_run:
                self.rng.reseed()
            self.matcher.bind_observer(observer)
            observer.random_seed(self.random_seed)
            log_msg("INFO", "SYSTEM", None,
                    f"Starting run: chunks={self.config.chunk_count} peers={self.config.peer_count} "
                    f"seed={self.random_seed} speed={self.speed}")

            rounds: List[RoundStats] = []
            env = simpy.Environment()
            env.run(until=env.process(self._round_proc(env, observer, rounds)))

            summary = RunSummary(
                random_seed=self.random_seed,
                total_rounds=len(rounds),
                final_round=rounds[-1] if rounds else self.measure(0),
                rounds=rounds,
                peer_completion_rounds={p.peer_id: p.completion_round for p in self.swarm.peers},
                chunk_completion_rounds=dict(enumerate(self.swarm.chunk_completion_rounds)),
                uploads_per_peer={p.peer_id: p.uploads for p in self.swarm.peers},
            )
            log_msg("INFO", "SYSTEM", None,
                    f"Run finished after {summary.total_rounds} rounds; "
                    f"exchanged={summary.total_exchanged_chunks} time={summary.total_execution_time:.3f}s")
            observer.run_complete(summary)
            return summary
        finally:
            self.matcher.reset()
            self.matcher.bind_observer(None)
            self.current_round = 0
            self._running = False

    def _round_proc(self, env: simpy.Environment, observer: RunObserver,
                    rounds: List[RoundStats]) -> Generator:
        """SimPy 进程：逐轮推进，直到所有节点完成。终止条件是唯一的，不设轮数上限。"""
        while not self.swarm.is_finished():
            yield env.timeout(1)
            self.current_round = int(env.now)
            observer.round_start(self.current_round)
            start = time.perf_counter()
            exchanged = self.matcher.run_round(self.current_round)
            stats = self.measure(exchanged, time.perf_counter() - start)
            rounds.append(stats)
            log_msg("DEBUG", "ROUND", self.current_round,
                    f"exchanged={stats.exchanged_chunks} completed_peers={stats.completed_peers} "
                    f"completed_chunks={stats.completed_chunks} in_flight={len(self.matcher.transfers)}")
            observer.round_end(self.current_round, stats)
