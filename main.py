"""
分发模拟命令行入口

示例：
  python main.py --chunks 100 --peers 50 --selfish 5 --freerider 5 --strategy rarest-first
  python main.py --chunks 20 --peers 10 --peer-config-file peers.txt --slow 4 --random-seed 42 --verbose
"""
import argparse
import sys
from typing import List, Optional

from common.datastructures import Strategy
from common.errors import ConfigError
from config import Config, load_peer_configs
from network import SpeedModel
from observers import DebugRunObserver, EmptyRunObserver, RunObserver, SummaryRunObserver
from simulation import Distribution
from utils import init_logging, log_msg


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Simulate chunk distribution in a BitTorrent-style swarm')

    parser.add_argument('-c', '--chunks', type=int, required=True,
                        help='Number of chunks in the distributed file')
    parser.add_argument('-p', '--peers', type=int, required=True,
                        help='Total number of participating peers (including the seed)')
    parser.add_argument('--selfish', type=int, default=0,
                        help='Number of peers that stop distributing after completion (default: 0)')
    parser.add_argument('--freerider', type=int, default=0,
                        help='Number of peers that do not distribute (default: 0)')
    parser.add_argument('--strategy', type=str, default=Strategy.RAREST_FIRST.value,
                        choices=[s.value for s in Strategy],
                        help='Chunk selection strategy that all peers use (default: rarest-first)')
    parser.add_argument('--peer-config-file', type=str, default=None,
                        help='File with one three-letter peer config per line, e.g. "srf" '
                             '(behavior a/s/f, strategy r/m/u, speed f/m/s)')
    parser.add_argument('--fast', type=int, default=1,
                        help='Rounds needed to transfer one chunk at fast speed (default: 1)')
    parser.add_argument('--medium', type=int, default=1,
                        help='Rounds needed to transfer one chunk at medium speed (default: 1)')
    parser.add_argument('--slow', type=int, default=1,
                        help='Rounds needed to transfer one chunk at slow speed (default: 1)')
    parser.add_argument('--random-seed', type=int, default=None,
                        help='Seed to use for random number generation')
    parser.add_argument('--log-file', type=str, default=None,
                        help='Also write log output to this file')
    parser.add_argument('--log-level', type=str, default='info',
                        choices=['debug', 'info', 'warn', 'error'],
                        help='Log level (default: info)')

    output = parser.add_mutually_exclusive_group()
    output.add_argument('-S', '--silent', action='store_true',
                        help='Do not print any progress reports')
    output.add_argument('-V', '--verbose', action='store_true',
                        help='Print verbose progress reports')
    return parser


def build_config(args: argparse.Namespace) -> Config:
    """将命令行参数映射为 Config；配置错误以 ConfigError 抛出。"""
    speed = SpeedModel(fast=args.fast, medium=args.medium, slow=args.slow)
    peer_configs = load_peer_configs(args.peer_config_file) if args.peer_config_file else None
    return Config.create(
        chunk_count=args.chunks,
        peer_count=args.peers,
        selfish=args.selfish,
        freerider=args.freerider,
        strategy=Strategy(args.strategy),
        peer_configs=peer_configs,
        speed=speed,
        random_seed=args.random_seed,
    )


def select_observer(args: argparse.Namespace) -> RunObserver:
    if args.silent:
        return EmptyRunObserver()
    if args.verbose:
        return DebugRunObserver()
    return SummaryRunObserver()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    init_logging(log_file=args.log_file, level=args.log_level)

    try:
        config = build_config(args)
    except (ConfigError, OSError) as e:
        log_msg("ERROR", "CONFIG", None, str(e))
        return 2

    distribution = Distribution(config)
    summary = distribution.run(select_observer(args))

    print("")
    print(f"Random seed {summary.random_seed}")
    print(f"Number of rounds {summary.total_rounds}")
    print(f"Number of chunks exchanged {summary.total_exchanged_chunks}")
    print(f"Execution time {summary.total_execution_time:.6f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
