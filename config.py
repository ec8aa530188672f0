"""
模拟配置

两种构造方式：
- Config.from_counts: 给定自私/搭便车节点数量与统一的分片选择策略；
- Config.from_peer_configs: 给定按顺序应用于非种子节点的 PeerConfig 列表，其余节点取默认值。
节点0始终是种子，配置固定为 (Altruistic, RarestFirst, Fast)。
"""
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from common.datastructures import Behavior, Strategy, Tier
from common.errors import (
    ConfigError,
    InvalidChunkCount,
    InvalidPeerCount,
    MalformedPeerConfigLine,
    OverAllocatedBehaviors,
)
from network import SpeedModel

SEED_ID = 0

# 三字母编码：行为 / 策略 / 速度
BEHAVIOR_CODES = {"a": Behavior.ALTRUISTIC, "s": Behavior.SELFISH, "f": Behavior.FREERIDER}
STRATEGY_CODES = {"r": Strategy.RAREST_FIRST, "m": Strategy.MOST_COMMON_FIRST, "u": Strategy.UNIFORM}
TIER_CODES = {"f": Tier.FAST, "m": Tier.MEDIUM, "s": Tier.SLOW}


@dataclass(frozen=True)
class PeerConfig:
    """单个非种子节点的配置。"""
    behavior: Behavior = Behavior.ALTRUISTIC
    strategy: Strategy = Strategy.RAREST_FIRST
    tier: Tier = Tier.FAST

    def __post_init__(self):
        if not isinstance(self.behavior, Behavior) or not isinstance(self.strategy, Strategy) \
                or not isinstance(self.tier, Tier):
            raise MalformedPeerConfigLine(f"{self.behavior!r}/{self.strategy!r}/{self.tier!r}")

    @classmethod
    def from_string(cls, code: str, line_number: Optional[int] = None) -> 'PeerConfig':
        """解析三字母编码，例如 "srf" = Selfish, RarestFirst, Fast。"""
        if len(code) != 3 or code[0] not in BEHAVIOR_CODES or code[1] not in STRATEGY_CODES \
                or code[2] not in TIER_CODES:
            raise MalformedPeerConfigLine(code, line_number)
        return cls(BEHAVIOR_CODES[code[0]], STRATEGY_CODES[code[1]], TIER_CODES[code[2]])

    def to_string(self) -> str:
        return _code_of(BEHAVIOR_CODES, self.behavior) + _code_of(STRATEGY_CODES, self.strategy) \
            + _code_of(TIER_CODES, self.tier)


def _code_of(codes: dict, value) -> str:
    return next(k for k, v in codes.items() if v is value)


SEED_PEER_CONFIG = PeerConfig()


def load_peer_configs(path: str) -> List[PeerConfig]:
    """读取 PeerConfig 文件：每行一个三字母编码，忽略空行与以 # 开头的注释行。"""
    configs = []
    with open(path, "r", encoding="utf-8") as f:
        for line_number, raw in enumerate(f, start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            configs.append(PeerConfig.from_string(line, line_number))
    return configs


@dataclass
class Config:
    """
    经过校验的完整模拟配置。

    behaviors / strategies / tiers 按节点ID索引，长度均为 peer_count，索引0为种子。
    random_seed 为None时，由 Distribution 在构造时生成并对外公开。
    """
    chunk_count: int
    peer_count: int
    behaviors: List[Behavior]
    strategies: List[Strategy]
    tiers: List[Tier]
    speed: SpeedModel = field(default_factory=SpeedModel)
    random_seed: Optional[int] = None

    def __post_init__(self):
        _check_counts(self.chunk_count, self.peer_count)
        for name in ("behaviors", "strategies", "tiers"):
            if len(getattr(self, name)) != self.peer_count:
                raise ConfigError(f"{name} must list exactly {self.peer_count} peers")
        seed = PeerConfig(self.behaviors[SEED_ID], self.strategies[SEED_ID], self.tiers[SEED_ID])
        if seed != SEED_PEER_CONFIG:
            raise ConfigError(f"the seed must be altruistic/rarest-first/fast, got {seed.to_string()}")
        for i in range(1, self.peer_count):
            PeerConfig(self.behaviors[i], self.strategies[i], self.tiers[i])
        if self.random_seed is not None and (isinstance(self.random_seed, bool)
                                             or not isinstance(self.random_seed, int) or self.random_seed < 0):
            raise ConfigError(f"random seed must be a non-negative integer, got {self.random_seed!r}")

    @classmethod
    def from_counts(cls, chunk_count: int, peer_count: int, selfish: int = 0, freerider: int = 0,
                    strategy: Strategy = Strategy.RAREST_FIRST, speed: Optional[SpeedModel] = None,
                    random_seed: Optional[int] = None) -> 'Config':
        """自私节点与搭便车节点依次排在节点列表末尾，其余为利他节点。"""
        _check_counts(chunk_count, peer_count)
        if selfish < 0 or freerider < 0:
            raise OverAllocatedBehaviors(f"selfish={selfish} and freerider={freerider} must be non-negative")
        downloaders = peer_count - 1
        if selfish + freerider > downloaders:
            raise OverAllocatedBehaviors(
                f"selfish+freerider={selfish + freerider} exceeds the {downloaders} non-seed peers")
        altruistic = downloaders - selfish - freerider
        behaviors = [Behavior.ALTRUISTIC] * (1 + altruistic) + [Behavior.SELFISH] * selfish \
            + [Behavior.FREERIDER] * freerider
        return cls(
            chunk_count=chunk_count,
            peer_count=peer_count,
            behaviors=behaviors,
            strategies=[SEED_PEER_CONFIG.strategy] + [strategy] * downloaders,
            tiers=[SEED_PEER_CONFIG.tier] + [Tier.FAST] * downloaders,
            speed=speed or SpeedModel(),
            random_seed=random_seed,
        )

    @classmethod
    def from_peer_configs(cls, chunk_count: int, peer_count: int, peer_configs: Sequence[PeerConfig],
                          speed: Optional[SpeedModel] = None, random_seed: Optional[int] = None) -> 'Config':
        """peer_configs 依次应用于节点1, 2, ...；剩余节点使用默认配置。"""
        _check_counts(chunk_count, peer_count)
        if len(peer_configs) > peer_count - 1:
            raise OverAllocatedBehaviors(
                f"{len(peer_configs)} peer configs given for {peer_count - 1} non-seed peers")
        peers = [SEED_PEER_CONFIG] + list(peer_configs)
        peers += [PeerConfig()] * (peer_count - len(peers))
        return cls(
            chunk_count=chunk_count,
            peer_count=peer_count,
            behaviors=[p.behavior for p in peers],
            strategies=[p.strategy for p in peers],
            tiers=[p.tier for p in peers],
            speed=speed or SpeedModel(),
            random_seed=random_seed,
        )

    @classmethod
    def create(cls, chunk_count: int, peer_count: int, selfish: int = 0, freerider: int = 0,
               strategy: Strategy = Strategy.RAREST_FIRST, peer_configs: Optional[Sequence[PeerConfig]] = None,
               speed: Optional[SpeedModel] = None, random_seed: Optional[int] = None) -> 'Config':
        """统一入口：peer_configs 与 selfish/freerider 计数二选一。"""
        if peer_configs is not None:
            if selfish or freerider:
                raise ConfigError("selfish/freerider counts cannot be combined with a peer config list")
            return cls.from_peer_configs(chunk_count, peer_count, peer_configs, speed, random_seed)
        return cls.from_counts(chunk_count, peer_count, selfish, freerider, strategy, speed, random_seed)

    def peer_config(self, peer_id: int) -> PeerConfig:
        return PeerConfig(self.behaviors[peer_id], self.strategies[peer_id], self.tiers[peer_id])


def _check_counts(chunk_count: int, peer_count: int):
    if isinstance(chunk_count, bool) or not isinstance(chunk_count, int) or chunk_count <= 0:
        raise InvalidChunkCount(f"chunk count must be a positive integer, got {chunk_count!r}")
    if isinstance(peer_count, bool) or not isinstance(peer_count, int) or peer_count < 2:
        raise InvalidPeerCount(f"peer count must be at least 2 (one seed and one downloader), got {peer_count!r}")
