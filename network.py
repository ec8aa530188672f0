"""
网络速度模型

- 三个速度等级（Fast/Medium/Slow）各对应一个正整数：传输一个分片所需的轮数；
- 一次传输的时长由上传方与下载方中较慢的一方决定。
"""
from typing import Dict

from common.datastructures import Tier
from common.errors import InvalidSpeedDuration


class SpeedModel:
    """速度等级 -> 每个分片的传输轮数。"""

    def __init__(self, fast: int = 1, medium: int = 1, slow: int = 1):
        durations = {Tier.FAST: fast, Tier.MEDIUM: medium, Tier.SLOW: slow}
        for tier, duration in durations.items():
            if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
                raise InvalidSpeedDuration(
                    f"duration for tier {tier.value} must be a positive integer, got {duration!r}")
        self._durations: Dict[Tier, int] = durations

    @classmethod
    def from_mapping(cls, durations: Dict[Tier, int]) -> 'SpeedModel':
        """由 {Tier: 轮数} 构造；缺失的等级取默认值1。"""
        return cls(fast=durations.get(Tier.FAST, 1),
                   medium=durations.get(Tier.MEDIUM, 1),
                   slow=durations.get(Tier.SLOW, 1))

    def duration_of(self, tier: Tier) -> int:
        return self._durations[tier]

    def transfer_duration(self, uploader_tier: Tier, downloader_tier: Tier) -> int:
        """传输受较慢一方限制。"""
        return max(self.duration_of(uploader_tier), self.duration_of(downloader_tier))

    def __eq__(self, other):
        if not isinstance(other, SpeedModel):
            return NotImplemented
        return self._durations == other._durations

    def __repr__(self):
        return (f"SpeedModel(fast={self._durations[Tier.FAST]}, "
                f"medium={self._durations[Tier.MEDIUM]}, slow={self._durations[Tier.SLOW]})")
