"""
配置错误类型

所有错误均在构造配置时同步抛出，运行期间不会出现。
它们都是 ValueError 的子类，调用方可以统一按 ValueError 捕获。
"""


class ConfigError(ValueError):
    """配置不合法的基类。"""


class InvalidChunkCount(ConfigError):
    """分片数量 <= 0。"""


class InvalidPeerCount(ConfigError):
    """节点数量 < 2：至少需要一个种子和一个下载者。"""


class OverAllocatedBehaviors(ConfigError):
    """自私/搭便车节点数（或 PeerConfig 条目数）超过了非种子节点数。"""


class InvalidSpeedDuration(ConfigError):
    """某个速度等级的传输轮数 <= 0。"""


class MalformedPeerConfigLine(ConfigError):
    """PeerConfig 编码不符合三字母表。"""

    def __init__(self, line: str, line_number: int = None):
        self.line = line
        self.line_number = line_number
        where = f" at line {line_number}" if line_number is not None else ""
        super().__init__(f"malformed peer config{where}: {line!r} "
                         f"(expected behavior [asf], strategy [rmu], speed [fms])")
