"""
通用工具函数模块

本模块提供模拟器共用的日志记录辅助函数：
- init_logging: 初始化全局日志记录器（可选滚动日志文件 + 控制台输出）；
- log_msg: 以 "角色(ID): 消息" 的格式记录结构化日志。
"""
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional


# ---------------------------- 日志记录辅助函数 ----------------------------

_LOG_INITIALIZED = False
_LOGGER = logging.getLogger("coppa")


def init_logging(log_file: Optional[str] = "coppa.log", level: str = "INFO", console: bool = True,
                 max_bytes: int = 10 * 1024 * 1024, backup_count: int = 5):
    """
    初始化全局日志记录器。

    :param log_file: 日志文件名；为None时不写文件。
    :param level: 日志级别字符串 (例如, "DEBUG", "INFO", "WARN")。
    :param console: 如果为True，日志也会输出到控制台。
    :param max_bytes: 每个日志文件的最大大小（字节）。
    :param backup_count: 保留的旧日志文件数量。
    """
    global _LOG_INITIALIZED
    if _LOG_INITIALIZED:
        return

    log_level = _to_logging_level(level)

    _LOGGER.setLevel(log_level)
    _LOGGER.propagate = False  # 防止日志向上传播到根记录器，避免重复输出

    fmt = logging.Formatter(fmt="%(asctime)s %(levelname)-7s %(message)s", datefmt="%H:%M:%S")

    if log_file:
        fh = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        fh.setLevel(log_level)
        fh.setFormatter(fmt)
        _LOGGER.addHandler(fh)

    if console:
        ch = logging.StreamHandler()
        ch.setLevel(log_level)
        ch.setFormatter(fmt)
        _LOGGER.addHandler(ch)

    _LOG_INITIALIZED = True


def _to_logging_level(level: str) -> int:
    """将字符串形式的日志级别转换为logging库的常量。"""
    level = (level or "INFO").upper()
    return {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARN": logging.WARNING,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }.get(level, logging.INFO)


def log_msg(level, actor_type, actor_id, msg: str):
    """
    记录一条结构化的日志消息。

    :param level: 日志级别 (例如, "INFO", "DEBUG")。
    :param actor_type: 产生日志的模块或角色类型 (例如, "PEER", "SYSTEM")。
    :param actor_id: 参与者的唯一ID，对于系统级日志可为None。
    :param msg: 日志消息内容。
    """
    if not _LOG_INITIALIZED:
        # 未显式初始化时仅输出到控制台，不创建日志文件
        init_logging(log_file=None)

    who = f"{actor_type}({actor_id})" if actor_id is not None else actor_type
    _LOGGER.log(_to_logging_level(level), f"{who}: {msg}")
