"""psbuild 日志配置

两种输出格式:
  - 文本: 人类可读，外部命令记录附带 [label rc=.. 1.2s] 后缀
  - JSON: 每条一行，便于 CI 收集；外部命令记录额外带有结构化字段

外部命令字段由 run_cmd 通过 extra= 注入（见 command_fields），
日志记录上不存在的字段不会输出。
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# run_cmd 注入到 LogRecord 上的字段
COMMAND_FIELDS = ("label", "command", "cwd", "rc", "duration")


def command_fields(
    label: str, cmd: list[str], cwd: str,
    rc: int | None = None, duration: float | None = None,
) -> dict[str, Any]:
    """构造 logger 调用的 extra= 参数"""
    fields: dict[str, Any] = {"label": label, "command": cmd, "cwd": cwd}
    if rc is not None:
        fields["rc"] = rc
    if duration is not None:
        fields["duration"] = round(duration, 3)
    return fields


def _record_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: getattr(record, k) for k in COMMAND_FIELDS if hasattr(record, k)}


class JSONFormatter(logging.Formatter):
    """结构化 JSON 日志格式器

    输出示例:
        {"timestamp": "...", "level": "INFO", "logger": "psbuild.utils.shell",
         "message": "cmake 完成", "label": "cmake", "command": ["cmake", "."],
         "cwd": "/src/libpsl-native", "rc": 0, "duration": 1.52}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_entry.update(_record_fields(record))
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """文本格式器，外部命令记录追加退出码与耗时"""

    def __init__(self) -> None:
        super().__init__("%(asctime)s [%(levelname)-7s] %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        fields = _record_fields(record)
        if "rc" in fields:
            suffix = f"rc={fields['rc']}"
            if "duration" in fields:
                suffix += f" {fields['duration']:.1f}s"
            text += f" [{fields['label']} {suffix}]"
        return text


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """配置根日志器（输出到 stderr，重复调用不会叠加 handler）

    参数:
        level: 日志级别字符串（DEBUG, INFO, WARNING, ERROR, CRITICAL）
        json_output: 为 True 时使用 JSON 格式（CI 中通过 PSBUILD_LOG_JSON=1 开启）
    """
    root = logging.getLogger()
    reset_logging()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_output else TextFormatter())
    root.addHandler(handler)


def reset_logging() -> None:
    """清理根日志器上已注册的所有 handlers"""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
