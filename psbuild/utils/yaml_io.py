"""psbuild.yml 读取与生成文件写入

  - load_config_mapping: 读取 psbuild.yml 顶层映射，任何格式问题都以 ConfigError 报告
  - write_generated: 原子写入构建过程中生成的文件（开发版运行时配置等）
  - dump_config: `psbuild config` 的输出格式
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from psbuild.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

# 构建配置只包含路径与包元数据，超过该大小视为误指向了其他文件
MAX_CONFIG_SIZE = 256 * 1024


def load_config_mapping(path: str | Path) -> dict[str, Any]:
    """读取配置文件顶层映射

    文件不存在或为空返回空字典；过大、YAML 语法错误、
    顶层不是映射时抛 ConfigError。
    """
    p = Path(path)
    if not p.exists():
        logger.debug("配置文件不存在，使用默认配置: %s", p)
        return {}

    size = p.stat().st_size
    if size > MAX_CONFIG_SIZE:
        raise ConfigError(
            f"配置文件无效: {p}: 大小 {size} 字节超过限制 {MAX_CONFIG_SIZE} 字节"
        )

    try:
        with open(p, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"配置文件无效: {p}: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"配置文件无效: {p}: 不是 UTF-8 文本") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"配置文件无效: {p}: 顶层应为映射，实际为 {type(data).__name__}"
        )
    return data


def write_generated(path: Path, content: str, encoding: str = "utf-8") -> bool:
    """原子写入生成文件，内容未变化时不重写

    先写同目录临时文件再 os.replace，宿主程序不会读到写了一半的文件。
    返回是否实际写入。
    """
    if path.exists() and path.read_text(encoding=encoding) == content:
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding=encoding) as f:
            f.write(content)
        os.replace(tmp, path)
    except Exception:
        Path(tmp).unlink(missing_ok=True)
        raise
    return True


def dump_config(data: dict[str, Any]) -> str:
    """配置按字段声明顺序输出，保留中文描述"""
    return yaml.safe_dump(
        data, default_flow_style=False,
        allow_unicode=True, sort_keys=False,
    )
