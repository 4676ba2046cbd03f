"""平台探测

按三个受支持的操作系统家族逐一查询运行时，得到唯一的 PlatformDescriptor。

回退规则:
  - 查询机制本身不可用（PlatformQueryUnavailable）时，确定性地回退为 Windows
    （旧运行时只存在于 Windows 上）
  - 其余任何异常原样抛出，不做静默降级
  - 查询结果不是恰好一个家族命中时抛 PlatformUnsupportedError
"""

from __future__ import annotations

import functools
import logging
import platform as _platform
from typing import Callable

from psbuild.core.exceptions import PlatformUnsupportedError
from psbuild.core.models import OSFamily, PlatformDescriptor

logger = logging.getLogger(__name__)

# 查询函数: 给定家族，返回当前运行时是否属于该家族
PlatformQuery = Callable[[OSFamily], bool]

_SYSTEM_NAMES = {
    OSFamily.LINUX: "Linux",
    OSFamily.MACOS: "Darwin",
    OSFamily.WINDOWS: "Windows",
}


class PlatformQueryUnavailable(Exception):
    """运行时不支持操作系统家族查询"""


def system_query(family: OSFamily) -> bool:
    """默认查询实现，基于 platform.system()"""
    system = _platform.system()
    if not system:
        raise PlatformQueryUnavailable("platform.system() 无法确定操作系统")
    return system == _SYSTEM_NAMES[family]


def detect_platform(query: PlatformQuery | None = None) -> PlatformDescriptor:
    """探测当前平台（幂等、无副作用）"""
    query = query or system_query
    try:
        hits = [family for family in OSFamily if query(family)]
    except PlatformQueryUnavailable as e:
        logger.warning("平台查询不可用 (%s)，回退为 windows", e)
        return PlatformDescriptor(OSFamily.WINDOWS)

    if len(hits) != 1:
        names = ", ".join(h.value for h in hits) or "无"
        raise PlatformUnsupportedError(f"无法识别的平台 (命中: {names})")
    return PlatformDescriptor(hits[0])


@functools.lru_cache(maxsize=None)
def current_platform() -> PlatformDescriptor:
    """进程级平台描述，只探测一次"""
    descriptor = detect_platform()
    logger.debug("平台探测结果: %s", descriptor.family.value)
    return descriptor
