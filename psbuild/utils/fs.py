"""文件系统工具 — 作用域内切换工作目录、权限规整"""

from __future__ import annotations

import contextlib
import logging
import os
import stat
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def pushd(path: str | Path) -> Iterator[Path]:
    """切换到 path，退出时（含异常）恢复原工作目录"""
    previous = Path.cwd()
    os.chdir(path)
    logger.debug("进入目录: %s", path)
    try:
        yield Path(path)
    finally:
        os.chdir(previous)
        logger.debug("恢复目录: %s", previous)


def _mirror_owner_bits(mode: int) -> int:
    """group / other 权限位设置为与 owner 相同（等价 chmod go=u）"""
    owner = (mode & stat.S_IRWXU) >> 6
    return (mode & ~(stat.S_IRWXG | stat.S_IRWXO)) | (owner << 3) | owner


def mirror_owner_permissions(root: str | Path) -> int:
    """递归规整 root 下所有文件和目录的权限，返回处理的条目数"""
    root = Path(root)
    count = 0
    for p in [root, *root.rglob("*")]:
        if p.is_symlink():
            continue
        mode = p.stat().st_mode
        os.chmod(p, _mirror_owner_bits(stat.S_IMODE(mode)))
        count += 1
    logger.info("已规整权限 (go=u): %s (%d 项)", root, count)
    return count
