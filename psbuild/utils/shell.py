"""Shell 命令执行工具 — 统一子进程调用

通过 CommandExecutor 协议抽象子进程执行，方便测试替换和跨平台适配。
所有外部工具（cmake / make / dotnet / fpm / git / 开发版宿主程序）都经由此处调用。
"""

from __future__ import annotations

import logging
import subprocess
import time
from dataclasses import dataclass
from typing import Protocol

from psbuild.core.exceptions import ExecutionError
from psbuild.utils.logger import command_fields

logger = logging.getLogger(__name__)


# =========================================================================
# 命令执行结果
# =========================================================================

@dataclass
class CommandResult:
    """命令执行结果（与 subprocess 解耦）"""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """合并后的输出，用于错误信息原样透传"""
        return "\n".join(s for s in (self.stdout.strip(), self.stderr.strip()) if s)


# =========================================================================
# 命令执行器协议
# =========================================================================

class CommandExecutor(Protocol):
    """命令执行器协议 — 抽象子进程调用

    execute 阻塞直到子进程退出；spawn 启动子进程后立即返回句柄。
    测试时可注入 mock 实现，无需 patch subprocess。
    """

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        """执行命令并返回结果"""
        ...

    def spawn(
        self, cmd: list[str], *, cwd: str = ".", new_window: bool = False,
    ) -> subprocess.Popen:
        """启动子进程并返回句柄"""
        ...


# =========================================================================
# 默认实现: 本地执行器
# =========================================================================

class LocalExecutor:
    """本地命令执行器（默认实现）"""

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        r = subprocess.run(
            cmd, capture_output=True, text=True,
            encoding="utf-8", errors="replace",
            cwd=cwd, env=env, check=False, timeout=timeout,
        )
        return CommandResult(
            returncode=r.returncode,
            stdout=r.stdout,
            stderr=r.stderr,
        )

    def spawn(
        self, cmd: list[str], *, cwd: str = ".", new_window: bool = False,
    ) -> subprocess.Popen:
        flags = 0
        if new_window:
            # 仅 Windows 定义该常量，其余平台子进程始终共享当前终端
            flags = getattr(subprocess, "CREATE_NEW_CONSOLE", 0)
        return subprocess.Popen(cmd, cwd=cwd, creationflags=flags)


# =========================================================================
# 全局默认执行器（可替换）
# =========================================================================

_default_executor: CommandExecutor = LocalExecutor()


def get_executor() -> CommandExecutor:
    """获取全局默认命令执行器"""
    return _default_executor


def set_executor(executor: CommandExecutor) -> None:
    """替换全局默认命令执行器（用于测试）"""
    global _default_executor  # noqa: PLW0603
    _default_executor = executor


# =========================================================================
# 便捷函数
# =========================================================================

def run_cmd(
    cmd: list[str], *, cwd: str = ".",
    env: dict[str, str] | None = None,
    label: str = "cmd",
    timeout: int | None = None,
    executor: CommandExecutor | None = None,
    error_cls: type[ExecutionError] = ExecutionError,
) -> CommandResult:
    """执行命令，失败抛 error_cls（默认 ExecutionError）

    Args:
        cmd: 命令参数列表
        cwd: 工作目录
        env: 环境变量（不传则继承当前进程）
        label: 日志标签
        timeout: 超时秒数（None 表示无限等待）
        executor: 命令执行器（不传则使用全局默认）
        error_cls: 失败时抛出的异常类型
    """
    executor = executor or get_executor()
    logger.info("  %s: %s (cwd=%s)", label, " ".join(cmd), cwd,
                extra=command_fields(label, cmd, cwd))
    start = time.monotonic()
    try:
        r = executor.execute(cmd, cwd=cwd, env=env, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        raise error_cls(f"{label}超时 ({e.timeout}s): {' '.join(cmd)}") from e
    except OSError as e:
        raise error_cls(f"{label}无法执行: {e}") from e
    fields = command_fields(label, cmd, cwd, r.returncode, time.monotonic() - start)
    if r.stdout:
        logger.debug("%s stdout:\n%s", label, r.stdout.rstrip())
    if not r.success:
        logger.error("  %s 失败", label, extra=fields)
        raise error_cls(f"{label}失败 (rc={r.returncode}): {r.output}")
    logger.info("  %s 完成", label, extra=fields)
    return r
