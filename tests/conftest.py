"""测试共享 fixture — 录制型命令执行器 + 临时项目目录

FakeExecutor 实现 CommandExecutor 协议，记录每次调用的命令和工作目录，
可按命令前缀注册处理函数（写入产物文件、返回失败码等），无需真实工具链。
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable
from unittest.mock import MagicMock

import pytest

from psbuild.core.config import Config
from psbuild.core.models import OSFamily, PlatformDescriptor
from psbuild.utils.shell import CommandResult

Handler = Callable[[list[str], str], object]


class FakeExecutor:
    """录制型执行器 — 处理函数返回 CommandResult 时作为命令结果，其余返回值忽略"""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.cwds: list[str] = []
        self.spawned: list[dict] = []
        self.spawn_error: Exception | None = None
        self._handlers: list[tuple[list[str], Handler]] = []

    def on(self, prefix: list[str], handler: Handler) -> None:
        self._handlers.append((prefix, handler))

    def fail(self, prefix: list[str], rc: int = 1, stderr: str = "boom") -> None:
        self.on(prefix, lambda cmd, cwd: CommandResult(rc, "", stderr))

    def reply(self, prefix: list[str], stdout: str) -> None:
        self.on(prefix, lambda cmd, cwd: CommandResult(0, stdout, ""))

    def execute(self, cmd, *, cwd=".", env=None, timeout=None) -> CommandResult:
        self.calls.append(list(cmd))
        self.cwds.append(cwd)
        for prefix, handler in self._handlers:
            if cmd[:len(prefix)] == prefix:
                result = handler(list(cmd), cwd)
                if isinstance(result, CommandResult):
                    return result
        return CommandResult(0, "", "")

    def spawn(self, cmd, *, cwd=".", new_window=False):
        self.spawned.append({
            "cmd": list(cmd), "cwd": cwd, "new_window": new_window,
            "env": {k: os.environ.get(k) for k in ("DEVPATH", "COMPLUS_ZapDisable")},
        })
        if self.spawn_error is not None:
            raise self.spawn_error
        proc = MagicMock()
        proc.pid = 4242
        proc.returncode = 0
        proc.wait.return_value = 0
        return proc

    def commands(self) -> list[str]:
        return [" ".join(c[:2]) for c in self.calls]


@pytest.fixture()
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    """最小项目目录: 原生库源码目录 + 启动脚本"""
    (tmp_path / "src" / "libpsl-native" / "src").mkdir(parents=True)
    (tmp_path / "package").mkdir()
    (tmp_path / "package" / "powershell").write_text("#!/bin/sh\n")
    return tmp_path


@pytest.fixture()
def config(project: Path) -> Config:
    return Config(root_dir=str(project))


@pytest.fixture()
def all_tools() -> Callable[[str], str]:
    return lambda name: f"/usr/bin/{name}"


@pytest.fixture()
def linux() -> PlatformDescriptor:
    return PlatformDescriptor(OSFamily.LINUX)


@pytest.fixture()
def macos() -> PlatformDescriptor:
    return PlatformDescriptor(OSFamily.MACOS)


@pytest.fixture()
def windows() -> PlatformDescriptor:
    return PlatformDescriptor(OSFamily.WINDOWS)
