"""开发启动阶段 — 以开发模式启动本地构建的宿主程序

DevLaunchSession 是一个作用域资源: 进入时设置环境变量，退出时无论
正常返回、启动失败还是其他异常，都会删除本次设置的全部变量。
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from psbuild.core.config import Config
    from psbuild.utils.shell import CommandExecutor

from psbuild.core.exceptions import LaunchError
from psbuild.core.models import DevLaunchOptions, PlatformDescriptor
from psbuild.utils.shell import get_executor
from psbuild.utils.yaml_io import write_generated

logger = logging.getLogger(__name__)

DEVPATH_VAR = "DEVPATH"
ZAP_DISABLE_VAR = "COMPLUS_ZapDisable"
NO_PROFILE_FLAG = "-noprofile"

RUNTIME_CONFIG = """<?xml version="1.0" encoding="utf-8" ?>
<configuration>
    <runtime>
        <developmentMode developerInstallation="true"/>
    </runtime>
</configuration>
"""


class DevLaunchSession:
    """进程环境变量会话"""

    def __init__(self, variables: dict[str, str]) -> None:
        self.variables = dict(variables)
        self._applied: list[str] = []

    def __enter__(self) -> DevLaunchSession:
        for key, value in self.variables.items():
            os.environ[key] = value
            self._applied.append(key)
            logger.debug("设置环境变量: %s=%s", key, value)
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        while self._applied:
            key = self._applied.pop()
            os.environ.pop(key, None)
            logger.debug("清除环境变量: %s", key)


class DevLauncher:
    """开发版宿主程序启动器"""

    def __init__(
        self, config: Config, platform: PlatformDescriptor,
        executor: CommandExecutor | None = None,
    ) -> None:
        self.config = config
        self.platform = platform
        self._executor = executor

    def executable_path(self, bin_dir: Path) -> Path:
        name = self.config.executable_name
        if self.platform.is_windows and not name.endswith(".exe"):
            name += ".exe"
        return bin_dir / name

    @staticmethod
    def session_variables(options: DevLaunchOptions, bin_dir: Path) -> dict[str, str]:
        variables = {DEVPATH_VAR: str(bin_dir)}
        if options.zap_disable:
            variables[ZAP_DISABLE_VAR] = "1"
        return variables

    @staticmethod
    def build_arguments(options: DevLaunchOptions) -> list[str]:
        args = list(options.arguments)
        if not options.load_profile:
            args.insert(0, NO_PROFILE_FLAG)
        return args

    def ensure_runtime_config(self, executable: Path) -> Path:
        """运行时配置文件不存在时生成启用开发者模式的最小配置"""
        config_file = executable.with_name(executable.name + ".config")
        if not config_file.exists():
            write_generated(config_file, RUNTIME_CONFIG, encoding="ascii")
            logger.info("已生成运行时配置: %s", config_file)
        return config_file

    def launch(self, options: DevLaunchOptions) -> subprocess.Popen:
        """启动开发版宿主程序；no_new_window 时前台等待其退出"""
        bin_dir = (
            self.config.resolve(options.bin_dir) if options.bin_dir
            else self.config.output_path
        )
        executable = self.executable_path(bin_dir)
        executor = self._executor or get_executor()

        with DevLaunchSession(self.session_variables(options, bin_dir)):
            if not bin_dir.is_dir():
                raise LaunchError(f"二进制目录不存在: {bin_dir}，请先执行 build")
            self.ensure_runtime_config(executable)
            cmd = [str(executable), *self.build_arguments(options)]
            logger.info("启动开发版: %s", " ".join(cmd))
            try:
                proc = executor.spawn(
                    cmd, cwd=str(bin_dir), new_window=not options.no_new_window,
                )
            except OSError as e:
                raise LaunchError(f"无法启动 {executable}: {e}") from e
            if options.no_new_window:
                rc = proc.wait()
                logger.info("开发版已退出 (rc=%s)", rc)
        return proc
