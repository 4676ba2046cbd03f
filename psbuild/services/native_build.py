"""原生构建阶段 — libpsl-native

仅在 Linux / macOS 上执行，Windows 上直接跳过且不调用任何工具。

步骤（每步都是下一步的前置闸门）:
  1. 校验 cmake / g++
  2. 在原生库目录内执行 cmake(Debug) → make -j → make test
  3. 校验产物存在（工具返回成功也要校验）
  4. 复制产物到构建输出目录
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from psbuild.core.config import Config
    from psbuild.core.toolchain import Resolver
    from psbuild.utils.shell import CommandExecutor

from psbuild.core.exceptions import CompilationError, ConfigError
from psbuild.core.models import PlatformDescriptor
from psbuild.core.toolchain import native_requirements, require_tools
from psbuild.utils.fs import pushd
from psbuild.utils.shell import run_cmd

logger = logging.getLogger(__name__)


class NativeBuildStage:
    """原生库构建"""

    build_type = "Debug"

    def __init__(
        self, config: Config,
        executor: CommandExecutor | None = None,
        which: Resolver | None = None,
    ) -> None:
        self.config = config
        self._executor = executor
        self._which = which

    def artifact_name(self, platform: PlatformDescriptor) -> str:
        return f"{self.config.native_lib_name}.{platform.shared_lib_ext}"

    def artifact_path(self, platform: PlatformDescriptor) -> Path:
        """原生构建系统产出的库文件路径"""
        return self.config.native_path / "src" / self.artifact_name(platform)

    def build(
        self, platform: PlatformDescriptor, output_dir: Path | None = None,
    ) -> Path | None:
        """构建原生库并复制到输出目录，Windows 返回 None"""
        if not platform.is_unix:
            logger.info("原生构建跳过: %s 平台无需原生库", platform.family.value)
            return None

        require_tools(native_requirements(platform), which=self._which)

        output_dir = output_dir or self.config.output_path
        native_dir = self.config.native_path
        if not native_dir.is_dir():
            raise ConfigError(f"原生库目录不存在: {native_dir}")
        with pushd(native_dir):
            self._run(["cmake", f"-DCMAKE_BUILD_TYPE={self.build_type}", "."],
                      native_dir, "cmake")
            self._run(["make", "-j"], native_dir, "make")
            self._run(["make", "test"], native_dir, "make test")

        lib = self.artifact_path(platform)
        if not lib.is_file():
            raise CompilationError(f"编译 {lib} 失败: 产物不存在", artifact=str(lib))

        output_dir.mkdir(parents=True, exist_ok=True)
        dest = output_dir / lib.name
        shutil.copy2(lib, dest)
        logger.info("原生库已复制: %s -> %s", lib, dest)
        return dest

    def _run(self, cmd: list[str], cwd: Path, label: str) -> None:
        run_cmd(
            cmd, cwd=str(cwd), label=label,
            timeout=self.config.command_timeout,
            executor=self._executor,
            error_cls=CompilationError,
        )
