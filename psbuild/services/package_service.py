"""打包阶段 — 通过 fpm 生成 deb / osxpkg

纯下游消费者: 只读取已发布的输出目录，从不触发构建。

前置检查顺序:
  1. Windows 直接拒绝（不调用任何外部工具）
  2. fpm 可解析
  3. 输出目录中存在已发布的宿主可执行文件
版本解析: 显式参数优先，否则取 git describe 并去掉前导 v。
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from psbuild.core.config import Config
    from psbuild.core.toolchain import Resolver
    from psbuild.utils.shell import CommandExecutor

from psbuild.core.exceptions import (
    MissingBuildOutputError,
    PackagingError,
    PlatformUnsupportedError,
)
from psbuild.core.models import PackageSpec, PathMapping, PlatformDescriptor
from psbuild.core.toolchain import package_requirements, require_tools
from psbuild.utils.fs import mirror_owner_permissions
from psbuild.utils.shell import run_cmd

logger = logging.getLogger(__name__)

_CREATED_RE = re.compile(r':path=>"([^"]+)"')


def strip_version_prefix(tag: str) -> str:
    """去掉标签的前导版本前缀字符: v1.2.3 -> 1.2.3"""
    return re.sub(r"^v", "", tag.strip())


class PackageService:
    """系统安装包构建"""

    def __init__(
        self, config: Config,
        executor: CommandExecutor | None = None,
        which: Resolver | None = None,
    ) -> None:
        self.config = config
        self._executor = executor
        self._which = which

    # ---- 版本 ----

    def describe_version(self) -> str:
        """从版本控制的最近标签解析版本号"""
        root = self.config.root_path
        r = run_cmd(
            ["git", f"--git-dir={root / '.git'}", "describe"],
            cwd=str(root), label="git describe",
            executor=self._executor, error_cls=PackagingError,
        )
        return strip_version_prefix(r.stdout)

    def resolve_version(self, version: str | None = None) -> str:
        resolved = version or self.describe_version()
        if not resolved:
            raise PackagingError("无法确定包版本: 未指定 --version 且版本标签为空")
        return resolved

    # ---- 规格 ----

    def build_spec(
        self, platform: PlatformDescriptor, version: str, iteration: int = 1,
        output_dir: Path | None = None,
    ) -> PackageSpec:
        cfg = self.config
        output_dir = output_dir or cfg.output_path
        fmt = platform.package_format
        return PackageSpec(
            name=cfg.package_name,
            version=version,
            iteration=iteration,
            maintainer=cfg.maintainer,
            vendor=cfg.vendor,
            url=cfg.url,
            license=cfg.license,
            description=cfg.description,
            category=cfg.category,
            depends=list(cfg.runtime_depends.get(fmt, [])),
            build_depends=list(cfg.build_depends),
            package_format=fmt,
            mappings=[
                PathMapping(f"{output_dir}/", cfg.install_share_dir),
                PathMapping(str(cfg.resolve(cfg.launcher_script)), cfg.install_bin_path),
            ],
        )

    # ---- 打包 ----

    def package(
        self, platform: PlatformDescriptor,
        version: str | None = None, iteration: int = 1,
        output_dir: Path | None = None,
    ) -> Path | None:
        """生成安装包，返回 fpm 报告的包路径（未报告时返回 None）"""
        if platform.is_windows:
            raise PlatformUnsupportedError("暂不支持构建 Windows 安装包")

        require_tools(package_requirements(platform), which=self._which)

        output_dir = output_dir or self.config.output_path
        executable = output_dir / self.config.executable_name
        if not executable.exists():
            raise MissingBuildOutputError(
                f"未找到已发布的可执行文件 {executable}，请先执行 build",
            )

        mirror_owner_permissions(output_dir)

        spec = self.build_spec(
            platform, self.resolve_version(version), iteration, output_dir,
        )
        logger.info("开始打包: %s %s-%d (%s)",
                    spec.name, spec.version, spec.iteration, spec.package_format)
        root = self.config.root_path
        r = run_cmd(
            ["fpm", *spec.to_fpm_args()],
            cwd=str(root), label="fpm",
            timeout=self.config.command_timeout,
            executor=self._executor, error_cls=PackagingError,
        )

        m = _CREATED_RE.search(r.output)
        if m is None:
            logger.warning("fpm 未报告生成的包路径")
            return None
        package_path = root / m.group(1)
        logger.info("安装包已生成: %s", package_path)
        return package_path
