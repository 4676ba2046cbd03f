"""核心数据模型

平台描述、工具链需求、构建配置、打包规格、开发启动选项等数据类集中定义，
各阶段统一从此处导入。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

# =========================================================================
# 平台模型
# =========================================================================


class OSFamily(str, Enum):
    """支持的操作系统家族"""

    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"


@dataclass(frozen=True)
class PlatformDescriptor:
    """平台描述 — 进程内只构造一次，之后只读传递给各阶段"""

    family: OSFamily

    @property
    def is_linux(self) -> bool:
        return self.family is OSFamily.LINUX

    @property
    def is_macos(self) -> bool:
        return self.family is OSFamily.MACOS

    @property
    def is_windows(self) -> bool:
        return self.family is OSFamily.WINDOWS

    @property
    def is_unix(self) -> bool:
        return self.family in (OSFamily.LINUX, OSFamily.MACOS)

    @property
    def shared_lib_ext(self) -> str:
        """原生共享库扩展名（Windows 不构建原生库，返回空串）"""
        return {OSFamily.LINUX: "so", OSFamily.MACOS: "dylib"}.get(self.family, "")

    @property
    def package_format(self) -> str:
        """fpm 目标包格式（Windows 不支持打包，返回空串）"""
        return {OSFamily.LINUX: "deb", OSFamily.MACOS: "osxpkg"}.get(self.family, "")

    @property
    def install_command(self) -> str:
        """依赖安装提示中使用的包管理器命令"""
        if self.is_macos:
            return "brew install"
        if self.is_linux:
            return "sudo apt-get install"
        return ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "family": self.family.value,
            "is_linux": self.is_linux,
            "is_macos": self.is_macos,
            "is_windows": self.is_windows,
        }


# =========================================================================
# 工具链 / 构建配置
# =========================================================================


@dataclass(frozen=True)
class ToolRequirement:
    """工具链需求：可执行文件名 + 安装提示"""

    name: str
    hint: str


class BuildConfiguration(str, Enum):
    """托管发布使用的构建配置"""

    LINUX = "Linux"
    DEBUG = "Debug"

    @classmethod
    def for_platform(cls, platform: PlatformDescriptor) -> BuildConfiguration:
        return cls.LINUX if platform.is_unix else cls.DEBUG


# =========================================================================
# 打包模型
# =========================================================================


@dataclass
class PathMapping:
    """fpm dir 源的路径映射: 源路径=安装路径"""

    source: str
    destination: str

    def to_arg(self) -> str:
        return f"{self.source}={self.destination}"


@dataclass
class PackageSpec:
    """打包规格 — 一次 fpm 调用所需的全部元数据"""

    name: str
    version: str
    iteration: int = 1
    maintainer: str = ""
    vendor: str = ""
    url: str = ""
    license: str = ""
    description: str = ""
    category: str = ""
    depends: list[str] = field(default_factory=list)        # 运行时依赖
    build_depends: list[str] = field(default_factory=list)  # 构建依赖
    package_format: str = "deb"                             # deb | osxpkg
    mappings: list[PathMapping] = field(default_factory=list)

    def to_fpm_args(self) -> list[str]:
        """转换为 fpm 命令行参数（不含可执行文件名）"""
        args = [
            "--force", "--verbose",
            "--name", self.name,
            "--version", self.version,
            "--iteration", str(self.iteration),
            "--maintainer", self.maintainer,
            "--vendor", self.vendor,
            "--url", self.url,
            "--license", self.license,
            "--description", self.description,
            "--category", self.category,
        ]
        for dep in self.depends:
            args += ["--depends", dep]
        if self.package_format == "deb":
            for dep in self.build_depends:
                args += ["--deb-build-depends", dep]
        args += ["-t", self.package_format, "-s", "dir"]
        args += [m.to_arg() for m in self.mappings]
        return args


# =========================================================================
# 开发启动模型
# =========================================================================


@dataclass
class DevLaunchOptions:
    """开发版启动选项"""

    arguments: list[str] = field(default_factory=list)
    load_profile: bool = False   # False 时自动前置 -noprofile
    zap_disable: bool = False    # 设置 COMPLUS_ZapDisable=1
    bin_dir: str = ""            # 为空则使用配置中的输出目录
    no_new_window: bool = False  # 前台等待子进程退出


# =========================================================================
# 流水线报告
# =========================================================================


@dataclass
class BuildReport:
    """完整构建流水线的执行报告"""

    platform: PlatformDescriptor
    output_dir: Path
    native_artifact: Path | None = None
    configuration: BuildConfiguration | None = None
    steps: list[dict[str, Any]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return any(s.get("step") == "publish" and s.get("status") == "done"
                   for s in self.steps)
