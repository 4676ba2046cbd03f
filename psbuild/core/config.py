"""集中配置管理

替代各阶段散落的路径 / 元数据常量，提供统一的配置入口。
支持从 YAML 文件加载 + 编程式覆盖；相对路径均以 root_dir 为基准解析。
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path

from psbuild.utils.yaml_io import load_config_mapping

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "psbuild.yml"


def _default_runtime_depends() -> dict[str, list[str]]:
    return {"deb": ["libunwind8", "libicu52"], "osxpkg": []}


@dataclass
class Config:
    """构建编排全局配置"""

    # 目录
    root_dir: str = "."
    output_dir: str = "bin"
    native_dir: str = "src/libpsl-native"
    native_lib_name: str = "libpsl-native"

    # 托管发布
    host_project: str = "src/Microsoft.PowerShell.Linux.Host"
    framework: str = "netstandardapp1.5"
    executable_name: str = "powershell"

    # 打包
    launcher_script: str = "package/powershell"
    install_share_dir: str = "/usr/local/share/powershell/"
    install_bin_path: str = "/usr/local/bin/powershell"
    package_name: str = "powershell"
    maintainer: str = "PowerShell Team <powershell@example.com>"
    vendor: str = "PowerShell"
    url: str = "https://github.com/PowerShell/PowerShell"
    license: str = "Unlicensed"
    description: str = (
        "Open PowerShell on .NET Core\n"
        "PowerShell is an open source, cross-platform, scripting language "
        "and rich object model for system and application management."
    )
    category: str = "shells"
    runtime_depends: dict[str, list[str]] = field(default_factory=_default_runtime_depends)
    build_depends: list[str] = field(default_factory=lambda: ["g++", "cmake"])

    # 执行（None 表示不设超时，外部工具挂起则整个流水线挂起）
    command_timeout: int | None = None

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_config_mapping(path)
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def to_dict(self) -> dict:
        return asdict(self)

    # ---- 路径解析 ----

    def resolve(self, path: str) -> Path:
        """将配置中的路径按 root_dir 解析为绝对路径"""
        p = Path(path)
        if p.is_absolute():
            return p
        return (Path(self.root_dir) / p).resolve()

    @property
    def root_path(self) -> Path:
        return Path(self.root_dir).resolve()

    @property
    def output_path(self) -> Path:
        return self.resolve(self.output_dir)

    @property
    def native_path(self) -> Path:
        return self.resolve(self.native_dir)


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = DEFAULT_CONFIG_FILE) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
