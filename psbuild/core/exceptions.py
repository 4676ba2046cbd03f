"""统一异常体系

所有业务异常继承 PSBuildError，替代散落的 RuntimeError / FileNotFoundError。
CLI 层据此输出友好提示并以非零码退出；除平台探测回退外，任何异常都不会被静默降级。
"""

from __future__ import annotations


class PSBuildError(Exception):
    """框架基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(PSBuildError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ExecutionError(PSBuildError):
    """外部命令执行失败（非零退出码或超时）"""

    code = "EXECUTION_ERROR"


class PlatformUnsupportedError(PSBuildError):
    """当前平台不支持该操作"""

    code = "PLATFORM_UNSUPPORTED"


class MissingDependencyError(PSBuildError):
    """必需的可执行文件不在 PATH 中"""

    code = "MISSING_DEPENDENCY"

    def __init__(self, name: str, hint: str) -> None:
        super().__init__(
            f"构建依赖 '{name}' 未在 PATH 中找到！请执行: {hint}"
        )
        self.name = name
        self.hint = hint


class CompilationError(ExecutionError):
    """原生库编译失败，或工具报告成功但未产出预期产物"""

    code = "COMPILATION_FAILURE"

    def __init__(self, message: str, artifact: str = "") -> None:
        super().__init__(message)
        self.artifact = artifact


class PublishError(ExecutionError):
    """托管运行时 restore / publish 失败"""

    code = "PUBLISH_FAILURE"


class MissingBuildOutputError(PSBuildError):
    """打包前未找到构建产物"""

    code = "MISSING_BUILD_OUTPUT"


class PackagingError(ExecutionError):
    """打包工具执行失败"""

    code = "PACKAGING_FAILURE"


class LaunchError(PSBuildError):
    """开发版可执行文件无法启动"""

    code = "LAUNCH_FAILURE"
