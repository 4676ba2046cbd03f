"""构建流水线 — 原生构建 → (restore) → 托管发布

步骤顺序：
1. native  - 原生库构建并复制到输出目录（Windows 跳过）
2. restore - 还原托管依赖（仅 --restore 时执行）
3. publish - 发布托管宿主程序，覆盖整个输出目录

任一步骤失败立即中止，不回滚已生成的输出目录。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from psbuild.core.config import Config
    from psbuild.services.managed_build import ManagedBuildStage
    from psbuild.services.native_build import NativeBuildStage

from psbuild.core.models import BuildReport, PlatformDescriptor

logger = logging.getLogger(__name__)


class BuildPipeline:
    """完整构建编排"""

    def __init__(
        self, config: Config, native: NativeBuildStage, managed: ManagedBuildStage,
    ) -> None:
        self.config = config
        self.native = native
        self.managed = managed

    def build(
        self, platform: PlatformDescriptor, *,
        restore: bool = False, output_dir: Path | None = None,
    ) -> BuildReport:
        output_dir = output_dir or self.config.output_path
        output_dir.mkdir(parents=True, exist_ok=True)
        report = BuildReport(platform=platform, output_dir=output_dir)

        # 原生产物必须先进入输出目录，publish 才会把它一并发布
        artifact = self.native.build(platform, output_dir)
        report.native_artifact = artifact
        if artifact is None:
            report.steps.append({"step": "native", "status": "skipped"})
        else:
            report.steps.append({"step": "native", "status": "done",
                                 "artifact": str(artifact)})
        logger.info("[Step 1] 原生构建: %s", report.steps[-1]["status"])

        if restore:
            self.managed.restore()
            report.steps.append({"step": "restore", "status": "done"})
        else:
            report.steps.append({"step": "restore", "status": "skipped"})
        logger.info("[Step 2] 依赖还原: %s", report.steps[-1]["status"])

        report.configuration = self.managed.publish(platform, output_dir)
        report.steps.append({"step": "publish", "status": "done",
                             "configuration": report.configuration.value})
        logger.info("[Step 3] 托管发布完成: %s -> %s",
                    report.configuration.value, output_dir)
        return report
