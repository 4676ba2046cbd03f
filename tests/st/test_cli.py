"""命令行接口系统测试"""

from __future__ import annotations

import importlib
import json
import os
import stat
import sys

import pytest
from click.testing import CliRunner

from psbuild.cli import main
from psbuild.services.container import ServiceContainer
from psbuild.utils.logger import reset_logging


@pytest.fixture()
def invoke(monkeypatch, tmp_path):
    """注入容器后调用 CLI"""

    def _invoke(container: ServiceContainer, *args: str):
        monkeypatch.setattr("psbuild.cli.get_container", lambda: container)
        runner = CliRunner()
        try:
            return runner.invoke(
                main, ["--config", str(tmp_path / "absent.yml"), *args],
            )
        finally:
            reset_logging()

    return _invoke


@pytest.fixture()
def linux_container(config, fake_executor, all_tools, linux):
    return ServiceContainer(
        config=config, platform=linux, executor=fake_executor, which=all_tools,
    )


class TestCli:
    def test_help_lists_commands(self) -> None:
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        for name in ("native", "publish", "build", "package", "dev", "platform", "check"):
            assert name in result.output

    def test_platform(self, invoke, linux_container) -> None:
        result = invoke(linux_container, "platform")
        assert result.exit_code == 0
        assert "linux" in result.output

    def test_check_ok(self, invoke, linux_container) -> None:
        result = invoke(linux_container, "check")
        assert result.exit_code == 0
        assert "cmake, g++, dotnet, fpm" in result.output

    def test_check_missing_tool(self, invoke, config, fake_executor, linux) -> None:
        container = ServiceContainer(
            config=config, platform=linux, executor=fake_executor,
            which=lambda n: None if n == "fpm" else f"/usr/bin/{n}",
        )
        result = invoke(container, "check")
        assert result.exit_code == 1
        assert "MISSING_DEPENDENCY" in result.output
        assert "gem install fpm" in result.output

    def test_build(self, invoke, linux_container, fake_executor, linux) -> None:
        fake_executor.on(
            ["make", "-j"],
            lambda cmd, cwd: linux_container.native.artifact_path(linux).write_text("ELF"),
        )
        result = invoke(linux_container, "build", "--restore")
        assert result.exit_code == 0, result.output
        assert ["dotnet", "restore"] in [c[:2] for c in fake_executor.calls]
        assert "构建完成" in result.output

    def test_build_compilation_failure(self, invoke, linux_container) -> None:
        result = invoke(linux_container, "build")
        assert result.exit_code == 1
        assert "COMPILATION_FAILURE" in result.output

    def test_native_on_windows_skips(self, invoke, config, fake_executor, windows) -> None:
        container = ServiceContainer(config=config, platform=windows, executor=fake_executor)
        result = invoke(container, "native")
        assert result.exit_code == 0
        assert "跳过" in result.output
        assert fake_executor.calls == []

    def test_publish_custom_output(self, invoke, linux_container, fake_executor, tmp_path) -> None:
        result = invoke(linux_container, "publish", "--output", str(tmp_path / "pub"))
        assert result.exit_code == 0, result.output
        cmd = fake_executor.calls[-1]
        assert cmd[cmd.index("--output") + 1] == str(tmp_path / "pub")

    def test_package_on_windows(self, invoke, config, fake_executor, windows) -> None:
        container = ServiceContainer(config=config, platform=windows, executor=fake_executor)
        result = invoke(container, "package", "--version", "1.0.0")
        assert result.exit_code == 1
        assert "PLATFORM_UNSUPPORTED" in result.output

    def test_package_version_and_iteration(
        self, invoke, linux_container, fake_executor, config,
    ) -> None:
        config.output_path.mkdir(parents=True)
        (config.output_path / "powershell").write_text("#!")
        result = invoke(linux_container, "package", "--version", "2.0.0", "--iteration", "4")
        assert result.exit_code == 0, result.output
        cmd = fake_executor.calls[-1]
        assert cmd[cmd.index("--version") + 1] == "2.0.0"
        assert cmd[cmd.index("--iteration") + 1] == "4"

    def test_dev_no_new_window(self, invoke, linux_container, fake_executor, config) -> None:
        config.output_path.mkdir(parents=True)
        result = invoke(
            linux_container, "dev", "--no-new-window", "--zap-disable", "--", "-c", "1+1",
        )
        assert result.exit_code == 0, result.output
        spawned = fake_executor.spawned[0]
        assert spawned["cmd"][1:] == ["-noprofile", "-c", "1+1"]
        assert spawned["env"]["COMPLUS_ZapDisable"] == "1"
        assert "已退出" in result.output

    def test_config_show(self, invoke, linux_container) -> None:
        result = invoke(linux_container, "config")
        assert result.exit_code == 0
        assert "framework: netstandardapp1.5" in result.output

    def test_package_custom_output(
        self, invoke, linux_container, fake_executor, config, tmp_path,
    ) -> None:
        custom = tmp_path / "staged"
        custom.mkdir()
        exe = custom / "powershell"
        exe.write_text("#!")
        os.chmod(exe, 0o700)
        result = invoke(linux_container, "package", "--version", "1.0.0", "--output", str(custom))
        assert result.exit_code == 0, result.output
        assert f"{custom}/=/usr/local/share/powershell/" in fake_executor.calls[-1]
        assert stat.S_IMODE(exe.stat().st_mode) == 0o777
        assert not config.output_path.exists()

    def test_json_log_carries_command_fields(
        self, invoke, linux_container, monkeypatch, tmp_path,
    ) -> None:
        monkeypatch.setenv("PSBUILD_LOG_JSON", "1")
        result = invoke(linux_container, "publish", "--output", str(tmp_path / "pub"))
        assert result.exit_code == 0, result.output
        entries = [
            json.loads(line) for line in result.output.splitlines()
            if line.startswith("{")
        ]
        done = [e for e in entries if e.get("label") == "dotnet publish" and "rc" in e]
        assert len(done) == 1
        assert done[0]["rc"] == 0
        assert done[0]["command"][:2] == ["dotnet", "publish"]
        assert done[0]["logger"] == "psbuild.utils.shell"


class TestModuleEntry:
    def test_import_does_not_run_cli(self, monkeypatch) -> None:
        called: list[bool] = []
        monkeypatch.setattr("psbuild.cli.main", lambda *a, **k: called.append(True))
        monkeypatch.delitem(sys.modules, "psbuild.__main__", raising=False)
        module = importlib.import_module("psbuild.__main__")
        assert module.main is not None
        assert called == []
