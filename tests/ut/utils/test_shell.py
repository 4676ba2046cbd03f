"""shell.py run_cmd / LocalExecutor 单元测试"""

from __future__ import annotations

import logging
import os
import subprocess
import sys

import pytest

from psbuild.core.exceptions import CompilationError, ExecutionError, PublishError
from psbuild.utils.shell import (
    CommandResult,
    LocalExecutor,
    get_executor,
    run_cmd,
    set_executor,
)


class TestRunCmd:
    def test_success(self, tmp_path) -> None:
        r = run_cmd(["echo", "hello"], cwd=str(tmp_path), label="test")
        assert r.returncode == 0
        assert "hello" in r.stdout

    def test_failure_raises_execution_error(self, tmp_path) -> None:
        with pytest.raises(ExecutionError, match="cmd失败"):
            run_cmd(["false"], cwd=str(tmp_path))

    def test_custom_label_and_error_cls(self, tmp_path) -> None:
        with pytest.raises(PublishError, match="dotnet publish失败"):
            run_cmd(["false"], cwd=str(tmp_path), label="dotnet publish",
                    error_cls=PublishError)

    def test_env_passed(self, tmp_path) -> None:
        env = {**os.environ, "MY_TEST_VAR": "42"}
        r = run_cmd(["env"], cwd=str(tmp_path), env=env, label="env_test")
        assert "MY_TEST_VAR=42" in r.stdout

    def test_output_passed_verbatim(self, fake_executor) -> None:
        fake_executor.on(["fpm"], lambda cmd, cwd: CommandResult(2, "out", "gem missing"))
        with pytest.raises(ExecutionError) as exc:
            run_cmd(["fpm", "-t", "deb"], executor=fake_executor)
        assert "rc=2" in str(exc.value)
        assert "out\ngem missing" in str(exc.value)

    def test_missing_executable_wrapped(self, tmp_path) -> None:
        with pytest.raises(ExecutionError, match="无法执行"):
            run_cmd(["psbuild-no-such-tool-xyz"], cwd=str(tmp_path))

    def test_timeout_wrapped(self, tmp_path) -> None:
        with pytest.raises(ExecutionError, match="超时"):
            run_cmd(["sleep", "5"], cwd=str(tmp_path), timeout=1)


class TestExecutorRegistry:
    def test_set_and_restore(self, fake_executor) -> None:
        original = get_executor()
        set_executor(fake_executor)
        try:
            run_cmd(["cmake", "."])
            assert fake_executor.calls == [["cmake", "."]]
        finally:
            set_executor(original)
        assert isinstance(get_executor(), LocalExecutor)


class TestLocalExecutor:
    def test_spawn_returns_handle(self, tmp_path) -> None:
        proc = LocalExecutor().spawn(["true"], cwd=str(tmp_path))
        assert isinstance(proc, subprocess.Popen)
        assert proc.wait() == 0

    def test_non_utf8_stderr_reported_as_tool_failure(self, tmp_path) -> None:
        script = (
            "import sys; sys.stderr.buffer.write(b'error: \\xff\\xfe bad\\n'); "
            "sys.exit(2)"
        )
        with pytest.raises(CompilationError, match="rc=2") as exc:
            run_cmd([sys.executable, "-c", script], cwd=str(tmp_path),
                    label="make", error_cls=CompilationError)
        assert "error:" in str(exc.value)
        assert "bad" in str(exc.value)

    def test_non_utf8_stdout_on_success(self, tmp_path) -> None:
        script = "import sys; sys.stdout.buffer.write(b'built \\xe9\\n')"
        r = LocalExecutor().execute([sys.executable, "-c", script], cwd=str(tmp_path))
        assert r.returncode == 0
        assert "built" in r.stdout


class TestRunCmdLogFields:
    """run_cmd 日志记录携带的结构化字段"""

    def test_completion_record(self, fake_executor, caplog) -> None:
        caplog.set_level(logging.INFO, logger="psbuild.utils.shell")
        run_cmd(["cmake", "."], cwd="/src/native", label="cmake", executor=fake_executor)
        done = [r for r in caplog.records if hasattr(r, "rc")]
        assert len(done) == 1
        assert done[0].label == "cmake"
        assert done[0].command == ["cmake", "."]
        assert done[0].cwd == "/src/native"
        assert done[0].rc == 0
        assert done[0].duration >= 0

    def test_failure_record_has_rc(self, fake_executor, caplog) -> None:
        caplog.set_level(logging.INFO, logger="psbuild.utils.shell")
        fake_executor.fail(["make"], rc=7)
        with pytest.raises(CompilationError):
            run_cmd(["make", "-j"], label="make", executor=fake_executor,
                    error_cls=CompilationError)
        failed = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert [(r.label, r.rc) for r in failed] == [("make", 7)]
