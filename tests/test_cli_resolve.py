"""Tests for fastrest.cli — app resolution and the routes table."""

import os
import sys
import types

import pytest

from fastrest.app import App
from fastrest.cli import main
from fastrest.cli._resolve import resolve_app


def _index(request):
    return None


@pytest.fixture
def _fake_app_module(monkeypatch: pytest.MonkeyPatch) -> None:
    """Register a fake module with fastrest Apps on sys.modules."""
    mod = types.ModuleType("_fake_fastrest_app")
    mod.app = App()  # type: ignore[attr-defined]
    mod.app.get("/products", _index)
    mod.app.get("/products/{id}", "products.show")
    mod.custom = App()  # type: ignore[attr-defined]
    mod.create_app = App  # type: ignore[attr-defined]
    mod.broken_factory = lambda: 1 / 0  # type: ignore[attr-defined]
    mod.not_an_app = "just a string"  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "_fake_fastrest_app", mod)


@pytest.mark.usefixtures("_fake_app_module")
class TestResolveApp:
    def test_explicit_attribute(self) -> None:
        assert isinstance(resolve_app("_fake_fastrest_app:custom"), App)

    def test_default_attribute(self) -> None:
        """Omitting :attr defaults to 'app'."""
        assert resolve_app("_fake_fastrest_app") is sys.modules["_fake_fastrest_app"].app

    def test_factory(self) -> None:
        assert isinstance(resolve_app("_fake_fastrest_app:create_app"), App)

    def test_factory_error(self) -> None:
        with pytest.raises(TypeError, match="raised an error"):
            resolve_app("_fake_fastrest_app:broken_factory")

    def test_missing_module(self) -> None:
        with pytest.raises(ModuleNotFoundError):
            resolve_app("nonexistent_module_xyz:app")

    def test_missing_attribute(self) -> None:
        with pytest.raises(AttributeError):
            resolve_app("_fake_fastrest_app:does_not_exist")

    def test_wrong_type(self) -> None:
        with pytest.raises(TypeError, match=r"not a fastrest\.App instance"):
            resolve_app("_fake_fastrest_app:not_an_app")


@pytest.mark.usefixtures("_fake_app_module")
class TestRoutesCommand:
    def test_table(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", "_fake_fastrest_app:app"])
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].split() == ["METHOD", "PATH", "HANDLER"]
        assert lines[2].split() == ["GET", "/products", "_index"]
        assert lines[3].split() == ["GET", "/products/{id}", "products.show"]

    def test_empty(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", "_fake_fastrest_app:custom"])
        assert capsys.readouterr().out.strip() == "No routes registered."

    def test_bad_import(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", "_fake_fastrest_app:not_an_app"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err


class TestMain:
    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "fastrest" in capsys.readouterr().out

    def test_run_uses_env_file_and_app(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        served = {}

        def fake_run(self, host=None, port=None):
            served.update(host=host, port=port, debug=self.config.debug)

        env_file = tmp_path / ".env"
        env_file.write_text("FASTREST_TEST_FLAG=from-file\n")
        # Recorded so teardown also removes the value loaded from the file
        monkeypatch.setenv("FASTREST_TEST_FLAG", "unset")
        monkeypatch.delenv("FASTREST_TEST_FLAG")
        monkeypatch.setattr(App, "run", fake_run)
        monkeypatch.setattr("fastrest.cli._run.configure_logging", lambda config: None)

        mod = types.ModuleType("_fake_fastrest_run")
        mod.app = App()  # type: ignore[attr-defined]
        monkeypatch.setitem(sys.modules, "_fake_fastrest_run", mod)

        main(["run", "_fake_fastrest_run:app", "--port", "9001", "--env-file", str(env_file)])

        assert os.environ["FASTREST_TEST_FLAG"] == "from-file"
        assert served == {"host": None, "port": 9001, "debug": False}
