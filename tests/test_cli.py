"""Tests for wren.cli — entrypoint, argument parsing, and ``wren routes``."""

import types

import pytest

from wren.app import App
from wren.cli import main
from wren.cli._routes import format_routes
from wren.routing.route import get, post
from wren.routing.table import define_routes


def _show(path_params):
    return {"id": path_params.id}


def _routes():
    return define_routes(
        "accounts",
        {
            "/users/:id": {"GET": get("/users/:id", {"id": int}).with_action(_show)},
            "/users": {"POST": post("/users")},
            "/health": {"GET": get("/health").with_auth_disabled().with_action(lambda: "ok")},
        },
    )


@pytest.fixture
def _fake_routes_module(monkeypatch: pytest.MonkeyPatch) -> None:
    mod = types.ModuleType("_fake_wren_routes")
    mod.routes = _routes()  # type: ignore[attr-defined]
    monkeypatch.setitem(__import__("sys").modules, "_fake_wren_routes", mod)


class TestCLIHelp:
    def test_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0

    def test_run_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "--help"])
        assert exc_info.value.code == 0


class TestCLIMissingArgs:
    def test_run_missing_app(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["run"])
        assert exc_info.value.code == 2

    def test_routes_missing_app(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes"])
        assert exc_info.value.code == 2


class TestCLINoCommand:
    def test_no_command_exits_zero(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "wren" in capsys.readouterr().out


class TestFormatRoutes:
    def test_rows_in_registration_order(self) -> None:
        lines = format_routes(_routes()["accounts"])
        assert lines[0].split() == ["METHOD", "PATH", "AUTH", "HANDLER"]
        assert set(lines[1]) == {"-"}
        assert lines[2].split() == ["GET", "/accounts/users/:id", "bearer", "_show"]
        assert lines[3].split() == ["POST", "/accounts/users", "bearer", "(not", "implemented)"]
        assert lines[4].split()[:3] == ["GET", "/accounts/health", "public"]

    def test_accepts_app(self) -> None:
        table = define_routes("fn", {"/": {"GET": get("/").with_auth_disabled().with_action(lambda: 1)}})
        lines = format_routes(App(table))
        assert lines[2].split()[:3] == ["GET", "/fn", "public"]


@pytest.mark.usefixtures("_fake_routes_module")
class TestRoutesCommand:
    def test_prints_table(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", "_fake_wren_routes:routes"])
        out = capsys.readouterr().out
        assert "/accounts/users/:id" in out
        assert "(not implemented)" in out

    def test_bad_target(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", "_fake_wren_routes:missing"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err
