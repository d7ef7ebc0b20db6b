import pytest

from gnome_shell_screenshot.auxhelper import (
    MODE_ERROR,
    HelperError,
    join_area_value,
    main,
    parse_area,
    parse_options,
    run,
)

from conftest import FakeService


def test_area_parses_to_coordinates() -> None:
    opts = parse_options(["--area", "10,20,30,40", "--filename", "/tmp/x.png"])
    assert opts.area == (10, 20, 30, 40)
    assert opts.filename == "/tmp/x.png"


def test_defaults() -> None:
    opts = parse_options(["--desktop", "--filename", "/tmp/x.png"])
    assert opts.flash is False
    assert opts.include_cursor is False
    assert opts.include_frame is True
    assert opts.ignore_dbus_ok is False


@pytest.mark.parametrize("value", ["1,2,3", "a,b,c,d", "1,2,3,4,5", ""])
def test_invalid_area_coords(value: str) -> None:
    with pytest.raises(HelperError, match="invalid --area coords"):
        parse_area(value)


def test_unknown_flag() -> None:
    with pytest.raises(HelperError, match="no such parameter --bogus"):
        parse_options(["--desktop", "--bogus"])


def test_abbreviated_flag_is_unknown() -> None:
    with pytest.raises(HelperError):
        parse_options(["--desk", "--filename", "/tmp/x.png"])


def test_missing_value() -> None:
    with pytest.raises(HelperError, match="--filename"):
        parse_options(["--desktop", "--filename"])


@pytest.mark.parametrize("filename", ["x.png", "./x.png", "tmp/x.png"])
def test_relative_filename_rejected(filename: str) -> None:
    service = FakeService()
    opts = parse_options(["--desktop", "--filename", filename])
    with pytest.raises(HelperError, match="filename path must be absolute"):
        run(opts, service=service)
    assert service.calls == []


def test_filename_required() -> None:
    with pytest.raises(HelperError, match="required argument --filename"):
        run(parse_options(["--desktop"]), service=FakeService())


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["--desktop", "--window"],
        ["--desktop", "--area", "1,2,3,4"],
        ["--window", "--area", "1,2,3,4"],
    ],
)
def test_exactly_one_mode(argv: list, tmp_path) -> None:
    opts = parse_options(argv + ["--filename", str(tmp_path / "x.png")])
    with pytest.raises(HelperError, match=MODE_ERROR):
        run(opts, service=FakeService())


def test_desktop_call(tmp_path) -> None:
    target = str(tmp_path / "x.png")
    service = FakeService()
    opts = parse_options(["--desktop", "--include-cursor", "--flash", "--filename", target])
    assert run(opts, service=service) == 0
    assert service.calls == [("Screenshot", True, True, target)]


def test_window_call_includes_frame(tmp_path) -> None:
    target = str(tmp_path / "x.png")
    service = FakeService()
    assert run(parse_options(["--window", "--filename", target]), service=service) == 0
    assert service.calls == [("ScreenshotWindow", True, False, False, target)]


def test_area_call(tmp_path) -> None:
    target = str(tmp_path / "x.png")
    service = FakeService()
    opts = parse_options(["--area", "10,20,30,40", "--filename", target])
    assert run(opts, service=service) == 0
    assert service.calls == [("ScreenshotArea", 10, 20, 30, 40, False, target)]


def test_dbus_not_ok_raises(tmp_path) -> None:
    opts = parse_options(["--desktop", "--filename", str(tmp_path / "x.png")])
    with pytest.raises(HelperError, match="ok=false"):
        run(opts, service=FakeService(ok=False))


def test_ignore_dbus_ok_suppresses_error(tmp_path) -> None:
    opts = parse_options(["--desktop", "--ignore-dbus-ok", "--filename", str(tmp_path / "x.png")])
    assert run(opts, service=FakeService(ok=False)) == 0


def test_path_mismatch(tmp_path) -> None:
    target = str(tmp_path / "x.png")
    service = FakeService(filename_used=str(tmp_path / "other.png"))
    with pytest.raises(HelperError, match="path mismatch"):
        run(parse_options(["--desktop", "--filename", target]), service=service)


def test_ignore_dbus_ok_still_checks_mismatch(tmp_path) -> None:
    service = FakeService(ok=False, filename_used="/elsewhere.png")
    opts = parse_options(["--desktop", "--ignore-dbus-ok", "--filename", str(tmp_path / "x.png")])
    with pytest.raises(HelperError, match="path mismatch"):
        run(opts, service=service)


def test_main_exit_code_on_error() -> None:
    assert main(["--no-such-flag"]) == 1
    assert main(["--desktop", "--filename", "relative.png"]) == 1
    assert main(["--filename", "/tmp/x.png"]) == 1


def test_help_exits_zero(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["--help"])
    assert exc.value.code == 0
    assert "--ignore-dbus-ok" in capsys.readouterr().out


def test_negative_area_origin(tmp_path) -> None:
    target = str(tmp_path / "x.png")
    opts = parse_options(["--area", "-1920,0,300,200", "--filename", target])
    assert opts.area == (-1920, 0, 300, 200)

    service = FakeService()
    assert run(opts, service=service) == 0
    assert service.calls == [("ScreenshotArea", -1920, 0, 300, 200, False, target)]


def test_join_area_value() -> None:
    assert join_area_value(["--area", "-1,2,3,4", "--flash"]) == ["--area=-1,2,3,4", "--flash"]
    assert join_area_value(["--area=1,2,3,4"]) == ["--area=1,2,3,4"]
    assert join_area_value(["--area"]) == ["--area"]


def test_spawntest_reruns_without_flag(monkeypatch) -> None:
    pytest.importorskip("gi")
    from gi.repository import GLib

    spawned = []

    class FakeLoop:
        def run(self):
            pass

        def quit(self):
            pass

    def spawn_async(argv, flags=None):
        spawned.append(argv)
        return 4242, None, None, None

    def child_watch_add(priority, pid, callback):
        # Exit status 3, as encoded by waitpid
        callback(pid, 3 << 8)

    monkeypatch.setattr(GLib, "spawn_async", spawn_async)
    monkeypatch.setattr(GLib, "child_watch_add", child_watch_add)
    monkeypatch.setattr(GLib, "spawn_close_pid", lambda pid: None)
    monkeypatch.setattr(GLib, "MainLoop", FakeLoop)

    opts = parse_options(["--spawntest", "--desktop", "--spawntest", "--filename", "/tmp/x.png"])
    assert run(opts, service=FakeService()) == 3

    (argv,) = spawned
    assert "--spawntest" not in argv
    assert argv[-3:] == ["--desktop", "--filename", "/tmp/x.png"]
    assert argv[1:3] == ["-m", "gnome_shell_screenshot.auxhelper"]
