import io

import pytest
from rich.console import Console

import brewpick
from brewpick import Outcome, Session, Symbols, parse_brewfile, render, visible_range

ASCII = Symbols.from_env({"NO_EMOJI": "1"})


def draw(session, symbols=ASCII, height=40):
    console = Console(file=io.StringIO(), width=120, color_system=None)
    console.print(render(session, symbols, height))
    return console.file.getvalue()


@pytest.fixture
def session(sample_brewfile):
    return Session(parse_brewfile(sample_brewfile), info="Loaded Brewfile from ./Brewfile")


def test_symbols_from_env():
    assert ASCII.success == "[OK]"
    assert ASCII.failure == "[X]"
    assert ASCII.pending == "[...]"
    fancy = Symbols.from_env({})
    assert fancy.success == "[✅]"
    assert Symbols.from_env({"NO_EMOJI": "0"}) == fancy


def test_selection_screen(session):
    session.handle_key(" ")
    out = draw(session)

    assert "Select what tools you want:" in out
    assert "[x] jq (brew formula)" in out
    assert "[ ] firefox (cask)" in out
    assert "[ ] Xcode (App Store)" in out
    assert "[a - Select All]" in out
    assert "CLI tool" in out


def test_selection_screen_shows_info_and_current_description(session):
    session.handle_key("j")
    session.handle_key("a")
    out = draw(session)

    assert "All tools selected." in out
    assert "Homebrew cask 'firefox'" in out


def test_confirm_screen(session):
    session.handle_key("a")
    session.handle_key("\r")
    out = draw(session)

    assert "Install 3 tool(s)? (y/n)" in out
    assert "- firefox (cask)" in out
    assert "Press y to confirm, n to go back, q to quit." in out


def test_results_screen(session):
    session.handle_key(" ")
    session.handle_key("j")
    session.handle_key(" ")
    session.handle_key("\r")
    session.handle_key("y")
    session.set_outcome(0, Outcome.failed("Homebrew not available"))
    session.set_outcome(1, Outcome.pending("Installing..."))
    session.progress = "Installing 2/2: firefox (cask)"

    out = draw(session)

    assert "[X] jq (brew formula) failed" in out
    assert "- Homebrew not available" in out
    assert "[...] firefox (cask) pending" in out
    assert "[ ] Xcode (App Store)" in out
    assert "Installing 2/2: firefox (cask)" in out


def test_results_screen_selected_without_outcome(session):
    session.handle_key("a")
    session.handle_key("\r")
    session.handle_key("y")
    session.progress = None

    out = draw(session)

    assert "[x] jq (brew formula)" in out
    assert "Press Enter or q to exit." in out


def test_skipped_uses_success_marker(session):
    session.handle_key("a")
    session.handle_key("\r")
    session.handle_key("y")
    session.set_outcome(2, Outcome.skipped("Already installed"))

    assert "[OK] Xcode (App Store) skipped" in draw(session)


def test_render_does_not_mutate(session):
    session.handle_key("a")
    before = (session.cursor, session.mode, session.info, session.progress,
              [(i.selected, i.outcome) for i in session.items])
    draw(session)
    after = (session.cursor, session.mode, session.info, session.progress,
             [(i.selected, i.outcome) for i in session.items])
    assert before == after


def test_long_list_scrolls_to_cursor():
    text = "".join(f'brew "tool{i}"\n' for i in range(50))
    session = Session(parse_brewfile(text))
    for _ in range(45):
        session.handle_key("j")

    out = draw(session, height=20)

    assert "tool45 (brew formula)" in out
    assert "tool0 (brew formula)" not in out


@pytest.mark.parametrize("cursor,total,visible,expected", [
    (0, 3, 10, (0, 3)),
    (0, 50, 8, (0, 8)),
    (7, 50, 8, (0, 8)),
    (8, 50, 8, (1, 9)),
    (49, 50, 8, (42, 50)),
    (5, 50, 0, (5, 6)),
])
def test_visible_range(cursor, total, visible, expected):
    assert visible_range(cursor, total, visible) == expected


def test_main_reports_fatal_error(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        brewpick.main(["--brewfile", str(tmp_path / "missing")])

    assert exc.value.code == 1
    assert "Error:" in capsys.readouterr().err


def test_main_reports_empty_brewfile(tmp_path, capsys):
    path = tmp_path / "Brewfile"
    path.write_text("# nothing here\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        brewpick.main(["--brewfile", str(path)])

    assert exc.value.code == 1
    assert "did not contain any" in capsys.readouterr().err


def test_main_starts_interface(tmp_path, monkeypatch, sample_brewfile):
    path = tmp_path / "Brewfile"
    path.write_text(sample_brewfile, encoding="utf-8")
    started = []

    class FakeApp:
        def __init__(self, session):
            self.session = session

        def run(self):
            started.append(self.session)

    monkeypatch.setattr(brewpick, "Brewpick", FakeApp)

    brewpick.main(["--brewfile", str(path)])

    assert len(started) == 1
    assert [item.entry.identifier for item in started[0].items] == ["jq", "firefox", "497799835"]
    assert started[0].info == f"Loaded Brewfile from {path}"


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        brewpick.main(["--version"])
    assert exc.value.code == 0
    assert brewpick.VERSION in capsys.readouterr().out
