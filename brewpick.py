#!/usr/bin/env python3
# /// script
# requires-python = ">=3.11"
# dependencies = [
#     "rich",
#     "requests",
#     "readchar",
# ]
# ///
import os
import sys
import tty
import codecs
import select
import shutil
import signal
import termios
import logging
import argparse
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Tuple

import readchar
import requests
from rich.console import Console, Group, RenderableType
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text
from rich.live import Live

VERSION = "0.3.0"
BREWFILE_SOURCE_ENV = "BREWFILE_SOURCE"
BREWFILE_PATH_ENV = "BREWFILE_PATH"
BREWFILE_URL_ENV = "BREWFILE_URL"
NO_EMOJI_ENV = "NO_EMOJI"
DEFAULT_BREWFILE_URL = "https://raw.githubusercontent.com/isaaclins/dotfiles/HEAD/Brewfile"
HEADERS = {"User-Agent": "install-tools-tui"}
REQUEST_TIMEOUT = 10
MAX_MESSAGE_LEN = 80
KEY_POLL_INTERVAL = 0.15
ESCAPE_TIMEOUT = 0.05
BREW = "brew"
MAS = "mas"

logger = logging.getLogger(__name__)


class BrewpickError(Exception):
    """Fatal startup error; reported before the interface is shown."""


class BrewfileError(BrewpickError):
    pass


class NoEntriesError(BrewpickError):
    pass


class Kind(Enum):
    FORMULA = "formula"
    CASK = "cask"
    STORE_APP = "mas"


@dataclass(frozen=True)
class Entry:
    kind: Kind
    identifier: str
    name: str
    display_label: str
    description: str
    fallback_identifiers: Tuple[str, ...] = ()

    @property
    def key(self) -> Tuple[Kind, str]:
        return (self.kind, self.identifier)


class Status(Enum):
    PENDING = "pending"
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class Outcome:
    status: Status
    message: str

    @classmethod
    def pending(cls, message: str) -> "Outcome":
        return cls(Status.PENDING, message)

    @classmethod
    def success(cls, message: str) -> "Outcome":
        return cls(Status.SUCCESS, message)

    @classmethod
    def skipped(cls, message: str) -> "Outcome":
        return cls(Status.SKIPPED, message)

    @classmethod
    def failed(cls, message: str) -> "Outcome":
        return cls(Status.FAILED, message)


@dataclass(frozen=True)
class Symbols:
    success: str
    failure: str
    pending: str

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Symbols":
        """ASCII markers when NO_EMOJI=1, glyphs otherwise."""
        environ = os.environ if environ is None else environ
        if environ.get(NO_EMOJI_ENV) == "1":
            return cls(success="[OK]", failure="[X]", pending="[...]")
        return cls(success="[✅]", failure="[❌]", pending="[…]")

    def marker(self, status: Status) -> str:
        if status is Status.PENDING:
            return self.pending
        if status is Status.FAILED:
            return self.failure
        return self.success


def looks_like_url(source: str) -> bool:
    lower = source.lower()
    return lower.startswith("http://") or lower.startswith("https://")


def read_brewfile(source: str) -> str:
    path = Path(source).expanduser()
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise BrewfileError(f"Failed to read Brewfile at {path}: {e}") from e


def fetch_brewfile(url: str) -> str:
    logger.debug(f"Fetching Brewfile from {url}")
    try:
        resp = requests.get(url, headers=HEADERS, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        raise BrewfileError(f"Failed to fetch Brewfile from {url}: {e}") from e

    if not 200 <= resp.status_code < 300:
        raise BrewfileError(f"Request to {url} returned status {resp.status_code}")
    # Brewfiles are UTF-8 whatever charset the server declares.
    return resp.content.decode("utf-8", errors="replace")


def load_source(source: str) -> str:
    """Load a Brewfile from a URL or a filesystem path."""
    if looks_like_url(source):
        return fetch_brewfile(source)
    return read_brewfile(source)


def find_local_brewfile(start: Optional[Path] = None) -> Optional[Path]:
    """Walk upward from `start` (default: cwd) looking for a Brewfile."""
    directory = (start or Path.cwd()).resolve()
    for candidate_dir in [directory, *directory.parents]:
        candidate = candidate_dir / "Brewfile"
        if candidate.is_file():
            return candidate
    return None


def _env_value(environ: Mapping[str, str], name: str) -> Optional[str]:
    if name not in environ:
        return None
    value = environ[name].strip()
    if not value:
        raise BrewfileError(f"{name} was set but empty")
    return value


def load_brewfile_text(source: Optional[str] = None,
                       environ: Optional[Mapping[str, str]] = None,
                       cwd: Optional[Path] = None) -> Tuple[str, str]:
    """Resolve the Brewfile and return its text plus a note for the status line.

    Priority: explicit `source`, BREWFILE_SOURCE, BREWFILE_PATH, BREWFILE_URL,
    a Brewfile in cwd or any parent, then DEFAULT_BREWFILE_URL.
    """
    environ = os.environ if environ is None else environ

    if source is not None:
        source = source.strip()
        if not source:
            raise BrewfileError("--brewfile was given an empty value")
        logger.debug(f"Using Brewfile from command line: {source}")
        return load_source(source), f"Loaded Brewfile from {source}"

    value = _env_value(environ, BREWFILE_SOURCE_ENV)
    if value is not None:
        logger.debug(f"Using {BREWFILE_SOURCE_ENV}={value}")
        return load_source(value), f"Loaded Brewfile from {value}"

    value = _env_value(environ, BREWFILE_PATH_ENV)
    if value is not None:
        logger.debug(f"Using {BREWFILE_PATH_ENV}={value}")
        return read_brewfile(value), f"Loaded Brewfile from {value}"

    value = _env_value(environ, BREWFILE_URL_ENV)
    if value is not None:
        logger.debug(f"Using {BREWFILE_URL_ENV}={value}")
        return fetch_brewfile(value), f"Loaded Brewfile from {value}"

    local = find_local_brewfile(cwd)
    if local is not None:
        logger.debug(f"Found local Brewfile at {local}")
        return read_brewfile(str(local)), f"Loaded Brewfile from {local}"

    text = fetch_brewfile(DEFAULT_BREWFILE_URL)
    note = (
        f"Loaded Brewfile from {DEFAULT_BREWFILE_URL}. "
        f"Override with {BREWFILE_SOURCE_ENV}, {BREWFILE_PATH_ENV}, or {BREWFILE_URL_ENV}."
    )
    return text, note


def split_lines(text: str) -> List[str]:
    """Split on "\\n" only, dropping a trailing "\\r" from each line.

    Form feeds, vertical tabs and Unicode line separators stay inside the line.
    """
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]


def extract_first_quoted(line: str) -> Optional[str]:
    start = line.find('"')
    if start == -1:
        return None
    end = line.find('"', start + 1)
    if end == -1:
        return None
    return line[start + 1:end]


def _parse_declaration(line: str, comment: Optional[str]) -> Optional[Entry]:
    """Build an Entry from a brew/cask/mas line, or None for anything else."""
    name = extract_first_quoted(line)
    if name is None:
        return None

    if line.startswith("brew "):
        return Entry(
            kind=Kind.FORMULA,
            identifier=name,
            name=name,
            display_label=f"{name} (brew formula)",
            description=comment or f"Homebrew formula '{name}'",
        )

    if line.startswith("cask "):
        return Entry(
            kind=Kind.CASK,
            identifier=name,
            name=name,
            display_label=f"{name} (cask)",
            description=comment or f"Homebrew cask '{name}'",
        )

    if line.startswith("mas "):
        parts = line.split("id:")
        if len(parts) < 2:
            return None
        app_id = "".join(ch for ch in parts[1] if ch.isascii() and ch.isdigit())
        if not app_id:
            return None
        return Entry(
            kind=Kind.STORE_APP,
            identifier=app_id,
            name=name,
            display_label=f"{name} (App Store)",
            description=comment or f"Mac App Store app '{name}' (id {app_id})",
        )

    return None


def parse_brewfile(text: str) -> List[Entry]:
    """Parse brew, cask and mas lines out of a Brewfile.

    A run of `#` comment lines directly above a declaration becomes its
    description. Blank lines and unrecognised lines drop the pending comment.
    Duplicates by (kind, identifier) are dropped, first one wins.
    """
    entries: List[Entry] = []
    seen = set()
    pending_comment: Optional[str] = None

    for raw_line in split_lines(text):
        line = raw_line.strip()
        if not line:
            pending_comment = None
            continue

        if line.startswith("#"):
            comment = line[1:].strip()
            if comment:
                pending_comment = f"{pending_comment} {comment}" if pending_comment else comment
            continue

        entry = _parse_declaration(line, pending_comment)
        pending_comment = None
        if entry is None:
            continue
        if entry.key in seen:
            logger.debug(f"Skipping duplicate {entry.kind.value} '{entry.identifier}'")
            continue
        seen.add(entry.key)
        entries.append(entry)

    return entries


def load_entries(text: str) -> List[Entry]:
    entries = parse_brewfile(text)
    if not entries:
        raise NoEntriesError("Brewfile did not contain any brew/cask/mas entries")
    logger.debug(f"Parsed {len(entries)} entries from Brewfile")
    return entries


def shorten_message(output: str) -> Optional[str]:
    """First line of command output, trimmed and capped at MAX_MESSAGE_LEN."""
    lines = split_lines(output)
    if not lines:
        return None
    line = lines[0].strip()
    if not line:
        return None
    if len(line) <= MAX_MESSAGE_LEN:
        return line
    return line[:MAX_MESSAGE_LEN].rstrip() + "…"


def run_command(args: List[str]) -> subprocess.CompletedProcess:
    logger.debug(f"Running: {' '.join(args)}")
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
    )
    logger.debug(f"{args[0]} exited with status {result.returncode}")
    return result


def _failure_message(result: subprocess.CompletedProcess) -> str:
    return (
        shorten_message(result.stderr or "")
        or shorten_message(result.stdout or "")
        or f"Exit status {result.returncode}"
    )


class Installer:
    """Installs one Entry at a time through brew / mas."""

    def __init__(self, brew: str = BREW, mas: str = MAS) -> None:
        self.brew = brew
        self.mas = mas

    def brew_available(self) -> bool:
        return shutil.which(self.brew) is not None

    def mas_available(self) -> bool:
        return shutil.which(self.mas) is not None

    def install(self, entry: Entry) -> Outcome:
        if entry.kind is Kind.FORMULA:
            outcome = self.install_formula(entry.identifier)
        elif entry.kind is Kind.CASK:
            outcome = self.install_cask(entry.identifier, entry.fallback_identifiers)
        elif entry.kind is Kind.STORE_APP:
            outcome = self.install_store_app(entry.identifier, entry.name)
        else:
            outcome = Outcome.failed(f"Unsupported entry kind: {entry.kind}")
        logger.debug(f"{entry.display_label}: {outcome.status.value} ({outcome.message})")
        return outcome

    def _brew_list_installed(self, flag: str, name: str) -> bool:
        # A failing listing is indistinguishable from "not installed".
        try:
            result = run_command([self.brew, "list", flag, "--versions", name])
        except OSError as e:
            logger.debug(f"brew list {flag} {name} failed to run: {e}")
            return False
        return result.returncode == 0

    def install_formula(self, name: str) -> Outcome:
        if not self.brew_available():
            return Outcome.failed("Homebrew not available")

        if self._brew_list_installed("--formula", name):
            return Outcome.skipped("Already installed")

        try:
            result = run_command([self.brew, "install", name])
        except OSError as e:
            return Outcome.failed(f"Failed to run brew: {e}")

        if result.returncode == 0:
            return Outcome.success(shorten_message(result.stdout or "") or "Installed")
        return Outcome.failed(_failure_message(result))

    def install_cask(self, name: str, fallbacks: Tuple[str, ...] = ()) -> Outcome:
        """Install a cask, trying fallback tokens in order when the primary fails."""
        if not self.brew_available():
            return Outcome.failed("Homebrew not available")

        candidates = [name, *fallbacks]

        for candidate in candidates:
            if self._brew_list_installed("--cask", candidate):
                suffix = " (via fallback)" if candidate != name else ""
                return Outcome.skipped(f"Already installed{suffix}")

        last_error = None
        for candidate in candidates:
            try:
                result = run_command([self.brew, "install", "--cask", candidate])
            except OSError as e:
                last_error = f"Failed to run brew: {e}"
                continue

            if result.returncode == 0:
                message = shorten_message(result.stdout or "") or "Installed"
                if candidate != name:
                    message += " (fallback)"
                return Outcome.success(message)
            last_error = _failure_message(result)

        return Outcome.failed(last_error or "Install failed")

    def install_store_app(self, app_id: str, label: str) -> Outcome:
        if not self.mas_available():
            return Outcome.failed("mas CLI not available")

        try:
            listing = run_command([self.mas, "list"])
        except OSError as e:
            return Outcome.failed(f"Failed to run mas list: {e}")

        # mas list can fail transiently while install still works, so only a
        # successful listing is consulted.
        if listing.returncode == 0:
            for line in split_lines(listing.stdout or ""):
                if line.lstrip().startswith(app_id):
                    return Outcome.skipped("Already installed")

        try:
            result = run_command([self.mas, "install", app_id])
        except OSError as e:
            return Outcome.failed(f"Failed to run mas install: {e}")

        if result.returncode == 0:
            return Outcome.success(shorten_message(result.stdout or "") or f"Installed {label}")
        return Outcome.failed(_failure_message(result))


class Mode(Enum):
    SELECTING = "selecting"
    CONFIRMING = "confirming"
    SHOWING_RESULTS = "showing_results"


class Action(Enum):
    NONE = "none"
    START_INSTALL = "start_install"


ESC = "\x1b"
ENTER_KEYS = ("\r", "\n", readchar.key.ENTER)
UP_KEYS = (readchar.key.UP, "k")
DOWN_KEYS = (readchar.key.DOWN, "j")


@dataclass
class ItemState:
    entry: Entry
    selected: bool = False
    outcome: Optional[Outcome] = None


@dataclass
class Session:
    """Entries plus everything the interface mutates while it runs."""
    entries: List[Entry]
    info: Optional[str] = None
    items: List[ItemState] = field(init=False)
    cursor: int = 0
    mode: Mode = Mode.SELECTING
    progress: Optional[str] = None
    should_quit: bool = False

    def __post_init__(self) -> None:
        if not self.entries:
            raise NoEntriesError("Brewfile did not contain any brew/cask/mas entries")
        self.items = [ItemState(entry) for entry in self.entries]

    def handle_key(self, key: str) -> Action:
        if self.mode is Mode.SELECTING:
            return self._handle_selecting(key)
        if self.mode is Mode.CONFIRMING:
            return self._handle_confirming(key)
        return self._handle_results(key)

    def _handle_selecting(self, key: str) -> Action:
        if key in ("q", ESC):
            self.should_quit = True
        elif key in UP_KEYS:
            self.info = None
            if self.cursor > 0:
                self.cursor -= 1
        elif key in DOWN_KEYS:
            self.info = None
            if self.cursor + 1 < len(self.items):
                self.cursor += 1
        elif key == " ":
            item = self.items[self.cursor]
            item.selected = not item.selected
            self.info = None
        elif key in ("a", "A"):
            for item in self.items:
                item.selected = True
            self.info = "All tools selected."
        elif key in ("d", "D"):
            for item in self.items:
                item.selected = False
            self.info = "Selections cleared."
        elif key in ENTER_KEYS:
            if self.selected_count() == 0:
                self.info = "Select at least one tool before continuing."
            else:
                self.mode = Mode.CONFIRMING
                self.info = None
        return Action.NONE

    def _handle_confirming(self, key: str) -> Action:
        if key in ("y", "Y"):
            self.mode = Mode.SHOWING_RESULTS
            self.progress = "Preparing installations..."
            return Action.START_INSTALL
        if key in ("n", "N", ESC):
            self.mode = Mode.SELECTING
            self.progress = None
        elif key == "q":
            self.should_quit = True
        return Action.NONE

    def _handle_results(self, key: str) -> Action:
        if key in ("q", ESC, *ENTER_KEYS):
            self.should_quit = True
        return Action.NONE

    def selected_count(self) -> int:
        return sum(1 for item in self.items if item.selected)

    def selected_indices(self) -> List[int]:
        return [idx for idx, item in enumerate(self.items) if item.selected]

    def selected_labels(self) -> List[str]:
        return [item.entry.display_label for item in self.items if item.selected]

    def current_description(self) -> str:
        return self.items[self.cursor].entry.description

    def clear_outcomes(self) -> None:
        for item in self.items:
            item.outcome = None

    def set_outcome(self, idx: int, outcome: Outcome) -> None:
        self.items[idx].outcome = outcome

    def run_installations(self, installer: Installer, redraw: Callable[[], None]) -> None:
        """Install every selected entry in order, redrawing around each one.

        Runs on the caller's thread and cannot be interrupted.
        """
        self.clear_outcomes()
        indices = self.selected_indices()
        total = len(indices)
        for position, idx in enumerate(indices, 1):
            entry = self.items[idx].entry
            label = entry.display_label
            self.set_outcome(idx, Outcome.pending("Installing..."))
            self.progress = f"Installing {position}/{total}: {label}"
            redraw()

            self.set_outcome(idx, installer.install(entry))
            self.progress = f"Completed {position}/{total}: {label}"
            redraw()

        self.progress = "Installation complete. Press Enter or q to exit."
        redraw()


STATUS_STYLES: Dict[Status, str] = {
    Status.PENDING: "yellow",
    Status.SUCCESS: "green",
    Status.SKIPPED: "green",
    Status.FAILED: "red",
}

STATUS_LABELS: Dict[Status, str] = {
    Status.PENDING: "pending",
    Status.SUCCESS: "installed",
    Status.SKIPPED: "skipped",
    Status.FAILED: "failed",
}

SELECTION_HINTS = (
    "[space - Toggle Selection] [a - Select All] [d - Deselect All] "
    "[enter - Install Selected Tools] [q - Quit]"
)

# title, hints, footer and panel borders
CHROME_LINES = 12


def visible_range(cursor: int, total: int, max_visible: int) -> Tuple[int, int]:
    """Window of rows to draw so that the cursor stays on screen."""
    max_visible = max(1, max_visible)
    if total <= max_visible:
        return 0, total
    start = min(max(0, cursor - max_visible + 1), total - max_visible)
    return start, start + max_visible


def _title(text: str) -> Text:
    return Text(text, style="bold", justify="center")


def _render_selecting(session: Session, height: int) -> RenderableType:
    start, end = visible_range(session.cursor, len(session.items), height - CHROME_LINES)
    rows = []
    for idx in range(start, end):
        item = session.items[idx]
        marker = "[x]" if item.selected else "[ ]"
        style = "reverse" if idx == session.cursor else ""
        rows.append(Text(f"{marker} {item.entry.display_label}", style=style))

    footer = []
    info = session.info
    if info:
        footer.append(Text(info, style="yellow"))
    footer.append(Text(session.current_description(), style="dim"))

    return Group(
        _title("Select what tools you want:"),
        Text(""),
        Panel(Group(*rows)),
        Text(SELECTION_HINTS, style="bright_black"),
        Text(""),
        *footer,
    )


def _render_confirming(session: Session) -> RenderableType:
    rows = [Text(f"- {label}") for label in session.selected_labels()]
    return Group(
        _title(f"Install {session.selected_count()} tool(s)? (y/n)"),
        Text(""),
        Panel(Group(*rows)),
        Text("Press y to confirm, n to go back, q to quit.", style="bright_black"),
    )


def _render_results(session: Session, symbols: Symbols) -> RenderableType:
    rows = []
    for item in session.items:
        label = item.entry.display_label
        if not item.selected:
            rows.append(Text(f"[ ] {label}"))
            continue
        if item.outcome is None:
            rows.append(Text(f"[x] {label}"))
            continue

        status = item.outcome.status
        line = Text(f"{symbols.marker(status)} {label} ")
        line.append(STATUS_LABELS[status], style=STATUS_STYLES[status])
        rows.append(line)
        if item.outcome.message:
            rows.append(Text(f"    - {item.outcome.message}", style="bright_black"))

    return Group(
        _title("Select what tools you want:"),
        Text(""),
        Panel(Group(*rows)),
        Text(session.progress or "Press Enter or q to exit.", style="bright_black"),
    )


def render(session: Session, symbols: Symbols, height: int = 24) -> RenderableType:
    """Project the session onto a renderable. Reads state only."""
    if session.mode is Mode.SELECTING:
        return _render_selecting(session, height)
    if session.mode is Mode.CONFIRMING:
        return _render_confirming(session)
    return _render_results(session, symbols)


class KeyReader:
    """Keypresses from the terminal, with a timeout so the screen keeps redrawing.

    While entered, the terminal has echo, line buffering and signal keys turned
    off. Ctrl+C then arrives as a key instead of a SIGINT that would also hit a
    running brew or mas, and a lone Esc can be told apart from an arrow key.
    """

    def __init__(self, fd: Optional[int] = None) -> None:
        self.fd = sys.stdin.fileno() if fd is None else fd
        self._saved: Optional[list] = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def __enter__(self) -> "KeyReader":
        if os.isatty(self.fd):
            self._saved = termios.tcgetattr(self.fd)
            mode = termios.tcgetattr(self.fd)
            mode[tty.LFLAG] &= ~(termios.ECHO | termios.ICANON | termios.ISIG)
            mode[tty.CC][termios.VMIN] = 1
            mode[tty.CC][termios.VTIME] = 0
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, mode)
        return self

    def __exit__(self, *exc_info) -> None:
        if self._saved is not None:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
            self._saved = None

    def _ready(self, timeout: Optional[float]) -> bool:
        ready, _, _ = select.select([self.fd], [], [], timeout)
        return bool(ready)

    def _read_char(self) -> str:
        while True:
            data = os.read(self.fd, 1)
            if not data:
                raise EOFError
            char = self._decoder.decode(data)
            if char:
                return char

    def read_key(self, timeout: Optional[float] = None) -> Optional[str]:
        """Next key, or None when nothing arrives within `timeout` seconds.

        Escape sequences come back whole, so arrows compare equal to
        readchar.key.UP and friends. Esc on its own is returned once no
        follow-up byte shows up within ESCAPE_TIMEOUT.
        """
        if not self._ready(timeout):
            return None
        key = self._read_char()
        if key in readchar.config.INTERRUPT_KEYS:
            raise KeyboardInterrupt
        if key != ESC:
            return key
        while self._ready(ESCAPE_TIMEOUT):
            key += self._read_char()
            if len(key) > 2 and (key[-1].isalpha() or key[-1] == "~"):
                break
        return key


class Brewpick:
    def __init__(self, session: Session, installer: Optional[Installer] = None,
                 console: Optional[Console] = None, symbols: Optional[Symbols] = None,
                 keys: Optional[KeyReader] = None) -> None:
        self.session = session
        self.installer = installer or Installer()
        self.console = console or Console()
        self.symbols = symbols or Symbols.from_env()
        self.keys = keys

    def _renderable(self) -> RenderableType:
        return render(self.session, self.symbols, self.console.size.height)

    def handle_key(self, key: str, redraw: Callable[[], None]) -> None:
        if self.session.handle_key(key) is not Action.START_INSTALL:
            return
        # An installation run cannot be cancelled, and brew/mas inherit SIG_IGN.
        previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
        try:
            self.session.run_installations(self.installer, redraw)
        finally:
            signal.signal(signal.SIGINT, signal.SIG_DFL if previous is None else previous)

    def run(self) -> None:
        """Full-screen input loop; returns once the user quits.

        Input polling, session updates and drawing all happen on this thread.
        The screen is redrawn after every key and every KEY_POLL_INTERVAL.
        """
        keys = self.keys or KeyReader()
        with keys, Live(self._renderable(), console=self.console,
                        screen=True, auto_refresh=False) as live:

            def redraw() -> None:
                live.update(self._renderable(), refresh=True)

            while not self.session.should_quit:
                try:
                    key = keys.read_key(KEY_POLL_INTERVAL)
                    if key is not None:
                        self.handle_key(key, redraw)
                except (KeyboardInterrupt, EOFError):
                    logger.debug("Interrupted, leaving")
                    break
                redraw()


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="brewpick",
        description="Pick Brewfile entries in a checklist and install them with brew / mas",
        epilog=(
            f"The Brewfile comes from --brewfile, ${BREWFILE_SOURCE_ENV}, ${BREWFILE_PATH_ENV}, "
            f"${BREWFILE_URL_ENV}, a Brewfile in the current directory or a parent, "
            f"or {DEFAULT_BREWFILE_URL}. Set {NO_EMOJI_ENV}=1 for plain ASCII markers."
        ),
    )
    parser.add_argument("--brewfile", metavar="SOURCE", help="Brewfile path or URL")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        text, note = load_brewfile_text(args.brewfile)
        entries = load_entries(text)
    except BrewpickError as e:
        Console(stderr=True).print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)

    Brewpick(Session(entries, info=note)).run()


if __name__ == "__main__":
    main()
