"""Terminal output for aarkit: data on stdout, diagnostics on stderr.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** carries only what a caller may want to pipe: merged manifest
  XML, extracted Gradle scopes, config dumps.
* **stderr** carries progress, warnings, errors and suggestions.
* Rich formatting (syntax highlighting, a spinner while Gradle runs) is
  used only when stdout is an interactive terminal and colour is enabled.
  ``NO_COLOR``, ``TERM=dumb`` and ``--no-color`` all disable it.

:class:`OutputManager` holds the preferences and is installed once by
:func:`~aarkit.app.main_callback`. Library code calls the module-level
helpers (:func:`info`, :func:`warning`, :func:`status`, ...) so nothing
has to thread a manager through the build.
"""

from __future__ import annotations

import contextlib
import json
import os
import sys
from enum import Enum
from typing import Any, Iterator, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax

# Rich lexer names keyed by the content types aarkit emits.
_SYNTAX_BY_CONTENT_TYPE = {
    "application/json": "json",
    "application/xml": "xml",
    "text/x-groovy": "groovy",
}

_SYNTAX_THEME = "monokai"


class OutputFormat(str, Enum):
    """How data written to stdout is rendered.

    ``AUTO`` becomes ``RICH`` on a colour-capable TTY and ``PLAIN``
    otherwise; ``--json`` and ``--plain`` force a format.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Route data and diagnostics to the right stream in the right format.

    Args:
        format: Requested data format; ``AUTO`` is resolved immediately.
        no_color: Disable colour and Rich markup on both streams.
        quiet: Drop ``info``, ``success`` and ``suggest`` messages.
        verbose: Show ``debug`` messages.
        output_file: Write data to this path instead of stdout.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        output_file: Optional[str] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._output_file = output_file

        if format == OutputFormat.AUTO:
            rich_ok = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # stdout
    # ------------------------------------------------------------------ #

    def format_response(self, data: Any, content_type: str = "application/json") -> None:
        """Render *data* on stdout (or into ``output_file``).

        Args:
            data: A dict or list (config dumps, scope lists) or text such
                as manifest XML or a Gradle block.
            content_type: Selects the Rich lexer: ``application/json``,
                ``application/xml`` or ``text/x-groovy``.
        """
        if self._output_file:
            self._write_file(_as_text(data))
        elif self._format == OutputFormat.JSON:
            self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))
        elif self._format == OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
        else:
            self._render_rich(data, content_type)

    def print_data(self, text: str) -> None:
        """Write *text* plus a newline to stdout, or append it to ``output_file``."""
        if not self._output_file:
            print(text, file=sys.stdout, flush=True)
            return
        with open(self._output_file, "a", encoding="utf-8") as f:
            f.write(text if text.endswith("\n") else text + "\n")

    # ------------------------------------------------------------------ #
    # stderr
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Progress message. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._emit(message)

    def success(self, message: str) -> None:
        """Green completion message. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._emit(message, style="green")

    def warning(self, message: str) -> None:
        """Yellow warning. Shown even with ``--quiet``."""
        self._emit(message, label="Warning:", style="yellow")

    def error(self, message: str) -> None:
        """Bold red error. Always shown."""
        self._emit(message, label="Error:", style="bold red")

    def suggest(self, message: str) -> None:
        """Dimmed next-step hint, prefixed with an arrow. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._emit(f"→ {message}", style="dim")

    def debug(self, message: str) -> None:
        """Dimmed ``[debug]`` line, shown only with ``--verbose``."""
        if self._verbose:
            self._emit(message, label="[debug]", style="dim")

    @contextlib.contextmanager
    def status(self, message: str) -> Iterator[None]:
        """Show a spinner with *message* on stderr while the block runs.

        Without a Rich terminal the message is printed once through
        :meth:`info` instead.
        """
        if self._format != OutputFormat.RICH or self._quiet:
            self.info(message)
            yield
            return
        with self._stderr.status(message):
            yield

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _emit(self, message: str, label: str = "", style: str = "") -> None:
        if self._no_color:
            line = f"{label} {message}" if label else message
            print(line, file=sys.stderr, flush=True)
            return

        if label:
            text = f"[{style}]{escape(label)}[/{style}] {message}"
        elif style:
            text = f"[{style}]{message}[/{style}]"
        else:
            text = message
        self._stderr.print(text)

    def _render_rich(self, data: Any, content_type: str) -> None:
        if isinstance(data, (dict, list)):
            text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
            self._stdout.print(Syntax(text, "json", theme=_SYNTAX_THEME, word_wrap=True))
            return

        lexer = _SYNTAX_BY_CONTENT_TYPE.get(content_type) if isinstance(data, str) else None
        if lexer is None:
            self._stdout.print(str(data), markup=False)
        else:
            self._stdout.print(Syntax(data, lexer, theme=_SYNTAX_THEME, word_wrap=True))

    def _write_file(self, content: str) -> None:
        assert self._output_file is not None
        with open(self._output_file, "w", encoding="utf-8") as f:
            f.write(content if content.endswith("\n") else content + "\n")


def _as_text(data: Any) -> str:
    if isinstance(data, (dict, list)):
        return json.dumps(data, indent=2, ensure_ascii=False, default=str)
    return str(data)


def _plain_lines(data: Any) -> list[str]:
    """Dicts become ``key<TAB>value`` rows, lists one item per line."""
    if isinstance(data, dict):
        rows = []
        for key, value in data.items():
            if isinstance(value, (dict, list)):
                value = json.dumps(value, ensure_ascii=False, default=str)
            rows.append(f"{key}\t{value}")
        return rows
    if isinstance(data, list):
        return [str(item) for item in data]
    return [str(data)]


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (to anything) or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating an ``AUTO`` one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (used between tests)."""
    global _output
    _output = None


def format_response(data: Any, content_type: str = "application/json") -> None:
    get_output().format_response(data, content_type)


def print_data(text: str) -> None:
    get_output().print_data(text)


def info(message: str) -> None:
    get_output().info(message)


def error(message: str) -> None:
    get_output().error(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)


def status(message: str) -> contextlib.AbstractContextManager[None]:
    """Spinner context from the installed manager; see :meth:`OutputManager.status`."""
    return get_output().status(message)
