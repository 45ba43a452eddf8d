"""
Argosy faults (parse errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for user-facing parse issues.
- ParseError: base type that carries message + options and knows how to render
  itself in a friendly, lowercased, and actionable way.
- UnrecognizedTokenError: the only fault the matching engine produces.
- ParseExit: groups every error of one parse so they are surfaced together.
- trigger(): central entry point to surface any fault (respecting shell/deferred/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Integration
- The parser never raises on bad input; it accumulates faults on the result.
- Callers surface them with RawParseResult.trigger() or trigger(fault, **options).
- In non-shell mode, exceptions are raised; in shell mode, they are rendered via rich.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used by the parser (stable identifiers).

    grouping
    - matching (112xx)
      • UNRECOGNIZED_TOKEN: a token no open symbol absorbed, under a command that
        treats unmatched tokens as errors.

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- matching errors (112xx) ---
    UNRECOGNIZED_TOKEN = 11201

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _styler(options, styles):
    def styler(style):
        return styles[style] if options.get("colorful", True) else ""
    return styler


def _texter(options):
    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment if options.get("colorful", True) else Text(fragment.plain)
        if not options.get("colorful", True):
            return Text(str(fragment))
        return Text(str(fragment), style)
    return text


class ParseError(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        styler = _styler(self.options, styles)
        text = _texter(self.options)

        prog = text(getattr(main, "__prog__", self.options.get("prog", "")), styler("prog-name"))
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if code is not None else "", styler("code")),
            " | ",
            text(self.options.get("title", "").title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options.get("hint"), styler("hint")))

        if self.options.get("fancy", False):
            try:
                width = int((console.width - 4) * self.options["ratio"])
            except KeyError:
                width = None
            return Panel(Group(message, hint), title=header, title_align="left", width=width)

        return Group(header, message, hint)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnrecognizedTokenError(ParseError): ...


def unrecognized(token, /):
    """
    build the fault for a token that matched nothing under a strict command.
    """
    return UnrecognizedTokenError(
        "unrecognized command or argument %r" % token,
        title="unrecognized token",
        code=FaultCode.UNRECOGNIZED_TOKEN,
        token=token,
        hint="remove %r or check the spelling of the command or option" % token,
        docs=getdoc(FaultCode.UNRECOGNIZED_TOKEN),
    )


class ParseExit(ExceptionGroup[ParseError]):
    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad parse", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad parse", tuple(exceptions))
        self.options = MappingProxyType(options)

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "title": "bold #FF4DA6",  # friendly pinky group title (Bad Parse)
        } | getattr(main, "__styles__", {}))

        styler = _styler(self.options, styles)
        text = _texter(self.options)

        prog = text(getattr(main, "__prog__", self.options.get("prog", "")), styler("prog-name"))

        header = Text.assemble("[ ", prog, " — ", text(self.message.title(), styler("title")), " ]")

        renders = [copy.replace(exception, **{**self.options, "ratio": 2 / 3}) for exception in self.exceptions]

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace() before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are raised.

    typical options
    - prog, shell, fancy, colorful, deferred, title, code, hint, docs, token.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "ParseError",
    "UnrecognizedTokenError",
    "ParseExit",
    "unrecognized",
    "trigger",
    "getdoc",
)
