"""
Parser configuration: the grammar plus the switches that shape one parser.

A configuration is built once and shared (read-only) by every parse. When
the grammar is not a single root command, it is wrapped into an implicit root
command named after the running executable; the user never types that name,
so the parser synthesizes it before lexing and hides it again afterwards.
"""
import os.path
import re
import sys
from collections.abc import Iterable

from .definitions import Command, SymbolDefinition, SymbolDefinitionSet, SymbolKind
from .utils import *


def _executable():
    """
    Return the stem of the running program name (e.g. 'tool' for '/usr/bin/tool.exe').
    """
    stem = os.path.splitext(os.path.basename(sys.argv[0] if sys.argv else ""))[0]
    return stem if re.fullmatch(r"[^\W_][\w.-]*", stem) else "root"


class ParserConfiguration:
    """
    Grammar and parser switches.

    Parameters
    - definitions: SymbolDefinition | Iterable[SymbolDefinition]
      The grammar. None (or anything not a definition collection) fails fast.
    - implicit: Unset | bool
      Unset wraps the grammar in an implicit root unless it is exactly one
      Command; True always wraps; False never wraps.
    - executable: Unset | str
      Name of the implicit root command (defaults to the running program's stem).
      It must not be an alias of any wrapped definition (ValueError).
    - delimiters: Iterable[str]
      Characters splitting '--name=value' style tokens (':' and '=' by default).
    - unbundle: bool
      Whether '-abc' expands to '-a -b -c' when every piece is a known option.
    - shell, fancy, colorful, deferred: bool
      Rendering switches forwarded to faults when a result is triggered.
    """

    __introspectable__ = (
        "definitions",
        "root",
        "root_command_is_implicit",
        "delimiters",
        "unbundle",
        "shell",
        "fancy",
        "colorful",
        "deferred",
    )

    def __init__(
            self,
            definitions,
            /,
            *,
            implicit=Unset,
            executable=Unset,
            delimiters=(":", "="),
            unbundle=True,
            shell=False,
            fancy=False,
            colorful=True,
            deferred=False
    ):
        if definitions is None:
            raise TypeError("parser configuration requires symbol definitions")
        if isinstance(definitions, SymbolDefinition):
            definitions = (definitions,)
        elif not isinstance(definitions, Iterable):
            raise TypeError("parser configuration 'definitions' must be an iterable of definitions")
        definitions = tuple(definitions)

        if not isinstance(implicit, bool | Unset):
            raise TypeError("parser configuration 'implicit' must be a boolean")
        if not isinstance(executable, str | Unset):
            raise TypeError("parser configuration 'executable' must be a string")
        if isinstance(delimiters, str) or not isinstance(delimiters, Iterable):
            raise TypeError("parser configuration 'delimiters' must be an iterable of strings")
        delimiters = tuple(delimiters)
        for delimiter in delimiters:
            if not isinstance(delimiter, str) or len(delimiter) != 1:
                raise ValueError("parser configuration delimiters must be single characters")

        single = len(definitions) == 1 and definitions[0].kind is SymbolKind.COMMAND
        if coalesce(implicit, not single):
            name = coalesce(executable, _executable())
            for definition in definitions:
                if isinstance(definition, SymbolDefinition) and definition.has_alias(name):
                    raise ValueError(f"implicit root command name {name!r} is already in use")
            root = Command(name, *definitions)
            self._definitions = SymbolDefinitionSet((root,))
            self._root = root
            self._root_command_is_implicit = True
        else:
            self._definitions = SymbolDefinitionSet(definitions)
            self._root = definitions[0] if single else None
            self._root_command_is_implicit = False

        self._delimiters = delimiters
        self._unbundle = bool(unbundle)
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._deferred = bool(deferred)

    definitions = mirror("definitions")
    root = mirror("root")
    root_command_is_implicit = mirror("root_command_is_implicit")
    delimiters = mirror("delimiters")
    unbundle = mirror("unbundle")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")
    deferred = mirror("deferred")

    def options(self):
        """
        Rendering options forwarded to trigger().
        """
        return {
            "prog": self._root.name if self._root is not None else _executable(),
            "shell": self._shell,
            "fancy": self._fancy,
            "colorful": self._colorful,
            "deferred": self._deferred,
        }

    def __repr__(self):
        return "parser-configuration(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)


__all__ = (
    "ParserConfiguration",
)
