r"""
Argosy symbol definitions (the static grammar).

Overview
- Definitions
  • Command: a named command that owns child definitions (options, flags,
    positional arguments and subcommands).
  • Option: named, value-bearing option with one or more aliases (e.g., -o/--output).
  • Flag: named, presence-only option (an Option of arity zero), e.g., -v/--verbose.
  • Argument: positional, value-bearing slot owned by a command.
- SymbolDefinitionSet: ordered, read-only collection with a precomputed alias map.

Definitions are built once, validated on construction and never mutated
afterwards, so one grammar can be shared by any number of parses.

Metadata (sanitized on construction)
- names/aliases: validated, duplicates rejected.
- descr: Unset | str | Text (short description), non-empty when provided.
- metavar: Unset | str (Option/Argument label).
- nargs: Unset | "?" | "+" | "*" | int (>=1).

Validation highlights
- Option names must match r"--?[^\W\d_](-?[^\W_]+)*".
- Command names must match r"[^\W_][\w.-]*".
- Aliases of the children of one command must be unique.
- A variadic Argument ("*" or "+") must be the last positional slot.

Quick example:
    >>> from argosy.definitions import Command, Option, Flag, Argument
    >>> grammar = Command(
    ...     "tool",
    ...     Argument("FILE"),
    ...     Option("-o", "--output"),
    ...     Flag("-v", "--verbose"),
    ...     Command("check", Flag("--strict")),
    ... )
"""
import functools
import operator
import re
from collections.abc import Iterable, Mapping
from enum import Enum
from types import MappingProxyType

from rich.text import Text

from .utils import *


class SymbolKind(Enum):
    COMMAND = "command"
    OPTION = "option"
    ARGUMENT = "argument"


class DefinitionType(type):
    """
    Metaclass that makes definitions introspectable and read-only.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and pretty printers.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(name='--verbose', aliases=frozenset({'-v', '--verbose'}), ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield a sequence of (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


_OPTION_NAME = r"--?[^\W\d_](-?[^\W_]+)*"
_COMMAND_NAME = r"[^\W_][\w.-]*"


def _sanitize_descr(cls, metadata, /):
    """
    Internal: normalize and validate the 'descr' field shared by every definition.

    - descr: optional short description. If omitted (Unset), it becomes None.
      If provided, it must be a non-empty string after trimming.
    """
    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_names(cls, names, pattern, /):
    r"""
    Internal: validate a collection of aliases against a name pattern.

    Returns the names in declaration order; the first one is the primary name.

    Raises
    - TypeError: when names are missing or contain non-string entries.
    - ValueError: when a name is empty after trimming, fails validation, or duplicates appear.
    """
    if not names:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    sanitized = []
    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif not re.fullmatch(pattern, name):
            raise ValueError(f"{cls.__typename__} name {name!r} is not valid")
        elif name in sanitized:
            raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
        sanitized.append(name)
    return sanitized


def _sanitize_parametric(cls, metadata, /):
    """
    Internal: validate and normalize metadata for value-bearing definitions.

    - metavar: must be Unset or a non-empty string after trimming.
    - nargs: must be Unset | "?" | "+" | "*" | int (>= 1); Unset means exactly one.
      The arity is stored as a (minimum, maximum) pair where maximum None is unbounded.
    """
    if not isinstance(metavar := metadata["metavar"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
    metadata["metavar"] = coalesce(metavar)

    if not isinstance(nargs := metadata["nargs"], str | int | Unset) or isinstance(nargs, bool):
        raise TypeError(f"{cls.__typename__} 'nargs' must be a string or an integer")
    if isinstance(nargs, str) and nargs not in ("?", "+", "*"):
        raise ValueError(f"{cls.__typename__} 'nargs' must be one of '?', '+', or '*'")
    if isinstance(nargs, int) and nargs < 1:
        raise ValueError(f"{cls.__typename__} 'nargs' must be a positive integer")
    metadata["nargs"] = coalesce(nargs)

    match nargs:
        case "?":
            metadata["arity"] = (0, 1)
        case "*":
            metadata["arity"] = (0, None)
        case "+":
            metadata["arity"] = (1, None)
        case int():
            metadata["arity"] = (nargs, nargs)
        case _:
            metadata["arity"] = (1, 1)


class SymbolDefinition(metaclass=DefinitionType):
    """
    Base of every grammar node.

    A definition has a primary name, a set of aliases, a kind and an optional
    description. Matching an alias is exact and case-sensitive.
    """
    kind = Unset

    name = mirror("name")
    aliases = mirror("aliases")
    descr = mirror("descr")

    def has_alias(self, text, /):
        return text in self._aliases


class Command(SymbolDefinition):
    """
    Named command that owns child definitions.

    Highlights
    - children may be Option, Flag, Argument or nested Command definitions.
    - child aliases are indexed once; duplicates fail fast with ValueError.
    - treat_unmatched_tokens_as_errors: when the parse resolves to this command,
      tokens nothing absorbed become UnrecognizedTokenError faults.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "descr",
        "children",
        "arguments",
        "treat_unmatched_tokens_as_errors",
    )
    __displayable__ = (
        "name",
        "aliases",
        "descr",
        "children",
        "treat_unmatched_tokens_as_errors",
    )

    kind = SymbolKind.COMMAND

    def __init__(
            self,
            name,
            /,
            *children,
            aliases=(),
            descr=Unset,
            treat_unmatched_tokens_as_errors=True
    ):
        metadata = {"descr": descr}
        _sanitize_descr(type(self), metadata)

        if isinstance(aliases, str) or not isinstance(aliases, Iterable):
            raise TypeError(f"{type(self).__typename__} 'aliases' must be an iterable of strings")
        names = _sanitize_names(type(self), (name, *aliases), _COMMAND_NAME)

        self._name = names[0]
        self._aliases = frozenset(names)
        self._descr = metadata["descr"]
        self._treat_unmatched_tokens_as_errors = bool(treat_unmatched_tokens_as_errors)

        for child in children:
            if not isinstance(child, SymbolDefinition):
                raise TypeError(f"{type(self).__typename__} children must be symbol definitions")

        self._children = SymbolDefinitionSet(child for child in children if child.kind is not SymbolKind.ARGUMENT)
        self._arguments = tuple(child for child in children if child.kind is SymbolKind.ARGUMENT)

        for argument in self._arguments[:-1]:
            if argument.arity[1] is None:
                raise ValueError(f"{type(self).__typename__} variadic argument must be the last one")

    def find(self, alias, /):
        """
        Return the child definition answering to alias, or None.
        """
        return self._children.find(alias)


class Option(SymbolDefinition):
    """
    Named, value-bearing option definition.

    Highlights
    - Supports aliases via 'names' (e.g., "-o", "--output", "-output");
      the first name is the primary one.
    - Arity: Unset (exactly one), fixed (int >= 1), optional single ("?"),
      one-or-more ("+"), zero-or-more ("*").
    """

    __introspectable__ = (
        "name",
        "aliases",
        "metavar",
        "nargs",
        "arity",
        "descr",
    )

    kind = SymbolKind.OPTION

    def __init__(self, *names, metavar=Unset, nargs=Unset, descr=Unset):
        metadata = {"metavar": metavar, "nargs": nargs, "descr": descr}
        _sanitize_descr(type(self), metadata)
        _sanitize_parametric(type(self), metadata)
        names = _sanitize_names(type(self), names, _OPTION_NAME)

        self._name = names[0]
        self._aliases = frozenset(names)
        self._metavar = metadata["metavar"]
        self._nargs = metadata["nargs"]
        self._arity = metadata["arity"]
        self._descr = metadata["descr"]


class Flag(Option):
    """
    Named, presence-only option definition (arity zero).
    """

    __introspectable__ = (
        "name",
        "aliases",
        "descr",
    )

    def __init__(self, *names, descr=Unset):
        super().__init__(*names, descr=descr)
        self._nargs = 0
        self._arity = (0, 0)


class Argument(SymbolDefinition):
    """
    Positional, value-bearing slot owned by a command.

    Arguments have no aliases; they are reached only by absorption, in the
    order the owning command declares them.
    """

    __introspectable__ = (
        "name",
        "metavar",
        "nargs",
        "arity",
        "descr",
    )

    kind = SymbolKind.ARGUMENT

    def __init__(self, metavar=Unset, /, nargs=Unset, descr=Unset):
        metadata = {"metavar": metavar, "nargs": nargs, "descr": descr}
        _sanitize_descr(type(self), metadata)
        _sanitize_parametric(type(self), metadata)

        self._metavar = metadata["metavar"]
        self._name = metadata["metavar"] or "ARG"
        self._aliases = frozenset()
        self._nargs = metadata["nargs"]
        self._arity = metadata["arity"]
        self._descr = metadata["descr"]


class SymbolDefinitionSet:
    """
    Ordered, read-only collection of definitions with O(1) alias lookup.

    The alias map is built once; an alias claimed by two definitions is a
    grammar error and fails fast with ValueError.
    """
    __slots__ = ("_definitions", "_aliases")

    def __init__(self, definitions=(), /):
        if isinstance(definitions, SymbolDefinition):
            definitions = (definitions,)
        if not isinstance(definitions, Iterable):
            raise TypeError("symbol definitions must be an iterable of definitions")

        self._definitions = []
        self._aliases = {}
        for definition in definitions:
            if not isinstance(definition, SymbolDefinition):
                raise TypeError("symbol definitions must be an iterable of definitions")
            for alias in definition.aliases:
                if self._aliases.setdefault(alias, definition) is not definition:
                    raise ValueError(f"alias {alias!r} is already in use")
            self._definitions.append(definition)

    @property
    def aliases(self) -> Mapping:
        return MappingProxyType(self._aliases)

    def find(self, alias, /):
        return self._aliases.get(alias)

    def __contains__(self, alias):
        return alias in self._aliases

    def __iter__(self):
        return iter(self._definitions)

    def __len__(self):
        return len(self._definitions)

    def __getitem__(self, index):
        return self._definitions[index]

    def __repr__(self):
        return f"symbol-definition-set({", ".join(map(repr, self._definitions))})"

    def __rich_repr__(self):
        yield from self._definitions


__all__ = (
    "SymbolKind",
    "SymbolDefinition",
    "Command",
    "Option",
    "Flag",
    "Argument",
    "SymbolDefinitionSet",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del DefinitionType
