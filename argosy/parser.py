"""
Argosy parser layer: match a token stream against a grammar.

What this module provides
- SymbolParser: owns a ParserConfiguration and turns raw argument lists into
  RawParseResult objects.
  • normalize_root_command(): make the argument list start with the root
    command name (inferred from an executable path, or injected).
  • parse_raw(): the single left-to-right matching scan.
  • parse(): convenience front door accepting sys.argv, a shell-like string
    or an iterable of strings.
- RawParseResult: immutable outcome of one scan (root symbols, leftovers,
  unmatched tokens, errors) with diagram/rich rendering and fault surfacing.

Matching, in short
- '--' stops the scan; whatever follows stays in the queue as leftover.
- a non-argument token whose alias names a top-level definition opens that
  symbol once; later occurrences re-reference the same instance.
- any other token is offered to the matched symbols, most recent first; the
  first one that takes it wins. An argument token never travels past a
  command symbol, so positionals cannot leak into commands opened earlier.
- tokens nobody takes are unmatched; they become errors only when the
  resolved command treats unmatched tokens as errors.

Quick start
    from argosy import Command, Option, Flag, SymbolParser

    parser = SymbolParser(Command("tool", Option("-o", "--output"), Flag("-v")))
    result = parser.parse("tool -v --output out.txt")
    print(result.diagram())  # [ tool [ -v ] [ --output <out.txt> ] ]
"""
import os.path
import shlex
import sys
from collections import deque
from collections.abc import Iterable

from rich.text import Text
from rich.tree import Tree

from .configuration import ParserConfiguration
from .definitions import SymbolKind
from .faults import ParseExit, trigger, unrecognized
from .lexer import TokenType, lex
from .symbols import Symbol, SymbolSet
from .utils import *


class RawParseResult:
    """
    Immutable outcome of SymbolParser.parse_raw().

    Attributes
    - tokens: the raw argument list as given by the caller.
    - symbols: SymbolSet of root symbols (children of the implicit root when
      the root command is implicit).
    - configuration: the ParserConfiguration used.
    - unparsed: token values left in the queue after '--'.
    - unmatched: token values no symbol absorbed, in encounter order.
    - errors: ParseError faults (UnrecognizedTokenError) accumulated by the scan.
    - raw_input: the original shell-like string, when there was one.
    - matched: the append-only match log; a symbol appears once per token it consumed.
    """

    __introspectable__ = (
        "tokens",
        "symbols",
        "configuration",
        "unparsed",
        "unmatched",
        "errors",
        "raw_input",
        "matched",
    )
    __displayable__ = (
        "tokens",
        "symbols",
        "unparsed",
        "unmatched",
        "errors",
    )

    def __init__(
            self,
            tokens,
            symbols,
            configuration,
            unparsed=(),
            unmatched=(),
            errors=(),
            raw_input=None,
            matched=(),
            command=None
    ):
        self._tokens = tuple(tokens)
        self._symbols = symbols
        self._configuration = configuration
        self._unparsed = tuple(unparsed)
        self._unmatched = tuple(unmatched)
        self._errors = tuple(errors)
        self._raw_input = raw_input
        self._matched = tuple(matched)
        self._command = command

    tokens = mirror("tokens")
    symbols = mirror("symbols")
    configuration = mirror("configuration")
    unparsed = mirror("unparsed")
    unmatched = mirror("unmatched")
    errors = mirror("errors")
    raw_input = mirror("raw_input")
    matched = mirror("matched")

    def command(self):
        """
        Return the innermost matched command symbol (or None).

        With an implicit root, the synthetic root symbol is the answer when no
        visible command was matched.
        """
        return self._command

    def diagram(self):
        """
        Bracketed text form of the root symbols followed by unmatched tokens.

        Example
        - '[ tool [ --output <out.txt> ] ]   ???--> bogus'
        """
        diagram = " ".join(symbol.diagram() for symbol in self._symbols)
        if self._unmatched:
            diagram += "   ???--> " + " ".join(self._unmatched)
        return diagram

    def trigger(self):
        """
        Surface the accumulated errors as one ParseExit (no-op when clean).

        Rendering follows the configuration: raised outside shell mode, printed
        through rich (and exiting unless deferred) in shell mode.
        """
        if self._errors:
            trigger(ParseExit(self._errors), **self._configuration.options())

    def __rich__(self):
        options = self._configuration.options()
        tree = Tree(Text(options["prog"], "bold"))
        for symbol in self._symbols:
            symbol.tree(tree)
        for token in self._unmatched:
            tree.add(Text("???--> %s" % token, "red"))
        for token in self._unparsed:
            tree.add(Text("-- %s" % token, "dim"))
        return tree

    def __repr__(self):
        return "raw-parse-result(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        for name in type(self).__displayable__:
            yield name, getattr(self, name)


class SymbolParser:
    """
    Parser bound to one grammar.

    Parameters
    - configuration: ParserConfiguration | SymbolDefinition | Iterable[SymbolDefinition]
      A bare grammar is wrapped into a default ParserConfiguration. None fails
      fast with TypeError before any parse can begin.

    A parser holds no per-parse state: every call builds its own queue, match
    log and symbols, so one parser may serve concurrent parses.
    """

    def __init__(self, configuration, /):
        if configuration is None:
            raise TypeError("symbol parser requires a configuration")
        if not isinstance(configuration, ParserConfiguration):
            configuration = ParserConfiguration(configuration)
        self._configuration = configuration

    configuration = mirror("configuration")

    @property
    def definitions(self):
        return self._configuration.definitions

    def normalize_root_command(self, arguments, /):
        """
        Return the argument list rewritten to start with the root command name.

        rules (first match wins)
        - implicit root: the root name is prepended unconditionally, then the
          remaining rules apply.
        - more than one top-level definition: unchanged.
        - no single command, or first argument equal to its name
          (case-insensitive): unchanged.
        - first argument is a path whose basename is the name (optionally with
          '.exe'): replaced with the bare name.
        - otherwise: the name is prepended.
        """
        arguments = list(arguments)

        if self._configuration.root_command_is_implicit:
            arguments.insert(0, self._configuration.root.name)

        if len(self.definitions) != 1:
            return arguments

        command = self.definitions[0]
        if command.kind is not SymbolKind.COMMAND:
            return arguments

        name = command.name
        first = arguments[0] if arguments else None

        if first is not None and first.casefold() == name.casefold():
            return arguments

        if first is not None and _is_path(first) and os.path.basename(first).casefold() in (
            name.casefold(),
            (name + ".exe").casefold(),
        ):
            return [name, *arguments[1:]]

        return [name, *arguments]

    def parse_raw(self, tokens, raw_input=None, /):
        """
        Match raw argument strings against the grammar.

        Parameters
        - tokens: Iterable[str]
          the raw arguments (already split; no quoting rules are applied).
        - raw_input: str | None
          the original command line, kept on the result for diagnostics.

        Returns
        - RawParseResult. Bad input never raises: unmatched tokens and faults
          are data on the result.
        """
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("parse_raw() argument must be an iterable of strings")
        tokens = tuple(tokens)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("parse_raw() argument must be an iterable of strings")

        unparsed = deque(lex(self.normalize_root_command(tokens), self._configuration))
        symbols = SymbolSet()
        matched = []
        errors = []
        unmatched = []

        while unparsed:
            token = unparsed.popleft()

            if token.type is TokenType.END_OF_ARGUMENTS:
                break

            if token.type is not TokenType.ARGUMENT:
                if (definition := self.definitions.find(token.value)) is not None:
                    for symbol in reversed(matched):
                        if symbol.has_alias(token.value):
                            break
                    else:
                        symbol = Symbol.create(definition, token.value)
                        symbols._add(symbol)
                    matched.append(symbol)
                    continue

            for symbol in reversed(matched):
                if (taken := symbol.try_take_token(token)) is not None:
                    matched.append(taken)
                    break
                if token.type is TokenType.ARGUMENT and symbol.definition.kind is SymbolKind.COMMAND:
                    unmatched.append(token.value)
                    break
            else:
                unmatched.append(token.value)

        command = next(
            (symbol for symbol in reversed(list(symbols.flatten())) if symbol.definition.kind is SymbolKind.COMMAND),
            None
        )
        if command is not None and command.definition.treat_unmatched_tokens_as_errors:
            errors.extend(unrecognized(token) for token in unmatched)

        if self._configuration.root_command_is_implicit:
            if matched and matched[0].definition is self._configuration.root:
                del matched[0]
            symbols = SymbolSet(child for symbol in symbols for child in symbol.children)

        return RawParseResult(
            tokens,
            symbols,
            self._configuration,
            (token.value for token in unparsed),
            unmatched,
            errors,
            raw_input,
            matched,
            command,
        )

    def parse(self, prompt=Unset, /):
        """
        Parse a token stream.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; will be split via shlex.split and kept as raw_input.
          • Iterable[str]: pre-tokenized sequence; each element is trimmed and
            empty elements are dropped.

        Raises
        - TypeError: when prompt is not Unset/str/Iterable[str], or when an
          iterable contains a non-string element.
        """
        raw_input = None
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
            raw_input = prompt
        elif isinstance(prompt, Iterable):
            def _sanitized(iterable):
                for item in iterable:
                    if not isinstance(item, str):
                        raise TypeError("parse() argument must be a string or an iterable of strings")
                    if item := item.strip():
                        yield item
            tokens = list(_sanitized(prompt))
        else:
            raise TypeError("parse() argument must be a string or an iterable of strings")

        return self.parse_raw(tokens, raw_input)

    def __repr__(self):
        return "symbol-parser(configuration=%r)" % self._configuration


def _is_path(argument):
    return os.sep in argument or bool(os.altsep and os.altsep in argument)


def parse(definitions, prompt=Unset, /, **options):
    """
    One-shot helper: build a parser for definitions and parse prompt.

    Keyword options are forwarded to ParserConfiguration.
    """
    return SymbolParser(ParserConfiguration(definitions, **options)).parse(prompt)


__all__ = (
    "SymbolParser",
    "RawParseResult",
    "parse",
)
