"""
Lexer: classify raw argument strings into typed tokens.

Rules, applied to each raw argument in order
- after '--' every argument is an ARGUMENT token; '--' itself is END_OF_ARGUMENTS.
- an argument equal to a known alias is an OPTION or COMMAND token; a COMMAND
  token makes the aliases of that command's children known too (aliases are
  only ever added, never forgotten).
- '--name=value' / '--name:value' where '--name' is a known option alias
  becomes an OPTION token followed by an ARGUMENT token.
- '-abc' where '-a', '-b' and '-c' are all known option aliases becomes one
  OPTION token per letter (when unbundling is enabled).
- anything else is an ARGUMENT token.

Quoting and escaping are not handled here: arguments arrive already split.
"""
from collections import namedtuple
from enum import Enum

from .definitions import SymbolKind


class TokenType(Enum):
    ARGUMENT = "argument"
    COMMAND = "command"
    OPTION = "option"
    END_OF_ARGUMENTS = "end-of-arguments"


class Token(namedtuple("Token", ("value", "type"))):
    __slots__ = ()

    def __repr__(self):
        return "token(%r, %s)" % (self.value, self.type.value)

    def __rich_repr__(self):
        yield self.value
        yield "type", self.type


def _typeof(definition):
    return TokenType.COMMAND if definition.kind is SymbolKind.COMMAND else TokenType.OPTION


def _learn(known, definitions):
    for definition in definitions:
        for alias in definition.aliases:
            known.setdefault(alias, definition)


def _split(argument, known, delimiters):
    """
    Split '--name=value' into ('--name', 'value') when '--name' is a known option.
    """
    positions = [index for index in map(argument.find, delimiters) if index > 0]
    if not positions:
        return None
    name, value = argument[:min(positions)], argument[min(positions) + 1:]
    definition = known.get(name)
    if definition is None or definition.kind is not SymbolKind.OPTION:
        return None
    return name, value


def _unbundle(argument, known):
    """
    Expand '-abc' into ['-a', '-b', '-c'] when every piece is a known option.
    """
    if len(argument) < 3 or not argument.startswith("-") or argument.startswith("--"):
        return None
    pieces = ["-" + char for char in argument[1:]]
    for piece in pieces:
        definition = known.get(piece)
        if definition is None or definition.kind is not SymbolKind.OPTION:
            return None
    return pieces


def lex(arguments, configuration, /):
    """
    Turn raw argument strings into a fresh list of Token.

    Parameters
    - arguments: Iterable[str]
      raw arguments, already normalized to start with the root command name.
    - configuration: ParserConfiguration
      provides the grammar, delimiters and the unbundling switch.

    Returns
    - list[Token] in input order. Deterministic and side-effect free.
    """
    known = {}
    _learn(known, configuration.definitions)

    tokens = []
    stopped = False
    for argument in arguments:
        if stopped:
            tokens.append(Token(argument, TokenType.ARGUMENT))
            continue

        if argument == "--":
            tokens.append(Token(argument, TokenType.END_OF_ARGUMENTS))
            stopped = True
            continue

        if (definition := known.get(argument)) is not None:
            tokens.append(Token(argument, _typeof(definition)))
            if definition.kind is SymbolKind.COMMAND:
                _learn(known, definition.children)
            continue

        if split := _split(argument, known, configuration.delimiters):
            name, value = split
            tokens.append(Token(name, TokenType.OPTION))
            tokens.append(Token(value, TokenType.ARGUMENT))
        elif configuration.unbundle and (pieces := _unbundle(argument, known)):
            tokens.extend(Token(piece, TokenType.OPTION) for piece in pieces)
        else:
            tokens.append(Token(argument, TokenType.ARGUMENT))

    return tokens


__all__ = (
    "TokenType",
    "Token",
    "lex",
)
