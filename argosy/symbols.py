"""
Runtime symbols: matched occurrences of definitions.

A Symbol pairs a definition with the literal token that invoked it, and
collects whatever it absorbs while the parser scans: child symbols (options
and subcommands of a command, positional slots) and raw argument values.

Variants
- CommandSymbol: opens its next positional slot for an argument token, and
  opens (or re-opens) the child answering to an option/command token.
- OptionSymbol: takes argument tokens while its arity allows.
- ArgumentSymbol: a positional slot; takes argument tokens while its arity allows.

try_take_token() never mutates the symbol when it refuses a token.
"""
from collections import deque

from rich.text import Text
from rich.tree import Tree

from .definitions import SymbolDefinition, SymbolKind
from .lexer import TokenType
from .utils import *


class SymbolSet:
    """
    Ordered collection of sibling symbols.

    Insertion order is preserved and an alias answers to at most one symbol
    of the set; adding a second symbol for a taken alias raises ValueError.
    Sets are read-only from the outside: only the parser and command symbols
    add members while a parse runs.
    """
    __slots__ = ("_symbols",)

    def __init__(self, symbols=(), /):
        self._symbols = []
        for symbol in symbols:
            self._add(symbol)

    def _add(self, symbol, /):
        if not isinstance(symbol, Symbol):
            raise TypeError("symbol set items must be symbols")
        if any(symbol is other for other in self._symbols):
            raise ValueError("symbol %r is already in the set" % symbol.token)
        for alias in symbol.definition.aliases:
            if self.find(alias) is not None:
                raise ValueError("alias %r is already in use" % alias)
        self._symbols.append(symbol)

    def find(self, alias, /):
        """
        Return the symbol answering to alias, or None.
        """
        for symbol in self._symbols:
            if symbol.has_alias(alias):
                return symbol
        return None

    def flatten(self):
        """
        Yield every symbol of the forest, breadth-first.
        """
        queue = deque(self._symbols)
        while queue:
            symbol = queue.popleft()
            yield symbol
            queue.extend(symbol.children)

    def __getitem__(self, key):
        if isinstance(key, str):
            if (symbol := self.find(key)) is None:
                raise KeyError(key)
            return symbol
        return self._symbols[key]

    def __contains__(self, item):
        if isinstance(item, str):
            return self.find(item) is not None
        return any(item is symbol for symbol in self._symbols)

    def __iter__(self):
        return iter(self._symbols)

    def __len__(self):
        return len(self._symbols)

    def __repr__(self):
        return "symbol-set(%s)" % ", ".join(map(repr, self._symbols))

    def __rich_repr__(self):
        yield from self._symbols


class Symbol:
    """
    One matched occurrence of a definition.

    Attributes
    - definition: the SymbolDefinition this symbol instantiates (never None).
    - token: the literal text that opened it (an alias, or the first value of a slot).
    - parent: the symbol that absorbed it, or None for root symbols.
    - children: SymbolSet of absorbed child symbols.
    - arguments: raw values absorbed so far.
    """

    __typename__ = "symbol"

    def __init__(self, definition, token, /, parent=None):
        if not isinstance(definition, SymbolDefinition):
            raise TypeError("symbol requires a symbol definition")
        if not isinstance(token, str):
            raise TypeError("symbol token must be a string")
        self._definition = definition
        self._token = token
        self._parent = parent
        self._children = SymbolSet()
        self._arguments = []

    definition = mirror("definition")
    token = mirror("token")
    parent = mirror("parent")
    arguments = mirror("arguments")

    @property
    def children(self):
        return self._children

    @property
    def name(self):
        return self._definition.name

    @staticmethod
    def create(definition, token, /, parent=None):
        """
        Build the symbol variant matching the definition's kind.
        """
        if not isinstance(definition, SymbolDefinition):
            raise TypeError("symbol requires a symbol definition")
        return _VARIANTS[definition.kind](definition, token, parent=parent)

    def has_alias(self, text, /):
        return self._definition.has_alias(text)

    def try_take_token(self, token, /):
        """
        Try to absorb one token; return the accepting symbol or None.
        """
        return None

    def diagram(self):
        """
        Bracketed text form, e.g. '[ tool [ --output <out.txt> ] <a.txt> ]'.
        """
        parts = [self._token]
        parts.extend(child.diagram() for child in self._children)
        parts.extend("<%s>" % argument for argument in self._arguments)
        return "[ %s ]" % " ".join(parts)

    def tree(self, tree=None, /):
        """
        Render this symbol (and its children) as a rich Tree.
        """
        label = Text.assemble(
            (self._token, "bold" if self._definition.kind is SymbolKind.COMMAND else ""),
            *((" <%s>" % argument, "cyan") for argument in self._arguments),
        )
        node = Tree(label) if tree is None else tree.add(label)
        for child in self._children:
            child.tree(node)
        return node

    def __getitem__(self, alias):
        return self._children[alias]

    def __contains__(self, alias):
        return alias in self._children

    def __repr__(self):
        return "%s(%s)" % (
            type(self).__typename__,
            ", ".join("%s=%r" % pair for pair in self.__rich_repr__())
        )

    def __rich_repr__(self):
        yield "token", self._token
        if self._arguments:
            yield "arguments", tuple(self._arguments)
        if self._children:
            yield "children", tuple(self._children)


class _ValueSymbol(Symbol):
    """
    Shared absorption rule for value-bearing symbols: take argument tokens
    until the definition's maximum arity is reached.
    """

    def accepts(self):
        maximum = self._definition.arity[1]
        return maximum is None or len(self._arguments) < maximum

    def try_take_token(self, token, /):
        if token.type is not TokenType.ARGUMENT or not self.accepts():
            return None
        self._arguments.append(token.value)
        return self


class OptionSymbol(_ValueSymbol):
    __typename__ = "option-symbol"


class ArgumentSymbol(_ValueSymbol):
    __typename__ = "argument-symbol"

    def diagram(self):
        return " ".join("<%s>" % argument for argument in self._arguments)


class CommandSymbol(Symbol):
    __typename__ = "command-symbol"

    def try_take_token(self, token, /):
        if token.type is TokenType.END_OF_ARGUMENTS:
            return None

        if token.type is TokenType.ARGUMENT:
            # positional slots open strictly in declaration order
            for slot in self._definition.arguments:
                if any(child.definition is slot for child in self._children):
                    continue
                child = ArgumentSymbol(slot, token.value, parent=self)
                child.try_take_token(token)
                self._children._add(child)
                return child
            return None

        if (child := self._children.find(token.value)) is not None:
            return child

        if (definition := self._definition.find(token.value)) is not None:
            child = Symbol.create(definition, token.value, parent=self)
            self._children._add(child)
            return child

        return None


_VARIANTS = {
    SymbolKind.COMMAND: CommandSymbol,
    SymbolKind.OPTION: OptionSymbol,
    SymbolKind.ARGUMENT: ArgumentSymbol,
}


__all__ = (
    "Symbol",
    "CommandSymbol",
    "OptionSymbol",
    "ArgumentSymbol",
    "SymbolSet",
)
