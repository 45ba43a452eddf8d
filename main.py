from rich.pretty import pprint

from argosy import *
from argosy.faults import console


grammar = Command(
    "tool",
    Argument("FILE"),
    Option("-o", "--output"),
    Flag("-v", "--verbose"),
    Command("check", Flag("--strict"), Argument("PATHS", nargs="*")),
)


if __name__ == '__main__':
    result = SymbolParser(grammar).parse()
    pprint(result)
    console.print(result)
    result.trigger()
