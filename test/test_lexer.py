"""
Lexer behavioral tests.

Scope
- Validate token classification against the grammar (commands, options,
  arguments, '--').
- Validate alias learning as commands are seen, inline '=value' splitting and
  short-flag unbundling.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argosy import Command, Flag, Option, ParserConfiguration, Token, TokenType, lex

ARGUMENT = TokenType.ARGUMENT
COMMAND = TokenType.COMMAND
OPTION = TokenType.OPTION
END = TokenType.END_OF_ARGUMENTS


def configuration(**options):
    return ParserConfiguration(
        Command(
            "root",
            Flag("-a"),
            Flag("-b"),
            Option("--x"),
            Command("sub", Flag("--deep"), Option("-o")),
        ),
        **options,
    )


class TestLex(TestCase):
    """Behavioral tests for lex()."""

    def setUp(self):
        self.configuration = configuration()

    def types(self, arguments, configuration=None):
        return [(token.value, token.type) for token in lex(arguments, configuration or self.configuration)]

    def testClassification(self):
        self.assertEqual(
            self.types(["root", "-a", "sub", "value"]),
            [("root", COMMAND), ("-a", OPTION), ("sub", COMMAND), ("value", ARGUMENT)],
        )

    def testEverythingAfterDoubleDashIsArgument(self):
        self.assertEqual(
            self.types(["root", "--", "-a", "sub", "--"]),
            [("root", COMMAND), ("--", END), ("-a", ARGUMENT), ("sub", ARGUMENT), ("--", ARGUMENT)],
        )

    def testChildAliasesAreLearnedWhenTheirCommandIsSeen(self):
        self.assertEqual(
            self.types(["root", "--deep", "sub", "--deep"]),
            [("root", COMMAND), ("--deep", ARGUMENT), ("sub", COMMAND), ("--deep", OPTION)],
        )

    def testLearnedAliasesAreNeverForgotten(self):
        self.assertEqual(
            self.types(["root", "sub", "-a"]),
            [("root", COMMAND), ("sub", COMMAND), ("-a", OPTION)],
        )

    def testInlineValueIsSplit(self):
        self.assertEqual(
            self.types(["root", "--x=1", "--x:2", "--x="]),
            [
                ("root", COMMAND),
                ("--x", OPTION), ("1", ARGUMENT),
                ("--x", OPTION), ("2", ARGUMENT),
                ("--x", OPTION), ("", ARGUMENT),
            ],
        )

    def testInlineValueSplitsAtFirstDelimiter(self):
        self.assertEqual(self.types(["root", "--x=a:b"])[1:], [("--x", OPTION), ("a:b", ARGUMENT)])

    def testUnknownInlineNameIsArgument(self):
        self.assertEqual(self.types(["root", "--y=1", "sub=1"])[1:], [("--y=1", ARGUMENT), ("sub=1", ARGUMENT)])

    def testDelimitersAreConfigurable(self):
        self.assertEqual(
            self.types(["root", "--x:1", "--x=2"], configuration(delimiters=("=",)))[1:],
            [("--x:1", ARGUMENT), ("--x", OPTION), ("2", ARGUMENT)],
        )

    def testBundledShortFlagsAreUnbundled(self):
        self.assertEqual(self.types(["root", "-ab"])[1:], [("-a", OPTION), ("-b", OPTION)])

    def testBundleWithUnknownPieceStaysArgument(self):
        self.assertEqual(self.types(["root", "-az"])[1:], [("-az", ARGUMENT)])

    def testUnbundlingCanBeDisabled(self):
        self.assertEqual(self.types(["root", "-ab"], configuration(unbundle=False))[1:], [("-ab", ARGUMENT)])

    def testLexIsDeterministic(self):
        arguments = ["root", "sub", "-o", "x", "--", "y"]
        self.assertEqual(lex(arguments, self.configuration), lex(arguments, self.configuration))

    def testTokenIsAValuePair(self):
        token = Token("-a", OPTION)
        self.assertEqual(token, ("-a", OPTION))
        self.assertEqual(token.value, "-a")
        self.assertEqual(repr(token), "token('-a', option)")


if __name__ == "__main__":
    unittest.main()
