"""
Parser behavioral tests (normalization, matching scan, result assembly).

Scope
- Validate root-command normalization (paths, suffixes, implicit roots).
- Validate the matching scan: alias reuse, absorption order, command
  boundaries, '--' handling and unmatched-token policy.
- Validate result assembly and fault surfacing.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (SymbolParser, ParserConfiguration, definitions).
"""

from __future__ import annotations

import os.path
import unittest
from unittest import TestCase

from rich.console import Console

from argosy import (
    Argument,
    Command,
    Flag,
    Option,
    ParseExit,
    ParserConfiguration,
    SymbolParser,
    UnrecognizedTokenError,
    parse,
)
from argosy.faults import console


def grammar():
    return Command(
        "root",
        Flag("--flag"),
        Flag("-v", "--verbose"),
        Option("--many", nargs="*"),
        Command("sub", Option("--x"), Command("other")),
        Command("sibling"),
    )


class TestNormalizeRootCommand(TestCase):
    """Behavioral tests for SymbolParser.normalize_root_command()."""

    def setUp(self):
        self.parser = SymbolParser(Command("tool", Flag("-v")))

    def testExecutablePathIsReplacedWithCommandName(self):
        path = os.path.join("usr", "local", "bin", "tool")
        self.assertEqual(self.parser.normalize_root_command([path, "-v"]), ["tool", "-v"])

    def testExecutablePathWithExeSuffixIsReplaced(self):
        path = os.path.join("bin", "TOOL.EXE")
        self.assertEqual(self.parser.normalize_root_command([path]), ["tool"])

    def testMatchingFirstArgumentIsUnchangedIgnoringCase(self):
        self.assertEqual(self.parser.normalize_root_command(["TOOL", "-v"]), ["TOOL", "-v"])

    def testCommandNameIsPrependedWhenMissing(self):
        self.assertEqual(self.parser.normalize_root_command(["-v"]), ["tool", "-v"])

    def testEmptyArgumentsGetTheCommandName(self):
        self.assertEqual(self.parser.normalize_root_command([]), ["tool"])

    def testPathToAnotherExecutableIsKept(self):
        path = os.path.join("bin", "other")
        self.assertEqual(self.parser.normalize_root_command([path]), ["tool", path])

    def testImplicitRootIsPrepended(self):
        configuration = ParserConfiguration([Flag("-v"), Option("--x")], executable="app")
        parser = SymbolParser(configuration)
        self.assertEqual(parser.normalize_root_command(["-v"]), ["app", "-v"])

    def testSeveralTopLevelDefinitionsAreLeftAlone(self):
        configuration = ParserConfiguration([Command("a"), Command("b")], implicit=False)
        parser = SymbolParser(configuration)
        self.assertEqual(parser.normalize_root_command(["b", "x"]), ["b", "x"])

    def testNormalizationDoesNotMutateInput(self):
        arguments = ["-v"]
        self.parser.normalize_root_command(arguments)
        self.assertEqual(arguments, ["-v"])


class TestParseRaw(TestCase):
    """Behavioral tests for the matching scan."""

    def setUp(self):
        self.parser = SymbolParser(grammar())

    def testEndOfArgumentsStopsTheScan(self):
        result = self.parser.parse_raw(["root", "--flag", "--", "extra", "stuff"])
        self.assertEqual(result.unparsed, ("extra", "stuff"))
        self.assertEqual(result.unmatched, ())
        self.assertIn("--flag", result.symbols["root"])

    def testUnmatchedTokenBecomesErrorUnderStrictCommand(self):
        result = self.parser.parse_raw(["root", "bogus"])
        self.assertEqual(result.unmatched, ("bogus",))
        self.assertEqual(len(result.errors), 1)
        self.assertIsInstance(result.errors[0], UnrecognizedTokenError)
        self.assertEqual(result.errors[0].options["token"], "bogus")
        self.assertIn("bogus", str(result.errors[0]))

    def testUnmatchedTokenIsInformationalUnderLenientCommand(self):
        parser = SymbolParser(Command("tool", treat_unmatched_tokens_as_errors=False))
        result = parser.parse_raw(["tool", "bogus"])
        self.assertEqual(result.unmatched, ("bogus",))
        self.assertEqual(result.errors, ())

    def testRepeatedAliasReusesOneSymbol(self):
        result = self.parser.parse_raw(["root", "--verbose", "--verbose"])
        self.assertEqual(len(result.symbols), 1)
        self.assertEqual(len(result.symbols["root"].children), 1)
        self.assertEqual(len(result.matched), 3)
        self.assertIs(result.matched[1], result.matched[2])

    def testDifferentAliasesOfOneDefinitionShareASymbol(self):
        result = self.parser.parse_raw(["root", "-v", "--verbose"])
        self.assertIs(result.matched[1], result.matched[2])
        self.assertEqual(result.matched[1].token, "-v")

    def testRepeatedRootCommandIsReused(self):
        result = self.parser.parse_raw(["root", "root"])
        self.assertEqual(len(result.symbols), 1)
        self.assertIs(result.matched[0], result.matched[1])

    def testOptionsNestUnderTheirCommand(self):
        result = self.parser.parse_raw(["root", "sub", "--x", "1"])
        sub = result.symbols["root"]["sub"]
        self.assertEqual(sub["--x"].arguments, ("1",))
        self.assertIs(sub["--x"].parent, sub)
        self.assertEqual(result.diagram(), "[ root [ sub [ --x <1> ] ] ]")

    def testNestedCommandBlocksArgumentAbsorption(self):
        result = self.parser.parse_raw(["root", "sub", "--x", "other", "v"])
        self.assertEqual(result.symbols["root"]["sub"]["--x"].arguments, ())
        self.assertEqual(result.unmatched, ("v",))

    def testSiblingCommandBlocksArgumentAbsorption(self):
        result = self.parser.parse_raw(["root", "sub", "--x", "sibling", "v"])
        root = result.symbols["root"]
        self.assertIn("sibling", root)
        self.assertEqual(root["sub"]["--x"].arguments, ())
        self.assertEqual(result.unmatched, ("v",))

    def testAliasWinsOverAbsorption(self):
        result = self.parser.parse_raw(["root", "--many", "a", "--flag", "b"])
        root = result.symbols["root"]
        self.assertIn("--flag", root)
        self.assertEqual(root["--flag"].arguments, ())
        self.assertEqual(root["--many"].arguments, ("a", "b"))

    def testSaturatedOptionDoesNotBlockAbsorption(self):
        parser = SymbolParser(Command("tool", Argument("FILES", nargs="*"), Option("--one")))
        result = parser.parse_raw(["tool", "--one", "a", "b"])
        tool = result.symbols["tool"]
        self.assertEqual(tool["--one"].arguments, ("a",))
        self.assertEqual(result.diagram(), "[ tool [ --one <a> ] <b> ]")

    def testPositionalSlotsFillInDeclarationOrder(self):
        parser = SymbolParser(Command("cp", Argument("SRC"), Argument("DST"), Flag("-r")))
        result = parser.parse_raw(["cp", "a", "-r", "b", "c"])
        self.assertEqual(result.diagram(), "[ cp <a> [ -r ] <b> ]   ???--> c")
        self.assertEqual([child.name for child in result.symbols["cp"].children], ["SRC", "-r", "DST"])

    def testInlineDelimitedValueIsAbsorbed(self):
        result = self.parser.parse_raw(["root", "sub", "--x=5"])
        self.assertEqual(result.symbols["root"]["sub"]["--x"].arguments, ("5",))

    def testBundledFlagsAreUnbundled(self):
        parser = SymbolParser(Command("tool", Flag("-a"), Flag("-b")))
        result = parser.parse_raw(["tool", "-ab"])
        self.assertIn("-a", result.symbols["tool"])
        self.assertIn("-b", result.symbols["tool"])

    def testEveryTokenIsAccountedForOnce(self):
        result = self.parser.parse_raw(["root", "-v", "sub", "--x", "1", "2"])
        self.assertEqual(len(result.matched) + len(result.unmatched) + len(result.unparsed), 6)
        self.assertEqual(result.unmatched, ("2",))

    def testParsingTwiceYieldsEqualResults(self):
        arguments = ["root", "sub", "--x", "1", "bogus", "--", "tail"]
        one = self.parser.parse_raw(arguments)
        two = self.parser.parse_raw(arguments)
        self.assertEqual(one.diagram(), two.diagram())
        self.assertEqual(one.tokens, two.tokens)
        self.assertEqual(one.unmatched, two.unmatched)
        self.assertEqual(one.unparsed, two.unparsed)
        self.assertEqual([error.message for error in one.errors], [error.message for error in two.errors])
        self.assertIsNot(one.symbols[0], two.symbols[0])

    def testInnermostCommandDecidesErrorPolicy(self):
        parser = SymbolParser(Command("root", Command("loose", treat_unmatched_tokens_as_errors=False)))
        result = parser.parse_raw(["root", "loose", "whatever"])
        self.assertEqual(result.command().name, "loose")
        self.assertEqual(result.unmatched, ("whatever",))
        self.assertEqual(result.errors, ())

    def testRawTokensAndInputAreKept(self):
        result = self.parser.parse_raw(["--flag"], "--flag")
        self.assertEqual(result.tokens, ("--flag",))
        self.assertEqual(result.raw_input, "--flag")
        self.assertIn("--flag", result.symbols["root"])

    def testRawTokensMustBeStrings(self):
        with self.assertRaises(TypeError):
            self.parser.parse_raw("root --flag")
        with self.assertRaises(TypeError):
            self.parser.parse_raw(["root", 1])


class TestImplicitRoot(TestCase):
    """Behavioral tests for grammars without a typed root command."""

    def setUp(self):
        self.configuration = ParserConfiguration(
            [Flag("-v", "--verbose"), Option("--x"), Command("run")],
            executable="app",
        )
        self.parser = SymbolParser(self.configuration)

    def testImplicitRootIsHiddenFromSymbols(self):
        result = self.parser.parse_raw(["-v", "--x", "1"])
        self.assertEqual([symbol.token for symbol in result.symbols], ["-v", "--x"])
        self.assertEqual(result.symbols["--x"].arguments, ("1",))

    def testImplicitRootIsHiddenFromTokensAndLog(self):
        result = self.parser.parse_raw(["--verbose", "--verbose"])
        self.assertEqual(result.tokens, ("--verbose", "--verbose"))
        self.assertEqual(len(result.matched), 2)
        self.assertIs(result.matched[0], result.matched[1])
        self.assertEqual(len(result.symbols), 1)

    def testResolvedCommandIsTheImplicitRoot(self):
        result = self.parser.parse_raw([])
        self.assertIs(result.command().definition, self.configuration.root)
        self.assertEqual(len(result.symbols), 0)

    def testUnmatchedTokenUnderImplicitRoot(self):
        result = self.parser.parse_raw(["bogus"])
        self.assertEqual(result.unmatched, ("bogus",))
        self.assertEqual(len(result.errors), 1)

    def testCommandUnderImplicitRootIsReachable(self):
        result = self.parser.parse_raw(["run"])
        self.assertIn("run", result.symbols)
        self.assertEqual(result.command().name, "run")
        self.assertEqual(result.errors, ())

    def testImplicitRootNameMustNotShadowAWrappedAlias(self):
        with self.assertRaises(ValueError):
            ParserConfiguration([Command("app", Flag("-v")), Flag("-q")], executable="app")
        with self.assertRaises(ValueError):
            ParserConfiguration([Command("build", aliases=("app",))], implicit=True, executable="app")


class TestParse(TestCase):
    """Behavioral tests for the SymbolParser.parse() front door."""

    def setUp(self):
        self.parser = SymbolParser(grammar())

    def testParseSplitsShellLikeStrings(self):
        result = self.parser.parse("root sub --x 'a value'")
        self.assertEqual(result.raw_input, "root sub --x 'a value'")
        self.assertEqual(result.symbols["root"]["sub"]["--x"].arguments, ("a value",))

    def testParseTrimsIterables(self):
        result = self.parser.parse([" root ", "", "--flag"])
        self.assertEqual(result.tokens, ("root", "--flag"))
        self.assertIsNone(result.raw_input)

    def testParseRejectsNonStrings(self):
        with self.assertRaises(TypeError):
            self.parser.parse(["root", 3])
        with self.assertRaises(TypeError):
            self.parser.parse(3)

    def testOneShotHelper(self):
        result = parse(Command("tool", Flag("-v")), ["-v"])
        self.assertIn("-v", result.symbols["tool"])

    def testNullGrammarFailsFast(self):
        with self.assertRaises(TypeError):
            SymbolParser(None)
        with self.assertRaises(TypeError):
            ParserConfiguration(None)


class TestResultSurfacing(TestCase):
    """Behavioral tests for result rendering and fault surfacing."""

    def testTriggerRaisesParseExitOutsideShell(self):
        result = SymbolParser(grammar()).parse_raw(["root", "bogus", "junk"])
        with self.assertRaises(ParseExit) as context:
            result.trigger()
        self.assertEqual(len(context.exception.exceptions), 2)

    def testResultSymbolsCannotBeExtended(self):
        result = SymbolParser(grammar()).parse_raw(["root", "--flag"])
        self.assertFalse(hasattr(result.symbols, "add"))
        self.assertFalse(hasattr(result.symbols["root"].children, "add"))
        with self.assertRaises(AttributeError):
            result.symbols = None

    def testTriggerIsNoOpWithoutErrors(self):
        result = SymbolParser(grammar()).parse_raw(["root", "--flag"])
        self.assertIsNone(result.trigger())

    def testDeferredShellTriggerPrints(self):
        configuration = ParserConfiguration(grammar(), shell=True, deferred=True, colorful=False)
        result = SymbolParser(configuration).parse_raw(["root", "bogus"])
        with console.capture() as capture:
            result.trigger()
        self.assertIn("bogus", capture.get())

    def testRichRendering(self):
        result = SymbolParser(grammar()).parse_raw(["root", "--flag", "bogus"])
        terminal = Console(color_system=None, force_terminal=False, width=80)
        with terminal.capture() as capture:
            terminal.print(result)
        output = capture.get()
        self.assertIn("--flag", output)
        self.assertIn("???--> bogus", output)


if __name__ == "__main__":
    unittest.main()
