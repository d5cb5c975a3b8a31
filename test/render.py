# python
"""
Renderer behavioral tests.

Scope
- Validate standard and verbose syntax (switch group, repetition, ellipsis, suffix).
- Validate plain and GNU glossaries (skipping, remarks, column layout, wrapping).
- Validate error rendering and the rich-backed printers.

Conventions
- Test method names follow CamelCase per project convention.
- Printers are checked through Console.capture() or a text stream, without color.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from argtab import (
    literal, integer, string, filename, remark, end,
    parse,
    render_option, render_syntax, render_glossary, render_glossary_gnu, render_errors,
    print_syntax, print_glossary, print_glossary_gnu, print_errors,
)


class TestOption(TestCase):

    def testShortFirst(self):
        self.assertEqual(render_option(integer("l", "level")), "-l <int>")

    def testLongOnly(self):
        self.assertEqual(render_option(integer(None, "level,lvl")), "--level=<int>")

    def testPositional(self):
        self.assertEqual(render_option(filename(None, None)), "<file>")

    def testWithoutLabel(self):
        self.assertEqual(render_option(literal("v", "verbose")), "-v")
        self.assertEqual(render_option(integer(None, "level", "")), "--level")

    def testLabelOverride(self):
        self.assertEqual(render_option(integer("l"), datatype="<n>"), "-l <n>")


class TestSyntax(TestCase):

    def setUp(self):
        self.table = [
            literal("a", mincount=1),
            literal("b"),
            literal("c", "cee"),
            integer("l", "level"),
            string(None, "name", mincount=1),
            filename(None, None, mincount=1, maxcount=100),
            end(),
        ]

    def testStandard(self):
        self.assertEqual(
            render_syntax(self.table),
            " -a[bc] [-l <int>] --name=<string> <file> [<file>]...",
        )

    def testVerbose(self):
        self.assertEqual(
            render_syntax(self.table, verbose=True),
            " -a [-b] [-c|--cee] [-l|--level=<int>] --name=<string> <file> [<file>]",
        )

    def testSuffixAppended(self):
        self.assertTrue(render_syntax(self.table, suffix="\n").endswith("...\n"))

    def testOptionalSwitchGroupOnly(self):
        self.assertEqual(render_syntax([literal("v"), literal("q"), end()]), " [-vq]")

    def testMandatorySwitchGroupOnly(self):
        self.assertEqual(render_syntax([literal("x", mincount=1), end()]), " -x")

    def testLongOnlyFlagIsNotClustered(self):
        self.assertEqual(render_syntax([literal(None, "dry-run"), end()]), " [--dry-run]")

    def testRepetition(self):
        cases = {
            (0, 1): " [<file>]",
            (0, 2): " [<file>] [<file>]",
            (0, 3): " [<file>]...",
            (2, 2): " <file> <file>",
            (1, 3): " <file> [<file>] [<file>]",
            (3, 3): " <file> <file> <file>",
            (5, 9): " <file> <file> <file>...",
        }
        for (mincount, maxcount), expected in cases.items():
            with self.subTest(mincount=mincount, maxcount=maxcount):
                table = [filename(None, None, mincount=mincount, maxcount=maxcount), end()]
                self.assertEqual(render_syntax(table), expected)

    def testVerboseNeverAbbreviates(self):
        table = [filename(None, None, mincount=5, maxcount=9), end()]
        self.assertEqual(render_syntax(table, verbose=True), " <file>" * 5 + " [<file>]")

    def testTaggedEntriesRenderOnce(self):
        table = [
            integer("l", "level", mincount=4, maxcount=6),
            string(None, "name", maxcount=5),
            end(),
        ]
        self.assertEqual(render_syntax(table), " -l <int> [--name=<string>]")
        self.assertEqual(
            render_syntax(table, verbose=True),
            " -l|--level=<int>" * 4 + " [-l|--level=<int>] [--name=<string>]",
        )

    def testSuppressedLabel(self):
        self.assertEqual(render_syntax([integer(None, "level", ""), end()]), " [--level]")

    def testRemarkContributesLabelOnly(self):
        self.assertEqual(render_syntax([remark("<extra>"), remark(glossary="text"), end()]), " <extra>")

    def testEntriesAfterEndIgnored(self):
        self.assertEqual(render_syntax([end(), literal("v")]), "")

    def testMissingEntryRejected(self):
        with self.assertRaises(TypeError):
            render_syntax([literal("v"), None, end()])

    def testPureFunction(self):
        first = render_syntax(self.table)
        self.assertEqual(render_syntax(self.table), first)
        self.assertEqual([entry.count for entry in self.table[:-1]], [0] * 6)


class TestGlossary(TestCase):

    def setUp(self):
        self.table = [
            literal("v", "verbose", glossary="print more"),
            literal("q"),
            integer("l", "level", glossary="set level"),
            filename(None, None, glossary="input"),
            remark(glossary="extra line"),
            end(),
        ]

    def testCustomFormat(self):
        self.assertEqual(
            render_glossary(self.table, "%s: %s\n"),
            "-v, --verbose: print more\n"
            "-l, --level=<int>: set level\n"
            "<file>: input\n"
            ": extra line\n",
        )

    def testDefaultFormat(self):
        lines = render_glossary(self.table).splitlines()
        self.assertEqual(len(lines), 4)
        self.assertEqual(lines[0], "  -v, --verbose             print more")
        self.assertEqual(lines[1], "  -l, --level=<int>         set level")

    def testEmptyWhenNothingDescribed(self):
        self.assertEqual(render_glossary([literal("v"), end()]), "")


class TestGlossaryGnu(TestCase):

    def testColumns(self):
        table = [
            literal("v", "verbose", glossary="print more"),
            string(None, "name", glossary="your name"),
            end(),
        ]
        self.assertEqual(
            render_glossary_gnu(table),
            "  -v, --verbose             print more\n"
            "      --name=<string>       your name\n"
            "\n",
        )

    def testWideSyntaxOnItsOwnLine(self):
        table = [string(None, "a-very-long-option-name", glossary="text"), end()]
        self.assertEqual(
            render_glossary_gnu(table),
            "      --a-very-long-option-name=<string>\n"
            + " " * 28 + "text\n"
            "\n",
        )

    def testWrapsIntoTextColumn(self):
        text = " ".join(["lorem", "ipsum", "dolor", "sit", "amet"] * 12)
        lines = render_glossary_gnu([literal("v", glossary=text), end()]).splitlines()

        self.assertEqual(lines[-1], "")
        body = lines[:-1]
        self.assertGreater(len(body), 1)
        self.assertTrue(body[0].startswith("  -v" + " " * 24))
        for line in body:
            self.assertLessEqual(len(line), 79)
        for line in body[1:]:
            self.assertTrue(line.startswith(" " * 28))
        self.assertEqual(" ".join(line[28:] for line in body), text)


class TestErrors(TestCase):

    def setUp(self):
        self.end = end()
        self.table = [literal("v"), integer("l", "level"), self.end]
        parse(["-x", "--level=oops"], self.table)

    def testRenderWithProgramName(self):
        self.assertEqual(
            render_errors(self.end, "prog"),
            'prog: invalid option "-x"\n'
            'prog: invalid argument "oops" to option -l <int>\n',
        )

    def testRenderWithoutProgramName(self):
        self.assertEqual(render_errors(self.end).splitlines()[0], 'invalid option "-x"')

    def testRenderOverflowLast(self):
        sentinel = end(1)
        parse(["-a", "-b", "-c"], [sentinel])
        self.assertEqual(render_errors(sentinel), 'invalid option "-a"\ntoo many errors\n')

    def testRenderNothing(self):
        self.assertEqual(render_errors(end(), "prog"), "")


class TestPrinters(TestCase):

    def setUp(self):
        self.end = end()
        self.table = [literal("v", "verbose", glossary="print more"), filename(None, None, mincount=1), self.end]

    def testPrintSyntaxToStream(self):
        stream = io.StringIO()
        print_syntax(self.table, suffix="\n", file=stream)
        self.assertEqual(stream.getvalue(), " [-v] <file>\n")

    def testPrintGlossaryToConsole(self):
        console = Console(color_system=None, force_terminal=False)
        with console.capture() as capture:
            print_glossary(self.table, file=console)
        self.assertEqual(capture.get(), render_glossary(self.table))

    def testPrintGlossaryGnuToStream(self):
        stream = io.StringIO()
        print_glossary_gnu(self.table, file=stream)
        self.assertEqual(stream.getvalue(), render_glossary_gnu(self.table))

    def testPrintErrors(self):
        parse(["-x"], self.table)
        console = Console(color_system=None, force_terminal=False)
        with console.capture() as capture:
            print_errors(self.end, "prog", console)
        self.assertEqual(capture.get(), 'prog: invalid option "-x"\nprog: missing option <file>\n')

    def testPrintErrorsCoded(self):
        parse(["-x", "a"], self.table)
        console = Console(color_system=None, force_terminal=False)
        with console.capture() as capture:
            print_errors(self.end, "prog", console, colorful=True, coded=True)
        self.assertEqual(capture.get(), 'prog: [21101] invalid option "-x"\n')


if __name__ == "__main__":
    unittest.main()
