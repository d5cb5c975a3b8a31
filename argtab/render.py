"""
Argtab renderers: usage syntax, glossaries and error lines.

Every render_* function is a pure function of a table (or of its End): nothing is
mutated and nothing is written. The print_* twins write the same text to a
caller-supplied sink (a rich Console or any text stream, stdout by default).

Syntax
- render_syntax(table)                 →  " -v[q] --level=<int> <file> [<file>]..."
- render_syntax(table, verbose=True)   →  " [-v|--verbose] [-q] [--level=<int>] <file> [<file>]"

Glossaries
- render_glossary(table, "  %-25s %s\\n")  one printf-style line per described entry.
- render_glossary_gnu(table)             GNU layout with wrapped descriptions.

Errors
- render_errors(end, "prog")  →  'prog: invalid option "--levle"\\n...'
"""
import copy
import itertools

from rich.console import Console
from rich.text import Text

from .entries import End
from .utils import Unset, coalesce


def _entries(table):
    """
    yield the configuration entries of a table, stopping at the first End.
    """
    for entry in itertools.takewhile(lambda x: not isinstance(x, End), table):
        if entry is None:
            raise TypeError("table contains missing entries (check it with validate())")
        yield entry


def _label(entry, datatype=Unset):
    # None and "" both mean “render no label”.
    return coalesce(datatype, entry.datatype) or ""


def render_option(entry, *, datatype=Unset):
    """
    render the display form of an entry using its first tag only.

    forms
    - short first:  "-l <int>"
    - long only:    "--level=<int>"
    - positional:   "<file>"
    - no label:     "-v" / "--verbose" / ""
    """
    label = _label(entry, datatype)
    if entry.shortopts:
        return "-" + entry.shortopts[0] + (" " + label if label else "")
    if entry.longopts:
        return "--" + entry.longopts[0] + ("=" + label if label else "")
    return label


def _render_forms(entry, separator):
    """
    render every tag of an entry joined by 'separator', followed by its label.
    """
    forms = [*("-" + char for char in entry.shortopts), *("--" + name for name in entry.longopts)]
    text = separator.join(forms)
    if label := _label(entry):
        if entry.longopts:
            text += "=" + label
        elif entry.shortopts:
            text += " " + label
        else:
            text = label
    return text


def _render_switches(entries):
    """
    render the GNU switch group: first short character of every value-less short entry,
    mandatory ones first ("-ab"), optional ones bracketed ("[cd]" or "[-cd]").
    """
    switches = [entry for entry in entries if entry.shortopts and not entry.hasvalue]
    mandatory = "".join(entry.shortopts[0] for entry in switches if entry.mincount >= 1)
    optional = "".join(entry.shortopts[0] for entry in switches if entry.mincount < 1)

    text = " -" + mandatory if mandatory else ""
    if optional:
        text += ("[" if mandatory else " [-") + optional + "]"
    return text


def _repeat(syntax, mincount, maxcount, *, verbose):
    """
    expand one syntax fragment by occurrence bounds.

    standard: mandatory copies (at most three, then "..."), then "[x]", "[x] [x]"
    or "[x]..." for one, two or more optional copies.
    verbose: every mandatory copy, then at most one "[x]".
    """
    if verbose:
        return [syntax] * mincount + ([f"[{syntax}]"] if maxcount > mincount else [])

    parts = [syntax] * min(mincount, 3)
    if mincount > 3:
        parts[-1] += "..."
        return parts

    match maxcount - mincount:
        case 0:
            pass
        case 1:
            parts.append(f"[{syntax}]")
        case 2:
            parts.extend([f"[{syntax}]"] * 2)
        case _:
            parts.append(f"[{syntax}]...")
    return parts


def render_syntax(table, verbose=False, suffix=""):
    """
    render the usage syntax of a table.

    standard mode
    - value-less short options are clustered into one leading switch group.
    - every other tagged entry shows its first tag once, with its label,
      bracketed when optional.
    - untagged entries are repeated by occurrence bounds, capped, then
      abbreviated with an ellipsis.

    verbose mode
    - every tag of every entry, '|'-joined; no clustering and no ellipsis.

    every fragment is preceded by one space (so the result can follow a program
    name directly); 'suffix' is appended verbatim.
    """
    entries = list(_entries(table))
    text = "" if verbose else _render_switches(entries)

    for entry in entries:
        if verbose:
            syntax = _render_forms(entry, "|")
        elif entry.shortopts and not entry.hasvalue:
            continue
        else:
            syntax = render_option(entry)

        if not syntax:
            continue
        if verbose or not (entry.shortopts or entry.longopts):
            for part in _repeat(syntax, entry.mincount, entry.maxcount, verbose=verbose):
                text += " " + part
        else:
            text += " " + (syntax if entry.mincount else f"[{syntax}]")

    return text + suffix


def render_glossary(table, format="  %-25s %s\n"):
    """
    render one line per entry that has glossary text.

    'format' is a printf-style template taking two strings: the entry's full syntax
    (all tags ', '-joined, plus label) and its glossary text. Remarks contribute
    their label (possibly nothing) as syntax.
    """
    return "".join(
        format % (_render_forms(entry, ", "), entry.glossary)
        for entry in _entries(table)
        if entry.glossary
    )


def render_glossary_gnu(table):
    """
    render a GNU-style glossary.

    layout
    - two-space indent; long-only entries are indented four more spaces so their
      tags line up with the long tags of entries that also have short ones.
    - syntax column of 25 characters; a wider syntax gets a line of its own.
    - glossary text wrapped between columns 28 and 79.
    - a blank line closes the block.
    """
    console = Console(width=80, color_system=None)
    text = ""

    for entry in _entries(table):
        if not entry.glossary:
            continue

        syntax = "    " if entry.longopts and not entry.shortopts else ""
        syntax += _render_forms(entry, ", ")
        if len(syntax) > 25:
            text += ("  " + syntax).rstrip() + "\n"
            syntax = ""

        text += "  %-25s " % syntax
        for index, line in enumerate(Text(entry.glossary).wrap(console, 79 - 28)):
            text += " " * 28 * (index > 0) + line.plain.rstrip() + "\n"

    return text + "\n"


def render_errors(end, progname=""):
    """
    render one line per recorded fault in append order, overflow marker last.

    each line is prefixed by "<progname>: " when a program name is given.
    """
    prefix = f"{progname}: " if progname else ""
    return "".join(prefix + str(fault) + "\n" for fault in end)


def _console(file):
    if isinstance(file, Console):
        return file
    return Console(file=file, color_system=None) if file is not None else Console()


def print_syntax(table, verbose=False, suffix="", file=None):
    _console(file).out(render_syntax(table, verbose, suffix), end="", highlight=False)


def print_glossary(table, format="  %-25s %s\n", file=None):
    _console(file).out(render_glossary(table, format), end="", highlight=False)


def print_glossary_gnu(table, file=None):
    _console(file).out(render_glossary_gnu(table), end="", highlight=False)


def print_errors(end, progname="", file=None, *, colorful=False, coded=False):
    """
    write the faults of an End to a console or text stream.

    with colorful=True each line is styled through ParseError.__rich__ (palette
    overridable via __styles__ in __main__); coded=True also shows fault codes.
    """
    console = _console(file)
    for fault in end:
        console.print(
            copy.replace(fault, progname=progname, colorful=colorful, coded=coded),
            soft_wrap=True,
            highlight=False,
        )


__all__ = (
    "render_option",
    "render_syntax",
    "render_glossary",
    "render_glossary_gnu",
    "render_errors",
    "print_syntax",
    "print_glossary",
    "print_glossary_gnu",
    "print_errors",
)
