"""
Argtab matcher/parser engine.

What this module provides
- parse(tokens, table): one complete GNU-style parse pass of raw argument tokens
  (program name excluded) against a table of entries terminated by an End.

Token classes
- '--name' / '--name=value': long option, exact name match (no abbreviations).
- '-abc': short cluster, each character matched on its own ('-abc' == '-a -b -c');
  a value-taking character swallows the rest of the cluster ('-l7') or the next token.
- '--': everything after it is positional.
- '-' and anything not starting with '-': positional.

Positional binding
- untagged tokens fill positional entries in table order, each one up to its
  maxcount before moving to the next. A positional with a large maxcount is
  greedy, so it belongs at the end of the table.

Faults
- nothing is raised for user input; every problem is appended to the End entry
  (bounded, see End.record) and parse() returns how many were recorded.
- tie-breaks: the first entry in table order wins both short and long matches.

Re-parsing
- every call resets all counts and clears the End first, so the same table can be
  parsed again, and alternative tables can be tried in sequence.
"""
import itertools
import logging
from collections import deque

from .entries import End, Remark
from .faults import *
from .render import render_option

logger = logging.getLogger(__name__)


def _terminator(table):
    """
    locate the End sentinel of a table and return (index, end).
    """
    for index, entry in enumerate(table):
        if isinstance(entry, End):
            return index, entry
    raise TypeError("parse() table must be terminated by an end entry")


class _Matcher:
    """
    per-call parsing state.

    state
    - entries: table entries before the End, in table order.
    - end: the End receiving faults.
    - tokens: deque of not-yet-consumed tokens.
    - tagged / positionals: entries matched by tag vs. by position.
    """

    def __init__(self, entries, end, tokens):
        self.entries = entries
        self.end = end
        self.tokens = tokens
        self.tagged = [entry for entry in entries if not entry.positional]
        self.positionals = [entry for entry in entries if entry.positional]

    def fault(self, cls, /, entry=None, **options):
        if entry is not None:
            options.setdefault("option", render_option(entry))
            options.setdefault("label", entry.datatype or "value")
        self.end.record(cls.create(entry=entry, **options))

    def scan(self):
        """
        consume every token, left to right.
        """
        positional = False
        while self.tokens:
            token = self.tokens.popleft()

            if positional or token == "-" or not token.startswith("-"):
                self.bind(token)
            elif token == "--":
                positional = True
            elif token.startswith("--"):
                self.match_long(token)
            else:
                self.match_cluster(token)

    def match_long(self, token):
        """
        resolve '--name[=value]' against every long form in table order.

        behavior
        - unknown names, and inline values given to presence-only entries, are
          recorded as invalid options with the whole token.
        - a value-taking entry without an inline value consumes the next token;
          when there is none, a missing-value fault names the option as typed.
        """
        name, separator, value = token[2:].partition("=")

        for entry in self.tagged:
            if name in entry.longopts:
                break
        else:
            return self.fault(InvalidOptionError, token=token)

        if not entry.hasvalue:
            if separator:
                return self.fault(InvalidOptionError, token=token)
            return self.accept(entry, "--" + name, None)

        if not separator:
            if not self.tokens:
                return self.fault(MissingValueError, entry, token="--" + name)
            value = self.tokens.popleft()

        self.accept(entry, "--" + name, value)

    def match_cluster(self, token):
        """
        resolve a '-abc' cluster one character at a time.

        behavior
        - an unknown character is an invalid option for that character only; the
          remaining characters are still tried.
        - the first value-taking character ends the cluster: the rest of the token
          is its value, or the next token when nothing is left.
        """
        chars = token[1:]
        for position, char in enumerate(chars, start=1):
            for entry in self.tagged:
                if char in entry.shortopts:
                    break
            else:
                self.fault(InvalidOptionError, token="-" + char)
                continue

            if not entry.hasvalue:
                self.accept(entry, "-" + char, None)
                continue

            if value := chars[position:]:
                return self.accept(entry, "-" + char, value)
            if not self.tokens:
                return self.fault(MissingValueError, entry, token="-" + char)
            return self.accept(entry, "-" + char, self.tokens.popleft())

    def bind(self, token):
        """
        bind an untagged token to the first positional entry with room left.

        when all positionals are full the last one reports the excess; a table
        without positionals reports the token as unexpected.
        """
        for entry in self.positionals:
            if entry.count < entry.maxcount:
                return self.accept(entry, token, token)
        if not self.positionals:
            return self.fault(UnexpectedArgumentError, token=token)
        self.accept(self.positionals[-1], token, token)

    def accept(self, entry, spelling, text):
        """
        store one occurrence of 'entry', converting 'text' when the kind carries a value.

        - an entry already holding maxcount occurrences records an excess fault and the
          value is discarded.
        - a conversion failure records a bad-value fault and leaves the count unchanged.
        """
        if entry.count >= entry.maxcount:
            return self.fault(TooManyOccurrencesError, entry, token=spelling, value=text)

        value = None
        if entry.hasvalue:
            try:
                value = entry.convert(text)
            except ValueError:
                return self.fault(BadValueError, entry, token=text)

        entry._store(text, value)

    def finish(self):
        """
        record one missing-occurrences fault per entry below its mincount.
        """
        for entry in self.entries:
            if isinstance(entry, Remark):
                continue
            if entry.count < entry.mincount:
                self.fault(MissingOccurrencesError, entry, token=render_option(entry))


def parse(tokens, table):
    """
    parse argv-like tokens (program name excluded) against a table.

    phases
    - setup: find the End, reset every entry's count and clear the End.
    - scan: match tagged tokens and bind positional ones (see module docs).
    - post-scan: report entries that fell short of their mincount.

    parameters
    - tokens: iterable of str (e.g. sys.argv[1:]).
    - table: sequence of entries terminated by an End entry; entries after the
      first End are ignored.

    returns
    - int: number of recorded faults (structured ones plus the overflow marker).

    errors
    - TypeError for programming errors only: a bare string instead of a token
      sequence, a table without End, or missing (None) entries.
    """
    if isinstance(tokens, str):
        raise TypeError("parse() tokens must be a sequence of strings, not a string")
    tokens = deque(tokens)
    if not all(isinstance(token, str) for token in tokens):
        raise TypeError("parse() tokens must be strings")

    index, end = _terminator(table)
    entries = list(itertools.islice(table, index))
    if any(entry is None for entry in entries):
        raise TypeError("parse() table contains missing entries (check it with validate())")

    for entry in entries:
        entry._reset()
    end.clear()

    matcher = _Matcher(entries, end, tokens)
    matcher.scan()
    matcher.finish()

    logger.debug("parsed against %d entries: %d fault(s)", len(entries), end.count)
    return end.count


__all__ = (
    "parse",
)
