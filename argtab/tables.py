"""
Argtab table lifecycle: validation, release and scoped ownership.

A table is any mutable sequence of entries ending in an End. Table is the
recommended container: it is a plain list that also releases its entries when
leaving a `with` block, and can hand an entry's value storage over to the caller
before that happens.

    >>> with Table([literal("v", "verbose"), filename(mincount=1, maxcount=10), end()]) as table:
    ...     if validate(table):
    ...         raise MemoryError("could not build the option table")
    ...     files = table[1]
    ...     if parse(sys.argv[1:], table) == 0:
    ...         names = table.detach(files)   # survives the release below
"""
import logging

from .entries import End
from .faults import TableError

logger = logging.getLogger(__name__)


def validate(table):
    """
    return True when any slot up to and including the first End is missing (None).

    factories return None when entry storage cannot be allocated; calling this right
    after building a table catches every such failure in one step.
    """
    for entry in table:
        if entry is None:
            return True
        if isinstance(entry, End):
            return False
    return False


def release(table):
    """
    release every entry's storage in table order, then empty every slot.

    after the call all slots hold None and the entries must not be used any more.
    releasing a table twice is a caller error and raises TableError.
    """
    if len(table) and all(entry is None for entry in table):
        raise TableError("release() table has already been released")

    for entry in table:
        if entry is not None:
            entry._release()
    for index in range(len(table)):
        table[index] = None

    logger.debug("released table of %d slot(s)", len(table))


class Table(list):
    """
    Owning container for table entries.

    - behaves like a list (index, iterate, append before parsing...).
    - as a context manager, releases every entry on exit (see release()).
    - detach(entry) transfers ownership of an entry's value list to the caller.
    """

    def detach(self, entry, /):
        """
        hand over the value list of 'entry' to the caller.

        the entry gets fresh storage (prefilled with its default), so a later release
        of the table leaves the returned list untouched.
        """
        if not any(slot is entry for slot in self):
            raise ValueError("detach() entry does not belong to this table")
        if isinstance(entry, End):
            raise TypeError("detach() cannot transfer the end entry")
        return entry._detach()

    def __enter__(self):
        return self

    def __exit__(self, *exception):
        if not all(entry is None for entry in self):
            release(self)


__all__ = (
    "Table",
    "validate",
    "release",
)
