import logging
import re

from ..errors import MalformedRangeError
from .resources import GridRange

logger = logging.getLogger(__name__)

class A1Notation():
    """
    Translation between Google Sheets A1 cell range notation and the zero based,
    half open GridRange the batchUpdate requests take.
    See https://developers.google.com/sheets/api/guides/concepts#cell

    The notation handled here has the form:

    <start col>[<start row>][:<end col>[<end row>]]

    Some notes on the above:
        Rows are integers and 1 based, cols are letters A, B, ... Z, AA, AB, ...
        Case does not matter and anything that is not a letter, digit or ':' is
        thrown away before parsing, so '$A$1' and ' a1 ' are both A1.
        A column is always required, a bare row like '4' or '1:6' is not accepted.
        There is no sheet title, the sheet is given by ID when converting.

        A45     a single cell, col A row 45
        AZ      all of column AZ
        A:B     all rows in columns A and B
        C2:S    cols C through S starting from row 2 to the end
        C1:D5   the usual bounded rectangle

    In the GridRange start indexes are inclusive and end indexes exclusive.  Columns are
    converted as bijective base 26 (no zero digit) so A is 0, Z is 25 and AA is 26.
    A lone endpoint is widened to a span one wide on each axis it names.  With two
    endpoints the start row is shifted to zero based and the end column is bumped
    by one to make it exclusive, the end row needs neither as a 1 based inclusive
    row is already the zero based exclusive bound.  No ordering check is done,
    C5:A1 converts happily and it is up to the service to object.
    """
    # anything else is noise and gets stripped before we look at it
    _A1STRIPREGEXSTR = r"[^A-Za-z0-9:]"
    # whole (stripped) notation
    _A1REGEXSTR = r"^[A-Za-z]+[0-9]*(:[A-Za-z]+[0-9]*)?$"
    # a column label on its own
    _A1COLREGEXSTR = r"^[A-Za-z]+$"

    _a1_strip_re = re.compile(_A1STRIPREGEXSTR)
    _a1_re = re.compile(_A1REGEXSTR)
    _a1_col_re = re.compile(_A1COLREGEXSTR)
    _not_letters_re = re.compile(r"[^A-Za-z]")
    _not_digits_re = re.compile(r"[^0-9]")

    @classmethod
    def col_to_index(cls, column: str) -> int:
        """
        Convert a sheet column label to its zero based index, 'A' goes to 0.
        Each letter after the first shifts what we have so far with
        (index + 1) * 26 before adding its own value, that's what makes
        'AA' follow 'Z' rather than being another 'A'.

        column: Column letters, case insensitive.

        return: Zero based column index.
        """
        c = str(column) if column is not None else ""
        if not cls._a1_col_re.match(c):
            raise MalformedRangeError(column, "column must be letters only")
        index = 0
        for i, v in enumerate(c.lower()):
            if i > 0:
                index = (index + 1) * 26
            index += ord(v) - ord('a')
        return index

    @classmethod
    def index_to_col(cls, index: int) -> str:
        """
        Translate a zero based column index to its column label, 0 goes to 'A'.
        """
        i = int(index)
        if i < 0:
            raise ValueError(f"column index must be >= 0 not: {index}")
        col = ""
        while True:
            i, r = divmod(i, 26)
            col = chr(r + ord('A')) + col
            if not i:
                break
            i -= 1
        return col

    @classmethod
    def valid_a1(cls, a1: str|None) -> bool:
        """
        Is the supplied string something to_grid_range() would accept?
        """
        try:
            cls.to_grid_range(a1)
        except MalformedRangeError:
            return False
        return True

    @classmethod
    def _split_endpoint(cls, a1: str, part: str) -> tuple[int, int|None]:
        """
        Pull the column index and the 1 based row (or None) out of one
        side of the ':'.  Letters and digits are picked out independently.
        """
        col = cls._not_letters_re.sub("", part)
        if not col:
            raise MalformedRangeError(a1, "a column is required")
        row = cls._not_digits_re.sub("", part)
        row_num = int(row) if row else None
        if row_num == 0:
            raise MalformedRangeError(a1, "rows start at 1")
        return cls.col_to_index(col), row_num

    @classmethod
    def to_grid_range(cls, a1: str|None, sheet_id: int = 0) -> GridRange:
        """
        Convert A1 notation to a GridRange on the given sheet.

        a1:         Notation to convert, e.g. 'A1', 'C:D', 'C1:D5'
        sheet_id:   Sheet ID (not index or title) the range belongs to.

        return:     GridRange with None for any unbounded side.
        raises:     MalformedRangeError if the notation can't be understood.
        """
        if not a1:
            raise MalformedRangeError(a1, "A1 notation is required")
        notation = cls._a1_strip_re.sub("", str(a1))
        if not cls._a1_re.match(notation):
            raise MalformedRangeError(a1)

        parts = notation.split(":", 1)
        start_col, start_row = cls._split_endpoint(a1, parts[0])
        if start_row is not None:
            start_row -= 1

        if len(parts) > 1:
            end_col, end_row = cls._split_endpoint(a1, parts[1])
            end_col += 1
        else:
            # no second part, so it's one cell or one column
            end_col = start_col + 1
            end_row = start_row + 1 if start_row is not None else None

        logger.debug("Converted [%s] into %s,%s,%s,%s", notation, start_row, start_col, end_row, end_col)
        return GridRange(sheetId=sheet_id,
                         startRowIndex=start_row, endRowIndex=end_row,
                         startColumnIndex=start_col, endColumnIndex=end_col)

    @classmethod
    def to_a1(cls, grid_range: GridRange) -> str:
        """
        Render a GridRange back to A1 notation, without a sheet title.
        A single cell comes back as 'B3', anything else as 'start:end'
        with unbounded sides left off, so a whole column is 'B:B'.
        The whole sheet (nothing bounded) is an empty string.
        """
        gr = grid_range
        sc = cls.index_to_col(gr.startColumnIndex) if gr.startColumnIndex is not None else ""
        ec = cls.index_to_col(gr.endColumnIndex - 1) if gr.endColumnIndex is not None else ""
        sr = str(gr.startRowIndex + 1) if gr.startRowIndex is not None else ""
        er = str(gr.endRowIndex) if gr.endRowIndex is not None else ""
        start = sc + sr
        end = ec + er
        if gr.num_rows == 1 and gr.num_cols == 1:
            return start
        return f"{start}:{end}" if start or end else ""

def parse(a1: str|None, sheet_id: int = 0) -> GridRange:
    """Shorthand for A1Notation.to_grid_range()"""
    return A1Notation.to_grid_range(a1, sheet_id)
