import datetime
import logging
import time
from collections.abc import Callable, Iterator
from typing import Any

from ..errors import MalformedRangeError
from .a1 import A1Notation
from .batch import BatchExecutor
from .requests import *
from .resources import GridRange, GridProperties, FilterView, Sheet, SheetProperties, Spreadsheet, GoogleSheetsEnum
from .retry import RetryPolicy
from .transport import Transport

logger = logging.getLogger(__name__)

# day zero for Sheets date serial numbers
_SHEETS_EPOCH = datetime.date(1899, 12, 30)

def to_serial_date(date: datetime.date) -> float:
    """
    Sheets stores dates as days since 1899-12-30, times as the fraction of a day.
    """
    if isinstance(date, datetime.datetime):
        midnight = datetime.datetime.combine(date.date(), datetime.time(), tzinfo=date.tzinfo)
        fraction = (date - midnight).total_seconds() / 86400
        return float((date.date() - _SHEETS_EPOCH).days) + fraction
    return float((date - _SHEETS_EPOCH).days)

class GoogleSheet():
    """
    Class representation of a sheet.  In Google Sheets parlance a 'sheet' is
    an individual sheet within a parent 'spreadsheet', the different tabs on
    the spreadsheet itself.  Typically this is what you would work with as this
    is where the data actually resides.  An actual request to a sheet would be
    addressed with spreadsheetId to the parent spreadsheet and sheetId which is
    the identifier of the sheet within that spreadsheet.

    Every change goes out as a batchUpdate request through this sheet's own
    BatchExecutor.  Ranges are A1 notation without the sheet title, e.g. 'B2:D10'.
    Normally each call is sent straight away and returns the response, between
    batch_start() and batch_execute() (or inside 'with sheet.batch():') calls
    return None and the requests all go out together at the end.
    """
    def __init__(self, spreadsheetid: str,
                 sheet: Sheet|dict,
                 transport: Transport,
                 policy: RetryPolicy|None = None,
                 sleep: Callable[[float], Any] = time.sleep) -> None:
        self._spreadsheetid = spreadsheetid
        self._sheet = sheet if isinstance(sheet, Sheet) else Sheet.from_base(sheet)
        self._props = self._sheet.properties
        if self._props.sheetId is None:
            raise ValueError("Must be a sheet with a sheet ID")
        self._executor = BatchExecutor(spreadsheetid, transport, policy, sleep)

    def __str__(self) -> str:
        return str(self._props)

    def __repr__(self) -> str:
        return f"{self.__class__}:{str(self)}"

    def __len__(self) -> int:
        """
        Is this context length is number of cells in the sheet
        """
        return self.rows * self.cols

    @property
    def spreadsheet_id(self) -> str:
        return self._spreadsheetid

    @property
    def sheet(self) -> Sheet:
        return self._sheet

    @property
    def executor(self) -> BatchExecutor:
        return self._executor

    @property
    def title(self) -> str:
        return self._props.title

    @property
    def index(self) -> int:
        """
        Index within the spreadsheet, which is the ordering you see
        of the tabs when you open the spreadsheet.  The index can shift
        by update, but the sheetId is always constant.
        """
        return self._props.index

    @property
    def sheet_id(self) -> int:
        """
        Unique ID of the sheet within the spreadsheet.  The index can
        be changed but not the sheet ID.
        """
        return self._props.sheetId

    @property
    def hidden(self) -> bool:
        return bool(self._props.hidden)

    @property
    def is_grid(self) -> bool:
        return self._props.is_grid()

    @property
    def rows(self) -> int:
        """Row count as of the last fetch, refresh() to be sure"""
        gp = self._props.gridProperties
        return gp.rowCount or 0 if gp else 0

    @property
    def cols(self) -> int:
        """Column count as of the last fetch, refresh() to be sure"""
        gp = self._props.gridProperties
        return gp.columnCount or 0 if gp else 0

    @property
    def dimensions(self) -> tuple[int,int]:
        return (self.rows, self.cols)

    def grid_range(self, a1: str|None = None) -> GridRange:
        """A1 to GridRange on this sheet, no range means the whole sheet"""
        if a1 is None:
            return GridRange(sheetId=self.sheet_id)
        return A1Notation.to_grid_range(a1, self.sheet_id)

    def qualified_a1(self, a1: str|None = None) -> str:
        """Prefix a1 with this sheet's quoted title for the values API"""
        title = "'" + str(self.title).replace("'", "''") + "'"
        return f"{title}!{a1}" if a1 else title

    # batching

    def batch_start(self) -> None:
        """Start capturing requests rather than sending them"""
        self._executor.start_batch()

    def batch_clear(self) -> None:
        """Drop captured requests without sending them"""
        self._executor.clear_batch()

    def batch_execute(self) -> GoogleSheetsUpdateRequestResponse|None:
        """Send captured requests as one transaction, None if there were none"""
        return self._executor.flush()

    def batch(self) -> Iterator[BatchExecutor]:
        """Context manager version of batch_start()/batch_execute()"""
        return self._executor.batch()

    def _submit(self, request: GoogleSheetsUpdateRequestBase) -> GoogleSheetsUpdateRequestResponse|None:
        return self._executor.submit(request)

    def _submit_all(self, requests: list[GoogleSheetsUpdateRequestBase]) -> GoogleSheetsUpdateRequestResponse|None:
        """Several requests as one transaction, or into the batch if one is running"""
        if not requests:
            return None
        if self._executor.batching:
            for r in requests:
                self._submit(r)
            return None
        return self._executor.execute(requests)

    def _sibling(self, sheet: Sheet) -> "GoogleSheet":
        """Another sheet in the same spreadsheet, same transport and retry settings"""
        return GoogleSheet(self._spreadsheetid, sheet, self._executor.transport,
                           self._executor.policy, self._executor.sleep)

    # cell content

    def _set_cells(self, a1: str, value: dict) -> GoogleSheetsUpdateRequestResponse|None:
        """
        Write the same user entered value to every cell in the range.
        If only a row is given the whole row, only a column the whole column.
        """
        request = RepeatCellRequest(self.grid_range(a1), {'userEnteredValue': value}, 'userEnteredValue')
        return self._submit(request)

    def set_value(self, a1: str, value: int|float) -> GoogleSheetsUpdateRequestResponse|None:
        return self._set_cells(a1, {'numberValue': value})

    def set_text(self, a1: str, text: str) -> GoogleSheetsUpdateRequestResponse|None:
        return self._set_cells(a1, {'stringValue': str(text)})

    def set_formula(self, a1: str, formula: str) -> GoogleSheetsUpdateRequestResponse|None:
        return self._set_cells(a1, {'formulaValue': str(formula)})

    def set_boolean(self, a1: str, value: bool) -> GoogleSheetsUpdateRequestResponse|None:
        return self._set_cells(a1, {'boolValue': bool(value)})

    def set_date(self, a1: str, date: datetime.date) -> GoogleSheetsUpdateRequestResponse|None:
        """Dates are written as serial numbers, give the range a date format to see them as dates"""
        return self._set_cells(a1, {'numberValue': to_serial_date(date)})

    def set_note(self, a1: str, note: str) -> GoogleSheetsUpdateRequestResponse|None:
        request = RepeatCellRequest(self.grid_range(a1), {'note': str(note)}, 'note')
        return self._submit(request)

    def clear(self, a1: str|None = None) -> GoogleSheetsUpdateRequestResponse|None:
        """
        Wipe values and formatting from a range, or the whole sheet with no range.
        https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#updatecellsrequest
        """
        return self._submit(UpdateCellsRequest(self.grid_range(a1)))

    def merge_cells(self, a1: str, merge_type: str = "ALL") -> GoogleSheetsUpdateRequestResponse|None:
        return self._submit(MergeCellsRequest(self.grid_range(a1), merge_type))

    # dimensions

    def _dimension(self, dimension: str) -> str:
        dim = GoogleSheetsEnum.dimension(dimension)
        if not dim:
            raise ValueError("dimension parameter must be \'ROWS\' or \'COLS\' not: " + str(dimension))
        return dim

    def append_dimension(self, num: int, dimension: str = "ROWS") -> GoogleSheetsUpdateRequestResponse|None:
        """
        Append rows or columns to the end.
        https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#appenddimensionrequest
        """
        if num < 0:
            raise ValueError("append_dimension(): num parameter must be >= 0")
        if num == 0:
            return None
        return self._submit(AppendDimensionRequest(self.sheet_id, self._dimension(dimension), num))

    def append_rows(self, num: int) -> GoogleSheetsUpdateRequestResponse|None:
        return self.append_dimension(num, "ROWS")

    def append_columns(self, num: int) -> GoogleSheetsUpdateRequestResponse|None:
        return self.append_dimension(num, "COLUMNS")

    def insert_dimension(self, start: int, count: int,
                         dimension: str = "ROWS",
                         inheritFromBefore: bool = False) -> GoogleSheetsUpdateRequestResponse|None:
        """
        Insert count rows/cols at the zero based start index.
        inheritFromBefore is to either inherit formatting from the prior row/col at True
        or from the following one at False.
        https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#insertdimensionrequest
        """
        if start < 0 or count <= 0:
            return None
        request = InsertDimensionRequest(self.sheet_id, self._dimension(dimension),
                                         start, start + count, inheritFromBefore)
        return self._submit(request)

    def insert_rows(self, start: int, count: int) -> GoogleSheetsUpdateRequestResponse|None:
        return self.insert_dimension(start, count, "ROWS")

    def insert_columns(self, start: int, count: int) -> GoogleSheetsUpdateRequestResponse|None:
        return self.insert_dimension(start, count, "COLUMNS")

    def delete_dimension(self, start: int, count: int|None = None,
                         dimension: str = "ROWS") -> GoogleSheetsUpdateRequestResponse|None:
        """
        Remove count rows/cols from the zero based start index.  No count means
        everything from start to the end, the end index is just left off.
        https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#deletedimensionrequest
        """
        if start < 0 or (count is not None and count <= 0):
            return None
        end = start + count if count is not None else None
        return self._submit(DeleteDimensionRequest(self.sheet_id, self._dimension(dimension), start, end))

    def delete_rows(self, start: int, count: int|None = None) -> GoogleSheetsUpdateRequestResponse|None:
        return self.delete_dimension(start, count, "ROWS")

    def delete_columns(self, start: int, count: int|None = None) -> GoogleSheetsUpdateRequestResponse|None:
        return self.delete_dimension(start, count, "COLUMNS")

    def delete_columns_in(self, a1: str) -> GoogleSheetsUpdateRequestResponse|None:
        """Delete the columns a range covers, e.g. 'C:E'"""
        gr = self.grid_range(a1)
        return self.delete_columns(gr.startColumnIndex, gr.num_cols)

    def set_column_width(self, width: int, *columns: str) -> GoogleSheetsUpdateRequestResponse|None:
        """
        Set the width in pixels of the columns in each range, e.g. set_column_width(120, 'A', 'C:E').
        All the ranges go in one transaction.
        https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#updatedimensionpropertiesrequest
        """
        if width < 0:
            raise ValueError(f"Invalid column width: {width}")
        requests = []
        for a1 in columns:
            gr = self.grid_range(a1)
            requests.append(UpdateDimensionPropertiesRequest(self.sheet_id, "COLUMNS",
                                                             gr.startColumnIndex, gr.endColumnIndex, width))
        return self._submit_all(requests)

    def set_row_height(self, height: int, *rows: str) -> GoogleSheetsUpdateRequestResponse|None:
        """
        Set the height in pixels of the rows in each range.  The ranges need rows
        in them, 'A3' or 'A3:A10', a bare column has none.
        """
        if height < 0:
            raise ValueError(f"Invalid row height: {height}")
        requests = []
        for a1 in rows:
            gr = self.grid_range(a1)
            if gr.startRowIndex is None:
                raise MalformedRangeError(a1, "a row is required")
            end = gr.endRowIndex if gr.endRowIndex is not None else gr.startRowIndex + 1
            requests.append(UpdateDimensionPropertiesRequest(self.sheet_id, "ROWS",
                                                             gr.startRowIndex, end, height))
        return self._submit_all(requests)

    def auto_resize_columns(self, *columns: str) -> GoogleSheetsUpdateRequestResponse|None:
        """
        Fit the columns in each range to their contents.
        https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#autoresizedimensionsrequest
        """
        requests = []
        for a1 in columns:
            gr = self.grid_range(a1)
            requests.append(AutoResizeDimensionsRequest(self.sheet_id, "COLUMNS",
                                                        gr.startColumnIndex, gr.endColumnIndex))
        return self._submit_all(requests)

    # filters

    def clear_basic_filter(self) -> GoogleSheetsUpdateRequestResponse|None:
        return self._submit(ClearBasicFilterRequest(self.sheet_id))

    def set_basic_filter(self, a1: str) -> GoogleSheetsUpdateRequestResponse|None:
        """
        Replace the sheet's basic filter with one over the range.  The clear and
        the set go in the same transaction, or the same batch if one is running.
        """
        requests = [ClearBasicFilterRequest(self.sheet_id), SetBasicFilterRequest(self.grid_range(a1))]
        return self._submit_all(requests)

    def add_filter_view(self, a1: str, title: str,
                        criteria: dict|None = None) -> GoogleSheetsUpdateRequestResponse|None:
        """
        Add a named filter view over the range.
        criteria is keyed by the column index as a string, e.g. {'0': {'hiddenValues': ['x']}}
        https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#addfilterviewrequest
        """
        if not title:
            raise ValueError("A filter view title is required")
        view = FilterView(title=str(title), range=self.grid_range(a1), criteria=criteria)
        return self._submit(AddFilterViewRequest(view))

    def filter_views(self) -> dict[str,FilterView]:
        """Filter views on this sheet by title, fetched fresh"""
        self.refresh()
        return {fv.title: fv for fv in self._sheet.filterViews}

    def filter_view(self, title: str) -> FilterView|None:
        """Find a filter view by title, ignoring case"""
        t = str(title).casefold()
        for name, fv in self.filter_views().items():
            if str(name).casefold() == t:
                return fv
        return None

    def delete_filter_view(self, title: str) -> GoogleSheetsUpdateRequestResponse|None:
        """Delete the named filter view, nothing is sent if there isn't one"""
        fv = self.filter_view(title)
        if fv is None:
            return None
        return self._submit(DeleteFilterViewRequest(fv.filterViewId))

    # sheet properties

    def _update_properties(self, properties: SheetProperties, fields: list[str]) -> GoogleSheetsUpdateRequestResponse|None:
        properties.sheetId = self.sheet_id
        return self._submit(UpdateSheetPropertiesRequest(properties, ",".join(fields)))

    def freeze(self, rows: int|None = None, columns: int|None = None) -> GoogleSheetsUpdateRequestResponse|None:
        """Freeze the top rows and/or left columns, None leaves that one as it is"""
        fields = []
        gp = GridProperties()
        if rows is not None:
            gp.frozenRowCount = rows
            fields.append("gridProperties.frozenRowCount")
        if columns is not None:
            gp.frozenColumnCount = columns
            fields.append("gridProperties.frozenColumnCount")
        if not fields:
            return None
        return self._update_properties(SheetProperties(gridProperties=gp), fields)

    def set_hidden(self, hidden: bool) -> GoogleSheetsUpdateRequestResponse|None:
        """
        Local state is updated straight away, even if batching and the
        request hasn't actually gone yet.
        """
        response = self._update_properties(SheetProperties(hidden=bool(hidden)), ["hidden"])
        self._props.hidden = bool(hidden)
        return response

    def rename(self, title: str) -> GoogleSheetsUpdateRequestResponse|None:
        """Same caveat on local state as set_hidden()"""
        if not title:
            raise ValueError("A sheet title is required")
        response = self._update_properties(SheetProperties(title=str(title)), ["title"])
        self._props.title = str(title)
        return response

    def delete(self) -> GoogleSheetsUpdateRequestResponse|None:
        """Delete this sheet from the spreadsheet, this object is useless afterwards"""
        return self._submit(DeleteSheetRequest(self.sheet_id))

    def duplicate(self, title: str) -> "GoogleSheet|None":
        """
        Copy this sheet, contents and all, to a new sheet called title.
        If a sheet with that title already exists that one is returned instead
        and nothing is copied.  Inside a batch the copy is only queued so there
        is no sheet to return yet, None then.
        """
        if not title:
            raise ValueError("The copy needs a title")
        for s in self._fetch_spreadsheet().sheets:
            if s.properties.title == title:
                logger.debug("Sheet %s already exists, not duplicating", title)
                return self._sibling(s)
        response = self._submit(DuplicateSheetRequest(self.sheet_id, newSheetName=title))
        if response is None:
            return None
        reply = response.replies[0].get('duplicateSheet') if response.replies else None
        if not reply:
            raise RuntimeError(f"No duplicateSheet reply copying {self.title} to {title}")
        return self._sibling(Sheet.from_base(reply))

    # reads and values, these never batch

    def _fetch_spreadsheet(self) -> Spreadsheet:
        return self._executor.run(lambda: self._executor.transport.get_spreadsheet(self._spreadsheetid),
                                  f"get {self._spreadsheetid}")

    def refresh(self) -> SheetProperties:
        """Re-fetch this sheet's properties, row and column counts mostly"""
        spreadsheet = self._fetch_spreadsheet()
        for s in spreadsheet.sheets:
            if s.properties.sheetId == self.sheet_id:
                self._sheet = s
                self._props = s.properties
                logger.debug("Refreshed sheet %s", self._props)
                return self._props
        raise RuntimeError(f"This sheet: {self.title}/{self.sheet_id} should be available?")

    def get_values(self, a1: str|None = None,
                   value_render_option: str = "FORMATTED") -> list[list]:
        """
        Get the values in a range, the whole sheet with no range.  Trailing empty
        rows and cells are not returned so rows can be ragged.
        """
        qualified = self.qualified_a1(a1)
        vr = self._executor.run(lambda: self._executor.transport.get_values(self._spreadsheetid, qualified,
                                                                           value_render_option),
                                f"get values {qualified}")
        return vr.values

    def append_values(self, a1: str|None, rows: list[list]) -> AppendValuesResponse:
        """
        Append rows after the table found at a1, values are parsed as if typed in.
        """
        qualified = self.qualified_a1(a1)
        return self._executor.run(lambda: self._executor.transport.append_values(self._spreadsheetid, qualified,
                                                                                rows, "USER"),
                                  f"append values {qualified}")

    def append_row(self, a1: str|None, *values) -> AppendValuesResponse:
        return self.append_values(a1, [list(values)])

    def clear_values(self, a1: str|None = None) -> ClearValuesResponse:
        """Clear values only, formatting stays.  No range clears the whole sheet."""
        qualified = self.qualified_a1(a1)
        return self._executor.run(lambda: self._executor.transport.clear_values(self._spreadsheetid, qualified),
                                  f"clear values {qualified}")
