import time
from collections.abc import Callable
from typing import Any

from .batch import BatchExecutor
from .resources import Spreadsheet
from .retry import RetryPolicy
from .sheet import GoogleSheet
from .transport import Transport

class GoogleSpreadSheet():
    """
    A spreadsheet and the sheets (tabs) in it.  Mostly a way to get at a
    GoogleSheet by title or index, the work happens on the sheets.
    Each GoogleSheet handed out has its own batch, batching on one sheet
    doesn't hold up requests on another.
    """
    def __init__(self, spreadsheet_id: str,
                 transport: Transport,
                 policy: RetryPolicy|None = None,
                 sleep: Callable[[float], Any] = time.sleep) -> None:
        self._policy = policy if policy is not None else RetryPolicy()
        self._sleep = sleep
        self._executor = BatchExecutor(spreadsheet_id, transport, self._policy, sleep)
        self._spreadsheet = Spreadsheet(spreadsheetId=spreadsheet_id)

    def __bool__(self) -> bool:
        return bool(self._spreadsheet)

    def __str__(self) -> str:
        return str(self._spreadsheet)

    def __repr__(self) -> str:
        return f"{self.__class__}:{str(self)}"

    def __len__(self) -> int:
        """
        In this context length is the number of sheets in this spreadsheet.
        Or 0 if not fetched yet.
        """
        return len(self._spreadsheet.sheets)

    def __contains__(self, val: str|int) -> bool:
        """
        Is the sheet in this spreadsheet?
        val can be either a string (title) or int (ID)
        """
        if isinstance(val, int):
            return any(s.properties.sheetId == val for s in self._spreadsheet.sheets)
        return any(s.properties.title == val for s in self._spreadsheet.sheets)

    def __getitem__(self, item: str|int) -> GoogleSheet:
        """
        Get the sheet.  In this context if item is a
        string that is by title and if it is an int is is by index,
        index in this case meaning sheet index, not list index
        """
        for s in self._spreadsheet.sheets:
            if isinstance(item, int):
                if s.properties.index == item:
                    return self._wrap(s)
            elif s.properties.title == item:
                return self._wrap(s)
        raise KeyError(f"{item} not in sheets[]")

    def _wrap(self, sheet) -> GoogleSheet:
        return GoogleSheet(self.id, sheet, self._executor.transport, self._policy, self._sleep)

    @property
    def id(self) -> str:
        return self._spreadsheet.spreadsheetId

    @property
    def spreadsheet(self) -> Spreadsheet:
        return self._spreadsheet

    @property
    def sheets(self) -> list[GoogleSheet]:
        return [self._wrap(s) for s in self._spreadsheet.sheets]

    @property
    def title(self) -> str:
        return self._spreadsheet.properties.title if self._spreadsheet.sheets else 'unconnected'

    def sheet_by_id(self, sheet_id: int) -> GoogleSheet:
        for s in self._spreadsheet.sheets:
            if s.properties.sheetId == sheet_id:
                return self._wrap(s)
        raise KeyError(f"sheet ID {sheet_id} not in sheets[]")

    def get(self) -> Spreadsheet:
        """Fetch the spreadsheet properties and sheet list"""
        spreadsheet = self._executor.run(lambda: self._executor.transport.get_spreadsheet(self.id),
                                         f"get {self.id}")
        if spreadsheet:
            self._spreadsheet = spreadsheet
        return self._spreadsheet
