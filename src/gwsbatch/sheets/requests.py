from dataclasses import dataclass, field
from typing import List
import re

from ..resources import GoogleWorkSpaceResourceBase
from .resources import *

class GoogleSheetsUpdateRequestBase(GoogleWorkSpaceResourceBase):
    """
    Base class for sheet batchUpdate requests to get the actual
    request dict into the right format.  These are what get queued
    by a batch, the executor never looks inside them.
    """
    _request_name_re = re.compile(r"^([a-zA-Z])([a-zA-Z]+)Request$")

    def to_request(self) -> dict[str,dict]:
        """
        Wrap the request fields in its key, i.e. {'appendDimension': {...}}.
        The key is the class name with the trailing 'Request' stripped off and
        the first letter lowered, so the class names must follow the API.
        """
        m = self._request_name_re.match(self.__class__.__name__)
        if not m:
            raise RuntimeError("Invalid Google Sheets request format for class name")
        key = m.group(1).lower() + m.group(2)
        return {key: self.to_base()}

@dataclass
class RepeatCellRequest(GoogleSheetsUpdateRequestBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#repeatcellrequest
    Same cell data written to every cell in the range, fields is the mask of
    what in the cell data to actually update.
    """
    range: GridRange
    cell: dict
    fields: str

@dataclass
class UpdateCellsRequest(GoogleSheetsUpdateRequestBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#updatecellsrequest
    With no rows and fields '*' this wipes the range, values and formatting.
    """
    range: GridRange
    fields: str = field(default="*")
    rows: List[dict]|None = field(default=None)

@dataclass
class MergeCellsRequest(GoogleSheetsUpdateRequestBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#mergecellsrequest
    """
    range: GridRange
    mergeType: str = field(default="MERGE_ALL")

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        m = GoogleSheetsEnum.mergeType(self.mergeType)
        if not m:
            raise ValueError(f"Invalid merge type: {self.mergeType}")
        self.mergeType = m

@dataclass
class AppendDimensionRequest(GoogleSheetsUpdateRequestBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#appenddimensionrequest
    """
    sheetId: int
    dimension: str
    length: int

@dataclass
class DeleteDimensionRequest(GoogleSheetsUpdateRequestBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#deletedimensionrequest
    The 'range' indirection makes this a bit complicated, we want the DimensionRange
    initializer but park it in the range object.
    """
    range: DimensionRange = field(init=False)

    def __init__(self, sheetId: int, dimension: str,
                 startIndex: int|None = None,
                 endIndex: int|None = None) -> None:
        self.range = DimensionRange(sheetId, dimension, startIndex, endIndex)

@dataclass
class InsertDimensionRequest(GoogleSheetsUpdateRequestBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#insertdimensionrequest
    Same 'range' indirection as DeleteDimensionRequest.
    """
    range: DimensionRange = field(init=False)
    inheritFromBefore: bool = field(default=False)

    def __init__(self, sheetId: int, dimension: str,
                 startIndex: int, endIndex: int,
                 inheritFromBefore: bool = False) -> None:
        self.range = DimensionRange(sheetId, dimension, startIndex, endIndex)
        self.inheritFromBefore = inheritFromBefore

@dataclass
class UpdateDimensionPropertiesRequest(GoogleSheetsUpdateRequestBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#updatedimensionpropertiesrequest
    Only the pixel size (column width or row height) is set from here.
    """
    range: DimensionRange = field(init=False)
    properties: dict = field(init=False)
    fields: str = field(init=False)

    def __init__(self, sheetId: int, dimension: str,
                 startIndex: int, endIndex: int,
                 pixelSize: int) -> None:
        self.range = DimensionRange(sheetId, dimension, startIndex, endIndex)
        self.properties = {'pixelSize': int(pixelSize)}
        self.fields = "pixelSize"

@dataclass
class AutoResizeDimensionsRequest(GoogleSheetsUpdateRequestBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#autoresizedimensionsrequest
    """
    dimensions: DimensionRange = field(init=False)

    def __init__(self, sheetId: int, dimension: str,
                 startIndex: int|None = None,
                 endIndex: int|None = None) -> None:
        self.dimensions = DimensionRange(sheetId, dimension, startIndex, endIndex)

@dataclass
class AddFilterViewRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#addfilterviewrequest"""
    filter: FilterView

@dataclass
class DeleteFilterViewRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#deletefilterviewrequest"""
    filterId: int

@dataclass
class DuplicateSheetRequest(GoogleSheetsUpdateRequestBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#duplicatesheetrequest
    Leave the index and ID out to let the service pick them.
    """
    sourceSheetId: int
    newSheetName: str|None = field(default=None)
    insertSheetIndex: int|None = field(default=None)
    newSheetId: int|None = field(default=None)

@dataclass
class UpdateSheetPropertiesRequest(GoogleSheetsUpdateRequestBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#updatesheetpropertiesrequest
    fields is a comma separated mask of which properties to touch,
    e.g. 'gridProperties.frozenRowCount,hidden'
    """
    properties: SheetProperties
    fields: str

@dataclass
class SetBasicFilterRequest(GoogleSheetsUpdateRequestBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#setbasicfilterrequest
    """
    filter: dict

    def __init__(self, range: GridRange) -> None:
        self.filter = {'range': range}

@dataclass
class ClearBasicFilterRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#clearbasicfilterrequest"""
    sheetId: int

@dataclass
class DeleteSheetRequest(GoogleSheetsUpdateRequestBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#deletesheetrequest"""
    sheetId: int

@dataclass
class GoogleSheetsUpdateRequest(GoogleWorkSpaceResourceBase):
    """
    The batchUpdate request body, requests must already be in dict form.
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/batchUpdate#request-body
    """
    requests: List[dict]
    includeSpreadsheetInResponse: bool = field(default=False)
    responseRanges: List[str] = field(default_factory=list)
    responseIncludeGridData: bool = field(default=False)

@dataclass
class GoogleSheetsUpdateRequestResponse(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/batchUpdate#response-body
    replies lines up one to one with the requests sent, empty dicts for requests
    that don't reply with anything.
    """
    spreadsheetId: str = field(default="")
    replies: List[dict] = field(default_factory=list)
    updatedSpreadsheet: Spreadsheet|dict|None = field(default=None)

    def __post_init__(self) -> None:
        self.fixup()

    def __bool__(self) -> bool:
        return bool(self.spreadsheetId)

    def fixup(self) -> None:
        if self.updatedSpreadsheet is not None and not isinstance(self.updatedSpreadsheet, Spreadsheet):
            self.updatedSpreadsheet = Spreadsheet.from_base(self.updatedSpreadsheet)

@dataclass
class AppendValuesResponse(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values/append#response-body
    """
    spreadsheetId: str = field(default="")
    tableRange: str = field(default="")
    updates: dict = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.spreadsheetId)

    @property
    def updated_rows(self) -> int:
        return int(self.updates.get('updatedRows', 0))

@dataclass
class ClearValuesResponse(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values/clear#response-body
    """
    spreadsheetId: str = field(default="")
    clearedRange: str = field(default="")

    def __bool__(self) -> bool:
        return bool(self.spreadsheetId)
