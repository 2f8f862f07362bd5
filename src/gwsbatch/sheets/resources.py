"""
Class implementations of sheets request resources.
As these are just logical groupings of data fields we use dataclasses
to implement.  The nested aspect does cause some headaches as there
is a handy dataclass.asdict() method to get a dict translation of the
class fields, which is exactly what that request client needs, but
there's no inverse support, as in initializing a dataclass from a dict.
So for dataclasses with dataclasses as fields we fix them up after init.
Field names follow the API (camelCase) so asdict() is the request body.
Not all resources are implemented, just what the batch surface needs.
"""
from dataclasses import dataclass, field
from typing import List

from ..resources import GoogleWorkSpaceResourceBase

class GoogleSheetsEnum():
    """
    An 'enum' in the sheets client is just a string so this is
    just to translate and validate input.
    """
    _VALID_VALUE_RENDER_OPTIONS = {
        "FORMATTED": "FORMATTED_VALUE",
        "FORMATTED_VALUE": "FORMATTED_VALUE",
        "UNFORMATTED": "UNFORMATTED_VALUE",
        "UNFORMATTED_VALUE": "UNFORMATTED_VALUE",
        "FORMULA": "FORMULA"
    }
    _VALID_DIMENSION_OPTIONS = {
        "ROWS": "ROWS",
        "ROW": "ROWS",
        "R": "ROWS",
        "C": "COLUMNS",
        "COLS": "COLUMNS",
        "COLUMNS": "COLUMNS"
    }
    _VALID_VALUE_INPUT_OPTIONS = {
        "RAW": "RAW",
        "USER": "USER_ENTERED",
        "USER_ENTERED": "USER_ENTERED"
    }
    _VALID_MERGE_TYPES = {
        "ALL": "MERGE_ALL",
        "MERGE_ALL": "MERGE_ALL",
        "COLUMNS": "MERGE_COLUMNS",
        "MERGE_COLUMNS": "MERGE_COLUMNS",
        "ROWS": "MERGE_ROWS",
        "MERGE_ROWS": "MERGE_ROWS"
    }

    @classmethod
    def valueRenderOption(cls, option: str) -> str:
        """https://developers.google.com/sheets/api/reference/rest/v4/ValueRenderOption"""
        return cls._VALID_VALUE_RENDER_OPTIONS.get(str(option).upper(), "")

    @classmethod
    def dimension(cls, dim: str) -> str:
        """https://developers.google.com/sheets/api/reference/rest/v4/Dimension"""
        return cls._VALID_DIMENSION_OPTIONS.get(str(dim).upper(), "")

    @classmethod
    def valueInputOption(cls, option: str) -> str:
        """https://developers.google.com/sheets/api/reference/rest/v4/ValueInputOption"""
        return cls._VALID_VALUE_INPUT_OPTIONS.get(str(option).upper(), "")

    @classmethod
    def mergeType(cls, option: str) -> str:
        """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/request#mergetype"""
        return cls._VALID_MERGE_TYPES.get(str(option).upper(), "")

@dataclass
class GridRange(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/other#gridrange
    Zero based and half open, start indexes are inclusive, end indexes exclusive.
    A None index means that side is unbounded, so GridRange(sheetId=3) is the whole sheet
    and to_base() leaves the missing sides out of the request entirely.
    """
    sheetId: int = field(default=0)
    startRowIndex: int|None = field(default=None)
    endRowIndex: int|None = field(default=None)
    startColumnIndex: int|None = field(default=None)
    endColumnIndex: int|None = field(default=None)

    def __bool__(self) -> bool:
        return self.sheetId >= 0

    @property
    def rows_bounded(self) -> bool:
        return self.startRowIndex is not None and self.endRowIndex is not None

    @property
    def cols_bounded(self) -> bool:
        return self.startColumnIndex is not None and self.endColumnIndex is not None

    @property
    def num_rows(self) -> int:
        """Rows spanned, 0 if the rows are unbounded"""
        return self.endRowIndex - self.startRowIndex if self.rows_bounded else 0

    @property
    def num_cols(self) -> int:
        """Columns spanned, 0 if the columns are unbounded"""
        return self.endColumnIndex - self.startColumnIndex if self.cols_bounded else 0

@dataclass
class DimensionRange(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/DimensionRange"""
    sheetId: int = field(default=0)
    dimension: str = field(default="ROWS")
    startIndex: int|None = field(default=None)
    endIndex: int|None = field(default=None)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        d = str(self.dimension)
        self.dimension = GoogleSheetsEnum.dimension(d)
        if not self.dimension:
            raise ValueError(f"Invalid dimension value: {d}")

    def __bool__(self) -> bool:
        return self.sheetId >= 0 and bool(self.dimension)

@dataclass
class GridProperties(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/sheets#gridproperties"""
    rowCount: int|None = field(default=None)
    columnCount: int|None = field(default=None)
    frozenRowCount: int|None = field(default=None)
    frozenColumnCount: int|None = field(default=None)
    hideGridlines: bool|None = field(default=None)
    rowGroupControlAfter: bool|None = field(default=None)
    columnGroupControlAfter: bool|None = field(default=None)

    def __bool__(self) -> bool:
        return self.rowCount is not None and self.columnCount is not None

@dataclass
class SheetProperties(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/sheets#sheetproperties"""
    sheetId: int|None = field(default=None)
    title: str|None = field(default=None)
    index: int|None = field(default=None)
    sheetType: str|None = field(default=None)
    gridProperties: GridProperties|dict|None = field(default=None)
    hidden: bool|None = field(default=None)
    tabColor: dict|None = field(default=None)
    tabColorStyle: dict|None = field(default=None)
    rightToLeft: bool|None = field(default=None)
    dataSourceSheetProperties: dict|None = field(default=None)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        if self.gridProperties is not None and not isinstance(self.gridProperties, GridProperties):
            self.gridProperties = GridProperties.from_base(self.gridProperties)

    def __bool__(self) -> bool:
        """
        True if it is valid, which is the ID and index are 0 or positive
        as negative index is not possible
        """
        return (self.sheetId is not None and self.sheetId >= 0 and
                self.index is not None and self.index >= 0 and bool(self.title))

    def __str__(self) -> str:
        val = ""
        if self:
            val = f"{str(self.title)}({str(self.sheetId)}[{str(self.index)}]):{str(self.sheetType)}"
            if self.is_grid() and self.gridProperties:
                val += f"({self.gridProperties.rowCount}Rx{self.gridProperties.columnCount}C)"
        else:
            val = "<invalid sheet>"
        return val

    def is_grid(self) -> bool:
        """
        A GRID sheet is the traditional range of cells and is normally
        what you want to work with.
        """
        return self.sheetType == 'GRID'

@dataclass
class FilterView(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/sheets#filterview
    A named filter over a range.  criteria is keyed by column index as a string, e.g. '0'.
    """
    filterViewId: int|None = field(default=None)
    title: str|None = field(default=None)
    range: GridRange|dict|None = field(default=None)
    namedRangeId: str|None = field(default=None)
    tableId: str|None = field(default=None)
    sortSpecs: List[dict]|None = field(default=None)
    criteria: dict|None = field(default=None)
    filterSpecs: List[dict]|None = field(default=None)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        if self.range is not None and not isinstance(self.range, GridRange):
            self.range = GridRange.from_base(self.range)

    def __bool__(self) -> bool:
        return bool(self.title)

@dataclass
class Sheet(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/sheets#sheet
    Representation of a sheet within a spreadsheet
    """
    properties: SheetProperties|dict = field(default_factory=dict)
    merges: List[GridRange|dict] = field(default_factory=list)
    basicFilter: dict|None = field(default=None)
    filterViews: List[FilterView|dict] = field(default_factory=list)
    protectedRanges: List[dict] = field(default_factory=list)
    conditionalFormats: List[dict] = field(default_factory=list)
    data: List[dict] = field(default_factory=list)
    charts: List[dict] = field(default_factory=list)
    bandedRanges: List[dict] = field(default_factory=list)
    developerMetadata: List[dict] = field(default_factory=list)
    rowGroups: List[dict] = field(default_factory=list)
    columnGroups: List[dict] = field(default_factory=list)
    slicers: List[dict] = field(default_factory=list)
    tables: List[dict] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.properties = self.properties if isinstance(self.properties,SheetProperties) else SheetProperties.from_base(self.properties)
        self.merges = [gr if isinstance(gr,GridRange) else GridRange.from_base(gr) for gr in self.merges]
        self.filterViews = [fv if isinstance(fv,FilterView) else FilterView.from_base(fv) for fv in self.filterViews]

    def __bool__(self) -> bool:
        return bool(self.properties)

    def __str__(self) -> str:
        return str(self.properties)

@dataclass
class SpreadsheetProperties(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets#SpreadsheetProperties
    """
    title: str = field(default="")
    locale: str = field(default="")
    autoRecalc: str = field(default="")
    timeZone: str = field(default="")
    defaultFormat: dict = field(default_factory=dict)
    iterativeCalculationSettings: dict = field(default_factory=dict)
    spreadsheetTheme: dict = field(default_factory=dict)
    importFunctionsExternalUrlAccessAllowed: bool = field(default=False)

    def __bool__(self) -> bool:
        return bool(self.title)

@dataclass
class Spreadsheet(GoogleWorkSpaceResourceBase):
    """
    https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets#resource:-spreadsheet
    The representation of a spreadsheet.
    """
    spreadsheetId: str = field(default="")
    properties: SpreadsheetProperties|dict = field(default_factory=dict)
    sheets: List[Sheet|dict] = field(default_factory=list)
    namedRanges: List[dict] = field(default_factory=list)
    spreadsheetUrl: str = field(default="")
    developerMetadata: List[dict] = field(default_factory=list)
    dataSources: List[dict] = field(default_factory=list)
    dataSourceSchedules: List[dict] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.properties = self.properties if isinstance(self.properties,SpreadsheetProperties) else SpreadsheetProperties.from_base(self.properties)
        self.sheets = [s if isinstance(s,Sheet) else Sheet.from_base(s) for s in self.sheets]

    def __bool__(self) -> bool:
        return bool(self.spreadsheetId)

    def __str__(self) -> str:
        val = 'unconnected'
        if self.spreadsheetId:
            if self.sheets:
                val = self.properties.title
                val += '[' + ','.join(str(s) for s in self.sheets) + ']'
            else:
                val = f"{self.spreadsheetId}(unconnected)"
        return val

@dataclass
class ValueRange(GoogleWorkSpaceResourceBase):
    """https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values#resource:-valuerange"""
    range: str = field(default="")
    majorDimension: str = field(default="ROWS")
    values: list[list[bool|str|int|float|None]] = field(default_factory=list)

    def __post_init__(self):
        self.fixup()

    def fixup(self) -> None:
        if self.majorDimension:
            self.majorDimension = GoogleSheetsEnum.dimension(str(self.majorDimension))

    def __bool__(self) -> bool:
        """
        A ValueRange is valid if the range string is not empty
        and the majorDimension has a valid value.
        """
        return bool(self.range) and bool(self.majorDimension)
