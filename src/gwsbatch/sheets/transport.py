from collections.abc import Sequence
from typing import Protocol

from googleapiclient.discovery import Resource

from .requests import (GoogleSheetsUpdateRequestBase, GoogleSheetsUpdateRequest,
                       GoogleSheetsUpdateRequestResponse, AppendValuesResponse,
                       ClearValuesResponse)
from .resources import Spreadsheet, ValueRange, GoogleSheetsEnum

class Transport(Protocol):
    """
    What the batch executor needs from the remote side.  Failures are raised,
    not returned: googleapiclient's HttpError for anything the service answered,
    and one of retry.TRANSPORT_EXCEPTIONS when it never got that far.
    That split is what lets the retry policy tell 429s apart.
    """
    def batch_update(self, spreadsheet_id: str,
                     requests: Sequence[GoogleSheetsUpdateRequestBase|dict]) -> GoogleSheetsUpdateRequestResponse:
        ...

    def get_spreadsheet(self, spreadsheet_id: str) -> Spreadsheet:
        ...

    def get_values(self, spreadsheet_id: str, a1: str,
                   value_render_option: str = "FORMATTED") -> ValueRange:
        ...

    def append_values(self, spreadsheet_id: str, a1: str, rows: list[list],
                      value_input_option: str = "USER") -> AppendValuesResponse:
        ...

    def clear_values(self, spreadsheet_id: str, a1: str) -> ClearValuesResponse:
        ...

def to_request_list(requests: Sequence[GoogleSheetsUpdateRequestBase|dict]) -> list[dict]:
    """
    Turn queued requests into the dicts the API wants, keeping the order.
    Request dataclasses are serialized, dicts go through as they are.
    """
    return [r.to_request() if isinstance(r, GoogleSheetsUpdateRequestBase) else dict(r) for r in requests]

class GoogleSheetsTransport():
    """
    Transport over the googleapiclient sheets v4 service.
    Each method is a single request/response, no retrying happens here,
    that is the job of whoever calls it.
    """
    def __init__(self, service: Resource) -> None:
        self._service = service

    @property
    def service(self) -> Resource:
        return self._service

    def batch_update(self, spreadsheet_id: str,
                     requests: Sequence[GoogleSheetsUpdateRequestBase|dict]) -> GoogleSheetsUpdateRequestResponse:
        """
        Wrapper for calling the batchUpdate() spreadsheet method.
        See https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/batchUpdate
        All requests are applied together or not at all.
        """
        body = GoogleSheetsUpdateRequest(to_request_list(requests)).to_base()
        response = self._service.spreadsheets().batchUpdate(spreadsheetId=spreadsheet_id, body=body).execute()
        return GoogleSheetsUpdateRequestResponse.from_base(response)

    def get_spreadsheet(self, spreadsheet_id: str) -> Spreadsheet:
        """
        Wrapper for calling the get() spreadsheet method, properties only, no grid data.
        See https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets/get
        """
        response = self._service.spreadsheets().get(spreadsheetId=spreadsheet_id,
                                                    includeGridData=False).execute()
        return Spreadsheet.from_base(response)

    def get_values(self, spreadsheet_id: str, a1: str,
                   value_render_option: str = "FORMATTED") -> ValueRange:
        """
        Wrapper for the get() method on the values resource.
        See https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values/get
        Formatted values come back as strings, anything else gets dates as serial numbers.
        """
        value_render = GoogleSheetsEnum.valueRenderOption(value_render_option)
        if not value_render:
            raise ValueError(f"Invalid valueRenderOption value: {value_render_option}")
        date_time_render = "FORMATTED_STRING" if value_render == "FORMATTED_VALUE" else "SERIAL_NUMBER"
        response = self._service.spreadsheets().values().get(spreadsheetId=spreadsheet_id,
                                                             range=a1,
                                                             majorDimension="ROWS",
                                                             valueRenderOption=value_render,
                                                             dateTimeRenderOption=date_time_render).execute()
        return ValueRange.from_base(response)

    def append_values(self, spreadsheet_id: str, a1: str, rows: list[list],
                      value_input_option: str = "USER") -> AppendValuesResponse:
        """
        Wrapper for the append() method on the values resource.
        See https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values/append
        Rows go after the last table row found at or below a1.
        """
        value_input = GoogleSheetsEnum.valueInputOption(value_input_option)
        if not value_input:
            raise ValueError(f"Invalid valueInputOption value: {value_input_option}")
        body = ValueRange(range=a1, values=rows).to_base()
        response = self._service.spreadsheets().values().append(spreadsheetId=spreadsheet_id,
                                                                range=a1,
                                                                valueInputOption=value_input,
                                                                includeValuesInResponse=False,
                                                                body=body).execute()
        return AppendValuesResponse.from_base(response)

    def clear_values(self, spreadsheet_id: str, a1: str) -> ClearValuesResponse:
        """
        Wrapper for the clear() method on the values resource.
        See https://developers.google.com/sheets/api/reference/rest/v4/spreadsheets.values/clear
        Only values go, formatting and notes are left alone.
        """
        response = self._service.spreadsheets().values().clear(spreadsheetId=spreadsheet_id,
                                                               range=a1,
                                                               body={}).execute()
        return ClearValuesResponse.from_base(response)
