import json

import httplib2
import pytest
from googleapiclient.errors import HttpError

from gwsbatch.sheets.requests import GoogleSheetsUpdateRequestResponse, AppendValuesResponse, ClearValuesResponse
from gwsbatch.sheets.resources import Spreadsheet, ValueRange
from gwsbatch.sheets.transport import to_request_list

SPREADSHEET = {
    'spreadsheetId': "abc123",
    'properties': {'title': "Budget", 'locale': "en_US"},
    'sheets': [
        {'properties': {'sheetId': 0, 'title': "Summary", 'index': 0, 'sheetType': "GRID",
                        'gridProperties': {'rowCount': 1000, 'columnCount': 26}}},
        {'properties': {'sheetId': 1234, 'title': "Bob's Data", 'index': 1, 'sheetType': "GRID",
                        'gridProperties': {'rowCount': 50, 'columnCount': 8, 'frozenRowCount': 1}}},
    ]
}

def http_error(status: int, message: str = "boom") -> HttpError:
    resp = httplib2.Response({'status': status, 'reason': message})
    content = json.dumps({'error': {'code': status, 'message': message}}).encode('utf-8')
    return HttpError(resp, content)

class FakeTransport():
    """
    Records what would have gone over the wire.  Errors queued in
    errors are raised by the next calls, in order.  Replies lists queued
    in replies answer the next batch updates, empty replies otherwise.
    """
    def __init__(self, spreadsheet: dict|None = None) -> None:
        self.spreadsheet = spreadsheet if spreadsheet is not None else SPREADSHEET
        self.batches = []
        self.calls = []
        self.errors = []
        self.replies = []

    def _call(self, name: str, *args) -> None:
        self.calls.append((name,) + args)
        if self.errors:
            raise self.errors.pop(0)

    def batch_update(self, spreadsheet_id, requests):
        self.batches.append(to_request_list(requests))
        self._call("batch_update", spreadsheet_id)
        replies = self.replies.pop(0) if self.replies else [{} for _ in requests]
        return GoogleSheetsUpdateRequestResponse(spreadsheet_id, replies)

    def get_spreadsheet(self, spreadsheet_id):
        self._call("get_spreadsheet", spreadsheet_id)
        return Spreadsheet.from_base(self.spreadsheet)

    def get_values(self, spreadsheet_id, a1, value_render_option="FORMATTED"):
        self._call("get_values", spreadsheet_id, a1, value_render_option)
        return ValueRange(range=a1, values=[["a", "b"], ["1"]])

    def append_values(self, spreadsheet_id, a1, rows, value_input_option="USER"):
        self._call("append_values", spreadsheet_id, a1, rows, value_input_option)
        return AppendValuesResponse(spreadsheet_id, a1, {'updatedRows': len(rows)})

    def clear_values(self, spreadsheet_id, a1):
        self._call("clear_values", spreadsheet_id, a1)
        return ClearValuesResponse(spreadsheet_id, a1)

@pytest.fixture
def transport():
    return FakeTransport()

@pytest.fixture
def sleeps():
    """Stand in for time.sleep that just remembers what it was asked"""
    class Sleeps(list):
        def __call__(self, seconds):
            self.append(seconds)
    return Sleeps()

@pytest.fixture
def make_http_error():
    return http_error
