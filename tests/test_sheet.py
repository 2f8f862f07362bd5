import copy
import datetime

import pytest

from gwsbatch.errors import MalformedRangeError
from gwsbatch.sheets.requests import (RepeatCellRequest, MergeCellsRequest, InsertDimensionRequest,
                                      DeleteDimensionRequest, SetBasicFilterRequest,
                                      UpdateDimensionPropertiesRequest, AutoResizeDimensionsRequest,
                                      DuplicateSheetRequest, DeleteFilterViewRequest)
from gwsbatch.sheets.resources import GridRange, FilterView
from gwsbatch.sheets.sheet import GoogleSheet, to_serial_date
from gwsbatch.sheets.spreadsheet import GoogleSpreadSheet

def make_sheet(transport, n=1, **kwargs):
    return GoogleSheet("abc123", transport.spreadsheet['sheets'][n], transport, **kwargs)

def test_request_keys():
    gr = GridRange(sheetId=2, startRowIndex=0, endRowIndex=1, startColumnIndex=0, endColumnIndex=1)
    assert(list(RepeatCellRequest(gr, {}, "note").to_request()) == ["repeatCell"])
    assert(list(MergeCellsRequest(gr).to_request()) == ["mergeCells"])
    assert(list(SetBasicFilterRequest(gr).to_request()) == ["setBasicFilter"])

def test_dimension_requests():
    r = InsertDimensionRequest(5, "cols", 2, 4).to_request()
    assert(r == {'insertDimension': {'range': {'sheetId': 5, 'dimension': "COLUMNS", 'startIndex': 2, 'endIndex': 4},
                                     'inheritFromBefore': False}})
    r = DeleteDimensionRequest(5, "R", 3).to_request()
    assert(r == {'deleteDimension': {'range': {'sheetId': 5, 'dimension': "ROWS", 'startIndex': 3}}})
    with pytest.raises(ValueError):
        DeleteDimensionRequest(5, "sideways", 3)

def test_merge_type_checked():
    gr = GridRange(sheetId=2)
    assert(MergeCellsRequest(gr, "rows").mergeType == "MERGE_ROWS")
    with pytest.raises(ValueError):
        MergeCellsRequest(gr, "diagonal")

def test_sizing_and_sheet_requests():
    r = UpdateDimensionPropertiesRequest(5, "C", 1, 3, 120).to_request()
    assert(r == {'updateDimensionProperties': {
        'range': {'sheetId': 5, 'dimension': "COLUMNS", 'startIndex': 1, 'endIndex': 3},
        'properties': {'pixelSize': 120},
        'fields': "pixelSize"}})
    r = AutoResizeDimensionsRequest(5, "COLUMNS").to_request()
    assert(r == {'autoResizeDimensions': {'dimensions': {'sheetId': 5, 'dimension': "COLUMNS"}}})
    assert(DuplicateSheetRequest(5, "Copy").to_request() ==
           {'duplicateSheet': {'sourceSheetId': 5, 'newSheetName': "Copy"}})
    assert(DeleteFilterViewRequest(77).to_request() == {'deleteFilterView': {'filterId': 77}})

def test_sheet_properties(transport):
    sheet = make_sheet(transport)
    assert(sheet.title == "Bob's Data")
    assert(sheet.sheet_id == 1234)
    assert(sheet.index == 1)
    assert(sheet.is_grid)
    assert(not sheet.hidden)
    assert(sheet.dimensions == (50, 8))
    assert(len(sheet) == 400)
    assert(str(sheet) == "Bob's Data(1234[1]):GRID(50Rx8C)")

def test_sheet_needs_id(transport):
    with pytest.raises(ValueError):
        GoogleSheet("abc123", {'properties': {'title': "nope"}}, transport)

def test_qualified_a1(transport):
    sheet = make_sheet(transport)
    assert(sheet.qualified_a1("A1:B2") == "'Bob''s Data'!A1:B2")
    assert(sheet.qualified_a1() == "'Bob''s Data'")

def test_set_text_sends_repeat_cell(transport):
    sheet = make_sheet(transport)
    response = sheet.set_text("B2:C3", "hello")
    assert(response)
    assert(transport.batches == [[{'repeatCell': {
        'range': {'sheetId': 1234, 'startRowIndex': 1, 'endRowIndex': 3, 'startColumnIndex': 1, 'endColumnIndex': 3},
        'cell': {'userEnteredValue': {'stringValue': "hello"}},
        'fields': "userEnteredValue"}}]])

def test_cell_values(transport):
    sheet = make_sheet(transport)
    sheet.set_value("A1", 3.5)
    sheet.set_formula("A2", "=SUM(A1:A1)")
    sheet.set_boolean("A3", 1)
    sheet.set_note("A4", "check this")
    values = [b[0]['repeatCell']['cell'] for b in transport.batches]
    assert(values == [{'userEnteredValue': {'numberValue': 3.5}},
                      {'userEnteredValue': {'formulaValue': "=SUM(A1:A1)"}},
                      {'userEnteredValue': {'boolValue': True}},
                      {'note': "check this"}])

def test_set_date(transport):
    sheet = make_sheet(transport)
    sheet.set_date("A5", datetime.date(2024, 1, 1))
    sheet.set_date("B5", datetime.datetime(2024, 1, 1, 18))
    assert(transport.batches[0] == [{'repeatCell': {
        'range': {'sheetId': 1234, 'startRowIndex': 4, 'endRowIndex': 5, 'startColumnIndex': 0, 'endColumnIndex': 1},
        'cell': {'userEnteredValue': {'numberValue': 45292.0}},
        'fields': "userEnteredValue"}}])
    assert(transport.batches[1][0]['repeatCell']['cell'] == {'userEnteredValue': {'numberValue': 45292.75}})

def test_serial_dates():
    assert(to_serial_date(datetime.date(1899, 12, 30)) == 0.0)
    assert(to_serial_date(datetime.date(1900, 1, 1)) == 2.0)
    assert(to_serial_date(datetime.date(2024, 1, 1)) == 45292.0)
    assert(to_serial_date(datetime.datetime(2024, 1, 1, 12)) == 45292.5)

def test_batched_sheet(transport):
    sheet = make_sheet(transport)
    sheet.batch_start()
    assert(sheet.set_text("A1", "x") is None)
    assert(sheet.merge_cells("A1:C1") is None)
    assert(sheet.append_rows(10) is None)
    assert(sheet.freeze(rows=2) is None)
    assert(not transport.calls)
    response = sheet.batch_execute()
    assert(len(response.replies) == 4)
    keys = [list(r)[0] for r in transport.batches[0]]
    assert(keys == ["repeatCell", "mergeCells", "appendDimension", "updateSheetProperties"])
    assert(sheet.batch_execute() is None)

def test_batch_context(transport):
    sheet = make_sheet(transport)
    with sheet.batch():
        sheet.insert_rows(0, 2)
        sheet.delete_columns(3)
    assert(transport.batches == [[
        {'insertDimension': {'range': {'sheetId': 1234, 'dimension': "ROWS", 'startIndex': 0, 'endIndex': 2},
                             'inheritFromBefore': False}},
        {'deleteDimension': {'range': {'sheetId': 1234, 'dimension': "COLUMNS", 'startIndex': 3}}},
    ]])

def test_batch_clear(transport):
    sheet = make_sheet(transport)
    sheet.batch_start()
    sheet.clear()
    sheet.batch_clear()
    assert(sheet.batch_execute() is None)
    assert(not transport.calls)

def test_dimension_no_ops(transport):
    sheet = make_sheet(transport)
    assert(sheet.append_rows(0) is None)
    assert(sheet.insert_columns(-1, 3) is None)
    assert(sheet.insert_rows(2, 0) is None)
    assert(sheet.delete_rows(1, 0) is None)
    assert(sheet.freeze() is None)
    assert(not transport.calls)
    with pytest.raises(ValueError):
        sheet.append_columns(-1)
    with pytest.raises(ValueError):
        sheet.append_dimension(2, "depth")

def test_delete_columns_in(transport):
    sheet = make_sheet(transport)
    sheet.delete_columns_in("C:E")
    assert(transport.batches[0][0]['deleteDimension']['range'] ==
           {'sheetId': 1234, 'dimension': "COLUMNS", 'startIndex': 2, 'endIndex': 5})

def test_clear_whole_sheet(transport):
    sheet = make_sheet(transport)
    sheet.clear()
    assert(transport.batches == [[{'updateCells': {'range': {'sheetId': 1234}, 'fields': "*"}}]])

def test_basic_filter_is_one_transaction(transport):
    sheet = make_sheet(transport)
    sheet.set_basic_filter("A1:H50")
    assert(len(transport.batches) == 1)
    assert(transport.batches[0][0] == {'clearBasicFilter': {'sheetId': 1234}})
    assert(transport.batches[0][1]['setBasicFilter']['filter']['range']['endColumnIndex'] == 8)

def test_basic_filter_joins_batch(transport):
    sheet = make_sheet(transport)
    with sheet.batch():
        sheet.set_text("A1", "Name")
        assert(sheet.set_basic_filter("A:H") is None)
    assert(len(transport.batches) == 1)
    assert(len(transport.batches[0]) == 3)

def test_properties_updates(transport):
    sheet = make_sheet(transport)
    sheet.freeze(rows=1, columns=2)
    sheet.set_hidden(True)
    sheet.rename("Data")
    update = transport.batches[0][0]['updateSheetProperties']
    assert(update == {'properties': {'sheetId': 1234, 'gridProperties': {'frozenRowCount': 1, 'frozenColumnCount': 2}},
                      'fields': "gridProperties.frozenRowCount,gridProperties.frozenColumnCount"})
    assert(transport.batches[1][0]['updateSheetProperties'] ==
           {'properties': {'sheetId': 1234, 'hidden': True}, 'fields': "hidden"})
    assert(sheet.hidden)
    assert(sheet.title == "Data")
    with pytest.raises(ValueError):
        sheet.rename("")

def test_delete(transport):
    sheet = make_sheet(transport)
    sheet.delete()
    assert(transport.batches == [[{'deleteSheet': {'sheetId': 1234}}]])

def test_values(transport):
    sheet = make_sheet(transport, 0)
    assert(sheet.get_values("A1:B2") == [["a", "b"], ["1"]])
    assert(transport.calls[-1] == ("get_values", "abc123", "'Summary'!A1:B2", "FORMATTED"))
    response = sheet.append_row("A1", "x", 2, True)
    assert(response.updated_rows == 1)
    assert(transport.calls[-1] == ("append_values", "abc123", "'Summary'!A1", [["x", 2, True]], "USER"))

def test_refresh(transport):
    sheet = make_sheet(transport)
    transport.spreadsheet = {'spreadsheetId': "abc123", 'sheets': [
        {'properties': {'sheetId': 1234, 'title': "Bob's Data", 'index': 0, 'sheetType': "GRID",
                        'gridProperties': {'rowCount': 60, 'columnCount': 8}}}]}
    sheet.refresh()
    assert(sheet.rows == 60)
    assert(sheet.index == 0)
    transport.spreadsheet = {'spreadsheetId': "abc123", 'sheets': []}
    with pytest.raises(RuntimeError):
        sheet.refresh()

def test_spreadsheet_lookup(transport):
    ss = GoogleSpreadSheet("abc123", transport)
    assert(ss)
    assert(len(ss) == 0)
    assert(ss.title == "unconnected")
    ss.get()
    assert(ss.title == "Budget")
    assert(len(ss) == 2)
    assert("Summary" in ss)
    assert(1234 in ss)
    assert(99 not in ss)
    assert(ss["Bob's Data"].sheet_id == 1234)
    assert(ss[0].title == "Summary")
    assert(ss.sheet_by_id(1234).index == 1)
    assert([s.title for s in ss.sheets] == ["Summary", "Bob's Data"])
    with pytest.raises(KeyError):
        ss["Missing"]
    with pytest.raises(KeyError):
        ss.sheet_by_id(7)

def test_sheets_batch_independently(transport):
    ss = GoogleSpreadSheet("abc123", transport)
    ss.get()
    summary = ss["Summary"]
    data = ss["Bob's Data"]
    summary.batch_start()
    summary.set_text("A1", "queued")
    data.set_text("A1", "sent")
    assert(len(transport.batches) == 1)
    summary.batch_execute()
    assert(len(transport.batches) == 2)

def test_column_widths_one_transaction(transport):
    sheet = make_sheet(transport)
    sheet.set_column_width(120, "A", "C:E")
    assert(len(transport.batches) == 1)
    ranges = [r['updateDimensionProperties']['range'] for r in transport.batches[0]]
    assert(ranges == [{'sheetId': 1234, 'dimension': "COLUMNS", 'startIndex': 0, 'endIndex': 1},
                      {'sheetId': 1234, 'dimension': "COLUMNS", 'startIndex': 2, 'endIndex': 5}])
    assert(transport.batches[0][0]['updateDimensionProperties']['properties'] == {'pixelSize': 120})
    assert(sheet.set_column_width(120) is None)
    assert(len(transport.batches) == 1)
    with pytest.raises(ValueError):
        sheet.set_column_width(-5, "A")

def test_row_heights(transport):
    sheet = make_sheet(transport)
    sheet.set_row_height(30, "A3", "A5:C9")
    ranges = [r['updateDimensionProperties']['range'] for r in transport.batches[0]]
    assert(ranges == [{'sheetId': 1234, 'dimension': "ROWS", 'startIndex': 2, 'endIndex': 3},
                      {'sheetId': 1234, 'dimension': "ROWS", 'startIndex': 4, 'endIndex': 9}])
    with pytest.raises(MalformedRangeError):
        sheet.set_row_height(30, "C")
    with pytest.raises(ValueError):
        sheet.set_row_height(-1, "A1")
    assert(len(transport.batches) == 1)

def test_auto_resize_columns(transport):
    sheet = make_sheet(transport)
    with sheet.batch():
        sheet.set_text("A1", "A much longer heading")
        assert(sheet.auto_resize_columns("A:B", "D") is None)
    assert(len(transport.batches) == 1)
    assert(transport.batches[0][1:] == [
        {'autoResizeDimensions': {'dimensions': {'sheetId': 1234, 'dimension': "COLUMNS", 'startIndex': 0, 'endIndex': 2}}},
        {'autoResizeDimensions': {'dimensions': {'sheetId': 1234, 'dimension': "COLUMNS", 'startIndex': 3, 'endIndex': 4}}},
    ])

def test_add_filter_view(transport):
    sheet = make_sheet(transport)
    sheet.add_filter_view("A1:H50", "Open items", {'2': {'hiddenValues': ["done"]}})
    assert(transport.batches == [[{'addFilterView': {'filter': {
        'title': "Open items",
        'range': {'sheetId': 1234, 'startRowIndex': 0, 'endRowIndex': 50, 'startColumnIndex': 0, 'endColumnIndex': 8},
        'criteria': {'2': {'hiddenValues': ["done"]}}}}}]])
    with pytest.raises(ValueError):
        sheet.add_filter_view("A1:H50", "")

def test_filter_view_lookup_and_delete(transport):
    spreadsheet = copy.deepcopy(transport.spreadsheet)
    spreadsheet['sheets'][1]['filterViews'] = [
        {'filterViewId': 77, 'title': "Open Items",
         'range': {'sheetId': 1234, 'startRowIndex': 0, 'endRowIndex': 50}},
    ]
    transport.spreadsheet = spreadsheet
    sheet = make_sheet(transport)
    views = sheet.filter_views()
    assert(list(views) == ["Open Items"])
    fv = sheet.filter_view("open items")
    assert(isinstance(fv, FilterView))
    assert(fv.filterViewId == 77)
    assert(fv.range.num_rows == 50)
    assert(sheet.filter_view("closed") is None)
    assert(sheet.delete_filter_view("Closed") is None)
    assert(not transport.batches)
    sheet.delete_filter_view("OPEN ITEMS")
    assert(transport.batches == [[{'deleteFilterView': {'filterId': 77}}]])

def test_duplicate_existing_title(transport):
    sheet = make_sheet(transport)
    other = sheet.duplicate("Summary")
    assert(other.sheet_id == 0)
    assert(other.spreadsheet_id == "abc123")
    assert(transport.calls == [("get_spreadsheet", "abc123")])
    assert(not transport.batches)
    with pytest.raises(ValueError):
        sheet.duplicate("")

def test_duplicate_new_title(transport):
    sheet = make_sheet(transport)
    transport.replies.append([{'duplicateSheet': {'properties': {
        'sheetId': 555, 'title': "Bob's Copy", 'index': 2, 'sheetType': "GRID",
        'gridProperties': {'rowCount': 50, 'columnCount': 8}}}}])
    copied = sheet.duplicate("Bob's Copy")
    assert(transport.batches == [[{'duplicateSheet': {'sourceSheetId': 1234, 'newSheetName': "Bob's Copy"}}]])
    assert(copied.sheet_id == 555)
    assert(copied.title == "Bob's Copy")
    assert(copied.dimensions == (50, 8))
    assert(not copied.executor.batching)

def test_duplicate_in_batch(transport):
    sheet = make_sheet(transport)
    with sheet.batch():
        assert(sheet.duplicate("Later") is None)
    assert(transport.batches == [[{'duplicateSheet': {'sourceSheetId': 1234, 'newSheetName': "Later"}}]])

def test_duplicate_without_reply(transport):
    sheet = make_sheet(transport)
    with pytest.raises(RuntimeError):
        sheet.duplicate("Copy")

def test_clear_values(transport):
    sheet = make_sheet(transport, 0)
    response = sheet.clear_values("B2:D")
    assert(response.clearedRange == "'Summary'!B2:D")
    assert(transport.calls == [("clear_values", "abc123", "'Summary'!B2:D")])
    sheet.clear_values()
    assert(transport.calls[-1] == ("clear_values", "abc123", "'Summary'"))
    assert(not transport.batches)
