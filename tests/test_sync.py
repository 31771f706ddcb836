"""End-to-end tests for SyncManager.synchronize."""

import openpyxl
import pytest

from sheetsync.excel import (
    ObjectQuery,
    PushConfig,
    SyncContext,
    SyncManager,
    SyncMode,
    TableRow,
    WorkbookMetadata,
)
from sheetsync.excel.objects import DomainObject


class Crate(DomainObject):
    size: str = ""
    stock: int = 0


class Rim(DomainObject):
    diameter: int = 0


def _push(context, objects, mode=SyncMode.ADAPTER_DEFAULT, **config):
    return SyncManager.synchronize(context, objects, mode, PushConfig(**config))


class TestModes:
    """Test the sync modes against a real file."""

    def test_create_then_update_overwrites_written_region_only(
        self, context, workbook_path, read_sheet
    ):
        first = _push(
            context,
            [{"Name": "A", "Value": 1}, {"Name": "B", "Value": 2}],
            SyncMode.CREATE_NON_EXISTING,
            worksheet="Data",
        )
        assert first.success
        assert read_sheet(workbook_path, "Data") == [
            ["Name", "Value"], ["A", "1"], ["B", "2"],
        ]

        second = _push(
            context, [{"Name": "C", "Value": 3}], SyncMode.UPDATE_ONLY, worksheet="Data"
        )
        assert second.success
        assert read_sheet(workbook_path, "Data") == [
            ["Name", "Value"], ["C", "3"], ["B", "2"],
        ]

    def test_replace_is_idempotent(self, context, workbook_path, read_sheet):
        objects = [Crate(name="T1", size="60x40", stock=4)]
        _push(context, objects, worksheet="Crates")
        before = read_sheet(workbook_path, "Crates")

        result = _push(context, objects, worksheet="Crates")

        assert result.success
        assert read_sheet(workbook_path, "Crates") == before
        assert openpyxl.load_workbook(str(workbook_path)).sheetnames == ["Crates"]

    def test_replace_drops_stale_rows(self, context, workbook_path, read_sheet):
        _push(context, [Crate(name="T1"), Crate(name="T2")], worksheet="Crates")
        _push(context, [Crate(name="T3")], worksheet="Crates")
        assert read_sheet(workbook_path, "Crates") == [
            ["name", "size", "stock"], ["T3", None, "0"],
        ]

    def test_values_starting_with_equals_stay_text(self, context, workbook_path, read_sheet):
        result = _push(context, [{"Name": "=A", "Note": "==== heading"}], worksheet="Notes")

        assert result.success
        assert openpyxl.load_workbook(str(workbook_path))["Notes"]["A2"].data_type == "s"
        assert read_sheet(workbook_path, "Notes") == [["Name", "Note"], ["=A", "==== heading"]]
        read = SyncManager.query(context, ObjectQuery(worksheet="Notes"))
        assert read.results[0].custom_data == {"Name": "=A", "Note": "==== heading"}

    def test_create_non_existing_leaves_existing_sheet(
        self, context, workbook_path, read_sheet
    ):
        _push(context, [Crate(name="T1")], SyncMode.CREATE_NON_EXISTING, worksheet="Crates")
        result = _push(
            context, [Crate(name="T2")], SyncMode.CREATE_NON_EXISTING, worksheet="Crates"
        )
        assert result.success
        assert read_sheet(workbook_path, "Crates")[1][0] == "T1"

    def test_update_or_create_creates_missing_sheet(
        self, context, workbook_path, read_sheet
    ):
        result = _push(
            context, [Crate(name="T1")], SyncMode.UPDATE_OR_CREATE, worksheet="Crates"
        )
        assert result.success
        assert read_sheet(workbook_path, "Crates")[1][0] == "T1"

    def test_other_sheets_are_kept(self, context, make_workbook, workbook_path, read_sheet):
        make_workbook({"Keep": [["x", "y"], [1, 2]]})
        _push(context, [Crate(name="T1")], worksheet="Crates")
        assert read_sheet(workbook_path, "Keep") == [["x", "y"], [1, 2]]


class TestFailures:
    """Test failures leave the file untouched."""

    def test_update_only_without_file(self, context, workbook_path):
        result = _push(context, [Crate(name="T1")], SyncMode.UPDATE_ONLY)
        assert not result.success
        assert "no workbook to update" in result.errors[0]
        assert not workbook_path.exists()

    def test_update_only_without_sheet(self, context, make_workbook):
        path = make_workbook({"Other": [["a"], [1]]})
        before = path.read_bytes()

        result = _push(context, [Crate(name="T1")], SyncMode.UPDATE_ONLY, worksheet="Crates")

        assert not result.success
        assert "no worksheet named Crates" in result.errors[0]
        assert path.read_bytes() == before

    def test_mixed_shapes(self, context, workbook_path):
        result = _push(context, [Crate(name="T1"), Rim(name="R1")])
        assert not result.success
        assert result.objects == []
        assert "single type" in result.errors[0]
        assert not workbook_path.exists()

    @pytest.mark.parametrize("objects", [None, [], [None]])
    def test_no_objects(self, context, objects):
        result = SyncManager.synchronize(context, objects)
        assert not result.success
        assert result.errors == ["No objects were provided for the push."]

    def test_unsupported_mode(self, context, workbook_path):
        result = _push(context, [Crate(name="T1")], "full_crud")
        assert not result.success
        assert "not supported" in result.errors[0]
        assert not workbook_path.exists()

    def test_invalid_starting_cell(self, context, workbook_path):
        result = _push(context, [Crate(name="T1")], starting_cell="1A")
        assert not result.success
        assert "not a valid cell address" in result.errors[0]
        assert not workbook_path.exists()

    @pytest.mark.parametrize("starting_cell", ["AAAA1", "XFE1", "A1048577"])
    def test_starting_cell_outside_grid_leaves_file_untouched(
        self, context, make_workbook, starting_cell
    ):
        path = make_workbook({"Crates": [["a"], ["1"]]})
        before = path.read_bytes()

        result = _push(
            context,
            [Crate(name="T1")],
            SyncMode.DELETE_THEN_CREATE,
            worksheet="Crates",
            starting_cell=starting_cell,
        )

        assert not result.success
        assert "not a valid cell address" in result.errors[0]
        assert path.read_bytes() == before

    def test_block_running_past_last_row_leaves_file_untouched(self, context, make_workbook):
        path = make_workbook({"Crates": [["a"], ["1"]]})
        before = path.read_bytes()

        # Header plus one data row starting on the last row
        result = _push(
            context, [Crate(name="T1")], worksheet="Crates", starting_cell="A1048576"
        )

        assert not result.success
        assert "do not fit in a worksheet" in result.errors[0]
        assert path.read_bytes() == before


class TestOptions:
    """Test config handling."""

    def test_default_config_is_noted(self, context, workbook_path, read_sheet):
        result = SyncManager.synchronize(context, [Crate(name="T1")])
        assert result.success
        assert result.worksheet == "Sheet1"
        assert result.records_processed == 1
        assert "PushConfig has not been provided, default config is used." in result.notes
        assert read_sheet(workbook_path, "Sheet1")[0] == ["name", "size", "stock"]

    def test_success_returns_pushed_objects(self, context):
        objects = [Crate(name="T1"), Crate(name="T2")]
        result = _push(context, objects)
        assert result.objects == objects
        assert result.records_processed == 2

    def test_starting_cell_and_properties(self, context, workbook_path):
        _push(
            context,
            [Crate(name="T1", stock=7)],
            worksheet="Crates",
            starting_cell="B3",
            object_properties=["stock", "name"],
        )
        ws = openpyxl.load_workbook(str(workbook_path))["Crates"]
        assert ws["B3"].value == "stock"
        assert ws["C3"].value == "name"
        assert ws["B4"].value == "7"
        assert ws["A1"].value is None

    def test_worksheet_name_is_cleaned(self, context, workbook_path):
        result = _push(context, [Crate(name="T1")], worksheet="Q1/Q2: stock")
        assert result.worksheet == "Q1_Q2_ stock"
        assert openpyxl.load_workbook(str(workbook_path)).sheetnames == ["Q1_Q2_ stock"]

    def test_table_rows_are_written_as_is(self, context, read_sheet, workbook_path):
        rows = [TableRow(content=["h1", "h2"]), TableRow(content=[1, None])]
        result = _push(context, rows, worksheet="Raw")
        assert result.success
        assert result.records_processed == 2
        assert read_sheet(workbook_path, "Raw") == [["h1", "h2"], [1, None]]

    def test_last_cell_of_the_grid_is_writable(self, context, workbook_path):
        result = _push(context, [TableRow(content=["x"])], starting_cell="XFD1048576")
        assert result.success
        assert openpyxl.load_workbook(str(workbook_path))["Sheet1"]["XFD1048576"].value == "x"

    def test_metadata_is_stamped(self, context, workbook_path):
        _push(
            context,
            [Crate(name="T1")],
            workbook_properties=WorkbookMetadata(author="Ops", title="Stock", status="Draft"),
        )
        props = openpyxl.load_workbook(str(workbook_path)).properties
        assert props.creator == "Ops"
        assert props.title == "Stock"
        assert props.contentStatus == "Draft"

    def test_backup_on_write(self, workbook_path):
        context = SyncContext(file_path=workbook_path, backup_on_write=True)
        _push(context, [Crate(name="T1")])
        assert not (workbook_path.parent / "backups").exists()

        _push(context, [Crate(name="T2")])
        backups = list((workbook_path.parent / "backups").glob("book_*.xlsx"))
        assert len(backups) == 1
