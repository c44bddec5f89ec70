import io
import re
import zipfile

from openpyxl import Workbook

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

SALES_ROWS = [["Month", "Sales"], ["Jan", 10], ["Feb", 20], ["Mar", "bad"]]


def workbook_bytes(sheets):
    """
    Build an .xlsx in memory.

    `sheets` maps sheet name -> list of rows; an empty list gives an
    empty worksheet.
    """
    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def set_inline_string(content, coordinate, text="", sheet="xl/worksheets/sheet1.xml"):
    """
    Rewrite one cell of an .xlsx as an inline string.

    openpyxl never writes an empty string cell (it saves it as a blank
    cell), so workbooks from other writers holding "" are rebuilt here.
    """
    source = zipfile.ZipFile(io.BytesIO(content))
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as target:
        for item in source.infolist():
            data = source.read(item.filename)
            if item.filename == sheet:
                xml = data.decode("utf-8")
                cell = f'<c r="{coordinate}" t="inlineStr"><is><t>{text}</t></is></c>'
                xml, count = re.subn(rf'<c r="{coordinate}"[^>]*?(/>|>.*?</c>)', cell, xml)
                assert count == 1, f"cell {coordinate} not found in {sheet}"
                data = xml.encode("utf-8")
            target.writestr(item, data)
    return buffer.getvalue()


def stored_files():
    """Every file currently under the upload directory"""
    from excel_analytics.storage.local_storage import storage
    return [path for path in storage.upload_dir.rglob("*") if path.is_file()]
