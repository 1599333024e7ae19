import openpyxl

from modules.report_exporter import write_xlsx, write_pdf

HEADERS = ["Nome", "Cidade"]
DATA = [["Ana", "Porto Alegre"], ["Bruno", "--"]]


def test_write_xlsx(tmp_path):
    path = tmp_path / "clientes.xlsx"
    write_xlsx(str(path), HEADERS, DATA, "Clientes")

    wb = openpyxl.load_workbook(path)
    ws = wb.active
    assert ws.title == "Clientes"
    rows = [[c.value for c in row] for row in ws.iter_rows()]
    assert rows == [HEADERS] + DATA
    assert ws["A1"].font.bold


def test_write_xlsx_truncates_long_sheet_title(tmp_path):
    path = tmp_path / "x.xlsx"
    write_xlsx(str(path), HEADERS, [], "Um título de aba muito maior que o permitido")
    assert len(openpyxl.load_workbook(path).active.title) == 31


def test_write_pdf(tmp_path):
    path = tmp_path / "clientes.pdf"
    write_pdf(str(path), HEADERS, DATA, "Clientes")
    content = path.read_bytes()
    assert content.startswith(b"%PDF")
