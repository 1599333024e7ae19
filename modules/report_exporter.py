# modules/report_exporter.py
import logging
from datetime import datetime

import openpyxl
from openpyxl.styles import Font, Alignment, PatternFill
from openpyxl.utils import get_column_letter
from PyQt5.QtWidgets import QFileDialog, QMessageBox
from reportlab.lib.pagesizes import A4, landscape
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.units import inch
from reportlab.lib import colors

logger = logging.getLogger(__name__)

HEADER_COLOR = "0078D7"


def _default_file_name(title, extension):
    slug = "_".join(str(title).split()) or "Registros"
    return f"{slug}_{datetime.now():%Y%m%d}.{extension}"


# --- 1. ESCRITA DOS ARQUIVOS (sem interface) ---

def write_xlsx(path, headers, data, sheet_title="Registros"):
    wb = openpyxl.Workbook()
    ws = wb.active
    # Excel limita o nome da aba a 31 caracteres
    ws.title = str(sheet_title)[:31] or "Registros"

    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color=HEADER_COLOR, end_color=HEADER_COLOR, fill_type="solid")
    header_align = Alignment(horizontal="center", vertical="center")

    ws.append(list(headers))
    for cell in ws[1]:
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_align

    for row in data:
        ws.append(list(row))

    for i, column_cells in enumerate(ws.columns):
        length = max(len(str(cell.value or "")) for cell in column_cells) + 5
        ws.column_dimensions[get_column_letter(i + 1)].width = length

    wb.save(path)
    logger.info(f"XLSX gerado: {path} ({len(data)} linha(s))")
    return path


def write_pdf(path, headers, data, title="Registros"):
    """PDF A4 em paisagem, cabeçalho repetido a cada página."""
    doc = SimpleDocTemplate(path, pagesize=landscape(A4),
                            rightMargin=inch / 2, leftMargin=inch / 2,
                            topMargin=inch / 2, bottomMargin=inch / 2)

    styles = getSampleStyleSheet()
    style_title = styles['h1']
    style_title.alignment = TA_CENTER
    style_normal = styles['Normal']
    style_normal.alignment = TA_CENTER

    story = [
        Paragraph(title, style_title),
        Paragraph(f"Gerado em: {datetime.now().strftime('%d/%m/%Y %H:%M:%S')}", style_normal),
        Spacer(1, 0.3 * inch),
    ]

    table_data = [list(headers)] + [[str(v) for v in row] for row in data]
    t = Table(table_data, repeatRows=1)
    t.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor(f"#{HEADER_COLOR}")),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 11),
        ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 1), (-1, -1), 9),
        ('GRID', (0, 0), (-1, -1), 0.25, colors.black),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
    ]))
    story.append(t)

    doc.build(story)
    logger.info(f"PDF gerado: {path} ({len(data)} linha(s))")
    return path


# --- 2. EXPORTAÇÃO COM DIÁLOGO ---

def export_to_xlsx(headers, data, parent_widget, title="Registros"):
    """
    Pergunta onde salvar e exporta para Excel (.xlsx).
    """
    save_path, _ = QFileDialog.getSaveFileName(
        parent_widget,
        "Salvar Relatório Excel",
        _default_file_name(title, "xlsx"),
        "Excel Files (*.xlsx)"
    )
    if not save_path:
        return None  # Usuário cancelou

    try:
        write_xlsx(save_path, headers, data, title)
    except Exception as e:
        logger.error(f"Falha ao gerar Excel: {e}", exc_info=True)
        QMessageBox.critical(parent_widget, "Erro ao Exportar XLSX", f"Falha ao gerar Excel: {e}")
        return None

    QMessageBox.information(parent_widget, "Sucesso", f"Relatório salvo com sucesso em:\n{save_path}")
    return save_path


def export_to_pdf(headers, data, title, parent_widget):
    save_path, _ = QFileDialog.getSaveFileName(
        parent_widget,
        "Salvar Relatório PDF",
        _default_file_name(title, "pdf"),
        "PDF Files (*.pdf)"
    )
    if not save_path:
        return None

    try:
        write_pdf(save_path, headers, data, title)
    except Exception as e:
        logger.error(f"Falha ao gerar PDF: {e}", exc_info=True)
        QMessageBox.critical(parent_widget, "Erro ao Exportar PDF", f"Falha ao gerar PDF: {e}")
        return None

    QMessageBox.information(parent_widget, "Sucesso", f"Relatório salvo com sucesso em:\n{save_path}")
    return save_path
