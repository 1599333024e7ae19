# -*- coding: utf-8 -*-
# modules/row_browser.py
import logging
from PyQt5.QtWidgets import (
    QWidget, QLabel, QLineEdit, QPushButton, QVBoxLayout, QHBoxLayout,
    QFrame, QTableWidget, QTableWidgetItem, QHeaderView, QAbstractItemView,
    QStackedWidget, QScrollArea, QCheckBox, QMenu, QToolButton, QApplication,
    QGridLayout
)
from PyQt5.QtGui import QColor
from PyQt5.QtCore import Qt, pyqtSignal

from config.access_control import FULL
from modules.row_browser_state import (
    RowBrowserState, VIEW_CARD, VIEW_TABLE, render_cell,
)
from modules.confirm_button import ConfirmDeleteButton, DEFAULT_CONFIRM_TIMEOUT_MS
from modules.custom_dialogs import RecordFormDialog, Toast
from modules.report_exporter import export_to_xlsx, export_to_pdf

logger = logging.getLogger(__name__)

DEFAULT_CARD_BREAKPOINT = 900

STATUS_COLORS = {
    "ativo": "#27AE60",
    "inativo": "#c0392b",
    "pendente": "#F39C12",
    "bloqueado": "#7F8C8D",
}


def default_view_mode(breakpoint=DEFAULT_CARD_BREAKPOINT):
    """Cartões em telas estreitas, tabela nas demais."""
    app = QApplication.instance()
    screen = app.primaryScreen() if app else None
    if screen is None:
        return VIEW_TABLE
    width = screen.availableGeometry().width()
    return VIEW_CARD if width < breakpoint else VIEW_TABLE


class RowCard(QFrame):
    """ Cartão de um registro (modo lista compacta). """
    open_requested = pyqtSignal(object)

    def __init__(self, row, parent=None):
        super().__init__(parent)
        self.row = row
        self.setObjectName("row_card")
        self.setCursor(Qt.PointingHandCursor)

    def mouseDoubleClickEvent(self, event):
        if event.button() == Qt.LeftButton:
            self.open_requested.emit(self.row)
        super().mouseDoubleClickEvent(event)


class RowBrowser(QWidget):
    """
    Lista/tabela genérica de registros com formulário de adicionar/editar.

    A tela fornece linhas, colunas, campos e callbacks; o RowBrowser decide o
    que exibir/habilitar a partir do modo de acesso.
    """
    def __init__(self, rows, columns, form_fields=None,
                 on_add=None, on_edit=None, on_delete=None, on_bulk_delete=None,
                 row_actions=None, bulk_actions=None,
                 disable_delete=False, disable_edit=False, disable_view=False,
                 access_mode=FULL, search=None, title=None, view_mode=None,
                 card_breakpoint=DEFAULT_CARD_BREAKPOINT,
                 confirm_timeout_ms=DEFAULT_CONFIRM_TIMEOUT_MS,
                 toast_timeout_ms=4000, parent=None):
        super().__init__(parent)
        self.title = title or ""
        self.confirm_timeout_ms = confirm_timeout_ms
        # Busca própria só quando a janela não fornece uma
        self._owns_search = search is None

        self.state = RowBrowserState(
            columns, rows=rows, form_fields=form_fields,
            on_add=on_add, on_edit=on_edit, on_delete=on_delete, on_bulk_delete=on_bulk_delete,
            row_actions=row_actions, bulk_actions=bulk_actions,
            disable_delete=disable_delete, disable_edit=disable_edit, disable_view=disable_view,
            access_mode=access_mode, search=search,
            view_mode=view_mode or default_view_mode(card_breakpoint),
            parent=self,
        )

        self.record_dialog = None
        self.row_delete_buttons = {}
        self.card_widgets = {}
        self._table_row_ids = []
        self._syncing = False

        self._setup_styles()
        self._build_ui()
        self.toast = Toast(self, toast_timeout_ms)
        self._connect_signals()
        self.refresh()

    # --- Atalhos para a tela ---

    def set_rows(self, rows):
        self.state.set_rows(rows)

    def set_access_mode(self, mode):
        self.state.set_access_mode(mode)

    def _setup_styles(self):
        self.setStyleSheet("""
            QTableWidget {
                border: 1px solid #c0c0d0;
                selection-background-color: #0078d7;
                font-size: 14px;
            }
            QHeaderView::section {
                background-color: #e8e8e8; padding: 8px;
                border: 1px solid #c0c0d0;
                font-weight: bold; font-size: 14px;
            }
            QFrame#row_card {
                background-color: #fdfdfd;
                border: 1px solid #c0c0d0;
                border-radius: 8px;
            }
            QLabel#card_caption { font-size: 11px; color: #777; font-weight: normal; }
            QLabel#card_value { font-size: 13px; color: #333; font-weight: bold; }
            QLabel#browser_title { font-size: 16px; font-weight: bold; color: #005fa3; }
            QFrame#bulk_bar {
                background-color: #e0e8f0; border: 1px solid #c0c0d0; border-radius: 6px;
            }
            QLineEdit {
                border: 1px solid #c0c0d0; border-radius: 5px;
                padding: 6px; background-color: white;
            }
            QPushButton {
                background-color: #0078d7; color: white; border-radius: 6px;
                padding: 8px 15px; font-weight: bold;
            }
            QPushButton:hover { background-color: #005fa3; }
            QPushButton:disabled { background-color: #bdc3c7; }
            QPushButton#deleteButton { background-color: #e74c3c; }
            QPushButton#deleteButton:hover { background-color: #c0392b; }
            QPushButton#secondaryButton { background-color: #95A5A6; }
            QPushButton#secondaryButton:hover { background-color: #7F8C8D; }
        """)

    def _build_ui(self):
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)

        # --- 1. BARRA DE FERRAMENTAS ---
        toolbar = QHBoxLayout()
        self.title_label = QLabel(self.title, objectName="browser_title")
        toolbar.addWidget(self.title_label)
        toolbar.addStretch()

        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Pesquisar")
        self.search_input.setVisible(self._owns_search)
        toolbar.addWidget(self.search_input, 1)

        self.view_toggle_btn = QPushButton()
        self.view_toggle_btn.setObjectName("secondaryButton")
        toolbar.addWidget(self.view_toggle_btn)

        self.export_btn = QPushButton("Exportar")
        self.export_btn.setObjectName("secondaryButton")
        export_menu = QMenu(self.export_btn)
        export_menu.addAction("Excel (.xlsx)", self.export_xlsx)
        export_menu.addAction("PDF (.pdf)", self.export_pdf)
        self.export_btn.setMenu(export_menu)
        toolbar.addWidget(self.export_btn)

        self.add_btn = QPushButton("Adicionar")
        toolbar.addWidget(self.add_btn)
        main_layout.addLayout(toolbar)

        # --- 2. SELEÇÃO / AÇÕES EM LOTE ---
        selection_row = QHBoxLayout()
        self.select_all_check = QCheckBox("Selecionar todos")
        self.select_all_check.setTristate(True)
        selection_row.addWidget(self.select_all_check)
        selection_row.addStretch()
        main_layout.addLayout(selection_row)

        self.bulk_bar = QFrame()
        self.bulk_bar.setObjectName("bulk_bar")
        bulk_layout = QHBoxLayout(self.bulk_bar)
        self.bulk_label = QLabel()
        bulk_layout.addWidget(self.bulk_label)
        bulk_layout.addStretch()
        self.bulk_action_buttons = []
        for action in self.state.bulk_actions:
            btn = QPushButton(action.label)
            btn.clicked.connect(lambda _=False, a=action: self.state.run_bulk_action(a))
            bulk_layout.addWidget(btn)
            self.bulk_action_buttons.append((action, btn))
        self.bulk_delete_btn = QPushButton("Excluir selecionados")
        self.bulk_delete_btn.setObjectName("deleteButton")
        bulk_layout.addWidget(self.bulk_delete_btn)
        main_layout.addWidget(self.bulk_bar)

        # --- 3. STACKED WIDGET (Tabela / Cartões) ---
        self.stack = QStackedWidget()

        # Tela 0: Tabela
        self.table = QTableWidget()
        self.table.setColumnCount(len(self.state.columns) + 2)
        self.table.setHorizontalHeaderLabels([""] + [c.label for c in self.state.columns] + ["Ações"])
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.table.horizontalHeader().setSectionResizeMode(0, QHeaderView.ResizeToContents)
        self.table.horizontalHeader().setSectionResizeMode(
            len(self.state.columns) + 1, QHeaderView.ResizeToContents)
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.verticalHeader().setVisible(False)
        self.stack.addWidget(self.table)

        # Tela 1: Cartões
        self.cards_scroll = QScrollArea()
        self.cards_scroll.setWidgetResizable(True)
        self.cards_container = QWidget()
        self.cards_layout = QVBoxLayout(self.cards_container)
        self.cards_layout.setSpacing(8)
        self.cards_layout.addStretch()
        self.cards_scroll.setWidget(self.cards_container)
        self.stack.addWidget(self.cards_scroll)

        main_layout.addWidget(self.stack, 1)

        self.empty_label = QLabel("Nenhum registro encontrado.")
        self.empty_label.setAlignment(Qt.AlignCenter)
        self.empty_label.setStyleSheet("color: #777;")
        main_layout.addWidget(self.empty_label)

        self.hidden_label = QLabel("Você não tem permissão para acessar estes registros.")
        self.hidden_label.setAlignment(Qt.AlignCenter)
        self.hidden_label.setStyleSheet("color: #c0392b; font-weight: bold;")
        main_layout.addWidget(self.hidden_label)

    def _connect_signals(self):
        state = self.state
        state.rows_changed.connect(self.refresh)
        state.access_mode_changed.connect(lambda _mode: self.refresh())
        state.selection_changed.connect(lambda _ids: self._sync_selection())
        state.view_mode_changed.connect(lambda _mode: self._apply_view_mode())
        state.dialog_changed.connect(self._on_dialog_changed)
        state.notification.connect(self.toast.show_message)
        state.search.placeholder_changed.connect(self._on_placeholder_changed)

        if self._owns_search:
            self.search_input.textChanged.connect(state.search.set_query)

        self.add_btn.clicked.connect(state.open_add)
        self.view_toggle_btn.clicked.connect(state.toggle_view_mode)
        self.select_all_check.clicked.connect(lambda _=False: state.toggle_select_all())
        self.bulk_delete_btn.clicked.connect(state.bulk_delete)
        self.table.itemChanged.connect(self._on_table_item_changed)
        self.table.cellDoubleClicked.connect(self._on_table_double_clicked)

    def _on_placeholder_changed(self, text):
        if self._owns_search:
            self.search_input.setPlaceholderText(text or "Pesquisar")

    # --- RENDERIZAÇÃO ---

    def refresh(self):
        state = self.state
        hidden = state.is_hidden
        rows = state.visible_rows()

        self.hidden_label.setVisible(hidden)
        self.stack.setVisible(not hidden)
        self.select_all_check.setVisible(not hidden)
        self.empty_label.setVisible(not hidden and not rows)
        self.search_input.setEnabled(not hidden)

        self.add_btn.setVisible(state.on_add is not None and not hidden)
        self.add_btn.setEnabled(state.can_add and not state.dialog.is_open)
        self.export_btn.setVisible(state.can_export)

        self._fill_table(rows)
        self._fill_cards(rows)
        self._apply_view_mode()
        self._sync_selection()

    def _apply_view_mode(self):
        if self.state.view_mode == VIEW_TABLE:
            self.stack.setCurrentIndex(0)
            self.view_toggle_btn.setText("Ver como cartões")
        else:
            self.stack.setCurrentIndex(1)
            self.view_toggle_btn.setText("Ver como tabela")

    def _status_color(self, text):
        return STATUS_COLORS.get(str(text).strip().lower())

    def _fill_table(self, rows):
        state = self.state
        self._syncing = True
        try:
            self.table.setRowCount(0)
            self._table_row_ids = []
            self.row_delete_buttons = {}
            for row in rows:
                idx = self.table.rowCount()
                self.table.insertRow(idx)
                self._table_row_ids.append(row["id"])

                check_item = QTableWidgetItem()
                check_item.setFlags(Qt.ItemIsUserCheckable | Qt.ItemIsEnabled)
                check_item.setCheckState(Qt.Checked if state.is_selected(row["id"]) else Qt.Unchecked)
                self.table.setItem(idx, 0, check_item)

                for col_idx, column in enumerate(state.columns, start=1):
                    text = render_cell(row, column)
                    item = QTableWidgetItem(text)
                    if column.data_type == "number":
                        item.setTextAlignment(Qt.AlignRight | Qt.AlignVCenter)
                    if column.data_type == "status":
                        color = self._status_color(text)
                        if color:
                            item.setForeground(QColor(color))
                    self.table.setItem(idx, col_idx, item)

                self.table.setCellWidget(idx, len(state.columns) + 1, self._build_row_actions(row))
        finally:
            self._syncing = False

    def _fill_cards(self, rows):
        state = self.state
        # Remove os cartões anteriores (mantém o stretch final)
        while self.cards_layout.count() > 1:
            item = self.cards_layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()
        self.card_widgets = {}

        for row in rows:
            card = RowCard(row)
            card.open_requested.connect(state.open_edit)
            card_layout = QVBoxLayout(card)

            header = QHBoxLayout()
            check = QCheckBox()
            check.setChecked(state.is_selected(row["id"]))
            check.clicked.connect(lambda _=False, rid=row["id"]: state.toggle_select_row(rid))
            header.addWidget(check)
            header.addStretch()
            header.addWidget(self._build_row_actions(row, register=False))
            card_layout.addLayout(header)

            grid = QGridLayout()
            for i, column in enumerate(state.columns):
                caption = QLabel(column.label, objectName="card_caption")
                value = QLabel(render_cell(row, column), objectName="card_value")
                value.setWordWrap(True)
                grid.addWidget(caption, i, 0)
                grid.addWidget(value, i, 1)
            grid.setColumnStretch(1, 1)
            card_layout.addLayout(grid)

            self.cards_layout.insertWidget(self.cards_layout.count() - 1, card)
            self.card_widgets[row["id"]] = (card, check)

    def _build_row_actions(self, row, register=True):
        state = self.state
        container = QWidget()
        layout = QHBoxLayout(container)
        layout.setContentsMargins(2, 2, 2, 2)

        if state.on_delete is not None and not state.disable_delete:
            delete_btn = ConfirmDeleteButton(container, timeout_ms=self.confirm_timeout_ms)
            delete_btn.setEnabled(state.can_delete_rows)
            delete_btn.confirmed.connect(lambda rid=row["id"]: state.delete_row(rid))
            layout.addWidget(delete_btn)
            if register:
                self.row_delete_buttons[row["id"]] = delete_btn

        if state.row_actions:
            menu_btn = QToolButton(container)
            menu_btn.setText("⋮")
            menu_btn.setToolTip("Mais ações")
            menu_btn.clicked.connect(lambda _=False, r=row, b=menu_btn: self._show_row_menu(r, b))
            layout.addWidget(menu_btn)

        return container

    def build_row_menu(self, row):
        """Menu de ações da linha; as condições são avaliadas na abertura."""
        menu = QMenu(self)
        for action in self.state.row_actions:
            qaction = menu.addAction(action.label)
            qaction.setEnabled(self.state.is_action_enabled(action, row))
            qaction.triggered.connect(lambda _=False, a=action, r=row: self.state.run_row_action(a, r))
        menu.aboutToHide.connect(self.state.close_row_menu)
        return menu

    def _show_row_menu(self, row, anchor):
        self.state.open_row_menu(row)
        menu = self.build_row_menu(row)
        menu.exec_(anchor.mapToGlobal(anchor.rect().bottomLeft()))

    def _sync_selection(self):
        state = self.state
        selected = state.selected_ids

        self._syncing = True
        try:
            for idx, row_id in enumerate(self._table_row_ids):
                item = self.table.item(idx, 0)
                if item is not None:
                    item.setCheckState(Qt.Checked if row_id in selected else Qt.Unchecked)
            for row_id, (_card, check) in self.card_widgets.items():
                check.setChecked(row_id in selected)

            if state.all_selected():
                self.select_all_check.setCheckState(Qt.Checked)
            elif state.partially_selected():
                self.select_all_check.setCheckState(Qt.PartiallyChecked)
            else:
                self.select_all_check.setCheckState(Qt.Unchecked)
        finally:
            self._syncing = False

        self.bulk_bar.setVisible(bool(selected))
        self.bulk_label.setText(f"{len(selected)} registro(s) selecionado(s)")
        self.bulk_delete_btn.setVisible(state.on_bulk_delete is not None and not state.disable_delete)
        self.bulk_delete_btn.setEnabled(state.can_bulk_delete)
        for action, btn in self.bulk_action_buttons:
            btn.setEnabled(state.is_action_enabled(action, selected))

    def _on_table_item_changed(self, item):
        if self._syncing or item.column() != 0:
            return
        row_id = self._table_row_ids[item.row()]
        checked = item.checkState() == Qt.Checked
        if checked != self.state.is_selected(row_id):
            self.state.toggle_select_row(row_id)

    def _on_table_double_clicked(self, row_idx, column):
        if column == 0 or column > len(self.state.columns):
            return
        row_id = self._table_row_ids[row_idx]
        for row in self.state.visible_rows():
            if row["id"] == row_id:
                self.state.open_edit(row)
                return

    # --- DIÁLOGO ---

    def _on_dialog_changed(self, dialog):
        self.add_btn.setEnabled(self.state.can_add and not dialog.is_open)
        if dialog.is_open:
            self.record_dialog = RecordFormDialog(self.state, self)
            self.record_dialog.open()
            return
        if self.record_dialog is not None:
            dlg, self.record_dialog = self.record_dialog, None
            dlg.hide()
            dlg.deleteLater()

    # --- EXPORTAÇÃO ---

    def export_table(self):
        """(cabeçalhos, linhas) das linhas visíveis como exibidas."""
        headers = [c.label for c in self.state.columns]
        data = [[render_cell(row, c) for c in self.state.columns] for row in self.state.visible_rows()]
        return headers, data

    def export_xlsx(self):
        if not self.state.can_export:
            return
        headers, data = self.export_table()
        export_to_xlsx(headers, data, self, self.title or "Registros")

    def export_pdf(self):
        if not self.state.can_export:
            return
        headers, data = self.export_table()
        export_to_pdf(headers, data, self.title or "Registros", self)
