# -*- coding: utf-8 -*-
# modules/row_browser_state.py
"""
Estado do navegador genérico de registros (sem layout).

Guarda a seleção, o diálogo de adicionar/editar, os valores do formulário,
o menu por linha e o modo de exibição. Toda persistência é delegada aos
callbacks da tela (on_add, on_edit, on_delete, on_bulk_delete).
"""
import logging
from dataclasses import dataclass, field as dc_field
from datetime import date, datetime
from typing import Any, Callable, Optional

from PyQt5.QtCore import QObject, pyqtSignal

from config.access_control import (
    FULL, CAPABILITY_CHECKS, coerce_access_mode, get_contextual_access_mode,
    is_hidden, is_read_only, can_create, can_edit, can_delete, can_download,
    can_visualize_item,
)
from modules.search_context import SearchContext

logger = logging.getLogger(__name__)

VIEW_CARD = "card"
VIEW_TABLE = "table"

DATA_TYPES = ("text", "number", "date", "status")
INPUT_TYPES = ("text", "number", "email", "password", "date", "select", "multiselect")

EMPTY_CELL = "--"


# --- ESQUEMA (COLUNAS / CAMPOS / AÇÕES) ---

@dataclass
class Column:
    key: str
    label: str
    data_type: Optional[str] = None
    render: Optional[Callable[[Any, dict], Any]] = None


@dataclass
class FormField(Column):
    input_type: str = "text"
    options: Optional[list] = None
    default_value: Any = None
    required: bool = False
    helper_text: Optional[str] = None
    placeholder: Optional[str] = None
    disabled: bool = False
    render_input: Optional[Callable] = None

    @classmethod
    def from_column(cls, column):
        return cls(key=column.key, label=column.label,
                   data_type=column.data_type, render=column.render)


@dataclass
class RowAction:
    label: str
    on_click: Callable
    icon: Optional[str] = None
    # bool ou função(linha) -> bool
    disabled: Any = False
    # capacidade exigida do modo de acesso ('preview', 'download', ...)
    capability: Optional[str] = None


@dataclass
class BulkAction:
    label: str
    on_click: Callable
    icon: Optional[str] = None
    # bool ou função(lista de ids selecionados) -> bool
    disabled: Any = False
    capability: Optional[str] = None


def is_action_disabled(action, target):
    if callable(action.disabled):
        return bool(action.disabled(target))
    return bool(action.disabled)


# --- ESTADO DO DIÁLOGO ---

class DialogState:
    __slots__ = ()
    is_open = True


class Closed(DialogState):
    __slots__ = ()
    is_open = False

    def __repr__(self):
        return "Closed()"

    def __eq__(self, other):
        return isinstance(other, Closed)

    def __hash__(self):
        return hash("closed")


class Adding(DialogState):
    __slots__ = ()

    def __repr__(self):
        return "Adding()"

    def __eq__(self, other):
        return isinstance(other, Adding)

    def __hash__(self):
        return hash("adding")


@dataclass(frozen=True)
class Editing(DialogState):
    row: dict = dc_field(default_factory=dict)


CLOSED = Closed()
ADDING = Adding()


# --- ERROS ---

class FormValidationError(ValueError):
    """Campos obrigatórios vazios. Uma única mensagem agregada."""
    def __init__(self, labels):
        self.labels = list(labels)
        super().__init__("Preencha os campos obrigatórios: " + ", ".join(self.labels))


# --- FUNÇÕES PURAS ---

def is_empty_value(value):
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def coerce_to_list(value):
    """Valor de multiseleção sempre como lista (escalar vira [escalar])."""
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def empty_value_for(field):
    return [] if field.input_type == "multiselect" else ""


def seed_add_values(fields):
    values = {}
    for f in fields:
        if f.default_value is not None:
            value = f.default_value
        else:
            value = empty_value_for(f)
        if f.input_type == "multiselect":
            value = coerce_to_list(value)
        values[f.key] = value
    return values


def seed_edit_values(fields, row):
    # Cópia: inspecionar/editar nunca altera a linha original
    values = dict(row)
    for f in fields:
        value = row.get(f.key)
        if value is None:
            value = f.default_value if f.default_value is not None else empty_value_for(f)
        if f.input_type == "multiselect":
            value = coerce_to_list(value)
        elif isinstance(value, list):
            value = list(value)
        values[f.key] = value
    return values


def missing_required(fields, values):
    return [f.label for f in fields if f.required and is_empty_value(values.get(f.key))]


def validate_form_values(fields, values):
    missing = missing_required(fields, values)
    if missing:
        raise FormValidationError(missing)


def _matches(value, needle):
    if value is None:
        return False
    return needle in str(value).lower()


def filter_rows(rows, columns, query, selected_filter=None):
    """
    Com filtro selecionado, compara só o campo dele; sem filtro, basta uma
    coluna conter o texto. Comparação sem diferenciar maiúsculas.
    """
    if not query:
        return list(rows)
    needle = query.lower()
    if selected_filter is not None:
        return [r for r in rows if _matches(r.get(selected_filter.field), needle)]
    return [r for r in rows if any(_matches(r.get(c.key), needle) for c in columns)]


def format_date(value):
    if isinstance(value, datetime):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    try:
        return datetime.strptime(str(value)[:10], "%Y-%m-%d").strftime("%d/%m/%Y")
    except ValueError:
        return str(value)


def render_cell(row, column):
    """Texto exibido para a célula (tabela, cartão e exportação)."""
    value = row.get(column.key)
    if column.render is not None:
        rendered = column.render(value, row)
        return EMPTY_CELL if rendered is None else str(rendered)
    if value is None or value == "":
        return EMPTY_CELL
    if column.data_type == "date":
        return format_date(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


# --- CONTROLADOR ---

class RowBrowserState(QObject):
    rows_changed = pyqtSignal()
    selection_changed = pyqtSignal(object)
    dialog_changed = pyqtSignal(object)
    form_values_changed = pyqtSignal(object)
    view_mode_changed = pyqtSignal(str)
    menu_changed = pyqtSignal(object)
    access_mode_changed = pyqtSignal(object)
    # (mensagem, nível: 'info' | 'warning' | 'error')
    notification = pyqtSignal(str, str)

    def __init__(self, columns, rows=None, form_fields=None,
                 on_add=None, on_edit=None, on_delete=None, on_bulk_delete=None,
                 row_actions=None, bulk_actions=None,
                 disable_delete=False, disable_edit=False, disable_view=False,
                 access_mode=FULL, search=None, view_mode=VIEW_TABLE, parent=None):
        super().__init__(parent)
        self.columns = list(columns)
        self.form_fields = list(form_fields) if form_fields else None
        self.on_add = on_add
        self.on_edit = on_edit
        self.on_delete = on_delete
        self.on_bulk_delete = on_bulk_delete
        self.row_actions = list(row_actions or [])
        self.bulk_actions = list(bulk_actions or [])
        self.disable_delete = disable_delete
        self.disable_edit = disable_edit
        self.disable_view = disable_view

        self._rows = list(rows or [])
        self._access_mode = coerce_access_mode(access_mode)
        self._selected_ids = []
        self._dialog = CLOSED
        self._form_values = {}
        self._menu_row = None
        self._view_mode = view_mode

        self.search = search if search is not None else SearchContext(self)
        self.search.query_changed.connect(self._on_search_changed)
        self.search.selected_filter_changed.connect(self._on_search_changed)
        self.search.filters_changed.connect(self._on_filters_scope_changed)

    # --- Dados ---

    @property
    def rows(self):
        return list(self._rows)

    def set_rows(self, rows):
        self._rows = list(rows or [])
        self.rows_changed.emit()

    @property
    def fields(self):
        if self.form_fields:
            return self.form_fields
        return [FormField.from_column(c) for c in self.columns]

    def visible_rows(self):
        if is_hidden(self._access_mode):
            return []
        return filter_rows(self._rows, self.columns, self.search.query, self.search.selected_filter)

    def _on_search_changed(self, *_):
        self.rows_changed.emit()

    def _on_filters_scope_changed(self, *_):
        # Troca de tela: nada da tela anterior pode sobreviver
        self.reset()
        self.rows_changed.emit()

    def reset(self):
        self.close_row_menu()
        if self._dialog.is_open:
            self.close_dialog()
        self.clear_selection()

    # --- Modo de acesso ---

    @property
    def access_mode(self):
        return self._access_mode

    def set_access_mode(self, mode):
        self._access_mode = coerce_access_mode(mode)
        self.access_mode_changed.emit(self._access_mode)
        self.rows_changed.emit()

    @property
    def is_hidden(self):
        return is_hidden(self._access_mode)

    @property
    def can_add(self):
        return self.on_add is not None and can_create(self._access_mode)

    @property
    def can_open_row(self):
        if self.disable_view or self.is_hidden:
            return False
        return can_visualize_item(self._access_mode) or can_edit(self._access_mode)

    @property
    def can_delete_rows(self):
        return (self.on_delete is not None and not self.disable_delete
                and can_delete(self._access_mode))

    @property
    def can_bulk_delete(self):
        return (self.on_bulk_delete is not None and not self.disable_delete
                and can_delete(self._access_mode))

    @property
    def can_export(self):
        return not self.is_hidden and can_download(self._access_mode)

    def contextual_access_mode(self):
        return get_contextual_access_mode(self._access_mode, isinstance(self._dialog, Editing))

    @property
    def form_read_only(self):
        if isinstance(self._dialog, Editing):
            if self.disable_edit or self.on_edit is None:
                return True
        elif self._dialog == ADDING and self.on_add is None:
            return True
        return is_read_only(self.contextual_access_mode())

    def is_field_disabled(self, field):
        return self.form_read_only or bool(field.disabled)

    def is_action_enabled(self, action, target):
        if is_action_disabled(action, target):
            return False
        if action.capability:
            return CAPABILITY_CHECKS[action.capability](self._access_mode)
        return True

    # --- Modo de exibição ---

    @property
    def view_mode(self):
        return self._view_mode

    def set_view_mode(self, mode):
        if mode not in (VIEW_CARD, VIEW_TABLE):
            raise ValueError(f"Modo de exibição inválido: {mode}")
        if mode == self._view_mode:
            return
        self._view_mode = mode
        self.view_mode_changed.emit(mode)

    def toggle_view_mode(self):
        self.set_view_mode(VIEW_TABLE if self._view_mode == VIEW_CARD else VIEW_CARD)

    # --- Seleção ---

    @property
    def selected_ids(self):
        return list(self._selected_ids)

    def is_selected(self, row_id):
        return row_id in self._selected_ids

    def all_selected(self):
        visible = self.visible_rows()
        return bool(visible) and all(r["id"] in self._selected_ids for r in visible)

    def partially_selected(self):
        return bool(self._selected_ids) and not self.all_selected() and bool(self.visible_rows())

    def toggle_select_all(self):
        if self.all_selected():
            self._selected_ids = []
        else:
            # Só as linhas visíveis pelo filtro atual
            self._selected_ids = [r["id"] for r in self.visible_rows()]
        self.selection_changed.emit(self.selected_ids)

    def toggle_select_row(self, row_id):
        if row_id in self._selected_ids:
            self._selected_ids.remove(row_id)
        else:
            self._selected_ids.append(row_id)
        self.selection_changed.emit(self.selected_ids)

    def clear_selection(self):
        if not self._selected_ids:
            return
        self._selected_ids = []
        self.selection_changed.emit([])

    def _discard_selected(self, ids):
        ids = set(ids)
        before = len(self._selected_ids)
        self._selected_ids = [i for i in self._selected_ids if i not in ids]
        if len(self._selected_ids) != before:
            self.selection_changed.emit(self.selected_ids)

    # --- Diálogo ---

    @property
    def dialog(self):
        return self._dialog

    @property
    def form_values(self):
        return dict(self._form_values)

    def open_add(self):
        if self._dialog.is_open:
            logger.debug(f"open_add ignorado: diálogo já aberto ({self._dialog!r})")
            return False
        if not self.can_add:
            return False
        self._dialog = ADDING
        self._form_values = seed_add_values(self.fields)
        self.dialog_changed.emit(self._dialog)
        self.form_values_changed.emit(self.form_values)
        return True

    def open_edit(self, row):
        if self._dialog.is_open:
            logger.debug(f"open_edit ignorado: diálogo já aberto ({self._dialog!r})")
            return False
        if not self.can_open_row:
            return False
        self._dialog = Editing(row)
        self._form_values = seed_edit_values(self.fields, row)
        self.dialog_changed.emit(self._dialog)
        self.form_values_changed.emit(self.form_values)
        return True

    def close_dialog(self):
        self._dialog = CLOSED
        self._form_values = {}
        self.dialog_changed.emit(self._dialog)

    def set_field_value(self, key, value):
        if not self._dialog.is_open:
            return
        self._form_values[key] = value
        self.form_values_changed.emit(self.form_values)

    def submit(self):
        """
        Valida e envia o formulário. Retorna True se o callback concluiu;
        em caso de erro o diálogo continua aberto para correção.
        """
        dialog = self._dialog
        if not dialog.is_open:
            return False
        if self.form_read_only:
            self.notification.emit("Você não tem permissão para salvar este registro.", "warning")
            return False

        try:
            validate_form_values(self.fields, self._form_values)
        except FormValidationError as e:
            logger.info(f"Envio bloqueado, campos obrigatórios: {e.labels}")
            self.notification.emit(str(e), "warning")
            return False

        values = dict(self._form_values)
        try:
            if isinstance(dialog, Editing):
                self.on_edit(dialog.row["id"], values)
            else:
                self.on_add(values)
        except Exception as e:
            logger.error(f"Falha ao salvar registro: {e}", exc_info=True)
            self.notification.emit(f"Erro ao salvar: {e}", "error")
            return False

        self.close_dialog()
        self.clear_selection()
        return True

    # --- Menu por linha ---

    @property
    def menu_row(self):
        return self._menu_row

    def open_row_menu(self, row):
        self._menu_row = row
        self.menu_changed.emit(row)

    def close_row_menu(self):
        if self._menu_row is None:
            return
        self._menu_row = None
        self.menu_changed.emit(None)

    # --- Exclusão / ações ---

    def delete_row(self, row_id):
        if not self.can_delete_rows:
            return False
        self.close_row_menu()
        try:
            self.on_delete(row_id)
        except Exception as e:
            logger.error(f"Falha ao excluir registro {row_id}: {e}", exc_info=True)
            self.notification.emit(f"Erro ao excluir: {e}", "error")
            return False
        self._discard_selected([row_id])
        return True

    def bulk_delete(self):
        ids = self.selected_ids
        if not ids or not self.can_bulk_delete:
            return False
        try:
            self.on_bulk_delete(ids)
        except Exception as e:
            logger.error(f"Falha na exclusão em lote {ids}: {e}", exc_info=True)
            self.notification.emit(f"Erro ao excluir selecionados: {e}", "error")
            return False
        self._discard_selected(ids)
        return True

    def run_bulk_action(self, action):
        ids = self.selected_ids
        if not self.is_action_enabled(action, ids):
            return False
        try:
            action.on_click(ids)
        except Exception as e:
            logger.error(f"Falha na ação '{action.label}': {e}", exc_info=True)
            self.notification.emit(f"Erro em '{action.label}': {e}", "error")
            return False
        return True

    def run_row_action(self, action, row):
        self.close_row_menu()
        if not self.is_action_enabled(action, row):
            return False
        try:
            action.on_click(row)
        except Exception as e:
            logger.error(f"Falha na ação '{action.label}' (id={row.get('id')}): {e}", exc_info=True)
            self.notification.emit(f"Erro em '{action.label}': {e}", "error")
            return False
        return True
