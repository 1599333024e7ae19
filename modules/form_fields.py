# -*- coding: utf-8 -*-
# modules/form_fields.py
"""
Monta o controle de edição de cada campo do formulário genérico.

A decisão entre controle padrão e controle customizado (render_input) é
tomada uma única vez por campo em ``resolve_input``.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable

from PyQt5.QtWidgets import (
    QLineEdit, QComboBox, QListWidget, QListWidgetItem, QDateEdit, QAbstractItemView
)
from PyQt5.QtGui import QDoubleValidator
from PyQt5.QtCore import Qt, QDate

from modules.row_browser_state import INPUT_TYPES, coerce_to_list

logger = logging.getLogger(__name__)

MULTISELECT_DELIMITER = ","
DATE_ISO_FORMAT = "yyyy-MM-dd"
# Data sentinela que o QDateEdit mostra como vazio
EMPTY_DATE = QDate(1900, 1, 1)


# --- VARIANTES DE ENTRADA ---

@dataclass(frozen=True)
class DefaultInput:
    input_type: str


@dataclass(frozen=True)
class CustomInput:
    render: Callable


@dataclass
class FieldInputContext:
    """O que um render_input recebe."""
    value: Any
    on_change: Callable
    field: Any
    form_values: dict
    set_field_value: Callable
    disabled: bool


def resolve_input(field):
    if field.render_input is not None:
        return CustomInput(field.render_input)
    input_type = field.input_type or "text"
    if input_type not in INPUT_TYPES:
        raise ValueError(f"Tipo de entrada desconhecido para '{field.key}': {input_type}")
    return DefaultInput(input_type)


# --- NORMALIZAÇÃO DE VALORES ---

def normalize_options(options):
    """Aceita [(valor, rótulo)], [{'value', 'label'}] ou [valor]."""
    normalized = []
    for opt in options or []:
        if isinstance(opt, dict):
            normalized.append((opt.get("value"), str(opt.get("label", opt.get("value")))))
        elif isinstance(opt, (tuple, list)) and len(opt) == 2:
            normalized.append((opt[0], str(opt[1])))
        else:
            normalized.append((opt, str(opt)))
    return normalized


def normalize_multiselect_payload(payload, delimiter=MULTISELECT_DELIMITER):
    """'a, b,c' -> ['a', 'b', 'c']; listas passam como lista."""
    if isinstance(payload, str):
        return [part.strip() for part in payload.split(delimiter) if part.strip()]
    return coerce_to_list(payload)


def parse_number(text):
    text = (text or "").strip().replace(",", ".")
    if not text:
        return ""
    try:
        number = float(text)
    except ValueError:
        return text
    if number.is_integer() and "." not in text:
        return int(number)
    return number


def _date_from_value(value):
    if not value:
        return EMPTY_DATE
    qdate = QDate.fromString(str(value)[:10], DATE_ISO_FORMAT)
    return qdate if qdate.isValid() else EMPTY_DATE


# --- CONSTRUTORES DOS CONTROLES PADRÃO ---

def _build_select(field, value, on_change, parent):
    combo = QComboBox(parent)
    if not field.required:
        combo.addItem(field.placeholder or "Selecione...", "")
    for opt_value, label in normalize_options(field.options):
        combo.addItem(label, opt_value)
    index = combo.findData(value)
    combo.setCurrentIndex(index if index >= 0 else 0)
    if field.required and index < 0 and combo.count():
        # Sem opção vazia, o valor exibido precisa existir no formulário
        on_change(combo.itemData(combo.currentIndex()))
    combo.currentIndexChanged.connect(lambda i: on_change(combo.itemData(i)))
    return combo


def _build_multiselect(field, value, on_change, parent):
    list_widget = QListWidget(parent)
    list_widget.setSelectionMode(QAbstractItemView.NoSelection)
    checked = set(str(v) for v in normalize_multiselect_payload(value))
    for opt_value, label in normalize_options(field.options):
        item = QListWidgetItem(label, list_widget)
        item.setData(Qt.UserRole, opt_value)
        item.setFlags(item.flags() | Qt.ItemIsUserCheckable)
        item.setCheckState(Qt.Checked if str(opt_value) in checked else Qt.Unchecked)
    list_widget.setMaximumHeight(160)

    def _emit(_item=None):
        values = []
        for row in range(list_widget.count()):
            item = list_widget.item(row)
            if item.checkState() == Qt.Checked:
                values.append(item.data(Qt.UserRole))
        on_change(normalize_multiselect_payload(values))

    list_widget.itemChanged.connect(_emit)
    return list_widget


def _build_date(field, value, on_change, parent):
    date_edit = QDateEdit(parent)
    date_edit.setCalendarPopup(True)
    date_edit.setDisplayFormat("dd/MM/yyyy")
    date_edit.setMinimumDate(EMPTY_DATE)
    date_edit.setSpecialValueText(" ")
    date_edit.setDate(_date_from_value(value))

    def _emit(qdate):
        on_change("" if qdate == EMPTY_DATE else qdate.toString(DATE_ISO_FORMAT))

    date_edit.dateChanged.connect(_emit)
    return date_edit


def _build_line_edit(field, value, on_change, parent):
    line_edit = QLineEdit(parent)
    line_edit.setText("" if value is None else str(value))
    if field.placeholder:
        line_edit.setPlaceholderText(field.placeholder)

    input_type = field.input_type or "text"
    if input_type == "password":
        line_edit.setEchoMode(QLineEdit.Password)
        line_edit.textChanged.connect(on_change)
    elif input_type == "number":
        validator = QDoubleValidator(line_edit)
        validator.setNotation(QDoubleValidator.StandardNotation)
        line_edit.setValidator(validator)
        line_edit.textChanged.connect(lambda text: on_change(parse_number(text)))
    elif input_type == "email":
        line_edit.setInputMethodHints(Qt.ImhEmailCharactersOnly)
        line_edit.textChanged.connect(lambda text: on_change(text.strip()))
    else:
        line_edit.textChanged.connect(on_change)
    return line_edit


_BUILDERS = {
    "select": _build_select,
    "multiselect": _build_multiselect,
    "date": _build_date,
    "text": _build_line_edit,
    "number": _build_line_edit,
    "email": _build_line_edit,
    "password": _build_line_edit,
}


def _line_edit_holds(field, text, value):
    if field.input_type == "number":
        return parse_number(text) == value
    if field.input_type == "email":
        return text.strip() == ("" if value is None else str(value))
    return text == ("" if value is None else str(value))


def update_field_widget(field, widget, value):
    """
    Reflete no controle padrão um valor alterado por fora (ex: busca de CEP
    preenchendo outros campos). Controles customizados não são tocados.
    """
    if isinstance(resolve_input(field), CustomInput):
        return
    widget.blockSignals(True)
    try:
        if isinstance(widget, QLineEdit):
            if not _line_edit_holds(field, widget.text(), value):
                widget.setText("" if value is None else str(value))
        elif isinstance(widget, QComboBox):
            index = widget.findData(value)
            if index >= 0 and index != widget.currentIndex():
                widget.setCurrentIndex(index)
        elif isinstance(widget, QDateEdit):
            qdate = _date_from_value(value)
            if qdate != widget.date():
                widget.setDate(qdate)
        elif isinstance(widget, QListWidget):
            checked = set(str(v) for v in normalize_multiselect_payload(value))
            for row in range(widget.count()):
                item = widget.item(row)
                state = Qt.Checked if str(item.data(Qt.UserRole)) in checked else Qt.Unchecked
                if item.checkState() != state:
                    item.setCheckState(state)
    finally:
        widget.blockSignals(False)


def render_field(field, value, form_values, set_field_value, disabled=False, parent=None):
    """
    Cria o widget do campo. Toda alteração volta por
    ``set_field_value(field.key, valor)``.
    """
    kind = resolve_input(field)

    if field.input_type == "multiselect":
        def on_change(payload):
            set_field_value(field.key, normalize_multiselect_payload(payload))
    else:
        def on_change(payload):
            set_field_value(field.key, payload)

    if isinstance(kind, CustomInput):
        context = FieldInputContext(
            value=value,
            on_change=on_change,
            field=field,
            form_values=dict(form_values),
            set_field_value=set_field_value,
            disabled=disabled,
        )
        widget = kind.render(context)
    else:
        widget = _BUILDERS[kind.input_type](field, value, on_change, parent)
        widget.setEnabled(not disabled)

    if field.helper_text:
        widget.setToolTip(field.helper_text)
    widget.setObjectName(f"field_{field.key}")
    return widget
