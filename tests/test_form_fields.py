import pytest
from PyQt5.QtCore import Qt, QDate
from PyQt5.QtWidgets import QLineEdit, QComboBox, QListWidget, QDateEdit, QLabel

from modules.form_fields import (
    DefaultInput, CustomInput, resolve_input, render_field, update_field_widget,
    normalize_multiselect_payload, normalize_options, parse_number, EMPTY_DATE,
)
from modules.row_browser_state import FormField


class FormSpy:
    def __init__(self):
        self.values = {}
        self.calls = []

    def __call__(self, key, value):
        self.calls.append((key, value))
        self.values[key] = value


def test_resolve_input_variants():
    assert resolve_input(FormField("a", "A")) == DefaultInput("text")
    assert resolve_input(FormField("a", "A", input_type="multiselect")) == DefaultInput("multiselect")
    render = lambda ctx: QLabel("x")
    assert resolve_input(FormField("a", "A", input_type="select", render_input=render)) == CustomInput(render)


def test_resolve_input_unknown_type():
    with pytest.raises(ValueError):
        resolve_input(FormField("a", "A", input_type="cor"))


def test_normalize_multiselect_payload():
    assert normalize_multiselect_payload("a, b,,c") == ["a", "b", "c"]
    assert normalize_multiselect_payload(["x"]) == ["x"]
    assert normalize_multiselect_payload("") == []
    assert normalize_multiselect_payload(None) == []


def test_normalize_options_shapes():
    assert normalize_options([("a", "A"), {"value": 2, "label": "Dois"}, "c"]) == [
        ("a", "A"), (2, "Dois"), ("c", "c")]


def test_parse_number():
    assert parse_number("12") == 12
    assert parse_number("1,5") == 1.5
    assert parse_number("") == ""


def test_text_input_reports_changes():
    spy = FormSpy()
    widget = render_field(FormField("nome", "Nome"), "Ana", {}, spy)
    assert isinstance(widget, QLineEdit)
    assert widget.text() == "Ana"
    widget.setText("Ana Maria")
    assert spy.values["nome"] == "Ana Maria"
    assert widget.objectName() == "field_nome"


def test_password_and_email_subtypes():
    spy = FormSpy()
    password = render_field(FormField("senha", "Senha", input_type="password"), "", {}, spy)
    assert password.echoMode() == QLineEdit.Password
    email = render_field(FormField("email", "E-mail", input_type="email"), "", {}, spy)
    email.setText(" ana@exemplo.com ")
    assert spy.values["email"] == "ana@exemplo.com"


def test_number_input_parses():
    spy = FormSpy()
    widget = render_field(FormField("dias", "Dias", input_type="number"), 30, {}, spy)
    assert widget.text() == "30"
    widget.setText("45")
    assert spy.values["dias"] == 45


def test_select_uses_options_and_reports_value():
    spy = FormSpy()
    field = FormField("status", "Status", input_type="select",
                      options=[("ativo", "Ativo"), ("inativo", "Inativo")])
    widget = render_field(field, "inativo", {}, spy)
    assert isinstance(widget, QComboBox)
    assert widget.currentText() == "Inativo"
    widget.setCurrentIndex(widget.findData("ativo"))
    assert spy.values["status"] == "ativo"


def test_required_select_without_value_commits_first_option():
    spy = FormSpy()
    field = FormField("status", "Status", input_type="select", required=True, options=["a", "b"])
    render_field(field, "", {}, spy)
    assert spy.values["status"] == "a"


def test_multiselect_checks_and_emits_list():
    spy = FormSpy()
    field = FormField("tags", "Tags", input_type="multiselect", options=["vip", "novo", "antigo"])
    widget = render_field(field, "vip,antigo", {}, spy)
    assert isinstance(widget, QListWidget)
    checked = [widget.item(i).text() for i in range(widget.count())
               if widget.item(i).checkState() == Qt.Checked]
    assert checked == ["vip", "antigo"]
    widget.item(1).setCheckState(Qt.Checked)
    assert spy.values["tags"] == ["vip", "novo", "antigo"]


def test_date_input_round_trips_iso():
    spy = FormSpy()
    widget = render_field(FormField("nasc", "Nascimento", input_type="date"), "1990-05-17", {}, spy)
    assert isinstance(widget, QDateEdit)
    assert widget.date() == QDate(1990, 5, 17)
    widget.setDate(QDate(2000, 1, 2))
    assert spy.values["nasc"] == "2000-01-02"
    widget.setDate(EMPTY_DATE)
    assert spy.values["nasc"] == ""


def test_disabled_field():
    widget = render_field(FormField("nome", "Nome"), "", {}, FormSpy(), disabled=True)
    assert not widget.isEnabled()


def test_custom_input_receives_context():
    received = []

    def render(ctx):
        received.append(ctx)
        return QLabel(str(ctx.value))

    spy = FormSpy()
    field = FormField("cep", "CEP", render_input=render, helper_text="Apenas números")
    widget = render_field(field, "90000000", {"cep": "90000000", "uf": "RS"}, spy, disabled=True)
    ctx = received[0]
    assert ctx.value == "90000000"
    assert ctx.disabled is True
    assert ctx.form_values["uf"] == "RS"
    ctx.on_change("91000000")
    ctx.set_field_value("uf", "SC")
    assert spy.values == {"cep": "91000000", "uf": "SC"}
    assert widget.toolTip() == "Apenas números"


def test_custom_multiselect_change_is_normalized():
    spy = FormSpy()
    captured = []
    field = FormField("tags", "Tags", input_type="multiselect",
                      render_input=lambda ctx: captured.append(ctx) or QLabel())
    render_field(field, [], {}, spy)
    captured[0].on_change("a, b")
    assert spy.values["tags"] == ["a", "b"]


def test_update_field_widget_reflects_external_value():
    spy = FormSpy()
    field = FormField("endereco", "Endereço")
    widget = render_field(field, "", {}, spy)
    update_field_widget(field, widget, "Rua A")
    assert widget.text() == "Rua A"
    # Sem eco de volta para o formulário
    assert spy.calls == []


def test_update_field_widget_keeps_equivalent_number_text():
    field = FormField("valor", "Valor", input_type="number")
    widget = render_field(field, "", {}, FormSpy())
    widget.setText("1,5")
    update_field_widget(field, widget, 1.5)
    assert widget.text() == "1,5"
