import copy

import pytest

from config.access_control import Capabilities, Scoped, HIDDEN, READ_ONLY
from modules.row_browser_state import (
    RowBrowserState, Column, FormField, RowAction, BulkAction,
    CLOSED, ADDING, Editing, VIEW_CARD, VIEW_TABLE,
    FormValidationError, validate_form_values, filter_rows, render_cell,
    seed_add_values, seed_edit_values, EMPTY_CELL,
)
from modules.search_context import SearchContext, SearchFilter

ROWS = [
    {"id": 1, "nome": "Ana Souza", "cidade": "Porto Alegre", "tags": "vip"},
    {"id": 2, "nome": "Bruno Lima", "cidade": "Curitiba", "tags": None},
    {"id": 3, "nome": "Carla Porto", "cidade": None, "tags": ["novo", "vip"]},
]

COLUMNS = [Column("nome", "Nome"), Column("cidade", "Cidade")]

FIELDS = [
    FormField("nome", "Nome", required=True),
    FormField("cidade", "Cidade", default_value="Curitiba"),
    FormField("tags", "Tags", input_type="multiselect", options=["vip", "novo"]),
]


class Recorder:
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def __call__(self, *args):
        self.calls.append(args)
        if self.fail:
            raise RuntimeError("servidor indisponível")


def make_state(**kwargs):
    kwargs.setdefault("rows", copy.deepcopy(ROWS))
    kwargs.setdefault("form_fields", FIELDS)
    kwargs.setdefault("on_add", Recorder())
    kwargs.setdefault("on_edit", Recorder())
    kwargs.setdefault("on_delete", Recorder())
    kwargs.setdefault("on_bulk_delete", Recorder())
    return RowBrowserState(COLUMNS, **kwargs)


# --- filtragem ---

def test_filter_without_selected_filter_matches_any_column():
    result = filter_rows(ROWS, COLUMNS, "porto")
    assert [r["id"] for r in result] == [1, 3]


def test_filter_with_selected_filter_matches_only_its_field():
    cidade = SearchFilter("cidade", "Cidade", "cidade")
    result = filter_rows(ROWS, COLUMNS, "PORTO", cidade)
    assert [r["id"] for r in result] == [1]


def test_null_values_never_match():
    cidade = SearchFilter("cidade", "Cidade", "cidade")
    assert filter_rows(ROWS, COLUMNS, "none", cidade) == []


def test_empty_query_returns_everything():
    assert filter_rows(ROWS, COLUMNS, "") == ROWS


# --- seleção ---

def test_select_all_only_covers_filtered_rows():
    search = SearchContext()
    state = make_state(search=search)
    search.set_query("porto")
    state.toggle_select_all()
    assert sorted(state.selected_ids) == [1, 3]

    search.set_query("")
    assert sorted(state.selected_ids) == [1, 3]
    assert not state.all_selected()
    assert state.partially_selected()


def test_select_all_twice_clears():
    state = make_state()
    state.toggle_select_all()
    assert state.all_selected()
    state.toggle_select_all()
    assert state.selected_ids == []


def test_toggle_select_row():
    state = make_state()
    state.toggle_select_row(2)
    assert state.is_selected(2)
    state.toggle_select_row(2)
    assert not state.is_selected(2)


# --- diálogo ---

def test_open_add_seeds_defaults():
    state = make_state()
    assert state.open_add()
    assert state.dialog == ADDING
    assert state.form_values == {"nome": "", "cidade": "Curitiba", "tags": []}


def test_open_edit_seeds_from_row_with_fallbacks():
    state = make_state()
    row = state.rows[1]
    assert state.open_edit(row)
    assert state.dialog == Editing(row)
    values = state.form_values
    assert values["nome"] == "Bruno Lima"
    assert values["cidade"] == "Curitiba"
    assert values["tags"] == []


def test_multiselect_scalar_is_coerced_to_list():
    values = seed_edit_values(FIELDS, ROWS[0])
    assert values["tags"] == ["vip"]


def test_no_transition_between_adding_and_editing():
    state = make_state()
    state.open_add()
    assert not state.open_edit(state.rows[0])
    assert state.dialog == ADDING
    state.close_dialog()
    assert state.open_edit(state.rows[0])
    assert not state.open_add()
    assert isinstance(state.dialog, Editing)


def test_edit_then_close_leaves_rows_untouched():
    state = make_state()
    before = copy.deepcopy(state.rows)
    state.open_edit(state.rows[2])
    state.set_field_value("nome", "Outro nome")
    state.set_field_value("tags", [])
    state.close_dialog()
    assert state.rows == before
    assert state.dialog == CLOSED


@pytest.mark.parametrize("empty", ["", None, []])
def test_required_empty_blocks_submit(empty):
    on_add = Recorder()
    state = make_state(on_add=on_add)
    messages = []
    state.notification.connect(lambda msg, level: messages.append((msg, level)))
    state.open_add()
    state.set_field_value("nome", empty)
    assert state.submit() is False
    assert on_add.calls == []
    assert state.dialog == ADDING
    assert messages == [("Preencha os campos obrigatórios: Nome", "warning")]


def test_required_multiselect_empty_list_blocks_submit():
    fields = [FormField("tags", "Tags", input_type="multiselect", required=True)]
    on_add = Recorder()
    state = make_state(form_fields=fields, on_add=on_add)
    state.open_add()
    assert not state.submit()
    assert on_add.calls == []


def test_validation_message_joins_labels():
    fields = [FormField("a", "Nome", required=True), FormField("b", "E-mail", required=True)]
    with pytest.raises(FormValidationError) as err:
        validate_form_values(fields, {"a": "", "b": None})
    assert str(err.value) == "Preencha os campos obrigatórios: Nome, E-mail"
    assert err.value.labels == ["Nome", "E-mail"]


def test_submit_add_success_closes_and_clears_selection():
    on_add = Recorder()
    state = make_state(on_add=on_add)
    state.toggle_select_row(1)
    state.open_add()
    state.set_field_value("nome", "Diego")
    assert state.submit() is True
    assert on_add.calls == [({"nome": "Diego", "cidade": "Curitiba", "tags": []},)]
    assert state.dialog == CLOSED
    assert state.selected_ids == []


def test_submit_edit_passes_id_and_values():
    on_edit = Recorder()
    state = make_state(on_edit=on_edit)
    state.open_edit(state.rows[0])
    state.set_field_value("cidade", "Canoas")
    assert state.submit()
    (row_id, values), = on_edit.calls
    assert row_id == 1
    assert values["cidade"] == "Canoas"


def test_failed_submit_keeps_dialog_open():
    state = make_state(on_add=Recorder(fail=True))
    messages = []
    state.notification.connect(lambda msg, level: messages.append(level))
    state.open_add()
    state.set_field_value("nome", "Diego")
    assert state.submit() is False
    assert state.dialog == ADDING
    assert state.form_values["nome"] == "Diego"
    assert messages == ["error"]


# --- exclusão ---

def test_delete_row_removes_id_from_selection():
    on_delete = Recorder()
    state = make_state(on_delete=on_delete)
    state.toggle_select_row(1)
    state.toggle_select_row(2)
    assert state.delete_row(1)
    assert on_delete.calls == [(1,)]
    assert state.selected_ids == [2]


def test_bulk_delete_passes_selection_and_clears_it():
    on_bulk = Recorder()
    state = make_state(on_bulk_delete=on_bulk)
    state.toggle_select_row(3)
    state.toggle_select_row(1)
    assert state.bulk_delete()
    assert on_bulk.calls == [([3, 1],)]
    assert state.selected_ids == []


def test_failed_delete_keeps_selection():
    state = make_state(on_bulk_delete=Recorder(fail=True))
    state.toggle_select_row(1)
    assert state.bulk_delete() is False
    assert state.selected_ids == [1]


def test_delete_denied_without_capability():
    on_delete = Recorder()
    state = make_state(on_delete=on_delete, access_mode=Scoped(Capabilities(view=True, edit=True)))
    assert not state.delete_row(1)
    assert on_delete.calls == []


def test_disable_delete_flag():
    state = make_state(disable_delete=True)
    assert not state.can_delete_rows
    assert not state.can_bulk_delete


# --- modo de acesso ---

def test_hidden_mode_shows_no_rows():
    state = make_state(access_mode=HIDDEN)
    assert state.visible_rows() == []
    assert not state.can_add
    assert not state.open_edit(ROWS[0])


def test_read_only_opens_rows_for_inspection_only():
    on_edit = Recorder()
    state = make_state(access_mode=READ_ONLY, on_edit=on_edit)
    assert not state.can_add
    assert state.open_edit(state.rows[0])
    assert state.form_read_only
    assert not state.submit()
    assert on_edit.calls == []


def test_create_only_mode_locks_fields_when_editing():
    mode = Scoped(Capabilities(view=True, visualize_item=True, create=True))
    state = make_state(access_mode=mode)
    state.open_edit(state.rows[0])
    assert state.form_read_only
    state.close_dialog()
    state.open_add()
    assert not state.form_read_only


def test_list_only_mode_cannot_open_rows():
    state = make_state(access_mode=Scoped(Capabilities(view=True)))
    assert not state.open_edit(state.rows[0])
    assert state.dialog == CLOSED


def test_field_disabled_flag():
    fields = [FormField("nome", "Nome"), FormField("codigo", "Código", disabled=True)]
    state = make_state(form_fields=fields)
    state.open_add()
    assert not state.is_field_disabled(fields[0])
    assert state.is_field_disabled(fields[1])


def test_fields_default_to_columns():
    state = RowBrowserState(COLUMNS, rows=ROWS)
    assert [f.key for f in state.fields] == ["nome", "cidade"]
    assert all(f.input_type == "text" for f in state.fields)


# --- modo de exibição ---

def test_toggling_view_mode_keeps_selection_and_dialog():
    state = make_state(view_mode=VIEW_TABLE)
    state.toggle_select_row(2)
    state.open_edit(state.rows[0])
    state.toggle_view_mode()
    assert state.view_mode == VIEW_CARD
    assert state.selected_ids == [2]
    assert isinstance(state.dialog, Editing)
    state.toggle_view_mode()
    assert state.view_mode == VIEW_TABLE


def test_invalid_view_mode():
    state = make_state()
    with pytest.raises(ValueError):
        state.set_view_mode("grade")


# --- troca de filtros (troca de tela) ---

def test_filter_scope_change_resets_state():
    search = SearchContext()
    state = make_state(search=search)
    state.toggle_select_row(1)
    state.open_add()
    search.set_filters([SearchFilter("nome", "Nome", "nome")])
    assert state.selected_ids == []
    assert state.dialog == CLOSED


# --- ações customizadas ---

def test_row_action_respects_capability_and_disabled():
    clicked = Recorder()
    preview = RowAction("Visualizar PDF", clicked, capability="preview")
    blocked = RowAction("Bloqueada", clicked, disabled=lambda row: row["id"] == 2)
    state = make_state(row_actions=[preview, blocked],
                       access_mode=Scoped(Capabilities(view=True)))
    assert not state.run_row_action(preview, ROWS[0])
    assert not state.run_row_action(blocked, ROWS[1])
    assert state.run_row_action(blocked, ROWS[0])
    assert clicked.calls == [(ROWS[0],)]


def test_row_menu_closes_after_action():
    state = make_state(row_actions=[RowAction("Abrir", Recorder())])
    state.open_row_menu(ROWS[0])
    assert state.menu_row == ROWS[0]
    state.run_row_action(state.row_actions[0], ROWS[0])
    assert state.menu_row is None


def test_bulk_action_failure_is_notified():
    state = make_state(bulk_actions=[BulkAction("Ativar", Recorder(fail=True))])
    levels = []
    state.notification.connect(lambda msg, level: levels.append(level))
    state.toggle_select_row(1)
    assert not state.run_bulk_action(state.bulk_actions[0])
    assert levels == ["error"]
    assert state.selected_ids == [1]


# --- renderização de células ---

def test_render_cell_formats():
    assert render_cell({"d": "2024-03-05"}, Column("d", "Data", data_type="date")) == "05/03/2024"
    assert render_cell({"x": None}, Column("x", "X")) == EMPTY_CELL
    assert render_cell({"x": ["a", "b"]}, Column("x", "X")) == "a, b"
    assert render_cell({"x": 2, "y": 3}, Column("x", "X", render=lambda v, row: v * row["y"])) == "6"


def test_seed_add_values_multiselect_default_scalar():
    fields = [FormField("t", "T", input_type="multiselect", default_value="vip")]
    assert seed_add_values(fields) == {"t": ["vip"]}
