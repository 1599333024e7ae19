import pytest

from config.access_control import (
    FULL, READ_ONLY, HIDDEN, Capabilities, Scoped,
    resolve_access_mode, coerce_access_mode, get_contextual_access_mode,
    is_hidden, is_read_only, is_full, can_visualize_item,
    can_create, can_edit, can_delete, can_preview, can_download,
)

BASE = "vendas:pedidos"

ALL_PREDICATES = [is_full, can_visualize_item, can_create, can_edit, can_delete, can_preview, can_download]


@pytest.mark.parametrize("permissions", [
    set(),
    {"vendas:pedidos:editar", "vendas:pedidos:criar", "vendas:pedidos:excluir"},
    {"vendas:pedidos:visualizar", "vendas:pedidos:download"},
    {"vendas:outros:listar", "vendas:pedidos:preview"},
    {"vendas"},
])
def test_missing_listar_is_always_hidden(permissions):
    assert resolve_access_mode(permissions, BASE) == HIDDEN


def test_bare_base_permission_grants_listing():
    mode = resolve_access_mode({BASE}, BASE)
    assert isinstance(mode, Scoped)
    assert mode.capabilities.view is True
    assert not is_hidden(mode)


def test_only_listar_yields_view_only_record():
    mode = resolve_access_mode({"vendas:pedidos:listar"}, BASE)
    assert mode == Scoped(Capabilities(view=True))
    caps = mode.capabilities
    assert (caps.create, caps.edit, caps.delete, caps.preview, caps.download, caps.visualize_item) == (
        False, False, False, False, False, False)


def test_edit_implies_visualize_item():
    mode = resolve_access_mode({"vendas:pedidos:listar", "vendas:pedidos:editar"}, BASE)
    assert mode.capabilities.visualize_item is True
    assert mode.capabilities.edit is True


def test_adicionar_counts_as_create_and_remover_as_delete():
    mode = resolve_access_mode(
        {"vendas:pedidos:listar", "vendas:pedidos:adicionar", "vendas:pedidos:remover"}, BASE)
    assert can_create(mode)
    assert can_delete(mode)
    assert not can_edit(mode)


def test_suffix_matching_covers_sub_resources():
    # Permissões de sub-recurso também liberam excluir/preview/download
    mode = resolve_access_mode(
        {"vendas:pedidos:listar", "vendas:pedidos:itens:excluir", "vendas:pedidos:anexos:download"}, BASE)
    assert can_delete(mode)
    assert can_download(mode)
    assert not can_preview(mode)


def test_suffix_matching_ignores_other_bases():
    mode = resolve_access_mode({"vendas:pedidos:listar", "vendas:clientes:excluir"}, BASE)
    assert not can_delete(mode)


@pytest.mark.parametrize("caps", [
    Capabilities(view=True),
    Capabilities(view=True, edit=True),
    Capabilities(view=True, create=True),
    Capabilities(view=True, delete=True, download=True, preview=True),
    Capabilities(view=True, visualize_item=True, create=True, edit=True, delete=True),
])
def test_read_only_is_neither_edit_nor_create(caps):
    mode = Scoped(caps)
    assert is_read_only(mode) == (not can_edit(mode) and not can_create(mode))


def test_is_full_means_any_mutation():
    assert is_full(Scoped(Capabilities(view=True, delete=True)))
    assert not is_full(Scoped(Capabilities(view=True, preview=True, download=True)))


def test_literal_full_grants_everything():
    for predicate in ALL_PREDICATES:
        assert predicate("full") is True
    assert not is_hidden("full")
    assert not is_read_only(FULL)


def test_literal_hidden_denies_everything():
    for predicate in ALL_PREDICATES:
        assert predicate("hidden") is False
    assert is_hidden(HIDDEN)


def test_literal_read_only():
    assert is_read_only("read-only")
    assert can_visualize_item(READ_ONLY)
    assert not can_edit(READ_ONLY)
    assert not can_delete(READ_ONLY)
    assert not is_hidden(READ_ONLY)


def test_scoped_without_view_behaves_as_hidden():
    mode = Scoped(Capabilities(view=False, edit=True, delete=True))
    assert is_hidden(mode)
    assert not can_edit(mode)
    assert not can_delete(mode)


def test_coerce_access_mode_accepts_dicts_and_rejects_unknown():
    mode = coerce_access_mode({"view": True, "visualizeItem": True, "edit": True})
    assert mode == Scoped(Capabilities(view=True, visualize_item=True, edit=True))
    with pytest.raises(ValueError):
        coerce_access_mode("admin")
    with pytest.raises(TypeError):
        coerce_access_mode(42)


def test_contextual_mode_separates_create_and_edit():
    mode = Scoped(Capabilities(view=True, edit=True))
    assert not is_read_only(get_contextual_access_mode(mode, is_editing=True))
    assert is_read_only(get_contextual_access_mode(mode, is_editing=False))

    mode = Scoped(Capabilities(view=True, create=True))
    assert is_read_only(get_contextual_access_mode(mode, is_editing=True))
    assert not is_read_only(get_contextual_access_mode(mode, is_editing=False))


def test_contextual_mode_keeps_literals():
    assert get_contextual_access_mode("full", True) == FULL
    assert get_contextual_access_mode(READ_ONLY, False) == READ_ONLY
