# -*- coding: utf-8 -*-
# config/access_control.py
"""
Resolve as permissões do usuário (strings no formato
``<dominio>:<entidade>:<acao>``) em um modo de acesso por tela.

O modo de acesso é uma união explícita:

    Full | ReadOnly | Hidden | Scoped(Capabilities)

Os predicados (``can_edit``, ``is_read_only``...) aceitam qualquer variante e
também os literais antigos ``"full"``, ``"read-only"`` e ``"hidden"``.
"""
from dataclasses import dataclass, replace


# --- VARIANTES DO MODO DE ACESSO ---

@dataclass(frozen=True)
class Capabilities:
    view: bool = False
    visualize_item: bool = False
    create: bool = False
    edit: bool = False
    delete: bool = False
    preview: bool = False
    download: bool = False


class AccessMode:
    """Base das variantes. Não instanciar diretamente."""
    __slots__ = ()


class Full(AccessMode):
    __slots__ = ()

    def __repr__(self):
        return "Full()"

    def __eq__(self, other):
        return isinstance(other, Full)

    def __hash__(self):
        return hash("full")


class ReadOnly(AccessMode):
    __slots__ = ()

    def __repr__(self):
        return "ReadOnly()"

    def __eq__(self, other):
        return isinstance(other, ReadOnly)

    def __hash__(self):
        return hash("read-only")


class Hidden(AccessMode):
    __slots__ = ()

    def __repr__(self):
        return "Hidden()"

    def __eq__(self, other):
        return isinstance(other, Hidden)

    def __hash__(self):
        return hash("hidden")


@dataclass(frozen=True)
class Scoped(AccessMode):
    capabilities: Capabilities


FULL = Full()
READ_ONLY = ReadOnly()
HIDDEN = Hidden()

# Literais aceitos na fronteira (config antiga, páginas simples)
LITERAL_MODES = {
    "full": FULL,
    "read-only": READ_ONLY,
    "hidden": HIDDEN,
}


def coerce_access_mode(mode):
    """Converte literais/dicts para a variante correspondente."""
    if isinstance(mode, AccessMode):
        return mode
    if isinstance(mode, Capabilities):
        return Scoped(mode)
    if isinstance(mode, str):
        try:
            return LITERAL_MODES[mode]
        except KeyError:
            raise ValueError(f"Modo de acesso desconhecido: {mode!r}") from None
    if isinstance(mode, dict):
        return Scoped(Capabilities(
            view=bool(mode.get("view", False)),
            visualize_item=bool(mode.get("visualize_item", mode.get("visualizeItem", False))),
            create=bool(mode.get("create", False)),
            edit=bool(mode.get("edit", False)),
            delete=bool(mode.get("delete", False)),
            preview=bool(mode.get("preview", False)),
            download=bool(mode.get("download", False)),
        ))
    raise TypeError(f"Modo de acesso inválido: {type(mode).__name__}")


def _normalize(mode):
    # Um registro sem 'view' é tratado como oculto: nenhuma outra capacidade vale.
    mode = coerce_access_mode(mode)
    if isinstance(mode, Scoped) and not mode.capabilities.view:
        return HIDDEN
    return mode


# --- RESOLVER ---

def resolve_access_mode(permissions, base_permission):
    """
    Calcula o modo de acesso de ``base_permission`` (ex: 'comercial:clientes').

    Sem ``<base>:listar`` (ou a própria base) o resultado é sempre Hidden.
    A busca por sufixo (excluir/remover, preview, download) percorre todas as
    permissões que começam com a base, inclusive sub-recursos.
    """
    permissions = set(permissions or ())
    base = base_permission

    has_listar = f"{base}:listar" in permissions or base in permissions
    if not has_listar:
        return HIDDEN

    relevant = [p for p in permissions if p.startswith(base)]

    create = f"{base}:criar" in permissions or f"{base}:adicionar" in permissions
    edit = f"{base}:editar" in permissions
    delete = any(p.endswith(":excluir") or p.endswith(":remover") for p in relevant)
    preview = any(p.endswith(":preview") for p in relevant)
    download = any(p.endswith(":download") for p in relevant)
    visualize_item = f"{base}:visualizar" in permissions or edit

    return Scoped(Capabilities(
        view=True,
        visualize_item=visualize_item,
        create=create,
        edit=edit,
        delete=delete,
        preview=preview,
        download=download,
    ))


# --- PREDICADOS ---

def _flag(mode, name):
    mode = _normalize(mode)
    if isinstance(mode, Full):
        return True
    if isinstance(mode, Scoped):
        return getattr(mode.capabilities, name)
    if isinstance(mode, (ReadOnly, Hidden)):
        return False
    raise TypeError(f"Modo de acesso inválido: {mode!r}")


def is_hidden(mode):
    return isinstance(_normalize(mode), Hidden)


def is_read_only(mode):
    mode = _normalize(mode)
    if isinstance(mode, (ReadOnly, Hidden)):
        return True
    if isinstance(mode, Scoped):
        return not mode.capabilities.edit and not mode.capabilities.create
    return False


def can_visualize_item(mode):
    mode = _normalize(mode)
    if isinstance(mode, (Full, ReadOnly)):
        return True
    if isinstance(mode, Scoped):
        return mode.capabilities.visualize_item
    return False


def is_full(mode):
    """Verdadeiro se houver qualquer capacidade de escrita (não 'todas')."""
    mode = _normalize(mode)
    if isinstance(mode, Full):
        return True
    if isinstance(mode, Scoped):
        caps = mode.capabilities
        return caps.edit or caps.create or caps.delete
    return False


def can_create(mode):
    return _flag(mode, "create")


def can_edit(mode):
    return _flag(mode, "edit")


def can_delete(mode):
    return _flag(mode, "delete")


def can_preview(mode):
    return _flag(mode, "preview")


def can_download(mode):
    return _flag(mode, "download")


CAPABILITY_CHECKS = {
    "create": can_create,
    "edit": can_edit,
    "delete": can_delete,
    "preview": can_preview,
    "download": can_download,
    "visualize_item": can_visualize_item,
}


def get_contextual_access_mode(mode, is_editing):
    """
    Ajusta o modo para o contexto do formulário: editando, só 'edit' libera
    os campos; criando, só 'create'.
    """
    mode = coerce_access_mode(mode)
    if not isinstance(mode, Scoped):
        return mode
    caps = mode.capabilities
    return Scoped(replace(
        caps,
        edit=caps.edit if is_editing else False,
        create=caps.create if not is_editing else False,
    ))
