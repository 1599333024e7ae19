# config/permissions.py

# Ações reconhecidas pelo resolver (config/access_control.py)
ACTIONS = ["listar", "visualizar", "criar", "editar", "excluir", "preview", "download"]

ACTION_LABELS = {
    "listar": "Listar",
    "visualizar": "Visualizar",
    "criar": "Criar",
    "adicionar": "Adicionar",
    "editar": "Editar",
    "excluir": "Excluir",
    "remover": "Remover",
    "preview": "Pré-visualizar",
    "download": "Exportar",
}

PERMISSION_SCHEMA = {
    "Cadastros": {
        "db_key_modulo": "cadastro",
        "formularios": {
            "clientes": {
                "display_name": "Clientes",
                "base_permission": "cadastro:clientes",
                "acoes": ["listar", "visualizar", "criar", "editar", "excluir", "download"],
            },
        }
    },
    "Contratos": {
        "db_key_modulo": "contratos",
        "formularios": {
            "ciclos_pagamento": {
                "display_name": "Ciclos de Pagamento",
                "base_permission": "contratos:ciclos-pagamento",
                "acoes": ["listar", "visualizar", "criar", "editar", "excluir"],
            },
        }
    },
    "Administração": {
        "db_key_modulo": "admin",
        "formularios": {
            "grupos_acesso": {
                "display_name": "Grupos de Acesso",
                "base_permission": "admin:grupos-acesso",
                "acoes": ["listar", "visualizar", "criar", "editar", "excluir", "download"],
            },
        }
    },
}


def iter_screens():
    """Percorre (modulo, chave_form, definicao) na ordem do catálogo."""
    for module_name, module in PERMISSION_SCHEMA.items():
        for form_key, form in module["formularios"].items():
            yield module_name, form_key, form


def get_screen(form_key):
    for _, key, form in iter_screens():
        if key == form_key:
            return form
    raise KeyError(form_key)


def all_permissions():
    """Todas as strings de permissão do catálogo, em ordem estável."""
    perms = []
    for _, _, form in iter_screens():
        base = form["base_permission"]
        perms.extend(f"{base}:{acao}" for acao in form["acoes"])
    return perms


def permission_label(permission):
    """'cadastro:clientes:editar' -> 'Clientes: Editar'"""
    base, _, action = permission.rpartition(":")
    for _, _, form in iter_screens():
        if form["base_permission"] == base:
            return f"{form['display_name']}: {ACTION_LABELS.get(action, action)}"
    return permission
