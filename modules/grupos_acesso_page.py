# -*- coding: utf-8 -*-
# modules/grupos_acesso_page.py
import json

from config.permissions import all_permissions, permission_label
from modules.cadastro_page import CadastroPage
from modules.row_browser_state import Column, FormField, RowAction, BulkAction
from modules.search_context import SearchFilter

STATUS_OPTIONS = [("ativo", "Ativo"), ("inativo", "Inativo")]


class GruposAcessoPage(CadastroPage):
    """Grupos de acesso: cada grupo guarda uma lista de permissões do catálogo."""
    FORM_KEY = "grupos_acesso"
    TABLE = "grupos_acesso"
    ORDER_BY = "nome"

    def columns(self):
        return [
            Column("nome", "Grupo"),
            Column("descricao", "Descrição"),
            Column("permissoes", "Permissões",
                   render=lambda v, row: f"{len(v or [])} permissão(ões)"),
            Column("status", "Status", data_type="status"),
        ]

    def form_fields(self):
        return [
            FormField("nome", "Nome do Grupo", required=True),
            FormField("descricao", "Descrição"),
            FormField("permissoes", "Permissões", input_type="multiselect",
                      options=[(p, permission_label(p)) for p in all_permissions()],
                      helper_text="Sem 'Listar' a tela fica oculta para o grupo"),
            FormField("status", "Status", input_type="select", options=STATUS_OPTIONS,
                      default_value="ativo", required=True),
        ]

    def search_filters(self):
        return [
            SearchFilter("nome", "Grupo", "nome", page=self.FORM_KEY),
            SearchFilter("descricao", "Descrição", "descricao", page=self.FORM_KEY),
        ]

    def row_actions(self):
        return [
            RowAction("Duplicar", self.duplicate_group, capability="create"),
        ]

    def bulk_actions(self):
        return [
            BulkAction("Ativar", lambda ids: self.set_status(ids, "ativo"), capability="edit"),
            BulkAction("Desativar", lambda ids: self.set_status(ids, "inativo"), capability="edit"),
        ]

    def row_from_db(self, row):
        data = dict(row)
        try:
            data["permissoes"] = json.loads(data.get("permissoes") or "[]")
        except ValueError:
            self.logger.error(f"Permissões inválidas no grupo {data.get('id')}")
            data["permissoes"] = []
        return data

    def values_to_db(self, values):
        data = super().values_to_db(values)
        # Mantém só permissões conhecidas, na ordem do catálogo
        chosen = set(data.get("permissoes") or [])
        data["permissoes"] = json.dumps([p for p in all_permissions() if p in chosen])
        return data

    def duplicate_group(self, row):
        copy = dict(row)
        copy["nome"] = f"{row['nome']} (cópia)"
        self.add_record(copy)

    def set_status(self, ids, status):
        self._execute(f"UPDATE {self.TABLE} SET status = ? WHERE id = ?",
                      [(status, i) for i in ids], "atualizar status")
        self.logger.info(f"Status '{status}' aplicado a {len(ids)} grupo(s) pelo usuário {self.user_id}")
        self._after_change(f"{len(ids)} grupo(s) atualizado(s).")
