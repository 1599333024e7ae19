# -*- coding: utf-8 -*-
# modules/cadastro_page.py
"""
Tela de cadastro genérica: liga uma tabela do banco ao RowBrowser.

Cada entidade herda de ``CadastroPage`` e declara a tabela, a chave da tela no
catálogo de permissões, as colunas, os campos e os filtros de busca. A
persistência (sqlite3) fica aqui; o RowBrowser só chama os callbacks.
"""
import sqlite3
import logging
from PyQt5.QtWidgets import QWidget, QVBoxLayout
from PyQt5.QtCore import pyqtSignal

from config.access_control import resolve_access_mode
from config.permissions import get_screen
from config.settings import load_settings
from database.db import get_connection
from modules.row_browser import RowBrowser
from modules.search_context import SearchScope


class CadastroPage(QWidget):
    form_closed = pyqtSignal()

    FORM_KEY = None
    TABLE = None
    ORDER_BY = "id"

    def __init__(self, user_id, permissions=(), search=None, db_path=None, settings=None, **kwargs):
        super().__init__()
        self.logger = logging.getLogger(self.__class__.__module__)
        self.user_id = user_id
        self.db_path = db_path
        self.settings = settings if settings is not None else load_settings()

        self.screen = get_screen(self.FORM_KEY)
        self.setWindowTitle(self.screen["display_name"])
        self.access_mode = resolve_access_mode(permissions, self.screen["base_permission"])
        self.logger.debug(f"{self.FORM_KEY}: modo de acesso {self.access_mode!r}")

        # Filtros só valem enquanto esta tela estiver ativa
        self.search_scope = None
        if search is not None:
            self.search_scope = SearchScope(
                search, self.search_filters(),
                default_filter_id=self.default_filter_id(),
                placeholder=f"Pesquisar {self.screen['display_name'].lower()}",
            )
            self.search_scope.acquire()

        try:
            self._build_ui(search)
            self.load_data()
        except Exception:
            # Tela que não chegou a montar não pode deixar filtros na busca compartilhada
            self.release()
            raise

    # --- Declarações da entidade (sobrescritas pelas telas) ---

    def columns(self):
        raise NotImplementedError

    def form_fields(self):
        return None

    def search_filters(self):
        return []

    def default_filter_id(self):
        return None

    def row_actions(self):
        return None

    def bulk_actions(self):
        return None

    def row_from_db(self, row):
        return dict(row)

    def values_to_db(self, values):
        """Só as colunas editáveis do formulário vão para o banco."""
        keys = [f.key for f in self.browser.state.fields]
        return {k: values.get(k) for k in keys}

    def validate(self, values):
        """Regras de negócio além dos obrigatórios; levanta ValueError."""

    # --- UI ---

    def _build_ui(self, search):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 10, 0, 0)
        self.browser = RowBrowser(
            rows=[],
            columns=self.columns(),
            form_fields=self.form_fields(),
            on_add=self.add_record,
            on_edit=self.update_record,
            on_delete=self.delete_record,
            on_bulk_delete=self.delete_records,
            row_actions=self.row_actions(),
            bulk_actions=self.bulk_actions(),
            access_mode=self.access_mode,
            search=search,
            title=self.screen["display_name"],
            card_breakpoint=self.settings.get("card_breakpoint", 900),
            confirm_timeout_ms=self.settings.get("confirm_timeout_ms", 3000),
            toast_timeout_ms=self.settings.get("toast_timeout_ms", 4000),
            parent=self,
        )
        layout.addWidget(self.browser)

    # --- BANCO DE DADOS ---

    def _connect(self):
        return get_connection(self.db_path)

    def load_data(self):
        conn = self._connect()
        try:
            rows = conn.execute(f"SELECT * FROM {self.TABLE} ORDER BY {self.ORDER_BY}").fetchall()
        except sqlite3.Error as e:
            self.logger.error(f"Erro ao carregar {self.TABLE}: {e}", exc_info=True)
            self.browser.toast.show_message(f"Erro ao carregar dados: {e}", "error")
            return
        finally:
            conn.close()
        self.browser.set_rows([self.row_from_db(r) for r in rows])

    def _execute(self, sql, params_list, action):
        """Executa em uma transação; erro de banco volta como ValueError legível."""
        conn = self._connect()
        try:
            cur = conn.cursor()
            for params in params_list:
                cur.execute(sql, params)
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            self.logger.warning(f"{action} em {self.TABLE} violou restrição: {e}")
            raise ValueError(f"Registro duplicado ou em uso: {e}") from e
        except sqlite3.Error as e:
            conn.rollback()
            self.logger.error(f"Erro de banco ao {action} em {self.TABLE}: {e}", exc_info=True)
            raise
        finally:
            conn.close()

    def add_record(self, values):
        self.validate(values)
        data = self.values_to_db(values)
        cols = ", ".join(data)
        marks = ", ".join("?" for _ in data)
        self._execute(f"INSERT INTO {self.TABLE} ({cols}) VALUES ({marks})",
                      [tuple(data.values())], "inserir")
        self.logger.info(f"Registro criado em {self.TABLE} pelo usuário {self.user_id}")
        self._after_change("Registro salvo com sucesso.")

    def update_record(self, row_id, values):
        self.validate(values)
        data = self.values_to_db(values)
        assignments = ", ".join(f"{k} = ?" for k in data)
        self._execute(f"UPDATE {self.TABLE} SET {assignments} WHERE id = ?",
                      [tuple(data.values()) + (row_id,)], "atualizar")
        self.logger.info(f"Registro {row_id} de {self.TABLE} atualizado pelo usuário {self.user_id}")
        self._after_change("Registro atualizado com sucesso.")

    def delete_record(self, row_id):
        self._execute(f"DELETE FROM {self.TABLE} WHERE id = ?", [(row_id,)], "excluir")
        self.logger.info(f"Registro {row_id} de {self.TABLE} excluído pelo usuário {self.user_id}")
        self._after_change("Registro excluído.")

    def delete_records(self, ids):
        self._execute(f"DELETE FROM {self.TABLE} WHERE id = ?", [(i,) for i in ids], "excluir")
        self.logger.info(f"{len(ids)} registro(s) de {self.TABLE} excluído(s) pelo usuário {self.user_id}")
        self._after_change(f"{len(ids)} registro(s) excluído(s).")

    def _after_change(self, message):
        self.load_data()
        self.browser.toast.show_message(message, "info")

    # --- Ciclo de vida ---

    def release(self):
        """Chamado pela janela principal ao trocar de tela."""
        if self.search_scope is not None:
            self.search_scope.release()

    def closeEvent(self, event):
        self.release()
        super().closeEvent(event)
