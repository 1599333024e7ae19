# -*- coding: utf-8 -*-
# modules/search_context.py
import logging
from dataclasses import dataclass
from PyQt5.QtCore import QObject, pyqtSignal

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER = "Pesquisar"


@dataclass(frozen=True)
class SearchFilter:
    id: str
    label: str
    field: str
    type: str = "text"
    page: str = None


class SearchContext(QObject):
    """
    Estado de busca da janela ativa (texto digitado, filtros declarados pela
    tela atual e o filtro selecionado). A barra superior e as listas escutam
    os sinais abaixo.
    """
    query_changed = pyqtSignal(str)
    filters_changed = pyqtSignal(object)
    selected_filter_changed = pyqtSignal(object)
    placeholder_changed = pyqtSignal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._query = ""
        self._filters = []
        self._selected_filter_id = None
        self._placeholder = DEFAULT_PLACEHOLDER

    @property
    def query(self):
        return self._query

    @property
    def filters(self):
        return list(self._filters)

    @property
    def placeholder(self):
        return self._placeholder

    @property
    def selected_filter(self):
        # Sempre None ou um membro dos filtros atuais
        for f in self._filters:
            if f.id == self._selected_filter_id:
                return f
        return None

    def set_query(self, value):
        value = value or ""
        if value == self._query:
            return
        self._query = value
        self.query_changed.emit(value)

    def set_filters(self, filters, default_filter_id=None):
        self._filters = list(filters or [])
        if not self._filters:
            self._selected_filter_id = None
        else:
            self._selected_filter_id = default_filter_id if default_filter_id is not None else self._filters[0].id
            if self.selected_filter is None:
                logger.warning(f"Filtro padrão '{default_filter_id}' não existe entre os filtros declarados.")
        self.filters_changed.emit(self.filters)
        self.selected_filter_changed.emit(self.selected_filter)

    def select_filter(self, filter_id):
        self._selected_filter_id = filter_id
        self.selected_filter_changed.emit(self.selected_filter)

    def set_placeholder(self, value):
        self._placeholder = value or ""
        self.placeholder_changed.emit(self._placeholder)

    def reset(self):
        self.set_filters([])
        self.set_placeholder(DEFAULT_PLACEHOLDER)
        self.set_query("")


class SearchScope:
    """
    Filtros de uma tela enquanto ela estiver montada.

        with SearchScope(ctx, filtros, 'nome'):
            ...

    ou acquire()/release() quando o tempo de vida é o de um widget.
    release() é idempotente.
    """
    def __init__(self, context, filters, default_filter_id=None, placeholder=""):
        self.context = context
        self.filters = list(filters)
        self.default_filter_id = default_filter_id
        self.placeholder = placeholder
        self.active = False

    def acquire(self):
        if self.active:
            return self
        self.context.set_placeholder(self.placeholder)
        self.context.set_filters(self.filters, self.default_filter_id)
        self.active = True
        logger.debug(f"Filtros instalados: {[f.id for f in self.filters]}")
        return self

    def release(self):
        if not self.active:
            return
        self.active = False
        self.context.reset()
        logger.debug("Filtros da tela removidos.")

    def __enter__(self):
        return self.acquire()

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False
