# -*- coding: utf-8 -*-
# modules/clientes_page.py
import logging
import requests
from PyQt5.QtWidgets import QWidget, QLineEdit, QPushButton, QHBoxLayout

from modules.cadastro_page import CadastroPage
from modules.row_browser_state import Column, FormField
from modules.search_context import SearchFilter

logger = logging.getLogger(__name__)

VIACEP_URL = "https://viacep.com.br/ws/{cep}/json/"

STATUS_OPTIONS = [
    ("ativo", "Ativo"),
    ("inativo", "Inativo"),
    ("bloqueado", "Bloqueado"),
]

UF_OPTIONS = [
    "AC", "AL", "AP", "AM", "BA", "CE", "DF", "ES", "GO", "MA", "MT", "MS", "MG", "PA",
    "PB", "PR", "PE", "PI", "RJ", "RN", "RS", "RO", "RR", "SC", "SP", "SE", "TO",
]


class CepLookupError(Exception):
    pass


def lookup_cep(cep, timeout=5):
    """
    Consulta o ViaCEP. Retorna dict com endereco/bairro/municipio/uf.
    """
    digits = "".join(ch for ch in str(cep or "") if ch.isdigit())
    if len(digits) != 8:
        raise CepLookupError("O CEP deve conter 8 dígitos.")
    try:
        response = requests.get(VIACEP_URL.format(cep=digits), timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.RequestException as e:
        logger.warning(f"Falha ao consultar CEP {digits}: {e}")
        raise CepLookupError(f"Não foi possível consultar o CEP: {e}") from e

    if data.get("erro"):
        raise CepLookupError("CEP não encontrado.")
    return {
        "endereco": data.get("logradouro", ""),
        "bairro": data.get("bairro", ""),
        "municipio": data.get("localidade", ""),
        "uf": data.get("uf", ""),
    }


def render_cep_input(ctx, lookup=lookup_cep):
    """Campo de CEP com botão 'Buscar' que preenche o endereço."""
    container = QWidget()
    layout = QHBoxLayout(container)
    layout.setContentsMargins(0, 0, 0, 0)

    cep_input = QLineEdit(container)
    cep_input.setObjectName("cep_input")
    cep_input.setInputMask("00000-000;_")
    cep_input.setText(ctx.value or "")
    cep_input.setEnabled(not ctx.disabled)
    cep_input.textChanged.connect(lambda _text: ctx.on_change(cep_input.text().strip("-_ ")))

    search_btn = QPushButton("Buscar", container)
    search_btn.setObjectName("cep_search_btn")
    search_btn.setEnabled(not ctx.disabled)

    def _search():
        try:
            address = lookup(cep_input.text())
        except CepLookupError as e:
            search_btn.setToolTip(str(e))
            logger.info(f"Busca de CEP sem resultado: {e}")
            return
        search_btn.setToolTip("")
        for key, value in address.items():
            ctx.set_field_value(key, value)

    search_btn.clicked.connect(_search)
    layout.addWidget(cep_input, 1)
    layout.addWidget(search_btn)
    return container


class ClientesPage(CadastroPage):
    FORM_KEY = "clientes"
    TABLE = "clientes"
    ORDER_BY = "nome"

    def columns(self):
        status_labels = dict(STATUS_OPTIONS)
        return [
            Column("nome", "Nome"),
            Column("documento", "CPF/CNPJ"),
            Column("email", "E-mail"),
            Column("celular", "Celular"),
            Column("municipio", "Município",
                   render=lambda v, row: f"{v}/{row['uf']}" if v and row.get("uf") else v),
            Column("status", "Status", data_type="status",
                   render=lambda v, row: status_labels.get(v, v)),
        ]

    def form_fields(self):
        return [
            FormField("nome", "Nome / Razão Social", required=True),
            FormField("documento", "CPF/CNPJ", helper_text="Somente números ou com pontuação"),
            FormField("email", "E-mail", input_type="email"),
            FormField("celular", "Celular", placeholder="(00) 00000-0000"),
            FormField("data_nascimento", "Data de Nascimento", data_type="date", input_type="date"),
            FormField("status", "Status", input_type="select", options=STATUS_OPTIONS,
                      default_value="ativo", required=True),
            FormField("cep", "CEP", render_input=render_cep_input),
            FormField("endereco", "Endereço"),
            FormField("bairro", "Bairro"),
            FormField("municipio", "Município"),
            FormField("uf", "UF", input_type="select", options=UF_OPTIONS),
        ]

    def search_filters(self):
        return [
            SearchFilter("nome", "Nome", "nome", page=self.FORM_KEY),
            SearchFilter("documento", "CPF/CNPJ", "documento", page=self.FORM_KEY),
            SearchFilter("municipio", "Município", "municipio", page=self.FORM_KEY),
        ]

    def default_filter_id(self):
        return "nome"

    def validate(self, values):
        email = values.get("email") or ""
        if email and "@" not in email:
            raise ValueError("E-mail inválido.")
