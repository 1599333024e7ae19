# -*- coding: utf-8 -*-
# modules/ciclos_pagamento_page.py
from modules.cadastro_page import CadastroPage
from modules.row_browser_state import Column, FormField
from modules.search_context import SearchFilter

STATUS_OPTIONS = [("ativo", "Ativo"), ("inativo", "Inativo")]


def _as_int(value, label):
    if value in (None, ""):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{label} deve ser um número.") from None
    if not number.is_integer():
        raise ValueError(f"{label} deve ser um número inteiro.")
    return int(number)


class CiclosPagamentoPage(CadastroPage):
    FORM_KEY = "ciclos_pagamento"
    TABLE = "ciclos_pagamento"
    ORDER_BY = "dias_intervalo"

    def columns(self):
        return [
            Column("descricao", "Descrição"),
            Column("dias_intervalo", "Intervalo (dias)", data_type="number"),
            Column("dia_vencimento", "Dia de Vencimento", data_type="number"),
            Column("tolerancia_dias", "Tolerância (dias)", data_type="number"),
            Column("status", "Status", data_type="status"),
        ]

    def form_fields(self):
        return [
            FormField("descricao", "Descrição", required=True),
            FormField("dias_intervalo", "Intervalo (dias)", input_type="number", required=True),
            FormField("dia_vencimento", "Dia de Vencimento", input_type="number",
                      helper_text="Entre 1 e 31; vazio usa a data do contrato"),
            FormField("tolerancia_dias", "Tolerância (dias)", input_type="number", default_value=0),
            FormField("status", "Status", input_type="select", options=STATUS_OPTIONS,
                      default_value="ativo", required=True),
        ]

    def search_filters(self):
        return [SearchFilter("descricao", "Descrição", "descricao", page=self.FORM_KEY)]

    def validate(self, values):
        intervalo = _as_int(values.get("dias_intervalo"), "Intervalo")
        if intervalo is None or intervalo <= 0:
            raise ValueError("Intervalo deve ser maior que zero.")
        vencimento = _as_int(values.get("dia_vencimento"), "Dia de vencimento")
        if vencimento is not None and not 1 <= vencimento <= 31:
            raise ValueError("Dia de vencimento deve estar entre 1 e 31.")
        tolerancia = _as_int(values.get("tolerancia_dias"), "Tolerância")
        if tolerancia is not None and tolerancia < 0:
            raise ValueError("Tolerância não pode ser negativa.")

    def values_to_db(self, values):
        data = super().values_to_db(values)
        for key, label in (("dias_intervalo", "Intervalo"), ("dia_vencimento", "Dia de vencimento"),
                           ("tolerancia_dias", "Tolerância")):
            data[key] = _as_int(data.get(key), label)
        if data.get("tolerancia_dias") is None:
            data["tolerancia_dias"] = 0
        return data
