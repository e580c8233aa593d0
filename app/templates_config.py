"""
Jinja2 templates for the queue page.
"""

import os
from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = os.path.join(os.path.dirname(__file__), "templates")

templates = Jinja2Templates(directory=TEMPLATES_DIR)

# Placeholder text shown for each draft field, in form order
FIELD_LABELS = {
    "placa_cavalo": "Placa Cavalo",
    "placa_carreta": "Placa Carreta",
    "motorista": "Motorista",
    "origem": "Origem",
    "destino": "Destino",
    "tipo": "Tipo",
    "prioridade": "Prioridade",
    "observacoes": "Observações",
}

templates.env.globals["field_labels"] = FIELD_LABELS
