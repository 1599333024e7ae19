# -*- coding: utf-8 -*-
# config/settings.py
import os
import sys
import json
import logging

logger = logging.getLogger(__name__)

DEFAULT_DB_NAME = "painel.db"


# --- FUNÇÕES PARA GERENCIAR CAMINHOS (EXECUTÁVEL OU SCRIPT) ---
def get_base_dir():
    """Retorna o diretório onde o .exe está, ou o diretório do projeto."""
    if getattr(sys, 'frozen', False):
        return os.path.dirname(sys.executable)
    return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


BASE_DIR = get_base_dir()
SETTINGS_FILE = os.path.join(BASE_DIR, "settings.json")


def default_settings():
    return {
        "db_path": os.path.join(BASE_DIR, "database", DEFAULT_DB_NAME),
        "log_dir": os.path.join(BASE_DIR, "logs"),
        # Abaixo desta largura (px) a lista abre em modo cartão
        "card_breakpoint": 900,
        "confirm_timeout_ms": 3000,
        "toast_timeout_ms": 4000,
    }


def load_settings(settings_file=None):
    """
    Carrega o settings.json, criando um padrão se não existir.
    Chaves ausentes são completadas com os valores padrão.
    """
    settings_file = settings_file or SETTINGS_FILE
    defaults = default_settings()

    if not os.path.exists(settings_file):
        try:
            with open(settings_file, 'w', encoding='utf-8') as f:
                json.dump(defaults, f, indent=4)
        except OSError as e:
            logger.warning(f"Não foi possível criar {settings_file}: {e}")
        return defaults

    try:
        with open(settings_file, 'r', encoding='utf-8') as f:
            settings = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"settings.json inválido ({settings_file}), usando padrões: {e}")
        return defaults

    merged = dict(defaults)
    merged.update(settings)
    return merged


def get_setting(key, settings_file=None):
    return load_settings(settings_file)[key]
