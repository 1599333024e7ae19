# main.py
import sys
import os
import logging
import logging.handlers
from PyQt5.QtWidgets import QApplication

from auth.login_window import LoginWindow
from config.settings import load_settings
from config.version import APP_NAME, APP_VERSION
from database.db import create_tables


def setup_logging(log_dir):
    """Configura o sistema de logging para salvar em arquivos diários rotativos."""
    os.makedirs(log_dir, exist_ok=True)

    log_filename = os.path.join(log_dir, "main.log")
    log_format = '%(asctime)s - %(levelname)s - [%(name)s:%(filename)s:%(lineno)d] - %(message)s'
    formatter = logging.Formatter(log_format)

    handler = logging.handlers.TimedRotatingFileHandler(
        log_filename,
        when='midnight',
        backupCount=30,
        encoding='utf-8'
    )
    handler.setFormatter(formatter)
    handler.suffix = "%Y-%m-%d"

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)
    logger.addHandler(console_handler)

    logging.info("=" * 50)
    logging.info("Sistema de Logging (Rotativo) Iniciado")
    logging.info(f"Salvando log principal em: {log_filename}")
    logging.info("=" * 50)
    return log_filename


def main():
    """Função principal para iniciar o aplicativo."""
    settings = load_settings()
    setup_logging(settings["log_dir"])

    try:
        logging.info(f"Iniciando {APP_NAME} v{APP_VERSION}...")

        # --- 1. Garante que as tabelas do banco de dados existam ---
        logging.debug(f"Verificando/Criando tabelas em {settings['db_path']}...")
        create_tables(settings["db_path"])
        logging.debug("Tabelas verificadas com sucesso.")

        # --- 2. Inicializa a aplicação PyQt ---
        app = QApplication(sys.argv)
        app.setStyle("Fusion")

        login = LoginWindow(db_path=settings["db_path"], settings=settings)
        login.show()
        logging.info("Janela de login exibida. Aguardando autenticação.")

        return app.exec_()

    except Exception as e:
        logging.critical(f"Erro fatal não tratado ao iniciar a aplicação: {e}", exc_info=True)
        return 1


if __name__ == '__main__':
    sys.exit(main())
