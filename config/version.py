# config/version.py
APP_NAME = "Painel de Cadastros"
APP_VERSION = "1.0.0"
