# -*- coding: utf-8 -*-
# database/db.py
import sqlite3
import os
import json
import logging

from config.settings import load_settings
from config.permissions import all_permissions

logger = logging.getLogger(__name__)

# Tabelas com updated_at mantido por trigger
TABELAS_CADASTRO = ["grupos_acesso", "usuarios", "clientes", "ciclos_pagamento"]


def get_connection(db_path=None, settings_file=None):
    """Conecta ao banco definido no settings.json (ou ao caminho informado)."""
    if db_path is None:
        db_path = load_settings(settings_file)["db_path"]

    # Tenta criar o diretório se não existir (apenas para SQLite local)
    db_dir = os.path.dirname(db_path)
    if db_dir and not os.path.exists(db_dir):
        try:
            os.makedirs(db_dir, exist_ok=True)
        except OSError as e:
            logger.warning(f"Não foi possível criar o diretório do banco {db_dir}: {e}")

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


# --- FUNÇÃO PARA POPULAR DADOS INICIAIS ---
def populate_initial_data(cursor):
    """
    Popula o banco com os grupos e usuários essenciais na primeira execução.
    """
    cursor.execute("SELECT id FROM grupos_acesso LIMIT 1")
    if cursor.fetchone():
        return

    logger.info("Populando grupos de acesso e usuários padrão...")
    todas = all_permissions()
    somente_leitura = [p for p in todas if p.endswith(":listar") or p.endswith(":visualizar")]

    cursor.execute(
        "INSERT INTO grupos_acesso (id, nome, descricao, permissoes, status) VALUES (?, ?, ?, ?, ?)",
        (1, "Administradores", "Acesso total ao painel", json.dumps(todas), "ativo")
    )
    cursor.execute(
        "INSERT INTO grupos_acesso (id, nome, descricao, permissoes, status) VALUES (?, ?, ?, ?, ?)",
        (2, "Consulta", "Somente leitura", json.dumps(somente_leitura), "ativo")
    )
    cursor.executemany(
        "INSERT INTO usuarios (username, password_text, nome, grupo_id) VALUES (?, ?, ?, ?)",
        [
            ("admin", "admin", "Administrador", 1),
            ("consulta", "consulta", "Usuário de Consulta", 2),
        ]
    )
    cursor.executemany(
        "INSERT INTO ciclos_pagamento (descricao, dias_intervalo, dia_vencimento, tolerancia_dias, status) "
        "VALUES (?, ?, ?, ?, ?)",
        [
            ("Mensal", 30, 10, 5, "ativo"),
            ("Quinzenal", 15, None, 2, "ativo"),
            ("Anual", 365, 1, 15, "inativo"),
        ]
    )


def create_tables(db_path=None):
    """Cria as tabelas necessárias se não existirem."""
    conn = get_connection(db_path)
    cursor = conn.cursor()

    audit_cols = """
        created_at TEXT DEFAULT CURRENT_TIMESTAMP,
        updated_at TEXT DEFAULT CURRENT_TIMESTAMP
    """

    try:
        # --- 1. ACESSO ---
        cursor.execute(f"""
            CREATE TABLE IF NOT EXISTS grupos_acesso (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                nome TEXT UNIQUE NOT NULL,
                descricao TEXT,
                permissoes TEXT DEFAULT '[]',
                status TEXT DEFAULT 'ativo',
                {audit_cols}
            )
        """)
        cursor.execute(f"""
            CREATE TABLE IF NOT EXISTS usuarios (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                username TEXT UNIQUE NOT NULL,
                password_text TEXT NOT NULL,
                nome TEXT,
                is_active INTEGER DEFAULT 1,
                grupo_id INTEGER,
                {audit_cols},
                FOREIGN KEY (grupo_id) REFERENCES grupos_acesso (id) ON DELETE SET NULL
            )
        """)

        # --- 2. CADASTROS ---
        cursor.execute(f"""
            CREATE TABLE IF NOT EXISTS clientes (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                nome TEXT NOT NULL,
                documento TEXT,
                email TEXT,
                celular TEXT,
                status TEXT DEFAULT 'ativo',
                data_nascimento TEXT,
                cep TEXT, endereco TEXT, bairro TEXT, municipio TEXT, uf TEXT,
                {audit_cols}
            )
        """)
        cursor.execute(f"""
            CREATE TABLE IF NOT EXISTS ciclos_pagamento (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                descricao TEXT NOT NULL,
                dias_intervalo INTEGER NOT NULL,
                dia_vencimento INTEGER,
                tolerancia_dias INTEGER DEFAULT 0,
                status TEXT DEFAULT 'ativo',
                {audit_cols}
            )
        """)

        # Trigger para atualizar updated_at automaticamente
        for tabela in TABELAS_CADASTRO:
            trigger_name = f"trigger_update_{tabela}"
            cursor.execute(f"DROP TRIGGER IF EXISTS {trigger_name}")
            cursor.execute(f"""
                CREATE TRIGGER {trigger_name}
                AFTER UPDATE ON {tabela}
                FOR EACH ROW WHEN NEW.updated_at = OLD.updated_at
                BEGIN
                    UPDATE {tabela} SET updated_at = CURRENT_TIMESTAMP WHERE id = NEW.id;
                END;
            """)

        conn.commit()

        # Popula dados
        populate_initial_data(cursor)
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        logger.critical(f"Erro ao criar/atualizar as tabelas do banco: {e}", exc_info=True)
        raise
    finally:
        conn.close()


def load_user_permissions(user_id, db_path=None):
    """Conjunto de permissões do grupo do usuário (vazio se não houver grupo)."""
    conn = get_connection(db_path)
    try:
        row = conn.execute("""
            SELECT g.permissoes FROM usuarios u
            JOIN grupos_acesso g ON g.id = u.grupo_id
            WHERE u.id = ? AND g.status = 'ativo'
        """, (user_id,)).fetchone()
    finally:
        conn.close()

    if not row or not row["permissoes"]:
        return set()
    try:
        return set(json.loads(row["permissoes"]))
    except ValueError:
        logger.error(f"Permissões inválidas no grupo do usuário {user_id}: {row['permissoes']!r}")
        return set()


def authenticate(username, password, db_path=None):
    """Retorna a linha do usuário ativo ou None."""
    conn = get_connection(db_path)
    try:
        user = conn.execute(
            "SELECT * FROM usuarios WHERE username = ? AND is_active = 1", (username,)
        ).fetchone()
    finally:
        conn.close()
    if user and user["password_text"] == password:
        return dict(user)
    return None
