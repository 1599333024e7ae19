import json
import logging
import sqlite3

import pytest

from config.access_control import resolve_access_mode, is_hidden, is_read_only, can_edit
from config.permissions import all_permissions, get_screen, permission_label
from config.settings import load_settings, default_settings
from database import db
from database.db import create_tables, get_connection, load_user_permissions, authenticate


def test_load_settings_creates_file_with_defaults(tmp_path):
    path = tmp_path / "settings.json"
    settings = load_settings(str(path))
    assert path.exists()
    assert settings == default_settings()
    assert settings["card_breakpoint"] == 900


def test_load_settings_merges_missing_keys(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"db_path": "outro.db"}), encoding="utf-8")
    settings = load_settings(str(path))
    assert settings["db_path"] == "outro.db"
    assert settings["confirm_timeout_ms"] == 3000


def test_load_settings_invalid_json_falls_back(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{ quebrado", encoding="utf-8")
    assert load_settings(str(path)) == default_settings()


def test_catalog_permissions():
    perms = all_permissions()
    assert "cadastro:clientes:listar" in perms
    assert "admin:grupos-acesso:download" in perms
    assert len(perms) == len(set(perms))
    assert permission_label("cadastro:clientes:editar") == "Clientes: Editar"
    assert permission_label("desconhecida:x") == "desconhecida:x"
    assert get_screen("ciclos_pagamento")["base_permission"] == "contratos:ciclos-pagamento"


def test_create_tables_is_idempotent_and_seeds(db_path):
    create_tables(db_path)
    conn = get_connection(db_path)
    try:
        grupos = conn.execute("SELECT COUNT(*) FROM grupos_acesso").fetchone()[0]
        usuarios = conn.execute("SELECT username FROM usuarios ORDER BY id").fetchall()
    finally:
        conn.close()
    assert grupos == 2
    assert [u["username"] for u in usuarios] == ["admin", "consulta"]


def test_admin_has_every_permission(db_path):
    admin = authenticate("admin", "admin", db_path)
    assert admin is not None
    perms = load_user_permissions(admin["id"], db_path)
    assert perms == set(all_permissions())
    assert can_edit(resolve_access_mode(perms, "cadastro:clientes"))


def test_consulta_user_is_read_only(db_path):
    user = authenticate("consulta", "consulta", db_path)
    perms = load_user_permissions(user["id"], db_path)
    mode = resolve_access_mode(perms, "cadastro:clientes")
    assert not is_hidden(mode)
    assert is_read_only(mode)


def test_authenticate_rejects_wrong_password(db_path):
    assert authenticate("admin", "errada", db_path) is None
    assert authenticate("ninguem", "admin", db_path) is None


def test_inactive_group_has_no_permissions(db_path):
    conn = get_connection(db_path)
    conn.execute("UPDATE grupos_acesso SET status = 'inativo' WHERE id = 2")
    conn.commit()
    conn.close()
    user = authenticate("consulta", "consulta", db_path)
    assert load_user_permissions(user["id"], db_path) == set()


def test_create_tables_on_fresh_file(tmp_path):
    path = str(tmp_path / "novo" / "painel.db")
    create_tables(path)
    conn = get_connection(path)
    try:
        cols = [r["name"] for r in conn.execute("PRAGMA table_info(usuarios)").fetchall()]
        fks = conn.execute("PRAGMA foreign_key_list(usuarios)").fetchall()
    finally:
        conn.close()
    assert cols[-3:] == ["grupo_id", "created_at", "updated_at"]
    assert [(fk["table"], fk["from"]) for fk in fks] == [("grupos_acesso", "grupo_id")]


def test_create_tables_failure_is_logged_and_raised(tmp_path, monkeypatch, caplog):
    def broken_seed(cursor):
        raise sqlite3.OperationalError("disco cheio")

    monkeypatch.setattr(db, "populate_initial_data", broken_seed)
    with caplog.at_level(logging.CRITICAL, logger="database.db"):
        with pytest.raises(sqlite3.OperationalError):
            create_tables(str(tmp_path / "painel.db"))
    assert any("disco cheio" in r.getMessage() for r in caplog.records)
