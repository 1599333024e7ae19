# auth/login_window.py
import sqlite3
import logging
from PyQt5.QtWidgets import (
    QWidget, QVBoxLayout, QLabel, QLineEdit, QPushButton, QMessageBox, QFrame,
    QSpacerItem, QSizePolicy, QHBoxLayout
)
from PyQt5.QtCore import Qt, QPoint

from ui.main_window import MainWindow
from database.db import authenticate, load_user_permissions
from config.version import APP_VERSION, APP_NAME


class LoginWindow(QWidget):
    def __init__(self, db_path=None, settings=None):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.db_path = db_path
        self.settings = settings

        self.setWindowFlags(Qt.FramelessWindowHint)
        self.setAttribute(Qt.WA_TranslucentBackground)
        self.old_pos = None

        self.setWindowTitle(f"{APP_NAME} - Login")
        self.setFixedSize(760, 480)
        self.main_window = None

        self._setup_styles()
        self._build_ui()

    def _setup_styles(self):
        self.setStyleSheet("""
            QWidget#LoginWindow { background-color: transparent; }
            QFrame#left_pane {
                background-color: #1e1e2f;
                border-top-left-radius: 12px;
                border-bottom-left-radius: 12px;
            }
            QFrame#right_pane {
                background-color: #0078d7;
                border-top-right-radius: 12px;
                border-bottom-right-radius: 12px;
            }
            QPushButton#close_btn {
                background-color: transparent; color: #f8f8fb;
                font-family: "Arial"; font-weight: bold; font-size: 14px;
                border: none; max-width: 30px; max-height: 30px;
            }
            QPushButton#close_btn:hover { background-color: #e81123; }
            QLabel#title {
                font-size: 24px; font-weight: bold;
                color: #ffffff; padding-top: 10px;
            }
            QLabel#banner {
                font-size: 28px; font-weight: bold; color: #ffffff;
            }
            QLabel {
                color: #aaa; font-size: 12px;
                font-weight: bold; padding-left: 5px;
            }
            QLineEdit {
                border: 1px solid #3e3e5e;
                border-radius: 6px; padding: 10px;
                background-color: #2e2e4e;
                font-size: 14px; color: #ffffff;
            }
            QLineEdit:focus { border: 1px solid #0078d7; }
            QPushButton#login_btn {
                background-color: #0078d7; color: white;
                border-radius: 6px; padding: 10px;
                font-weight: bold; font-size: 14px;
            }
            QPushButton#login_btn:hover { background-color: #005fa3; }
            QLabel#version_label {
                color: #FFFFFF; font-size: 11px;
                font-weight: bold; background-color: transparent;
                padding-left: 30px; padding-bottom: 5px;
            }
        """)

    def _build_ui(self):
        """Formulário à esquerda, faixa com o nome do sistema à direita."""
        main_layout = QHBoxLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)
        self.setObjectName("LoginWindow")

        # --- PAINEL ESQUERDO (Formulário) ---
        self.left_pane = QFrame()
        self.left_pane.setObjectName("left_pane")
        left_layout = QVBoxLayout(self.left_pane)
        left_layout.setContentsMargins(10, 5, 10, 10)

        title_bar_layout = QHBoxLayout()
        title_bar_layout.addStretch()
        self.btn_close = QPushButton("X")
        self.btn_close.setObjectName("close_btn")
        self.btn_close.clicked.connect(self.close)
        title_bar_layout.addWidget(self.btn_close)
        left_layout.addLayout(title_bar_layout)
        left_layout.addSpacerItem(QSpacerItem(20, 40, QSizePolicy.Minimum, QSizePolicy.Expanding))

        form_layout = QVBoxLayout()
        form_layout.setContentsMargins(30, 0, 30, 0)
        form_layout.setSpacing(10)

        title = QLabel("Login")
        title.setObjectName("title")
        title.setAlignment(Qt.AlignCenter)
        form_layout.addWidget(title, 0, Qt.AlignCenter)

        form_layout.addWidget(QLabel("USUÁRIO"))
        self.user_input = QLineEdit()
        self.user_input.setPlaceholderText("Digite seu usuário")
        form_layout.addWidget(self.user_input)
        form_layout.addWidget(QLabel("SENHA"))
        self.pass_input = QLineEdit()
        self.pass_input.setPlaceholderText("Digite sua senha")
        self.pass_input.setEchoMode(QLineEdit.Password)
        form_layout.addWidget(self.pass_input)

        login_btn = QPushButton("Entrar")
        login_btn.setObjectName("login_btn")
        login_btn.clicked.connect(self.check_login)
        form_layout.addWidget(login_btn)

        left_layout.addLayout(form_layout)
        left_layout.addSpacerItem(QSpacerItem(20, 40, QSizePolicy.Minimum, QSizePolicy.Expanding))

        version_label = QLabel(f"{APP_NAME} v{APP_VERSION}")
        version_label.setObjectName("version_label")
        left_layout.addWidget(version_label, 0, Qt.AlignLeft | Qt.AlignBottom)

        # --- PAINEL DIREITO ---
        self.right_pane = QFrame()
        self.right_pane.setObjectName("right_pane")
        right_layout = QVBoxLayout(self.right_pane)
        banner = QLabel(APP_NAME)
        banner.setObjectName("banner")
        banner.setAlignment(Qt.AlignCenter)
        right_layout.addWidget(banner)

        main_layout.addWidget(self.left_pane, 45)
        main_layout.addWidget(self.right_pane, 55)

        self.user_input.returnPressed.connect(self.check_login)
        self.pass_input.returnPressed.connect(self.check_login)

    # --- Métodos de Mover a Janela ---
    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton and self.left_pane.geometry().contains(event.pos()):
            self.old_pos = event.globalPos()

    def mouseMoveEvent(self, event):
        if self.old_pos and event.buttons() == Qt.LeftButton:
            delta = QPoint(event.globalPos() - self.old_pos)
            self.move(self.x() + delta.x(), self.y() + delta.y())
            self.old_pos = event.globalPos()

    def mouseReleaseEvent(self, event):
        self.old_pos = None

    # --- Login com auditoria ---
    def check_login(self):
        user = self.user_input.text().strip()
        password = self.pass_input.text().strip()

        if not user or not password:
            QMessageBox.warning(self, "Erro", "Usuário e senha são obrigatórios.")
            return None

        try:
            user_data = authenticate(user, password, self.db_path)
            if not user_data:
                self.logger.warning(f"Tentativa de login falhou. Usuário: {user} - Senha incorreta ou usuário não encontrado.")
                QMessageBox.warning(self, "Erro", "Usuário ou senha inválidos!")
                return None

            permissions = load_user_permissions(user_data["id"], self.db_path)
        except sqlite3.Error as e:
            self.logger.critical(f"Erro crítico de banco de dados durante o login: {e}", exc_info=True)
            QMessageBox.critical(self, "Erro de Banco de Dados", f"Erro ao tentar logar: {e}")
            return None

        if not permissions:
            self.logger.warning(f"Tentativa de login falhou. Usuário {user} autenticou, mas não tem grupo de acesso ativo.")
            QMessageBox.critical(self, "Erro Crítico",
                                 "Usuário autenticado, mas sem grupo de acesso ativo.")
            return None

        self.logger.info(f"Login efetuado com sucesso. Usuário: {user} (ID: {user_data['id']})")

        if self.main_window and self.main_window.isVisible():
            self.main_window.activateWindow()
            return self.main_window

        self.hide()
        self.main_window = MainWindow(
            user_data["id"],
            permissions,
            username=user,
            login_window=self,
            db_path=self.db_path,
            settings=self.settings,
        )
        self.main_window.show()
        return self.main_window

    def show_again(self):
        """Chamado pela MainWindow para reexibir o login após o logout."""
        self.user_input.clear()
        self.pass_input.clear()
        self.main_window = None
        self.show()
        self.user_input.setFocus()
