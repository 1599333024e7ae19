# -*- coding: utf-8 -*-
# ui/main_window.py
import logging
from PyQt5.QtWidgets import (
    QMainWindow, QWidget, QHBoxLayout, QVBoxLayout,
    QPushButton, QLabel, QFrame, QMessageBox, QScrollArea,
    QLineEdit, QComboBox
)
from PyQt5.QtCore import Qt, QPoint, QPropertyAnimation

from config.access_control import resolve_access_mode, is_hidden
from config.permissions import PERMISSION_SCHEMA
from config.version import APP_NAME, APP_VERSION
from modules.search_context import SearchContext
from modules.clientes_page import ClientesPage
from modules.ciclos_pagamento_page import CiclosPagamentoPage
from modules.grupos_acesso_page import GruposAcessoPage

# Chave do catálogo -> classe da tela
SCREEN_CLASSES = {
    "clientes": ClientesPage,
    "ciclos_pagamento": CiclosPagamentoPage,
    "grupos_acesso": GruposAcessoPage,
}


# --- MENU CASCATA DA BARRA LATERAL ---
class CollapsibleMenu(QFrame):
    def __init__(self, title, accent_color, hover_color, parent=None):
        super().__init__(parent)
        self.setContentsMargins(0, 0, 0, 0)
        self.sub_buttons = []

        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(2)

        self.toggle_btn = QPushButton(title)
        self.toggle_btn.setCursor(Qt.PointingHandCursor)
        self.toggle_btn.setStyleSheet(f"""
            QPushButton {{
                background-color: {accent_color};
                color: white;
                border: 1px solid #000;
                border-bottom: 2px solid #101020;
                padding: 10px; text-align: left; font-size: 14px;
                border-radius: 6px;
            }}
            QPushButton:hover {{ background-color: {hover_color}; }}
        """)
        self.toggle_btn.clicked.connect(self.toggle)
        main_layout.addWidget(self.toggle_btn)

        self.content_area = QFrame()
        self.content_area.setStyleSheet("background-color: transparent; border: none;")
        self.content_layout = QVBoxLayout(self.content_area)
        self.content_layout.setContentsMargins(10, 0, 0, 0)
        self.content_layout.setSpacing(2)
        main_layout.addWidget(self.content_area)

        self.animation = QPropertyAnimation(self.content_area, b"maximumHeight")
        self.animation.setDuration(200)

        self.content_area.setMaximumHeight(0)
        self.is_expanded = False

    def add_sub_button(self, text, on_click_func):
        btn = QPushButton(text)
        btn.setCursor(Qt.PointingHandCursor)
        btn.clicked.connect(on_click_func)
        btn.setStyleSheet("""
            QPushButton {
                background-color: #3e3e5e;
                color: #f0f0f0; padding: 8px; font-size: 13px;
                text-align: left; border-radius: 5px;
                border-bottom: 1px solid #2a2a4a;
            }
            QPushButton:hover { background-color: #4f4f7a; }
        """)
        self.content_layout.addWidget(btn)
        self.sub_buttons.append(btn)
        return btn

    def toggle(self):
        """Expande ou recolhe o menu."""
        if self.is_expanded:
            self.animation.setStartValue(self.content_area.height())
            self.animation.setEndValue(0)
            self.is_expanded = False
        else:
            self.animation.setStartValue(0)
            self.animation.setEndValue(self.content_layout.sizeHint().height())
            self.is_expanded = True
        self.animation.start()


class MainWindow(QMainWindow):
    def __init__(self, user_id, permissions, username="", theme_color=None,
                 login_window=None, db_path=None, settings=None):
        super().__init__()
        self.logger = logging.getLogger(__name__)

        self.setWindowFlags(Qt.FramelessWindowHint)
        self.old_pos = None
        self.is_logging_out = False

        self.setWindowTitle(APP_NAME)
        self.setGeometry(100, 100, 1200, 700)

        self.current_user_id = user_id
        self.username = username
        self.permissions = set(permissions or ())
        self.theme_color = theme_color
        self.login_window = login_window
        self.db_path = db_path
        self.settings = settings

        # Busca compartilhada pelas telas (cada uma instala seus filtros)
        self.search = SearchContext(self)

        self.menus = {}
        self.screen_buttons = {}
        self.current_form_key = None
        self.current_content_widget = None

        self._setup_styles()
        self._build_ui()
        self._connect_search()
        self._set_initial_content()

    def _setup_styles(self):
        self.accent_color = self.theme_color if self.theme_color else "#0078d7"

        if len(self.accent_color) == 7:
            try:
                r = int(self.accent_color[1:3], 16) - 20
                g = int(self.accent_color[3:5], 16) - 20
                b = int(self.accent_color[5:7], 16) - 20
                self.hover_color = f"#{max(r,0):02x}{max(g,0):02x}{max(b,0):02x}"
            except ValueError:
                self.hover_color = "#3c3c5c"
        else:
            self.hover_color = "#3c3c5c"

        self.setStyleSheet(f"""
            QMainWindow {{ background-color: #f5f5f5; }}
            QFrame#sidebar QPushButton {{
                background-color: {self.accent_color};
                color: white;
                border: 1px solid #000;
                border-bottom: 2px solid #101020;
                padding: 10px; text-align: left; font-size: 14px;
                border-radius: 6px;
            }}
            QFrame#sidebar QPushButton:hover {{ background-color: {self.hover_color}; }}
            QFrame#sidebar {{
                background-color: #1e1e2f; min-width: 230px; max-width: 250px;
                border-right: 2px solid #2b2b3d;
            }}
            QScrollArea#sidebar_scroll_area {{ background-color: #1e1e2f; border: none; }}
            QWidget#sidebar_scroll_widget {{ background-color: #1e1e2f; }}
            QPushButton#logoutButton {{
                background-color: #e74c3c; color: white;
                font-weight: bold; font-size: 14px;
                padding: 10px; text-align: left;
                border-radius: 6px; border: 1px solid #c0392b;
            }}
            QPushButton#logoutButton:hover {{ background-color: #c0392b; }}
            #content_area {{ background-color: #f5f5f5; border-left: none; }}
            QFrame#custom_title_bar {{ background-color: #f5f5f5; height: 30px; }}
            QLineEdit#top_search, QComboBox#top_filter {{
                border: 1px solid #c0c0d0; border-radius: 5px;
                padding: 6px; background-color: white; font-size: 13px;
            }}
            QLabel#version_label {{ color: #888; font-weight: bold; padding-right: 15px; }}
            QPushButton#main_title_btn, QPushButton#main_close_btn {{
                background-color: transparent; color: #333;
                font-family: "Arial"; font-weight: bold; font-size: 14px;
                border: none; max-width: 30px; max-height: 30px;
            }}
            QPushButton#main_title_btn:hover {{ background-color: #e0e0e0; }}
            QPushButton#main_close_btn:hover {{ background-color: #e81123; color: white; }}
            QLabel#welcome_title {{
                font-size: 24px; color: #333;
                margin-top: 15px; font-weight: bold;
            }}
        """)

    def _build_ui(self):
        """Monta a estrutura principal da janela."""
        main_layout = QHBoxLayout()
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        # --- BARRA LATERAL ---
        self.sidebar = QFrame()
        self.sidebar.setObjectName("sidebar")

        sidebar_scroll_area = QScrollArea()
        sidebar_scroll_area.setObjectName("sidebar_scroll_area")
        sidebar_scroll_area.setWidgetResizable(True)
        sidebar_scroll_area.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)

        sidebar_scroll_widget = QWidget()
        sidebar_scroll_widget.setObjectName("sidebar_scroll_widget")
        sidebar_layout = QVBoxLayout(sidebar_scroll_widget)
        sidebar_layout.setContentsMargins(10, 10, 10, 10)
        sidebar_layout.setSpacing(5)
        sidebar_scroll_area.setWidget(sidebar_scroll_widget)

        sidebar_main_layout = QVBoxLayout(self.sidebar)
        sidebar_main_layout.setContentsMargins(0, 0, 0, 0)
        sidebar_main_layout.addWidget(sidebar_scroll_area)

        home_btn = QPushButton("Início")
        home_btn.setCursor(Qt.PointingHandCursor)
        home_btn.clicked.connect(self._set_initial_content)
        sidebar_layout.addWidget(home_btn)

        # Um menu por módulo do catálogo; só telas não ocultas para o usuário
        for module_name, module in PERMISSION_SCHEMA.items():
            menu = None
            for form_key, form in module["formularios"].items():
                if form_key not in SCREEN_CLASSES:
                    continue
                if is_hidden(resolve_access_mode(self.permissions, form["base_permission"])):
                    continue
                if menu is None:
                    menu = CollapsibleMenu(module_name, self.accent_color, self.hover_color)
                btn = menu.add_sub_button(
                    form["display_name"],
                    lambda _=False, k=form_key: self._set_module_content(k)
                )
                self.screen_buttons[form_key] = btn
            if menu is not None:
                self.menus[module_name] = menu
                sidebar_layout.addWidget(menu)

        sidebar_layout.addStretch()

        self.logout_btn = QPushButton("Logout")
        self.logout_btn.setObjectName("logoutButton")
        self.logout_btn.setCursor(Qt.PointingHandCursor)
        self.logout_btn.clicked.connect(self._prompt_logout)
        sidebar_layout.addWidget(self.logout_btn)

        # --- ÁREA DE CONTEÚDO ---
        self.content_area = QWidget()
        self.content_area.setObjectName("content_area")
        self.content_layout = QVBoxLayout(self.content_area)
        self.content_layout.setContentsMargins(10, 10, 10, 10)
        self.content_layout.setSpacing(0)

        self.custom_title_bar = QFrame()
        self.custom_title_bar.setObjectName("custom_title_bar")
        title_bar_layout = QHBoxLayout(self.custom_title_bar)
        title_bar_layout.setContentsMargins(0, 0, 5, 0)

        self.search_input = QLineEdit()
        self.search_input.setObjectName("top_search")
        self.search_input.setMinimumWidth(280)
        self.filter_combo = QComboBox()
        self.filter_combo.setObjectName("top_filter")
        title_bar_layout.addWidget(self.search_input)
        title_bar_layout.addWidget(self.filter_combo)
        title_bar_layout.addStretch()

        self.version_label = QLabel(f"{APP_NAME} v{APP_VERSION}")
        self.version_label.setObjectName("version_label")
        title_bar_layout.addWidget(self.version_label, 0, Qt.AlignRight)

        self.btn_minimize_main = QPushButton("_")
        self.btn_minimize_main.setObjectName("main_title_btn")
        self.btn_minimize_main.setToolTip("Minimizar")
        self.btn_minimize_main.clicked.connect(self.showMinimized)

        self.btn_maximize_main = QPushButton("☐")
        self.btn_maximize_main.setObjectName("main_title_btn")
        self.btn_maximize_main.setToolTip("Maximizar")
        self.btn_maximize_main.clicked.connect(self.toggle_maximize)

        self.btn_close_main = QPushButton("X")
        self.btn_close_main.setObjectName("main_close_btn")
        self.btn_close_main.setToolTip("Fechar")
        self.btn_close_main.clicked.connect(self.close)

        title_bar_layout.addWidget(self.btn_minimize_main)
        title_bar_layout.addWidget(self.btn_maximize_main)
        title_bar_layout.addWidget(self.btn_close_main)

        self.content_layout.addWidget(self.custom_title_bar)

        main_layout.addWidget(self.sidebar)
        main_layout.addWidget(self.content_area, 1)
        container = QWidget()
        container.setLayout(main_layout)
        self.setCentralWidget(container)

    # --- BUSCA (barra superior) ---

    def _connect_search(self):
        self.search_input.textChanged.connect(self.search.set_query)
        self.filter_combo.currentIndexChanged.connect(self._on_filter_combo_changed)
        self.search.query_changed.connect(self._on_query_changed)
        self.search.filters_changed.connect(self._on_filters_changed)
        self.search.selected_filter_changed.connect(self._on_selected_filter_changed)
        self.search.placeholder_changed.connect(self._on_placeholder_changed)
        self._on_filters_changed(self.search.filters)

    def _on_query_changed(self, text):
        if self.search_input.text() != text:
            self.search_input.blockSignals(True)
            self.search_input.setText(text)
            self.search_input.blockSignals(False)

    def _on_filters_changed(self, filters):
        self.filter_combo.blockSignals(True)
        self.filter_combo.clear()
        for f in filters:
            self.filter_combo.addItem(f.label, f.id)
        self.filter_combo.blockSignals(False)
        self.filter_combo.setVisible(bool(filters))
        self.search_input.setEnabled(self.current_form_key is not None)
        self._on_selected_filter_changed(self.search.selected_filter)

    def _on_selected_filter_changed(self, selected):
        index = self.filter_combo.findData(selected.id) if selected is not None else -1
        if index != self.filter_combo.currentIndex():
            self.filter_combo.blockSignals(True)
            self.filter_combo.setCurrentIndex(index)
            self.filter_combo.blockSignals(False)

    def _on_filter_combo_changed(self, index):
        if index >= 0:
            self.search.select_filter(self.filter_combo.itemData(index))

    def _on_placeholder_changed(self, text):
        self.search_input.setPlaceholderText(text or "Pesquisar")

    # --- JANELA ---

    def toggle_maximize(self):
        if self.isFullScreen():
            self.showNormal()
            self.btn_maximize_main.setText("☐")
        else:
            self.showFullScreen()
            self.btn_maximize_main.setText("❐")

    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton:
            if self.sidebar.isVisible() and event.pos().x() <= self.sidebar.width():
                self.old_pos = event.globalPos()
            elif event.pos().y() <= self.custom_title_bar.height():
                self.old_pos = event.globalPos()

    def mouseMoveEvent(self, event):
        if self.old_pos and event.buttons() == Qt.LeftButton:
            delta = QPoint(event.globalPos() - self.old_pos)
            self.move(self.x() + delta.x(), self.y() + delta.y())
            self.old_pos = event.globalPos()

    def mouseReleaseEvent(self, event):
        self.old_pos = None

    def closeEvent(self, event):
        if not self.is_logging_out:
            reply = QMessageBox.question(
                self,
                "Encerrar sessão",
                "Deseja realmente encerrar a sessão e voltar à tela de login?",
                QMessageBox.Yes | QMessageBox.No,
                QMessageBox.No
            )
            if reply != QMessageBox.Yes:
                event.ignore()
                return
            if self.login_window:
                self.login_window.show_again()

        self._clear_content()
        self.logger.info(f"Sessão encerrada. Usuário: {self.username} (ID: {self.current_user_id})")
        event.accept()
        self.deleteLater()

    def _prompt_logout(self):
        if self.is_logging_out:
            return
        reply = QMessageBox.question(self, "Logout",
                                     "Tem certeza que deseja fazer logout do sistema?",
                                     QMessageBox.Yes | QMessageBox.No, QMessageBox.No)
        if reply == QMessageBox.Yes:
            self.is_logging_out = True
            if self.login_window:
                self.login_window.show_again()
            self.close()

    # --- TROCA DE TELAS ---

    def _clear_content(self):
        widget = self.current_content_widget
        if widget is None:
            return
        # Os filtros da tela anterior não podem sobreviver à troca
        if hasattr(widget, "release"):
            widget.release()
        self.content_layout.removeWidget(widget)
        widget.hide()
        widget.deleteLater()
        self.current_content_widget = None
        self.current_form_key = None

    def _set_initial_content(self):
        self._clear_content()

        initial_widget = QWidget()
        initial_layout = QVBoxLayout(initial_widget)
        initial_layout.setAlignment(Qt.AlignCenter)
        welcome_label = QLabel(f"Bem-vindo ao {APP_NAME}")
        welcome_label.setObjectName("welcome_title")
        welcome_label.setAlignment(Qt.AlignCenter)
        initial_layout.addWidget(welcome_label)
        if not self.screen_buttons:
            hint = QLabel("Seu grupo de acesso não possui telas liberadas.")
            hint.setAlignment(Qt.AlignCenter)
            initial_layout.addWidget(hint)
        initial_layout.addStretch(1)

        self.content_layout.addWidget(initial_widget, 1)
        self.current_content_widget = initial_widget
        self.search_input.setEnabled(False)
        self.setWindowTitle(APP_NAME)

    def _set_module_content(self, form_key):
        self._clear_content()
        screen_class = SCREEN_CLASSES[form_key]
        try:
            module_widget = screen_class(
                self.current_user_id,
                permissions=self.permissions,
                search=self.search,
                db_path=self.db_path,
                settings=self.settings,
            )
        except Exception as e:
            self.logger.error(f"Erro ao carregar a tela {form_key}: {e}", exc_info=True)
            QMessageBox.critical(self, "Erro de Módulo",
                                 f"Não foi possível carregar a tela {form_key}.\n{e}")
            self._set_initial_content()
            return None

        self.content_layout.addWidget(module_widget, 1)
        module_widget.show()
        self.current_content_widget = module_widget
        self.current_form_key = form_key
        self.search_input.setEnabled(True)
        self.setWindowTitle(f"{APP_NAME} - {module_widget.windowTitle()}")
        self.logger.debug(f"Tela '{form_key}' carregada.")
        return module_widget

    def show_normal_and_raise(self):
        self.showNormal()
        self.activateWindow()
        self.raise_()
