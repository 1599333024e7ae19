# modules/custom_dialogs.py
import logging
from PyQt5.QtWidgets import (
    QDialog, QLabel, QPushButton, QVBoxLayout, QHBoxLayout, QFrame,
    QDialogButtonBox, QFormLayout, QScrollArea, QWidget
)
from PyQt5.QtCore import Qt, QPoint, QTimer

from modules.form_fields import render_field, update_field_widget
from modules.row_browser_state import ADDING

logger = logging.getLogger(__name__)


class FramelessDialog(QDialog):
    """ Classe base para todos os diálogos personalizados 'sem borda' """
    def __init__(self, parent=None, title="Aviso", ok_text="OK", cancel_text="Cancelar"):
        super().__init__(parent)
        self.old_pos = None
        self._centered = False # Flag para centralizar apenas uma vez

        self.setWindowFlags(Qt.FramelessWindowHint | Qt.Dialog)
        self.setAttribute(Qt.WA_TranslucentBackground)
        self.setModal(True)

        self.setStyleSheet("""
            QDialog { background-color: transparent; }
            QFrame#main_frame {
                background-color: #f8f8fb;
                border-radius: 8px;
                border: 1px solid #c0c0d0;
            }
            QFrame#title_bar {
                background-color: #e0e8f0;
                border-top-left-radius: 8px;
                border-top-right-radius: 8px;
                border-bottom: 1px solid #c0c0d0;
                height: 35px;
            }
            QLabel#title_label { font-size: 14px; font-weight: bold; color: #333; padding-left: 10px; }
            QLabel#field_label { font-size: 13px; color: #333; font-weight: bold; }
            QLineEdit, QComboBox, QDateEdit, QListWidget {
                border: 1px solid #c0c0d0; border-radius: 5px;
                padding: 6px; background-color: white; font-size: 13px;
            }
            QLineEdit:disabled, QComboBox:disabled, QDateEdit:disabled { background-color: #e0e0e0; }
            QPushButton {
                padding: 8px 15px; font-weight: bold; border-radius: 6px;
                font-size: 13px;
            }
            QPushButton#okButton { background-color: #0078d7; color: white; }
            QPushButton#okButton:hover { background-color: #005fa3; }
            QPushButton#cancelButton { background-color: #95A5A6; color: white; }
            QPushButton#cancelButton:hover { background-color: #7F8C8D; }
        """)

        # --- Layout Principal ---
        self.main_frame = QFrame(self)
        self.main_frame.setObjectName("main_frame")
        self.main_layout = QVBoxLayout(self.main_frame)
        self.main_layout.setContentsMargins(1, 1, 1, 10)
        self.main_layout.setSpacing(10)

        # 1. Barra de Título
        self.title_bar = QFrame()
        self.title_bar.setObjectName("title_bar")
        title_layout = QHBoxLayout(self.title_bar)
        title_layout.setContentsMargins(10, 0, 10, 0)
        self.title_label = QLabel(title, objectName="title_label")
        title_layout.addWidget(self.title_label)
        title_layout.addStretch()
        self.main_layout.addWidget(self.title_bar)

        # 2. Área de Conteúdo (preenchida pelas subclasses)
        self.content_layout = QVBoxLayout()
        self.content_layout.setContentsMargins(15, 10, 15, 10)
        self.main_layout.addLayout(self.content_layout)

        # 3. Botões
        self.button_box = QDialogButtonBox()
        self.ok_button = self.button_box.addButton(ok_text, QDialogButtonBox.AcceptRole)
        self.ok_button.setObjectName("okButton")
        self.cancel_button = self.button_box.addButton(cancel_text, QDialogButtonBox.RejectRole)
        self.cancel_button.setObjectName("cancelButton")
        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)

        btn_layout = QHBoxLayout()
        btn_layout.setContentsMargins(15, 0, 15, 0)
        btn_layout.addStretch()
        btn_layout.addWidget(self.button_box)
        self.main_layout.addLayout(btn_layout)

        dialog_layout = QVBoxLayout(self)
        dialog_layout.setContentsMargins(0, 0, 0, 0)
        dialog_layout.addWidget(self.main_frame)

    def showEvent(self, event):
        """ Centraliza a janela no pai antes de mostrá-la. """
        super().showEvent(event)
        if self.parent() and not self._centered:
            parent_global_center = self.parent().mapToGlobal(self.parent().rect().center())
            self.move(parent_global_center - self.rect().center())
            self._centered = True

    # --- Métodos para Mover a Janela ---
    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton and self.title_bar.geometry().contains(event.pos()):
            self.old_pos = event.globalPos()

    def mouseMoveEvent(self, event):
        if self.old_pos and event.buttons() == Qt.LeftButton:
            delta = QPoint(event.globalPos() - self.old_pos)
            self.move(self.x() + delta.x(), self.y() + delta.y())
            self.old_pos = event.globalPos()

    def mouseReleaseEvent(self, event):
        self.old_pos = None


class RecordFormDialog(FramelessDialog):
    """
    Diálogo de adicionar/editar montado a partir dos campos do
    RowBrowserState. O estado (valores, validação, envio) fica no controlador;
    o diálogo só fecha quando o envio foi concluído.
    """
    def __init__(self, state, parent=None):
        read_only = state.form_read_only
        if state.dialog == ADDING:
            title = "Adicionar registro"
        elif read_only:
            title = "Visualizar registro"
        else:
            title = "Editar registro"
        super().__init__(parent, title, ok_text="Salvar",
                         cancel_text="Fechar" if read_only else "Cancelar")
        self.state = state
        self.setMinimumWidth(460)
        self.field_widgets = {}

        self.ok_button.setVisible(not read_only)
        self._build_fields()
        state.form_values_changed.connect(self._sync_widgets)

    def _build_fields(self):
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.NoFrame)
        container = QWidget()
        form_layout = QFormLayout(container)
        form_layout.setLabelAlignment(Qt.AlignLeft)

        values = self.state.form_values
        for field in self.state.fields:
            text = f"{field.label}: *" if field.required else f"{field.label}:"
            label = QLabel(text, objectName="field_label")
            widget = render_field(
                field,
                values.get(field.key),
                values,
                self.state.set_field_value,
                disabled=self.state.is_field_disabled(field),
                parent=container,
            )
            self.field_widgets[field.key] = widget
            form_layout.addRow(label, widget)

        scroll.setWidget(container)
        self.content_layout.addWidget(scroll)

    def _sync_widgets(self, values):
        if not self.state.dialog.is_open:
            return
        for field in self.state.fields:
            widget = self.field_widgets.get(field.key)
            if widget is not None and field.key in values:
                update_field_widget(field, widget, values[field.key])

    def accept(self):
        if self.state.submit():
            super().accept()

    def reject(self):
        if self.state.dialog.is_open:
            self.state.close_dialog()
        super().reject()


class Toast(QFrame):
    """ Notificação temporária (some sozinha ou no 'x'). """
    LEVEL_COLORS = {
        "info": "#2ECC71",
        "warning": "#F39C12",
        "error": "#e74c3c",
    }

    def __init__(self, parent, timeout_ms=4000):
        super().__init__(parent)
        self.setObjectName("toast")
        self.timeout_ms = timeout_ms

        layout = QHBoxLayout(self)
        layout.setContentsMargins(12, 8, 8, 8)
        self.message_label = QLabel()
        self.message_label.setWordWrap(True)
        self.message_label.setStyleSheet("color: white; font-weight: bold; background: transparent;")
        self.close_btn = QPushButton("×")
        self.close_btn.setFixedSize(24, 24)
        self.close_btn.setStyleSheet("background: transparent; color: white; border: none; font-size: 16px;")
        self.close_btn.clicked.connect(self.dismiss)
        layout.addWidget(self.message_label, 1)
        layout.addWidget(self.close_btn)

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self.dismiss)
        self.hide()

    @property
    def message(self):
        return self.message_label.text()

    def show_message(self, message, level="info"):
        color = self.LEVEL_COLORS.get(level, self.LEVEL_COLORS["info"])
        self.setStyleSheet(f"QFrame#toast {{ background-color: {color}; border-radius: 6px; }}")
        self.message_label.setText(message)
        self.adjustSize()
        self._reposition()
        self.show()
        self.raise_()
        self._timer.start(self.timeout_ms)
        logger.debug(f"Notificação ({level}): {message}")

    def dismiss(self):
        self._timer.stop()
        self.hide()

    def _reposition(self):
        parent = self.parentWidget()
        if not parent:
            return
        width = min(max(parent.width() - 40, 200), 520)
        self.setFixedWidth(width)
        self.adjustSize()
        x = (parent.width() - self.width()) // 2
        y = parent.height() - self.height() - 20
        self.move(max(x, 0), max(y, 0))
