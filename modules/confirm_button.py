# -*- coding: utf-8 -*-
# modules/confirm_button.py
import time
import logging
from PyQt5.QtWidgets import QPushButton
from PyQt5.QtCore import QTimer, pyqtSignal

logger = logging.getLogger(__name__)

DEFAULT_CONFIRM_TIMEOUT_MS = 3000


class ConfirmationLatch:
    """
    Primeira ativação arma; a segunda dentro da janela confirma.
    Depois da janela, a próxima ativação arma de novo.
    """
    def __init__(self, timeout_s=DEFAULT_CONFIRM_TIMEOUT_MS / 1000.0, clock=time.monotonic):
        self.timeout_s = timeout_s
        self.clock = clock
        self._armed_at = None

    @property
    def armed(self):
        if self._armed_at is None:
            return False
        if self.clock() - self._armed_at >= self.timeout_s:
            self._armed_at = None
            return False
        return True

    def press(self):
        """Retorna True quando a ação deve ser executada."""
        if self.armed:
            self._armed_at = None
            return True
        self._armed_at = self.clock()
        return False

    def disarm(self):
        self._armed_at = None


class ConfirmDeleteButton(QPushButton):
    """Botão de exclusão que exige um segundo clique em até 3 segundos."""
    confirmed = pyqtSignal()

    IDLE_TEXT = "Excluir"
    ARMED_TEXT = "Confirmar exclusão?"

    def __init__(self, parent=None, timeout_ms=DEFAULT_CONFIRM_TIMEOUT_MS, clock=time.monotonic):
        super().__init__(self.IDLE_TEXT, parent)
        self.latch = ConfirmationLatch(timeout_ms / 1000.0, clock)

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(timeout_ms)
        self._timer.timeout.connect(self.disarm)

        self.setObjectName("deleteButton")
        self.setToolTip("Excluir")
        self.clicked.connect(self._on_clicked)

    @property
    def armed(self):
        return self.latch.armed

    def _on_clicked(self):
        if self.latch.press():
            self._timer.stop()
            self._apply_idle_style()
            self.confirmed.emit()
        else:
            self._timer.start()
            self._apply_armed_style()

    def disarm(self):
        self.latch.disarm()
        self._timer.stop()
        self._apply_idle_style()

    def _apply_armed_style(self):
        self.setText(self.ARMED_TEXT)
        self.setToolTip("Clique novamente para excluir")
        self.setStyleSheet("background-color: #c0392b; color: white; font-weight: bold;")

    def _apply_idle_style(self):
        self.setText(self.IDLE_TEXT)
        self.setToolTip("Excluir")
        self.setStyleSheet("")

    def focusOutEvent(self, event):
        self.disarm()
        super().focusOutEvent(event)

    def hideEvent(self, event):
        self.disarm()
        super().hideEvent(event)
