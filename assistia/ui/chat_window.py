from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from assistia.relay.webhook import Relay
from assistia.services.task_service import TaskService

from .state import ChatMessage, ChatRoute, ChatSession
from .workers import TaskRunner


class ChatWindow(QDialog):
    def __init__(
        self,
        service: TaskService,
        relay: Relay,
        route: ChatRoute,
        runner: TaskRunner | None = None,
        parent=None,
    ):
        super().__init__(parent)
        self.service = service
        self.session = ChatSession(service, relay, route)
        self._runner = runner or TaskRunner()
        self.setObjectName("ChatWindow")
        self.resize(640, 720)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(8)

        self.title_label = QLabel()
        self.title_label.setProperty("class", "panel-title")

        self.scroll = QScrollArea()
        self.scroll.setWidgetResizable(True)
        self.scroll.setFrameShape(QFrame.NoFrame)
        self.scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)

        container = QWidget()
        self.messages_layout = QVBoxLayout(container)
        self.messages_layout.setContentsMargins(0, 0, 0, 0)
        self.messages_layout.setSpacing(8)
        self.messages_layout.addStretch()
        self.scroll.setWidget(container)

        self.input = QLineEdit()
        self.input.setPlaceholderText("Type your message...")
        self.input.returnPressed.connect(self.send_message)

        self.send_button = QPushButton("Send")
        self.send_button.clicked.connect(self.send_message)

        input_row = QHBoxLayout()
        input_row.addWidget(self.input, 1)
        input_row.addWidget(self.send_button)

        layout.addWidget(self.title_label)
        layout.addWidget(self.scroll, 1)
        layout.addLayout(input_row)

        self.setWindowTitle(self.session.title)
        self.title_label.setText(self.session.title)
        if self.session.needs_task_title:
            self._set_sending(True)
            self._runner.submit(
                self.service.get_task_title,
                self.session.route.task_id,
                on_done=self._on_seeded,
                on_error=self._on_title_failed,
            )
        else:
            self._on_seeded()

    def _on_seeded(self, task_name: str = "") -> None:
        self.session.seed(task_name)
        self._set_sending(False)
        self.input.setText(self.session.input_text)
        for message in self.session.messages:
            self._add_bubble(message)

    def _on_title_failed(self, _error: Exception) -> None:
        self._on_seeded("")

    def send_message(self) -> None:
        rendered = len(self.session.messages)
        payload = self.session.begin_send(self.input.text())
        if payload is None:
            return
        self._set_sending(True)
        self.input.setText(self.session.input_text)
        for message in self.session.messages[rendered:]:
            self._add_bubble(message)
        self._runner.submit(
            self.session.deliver,
            payload,
            on_done=self._on_reply,
            on_error=self._on_reply_failed,
        )

    def _on_reply(self, response) -> None:
        self._set_sending(False)
        self._add_bubble(self.session.finish_send(response))

    def _on_reply_failed(self, error: Exception) -> None:
        self._set_sending(False)
        self._add_bubble(self.session.finish_send(error=error))

    def _set_sending(self, sending: bool) -> None:
        self.input.setEnabled(not sending)
        self.send_button.setEnabled(not sending)

    def _add_bubble(self, message: ChatMessage) -> None:
        bubble = QLabel(message.content)
        bubble.setWordWrap(True)
        bubble.setTextInteractionFlags(Qt.TextSelectableByMouse)
        bubble.setProperty("class", f"chat-{message.sender}")
        bubble.setMaximumWidth(int(self.width() * 0.8))

        row = QHBoxLayout()
        if message.sender == "user":
            row.addStretch()
            row.addWidget(bubble)
        else:
            row.addWidget(bubble)
            row.addStretch()
        self.messages_layout.insertLayout(self.messages_layout.count() - 1, row)
        scrollbar = self.scroll.verticalScrollBar()
        scrollbar.setValue(scrollbar.maximum())
