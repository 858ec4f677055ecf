from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QButtonGroup,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from assistia.domain.entities import TaskEntity
from assistia.domain.enums import ChatAction
from assistia.relay.webhook import Relay
from assistia.services.task_service import TaskService

from .chat_window import ChatWindow
from .state import ChatRoute, TaskBoardState
from .task_card import TaskCard
from .workers import TaskRunner

FILTERS = [
    ("All", "all"),
    ("To Do", "todo"),
    ("In Progress", "in-progress"),
    ("Completed", "completed"),
]

GRID_COLUMNS = 3


class MainWindow(QWidget):
    def __init__(self, service: TaskService, relay: Relay, runner: TaskRunner | None = None):
        super().__init__()
        self.setWindowTitle("Task Management")
        self.resize(1280, 760)

        self.service = service
        self.relay = relay
        self.board = TaskBoardState(service)
        self.cards: dict[str, TaskCard] = {}
        self._runner = runner or TaskRunner()

        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(12)

        header = QHBoxLayout()
        title = QLabel("Task Management")
        title.setProperty("class", "panel-title")
        self.status_label = QLabel("")
        self.status_label.setProperty("class", "stats-badge")

        chat_button = QPushButton("Assistia")
        chat_button.clicked.connect(lambda: self.open_chat(ChatRoute(action=ChatAction.CREATE)))

        header.addWidget(title)
        header.addStretch()
        header.addWidget(self.status_label)
        header.addWidget(chat_button)

        layout.addLayout(header)
        layout.addLayout(self._build_filters())

        self.scroll = QScrollArea()
        self.scroll.setWidgetResizable(True)
        self.scroll.setFrameShape(QFrame.NoFrame)
        self.scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.grid_container = QWidget()
        self.grid = QGridLayout(self.grid_container)
        self.grid.setSpacing(12)
        self.grid.setAlignment(Qt.AlignTop)
        self.empty_label = QLabel("No tasks found", self.grid_container)
        self.empty_label.setAlignment(Qt.AlignCenter)
        self.empty_label.setVisible(False)
        self.scroll.setWidget(self.grid_container)
        layout.addWidget(self.scroll, 1)

        self.refresh_tasks()

        QShortcut(QKeySequence("F5"), self, self.refresh_tasks)

    def _build_filters(self) -> QHBoxLayout:
        row = QHBoxLayout()
        self.filter_group = QButtonGroup(self)
        self.filter_group.setExclusive(True)
        for label, key in FILTERS:
            button = QPushButton(label)
            button.setCheckable(True)
            button.setProperty("variant", "secondary")
            button.setChecked(key == self.board.filter_key)
            button.clicked.connect(lambda _checked=False, key=key: self.on_filter_change(key))
            self.filter_group.addButton(button)
            row.addWidget(button)
        row.addStretch()
        return row

    def refresh_tasks(self) -> None:
        self.status_label.setText("Loading tasks...")
        self.board.begin_refresh()
        self._runner.submit(
            self.service.list_tasks,
            on_done=self._on_tasks_loaded,
            on_error=self._on_tasks_failed,
        )

    def _on_tasks_loaded(self, tasks: list[TaskEntity]) -> None:
        self.board.finish_refresh(tasks)
        self.status_label.setText(f"{len(self.board.tasks)} tasks")
        self._sync_cards()
        self.render_tasks()

    def _on_tasks_failed(self, error: Exception) -> None:
        self.board.finish_refresh(error=error)
        self.status_label.setText(self.board.error or "Failed to load tasks")
        self.render_tasks()

    def on_filter_change(self, filter_key: str) -> None:
        self.board.set_filter(filter_key)
        self.render_tasks()

    def _sync_cards(self) -> None:
        """Keep one card per task id; only ids new to the list get a card."""
        current = {task.id: task for task in self.board.tasks}
        for task_id in list(self.cards):
            if task_id not in current:
                card = self.cards.pop(task_id)
                self.grid.removeWidget(card)
                card.deleteLater()
        for task_id, task in current.items():
            card = self.cards.get(task_id)
            if card is None:
                self.cards[task_id] = TaskCard(
                    self.service,
                    task,
                    on_task_updated=self.refresh_tasks,
                    on_open_chat=self.open_chat,
                    runner=self._runner,
                    parent=self.grid_container,
                )
            else:
                card.show_task(task)

    def render_tasks(self) -> None:
        while self.grid.count():
            self.grid.takeAt(0)

        visible_ids = [task.id for task in self.board.visible_tasks if task.id in self.cards]
        for task_id, card in self.cards.items():
            card.setVisible(task_id in visible_ids)
        visible = [self.cards[task_id] for task_id in visible_ids]

        self.empty_label.setVisible(not visible)
        if not visible:
            self.grid.addWidget(self.empty_label, 0, 0, 1, GRID_COLUMNS)
            return

        for index, card in enumerate(visible):
            self.grid.addWidget(card, index // GRID_COLUMNS, index % GRID_COLUMNS)

    def open_chat(self, route: ChatRoute) -> None:
        dialog = ChatWindow(self.service, self.relay, route, runner=self._runner, parent=self)
        dialog.exec()
        self.refresh_tasks()
