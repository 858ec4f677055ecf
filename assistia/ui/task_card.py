from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, time, timezone

from PySide6.QtCore import QDate, Qt
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDateEdit,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from assistia.domain.entities import TaskEntity
from assistia.domain.enums import ChatAction, Priority, StoredStatus
from assistia.domain.status import priority_color, priority_label, status_color, status_label
from assistia.services.task_service import TaskService

from .state import ChatRoute, TaskEditorState
from .workers import TaskRunner

STATUS_OPTIONS = [
    ("To Do", StoredStatus.NOT_STARTED.value),
    ("In Progress", StoredStatus.PENDING.value),
    ("Completed", StoredStatus.COMPLETED.value),
]

PRIORITY_OPTIONS = [
    ("Low", Priority.LOW.value),
    ("Medium", Priority.MEDIUM.value),
    ("High", Priority.HIGH.value),
]


def format_date(value: datetime | None) -> str:
    return value.strftime("%b %d, %Y") if value else ""


def due_from_qdate(value: date) -> datetime:
    """Midnight UTC on the picked calendar day."""
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def _badge(text: str, color: str) -> QLabel:
    label = QLabel(text)
    label.setProperty("class", "badge")
    label.setStyleSheet(f"background-color: {color}; color: #FFFFFF; border-radius: 6px; padding: 2px 8px;")
    label.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Fixed)
    return label


def _select(combo: QComboBox, value: str) -> None:
    index = combo.findData(value)
    if index < 0:
        combo.addItem(value, value)
        index = combo.count() - 1
    combo.setCurrentIndex(index)


class TaskCard(QFrame):
    def __init__(
        self,
        service: TaskService,
        task: TaskEntity,
        on_task_updated: Callable[[], None] | None = None,
        on_open_chat: Callable[[ChatRoute], None] | None = None,
        runner: TaskRunner | None = None,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self.editor = TaskEditorState(service, task, on_task_updated)
        self._on_open_chat = on_open_chat
        self._runner = runner or TaskRunner()

        self.setObjectName("TaskCard")
        self.setAttribute(Qt.WA_StyledBackground, True)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 10, 12, 10)
        layout.setSpacing(6)

        self.title_label = QLabel()
        self.title_label.setProperty("class", "task-title")
        self.title_label.setWordWrap(True)

        chat_button = QPushButton("✎")
        chat_button.setProperty("variant", "ghost")
        chat_button.setToolTip("Update via assistant")
        chat_button.setFixedWidth(32)
        chat_button.clicked.connect(self.open_chat)

        self.edit_toggle = QPushButton("⋮")
        self.edit_toggle.setProperty("variant", "ghost")
        self.edit_toggle.setToolTip("Update task")
        self.edit_toggle.setFixedWidth(32)
        self.edit_toggle.setCheckable(True)
        self.edit_toggle.toggled.connect(self._toggle_editor)

        header = QHBoxLayout()
        header.addWidget(self.title_label, 1)
        header.addWidget(chat_button, 0, Qt.AlignTop)
        header.addWidget(self.edit_toggle, 0, Qt.AlignTop)

        self.description_label = QLabel()
        self.description_label.setProperty("class", "task-meta")
        self.description_label.setWordWrap(True)

        self.due_label = QLabel()
        self.due_label.setProperty("class", "task-meta")
        self.assignee_label = QLabel()
        self.assignee_label.setProperty("class", "task-meta")
        self.created_label = QLabel()
        self.created_label.setProperty("class", "task-meta")

        self.badges = QHBoxLayout()

        layout.addLayout(header)
        layout.addWidget(self.description_label)
        layout.addWidget(self.due_label)
        layout.addWidget(self.assignee_label)
        layout.addWidget(self.created_label)
        layout.addWidget(self._build_editor())
        layout.addLayout(self.badges)

        self.render()
        self.reload()

    def _build_editor(self) -> QWidget:
        self.editor_panel = QFrame()
        self.editor_panel.setObjectName("TaskEditor")
        panel_layout = QVBoxLayout(self.editor_panel)
        panel_layout.setContentsMargins(0, 6, 0, 0)
        panel_layout.setSpacing(4)

        self.status_combo = QComboBox()
        for label, value in STATUS_OPTIONS:
            self.status_combo.addItem(label, value)

        self.priority_combo = QComboBox()
        for label, value in PRIORITY_OPTIONS:
            self.priority_combo.addItem(label, value)

        self.assignee_input = QLineEdit()
        self.assignee_input.setPlaceholderText("Enter assignee")

        self.due_check = QCheckBox("Due date")
        self.due_input = QDateEdit()
        self.due_input.setCalendarPopup(True)
        self.due_check.toggled.connect(self.due_input.setEnabled)

        self.save_button = QPushButton("Save Changes")
        self.save_button.clicked.connect(self.save)

        panel_layout.addWidget(QLabel("Status"))
        panel_layout.addWidget(self.status_combo)
        panel_layout.addWidget(QLabel("Priority"))
        panel_layout.addWidget(self.priority_combo)
        panel_layout.addWidget(QLabel("Assigned To"))
        panel_layout.addWidget(self.assignee_input)
        panel_layout.addWidget(self.due_check)
        panel_layout.addWidget(self.due_input)
        panel_layout.addWidget(self.save_button)

        self.editor_panel.setVisible(False)
        return self.editor_panel

    def render(self) -> None:
        task = self.editor.task
        self.title_label.setText(task.title)
        self.description_label.setText(task.description)
        self.due_label.setText(format_date(task.due_date) or "No due date")
        self.assignee_label.setText(f"Assigned to: {task.assigned_to}" if task.assigned_to else "")
        self.assignee_label.setVisible(bool(task.assigned_to))
        self.created_label.setText(f"Created at: {format_date(task.created_at)}" if task.created_at else "")
        self.created_label.setVisible(bool(task.created_at))

        while self.badges.count():
            item = self.badges.takeAt(0)
            if item.widget():
                item.widget().deleteLater()
        self.badges.addWidget(_badge(status_label(task.status), status_color(task.status)))
        self.badges.addStretch()
        self.badges.addWidget(_badge(priority_label(task.priority), priority_color(task.priority)))

        self._populate_editor()

    def _populate_editor(self) -> None:
        draft = self.editor.draft
        _select(self.status_combo, draft.status)
        _select(self.priority_combo, draft.priority)
        self.assignee_input.setText(draft.assigned_to)
        self.due_check.setChecked(draft.due_date is not None)
        self.due_input.setEnabled(draft.due_date is not None)
        due = draft.due_date
        self.due_input.setDate(QDate(due.year, due.month, due.day) if due else QDate.currentDate())

    def _toggle_editor(self, checked: bool) -> None:
        self.editor_panel.setVisible(checked)

    def _set_editing_enabled(self, enabled: bool) -> None:
        for widget in (
            self.status_combo,
            self.priority_combo,
            self.assignee_input,
            self.due_check,
            self.save_button,
        ):
            widget.setEnabled(enabled)
        self.due_input.setEnabled(enabled and self.due_check.isChecked())
        self.save_button.setText("Save Changes" if enabled else "Saving...")

    def reload(self) -> None:
        """Fetch the latest row; the editor stays locked until it arrives."""
        self.edit_toggle.setEnabled(False)
        self._runner.submit(
            self.editor.fetch,
            on_done=self._on_loaded,
            on_error=self._on_load_failed,
        )

    def _on_loaded(self, latest: TaskEntity | None) -> None:
        self.editor.apply_loaded(latest)
        self.edit_toggle.setEnabled(True)
        self.render()

    def _on_load_failed(self, error: Exception) -> None:
        self.editor.apply_loaded(error=error)
        self.edit_toggle.setEnabled(True)

    def show_task(self, task: TaskEntity) -> None:
        """Take a fresh list snapshot unless the editor is open."""
        if self.edit_toggle.isChecked():
            return
        self.editor.sync(task)
        self.render()

    def save(self) -> None:
        due_date = None
        if self.due_check.isChecked():
            due_date = due_from_qdate(self.due_input.date().toPython())
        self.editor.edit(
            status=self.status_combo.currentData(),
            priority=self.priority_combo.currentData(),
            assigned_to=self.assignee_input.text().strip(),
            due_date=due_date,
        )
        update = self.editor.begin_save()
        if update is None:
            return
        self._set_editing_enabled(False)
        self._runner.submit(
            self.editor.commit,
            update,
            on_done=self._on_saved,
            on_error=self._on_save_failed,
        )

    def _on_saved(self, updated: TaskEntity) -> None:
        saved = self.editor.finish_save(updated)
        self._set_editing_enabled(True)
        if saved:
            self.edit_toggle.setChecked(False)
            self.render()

    def _on_save_failed(self, error: Exception) -> None:
        self.editor.finish_save(error=error)
        self._set_editing_enabled(True)

    def open_chat(self) -> None:
        if self._on_open_chat:
            self._on_open_chat(ChatRoute(action=ChatAction.UPDATE, task_id=self.editor.task.id))
