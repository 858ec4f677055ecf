from __future__ import annotations

import sys
from pathlib import Path

from PySide6.QtGui import QColor, QFont, QPalette
from PySide6.QtWidgets import QApplication, QMessageBox, QStyleFactory
from sqlalchemy.exc import SQLAlchemyError

from assistia.config import get_settings
from assistia.errors import ConfigError
from assistia.infra.db import build_engine, build_session_factory, init_db
from assistia.infra.logging import setup_logging
from assistia.infra.repository import TaskRepository
from assistia.relay.webhook import build_client_relay
from assistia.services.task_service import TaskService
from assistia.ui.main_window import MainWindow
from assistia.ui.workers import TaskRunner


def _apply_dark_palette(app: QApplication) -> None:
    palette = QPalette()
    palette.setColor(QPalette.Window, QColor("#0F172A"))
    palette.setColor(QPalette.WindowText, QColor("#E6EDF3"))
    palette.setColor(QPalette.Base, QColor("#111827"))
    palette.setColor(QPalette.AlternateBase, QColor("#1B2230"))
    palette.setColor(QPalette.Text, QColor("#E6EDF3"))
    palette.setColor(QPalette.Button, QColor("#202A3B"))
    palette.setColor(QPalette.ButtonText, QColor("#E6EDF3"))
    palette.setColor(QPalette.ToolTipBase, QColor("#1B2230"))
    palette.setColor(QPalette.ToolTipText, QColor("#E6EDF3"))
    palette.setColor(QPalette.Highlight, QColor("#2563EB"))
    palette.setColor(QPalette.HighlightedText, QColor("#FFFFFF"))
    app.setPalette(palette)


QSS_PATH = Path(__file__).resolve().parent / "ui" / "styles.qss"


def load_styles(app: QApplication) -> None:
    if QSS_PATH.exists():
        app.setStyleSheet(QSS_PATH.read_text(encoding="utf-8"))


def main() -> None:
    settings = get_settings()
    setup_logging(settings)
    try:
        engine = build_engine(settings.require_database_url())
        init_db(engine)
    except (ConfigError, SQLAlchemyError) as exc:
        app = QApplication(sys.argv)
        QMessageBox.critical(None, "DB error", str(exc))
        return

    relay = build_client_relay(settings)
    service = TaskService(TaskRepository(build_session_factory(engine)), relay)

    app = QApplication(sys.argv)
    app.setStyle(QStyleFactory.create("Fusion"))
    _apply_dark_palette(app)
    app.setFont(QFont("Bahnschrift", 10))
    load_styles(app)

    window = MainWindow(service, relay, TaskRunner())
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
