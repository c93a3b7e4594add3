from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger
from PySide6.QtCore import QObject, QSettings, Qt, QTimer, Signal
from PySide6.QtGui import QAction, QActionGroup, QPixmap
from PySide6.QtWidgets import (
    QApplication,
    QLabel,
    QMainWindow,
    QMessageBox,
    QVBoxLayout,
    QWidget,
)

from app.yeargrid.config import AppConfig, load_config
from app.yeargrid.errors import YearGridError
from app.yeargrid.manifest.store import ManifestStore
from app.yeargrid.media.aspect import AspectRatioSource
from app.yeargrid.slideshow import SlideshowSession, alt_text, year_label
from app.yeargrid.utils.logging import init_logging
from native.yeargrid_app.grid_view import GridView


class SlideshowController(QObject):
    """Binds a SlideshowSession to a QTimer."""

    indexChanged = Signal(int)

    def __init__(self, session: SlideshowSession, interval_ms: int, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self.session = session
        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._tick)

    def start(self) -> None:
        self.session.start()
        self._timer.start()
        self.indexChanged.emit(self.session.index)

    def stop(self) -> None:
        self._timer.stop()
        self.session.stop()

    def jump_to(self, index: int) -> None:
        self.session.jump_to(index)
        if self.session.take_restart_request() and self.session.running:
            self._timer.start()
        self.indexChanged.emit(index)

    def _tick(self) -> None:
        self.indexChanged.emit(self.session.advance())


class MainWindow(QMainWindow):
    def __init__(self, config: AppConfig, initial_group: str | None = None) -> None:
        super().__init__()
        self.setWindowTitle("YearGrid")
        self.resize(1200, 800)

        self.config = config
        self.images_dir = Path(config.manifest.images_dir)
        self.settings = QSettings("YearGrid", "YearGrid")
        self.store = ManifestStore(config.manifest.manifest_path)
        self.aspects = AspectRatioSource(self.images_dir)
        self.session = SlideshowSession()
        self.slideshow = SlideshowController(self.session, config.slideshow.interval_ms, self)
        self.slideshow.indexChanged.connect(self._show_index)

        self._build_layout()
        self._year_menu = self.menuBar().addMenu("&Year")

        self._poll_timer = QTimer(self)
        self._poll_timer.setInterval(config.viewer.manifest_poll_ms)
        self._poll_timer.timeout.connect(self._poll_manifest)

        try:
            self.store.load()
        except YearGridError as e:
            self._show_error(str(e))
            return

        group = initial_group or str(self.settings.value("viewer/last_group", "", type=str) or "") or None
        self.load_group(group)
        self._poll_timer.start()

    def _build_layout(self) -> None:
        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(4)

        self.year_label = QLabel()
        self.year_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.year_label)

        self.slide = QLabel()
        self.slide.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.slide.setMinimumHeight(200)
        layout.addWidget(self.slide, 1)

        self.grid = GridView(
            params=self.config.layout,
            resize_debounce_ms=self.config.viewer.resize_debounce_ms,
            relayout_batch=self.config.viewer.relayout_batch,
        )
        self.grid.tileClicked.connect(self.slideshow.jump_to)
        layout.addWidget(self.grid, 1)

        self.setCentralWidget(central)

    def _rebuild_year_menu(self) -> None:
        self._year_menu.clear()
        group_actions = QActionGroup(self)
        for gid in self.store.groups():
            action = QAction(year_label(gid), self, checkable=True)
            action.setChecked(gid == self.session.group)
            action.triggered.connect(lambda _checked=False, g=gid: self.load_group(g))
            group_actions.addAction(action)
            self._year_menu.addAction(action)

    def load_group(self, group: str | None) -> None:
        self.slideshow.stop()
        try:
            shown = self.session.load(self.store.manifest, group)
        except YearGridError as e:
            self._show_error(str(e))
            return
        if group is not None and shown != group:
            logger.info("Year {} not found, showing {}", group, shown)

        self.settings.setValue("viewer/last_group", shown)
        self.year_label.setText(year_label(shown))
        self.grid.set_group(self.images_dir, shown, self.session.images, self.aspects)
        self._rebuild_year_menu()
        self.slideshow.start()

    def _show_index(self, index: int) -> None:
        path = self.session.current_path(self.images_dir)
        pm = QPixmap(str(path))
        if pm.isNull():
            self.slide.setText(alt_text(path.name))
        else:
            self.slide.setPixmap(
                pm.scaled(
                    self.slide.size(),
                    Qt.AspectRatioMode.KeepAspectRatio,
                    Qt.TransformationMode.SmoothTransformation,
                )
            )
        self.slide.setToolTip(alt_text(path.name))
        self.grid.select(index)

    def _poll_manifest(self) -> None:
        if self.store.refresh():
            logger.info("Manifest updated, reloading...")
            self.aspects.forget()
            self.load_group(self.session.group)

    def _show_error(self, message: str) -> None:
        logger.error("{}", message)
        QMessageBox.warning(self, "YearGrid", f"{message}\n\nRun: yeargrid generate")

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._poll_timer.stop()
        self.slideshow.stop()
        super().closeEvent(event)


def main() -> None:
    parser = argparse.ArgumentParser(description="YearGrid slideshow and grid viewer")
    parser.add_argument("--config", help="JSON config file with overrides")
    parser.add_argument("--year", help="Group to show first")
    args, qt_args = parser.parse_known_args()

    init_logging()
    try:
        config = load_config(args.config)
    except YearGridError as e:
        logger.error("{}", e)
        sys.exit(1)

    app = QApplication([sys.argv[0], *qt_args])
    app.setOrganizationName("YearGrid")
    app.setApplicationName("YearGrid")

    win = MainWindow(config, args.year)
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
