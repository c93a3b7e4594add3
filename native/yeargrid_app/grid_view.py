from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from loguru import logger
from PySide6.QtCore import QRect, Qt, QTimer, Signal
from PySide6.QtGui import QMouseEvent, QPixmap
from PySide6.QtWidgets import QLabel, QWidget

from app.yeargrid.layout.columns import LayoutParameters
from app.yeargrid.layout.masonry import GridLayout, pack_grid
from app.yeargrid.media.aspect import AspectRatioSource
from app.yeargrid.slideshow import alt_text

TILE_STYLE = "background: #222; border: 0;"
SELECTED_STYLE = "background: #222; border: 2px solid #8ab4f8;"
ERROR_STYLE = "background: #3a1010; color: #c88; border: 0;"

LOAD_CHUNK = 10


class GridTile(QLabel):
    clicked = Signal(int)

    def __init__(self, index: int, path: Path, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.index = index
        self.path = path
        self.failed = False
        self._pixmap: Optional[QPixmap] = None
        self.setToolTip(alt_text(path.name))
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setStyleSheet(TILE_STYLE)

    def load(self) -> bool:
        pm = QPixmap(str(self.path))
        if pm.isNull():
            self.failed = True
            self.setText("×")
            self.setStyleSheet(ERROR_STYLE)
            return False
        self._pixmap = pm
        self._refresh_pixmap()
        return True

    def set_selected(self, selected: bool) -> None:
        if not self.failed:
            self.setStyleSheet(SELECTED_STYLE if selected else TILE_STYLE)

    def _refresh_pixmap(self) -> None:
        if self._pixmap is None or self.width() <= 0:
            return
        self.setPixmap(
            self._pixmap.scaled(
                self.size(),
                Qt.AspectRatioMode.KeepAspectRatioByExpanding,
                Qt.TransformationMode.SmoothTransformation,
            )
        )

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._refresh_pixmap()

    def mousePressEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton:
            self.clicked.emit(self.index)
        super().mousePressEvent(event)


class GridView(QWidget):
    """Absolute-positioned grid of square tiles for one group.

    Packing is re-run after resize bursts (trailing edge), after batches of
    tile loads, and whenever a new group is set.
    """

    tileClicked = Signal(int)

    def __init__(
        self,
        *,
        params: LayoutParameters,
        resize_debounce_ms: int = 100,
        relayout_batch: int = 50,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.params = params
        self.relayout_batch = max(1, relayout_batch)
        self.tiles: List[GridTile] = []
        self.layout_result = GridLayout()
        self._aspects: Optional[AspectRatioSource] = None
        self._group = ""
        self._selected = -1
        self._load_cursor = 0
        self._loaded = 0

        self._resize_timer = QTimer(self)
        self._resize_timer.setSingleShot(True)
        self._resize_timer.setInterval(resize_debounce_ms)
        self._resize_timer.timeout.connect(self.relayout)

        self._load_timer = QTimer(self)
        self._load_timer.setInterval(0)
        self._load_timer.timeout.connect(self._load_next_chunk)

    def set_group(self, images_dir: Path, group: str, filenames: List[str], aspects: AspectRatioSource) -> None:
        self._load_timer.stop()
        for tile in self.tiles:
            tile.deleteLater()
        self.tiles = []
        self._aspects = aspects
        self._group = group
        self._selected = -1
        self._load_cursor = 0
        self._loaded = 0

        for i, name in enumerate(filenames):
            tile = GridTile(i, images_dir / group / name, self)
            tile.clicked.connect(self.tileClicked)
            tile.show()
            self.tiles.append(tile)

        self.relayout()
        self._load_timer.start()

    def _load_next_chunk(self) -> None:
        end = min(self._load_cursor + LOAD_CHUNK, len(self.tiles))
        for tile in self.tiles[self._load_cursor:end]:
            if not tile.load():
                logger.warning("Could not load {}", tile.path)
            self._loaded += 1
            if self._loaded == len(self.tiles) or self._loaded % self.relayout_batch == 0:
                self.relayout()
        self._load_cursor = end
        if self._load_cursor >= len(self.tiles):
            self._load_timer.stop()

    def select(self, index: int) -> None:
        if 0 <= self._selected < len(self.tiles):
            self.tiles[self._selected].set_selected(False)
        self._selected = index
        if 0 <= index < len(self.tiles):
            self.tiles[index].set_selected(True)

    def relayout(self) -> None:
        if not self.tiles:
            return
        if self._aspects is None:
            ratios = [None] * len(self.tiles)
        else:
            ratios = self._aspects.ratios(self._group, [t.path.name for t in self.tiles])

        layout = pack_grid(self.width(), self.height(), ratios, self.params)
        if layout.is_empty:
            return
        self.layout_result = layout
        for placement in layout.placements:
            self.tiles[placement.index].setGeometry(
                QRect(
                    round(placement.x),
                    round(placement.y),
                    max(1, round(placement.width)),
                    max(1, round(placement.height)),
                )
            )

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._resize_timer.start()
