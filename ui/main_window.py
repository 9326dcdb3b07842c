# ui/main_window.py
from pathlib import Path
from typing import Dict, List, Optional

from PySide6.QtCore import Qt, QSize, QTimer
from PySide6.QtGui import QIcon, QPixmap
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QPushButton, QFrame, QComboBox, QTabWidget,
    QTableWidget, QTableWidgetItem, QHeaderView, QAbstractItemView,
)

from core.config import PERIODS, REFRESH_CHOICES
from core.models import ArtistEntry, SnapshotEvent, TrackEntry, usable_artwork
from .formatting import NOW_PLAYING, when_text
from .worker import ArtworkLoader, SyncWorker

PRIMARY = "#7289da"
BG = "#1e2030"

ART_COL = 0
TRACK_TITLE, TRACK_ARTIST, TRACK_ALBUM, TRACK_WHEN = range(1, 5)
ARTIST_NAME, ARTIST_PLAYS = range(1, 3)


class MainWindow(QMainWindow):
    def __init__(self, worker: Optional[SyncWorker] = None):
        super().__init__()

        self.setWindowTitle("Scrobble Dash")
        self.resize(900, 640)

        self.worker = worker or SyncWorker(parent=self)
        self.loader = ArtworkLoader(parent=self)
        self._pixmaps: Dict[str, QPixmap] = {}
        self._tracks: List[TrackEntry] = []
        self._artists: List[ArtistEntry] = []
        self._now_playing: Optional[TrackEntry] = None
        self._icon = self._load_app_icon()

        root = QWidget()
        root.setObjectName("Root")
        layout = QVBoxLayout(root)
        layout.setContentsMargins(16, 16, 16, 12)
        layout.setSpacing(10)

        layout.addLayout(self._build_top_bar())

        self.tabs = QTabWidget()
        self.tabs.addTab(self._build_tracks_tab(), "Recent Tracks")
        self.tabs.addTab(self._build_artists_tab(), "Top Artists")
        layout.addWidget(self.tabs, 1)

        layout.addWidget(self._build_now_playing_bar())

        self.status_label = QLabel("")
        self.status_label.setObjectName("Status")
        layout.addWidget(self.status_label)

        self.setCentralWidget(root)
        self._apply_styles()
        if self._icon:
            self.setWindowIcon(self._icon)

        # Relative "When" column drifts; repaint it on the same cadence as auto-refresh.
        self._relative_tick = QTimer(self)
        self._relative_tick.setInterval(20_000)
        self._relative_tick.timeout.connect(self._refresh_when_column)
        self._relative_tick.start()

        self._connect_worker()

    # ==================================================
    # TOP BAR
    # ==================================================

    def _build_top_bar(self):
        bar = QHBoxLayout()
        bar.setSpacing(8)

        title = QLabel("Scrobble Dash")
        title.setObjectName("Title")
        bar.addWidget(title)
        bar.addStretch()

        bar.addWidget(QLabel("Auto-refresh"))
        self.interval_box = QComboBox()
        for secs in REFRESH_CHOICES:
            self.interval_box.addItem(f"{secs}s", secs)
        self.interval_box.setCurrentIndex(REFRESH_CHOICES.index(self.worker.core.scheduler.interval))
        self.interval_box.currentIndexChanged.connect(self._on_interval_changed)
        bar.addWidget(self.interval_box)

        bar.addWidget(QLabel("Period"))
        self.period_box = QComboBox()
        for period in PERIODS:
            self.period_box.addItem(period, period)
        self.period_box.setCurrentIndex(PERIODS.index(self.worker.core.period))
        self.period_box.currentIndexChanged.connect(self._on_period_changed)
        bar.addWidget(self.period_box)

        self.refresh_btn = QPushButton("Refresh")
        self.refresh_btn.setObjectName("CTA")
        self.refresh_btn.clicked.connect(self._on_refresh_clicked)
        bar.addWidget(self.refresh_btn)
        return bar

    # ==================================================
    # TABLES
    # ==================================================

    def _make_table(self, headers: List[str], art_size: int) -> QTableWidget:
        table = QTableWidget(0, len(headers))
        table.setHorizontalHeaderLabels(headers)
        table.verticalHeader().setVisible(False)
        table.verticalHeader().setDefaultSectionSize(art_size + 6)
        table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        table.setSelectionBehavior(QAbstractItemView.SelectRows)
        table.setIconSize(QSize(art_size, art_size))
        header = table.horizontalHeader()
        header.setSectionResizeMode(QHeaderView.Stretch)
        header.setSectionResizeMode(ART_COL, QHeaderView.Fixed)
        table.setColumnWidth(ART_COL, art_size + 12)
        return table

    def _build_tracks_tab(self):
        page = QWidget()
        v = QVBoxLayout(page)
        v.setContentsMargins(0, 8, 0, 0)

        self.tracks_table = self._make_table(["", "Track", "Artist", "Album", "When"], 38)
        v.addWidget(self.tracks_table, 1)

        row = QHBoxLayout()
        self.page_label = QLabel("")
        self.page_label.setObjectName("Muted")
        row.addWidget(self.page_label)
        row.addStretch()
        self.load_more_btn = QPushButton("Load more")
        self.load_more_btn.setEnabled(False)
        self.load_more_btn.clicked.connect(self._on_load_more_clicked)
        row.addWidget(self.load_more_btn)
        v.addLayout(row)
        return page

    def _build_artists_tab(self):
        page = QWidget()
        v = QVBoxLayout(page)
        v.setContentsMargins(0, 8, 0, 0)
        self.artists_table = self._make_table(["", "Artist", "Plays"], 32)
        v.addWidget(self.artists_table, 1)
        return page

    # ==================================================
    # NOW PLAYING BAR
    # ==================================================

    def _build_now_playing_bar(self):
        bar = QFrame()
        bar.setObjectName("NowBar")
        h = QHBoxLayout(bar)
        h.setContentsMargins(12, 8, 12, 8)
        h.setSpacing(12)

        self.np_art = QLabel("♪")
        self.np_art.setObjectName("NowArt")
        self.np_art.setFixedSize(48, 48)
        self.np_art.setAlignment(Qt.AlignCenter)

        text = QVBoxLayout()
        text.setSpacing(2)
        self.np_title = QLabel("")
        self.np_title.setObjectName("SongTitle")
        self.np_artist = QLabel("")
        self.np_artist.setObjectName("ArtistName")
        text.addWidget(self.np_title)
        text.addWidget(self.np_artist)

        self.np_status = QLabel(NOW_PLAYING)
        self.np_status.setObjectName("PlayingLine")

        h.addWidget(self.np_art)
        h.addLayout(text, 1)
        h.addWidget(self.np_status)

        bar.setVisible(False)
        self.now_bar = bar
        return bar

    # ==================================================
    # WORKER HOOKUP
    # ==================================================

    def _connect_worker(self):
        self.worker.status.connect(self._on_worker_status)
        self.worker.tracks_changed.connect(self._on_tracks_changed)
        self.worker.artists_changed.connect(self._on_artists_changed)
        self.worker.artwork_resolved.connect(self._on_artwork_resolved)
        self.worker.now_playing.connect(self._on_now_playing)
        self.loader.loaded.connect(self._on_image_loaded)

        if not self.worker.enabled:
            self.refresh_btn.setEnabled(False)
            self.load_more_btn.setEnabled(False)

        self.worker.start()

    def _on_worker_status(self, msg: str):
        self.status_label.setText(msg)

    def _on_refresh_clicked(self):
        if self.worker.refresh():
            self.load_more_btn.setEnabled(False)

    def _on_load_more_clicked(self):
        if self.worker.load_more():
            self.load_more_btn.setEnabled(False)

    def _on_interval_changed(self, index: int):
        self.worker.set_refresh_interval(self.interval_box.itemData(index))

    def _on_period_changed(self, index: int):
        self.worker.set_period(self.period_box.itemData(index))

    def _on_tracks_changed(self, event: SnapshotEvent):
        self._tracks = list(event.items)
        self.tracks_table.setRowCount(len(self._tracks))
        for row, entry in enumerate(self._tracks):
            self._set_cell(self.tracks_table, row, TRACK_TITLE, entry.title)
            self._set_cell(self.tracks_table, row, TRACK_ARTIST, entry.artist)
            self._set_cell(self.tracks_table, row, TRACK_ALBUM, entry.album)
            self._set_cell(self.tracks_table, row, TRACK_WHEN, when_text(entry))
            self._set_art(self.tracks_table, row, usable_artwork(entry.artwork_url))

        self.page_label.setText(f"Page {event.current_page} of {event.total_pages}")
        self.load_more_btn.setEnabled(event.current_page < event.total_pages)
        self.status_label.setText(f"Loaded {len(self._tracks)} tracks")

    def _on_artists_changed(self, event: SnapshotEvent):
        self._artists = list(event.items)
        self.artists_table.setRowCount(len(self._artists))
        for row, entry in enumerate(self._artists):
            self._set_cell(self.artists_table, row, ARTIST_NAME, entry.name)
            self._set_cell(self.artists_table, row, ARTIST_PLAYS, str(entry.play_count))
            self._set_art(self.artists_table, row, self.worker.core.artwork_for(entry.name, entry.artwork_url))

    def _on_artwork_resolved(self, name: str, url: str):
        for row, entry in enumerate(self._artists):
            if entry.name == name:
                self._set_art(self.artists_table, row, url)

    def _on_now_playing(self, entry: Optional[TrackEntry]):
        self._now_playing = entry
        if entry is None:
            self.now_bar.setVisible(False)
            return
        self.np_title.setText(entry.title)
        self.np_artist.setText(entry.artist)
        self._show_now_art(usable_artwork(entry.artwork_url))
        self.now_bar.setVisible(True)

    def _refresh_when_column(self):
        for row, entry in enumerate(self._tracks):
            self._set_cell(self.tracks_table, row, TRACK_WHEN, when_text(entry))

    # ==================================================
    # ARTWORK
    # ==================================================

    def _set_cell(self, table: QTableWidget, row: int, col: int, text: str):
        item = table.item(row, col)
        if item is None:
            item = QTableWidgetItem()
            table.setItem(row, col, item)
        item.setText(text)

    def _set_art(self, table: QTableWidget, row: int, url: Optional[str]):
        item = table.item(row, ART_COL)
        if item is None:
            item = QTableWidgetItem()
            table.setItem(row, ART_COL, item)
        item.setData(Qt.UserRole, url or "")
        if not url:
            item.setIcon(QIcon())
            return
        pix = self._pixmaps.get(url)
        if pix is not None:
            item.setIcon(QIcon(pix))
        else:
            item.setIcon(QIcon())
            self.loader.request(url)

    def _show_now_art(self, url: Optional[str]):
        pix = self._pixmaps.get(url) if url else None
        if pix is None:
            self.np_art.setPixmap(QPixmap())
            self.np_art.setText("♪")
            if url:
                self.loader.request(url)
            return
        self.np_art.setText("")
        self.np_art.setPixmap(pix.scaled(self.np_art.size(), Qt.KeepAspectRatioByExpanding, Qt.SmoothTransformation))

    def _on_image_loaded(self, url: str, data: bytes):
        pix = QPixmap()
        if not pix.loadFromData(data):
            return
        self._pixmaps[url] = pix
        for table in (self.tracks_table, self.artists_table):
            for row in range(table.rowCount()):
                item = table.item(row, ART_COL)
                if item is not None and item.data(Qt.UserRole) == url:
                    item.setIcon(QIcon(pix))
        if self._now_playing and usable_artwork(self._now_playing.artwork_url) == url:
            self._show_now_art(url)

    def _load_app_icon(self):
        icon_path = Path(__file__).resolve().parents[1] / "logo.png"
        if icon_path.exists():
            return QIcon(str(icon_path))
        return None

    def closeEvent(self, event):
        self._stop_worker()
        event.accept()

    def _stop_worker(self):
        self._relative_tick.stop()
        self.loader.stop()
        if self.worker:
            self.worker.stop()

    # ==================================================
    # STYLES
    # ==================================================

    def _apply_styles(self):
        self.setStyleSheet(f"""
            QWidget {{
                color: white;
                font-family: -apple-system, BlinkMacSystemFont,
                             "Segoe UI", Inter, Arial;
            }}

            QWidget#Root {{
                background: {BG};
            }}

            QLabel#Title {{
                font-size: 20px;
                font-weight: 700;
            }}

            QLabel#Muted, QLabel#Status {{
                color: rgba(255, 255, 255, 0.6);
                font-size: 12px;
            }}

            QPushButton {{
                background: rgba(255, 255, 255, 0.08);
                border-radius: 8px;
                padding: 6px 14px;
            }}

            QPushButton#CTA {{
                background: {PRIMARY};
                font-weight: 600;
            }}

            QPushButton:disabled {{
                color: rgba(255, 255, 255, 0.35);
            }}

            QTableWidget {{
                background: rgba(255, 255, 255, 0.03);
                gridline-color: transparent;
                border: none;
            }}

            QHeaderView::section {{
                background: transparent;
                color: rgba(255, 255, 255, 0.6);
                border: none;
                padding: 4px;
            }}

            QFrame#NowBar {{
                background: rgba(114, 137, 218, 0.25);
                border-radius: 12px;
            }}

            QLabel#SongTitle {{
                font-size: 15px;
                font-weight: 600;
            }}

            QLabel#ArtistName, QLabel#PlayingLine {{
                color: rgba(255, 255, 255, 0.75);
            }}
        """)
