# voicenav/ui.py

from __future__ import annotations

from typing import Dict, List

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QFont
from PyQt6.QtWidgets import (
    QAbstractItemView,
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLineEdit,
    QPushButton,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QFrame,
    QStackedWidget,
)

from .core.models import Article, SearchResult


# -----------------------------------------------------------------------------
# Main window
# -----------------------------------------------------------------------------

class VoiceNavWindow(QMainWindow):
    """
    Main VoiceNav window.

    Layout:
    - Top:    status bar with STATUS label
    - Search: query input, Search button, Mic button
    - Center: stacked page, either the result list or the article view
              with its transport buttons
    - Bottom: event console

    The window only renders; every user action leaves as a signal.
    """

    search_submitted = pyqtSignal(str)
    voice_listen_requested = pyqtSignal()
    result_activated = pyqtSignal(int)

    play_pause_requested = pyqtSignal()
    repeat_requested = pyqtSignal()
    previous_text_requested = pyqtSignal()
    next_text_requested = pyqtSignal()
    previous_section_requested = pyqtSignal()
    next_section_requested = pyqtSignal()
    home_requested = pyqtSignal()

    GREEN = "#00FF00"
    BLUE = "#00BFFF"
    BLACK = "#000000"

    def __init__(self):
        super().__init__()

        self.setWindowTitle("VoiceNav")
        self.resize(900, 700)

        self._results: List[SearchResult] = []
        self._article_rows: Dict[str, int] = {}

        central = QWidget(self)
        self.setCentralWidget(central)

        root_layout = QVBoxLayout(central)
        root_layout.setContentsMargins(8, 8, 8, 8)
        root_layout.setSpacing(6)

        # ---- Status bar ----------------------------------------------------
        self.status_frame = QFrame()
        self.status_frame.setObjectName("statusFrame")
        status_layout = QHBoxLayout(self.status_frame)
        status_layout.setContentsMargins(8, 4, 8, 4)

        self.status_label = QLabel("STATUS: SEARCH")
        self.status_label.setObjectName("statusLabel")
        status_layout.addWidget(self.status_label)
        status_layout.addStretch(1)

        root_layout.addWidget(self.status_frame)

        # ---- Search bar ----------------------------------------------------
        search_frame = QFrame()
        search_frame.setObjectName("inputFrame")
        search_layout = QHBoxLayout(search_frame)
        search_layout.setContentsMargins(4, 4, 4, 4)
        search_layout.setSpacing(6)

        self.search_input = QLineEdit()
        self.search_input.setObjectName("searchInput")
        self.search_input.setPlaceholderText("Search articles and press Enter...")
        self.search_input.returnPressed.connect(self._on_search)

        self.search_button = QPushButton("Search")
        self.search_button.clicked.connect(self._on_search)

        self.mic_button = QPushButton("Mic")
        self.mic_button.setObjectName("micButton")
        self.mic_button.clicked.connect(self.voice_listen_requested.emit)

        search_layout.addWidget(self.search_input, stretch=1)
        search_layout.addWidget(self.search_button)
        search_layout.addWidget(self.mic_button)

        root_layout.addWidget(search_frame)

        # ---- Center pages --------------------------------------------------
        self.pages = QStackedWidget()
        self.pages.setObjectName("centerFrame")

        self.results_list = QListWidget()
        self.results_list.setWordWrap(True)
        self.results_list.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.results_list.itemActivated.connect(self._on_result_activated)
        self.results_list.itemClicked.connect(self._on_result_activated)
        self.pages.addWidget(self.results_list)

        article_page = QWidget()
        article_layout = QVBoxLayout(article_page)
        article_layout.setContentsMargins(0, 0, 0, 0)

        self.article_view = QListWidget()
        self.article_view.setWordWrap(True)
        self.article_view.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        article_layout.addWidget(self.article_view, stretch=1)

        transport = QHBoxLayout()
        for label, signal in (
            ("Home", self.home_requested),
            ("|<< Section", self.previous_section_requested),
            ("< Prev", self.previous_text_requested),
            ("Play / Pause", self.play_pause_requested),
            ("Repeat", self.repeat_requested),
            ("Next >", self.next_text_requested),
            ("Section >>|", self.next_section_requested),
        ):
            button = QPushButton(label)
            button.clicked.connect(signal.emit)
            transport.addWidget(button)
        article_layout.addLayout(transport)

        self.pages.addWidget(article_page)
        root_layout.addWidget(self.pages, stretch=1)

        # ---- Console -------------------------------------------------------
        self.console = QListWidget()
        self.console.setObjectName("console")
        self.console.setMaximumHeight(140)
        root_layout.addWidget(self.console)

        self._apply_styles()

    # ------------------------------------------------------------------ #
    # Input handlers
    # ------------------------------------------------------------------ #

    def _on_search(self):
        text = self.search_input.text().strip()
        if not text:
            return
        self.search_submitted.emit(text)

    def _on_result_activated(self, item: QListWidgetItem):
        row = self.results_list.row(item)
        if 0 <= row < len(self._results):
            self.result_activated.emit(self._results[row].id)

    # ------------------------------------------------------------------ #
    # Public methods used by controller
    # ------------------------------------------------------------------ #

    def set_status(self, text: str):
        self.status_label.setText(f"STATUS: {text}")

    def append_message(self, text: str):
        if not text:
            return
        self.console.addItem(QListWidgetItem(text))
        self.console.scrollToBottom()

    def set_search_text(self, text: str):
        self.search_input.setText(text)

    def show_search(self):
        """Back to an empty search page."""
        self._results = []
        self._article_rows = {}
        self.results_list.clear()
        self.article_view.clear()
        self.setWindowTitle("VoiceNav")
        self.pages.setCurrentWidget(self.results_list)

    def show_results(self, results: List[SearchResult]):
        self._results = list(results)
        self.results_list.clear()
        for result in self._results:
            text = result.title if not result.snippet else f"{result.title}\n{result.snippet}"
            self.results_list.addItem(QListWidgetItem(text))
        self.pages.setCurrentWidget(self.results_list)

    def highlight_result(self, index: int):
        if 0 <= index < self.results_list.count():
            self.results_list.setCurrentRow(index)
            self.results_list.scrollToItem(self.results_list.item(index))

    def show_article(self, article: Article):
        self.article_view.clear()
        self._article_rows = {}

        title_font = QFont()
        title_font.setBold(True)
        title_font.setPointSize(16)
        section_font = QFont()
        section_font.setBold(True)

        self._add_article_row("article-title", article.title, title_font)
        for s, section in enumerate(article.sections):
            self._add_article_row(f"section-{s}", section.title, section_font)
            for t, text in enumerate(section.texts):
                self._add_article_row(f"text-{s}-{t}", text)

        self.setWindowTitle(article.title or "VoiceNav")
        self.pages.setCurrentIndex(1)

    def set_highlight(self, element_id: str):
        """Mark exactly one article element as current."""
        row = self._article_rows.get(element_id)
        if row is None:
            self.article_view.clearSelection()
            return
        self.article_view.setCurrentRow(row)
        self.article_view.scrollToItem(
            self.article_view.item(row),
            QAbstractItemView.ScrollHint.PositionAtCenter,
        )

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _add_article_row(self, element_id: str, text: str, font: QFont | None = None):
        item = QListWidgetItem(text)
        item.setData(Qt.ItemDataRole.UserRole, element_id)
        if font is not None:
            item.setFont(font)
        self._article_rows[element_id] = self.article_view.count()
        self.article_view.addItem(item)

    def _apply_styles(self):
        self.setStyleSheet(f"""
        QWidget {{
            background-color: {self.BLACK};
            color: {self.GREEN};
            font-size: 12pt;
        }}
        QLineEdit, QListWidget {{
            border: 1px solid {self.BLUE};
        }}
        QListWidget::item:selected {{
            background-color: {self.BLUE};
            color: {self.BLACK};
        }}
        QPushButton {{
            border: 1px solid {self.BLUE};
            padding: 4px 10px;
        }}
        QPushButton:hover {{
            background-color: {self.BLUE};
            color: {self.BLACK};
        }}
        QFrame#statusFrame {{
            border: 1px solid {self.BLUE};
        }}
        QLabel#statusLabel {{
            font-weight: bold;
        }}
        """)
