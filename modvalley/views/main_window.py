from loguru import logger
from PySide6.QtCore import Qt, QThreadPool
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QAbstractItemView,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QMainWindow,
    QProgressBar,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from modvalley.controllers.mods_controller import ModsController
from modvalley.controllers.update_check_controller import UpdateCheckController
from modvalley.controllers.update_workflow_controller import UpdateWorkflowController
from modvalley.models.package_record import PackageRecord
from modvalley.models.settings import Settings
from modvalley.models.update_cache import UpdateCache
from modvalley.models.update_status import StatusMap
from modvalley.utils.app_info import AppInfo
from modvalley.utils.backend import ModBackend
from modvalley.utils.event_bus import EventBus
from modvalley.utils.exception import ModValleyError, RateLimitWarning
from modvalley.utils.generic import format_time_display
from modvalley.views.dialogue import (
    show_dialogue_conditional,
    show_information,
    show_warning,
)
from modvalley.views.settings_dialog import SettingsDialog
from modvalley.views.task_runnable import TaskRunnable
from modvalley.views.update_workflow_dialog import UpdateWorkflowDialog

COLUMNS = ["Name", "Version", "Author", "Update"]


class MainWindow(QMainWindow):
    """
    Subclass QMainWindow to customize the main application window.
    """

    def __init__(
        self,
        settings: Settings,
        backend: ModBackend,
        cache: UpdateCache,
        mods_controller: ModsController,
        update_check_controller: UpdateCheckController,
        workflow_controller: UpdateWorkflowController,
    ) -> None:
        logger.info("Initializing MainWindow")
        super().__init__()
        self.settings = settings
        self.backend = backend
        self.cache = cache
        self.mods_controller = mods_controller
        self.update_check_controller = update_check_controller
        self.workflow_controller = workflow_controller
        self._checking = False
        self._refreshing = False

        self.setWindowTitle(f"{AppInfo().app_name} {AppInfo().app_version}")
        self.resize(settings.main_window_width, settings.main_window_height)

        # Mods table
        self.mods_table = QTableWidget(0, len(COLUMNS))
        self.mods_table.setHorizontalHeaderLabels([self.tr(c) for c in COLUMNS])
        self.mods_table.setSelectionBehavior(
            QAbstractItemView.SelectionBehavior.SelectRows
        )
        self.mods_table.setSelectionMode(
            QAbstractItemView.SelectionMode.SingleSelection
        )
        self.mods_table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.mods_table.verticalHeader().setVisible(False)
        self.mods_table.horizontalHeader().setSectionResizeMode(
            0, QHeaderView.ResizeMode.Stretch
        )
        self.mods_table.itemSelectionChanged.connect(self._update_buttons)
        self.mods_table.itemDoubleClicked.connect(lambda _: self.start_update())

        # Progress
        self.progress_label = QLabel()
        self.progress_bar = QProgressBar()
        self.progress_bar.setHidden(True)
        self.last_check_label = QLabel()
        self.last_check_label.setEnabled(False)

        # Buttons
        self.refresh_button = QPushButton(self.tr("Refresh"))
        self.check_button = QPushButton(self.tr("Check for Updates"))
        self.update_button = QPushButton(self.tr("Update"))
        self.settings_button = QPushButton(self.tr("Settings"))

        self.refresh_button.clicked.connect(self.refresh_mods)
        self.check_button.clicked.connect(self.check_for_updates)
        self.update_button.clicked.connect(self.start_update)
        self.settings_button.clicked.connect(self.open_settings)

        button_layout = QHBoxLayout()
        button_layout.addWidget(self.last_check_label)
        button_layout.addStretch()
        for button in (
            self.refresh_button,
            self.check_button,
            self.update_button,
            self.settings_button,
        ):
            button_layout.addWidget(button)

        progress_layout = QHBoxLayout()
        progress_layout.addWidget(self.progress_label)
        progress_layout.addWidget(self.progress_bar)

        layout = QVBoxLayout()
        layout.addWidget(self.mods_table)
        layout.addLayout(progress_layout)
        layout.addLayout(button_layout)
        central = QWidget()
        central.setLayout(layout)
        self.setCentralWidget(central)

        self._event_bus_slots = [
            (EventBus().do_refresh_mods_list, self.refresh_mods),
            (EventBus().refresh_started, self._on_refresh_started),
            (EventBus().refresh_finished, self._on_refresh_finished),
            (EventBus().do_check_for_mod_updates, self.check_for_updates),
            (EventBus().update_check_progress, self._on_check_progress),
            (EventBus().update_check_finished, self._update_last_check_label),
            (EventBus().update_cache_changed, self.populate_mods_table),
        ]
        for signal, slot in self._event_bus_slots:
            signal.connect(slot)

        self._update_last_check_label()
        self._update_buttons()

    def initialize_content(self, is_initial: bool = False) -> None:
        """Detect the game, scan mods and optionally start an update check."""
        try:
            installation = self.mods_controller.detect()
        except ModValleyError as e:
            show_warning(
                title=self.tr("Stardew Valley not found"),
                text=str(e),
                information=self.tr(
                    "Set the game folder in Settings if it is installed in a custom location."
                ),
                parent=self,
            )
            return
        logger.info(f"Using game folder {installation.game_folder}")
        self.refresh_mods()
        if is_initial and self.settings.check_updates_on_startup:
            EventBus().do_check_for_mod_updates.emit()

    def refresh_mods(self) -> None:
        try:
            self.mods_controller.refresh()
        except ModValleyError as e:
            show_warning(title=self.tr("Unable to read mods"), text=str(e), parent=self)
            return
        self.populate_mods_table()

    def populate_mods_table(self) -> None:
        selected = self._selected_folder_name()
        records = self.mods_controller.records
        self.mods_table.setRowCount(len(records))
        for row, record in enumerate(records):
            name_item = QTableWidgetItem(record.name)
            name_item.setData(Qt.ItemDataRole.UserRole, record.folder_name)
            name_item.setToolTip(record.description)
            self.mods_table.setItem(row, 0, name_item)
            self.mods_table.setItem(row, 1, QTableWidgetItem(record.version))
            self.mods_table.setItem(row, 2, QTableWidgetItem(record.author))
            self.mods_table.setItem(row, 3, QTableWidgetItem(self._update_text(record)))
            if record.folder_name == selected:
                self.mods_table.selectRow(row)
        self._update_last_check_label()
        self._update_buttons()

    def check_for_updates(self) -> None:
        if self._checking:
            logger.debug("Update check already running")
            return
        self._set_checking(True)
        task = TaskRunnable(
            self.update_check_controller.check_for_updates,
            self.mods_controller.records,
        )
        task.signals.finished.connect(self._on_check_finished)
        task.signals.failed.connect(self._on_check_failed)
        QThreadPool.globalInstance().start(task)

    def start_update(self) -> None:
        folder_name = self._selected_folder_name()
        if folder_name is None or not self.workflow_controller.can_start(folder_name):
            return
        record = self.mods_controller.get(folder_name)
        try:
            self.workflow_controller.start(folder_name)
        except ModValleyError as e:
            show_warning(title=self.tr("Update"), text=str(e), parent=self)
            return
        dialog = UpdateWorkflowDialog(
            self.workflow_controller,
            record.name if record is not None else folder_name,
            parent=self,
        )
        dialog.exec()

    def open_settings(self) -> None:
        dialog = SettingsDialog(self.settings, self.backend, parent=self)
        if dialog.exec():
            self.initialize_content()

    def closeEvent(self, event: QCloseEvent) -> None:
        self.settings.main_window_width = self.width()
        self.settings.main_window_height = self.height()
        self.settings.save()
        for signal, slot in self._event_bus_slots:
            signal.disconnect(slot)
        self._event_bus_slots = []
        super().closeEvent(event)

    def _on_check_progress(self, name: str, index: int, total: int) -> None:
        if total == 0:
            self.progress_label.setText(self.tr("No mods with update keys to check"))
            self.progress_bar.setHidden(True)
            return
        self.progress_bar.setHidden(False)
        self.progress_bar.setRange(0, total)
        self.progress_bar.setValue(index)
        self.progress_label.setText(
            self.tr("Checking {name} ({index}/{total})").format(
                name=name, index=index, total=total
            )
        )

    def _on_check_finished(self, statuses: StatusMap | None) -> None:
        self._set_checking(False)
        self.progress_bar.setHidden(True)
        if statuses is None:
            return
        available = sum(status.update_available for status in statuses.values())
        self.progress_label.setText(
            self.tr("{count} update(s) available").format(count=available)
        )
        self.populate_mods_table()
        if available == 0:
            show_information(
                title=self.tr("Update check"),
                text=self.tr("All mods are up to date."),
                parent=self,
            )

    def _on_check_failed(self, error: Exception) -> None:
        self._set_checking(False)
        self.progress_bar.setHidden(True)
        self.progress_label.setText("")
        if isinstance(error, RateLimitWarning):
            proceed_text = self.tr("Check Anyway")
            answer = show_dialogue_conditional(
                title=self.tr("Update check"),
                text=str(error),
                information=self.tr("Do you want to check again anyway?"),
                button_text_override=[proceed_text],
                parent=self,
            )
            if answer == proceed_text:
                self.update_check_controller.confirm_rate_limit_override()
                self.check_for_updates()
            return
        if not isinstance(error, ModValleyError):
            logger.error(f"Unexpected error during update check: {error}")
        show_warning(
            title=self.tr("Update check failed"),
            text=self.tr("Unable to check mods for updates."),
            information=str(error),
            parent=self,
        )

    def _set_checking(self, checking: bool) -> None:
        self._checking = checking
        self._update_buttons()

    def _on_refresh_started(self) -> None:
        self._refreshing = True
        self._update_buttons()

    def _on_refresh_finished(self) -> None:
        self._refreshing = False
        self._update_buttons()

    def _selected_folder_name(self) -> str | None:
        items = self.mods_table.selectedItems()
        if not items:
            return None
        name_item = self.mods_table.item(items[0].row(), 0)
        return name_item.data(Qt.ItemDataRole.UserRole) if name_item else None

    def _update_buttons(self) -> None:
        folder_name = self._selected_folder_name()
        busy = self._checking or self._refreshing
        self.refresh_button.setEnabled(not busy)
        self.check_button.setEnabled(not busy)
        self.settings_button.setEnabled(not busy)
        self.update_button.setEnabled(
            not busy
            and folder_name is not None
            and self.workflow_controller.can_start(folder_name)
        )

    def _update_last_check_label(self) -> None:
        self.last_check_label.setText(
            self.tr("Last checked: {time}").format(
                time=format_time_display(self.cache.last_check)
            )
        )

    def _update_text(self, record: PackageRecord) -> str:
        if not record.is_checkable:
            return self.tr("No update keys")
        status = self.cache.get(record.folder_name)
        if status is None:
            return self.tr("Not checked")
        if not status.update_available:
            return self.tr("Up to date")
        if status.is_manual_check_only:
            return self.tr("{version} available (manual download)").format(
                version=status.latest_version
            )
        return self.tr("{version} available").format(version=status.latest_version)
