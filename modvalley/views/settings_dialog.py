from loguru import logger
from PySide6.QtWidgets import (
    QCheckBox,
    QDialog,
    QDialogButtonBox,
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from modvalley.models.settings import Settings
from modvalley.utils.backend import ModBackend


class SettingsDialog(QDialog):
    """
    Folder overrides, startup behaviour and the Nexus Mods API key.

    The API key never goes into settings.json directly; it is handed to
    `ModBackend.save_api_key`, which prefers the system keyring.
    """

    def __init__(
        self, settings: Settings, backend: ModBackend, parent: QWidget | None = None
    ) -> None:
        super().__init__(parent)
        self.settings = settings
        self.backend = backend
        self.setWindowTitle(self.tr("Settings"))
        self.setObjectName("dialogue")
        self.setMinimumWidth(520)

        self.game_folder_edit = QLineEdit()
        self.game_folder_edit.setPlaceholderText(self.tr("Detect automatically"))
        self.mods_folder_edit = QLineEdit()
        self.mods_folder_edit.setPlaceholderText(self.tr("Detect automatically"))

        self.api_key_edit = QLineEdit()
        self.api_key_edit.setEchoMode(QLineEdit.EchoMode.Password)
        self.api_key_edit.setPlaceholderText(
            self.tr("Optional. Checks Nexus mods directly.")
        )

        self.check_on_startup_checkbox = QCheckBox(
            self.tr("Check for updates on startup")
        )
        self.debug_logging_checkbox = QCheckBox(self.tr("Enable debug logging"))

        form = QFormLayout()
        form.addRow(
            self.tr("Game folder"),
            self._with_browse_button(self.game_folder_edit),
        )
        form.addRow(
            self.tr("Mods folder"),
            self._with_browse_button(self.mods_folder_edit),
        )
        form.addRow(self.tr("Nexus Mods API key"), self.api_key_edit)
        form.addRow(self.check_on_startup_checkbox)
        form.addRow(self.debug_logging_checkbox)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Save
            | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)

        layout = QVBoxLayout()
        layout.addLayout(form)
        layout.addWidget(buttons)
        self.setLayout(layout)

        self.load_values()

    def load_values(self) -> None:
        self.game_folder_edit.setText(self.settings.game_folder)
        self.mods_folder_edit.setText(self.settings.mods_folder)
        self.api_key_edit.setText(self.backend.load_api_key())
        self.check_on_startup_checkbox.setChecked(
            self.settings.check_updates_on_startup
        )
        self.debug_logging_checkbox.setChecked(self.settings.debug_logging_enabled)

    def accept(self) -> None:
        self.settings.game_folder = self.game_folder_edit.text().strip()
        self.settings.mods_folder = self.mods_folder_edit.text().strip()
        self.settings.check_updates_on_startup = (
            self.check_on_startup_checkbox.isChecked()
        )
        self.settings.debug_logging_enabled = self.debug_logging_checkbox.isChecked()
        self.backend.save_api_key(self.api_key_edit.text())
        self.settings.save()
        logger.info("Settings saved")
        super().accept()

    def _with_browse_button(self, line_edit: QLineEdit) -> QHBoxLayout:
        browse_button = QPushButton(self.tr("Browse..."))
        browse_button.clicked.connect(lambda: self._browse_for_folder(line_edit))
        row = QHBoxLayout()
        row.addWidget(line_edit)
        row.addWidget(browse_button)
        return row

    def _browse_for_folder(self, line_edit: QLineEdit) -> None:
        path = QFileDialog.getExistingDirectory(
            self, self.tr("Select folder"), line_edit.text()
        )
        if path:
            line_edit.setText(path)
