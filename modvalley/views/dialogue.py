from loguru import logger
from PySide6.QtCore import QCoreApplication, Qt
from PySide6.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from modvalley.utils import generic
from modvalley.utils.app_info import AppInfo
from modvalley.utils.exception import LaunchFailure

# Constants
DEFAULT_TITLE = "ModValley"


def show_dialogue_conditional(
    title: str | None = None,
    text: str | None = None,
    information: str | None = None,
    details: str | None = None,
    button_text_override: list[str] | None = None,
    parent: QWidget | None = None,
) -> str:
    """
    Displays a dialogue, prompting the user for input

    :param title: text to pass to setWindowTitle
    :param text: text to pass to setText
    :param information: text to pass to setInformativeText
    :param details: text to pass to setDetailedText
    :param button_text_override: list of strings to override the default button texts
    :return: the text of the clicked button
    """
    logger.info(
        f"Showing dialogue box with input: [{title}], [{text}], [{information}] [{details}] BTN OVERRIDES: [{button_text_override}]"
    )

    dialogue = _setup_messagebox(title, parent=parent)

    if button_text_override:
        dialogue.setStandardButtons(QMessageBox.StandardButton.Cancel)
        dialogue.button(QMessageBox.StandardButton.Cancel).setText(
            QCoreApplication.translate("show_dialogue_conditional", "Cancel")
        )
        for btn_text in button_text_override:
            custom_btn = QPushButton(btn_text)
            custom_btn.setFixedWidth(custom_btn.sizeHint().width())
            dialogue.addButton(custom_btn, QMessageBox.ButtonRole.ActionRole)
    else:
        dialogue.setStandardButtons(
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        dialogue.setEscapeButton(QMessageBox.StandardButton.No)

    if text:
        dialogue.setText(text)
    if information:
        dialogue.setInformativeText(information)
    if details:
        dialogue.setDetailedText(details)

    dialogue.exec()
    response = dialogue.clickedButton()
    return response.text() if response is not None else ""


def show_information(
    title: str | None = None,
    text: str | None = None,
    information: str | None = None,
    details: str | None = None,
    parent: QWidget | None = None,
) -> None:
    """
    Creates a message box dialogue. Has no icon.
    """
    logger.info(
        f"Showing information box with input: [{title}], [{text}], [{information}], [{details}]"
    )
    _show_messagebox(
        QMessageBox.Icon.Information, title, text, information, details, parent
    )


def show_warning(
    title: str | None = None,
    text: str | None = None,
    information: str | None = None,
    details: str | None = None,
    parent: QWidget | None = None,
) -> None:
    """Creates a warning dialogue. Utilizes the warning icon.

    :param title: Window title
    :param text: Short text description
    :param information: Long form information
    :param details: Optional details that are hidden in a sub menu
    :param parent: The parent widget
    """
    logger.info(
        f"Showing warning box with input: [{title}], [{text}], [{information}], [{details}]"
    )
    _show_messagebox(QMessageBox.Icon.Warning, title, text, information, details, parent)


def show_fatal_error(
    title: str = "Fatal Error",
    text: str = "A fatal error has occurred!",
    information: str = "Please report the error to the developers.",
    details: str = "",
) -> None:
    """
    Displays a critical error message box, containing text,
    information, and details. Only called if there are any hard exceptions
    that cause the main app exec loop to stop functioning.
    """
    logger.info(
        f"Showing fatal error box with input: [{title}], [{text}], [{information}], [{details}]"
    )
    diag = FatalErrorDialog(title, text, information, details)
    diag.exec()


class FatalErrorDialog(QDialog):
    """Critical error dialogue with a details toggle and a button to open the log directory."""

    def __init__(
        self,
        title: str = "Fatal Error",
        text: str = "A fatal error has occurred!",
        information: str = "Please report the error to the developers.",
        details: str = "",
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent=parent)
        self.setWindowTitle(title)
        self.setModal(True)
        self.setObjectName("dialogue")

        self.details_btn = QPushButton(self.tr("Show Details"))
        self.open_log_btn = QPushButton(self.tr("Open Log Directory"))
        self.close_btn = QPushButton(self.tr("Close"))

        text_label = QLabel(f"<b>{text}</b>")
        text_label.setWordWrap(True)
        info_label = QLabel(information)
        info_label.setWordWrap(True)

        self.details_edit = QPlainTextEdit()
        self.details_edit.setPlainText(details)
        self.details_edit.setMaximumHeight(150)
        self.details_edit.setReadOnly(True)
        self.details_edit.setHidden(True)

        btn_layout = QHBoxLayout()
        btn_layout.addWidget(self.details_btn)
        btn_layout.addStretch()
        btn_layout.addWidget(self.open_log_btn)
        btn_layout.addWidget(self.close_btn)

        layout = QVBoxLayout()
        layout.addWidget(text_label)
        layout.addWidget(info_label)
        layout.addWidget(self.details_edit)
        layout.addLayout(btn_layout)
        self.setLayout(layout)

        self.details_btn.clicked.connect(self._toggle_details)
        self.open_log_btn.clicked.connect(self._open_log_directory)
        self.close_btn.clicked.connect(self.close)

    def _toggle_details(self) -> None:
        hidden = self.details_edit.isHidden()
        self.details_edit.setHidden(not hidden)
        self.details_btn.setText(
            self.tr("Hide Details") if hidden else self.tr("Show Details")
        )

    def _open_log_directory(self) -> None:
        try:
            generic.platform_specific_open(AppInfo().user_log_folder)
        except LaunchFailure as e:
            logger.warning(f"Unable to open log directory: {e}")


def _show_messagebox(
    icon: QMessageBox.Icon,
    title: str | None,
    text: str | None,
    information: str | None,
    details: str | None,
    parent: QWidget | None,
) -> None:
    message_box = _setup_messagebox(title, icon=icon, parent=parent)
    message_box.setStandardButtons(QMessageBox.StandardButton.Ok)
    message_box.button(QMessageBox.StandardButton.Ok).setText(
        QCoreApplication.translate("show_warning", "OK")
    )

    if text:
        message_box.setText(text)
    if information:
        message_box.setInformativeText(information)
    if details:
        message_box.setDetailedText(details)

    message_box.exec()


def _setup_messagebox(
    title: str | None,
    icon: QMessageBox.Icon = QMessageBox.Icon.Question,
    parent: QWidget | None = None,
) -> QMessageBox:
    """Helper function to setup the message box

    :param title: The title of the message box
    :return: The message box object
    """
    dialogue = QMessageBox(parent)
    dialogue.setTextFormat(Qt.TextFormat.RichText)
    dialogue.setIcon(icon)
    dialogue.setObjectName("dialogue")
    dialogue.setWindowTitle(title or DEFAULT_TITLE)
    return dialogue
