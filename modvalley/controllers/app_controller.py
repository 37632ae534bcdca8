import sys

from loguru import logger
from PySide6.QtCore import QObject
from PySide6.QtWidgets import QApplication

from modvalley.controllers.kv_store_controller import KeyValueStoreController
from modvalley.controllers.mods_controller import ModsController
from modvalley.controllers.update_check_controller import UpdateCheckController
from modvalley.controllers.update_workflow_controller import UpdateWorkflowController
from modvalley.controllers.verification_resolver import VerificationResolver
from modvalley.models.secure_settings import SecureSettings
from modvalley.models.settings import Settings
from modvalley.models.update_cache import UpdateCache
from modvalley.models.workflow_state import ResolutionPolicy
from modvalley.utils.app_info import AppInfo
from modvalley.utils.backend import ModBackend
from modvalley.views.main_window import MainWindow


class AppController(QObject):
    def __init__(self) -> None:
        super().__init__()

        self.app = QApplication(sys.argv)
        self.app.setApplicationName(AppInfo().app_name)

        # Initialize the application settings.
        self.initialize_settings()
        # Open the local store and load the cached update status
        self.initialize_update_cache()
        # Wire up the update engine
        self.initialize_controllers()
        # Initialize the main window
        self.initialize_main_window()

    def initialize_settings(self) -> None:
        """Loads settings and moves a plaintext API key into the keyring if possible."""
        self.settings = Settings()
        self.settings.load()
        self.secure_settings = SecureSettings(self.settings)
        self.secure_settings.migrate_from_plaintext_settings()
        self.backend = ModBackend(self.settings, self.secure_settings)

    def initialize_update_cache(self) -> None:
        self.kv_store = KeyValueStoreController(AppInfo().client_store_db)
        self.update_cache = UpdateCache(self.kv_store)
        self.update_cache.load()

    def initialize_controllers(self) -> None:
        self.mods_controller = ModsController(self.backend)
        self.update_check_controller = UpdateCheckController(
            self.backend,
            self.update_cache,
            tick_interval=self.settings.progress_tick_interval,
        )
        self.verification_resolver = VerificationResolver(
            self.backend, self.update_cache, self.mods_controller
        )
        self.workflow_controller = UpdateWorkflowController(
            self.backend,
            self.update_cache,
            self.mods_controller,
            self.verification_resolver,
            policy=ResolutionPolicy(phase_reset_delay=self.settings.phase_reset_delay),
        )

    def initialize_main_window(self) -> None:
        self.main_window = MainWindow(
            settings=self.settings,
            backend=self.backend,
            cache=self.update_cache,
            mods_controller=self.mods_controller,
            update_check_controller=self.update_check_controller,
            workflow_controller=self.workflow_controller,
        )

    def run(self) -> int:
        """Runs the main application loop after initializing the main window."""
        self.main_window.show()
        self.main_window.initialize_content(is_initial=True)
        return self.app.exec()

    def quit(self) -> None:
        """Exit the application."""
        logger.info("Quitting application")
        self.app.quit()
