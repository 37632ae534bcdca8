#!/usr/bin/env python3
import sys
import traceback
from types import TracebackType
from typing import Type

import loguru
from loguru import logger

from modvalley.controllers.app_controller import AppController
from modvalley.utils.app_info import AppInfo
from modvalley.utils.obfuscate_message import obfuscate_message
from modvalley.views.dialogue import show_fatal_error


def handle_exception(
    exc_type: Type[BaseException],
    exc_value: BaseException,
    exc_traceback: TracebackType | None,
) -> None:
    """
    This function is called (through excepthook) when the main application
    loop encounters an uncaught exception. When this happens, the error is
    logged to the log file and a Fatal dialogue is shown.
    """

    # Ignore KeyboardInterrupt exceptions, for when running through the terminal
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
    else:
        logger.opt(exception=(exc_type, exc_value, exc_traceback)).error(
            "The main application loop has failed with an uncaught exception"
        )
        show_fatal_error(
            title="ModValley crashed",
            text="The ModValley application crashed! Sorry for the inconvenience!",
            information="Please report the issue along with your log file.",
            details=obfuscate_message(
                "".join(traceback.format_exception(exc_type, exc_value, exc_traceback))
            ),
        )

    sys.exit()


def formatter(record: "loguru.Record") -> str:
    """Custom formatter for loguru logger"""
    format_string = (
        "[{level}]"
        "[{time:YYYY-MM-DD HH:mm:ss}]"
        "[{process.id}]"
        "[{thread.name}]"
        "[{module}]"
        "[{function}][{line}]"
        " : "
    )

    record["extra"]["obfuscated_message"] = obfuscate_message(record["message"])
    return format_string + "{extra[obfuscated_message]}\n{exception}"


def setup_logging() -> None:
    # Set the log level from the presence (or absence) of a "DEBUG" file in the app storage folder
    debug_file_path = AppInfo().app_storage_folder / "DEBUG"
    debug_mode = debug_file_path.exists() and debug_file_path.is_file()

    # We have log_file (foo.log) and old_log_file (foo.old.log). If old_log_file exists,
    # remove it. If log_file exists, rename it to old_log_file.
    log_file = AppInfo().user_log_folder / (AppInfo().app_name + ".log")
    old_log_file = AppInfo().user_log_folder / (AppInfo().app_name + ".old.log")
    if old_log_file.exists() and old_log_file.is_file():
        old_log_file.unlink()
    if log_file.exists() and log_file.is_file():
        log_file.rename(old_log_file)

    # Remove the default stderr logger
    logger.remove()

    # Create the file logger
    logger.add(log_file, level="DEBUG" if debug_mode else "INFO", format=formatter)

    # Add a "WARNING" or higher stderr logger
    logger.add(sys.stderr, level="WARNING", format=formatter, colorize=False)


def main_thread() -> None:
    try:
        app_controller = AppController()
        sys.exit(app_controller.run())
    except SystemExit:
        raise
    except Exception:
        # Catch exceptions during initial application instantiation
        # Uncaught exceptions during the application loop are caught with excepthook
        stacktrace = obfuscate_message(traceback.format_exc())
        logger.error(
            "The main application instantiation has failed with an uncaught exception:"
        )
        logger.error(stacktrace)
        show_fatal_error(details=stacktrace)
        sys.exit(1)
    finally:
        logger.info("Exiting application!")


def main() -> None:
    setup_logging()
    # Uncaught exceptions during the application loop are handled
    # through handle_exception
    sys.excepthook = handle_exception
    logger.info(f"Initializing ModValley application: {AppInfo().app_version}")
    main_thread()


if __name__ == "__main__":
    main()
