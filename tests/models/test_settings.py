import json
from pathlib import Path

from pytestqt.qtbot import QtBot

from modvalley.models.settings import Settings
from modvalley.utils.event_bus import EventBus


def test_load_creates_defaults(tmp_path: Path) -> None:
    settings_file = tmp_path / "settings.json"
    settings = Settings(settings_file=settings_file)
    settings.load()

    assert settings_file.exists()
    data = json.loads(settings_file.read_text())
    assert data["check_updates_on_startup"] is False
    assert data["progress_tick_interval"] == 0.1
    assert "_settings_file" not in data


def test_round_trip(tmp_path: Path) -> None:
    settings_file = tmp_path / "settings.json"
    settings = Settings(settings_file=settings_file)
    settings.mods_folder = "/games/Stardew Valley/Mods"
    settings.phase_reset_delay = 0.5
    settings.save()

    reloaded = Settings(settings_file=settings_file)
    reloaded.load()
    assert reloaded.mods_folder == "/games/Stardew Valley/Mods"
    assert reloaded.phase_reset_delay == 0.5


def test_unknown_keys_are_ignored(tmp_path: Path) -> None:
    settings_file = tmp_path / "settings.json"
    settings_file.write_text(json.dumps({"obsolete": 1, "game_folder": "/g"}))
    settings = Settings(settings_file=settings_file)
    settings.load()
    assert settings.game_folder == "/g"
    assert not hasattr(settings, "obsolete")


def test_debug_file_follows_flag(tmp_path: Path) -> None:
    settings = Settings(settings_file=tmp_path / "settings.json")
    settings.debug_logging_enabled = True
    settings.save()
    assert (tmp_path / "DEBUG").is_file()

    settings.debug_logging_enabled = False
    settings.save()
    assert not (tmp_path / "DEBUG").exists()


def test_change_emits_signal(tmp_path: Path, qtbot: QtBot) -> None:
    settings = Settings(settings_file=tmp_path / "settings.json")
    with qtbot.waitSignal(EventBus().settings_have_changed, timeout=1000):
        settings.check_updates_on_startup = True
