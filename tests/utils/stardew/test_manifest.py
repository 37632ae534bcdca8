from pathlib import Path

import pytest

from modvalley.utils.exception import OverrideFailure, ScanFailure
from modvalley.utils.stardew.manifest import (
    extract_update_keys,
    parse_manifest,
    scan_mods,
    set_manifest_version,
)

CONTENT_PATCHER_MANIFEST = """{
  // comments are allowed in SMAPI manifests
  "Name": "Content Patcher",
  "Author": "Pathoschild",
  "Version": "1.0.0",
  "Description": "Loads content packs.",
  "UniqueID": "Pathoschild.ContentPatcher",
  "EntryDll": "ContentPatcher.dll",
  "MinimumApiVersion": "4.0.0",
  "UpdateKeys": [ "Nexus:1915", "GitHub:Pathoschild/StardewMods", ],
}
"""


def _write_mod(mods: Path, folder: str, manifest: str | None = None) -> Path:
    mod = mods / folder
    mod.mkdir(parents=True)
    if manifest is not None:
        (mod / "manifest.json").write_text(manifest, encoding="utf-8")
    return mod


def test_parse_manifest() -> None:
    record = parse_manifest("ContentPatcher", CONTENT_PATCHER_MANIFEST)
    assert record.name == "Content Patcher"
    assert record.author == "Pathoschild"
    assert record.version == "1.0.0"
    assert record.description == "Loads content packs."
    assert record.unique_id == "Pathoschild.ContentPatcher"
    assert record.update_keys == ["Nexus:1915", "GitHub:Pathoschild/StardewMods"]
    assert record.is_checkable


def test_parse_manifest_defaults() -> None:
    record = parse_manifest("Bare", "{}")
    assert record.name == "Bare"
    assert record.version == "Unknown"
    assert record.author == "Unknown"
    assert record.description == "No description"
    assert record.update_keys == []
    assert not record.is_checkable


def test_extract_update_keys_case_insensitive() -> None:
    assert extract_update_keys('{"updatekeys": ["ModDrop:123"]}') == ["ModDrop:123"]
    assert extract_update_keys('{"UpdateKeys": []}') == []


def test_scan_mods(tmp_path: Path) -> None:
    _write_mod(tmp_path, "ContentPatcher", CONTENT_PATCHER_MANIFEST)
    _write_mod(tmp_path, "automate", '{"Name": "Automate", "Version": "2.0.0"}')
    (_write_mod(tmp_path, "NoManifest") / "NoManifest.dll").write_bytes(b"")
    _write_mod(tmp_path, "EmptyFolder")
    _write_mod(tmp_path, ".hidden", CONTENT_PATCHER_MANIFEST)
    _write_mod(tmp_path, "__MACOSX", CONTENT_PATCHER_MANIFEST)
    (tmp_path / "readme.txt").write_text("not a mod")

    records = scan_mods(tmp_path)

    assert [record.folder_name for record in records] == [
        "automate",
        "ContentPatcher",
        "NoManifest",
    ]
    assert records[2].description == "No manifest found - detected mod files"
    assert records[2].name == "NoManifest"


def test_scan_mods_with_bom(tmp_path: Path) -> None:
    mod = _write_mod(tmp_path, "BomMod")
    (mod / "manifest.json").write_bytes(
        b"\xef\xbb\xbf" + b'{"Name": "Bom Mod", "Version": "3.1.4"}'
    )
    records = scan_mods(tmp_path)
    assert records[0].name == "Bom Mod"


def test_scan_mods_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(ScanFailure):
        scan_mods(tmp_path / "Mods")


def test_scan_mods_not_a_directory(tmp_path: Path) -> None:
    file_path = tmp_path / "Mods"
    file_path.write_text("")
    with pytest.raises(ScanFailure):
        scan_mods(file_path)


def test_set_manifest_version_preserves_rest_of_file(tmp_path: Path) -> None:
    mod = _write_mod(tmp_path, "ContentPatcher", CONTENT_PATCHER_MANIFEST)

    set_manifest_version(tmp_path, "ContentPatcher", "1.2.0")

    content = (mod / "manifest.json").read_text(encoding="utf-8")
    assert content == CONTENT_PATCHER_MANIFEST.replace(
        '"Version": "1.0.0"', '"Version": "1.2.0"'
    )
    # MinimumApiVersion is a different field and must not be touched
    assert '"MinimumApiVersion": "4.0.0"' in content
    assert not (mod / "manifest.json.tmp").exists()


def test_set_manifest_version_is_repeatable(tmp_path: Path) -> None:
    _write_mod(tmp_path, "ContentPatcher", CONTENT_PATCHER_MANIFEST)
    set_manifest_version(tmp_path, "ContentPatcher", "1.2.0")
    set_manifest_version(tmp_path, "ContentPatcher", "1.2.0")
    record = scan_mods(tmp_path)[0]
    assert record.version == "1.2.0"


def test_set_manifest_version_keeps_bom_and_line_endings(tmp_path: Path) -> None:
    mod = tmp_path / "ContentPatcher"
    mod.mkdir()
    original = CONTENT_PATCHER_MANIFEST.replace("\n", "\r\n")
    (mod / "manifest.json").write_bytes(b"\xef\xbb\xbf" + original.encode("utf-8"))

    set_manifest_version(tmp_path, "ContentPatcher", "1.2.0")

    expected = original.replace('"Version": "1.0.0"', '"Version": "1.2.0"')
    assert (mod / "manifest.json").read_bytes() == b"\xef\xbb\xbf" + expected.encode(
        "utf-8"
    )


def test_set_manifest_version_missing_manifest(tmp_path: Path) -> None:
    _write_mod(tmp_path, "NoManifest")
    with pytest.raises(OverrideFailure):
        set_manifest_version(tmp_path, "NoManifest", "1.0.0")


def test_set_manifest_version_missing_field(tmp_path: Path) -> None:
    _write_mod(tmp_path, "NoVersion", '{"Name": "No Version"}')
    with pytest.raises(OverrideFailure):
        set_manifest_version(tmp_path, "NoVersion", "1.0.0")
