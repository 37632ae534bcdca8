"""
Read and update SMAPI mod manifests.

Manifests are hand-written JSON that often carries comments or trailing
commas, so fields are extracted with regular expressions instead of a
strict JSON parser. The version writer substitutes the value in place and
leaves every other byte of the file untouched.
"""

import codecs
import os
import re
from pathlib import Path

from loguru import logger

from modvalley.models.package_record import PackageRecord
from modvalley.utils.constants import MANIFEST_FILE_NAME, MOD_FILE_EXTENSIONS
from modvalley.utils.exception import OverrideFailure, ScanFailure

MANIFEST_ENCODING = "utf-8-sig"


def _field_pattern(field: str) -> re.Pattern[str]:
    return re.compile(rf'"{field}"\s*:\s*"([^"]+)"', re.IGNORECASE)


NAME_RE = _field_pattern("Name")
VERSION_RE = _field_pattern("Version")
AUTHOR_RE = _field_pattern("Author")
DESCRIPTION_RE = _field_pattern("Description")
UNIQUE_ID_RE = _field_pattern("UniqueID")
UPDATE_KEYS_RE = re.compile(r'"UpdateKeys"\s*:\s*\[(.*?)\]', re.IGNORECASE | re.DOTALL)
QUOTED_RE = re.compile(r'"([^"]*)"')
VERSION_VALUE_RE = re.compile(r'("Version"\s*:\s*")([^"]*)(")', re.IGNORECASE)


def _extract(pattern: re.Pattern[str], content: str, default: str) -> str:
    match = pattern.search(content)
    return match.group(1) if match else default


def extract_update_keys(content: str) -> list[str]:
    match = UPDATE_KEYS_RE.search(content)
    if match is None:
        return []
    return [key.strip() for key in QUOTED_RE.findall(match.group(1)) if key.strip()]


def parse_manifest(folder_name: str, content: str) -> PackageRecord:
    return PackageRecord(
        folder_name=folder_name,
        name=_extract(NAME_RE, content, folder_name),
        version=_extract(VERSION_RE, content, "Unknown"),
        author=_extract(AUTHOR_RE, content, "Unknown"),
        description=_extract(DESCRIPTION_RE, content, "No description"),
        enabled=True,
        update_keys=extract_update_keys(content),
        unique_id=_extract(UNIQUE_ID_RE, content, ""),
    )


def parse_mod_folder(mod_path: Path) -> PackageRecord | None:
    """
    Build a record for one folder of the Mods directory.

    :return: the record, or None if the folder is hidden, a system folder,
        or does not look like a mod
    """
    folder_name = mod_path.name

    # Skip hidden folders and system folders
    if folder_name.startswith(".") or folder_name.startswith("__"):
        return None

    manifest_path = mod_path / MANIFEST_FILE_NAME
    if manifest_path.exists():
        try:
            content = manifest_path.read_text(encoding=MANIFEST_ENCODING)
            return parse_manifest(folder_name, content)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading {MANIFEST_FILE_NAME} for {folder_name}: {e}")

    # Check if this looks like a mod directory (has .dll or .cs files)
    try:
        has_mod_files = any(
            entry.suffix.lower() in MOD_FILE_EXTENSIONS for entry in mod_path.iterdir()
        )
    except OSError as e:
        logger.warning(f"Unable to list {mod_path}: {e}")
        return None

    if has_mod_files:
        return PackageRecord(
            folder_name=folder_name,
            name=folder_name,
            description="No manifest found - detected mod files",
        )

    return None


def scan_mods(mods_path: str | Path) -> list[PackageRecord]:
    """
    Scan every mod folder of the Mods directory.

    :raises ScanFailure: if the directory is missing or unreadable
    """
    path = Path(mods_path)
    if not path.exists():
        raise ScanFailure(f"Mods directory does not exist: {mods_path}")
    if not path.is_dir():
        raise ScanFailure(f"Path is not a directory: {mods_path}")

    try:
        entries = sorted(path.iterdir(), key=lambda entry: entry.name.lower())
    except OSError as e:
        raise ScanFailure(f"Failed to read mods directory: {e}") from e

    mods: list[PackageRecord] = []
    for entry in entries:
        if not entry.is_dir():
            continue
        record = parse_mod_folder(entry)
        if record is not None:
            mods.append(record)

    logger.info(f"Scanned {len(mods)} mods in {mods_path}")
    return mods


def set_manifest_version(mods_path: str | Path, folder_name: str, version: str) -> None:
    """
    Overwrite the declared version of a mod's manifest.

    :raises OverrideFailure: if the manifest is missing, has no Version field
        or cannot be written
    """
    manifest_path = Path(mods_path) / folder_name / MANIFEST_FILE_NAME
    if not manifest_path.is_file():
        raise OverrideFailure(f"No {MANIFEST_FILE_NAME} found for {folder_name}")

    # Decoded from bytes so line endings and a leading BOM survive the rewrite
    try:
        raw = manifest_path.read_bytes()
        content = raw.decode(MANIFEST_ENCODING)
    except (OSError, UnicodeDecodeError) as e:
        raise OverrideFailure(f"Unable to read {manifest_path}: {e}") from e

    new_content, replaced = VERSION_VALUE_RE.subn(
        lambda match: f"{match.group(1)}{version}{match.group(3)}", content, count=1
    )
    if replaced == 0:
        raise OverrideFailure(f"{manifest_path} has no Version field")

    temp_path = manifest_path.with_name(f"{MANIFEST_FILE_NAME}.tmp")
    try:
        encoding = MANIFEST_ENCODING if raw.startswith(codecs.BOM_UTF8) else "utf-8"
        temp_path.write_bytes(new_content.encode(encoding))
        os.replace(temp_path, manifest_path)
    except OSError as e:
        temp_path.unlink(missing_ok=True)
        raise OverrideFailure(f"Unable to write {manifest_path}: {e}") from e

    logger.info(f"Set version of {folder_name} to {version}")
