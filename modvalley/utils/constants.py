from enum import Enum

APP_NAME = "ModValley"

# Persisted client-side slots (key-value store)
UPDATE_STATUS_SLOT = "modUpdateStatus"
LAST_UPDATE_CHECK_SLOT = "lastUpdateCheck"

# The Nexus API quota only applies when a key is configured
RATE_LIMIT_WINDOW_MS = 60 * 60 * 1000

# Download reference used when the remote knows an update exists but offers no link
MANUAL_CHECK_ONLY = "manual-check-only"

DEFAULT_PROGRESS_TICK_INTERVAL = 0.1
DEFAULT_PHASE_RESET_DELAY = 1.5

SMAPI_API_URL = "https://smapi.io/api/v3.0/mods"
SMAPI_API_VERSION = "4.0.0"
STARDEW_GAME_VERSION = "1.6.0"

NEXUS_API_URL = "https://api.nexusmods.com/v1"
NEXUS_GAME_DOMAIN = "stardewvalley"
NEXUS_MOD_PAGE_URL = "https://www.nexusmods.com/stardewvalley/mods/{mod_id}?tab=files"

MANIFEST_FILE_NAME = "manifest.json"
MOD_FILE_EXTENSIONS = {".dll", ".cs"}


class UpdateSource(str, Enum):
    NEXUS = "Nexus"
    GITHUB = "GitHub"
    CHUCKLEFISH = "Chucklefish"
    MODDROP = "ModDrop"
    CURSEFORGE = "CurseForge"
