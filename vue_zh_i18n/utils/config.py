import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "i18n_config.json"

EXTRACT_DEFAULTS: Dict[str, Any] = {
    "namespace": "test",
    "common_namespace": "common",
    "common_file": "common.json",
    "translate_fn": "$t",
    "log_level": "INFO",
    "log_file": None,
    "ignore": [
        "**/node_modules/**",
        "**/dist/**",
        "**/.git/**",
    ],
    "max_file_size": 2 * 1024 * 1024,
}


@dataclasses.dataclass(frozen=True)
class ExtractConfig:
    namespace: str = EXTRACT_DEFAULTS["namespace"]
    common_namespace: str = EXTRACT_DEFAULTS["common_namespace"]
    common_file: str = EXTRACT_DEFAULTS["common_file"]
    translate_fn: str = EXTRACT_DEFAULTS["translate_fn"]
    log_level: str = EXTRACT_DEFAULTS["log_level"]
    log_file: Optional[str] = EXTRACT_DEFAULTS["log_file"]
    ignore: Tuple[str, ...] = tuple(EXTRACT_DEFAULTS["ignore"])
    max_file_size: Optional[int] = EXTRACT_DEFAULTS["max_file_size"]

    def with_overrides(self, **overrides: Any) -> "ExtractConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "ignore" in changes:
            changes["ignore"] = tuple(changes["ignore"])
        return dataclasses.replace(self, **changes)


def load_config(path: Optional[Path] = None) -> ExtractConfig:
    """Read the extraction config, falling back to defaults.

    Without an explicit path, ``i18n_config.json`` in the working directory is
    used when it exists. Unknown keys are ignored; an unreadable or malformed
    file is logged and the defaults are used.
    """
    explicit = path is not None
    cfg_path = Path(path) if explicit else Path.cwd() / DEFAULT_CONFIG_NAME
    if not cfg_path.exists():
        if explicit:
            logger.error("Config file not found: %s (using defaults)", cfg_path)
        return ExtractConfig()

    try:
        raw = cfg_path.read_text(encoding="utf-8")
        data = json.loads(raw or "{}")
    except (OSError, ValueError):
        logger.error("Failed to read/parse %s (using defaults)", cfg_path)
        return ExtractConfig()

    if not isinstance(data, dict):
        logger.error("Config %s must be a JSON object (using defaults)", cfg_path)
        return ExtractConfig()

    known = {f.name for f in dataclasses.fields(ExtractConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", cfg_path, ", ".join(unknown))

    cfg = ExtractConfig().with_overrides(**{k: v for k, v in data.items() if k in known})
    logger.debug("Loaded config from %s", cfg_path)
    return cfg
