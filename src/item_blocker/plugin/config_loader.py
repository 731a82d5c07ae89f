"""Blocker configuration loader with Pydantic v2 validation.

Loads the persisted block lists and plugin settings into a typed
:class:`BlockerConfig`.  Field aliases match the persisted record so files
written by older deployments load unchanged::

    {
      "Block Duration (Hours) after Wipe": 30,
      "Permanent Blocked Items": ["rifle.ak"],
      "Timed Blocked Ammo": null,
      ...
    }

Bad values are repaired rather than rejected: a ``null`` list becomes
empty, a negative duration becomes ``0``, an invalid colour falls back to
the default.  Each repair is logged as a warning.

Example
-------
>>> loader = ConfigLoader()
>>> config = loader.load_string('{"Permanent Blocked Items": null}')
>>> config.permanent_blocked_items
[]
"""
from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator

from item_blocker.audit.logger import DEFAULT_TAIL_BYTES, DEFAULT_TAIL_LINES
from item_blocker.audit.sanitizer import strip_rich_text
from item_blocker.policies.store import coerce_alias_list

logger = logging.getLogger(__name__)

PERMISSION_PREFIX = "itemblocker"
DEFAULT_COLOR = "#f44253"
DEFAULT_DURATION_HOURS = 30
DEFAULT_LOG_DIR = Path("./logs")
DEFAULT_BASE_NAME = "item_blocker"

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")

_LIST_FIELDS = (
    "permanent_blocked_items",
    "permanent_blocked_clothes",
    "permanent_blocked_ammo",
    "timed_blocked_items",
    "timed_blocked_clothes",
    "timed_blocked_ammo",
)


class AuditSettings(BaseModel):
    """Where the audit log lives and how much of it ``loglist`` shows."""

    model_config = {"extra": "allow"}

    log_dir: Path = Field(default=DEFAULT_LOG_DIR)
    base_name: str = Field(default=DEFAULT_BASE_NAME, min_length=1)
    tail_max_lines: int = Field(default=DEFAULT_TAIL_LINES, ge=1)
    tail_max_bytes: int = Field(default=DEFAULT_TAIL_BYTES, ge=1)

    @field_validator("log_dir", mode="before")
    @classmethod
    def repair_log_dir(cls, value: object) -> object:
        if isinstance(value, Path) or (isinstance(value, str) and value.strip()):
            return value
        logger.warning("Audit log_dir %r is invalid; reset to %s.", value, DEFAULT_LOG_DIR)
        return DEFAULT_LOG_DIR

    @field_validator("base_name", mode="before")
    @classmethod
    def repair_base_name(cls, value: object) -> str:
        # The base name becomes part of a file name inside log_dir.
        if isinstance(value, str) and value.strip() and not any(sep in value for sep in "/\\"):
            return value.strip()
        logger.warning("Audit base_name %r is invalid; reset to %s.", value, DEFAULT_BASE_NAME)
        return DEFAULT_BASE_NAME

    @field_validator("tail_max_lines", "tail_max_bytes", mode="before")
    @classmethod
    def repair_tail_limit(cls, value: object, info: ValidationInfo) -> int:
        default = DEFAULT_TAIL_LINES if info.field_name == "tail_max_lines" else DEFAULT_TAIL_BYTES
        if isinstance(value, bool):
            number = None
        else:
            try:
                number = int(value)  # type: ignore[call-overload]
            except (TypeError, ValueError):
                number = None
        if number is None or number < 1:
            logger.warning("Audit %s %r is invalid; reset to %d.", info.field_name, value, default)
            return default
        return number


class BlockerConfig(BaseModel):
    """Persisted block lists plus presentation and permission settings."""

    model_config = {"extra": "allow", "populate_by_name": True}

    block_duration_hours: int = Field(
        default=DEFAULT_DURATION_HOURS, alias="Block Duration (Hours) after Wipe"
    )

    permanent_blocked_items: list[str] = Field(default_factory=list, alias="Permanent Blocked Items")
    permanent_blocked_clothes: list[str] = Field(default_factory=list, alias="Permanent Blocked Clothes")
    permanent_blocked_ammo: list[str] = Field(default_factory=list, alias="Permanent Blocked Ammo")
    timed_blocked_items: list[str] = Field(default_factory=list, alias="Timed Blocked Items")
    timed_blocked_clothes: list[str] = Field(default_factory=list, alias="Timed Blocked Clothes")
    timed_blocked_ammo: list[str] = Field(default_factory=list, alias="Timed Blocked Ammo")

    bypass_permission: str = Field(default=f"{PERMISSION_PREFIX}.bypass", alias="Bypass Permission")
    admin_permission: str = Field(default=f"{PERMISSION_PREFIX}.admin", alias="Admin Permission")

    chat_prefix: str = Field(default="[ItemBlocker]", alias="Chat Prefix")
    chat_prefix_color: str = Field(default=DEFAULT_COLOR, alias="Chat Prefix Color")

    audit: AuditSettings = Field(default_factory=AuditSettings)

    @field_validator(*_LIST_FIELDS, mode="before")
    @classmethod
    def coerce_lists(cls, value: object, info: ValidationInfo) -> list[str]:
        return coerce_alias_list(value, info.field_name or "")

    @field_validator("audit", mode="before")
    @classmethod
    def repair_audit(cls, value: object) -> object:
        if isinstance(value, (dict, AuditSettings)):
            return value
        logger.warning("Audit section %r is not a mapping; using defaults.", value)
        return {}

    @field_validator("block_duration_hours", mode="before")
    @classmethod
    def clamp_duration(cls, value: object) -> int:
        if value is None:
            return DEFAULT_DURATION_HOURS
        try:
            hours = int(value)  # type: ignore[call-overload]
        except (TypeError, ValueError):
            logger.warning("Block duration %r is not a number; reset to %d.", value, DEFAULT_DURATION_HOURS)
            return DEFAULT_DURATION_HOURS
        if hours < 0:
            logger.warning("Block duration was %d; reset to 0.", hours)
            return 0
        return hours

    @field_validator("chat_prefix_color", mode="before")
    @classmethod
    def validate_color(cls, value: object) -> str:
        if isinstance(value, str) and _HEX_COLOR.match(value):
            return value
        logger.warning("Chat prefix color %r is invalid; reset to %s.", value, DEFAULT_COLOR)
        return DEFAULT_COLOR

    @field_validator("chat_prefix", mode="before")
    @classmethod
    def strip_prefix_markup(cls, value: object) -> str:
        text = value if isinstance(value, str) else ""
        stripped = strip_rich_text(text)
        if stripped != text:
            logger.warning("Rich Text tags were stripped from the chat prefix.")
        return stripped

    @field_validator("bypass_permission", "admin_permission", mode="before")
    @classmethod
    def prefix_permission(cls, value: object, info: ValidationInfo) -> str:
        suffix = "bypass" if info.field_name == "bypass_permission" else "admin"
        if isinstance(value, str) and value.lower().startswith(f"{PERMISSION_PREFIX}."):
            return value
        corrected = f"{PERMISSION_PREFIX}.{suffix}"
        logger.warning("Permission %r corrected to %s.", value, corrected)
        return corrected

    def persisted_lists(self) -> dict[str, list[str]]:
        """Return the six block lists keyed by their persisted field names."""
        dumped = self.model_dump(by_alias=True, include=set(_LIST_FIELDS))
        return {key: list(value) for key, value in dumped.items()}

    def with_lists(self, lists: dict[str, list[str]]) -> "BlockerConfig":
        """Return a copy whose block lists are replaced by ``lists``."""
        data = self.model_dump(by_alias=True)
        data.update(lists)
        return BlockerConfig.model_validate(data)


class ConfigLoader:
    """Loads, validates and saves :class:`BlockerConfig` files.

    ``.json`` files are parsed with :mod:`json`; anything else with
    ``yaml.safe_load``.

    Example
    -------
    >>> loader = ConfigLoader()
    >>> config = loader.load(Path("item_blocker.yaml"))
    """

    def load(self, config_path: Path) -> BlockerConfig:
        """Load and validate a configuration file.

        Raises
        ------
        FileNotFoundError:
            When the config file does not exist.
        ValueError:
            When the content cannot be parsed into a mapping.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Blocker config not found: {config_path}")

        text = config_path.read_text(encoding="utf-8")
        if config_path.suffix.lower() == ".json":
            return self._validate(json.loads(text) if text.strip() else {})
        return self.load_string(text)

    def load_string(self, content: str) -> BlockerConfig:
        """Load and validate YAML (or JSON) text directly."""
        return self._validate(yaml.safe_load(content) or {})

    def defaults(self) -> BlockerConfig:
        """Return a configuration with every default applied."""
        return BlockerConfig()

    def load_or_default(self, config_path: Path) -> BlockerConfig:
        """Load ``config_path``, falling back to defaults on any error.

        A missing file is created with the defaults.  An unreadable or
        invalid file is left untouched so the operator can fix it.
        """
        config, _ = self.load_with_status(config_path)
        return config

    def load_with_status(self, config_path: Path) -> tuple[BlockerConfig, bool]:
        """Like :meth:`load_or_default`, also reporting whether it is safe to save.

        Returns
        -------
        tuple[BlockerConfig, bool]
            The configuration, and ``False`` when it is a defaults fallback
            for an existing file that could not be loaded.  Saving in that
            state would overwrite the operator's block lists.
        """
        config_path = Path(config_path)
        try:
            config = self.load(config_path)
        except FileNotFoundError:
            logger.warning("Configuration %s not found. Creating default.", config_path)
            config = self.defaults()
            try:
                self.save(config, config_path)
            except OSError as exc:
                logger.warning("Could not write default configuration: %s", exc)
            return config, True
        except (OSError, ValueError, yaml.YAMLError) as exc:
            logger.warning("Configuration %s is invalid (%s). Using defaults.", config_path, exc)
            return self.defaults(), False
        logger.info("Loaded blocker configuration from %s", config_path)
        return config, True

    def save(self, config: BlockerConfig, config_path: Path) -> None:
        """Write ``config`` using the persisted field names.

        The file is written to a temporary sibling and moved into place, so
        a failed write never leaves a truncated configuration behind.
        """
        config_path = Path(config_path)
        data = config.model_dump(by_alias=True, mode="json")
        config_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{config_path.name}.", suffix=".tmp", dir=config_path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                if config_path.suffix.lower() == ".json":
                    fh.write(json.dumps(data, indent=2, ensure_ascii=False) + "\n")
                else:
                    yaml.safe_dump(data, fh, default_flow_style=False, sort_keys=False, allow_unicode=True)
            os.replace(tmp_name, config_path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    @staticmethod
    def _validate(raw: object) -> BlockerConfig:
        if not isinstance(raw, dict):
            raise ValueError("Blocker config must be a mapping at the top level.")
        try:
            return BlockerConfig.model_validate(raw)
        except ValidationError as exc:
            raise ValueError(str(exc)) from exc
