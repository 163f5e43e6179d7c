"""Database-backed application settings.

The set of settings is fixed in code (``DECLARED_SETTINGS``). Each one has a
type tag that decides how its raw string value is cast on read and how a new
value is stored on write. Config is read from the database on every call; no
copy is kept in process memory.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sandwich_spawnpoint.core.errors import (
    AuthorizationError,
    ConfigTypeMismatchError,
    NotFoundError,
    ValidationError,
)
from sandwich_spawnpoint.core.security import hash_password, verify_password
from sandwich_spawnpoint.core.settings import settings
from sandwich_spawnpoint.models import ConfigEntry, ConfigType, VipOtp

logger = logging.getLogger(__name__)

OTP_LENGTH = 6
OTP_MAX_TRIES = 20

ConfigValue = str | int | float | bool | list[str]


@dataclass(frozen=True)
class ConfigSetting:
    """A declared setting: its key, type tag and default raw value."""

    key: str
    type: ConfigType
    default: str


DECLARED_SETTINGS: tuple[ConfigSetting, ...] = (
    ConfigSetting("enabled", ConfigType.BOOLEAN, "true"),
    ConfigSetting("allowOrders", ConfigType.BOOLEAN, "false"),
    ConfigSetting("adminUpgradePassword", ConfigType.PASSWORD, settings.admin_upgrade_password),
    ConfigSetting("vipOtps", ConfigType.VIPOTPS, ""),
)


def cast_boolean(raw: str) -> bool:
    return raw in ("true", "True")


def cast_number(raw: str) -> int | float:
    number = float(raw)
    return int(number) if number.is_integer() else number


def _encode_boolean(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower()
    raise ValidationError("Value must be a boolean")


def _encode_number(value: Any) -> str:
    if isinstance(value, bool):
        raise ValidationError("Value must be a number")
    try:
        cast_number(str(value))
    except (TypeError, ValueError) as err:
        raise ValidationError("Value must be a number") from err
    return str(value)


def _encode_string(value: Any) -> str:
    return str(value)


def _encode_password(value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise ValidationError("Password must be a non-empty string")
    return hash_password(value)


_CASTS: dict[ConfigType, Callable[[str], Any]] = {
    ConfigType.STRING: str,
    ConfigType.NUMBER: cast_number,
    ConfigType.BOOLEAN: cast_boolean,
}

_ENCODERS: dict[ConfigType, Callable[[Any], str]] = {
    ConfigType.STRING: _encode_string,
    ConfigType.NUMBER: _encode_number,
    ConfigType.BOOLEAN: _encode_boolean,
    ConfigType.PASSWORD: _encode_password,
}


class ConfigStore:
    """Typed access to the ``Config`` table and the VIP one-time codes."""

    def __init__(
        self,
        db: Session,
        declared: tuple[ConfigSetting, ...] = DECLARED_SETTINGS,
    ) -> None:
        self.db = db
        self.declared = declared

    def reconcile(self) -> None:
        """Make the stored keys match the declared ones.

        Unknown keys are deleted and missing keys are created with their
        defaults. Existing rows are left untouched, so running this on every
        boot is safe.
        """
        declared_keys = {setting.key for setting in self.declared}
        rows = self.db.execute(select(ConfigEntry)).scalars().all()
        stored_keys = {row.key for row in rows}

        for row in rows:
            if row.key not in declared_keys:
                logger.info("Removing undeclared config key %s", row.key)
                self.db.delete(row)

        for setting in self.declared:
            if setting.key in stored_keys:
                continue
            value = setting.default
            if setting.type is ConfigType.PASSWORD:
                value = hash_password(value)
            logger.info("Creating config key %s", setting.key)
            self.db.add(ConfigEntry(key=setting.key, type=setting.type, value=value))

        self.db.commit()

    def get(self, strip_sensitive: bool = False) -> dict[str, ConfigValue]:
        """Return every setting cast to its declared type.

        Password settings are never returned. One-time code lists are
        returned unless ``strip_sensitive`` is set.
        """
        config: dict[str, ConfigValue] = {}
        for row in self.db.execute(select(ConfigEntry)).scalars():
            if row.type is ConfigType.PASSWORD:
                continue
            if row.type is ConfigType.VIPOTPS:
                if not strip_sensitive:
                    config[row.key] = self.list_otps()
                continue
            config[row.key] = _CASTS[row.type](row.value)
        return config

    def _entry(self, key: str) -> ConfigEntry:
        entry = self.db.execute(
            select(ConfigEntry).where(ConfigEntry.key == key)
        ).scalar_one_or_none()
        if entry is None:
            raise NotFoundError(f"Config key {key} does not exist")
        return entry

    def update(self, key: str, value: Any) -> ConfigEntry:
        """Store a new value for ``key``, hashing it for password settings."""
        entry = self._entry(key)
        if entry.type is ConfigType.VIPOTPS:
            raise AuthorizationError("One-time codes cannot be modified through the config")
        entry.value = _ENCODERS[entry.type](value)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def validate_password(self, key: str, candidate: str) -> bool:
        """Check ``candidate`` against the hash stored for a password setting."""
        entry = self._entry(key)
        if entry.type is not ConfigType.PASSWORD:
            raise ConfigTypeMismatchError(f"Config key {key} is not a password")
        return verify_password(candidate, entry.value)

    def list_otps(self) -> list[str]:
        """Return outstanding VIP codes, oldest first."""
        return list(
            self.db.execute(select(VipOtp.code).order_by(VipOtp.id)).scalars()
        )

    def create_otp(self) -> str:
        """Generate, store and return a new six digit VIP code."""
        for _ in range(OTP_MAX_TRIES):
            code = f"{secrets.randbelow(10 ** OTP_LENGTH):0{OTP_LENGTH}d}"
            if len(code) != OTP_LENGTH:
                continue
            self.db.add(VipOtp(code=code))
            try:
                self.db.flush()
            except IntegrityError:
                # Code already outstanding; draw another one.
                self.db.rollback()
                continue
            self._mirror_otps()
            self.db.commit()
            return code
        raise RuntimeError("Could not generate a unique one-time code")

    def consume_otp(self, code: str) -> bool:
        """Remove ``code`` if it is outstanding and report whether it was.

        A single conditional delete, so two concurrent callers can never both
        consume the same code.
        """
        result = self.db.execute(
            delete(VipOtp)
            .where(VipOtp.code == code)
            .execution_options(synchronize_session=False)
        )
        consumed = bool(result.rowcount)
        if consumed:
            self._mirror_otps()
        self.db.commit()
        return consumed

    def _mirror_otps(self) -> None:
        """Write the outstanding codes, comma separated, into the code list setting.

        Sync clients read the list from the Config row, so it is kept in the
        same transaction as the ``VipOtp`` change.
        """
        joined = ",".join(self.list_otps())
        for entry in self.db.execute(
            select(ConfigEntry).where(ConfigEntry.type == ConfigType.VIPOTPS)
        ).scalars():
            entry.value = joined
