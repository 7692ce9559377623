"""
Per-user dashboard preferences.

Each preference is stored as one `user_settings` row holding a JSON-encoded
value under its camelCase key; writes go through the `upsert_user_setting`
procedure so a key is created or replaced in one call.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .backend import BackendClient
from .errors import BackendError

logger = logging.getLogger(__name__)

SETTINGS_TABLE = "user_settings"
UPSERT_FUNCTION = "upsert_user_setting"


class UserPreferences(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    notifications: bool = True
    email_alerts: bool = Field(default=False, alias="emailAlerts")
    auto_refresh: bool = Field(default=True, alias="autoRefresh")
    theme: str = "light"
    refresh_interval: int = Field(default=30, alias="refreshInterval")
    full_name: str = Field(default="", alias="fullName")
    email: str = ""
    company: str = ""


class PreferencesUpdate(BaseModel):
    """Partial update; only fields present in the request are saved."""

    model_config = ConfigDict(populate_by_name=True)

    notifications: Optional[bool] = None
    email_alerts: Optional[bool] = Field(default=None, alias="emailAlerts")
    auto_refresh: Optional[bool] = Field(default=None, alias="autoRefresh")
    theme: Optional[str] = None
    refresh_interval: Optional[int] = Field(default=None, alias="refreshInterval")
    full_name: Optional[str] = Field(default=None, alias="fullName")
    email: Optional[str] = None
    company: Optional[str] = None


def _decode(raw: Any) -> Any:
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except ValueError:
        # values written by older clients may be plain strings
        return raw


def apply_stored(prefs: UserPreferences, rows) -> UserPreferences:
    """Overlay stored key/value rows on `prefs`; unknown keys and invalid values are skipped."""
    values = prefs.model_dump(by_alias=True)
    for row in rows:
        key = row.get("setting_key")
        if key not in values:
            continue
        candidate = {**values, key: _decode(row.get("setting_value"))}
        try:
            UserPreferences.model_validate(candidate)
        except ValidationError:
            logger.warning("ignoring invalid stored value for setting %s", key)
            continue
        values = candidate
    return UserPreferences.model_validate(values)


def load(
    backend: BackendClient,
    user_id: str,
    email: str = "",
    full_name: str = "",
) -> UserPreferences:
    rows = backend.select(
        SETTINGS_TABLE,
        columns="setting_key,setting_value",
        filters={"user_id": user_id},
    )
    prefs = UserPreferences(email=email, full_name=full_name)
    return apply_stored(prefs, rows)


def save(backend: BackendClient, user_id: str, changes: Dict[str, Any]) -> None:
    """
    Upsert every changed setting, one call per key.

    All keys are attempted even when one fails; afterwards a single
    BackendError reports that some settings were not saved.
    """
    failed = []
    for key, value in changes.items():
        try:
            backend.rpc(UPSERT_FUNCTION, {
                "p_user_id": user_id,
                "p_setting_key": key,
                "p_setting_value": json.dumps(value),
            })
        except BackendError as e:
            logger.warning("saving setting %s failed: %s", key, e)
            failed.append(key)

    if failed:
        raise BackendError("Some settings failed to save")
    logger.info("saved %d settings for user %s", len(changes), user_id)
