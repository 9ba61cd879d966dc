import logging
import os
import typing

import yaml

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = os.path.join(
    os.path.dirname(__file__), "settings.default.yaml"
)
LOCAL_SETTINGS_FILE = "settings.yaml"


class SettingsError(ValueError):
    pass


def _is_count(value) -> bool:
    # bool is an int subclass, but "explosion_limit: yes" is a mistake
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


VALIDATORS: typing.Dict[str, typing.Tuple[typing.Callable[[typing.Any], bool], str]] = {
    "verbose": (lambda v: isinstance(v, bool), "true or false"),
    "explosion_limit": (_is_count, "a non-negative integer"),
    "dice_limit": (_is_count, "a non-negative integer"),
    "log_level": (lambda v: isinstance(v, str), "a logging level name"),
    "seed": (lambda v: v is None or _is_count(v), "a non-negative integer or null"),
}


def _read(path: str) -> typing.Dict[str, typing.Any]:
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SettingsError("%s: invalid YAML: %s" % (path, e)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SettingsError("%s: expected a mapping, got %s" % (path, data))
    return data


def load_settings(path: typing.Optional[str] = None) -> typing.Dict[str, typing.Any]:
    """Load the packaged defaults, overlaid with a user settings file.

    ``path`` names the user file explicitly; otherwise ``settings.yaml`` in
    the working directory is used when present.
    """
    settings = _read(DEFAULT_SETTINGS_FILE)
    if path is None and os.path.exists(LOCAL_SETTINGS_FILE):
        path = LOCAL_SETTINGS_FILE
    if path is not None:
        if not os.path.exists(path):
            raise SettingsError("settings file %s not found" % path)
        for key, value in _read(path).items():
            if key not in VALIDATORS:
                logger.warning("%s: ignoring unknown setting %r", path, key)
                continue
            is_valid, expected = VALIDATORS[key]
            if not is_valid(value):
                raise SettingsError(
                    "%s: %s must be %s, got %r" % (path, key, expected, value)
                )
            settings[key] = value
        logger.debug("loaded settings from %s", path)
    return settings
