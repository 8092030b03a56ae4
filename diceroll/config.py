import dataclasses
import logging
import os
import typing

import yaml

from diceroll.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = os.path.join(os.path.dirname(__file__), "settings.default.yaml")

_LIMIT_KEYS = (
    "explosion_limit",
    "compound_limit",
    "max_expression_length",
    "max_parse_depth",
)


@dataclasses.dataclass(frozen=True)
class Settings:
    explosion_limit: int = 50
    compound_limit: int = 100
    max_expression_length: int = 1000
    max_parse_depth: int = 200
    log_level: str = "WARNING"

    @staticmethod
    def from_dict(data: typing.Dict[str, typing.Any]) -> "Settings":
        known = {field.name for field in dataclasses.fields(Settings)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError("Unknown settings: %s" % ", ".join(unknown))

        values = dict(data)
        for key in _LIMIT_KEYS:
            if key not in values:
                continue
            value = values[key]
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError("%s must be a positive integer, got %r" % (key, value))

        if "log_level" in values:
            level = str(values["log_level"]).upper()
            if not isinstance(logging.getLevelName(level), int):
                raise ConfigError("Unknown log_level %r" % values["log_level"])
            values["log_level"] = level

        return Settings(**values)


def _read_yaml(path: str) -> typing.Dict[str, typing.Any]:
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError("Could not read settings file %s: %s" % (path, e))
    except yaml.YAMLError as e:
        raise ConfigError("Settings file %s is not valid YAML: %s" % (path, e))

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Settings file %s must hold a mapping" % path)
    return data


def load_settings(path: typing.Optional[str] = None) -> Settings:
    """Load settings, overlaying ``path`` (if given) on the shipped defaults."""
    data = _read_yaml(DEFAULT_SETTINGS_FILE)
    if path is not None:
        logger.debug("Loading settings from %s", path)
        data.update(_read_yaml(path))
    return Settings.from_dict(data)
