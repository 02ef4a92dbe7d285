"""Configuration for the internet monitor."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple, Union

from inetmon.shared.config import (
    ConfigError,
    get_log_level,
    is_yaml_path,
    load_keyvalue_config,
    load_yaml_config,
    resolve_config_path,
)
from inetmon.shared.mqtt import MQTTConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "/etc/internet-monitor.conf"
CONFIG_ENV_VAR = "INTERNET_MONITOR_CONFIG"

MIN_CHECK_INTERVAL = 30
MAX_CHECK_INTERVAL = 3600

TRUE_STRINGS = ("true", "yes", "on", "1")
FALSE_STRINGS = ("false", "no", "off", "0")

# KEY=VALUE file keys -> NetworkMonitorConfig.from_dict keys
KEYVALUE_MAP = {
    "NODE_NUMBER": "node_number",
    "CHECK_INTERVAL": "check_interval",
    "PING_HOSTS": "ping_hosts",
    "PING_TIMEOUT": "ping_timeout",
    "DNS_HOSTNAME": "dns_hostname",
    "SOUND_DIR": "sound_dir",
    "LOG_FILE": "log_file",
    "ASTERISK_CLI": "asterisk_cli",
    "MAX_LOG_SIZE": "max_log_size",
    "LOG_RETENTION": "log_retention",
    "RECOVERY_SERVICE": "recovery_service",
    "LOG_LEVEL": "log_level",
    "MQTT_TOPIC": "mqtt_topic",
}


def _to_int(name: str, value) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"Invalid {name.upper()}: {value}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid {name.upper()}: {value}") from None


def _to_hosts(value) -> Tuple[str, ...]:
    if isinstance(value, str):
        value = value.split()
    elif not isinstance(value, (list, tuple)):
        raise ConfigError(f"Invalid PING_HOSTS: {value!r} (expected a list of hosts)")
    return tuple(str(host).strip() for host in value if str(host).strip())


def _to_bool(name: str, value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    raise ConfigError(f"Invalid {name.upper()}: {value!r} (expected true or false)")


def _keyvalue_to_dict(values: dict) -> dict:
    """Map the raw values of a KEY=VALUE file onto from_dict keys."""
    data = {KEYVALUE_MAP[key]: value for key, value in values.items() if key in KEYVALUE_MAP}
    if values.get("MQTT_BROKER"):
        data["mqtt"] = {"broker": values["MQTT_BROKER"], "port": values.get("MQTT_PORT", 1883)}
    return data


@dataclass(frozen=True)
class NetworkMonitorConfig:
    """Validated, immutable settings for the internet monitor."""

    # Node identity
    node_number: int = 12345

    # Connectivity check settings
    check_interval: int = 180  # seconds
    ping_hosts: Tuple[str, ...] = ("1.1.1.1", "8.8.8.8", "208.67.222.222")
    ping_timeout: int = 3  # seconds per host
    dns_hostname: str = "google.com"

    # Audio announcements
    sound_dir: str = "/usr/share/asterisk/sounds/custom"
    asterisk_cli: str = "/usr/sbin/asterisk"

    # Logging
    log_file: str = "/var/log/internet-monitor.log"
    max_log_size: int = 10_485_760  # bytes
    log_retention: int = 5
    log_level: str = "INFO"

    # Recovery
    recovery_service: str = "NetworkManager"

    # MQTT status publishing (optional)
    mqtt_enabled: bool = False
    mqtt: MQTTConfig = field(default_factory=MQTTConfig)
    mqtt_topic: str = "gateway/system/internet"

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raise ConfigError if any setting is out of range."""
        if self.node_number < 1:
            raise ConfigError(f"Invalid NODE_NUMBER: {self.node_number}")
        if not MIN_CHECK_INTERVAL <= self.check_interval <= MAX_CHECK_INTERVAL:
            raise ConfigError(
                f"Invalid CHECK_INTERVAL: {self.check_interval} "
                f"(must be between {MIN_CHECK_INTERVAL} and {MAX_CHECK_INTERVAL} seconds)"
            )
        if not self.ping_hosts:
            raise ConfigError("PING_HOSTS must name at least one host")
        if self.ping_timeout < 1:
            raise ConfigError(f"Invalid PING_TIMEOUT: {self.ping_timeout}")
        if self.max_log_size < 1:
            raise ConfigError(f"Invalid MAX_LOG_SIZE: {self.max_log_size}")
        if self.log_retention < 1:
            raise ConfigError(f"Invalid LOG_RETENTION: {self.log_retention}")
        if not self.recovery_service:
            raise ConfigError("RECOVERY_SERVICE must not be empty")

    @classmethod
    def from_dict(cls, data: dict) -> "NetworkMonitorConfig":
        """Create config from dictionary."""
        defaults = cls()
        mqtt_data = data.get("mqtt") or {}

        return cls(
            node_number=_to_int("node_number", data.get("node_number", defaults.node_number)),
            check_interval=_to_int("check_interval", data.get("check_interval", defaults.check_interval)),
            ping_hosts=_to_hosts(data.get("ping_hosts", defaults.ping_hosts)),
            ping_timeout=_to_int("ping_timeout", data.get("ping_timeout", defaults.ping_timeout)),
            dns_hostname=data.get("dns_hostname", defaults.dns_hostname),
            sound_dir=data.get("sound_dir", defaults.sound_dir),
            asterisk_cli=data.get("asterisk_cli", defaults.asterisk_cli),
            log_file=data.get("log_file", defaults.log_file),
            max_log_size=_to_int("max_log_size", data.get("max_log_size", defaults.max_log_size)),
            log_retention=_to_int("log_retention", data.get("log_retention", defaults.log_retention)),
            log_level=get_log_level(data),
            recovery_service=data.get("recovery_service", defaults.recovery_service),
            mqtt_enabled=_to_bool("mqtt_enabled", data.get("mqtt_enabled", bool(mqtt_data))),
            mqtt=MQTTConfig.from_dict(mqtt_data),
            mqtt_topic=data.get("mqtt_topic", defaults.mqtt_topic),
        )


def load_config(config_path: Optional[Union[str, Path]] = None) -> NetworkMonitorConfig:
    """Load configuration from a config file and the environment.

    Args:
        config_path: Path to a KEY=VALUE or YAML config file. If not
                    provided, looks for INTERNET_MONITOR_CONFIG env var,
                    then /etc/internet-monitor.conf. A missing file
                    means built-in defaults.

    Returns:
        NetworkMonitorConfig instance.

    Raises:
        ConfigError: If the file or any value is invalid.
    """
    path = resolve_config_path(config_path, CONFIG_ENV_VAR, DEFAULT_CONFIG_FILE)

    data: dict = {}
    if path.exists():
        if is_yaml_path(path):
            data = load_yaml_config(path)
        else:
            data = _keyvalue_to_dict(load_keyvalue_config(path))
    else:
        logger.debug(f"Config file {path} not found, using defaults")

    # Environment variable overrides
    if log_level := os.environ.get("LOG_LEVEL"):
        data["log_level"] = log_level
    if mqtt_broker := os.environ.get("MQTT_BROKER"):
        data["mqtt"] = {**(data.get("mqtt") or {}), "broker": mqtt_broker}
        data["mqtt_enabled"] = True

    return NetworkMonitorConfig.from_dict(data)
