"""MQTT configuration and utilities."""

import json
import time
from dataclasses import dataclass
from typing import Optional

from .config import ConfigError


@dataclass(frozen=True)
class MQTTConfig:
    """MQTT broker configuration."""
    broker: str = "localhost"
    port: int = 1883
    client_id: str = "internet-monitor"
    keepalive: int = 60
    qos: int = 1

    @classmethod
    def from_dict(cls, data: dict) -> "MQTTConfig":
        """Create config from dictionary."""
        if not isinstance(data, dict):
            raise ConfigError(f"Invalid MQTT settings: {data!r}")
        try:
            return cls(
                broker=str(data.get("broker", "localhost")),
                port=int(data.get("port", 1883)),
                client_id=str(data.get("client_id", "internet-monitor")),
                keepalive=int(data.get("keepalive", 60)),
                qos=int(data.get("qos", 1)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid MQTT settings: {e}") from None


def create_sensor_payload(
    value: float,
    unit: str,
    sensor_id: str,
    timestamp: Optional[float] = None,
) -> str:
    """Create a standardized MQTT payload for a status value.

    Args:
        value: The value to publish.
        unit: Unit of measurement (e.g., 'state').
        sensor_id: Identifier of the publishing source.
        timestamp: Unix timestamp (defaults to current time).

    Returns:
        JSON string payload.
    """
    return json.dumps({
        "value": value,
        "unit": unit,
        "ts": timestamp or time.time(),
        "sensor": sensor_id,
    })
