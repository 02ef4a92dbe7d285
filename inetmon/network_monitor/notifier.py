"""State-change notifications: node audio announcements and MQTT status."""

import asyncio
import json
import logging
import os
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

import paho.mqtt.client as mqtt
from paho.mqtt.enums import CallbackAPIVersion

from inetmon.shared.mqtt import MQTTConfig, create_sensor_payload
from .commands import CommandRunner

logger = logging.getLogger(__name__)

SOUND_EXTENSION = ".ul"


class NotificationEvent(Enum):
    """Connectivity transitions worth announcing, with their sound file names."""
    RECONNECTED = "internet-yes"
    LOST = "internet-no"

    @property
    def sound(self) -> str:
        return self.value


class Notifier(ABC):
    """Base class for anything told about connectivity transitions."""

    @abstractmethod
    async def announce(self, event: NotificationEvent) -> None:
        pass

    def close(self) -> None:
        """Release any resources held by the notifier."""
        pass


class AudioNotifier(Notifier):
    """Plays announcement sounds on the node through the Asterisk CLI."""

    PLAY_TIMEOUT = 15.0

    def __init__(
        self,
        node_number: int,
        sound_dir: str,
        asterisk_cli: str,
        runner: Optional[CommandRunner] = None,
    ):
        self.node_number = node_number
        self.sound_dir = sound_dir
        self.asterisk_cli = asterisk_cli
        self.runner = runner or CommandRunner()

    @property
    def available(self) -> bool:
        """True if the Asterisk CLI exists and is executable."""
        return bool(self.asterisk_cli) and os.access(self.asterisk_cli, os.X_OK)

    def sound_path(self, sound: str) -> str:
        if sound.endswith(SOUND_EXTENSION):
            sound = sound[: -len(SOUND_EXTENSION)]
        return os.path.join(self.sound_dir, sound + SOUND_EXTENSION)

    async def play(self, sound: str) -> bool:
        """Play a sound file from the sound directory on the local node."""
        path = self.sound_path(sound)
        if not os.path.exists(path):
            logger.warning(f"Sound file not found: {path}")
            return False

        if not self.available:
            logger.warning("Asterisk CLI not available, skipping audio playback")
            return False

        filename = os.path.basename(path)[: -len(SOUND_EXTENSION)]
        command = f"rpt localplay {self.node_number} {filename}"
        try:
            played = await self.runner.run([self.asterisk_cli, "-rx", command], timeout=self.PLAY_TIMEOUT)
        except (OSError, asyncio.TimeoutError) as e:
            logger.error(f"Audio playback of {filename} failed: {e}")
            return False

        if played:
            logger.info(f"Played audio: {filename}")
        else:
            logger.warning(f"Asterisk rejected playback of {filename}")
        return played

    async def announce(self, event: NotificationEvent) -> None:
        await self.play(event.sound)


class MQTTStatusNotifier(Notifier):
    """Publishes the current connectivity state to MQTT on each transition."""

    STATE_VALUES = {
        NotificationEvent.RECONNECTED: 1,
        NotificationEvent.LOST: 0,
    }

    def __init__(self, config: MQTTConfig, topic: str, node_number: int):
        self.config = config
        self.topic = topic
        self.node_number = node_number
        self.sensor_id = f"internet-monitor-{node_number}"
        self.client: Optional[mqtt.Client] = None

    def connect(self) -> bool:
        """Connect to the broker; on failure publishing stays disabled."""
        self.client = mqtt.Client(
            callback_api_version=CallbackAPIVersion.VERSION2,
            client_id=f"{self.config.client_id}-{self.node_number}",
        )

        def on_connect(client, userdata, flags, reason_code, properties):
            if reason_code == 0:
                logger.info("Connected to MQTT broker")
            else:
                logger.error(f"MQTT connection failed: {reason_code}")

        def on_disconnect(client, userdata, flags, reason_code, properties):
            logger.warning(f"Disconnected from MQTT broker: {reason_code}")

        self.client.on_connect = on_connect
        self.client.on_disconnect = on_disconnect

        try:
            self.client.connect(
                self.config.broker,
                self.config.port,
                self.config.keepalive,
            )
            self.client.loop_start()
        except Exception as e:
            logger.error(f"Failed to connect to MQTT broker: {e}")
            self.client = None
            return False
        return True

    async def announce(self, event: NotificationEvent) -> None:
        if not self.client:
            return

        value = self.STATE_VALUES[event]
        try:
            self.client.publish(
                self.topic,
                json.dumps({
                    "state": "online" if value else "offline",
                    "node": self.node_number,
                    "timestamp": time.time(),
                }),
                qos=self.config.qos,
                retain=True,
            )
            self.client.publish(
                f"{self.topic}/state",
                create_sensor_payload(value, "state", self.sensor_id),
                qos=self.config.qos,
            )
            logger.debug(f"Published connectivity state: {event.name}")
        except Exception as e:
            logger.error(f"Failed to publish status: {e}")

    def close(self) -> None:
        if self.client:
            self.client.loop_stop()
            self.client.disconnect()
            self.client = None
