"""Internet Monitor Service - Watches connectivity and recovers the network service."""

__version__ = "0.1.0"

import logging

from .monitor import NetworkMonitorService, NetworkState, StartupError

logger = logging.getLogger(__name__)


def build_service(config):
    """Wire the monitor and its collaborators from a loaded config."""
    from .clock import Clock
    from .commands import CommandRunner
    from .evaluator import ConnectivityEvaluator
    from .notifier import AudioNotifier, MQTTStatusNotifier
    from .probes import ConnectivityProber
    from .recovery import RecoveryManager
    from .services import SystemdServiceController

    clock = Clock()
    runner = CommandRunner()

    evaluator = ConnectivityEvaluator(
        ConnectivityProber(runner),
        config.ping_hosts,
        ping_timeout=config.ping_timeout,
        dns_hostname=config.dns_hostname,
    )
    recovery = RecoveryManager(
        SystemdServiceController(runner),
        clock=clock,
        service_name=config.recovery_service,
    )

    audio = AudioNotifier(config.node_number, config.sound_dir, config.asterisk_cli, runner)
    if not audio.available:
        logger.warning(
            f"Asterisk CLI not found at {config.asterisk_cli}, audio playback will be disabled"
        )
    notifiers = [audio]

    if config.mqtt_enabled:
        publisher = MQTTStatusNotifier(config.mqtt, config.mqtt_topic, config.node_number)
        if publisher.connect():
            notifiers.append(publisher)

    return NetworkMonitorService(config, evaluator, recovery, notifiers, clock=clock)


def main():
    """Entry point for internet monitor service."""
    import sys
    from .config import load_config
    from .monitor import check_required_commands
    from inetmon.shared.config import ConfigError
    from inetmon.shared.logging import setup_logging

    try:
        config = load_config()
    except (ConfigError, OSError) as e:
        setup_logging()
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    setup_logging(
        config.log_level,
        log_file=config.log_file,
        max_bytes=config.max_log_size,
        backup_count=config.log_retention,
    )

    try:
        check_required_commands()
    except StartupError as e:
        logger.error(str(e))
        sys.exit(1)

    service = build_service(config)
    service.run()


__all__ = ["NetworkMonitorService", "NetworkState", "StartupError", "build_service", "main"]
