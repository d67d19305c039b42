"""
Settings Management
Centralized configuration management for the weekly market watch
"""

import os
import re
import json
import logging
from typing import Dict, Any, Optional, List, Mapping, Callable
from dataclasses import dataclass
from datetime import time
from pathlib import Path

from common.enums import PolymarketConstants, TimeConstants
from common.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "weekly_config.json"
DEFAULT_SLUG_PREFIX = "1-free-app-in-the-us-apple-app-store-on-"


@dataclass(frozen=True)
class TrackingSettings:
    """Which event and outcome to follow"""
    target_outcome: str = "ChatGPT"
    slug_prefix: str = DEFAULT_SLUG_PREFIX
    event_pattern: str = ""  # regex over slug/title, empty = escaped slug prefix
    forced_event_slug: str = ""
    slug_date_template: str = "{month}-{day}"
    lookahead_days: int = TimeConstants.DEFAULT_LOOKAHEAD_DAYS
    listing_limit: int = PolymarketConstants.EVENT_LISTING_LIMIT
    listing_order: str = "endDate"
    listing_ascending: bool = True

    @property
    def pattern(self) -> str:
        return self.event_pattern or re.escape(self.slug_prefix)


@dataclass(frozen=True)
class AlertSettings:
    """Settings for threshold alerts and the Telegram channel"""
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""
    warn_threshold: float = 0.90
    crit_threshold: float = 0.50
    daily_status_enabled: bool = False
    daily_status_time: str = "09:00"  # UTC, HH:MM

    @property
    def daily_status_at(self) -> time:
        hours, minutes = self.daily_status_time.split(':')
        return time(int(hours), int(minutes))


@dataclass(frozen=True)
class MonitoringSettings:
    """Settings for the poll loop cadences"""
    poll_seconds: int = TimeConstants.DEFAULT_POLL_SECONDS
    rescan_seconds: int = TimeConstants.DEFAULT_RESCAN_SECONDS


@dataclass(frozen=True)
class APISettings:
    """Settings for external APIs"""
    gamma_api_base_url: str = PolymarketConstants.GAMMA_API_BASE
    clob_api_base_url: str = PolymarketConstants.CLOB_API_BASE
    request_timeout: int = PolymarketConstants.API_TIMEOUT_SECONDS


@dataclass(frozen=True)
class ServerSettings:
    """Settings for the health responder"""
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 10000


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


class Settings:
    """Main settings manager. JSON config groups, overridden by environment variables."""

    def __init__(self, config: Dict = None, env: Optional[Mapping[str, str]] = None):
        self.config = config or {}
        self._env = os.environ if env is None else env
        self._parse_issues: List[str] = []

        # Initialize setting groups
        self.tracking = self._init_tracking_settings()
        self.alerts = self._init_alert_settings()
        self.monitoring = self._init_monitoring_settings()
        self.api = self._init_api_settings()
        self.server = self._init_server_settings()

        logger.info("⚙️ Settings initialized")

    def _get(self, env_name: str, group: Dict, key: str, default: Any, cast: Callable = str) -> Any:
        """Environment variable first, then the JSON group, then the default"""
        raw = self._env.get(env_name)
        if raw is None or str(raw).strip() == '':
            raw = group.get(key, default)
        if raw is None:
            return default
        try:
            value = cast(raw)
        except (TypeError, ValueError):
            self._parse_issues.append(f"{env_name} has an invalid value: {raw!r}")
            return default
        return value.strip() if isinstance(value, str) else value

    def _init_tracking_settings(self) -> TrackingSettings:
        """Initialize event tracking settings"""
        tracking_config = self.config.get('tracking', {})

        return TrackingSettings(
            target_outcome=self._get('TARGET_OUTCOME', tracking_config, 'target_outcome', 'ChatGPT'),
            slug_prefix=self._get('SLUG_PREFIX', tracking_config, 'slug_prefix', DEFAULT_SLUG_PREFIX),
            event_pattern=self._get('EVENT_PATTERN', tracking_config, 'event_pattern', ''),
            forced_event_slug=self._get('EVENT_SLUG', tracking_config, 'forced_event_slug', ''),
            slug_date_template=self._get('SLUG_DATE_TEMPLATE', tracking_config, 'slug_date_template', '{month}-{day}'),
            lookahead_days=self._get('LOOKAHEAD_DAYS', tracking_config, 'lookahead_days', TimeConstants.DEFAULT_LOOKAHEAD_DAYS, int),
            listing_limit=self._get('LISTING_LIMIT', tracking_config, 'listing_limit', PolymarketConstants.EVENT_LISTING_LIMIT, int),
            listing_order=self._get('LISTING_ORDER', tracking_config, 'listing_order', 'endDate'),
            listing_ascending=self._get('LISTING_ASCENDING', tracking_config, 'listing_ascending', True, _parse_bool)
        )

    def _init_alert_settings(self) -> AlertSettings:
        """Initialize alert settings"""
        alert_config = self.config.get('alerts', {})

        return AlertSettings(
            telegram_bot_token=self._get('TELEGRAM_BOT_TOKEN', alert_config, 'telegram_bot_token', ''),
            telegram_chat_id=self._get('TELEGRAM_CHAT_ID', alert_config, 'telegram_chat_id', ''),
            warn_threshold=self._get('THRESHOLD_WARN', alert_config, 'warn_threshold', 0.90, float),
            crit_threshold=self._get('THRESHOLD_CRIT', alert_config, 'crit_threshold', 0.50, float),
            daily_status_enabled=self._get('DAILY_STATUS_ENABLED', alert_config, 'daily_status_enabled', False, _parse_bool),
            daily_status_time=self._get('DAILY_STATUS_TIME', alert_config, 'daily_status_time', '09:00')
        )

    def _init_monitoring_settings(self) -> MonitoringSettings:
        """Initialize monitoring settings"""
        monitoring_config = self.config.get('monitoring', {})

        return MonitoringSettings(
            poll_seconds=self._get('POLL_SECONDS', monitoring_config, 'poll_seconds', TimeConstants.DEFAULT_POLL_SECONDS, int),
            rescan_seconds=self._get('RESCAN_SECONDS', monitoring_config, 'rescan_seconds', TimeConstants.DEFAULT_RESCAN_SECONDS, int)
        )

    def _init_api_settings(self) -> APISettings:
        """Initialize API settings"""
        api_config = self.config.get('api', {})

        return APISettings(
            gamma_api_base_url=self._get('GAMMA_API_BASE', api_config, 'gamma_api_base_url', PolymarketConstants.GAMMA_API_BASE),
            clob_api_base_url=self._get('CLOB_API_BASE', api_config, 'clob_api_base_url', PolymarketConstants.CLOB_API_BASE),
            request_timeout=self._get('REQUEST_TIMEOUT', api_config, 'request_timeout', PolymarketConstants.API_TIMEOUT_SECONDS, int)
        )

    def _init_server_settings(self) -> ServerSettings:
        """Initialize health responder settings"""
        server_config = self.config.get('server', {})

        return ServerSettings(
            enabled=self._get('HEALTH_SERVER_ENABLED', server_config, 'enabled', True, _parse_bool),
            host=self._get('HEALTH_HOST', server_config, 'host', '0.0.0.0'),
            port=self._get('PORT', server_config, 'port', 10000, int)
        )

    def get_config_summary(self) -> Dict[str, Any]:
        """Get a summary of current settings"""
        return {
            'tracking': {
                'target_outcome': self.tracking.target_outcome,
                'slug_prefix': self.tracking.slug_prefix,
                'forced_event_slug': self.tracking.forced_event_slug or None,
                'lookahead_days': self.tracking.lookahead_days
            },
            'alerts': {
                'warn_threshold': self.alerts.warn_threshold,
                'crit_threshold': self.alerts.crit_threshold,
                'daily_status': self.alerts.daily_status_time if self.alerts.daily_status_enabled else None,
                'telegram_configured': bool(self.alerts.telegram_bot_token and self.alerts.telegram_chat_id)
            },
            'monitoring': {
                'poll_seconds': self.monitoring.poll_seconds,
                'rescan_seconds': self.monitoring.rescan_seconds
            },
            'server': {
                'enabled': self.server.enabled,
                'port': self.server.port
            }
        }

    def validate_settings(self) -> List[str]:
        """Validate settings and return list of issues"""
        issues = list(self._parse_issues)

        # Credentials
        if not self.alerts.telegram_bot_token:
            issues.append("Missing TELEGRAM_BOT_TOKEN")
        if not self.alerts.telegram_chat_id:
            issues.append("Missing TELEGRAM_CHAT_ID")

        # Thresholds
        for name, value in (('warn', self.alerts.warn_threshold), ('crit', self.alerts.crit_threshold)):
            if not 0.0 <= value <= 1.0:
                issues.append(f"{name} threshold must be within [0, 1], got {value}")
        if self.alerts.warn_threshold <= self.alerts.crit_threshold:
            issues.append("warn threshold must be greater than crit threshold")

        if self.alerts.daily_status_enabled:
            try:
                self.alerts.daily_status_at
            except ValueError:
                issues.append(f"DAILY_STATUS_TIME must be HH:MM, got {self.alerts.daily_status_time!r}")

        # Tracking
        if not self.tracking.target_outcome:
            issues.append("Target outcome must not be empty")
        if not self.tracking.forced_event_slug and not self.tracking.slug_prefix:
            issues.append("Either EVENT_SLUG or SLUG_PREFIX is required")
        if self.tracking.lookahead_days < 0:
            issues.append("Lookahead days must not be negative")
        try:
            re.compile(self.tracking.pattern)
        except re.error as e:
            issues.append(f"Invalid EVENT_PATTERN: {e}")
        try:
            self.tracking.slug_date_template.format(month='january', day=1, year=2000)
        except (KeyError, IndexError, ValueError) as e:
            issues.append(f"Invalid SLUG_DATE_TEMPLATE: {e}")

        # Cadences
        if self.monitoring.poll_seconds <= 0:
            issues.append("Poll interval must be positive")
        if self.monitoring.rescan_seconds <= 0:
            issues.append("Rescan interval must be positive")

        return issues

    def log_settings(self):
        """Log current settings"""
        logger.info("⚙️ Current Settings:")
        logger.info(f"  🎯 Tracking: '{self.tracking.target_outcome}' in {self.tracking.forced_event_slug or self.tracking.slug_prefix + '*'}")
        logger.info(f"  🔔 Alerts: warn < {self.alerts.warn_threshold:.0%}, crit < {self.alerts.crit_threshold:.0%}")
        logger.info(f"  ⏱️ Cadence: poll {self.monitoring.poll_seconds}s, rescan {self.monitoring.rescan_seconds}s")
        if self.alerts.daily_status_enabled:
            logger.info(f"  📅 Daily status at {self.alerts.daily_status_time} UTC")

        # Validation
        issues = self.validate_settings()
        if issues:
            logger.warning(f"⚠️ Configuration issues: {', '.join(issues)}")
        else:
            logger.info("✅ Settings validation passed")


def read_config_file(config_path: Optional[str]) -> Dict:
    """
    Read the optional JSON config file.

    Returns:
        Parsed config groups, or {} when there is no file

    Raises:
        ConfigurationError: If the file exists but cannot be read or parsed
    """
    if not config_path:
        return {}

    config_file = Path(config_path)
    if not config_file.exists():
        logger.debug(f"No config file at {config_path}, using environment only")
        return {}

    try:
        with open(config_file) as f:
            config = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load config from {config_path}: {e}")
        raise ConfigurationError([f"Cannot load configuration file {config_path}: {e}"])

    if not isinstance(config, dict):
        raise ConfigurationError([f"Configuration file {config_path} must hold a JSON object"])

    logger.info(f"Loaded configuration from {config_path}")
    return config


def load_settings(config_path: Optional[str] = DEFAULT_CONFIG_PATH,
                  env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build validated settings for startup.

    The JSON config file is optional; environment variables alone are enough.

    Raises:
        ConfigurationError: If the config file is unreadable or settings are invalid
    """
    settings = Settings(read_config_file(config_path), env=env)
    issues = settings.validate_settings()
    if issues:
        raise ConfigurationError(issues)
    return settings
