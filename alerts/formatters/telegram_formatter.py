"""
Telegram Alert Formatter
Formats monitor notifications as HTML messages for Telegram
"""

import html
from datetime import datetime
from typing import Optional

from common import AlertType, TrackedEvent
from alerts.formatters.format_utils import format_pct, format_cents, truncate


class TelegramFormatter:
    """Formats monitor notifications for Telegram Bot API using HTML"""

    ALERT_EMOJIS = {
        AlertType.NEW_TRACKING: '🆕',
        AlertType.WARN_THRESHOLD: '⚠️',
        AlertType.CRIT_THRESHOLD: '🚨',
        AlertType.DAILY_STATUS: '📅',
    }

    def __init__(self, warn_threshold: float, crit_threshold: float):
        self.warn_threshold = warn_threshold
        self.crit_threshold = crit_threshold

    def format_new_tracking(self, event: TrackedEvent, label: Optional[str] = None) -> str:
        """Announce a newly tracked weekly event"""
        lines = [f"{self.ALERT_EMOJIS[AlertType.NEW_TRACKING]} <b>Tracking new weekly event</b>"]
        if event.title:
            lines.append(html.escape(truncate(event.title, 200)))
        lines.append(self._link(event.url))
        if event.end_time:
            lines.append(f"Resolves: {event.end_time.strftime('%Y-%m-%d %H:%M')} UTC")
        if label:
            lines.append(f"Outcome: <b>{html.escape(label)}</b>")
        lines.append(
            f"Alerts armed at {format_pct(self.warn_threshold)} and {format_pct(self.crit_threshold)}."
        )
        return "\n".join(lines)

    def format_threshold_alert(self, alert_type: AlertType, label: str, probability: float,
                               event_url: str) -> str:
        """Warn/crit crossing message"""
        threshold = self.warn_threshold if alert_type is AlertType.WARN_THRESHOLD else self.crit_threshold
        emoji = self.ALERT_EMOJIS[alert_type]
        return (
            f"{emoji} <b>{html.escape(label)} YES dropped below {format_pct(threshold)}</b>: "
            f"now {format_pct(probability)} ({format_cents(probability)})\n"
            f"{self._link(event_url)}"
        )

    def format_daily_status(self, label: str, probability: float, event_url: str,
                            warn_triggered: bool, crit_triggered: bool, now: datetime) -> str:
        """Once-a-day status summary"""
        def latch(fired: bool) -> str:
            return "🔴 fired" if fired else "🟢 armed"

        return "\n".join([
            f"{self.ALERT_EMOJIS[AlertType.DAILY_STATUS]} <b>Daily status</b> ({now.strftime('%Y-%m-%d')})",
            f"{html.escape(label)} YES: <b>{format_pct(probability)}</b>",
            f"Warn {format_pct(self.warn_threshold)}: {latch(warn_triggered)}",
            f"Crit {format_pct(self.crit_threshold)}: {latch(crit_triggered)}",
            self._link(event_url),
        ])

    @staticmethod
    def _link(url: str) -> str:
        return f'🔗 <a href="{html.escape(url, quote=True)}">{html.escape(url)}</a>'
