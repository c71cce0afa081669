"""Alert monitor - drives the evaluator for a set of active alerts.

The host feeds one bar at a time per symbol. Each active alert on that
symbol is evaluated against its own previous bar, fired alerts get their
message rendered, and ``once_per_bar`` alerts retire after firing.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from chartalerts.evaluator import AlertEvaluator, to_price
from chartalerts.messages import get_default_message_template, process_alert_message
from chartalerts.models import (
    AlertFrequency,
    AlertStatus,
    AlertTrigger,
    IndicatorAlert,
    IndicatorSnapshot,
    PriceInput,
    PriceSnapshot,
)

logger = logging.getLogger(__name__)

TriggerCallback = Callable[[AlertTrigger], None]


class AlertMonitor:
    """Holds active indicator alerts and evaluates them bar-by-bar."""

    def __init__(
        self,
        evaluator: Optional[AlertEvaluator] = None,
        on_trigger: Optional[TriggerCallback] = None,
        default_exchange: str = "NSE",
    ):
        """Initialize the monitor.

        Args:
            evaluator: Evaluator whose cache stores each alert's previous bar.
            on_trigger: Called once per trigger, after the frequency policy.
            default_exchange: Exchange assumed when ``process_bar`` gets none.
        """
        self.evaluator = evaluator or AlertEvaluator()
        self.on_trigger = on_trigger
        self.default_exchange = default_exchange
        self._alerts: dict[str, IndicatorAlert] = {}

    # ------------------------------------------------------------------
    # alert set
    # ------------------------------------------------------------------

    def add_alert(self, alert: IndicatorAlert) -> None:
        """Add or replace an alert. Replacing resets its previous bar."""
        if alert.id in self._alerts:
            self.evaluator.remove_alert(alert.id)
        self._alerts[alert.id] = alert

    def remove_alert(self, alert_id: str) -> Optional[IndicatorAlert]:
        self.evaluator.remove_alert(alert_id)
        return self._alerts.pop(alert_id, None)

    def get_alert(self, alert_id: str) -> Optional[IndicatorAlert]:
        return self._alerts.get(alert_id)

    def active_alerts(self) -> list[IndicatorAlert]:
        return [a for a in self._alerts.values() if a.status is AlertStatus.ACTIVE]

    def reset(self) -> None:
        """Forget every previous bar, e.g. on a symbol or timeframe switch."""
        self.evaluator.clear()

    # ------------------------------------------------------------------
    # evaluation
    # ------------------------------------------------------------------

    def process_bar(
        self,
        symbol: str,
        indicators: IndicatorSnapshot,
        price: PriceInput = None,
        bar_time: Optional[datetime] = None,
        exchange: Optional[str] = None,
    ) -> list[AlertTrigger]:
        """Evaluate all active alerts of a symbol against a new bar.

        Args:
            symbol: Trading symbol the bar belongs to.
            indicators: Indicator snapshot for the bar.
            price: Close price or full OHLCV snapshot.
            bar_time: Bar timestamp; defaults to the snapshot's timestamp.
            exchange: Exchange code; defaults to ``default_exchange``.

        Returns:
            Triggers fired on this bar, in alert insertion order.
        """
        exchange = exchange or self.default_exchange
        if bar_time is None and isinstance(price, PriceSnapshot):
            bar_time = price.timestamp

        triggers = []
        for alert in self.active_alerts():
            if alert.symbol != symbol or alert.exchange != exchange:
                continue

            fired = self.evaluator.evaluate_cached(alert.id, alert.condition, indicators, price)
            if not fired:
                continue

            trigger = self._make_trigger(alert, indicators, price, bar_time)
            logger.info("Alert %s (%s) triggered: %s", alert.id, alert.display_name, trigger.message)

            if alert.frequency is AlertFrequency.ONCE_PER_BAR:
                self._alerts[alert.id] = alert.model_copy(update={"status": AlertStatus.TRIGGERED})
                self.evaluator.remove_alert(alert.id)

            triggers.append(trigger)
            self._notify(trigger)

        return triggers

    def _make_trigger(self, alert: IndicatorAlert, indicators: IndicatorSnapshot,
                      price: PriceInput, bar_time: Optional[datetime]) -> AlertTrigger:
        condition = alert.condition
        data = {
            "symbol": alert.symbol,
            "exchange": alert.exchange,
            "time": bar_time,
            "indicators": indicators,
            "alert": {
                "name": alert.display_name,
                "condition": condition.label or condition.id,
            },
        }
        if isinstance(price, PriceSnapshot):
            data.update(price.model_dump(include={"open", "high", "low", "close", "volume"}))
        else:
            data["close"] = to_price(price)

        template = alert.message or get_default_message_template(condition, alert.symbol)
        return AlertTrigger(
            alert_id=alert.id,
            alert_name=alert.display_name,
            symbol=alert.symbol,
            exchange=alert.exchange,
            indicator=alert.indicator,
            condition_id=condition.id,
            condition_type=condition.type,
            message=process_alert_message(template, data),
            price=to_price(price),
            bar_time=bar_time,
        )

    def _notify(self, trigger: AlertTrigger) -> None:
        if self.on_trigger is None:
            return
        try:
            self.on_trigger(trigger)
        except Exception:
            logger.exception("Trigger callback failed for alert %s", trigger.alert_id)
