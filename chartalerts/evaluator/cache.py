"""Previous-bar cache keyed by alert id."""

from typing import Mapping, NamedTuple, Optional

from chartalerts.models import IndicatorSnapshot


class CachedBar(NamedTuple):
    indicators: IndicatorSnapshot
    price: Optional[float]


class PreviousValueCache:
    """Holds the last evaluated bar per alert.

    Lets a host evaluate alerts bar-by-bar without handing back the previous
    snapshot itself. Each alert owns an independent slot; the cache is owned
    by whoever creates it and is never shared implicitly.
    """

    def __init__(self):
        self._bars: dict[str, CachedBar] = {}

    def get(self, alert_id: str) -> Optional[CachedBar]:
        """Get the previous bar for an alert, or None before its first bar."""
        return self._bars.get(alert_id)

    def store(self, alert_id: str, indicators: IndicatorSnapshot,
              price: Optional[float] = None) -> None:
        """Record the bar just evaluated for an alert."""
        # host may reuse its dicts for the next bar
        frozen = {
            key: dict(values) if isinstance(values, Mapping) else values
            for key, values in indicators.items()
        }
        self._bars[alert_id] = CachedBar(frozen, price)

    def remove_alert(self, alert_id: str) -> None:
        """Evict one alert's slot. Unknown ids are ignored."""
        self._bars.pop(alert_id, None)

    def clear(self) -> None:
        self._bars.clear()

    def __len__(self) -> int:
        return len(self._bars)

    def __contains__(self, alert_id: object) -> bool:
        return alert_id in self._bars
