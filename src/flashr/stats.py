"""Per-card answer counters, the weights derived from them, and their JSON store."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from .errors import StatsError

DEFAULT_HOME_STATS_PATH = Path(".config") / "flashr" / "stats.json"

logger = logging.getLogger(__name__)


@dataclass
class CardStats:
    """Aggregate answer counts for one card."""

    correct: int = 0
    incorrect: int = 0

    def weight(self) -> float:
        """Return the sampling weight for these counts.

        Cards answered correctly more often than not shrink toward zero as
        1 / (margin + 1); cards missed more often grow linearly with the miss margin.
        """
        mastered = max(self.correct - self.incorrect, 0)
        missed = max(self.incorrect - self.correct, 0)
        return 1.0 / (mastered + 1) + missed


class PerformanceModel:
    """Map card ids to answer counts and sampling weights."""

    def __init__(self, card_stats: dict[str, CardStats] | None = None) -> None:
        self.card_stats: dict[str, CardStats] = card_stats if card_stats is not None else {}

    def for_card(self, card_id: str) -> CardStats:
        """Return stats for a card, creating a zero-valued entry on first use."""
        stats = self.card_stats.get(card_id)
        if stats is None:
            stats = CardStats()
            self.card_stats[card_id] = stats
        return stats

    def weight(self, card_id: str) -> float:
        """Return the weight for a card without recording it."""
        stats = self.card_stats.get(card_id)
        return (stats or CardStats()).weight()

    def record_correct(self, card_id: str) -> float:
        """Count a correct answer and return the card's new weight."""
        stats = self.for_card(card_id)
        stats.correct += 1
        return stats.weight()

    def record_incorrect(self, card_id: str) -> float:
        """Count an incorrect answer and return the card's new weight."""
        stats = self.for_card(card_id)
        stats.incorrect += 1
        return stats.weight()


def default_stats_path() -> Path:
    """Return `~/.config/flashr/stats.json`."""
    return Path.home() / DEFAULT_HOME_STATS_PATH


def _stats_from_raw(card_id: str, raw: object, path: Path) -> CardStats:
    if not isinstance(raw, dict):
        raise StatsError(f"SerdeError: stats for {card_id!r} must be an object, path: {path}")
    values: dict[str, int] = {}
    for key in ("correct", "incorrect"):
        if key not in raw:
            raise StatsError(f"SerdeError: stats for {card_id!r} are missing {key}, path: {path}")
        value = raw[key]
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise StatsError(f"SerdeError: {key} for {card_id!r} must be a non-negative integer, path: {path}")
        values[key] = value
    return CardStats(correct=values["correct"], incorrect=values["incorrect"])


class StatsStore:
    """JSON file holding every card's counters, read once and written once per session."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> dict[str, CardStats]:
        """Read stats from disk; a missing file yields an empty map."""
        if not self.path.exists():
            logger.debug("No stats file at %s, starting fresh", self.path)
            return {}
        if self.path.is_dir():
            raise StatsError(f"Config file is directory: {self.path}")
        try:
            raw: object = json.loads(self.path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise StatsError(f"IoError: {exc}, path: {self.path}") from exc
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StatsError(f"SerdeError: {exc}, path: {self.path}") from exc

        if not isinstance(raw, dict) or not isinstance(raw.get("card_stats"), dict):
            raise StatsError(f"SerdeError: expected an object with a card_stats map, path: {self.path}")
        card_stats = {str(key): _stats_from_raw(str(key), value, self.path) for key, value in raw["card_stats"].items()}
        logger.debug("Loaded stats for %d cards from %s", len(card_stats), self.path)
        return card_stats

    def save(self, card_stats: dict[str, CardStats]) -> None:
        """Write every card's counters, creating parent directories as needed."""
        payload = {
            "card_stats": {
                card_id: {"correct": stats.correct, "incorrect": stats.incorrect}
                for card_id, stats in card_stats.items()
            }
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            raise StatsError(f"IoError: {exc}, path: {self.path}") from exc
        logger.debug("Saved stats for %d cards to %s", len(card_stats), self.path)
