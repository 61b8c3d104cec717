"""Season-grouped episode list for the record being edited."""

import logging
from collections import OrderedDict
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Tuple, Union

from .models import Episode, parse_positive_int

logger = logging.getLogger(__name__)

EpisodeListener = Callable[[Tuple[Episode, ...]], None]


def _sort_key(ep: Episode) -> Tuple[int, int]:
    return ep.season, ep.number


class EpisodeList:
    """Episodes of one catalog title, always sorted by (season, number).

    Numbers are derived on insertion and never reassigned on removal, so
    removing an episode leaves a gap in its season.
    """

    def __init__(self) -> None:
        self._episodes: List[Episode] = []
        self._listeners: List[EpisodeListener] = []

    @property
    def episodes(self) -> Tuple[Episode, ...]:
        return tuple(self._episodes)

    def __len__(self) -> int:
        return len(self._episodes)

    def __iter__(self) -> Iterator[Episode]:
        return iter(self.episodes)

    def __bool__(self) -> bool:
        return bool(self._episodes)

    def seasons(self) -> "OrderedDict[int, List[Episode]]":
        grouped: "OrderedDict[int, List[Episode]]" = OrderedDict()
        for ep in self._episodes:
            grouped.setdefault(ep.season, []).append(ep)
        return grouped

    def next_number(self, season: int) -> int:
        used = [ep.number for ep in self._episodes if ep.season == season]
        return max(used, default=0) + 1

    def add(self, season: Any, title: str, duration: str, code: str) -> Tuple[Episode, ...]:
        if not (title or "").strip() or not (code or "").strip():
            logger.debug("Ignoring episode without title or code")
            return self.episodes

        season_num = parse_positive_int(season)
        episode = Episode.create(
            season=season_num,
            number=self.next_number(season_num),
            title=title,
            telegram_code=code,
            duration=duration,
        )
        self._replace(sorted(self._episodes + [episode], key=_sort_key))
        return self.episodes

    def remove(self, episode_id: str) -> Tuple[Episode, ...]:
        remaining = [ep for ep in self._episodes if ep.id != episode_id]
        if len(remaining) != len(self._episodes):
            self._replace(remaining)
        return self.episodes

    def reset(self) -> Tuple[Episode, ...]:
        self._replace([])
        return self.episodes

    def load(self, existing: Iterable[Union[Episode, Mapping[str, Any]]]) -> Tuple[Episode, ...]:
        """Replace the list with a stored record's episodes.

        Well-formed input is kept untouched. Out-of-order entries, or
        duplicate / non-positive numbers within a season, are repaired so
        later ``add`` calls keep (season, number) unique.
        """
        decoded = [ep if isinstance(ep, Episode) else Episode.from_document(ep) for ep in existing or ()]
        repaired = self._repair(decoded)
        if repaired != decoded:
            logger.warning("Repaired episode numbering of %d stored episodes", len(decoded))
        self._replace(repaired)
        return self.episodes

    @staticmethod
    def _repair(episodes: List[Episode]) -> List[Episode]:
        ordered = sorted(episodes, key=_sort_key)
        used: Dict[int, set] = {}
        repaired = []
        for ep in ordered:
            taken = used.setdefault(ep.season, set())
            if ep.number < 1 or ep.number in taken:
                ep = ep.model_copy(update={"number": max(taken, default=0) + 1})
            taken.add(ep.number)
            repaired.append(ep)
        return sorted(repaired, key=_sort_key)

    def subscribe(self, listener: EpisodeListener) -> Callable[[], None]:
        """Call ``listener`` with the new list after every change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _replace(self, episodes: List[Episode]) -> None:
        self._episodes = list(episodes)
        snapshot = self.episodes
        for listener in list(self._listeners):
            listener(snapshot)
