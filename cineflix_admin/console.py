"""Console controller: the signed-in operator's session and draft."""

import logging
import secrets
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from . import records
from .config import DEFAULT_BOT_USERNAME
from .demo import DEMO_MOVIES
from .episodes import EpisodeList
from .errors import AuthFailure, ConsoleBusy, GatewayFailure, ValidationFailure
from .gateways.auth import AuthGateway, AuthSession
from .models import AppSettings, CatalogRecord, Episode
from .records import PublishMode, RecordFields

logger = logging.getLogger(__name__)


@dataclass
class Draft:
    """The one record being created or edited."""

    fields: RecordFields = field(default_factory=RecordFields)
    episodes: EpisodeList = field(default_factory=EpisodeList)
    edit_id: Optional[str] = None

    @property
    def is_editing(self) -> bool:
        return self.edit_id is not None

    def reset(self) -> None:
        self.fields = RecordFields()
        self.episodes.reset()
        self.edit_id = None

    def load(self, record: CatalogRecord) -> None:
        self.fields = RecordFields.from_record(record)
        self.episodes.load(record.episodes or ())
        self.edit_id = record.id


@dataclass
class ConsoleSession:
    auth: AuthSession
    token: str = field(default_factory=lambda: secrets.token_urlsafe(32))
    draft: Draft = field(default_factory=Draft)


class AdminConsole:
    """Drives the catalog store on behalf of the signed-in operator.

    A ``ConsoleSession`` is created when the auth gateway reports a login
    and dropped on logout. ``busy`` holds for the duration of every
    gateway call and every draft edit; any other call made meanwhile,
    including a draft edit during ``publish``, raises ``ConsoleBusy``.
    """

    def __init__(
        self,
        auth: AuthGateway,
        store,
        default_bot_username: str = DEFAULT_BOT_USERNAME,
        demo_records: Sequence[CatalogRecord] = DEMO_MOVIES,
    ):
        self.auth = auth
        self.store = store
        self.default_bot_username = default_bot_username
        self.demo_records = list(demo_records)
        self._lock = threading.Lock()
        self._session: Optional[ConsoleSession] = None
        self._settings: Optional[AppSettings] = None
        self._unsubscribe = auth.observe_session(self._on_session_change)

    # --- Session ---

    def _on_session_change(self, auth_session: Optional[AuthSession]) -> None:
        if auth_session is None:
            self._session = None
            self._settings = None
        elif self._session is None or self._session.auth != auth_session:
            self._session = ConsoleSession(auth=auth_session)

    @property
    def signed_in(self) -> bool:
        return self._session is not None

    @property
    def session(self) -> ConsoleSession:
        if self._session is None:
            raise AuthFailure("Not signed in")
        return self._session

    def _require_session(self) -> ConsoleSession:
        return self.session

    @property
    def draft(self) -> Draft:
        return self.session.draft

    def login(self, identifier: str, secret: str) -> ConsoleSession:
        with self._in_flight():
            self.auth.login(identifier, secret)
        return self.session

    def logout(self) -> None:
        self.auth.logout()

    def close(self) -> None:
        self._unsubscribe()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def _in_flight(self) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise ConsoleBusy("Another request is still processing")
        try:
            yield
        finally:
            self._lock.release()

    # --- Draft editing ---

    def update_fields(self, **values: str) -> RecordFields:
        draft = self.draft
        with self._in_flight():
            draft.fields = draft.fields.with_values(**values)
        return draft.fields

    def add_episode(self, season, title: str, duration: str, code: str) -> Tuple[Episode, ...]:
        episodes = self.draft.episodes
        with self._in_flight():
            return episodes.add(season, title, duration, code)

    def remove_episode(self, episode_id: str) -> Tuple[Episode, ...]:
        episodes = self.draft.episodes
        with self._in_flight():
            return episodes.remove(episode_id)

    def cancel_edit(self) -> None:
        draft = self.draft
        with self._in_flight():
            draft.reset()

    def start_edit(self, record: Union[CatalogRecord, str]) -> Draft:
        draft = self.draft
        if not isinstance(record, CatalogRecord):
            with self._in_flight():
                found = self.store.get_record(record)
            if found is None:
                raise GatewayFailure(f"Movie {record} not found")
            record = found
        with self._in_flight():
            draft.load(record)
        return draft

    def publish(self) -> str:
        """Write the draft; on success the draft is cleared, on failure it is kept."""
        draft = self.draft
        mode = PublishMode.UPDATE if draft.is_editing else PublishMode.CREATE
        with self._in_flight():
            record_id = records.build(draft.fields, draft.episodes.episodes, mode, self.store, draft.edit_id)
        draft.reset()
        return record_id

    # --- Library ---

    def list_records(self) -> List[CatalogRecord]:
        self._require_session()
        with self._in_flight():
            return self.store.list_records()

    def delete_record(self, record_id: str) -> None:
        draft = self.draft
        with self._in_flight():
            self.store.delete(record_id)
        if draft.edit_id == record_id:
            draft.reset()

    def seed_demo_data(self) -> int:
        self._require_session()
        with self._in_flight():
            self.store.batch_create(self.demo_records)
        logger.info("Demo data uploaded: %d titles", len(self.demo_records))
        return len(self.demo_records)

    # --- Settings ---

    def load_settings(self) -> AppSettings:
        self._require_session()
        with self._in_flight():
            settings = self.store.get_settings()
        self._settings = settings or AppSettings(bot_username=self.default_bot_username)
        return self._settings

    def save_settings(self, bot_username: str, channel_link: str) -> AppSettings:
        self._require_session()
        settings = AppSettings(bot_username=bot_username or "", channel_link=channel_link or "")
        if not settings.bot_username:
            raise ValidationFailure("Bot username is required")
        with self._in_flight():
            self.store.put_settings(settings)
        self._settings = settings
        logger.info("App configuration saved (bot @%s)", settings.bot_username)
        return settings

    def deep_link(self, telegram_code: str) -> str:
        settings = self._settings or self.load_settings()
        return settings.deep_link(telegram_code)
