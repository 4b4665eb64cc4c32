from __future__ import annotations

"""
Persist draft metadata and raw surface markup in a key-value store.

Design intent:
- Two independent entries: JSON metadata and verbatim markup; both optional.
- Loading never raises: malformed metadata degrades to the default draft.
- Reset is destructive, so it only runs after an explicit confirmation.
"""

import json
import logging
from dataclasses import dataclass
from typing import Callable

from pydantic import ValidationError

from minutes.editor.markup import INITIAL_CONTENT_MARKUP
from minutes.internal_core.contracts import Draft
from minutes.internal_core.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

STORAGE_KEY_META = "minutes-draft-meta"
STORAGE_KEY_CONTENT = "minutes-draft-content"
RESET_CONFIRM_MESSAGE = "入力内容を全てリセットしてもよろしいですか？\nこの操作は取り消せません。"

ConfirmCallback = Callable[[str], bool]


@dataclass(frozen=True)
class LoadedDraft:
    draft: Draft
    markup: str
    content_restored: bool
    meta_recovered: bool


def default_draft() -> Draft:
    return Draft()


class ContentStore:
    def __init__(self, store: KeyValueStore, *, namespace: str = ""):
        self._store = store
        self._namespace = namespace.strip()

    def _key(self, base: str) -> str:
        if not self._namespace:
            return base
        return f"{self._namespace}:{base}"

    @property
    def meta_key(self) -> str:
        return self._key(STORAGE_KEY_META)

    @property
    def content_key(self) -> str:
        return self._key(STORAGE_KEY_CONTENT)

    def _load_meta(self) -> tuple[Draft, bool]:
        raw = self._store.get_item(self.meta_key)
        if not raw:
            return default_draft(), False
        try:
            payload = json.loads(raw)
            if not isinstance(payload, dict):
                raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
            return Draft.model_validate(payload), False
        except (ValueError, ValidationError) as exc:
            # json.JSONDecodeError is a ValueError subclass.
            logger.warning("Failed to parse saved metadata key=%s error=%s", self.meta_key, exc)
            return default_draft(), True

    def load(self) -> LoadedDraft:
        draft, recovered = self._load_meta()
        saved_markup = self._store.get_item(self.content_key)
        if saved_markup:
            return LoadedDraft(draft=draft, markup=saved_markup, content_restored=True, meta_recovered=recovered)
        return LoadedDraft(
            draft=draft,
            markup=INITIAL_CONTENT_MARKUP,
            content_restored=False,
            meta_recovered=recovered,
        )

    def save_meta(self, draft: Draft) -> None:
        self._store.set_item(self.meta_key, draft.model_dump_json(by_alias=True))

    def save_content(self, markup: str) -> None:
        self._store.set_item(self.content_key, markup)

    def reset(self, confirm: ConfirmCallback) -> bool:
        """Remove both entries once `confirm` approves; returns whether it ran."""
        if not confirm(RESET_CONFIRM_MESSAGE):
            logger.info("Draft reset declined namespace=%r", self._namespace)
            return False
        self._store.remove_item(self.meta_key)
        self._store.remove_item(self.content_key)
        logger.info("Draft reset namespace=%r", self._namespace)
        return True
