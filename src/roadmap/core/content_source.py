"""Content source: the static roadmap tree loaded from a JSON manifest.

The manifest is read once per ContentSource and cached together with an
id -> Subtopic index. Manifest layout:

    {
      "domain": "android",
      "phases": [
        {"id": ..., "title": ..., "order": 0, "topics": [
          {"id": ..., "title": ..., "subtopics": [
            {"id": ..., "title": ..., "path": "a_phase/x.md",
             "examples": [{"id", "title", "description", "contentKey"}]}
          ]}
        ]}
      ]
    }

Unknown fields are ignored. Optional fields that are absent or null fall back
to their defaults: the "topics", "subtopics" and "examples" lists to [], and
"domain", "description" and "contentKey" to "". "phases" is required.
"""

from __future__ import annotations

import json
from typing import Any

import structlog

from roadmap.core.content_reader import ContentReader
from roadmap.core.errors import ContentLoadError, ContentNotFound
from roadmap.core.models import Example, Phase, Subtopic, Topic, iter_subtopics

logger = structlog.get_logger(__name__)

DEFAULT_MANIFEST_PATH = "topics_list.json"


# =============================================================================
# MANIFEST PARSING
# =============================================================================


def _require_str(raw: dict[str, Any], key: str, where: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or not value:
        raise ContentLoadError(f"{where}: missing or invalid '{key}'")
    return value


def _require_list(raw: dict[str, Any], key: str, where: str, default: list | None = None) -> list:
    # Absent and null are the same: both fall back to default
    value = raw.get(key)
    if value is None:
        value = default
    if not isinstance(value, list):
        raise ContentLoadError(f"{where}: '{key}' must be a list")
    return value


def _optional_str(raw: dict[str, Any], key: str, where: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ContentLoadError(f"{where}: '{key}' must be a string")
    return value


def _require_dict(raw: Any, where: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ContentLoadError(f"{where}: expected an object")
    return raw


def _example_from_dict(raw: Any, where: str) -> Example:
    raw = _require_dict(raw, where)
    return Example(
        id=_require_str(raw, "id", where),
        title=_require_str(raw, "title", where),
        description=_optional_str(raw, "description", where),
        content_key=_optional_str(raw, "contentKey", where),
    )


def _subtopic_from_dict(raw: Any, where: str) -> Subtopic:
    raw = _require_dict(raw, where)
    subtopic_id = _require_str(raw, "id", where)
    where = f"subtopic '{subtopic_id}'"
    examples_raw = _require_list(raw, "examples", where, default=[])
    return Subtopic(
        id=subtopic_id,
        title=_require_str(raw, "title", where),
        path=_require_str(raw, "path", where),
        examples=[_example_from_dict(item, f"{where} example") for item in examples_raw],
    )


def _topic_from_dict(raw: Any, where: str) -> Topic:
    raw = _require_dict(raw, where)
    topic_id = _require_str(raw, "id", where)
    where = f"topic '{topic_id}'"
    return Topic(
        id=topic_id,
        title=_require_str(raw, "title", where),
        subtopics=[
            _subtopic_from_dict(item, f"{where} subtopic")
            for item in _require_list(raw, "subtopics", where, default=[])
        ],
    )


def _phase_from_dict(raw: Any, position: int) -> Phase:
    raw = _require_dict(raw, f"phase #{position}")
    phase_id = _require_str(raw, "id", f"phase #{position}")
    where = f"phase '{phase_id}'"
    order = raw.get("order", position)
    if isinstance(order, bool) or not isinstance(order, int):
        raise ContentLoadError(f"{where}: 'order' must be an integer")
    return Phase(
        id=phase_id,
        title=_require_str(raw, "title", where),
        order=order,
        topics=[
            _topic_from_dict(item, f"{where} topic")
            for item in _require_list(raw, "topics", where, default=[])
        ],
    )


def parse_manifest(text: str) -> tuple[str, list[Phase]]:
    """Parse manifest JSON into (domain, phases).

    Raises:
        ContentLoadError: On invalid JSON or schema mismatch
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ContentLoadError(f"Manifest is not valid JSON: {e}") from e

    data = _require_dict(data, "manifest")
    domain = _optional_str(data, "domain", "manifest")
    if "phases" not in data:
        raise ContentLoadError("manifest: missing 'phases'")

    phases = [
        _phase_from_dict(item, i)
        for i, item in enumerate(_require_list(data, "phases", "manifest"))
    ]
    # sorted() is stable: equal orders keep manifest position
    phases = sorted(phases, key=lambda p: p.order)
    return domain, phases


def _build_index(phases: list[Phase]) -> dict[str, Subtopic]:
    index: dict[str, Subtopic] = {}
    for subtopic in iter_subtopics(phases):
        if subtopic.id in index:
            raise ContentLoadError(f"Duplicate subtopic id: {subtopic.id}")
        index[subtopic.id] = subtopic
    return index


# =============================================================================
# CONTENT SOURCE
# =============================================================================


class ContentSource:
    """Lazy-once loader for the roadmap tree and subtopic bodies."""

    def __init__(self, reader: ContentReader, manifest_path: str = DEFAULT_MANIFEST_PATH):
        self._reader = reader
        self._manifest_path = manifest_path
        self._phases: list[Phase] | None = None
        self._domain: str = ""
        self._index: dict[str, Subtopic] = {}
        self._content_cache: dict[str, str] = {}

    @property
    def is_loaded(self) -> bool:
        return self._phases is not None

    def load_tree(self) -> list[Phase]:
        """Return the roadmap tree, reading the manifest on first call only.

        Raises:
            ContentLoadError: If the manifest is missing or malformed. Nothing
                is cached on failure, so a later call reads again.
        """
        if self._phases is not None:
            return self._phases

        try:
            text = self._reader.read_by_path(self._manifest_path)
        except UnicodeDecodeError as e:
            raise ContentLoadError(f"Manifest is not valid UTF-8: {self._manifest_path}") from e
        except OSError as e:
            raise ContentLoadError(f"Manifest not found: {self._manifest_path}") from e

        domain, phases = parse_manifest(text)
        index = _build_index(phases)

        self._domain = domain
        self._index = index
        self._phases = phases

        logger.info(
            "content.tree_loaded",
            manifest=self._manifest_path,
            domain=domain,
            phases=len(phases),
            subtopics=len(index),
        )
        return phases

    def get_domain(self) -> str:
        self.load_tree()
        return self._domain

    def find_subtopic(self, subtopic_id: str) -> Subtopic:
        """Look up a subtopic by id.

        Raises:
            ContentNotFound: If the id is not in the tree
        """
        self.load_tree()
        subtopic = self._index.get(subtopic_id)
        if subtopic is None:
            raise ContentNotFound(subtopic_id, "unknown subtopic")
        return subtopic

    def has_subtopic(self, subtopic_id: str) -> bool:
        self.load_tree()
        return subtopic_id in self._index

    def read_content(self, subtopic_id: str) -> str:
        """Read the raw body (markdown) of a subtopic.

        Raises:
            ContentNotFound: Unknown id or unreadable content reference
        """
        subtopic = self.find_subtopic(subtopic_id)

        cached = self._content_cache.get(subtopic_id)
        if cached is not None:
            return cached

        try:
            content = self._reader.read_by_path(subtopic.path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(
                "content.read_failed",
                subtopic_id=subtopic_id,
                path=subtopic.path,
                error=str(e),
            )
            raise ContentNotFound(subtopic_id, f"cannot read '{subtopic.path}'") from e

        self._content_cache[subtopic_id] = content
        return content

    def list_topics(self, phase_id: str) -> list[Topic]:
        """Topics of one phase, in manifest order."""
        for phase in self.load_tree():
            if phase.id == phase_id:
                return list(phase.topics)
        raise ContentNotFound(phase_id, "unknown phase")

    def list_subtopics(self, topic_id: str) -> list[Subtopic]:
        """Subtopics of one topic, in manifest order."""
        for phase in self.load_tree():
            for topic in phase.topics:
                if topic.id == topic_id:
                    return list(topic.subtopics)
        raise ContentNotFound(topic_id, "unknown topic")

    def list_examples(self) -> list[Example]:
        """All embedded examples, in tree order."""
        return [
            example
            for subtopic in iter_subtopics(self.load_tree())
            for example in subtopic.examples
        ]
