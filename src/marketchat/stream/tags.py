"""Incremental extraction of tagged sections from a chunked text stream.

Hides how tag boundaries are found when markers are split across chunks.
A single tokenizing pass owns the buffer and dispatches each enclosed span
to the tracker for its tag, so the order in which tags are configured never
changes what gets extracted.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class TagState(Enum):
    """Lifecycle of one tracked tag."""

    WAITING_OPEN = "waiting_open"
    ACCUMULATING = "accumulating"
    DONE = "done"


@dataclass
class TagTracker:
    """Extraction state for one tag name.

    Once DONE the tracker ignores input until reset; its text only grows
    while ACCUMULATING.
    """

    name: str
    state: TagState = TagState.WAITING_OPEN
    text: str = ""

    @property
    def open_marker(self) -> str:
        return f"<{self.name}>"

    @property
    def close_marker(self) -> str:
        return f"</{self.name}>"

    @property
    def opened(self) -> bool:
        return self.state is not TagState.WAITING_OPEN

    @property
    def done(self) -> bool:
        return self.state is TagState.DONE

    def reset(self) -> None:
        self.state = TagState.WAITING_OPEN
        self.text = ""


class TagStreamExtractor:
    """Extracts the contents of several tags from one chunk stream.

    Tags do not nest: while one tag is open, markers of other tags are
    treated as its content.

    Usage:
        extractor = TagStreamExtractor(["actions", "text"])
        for chunk in stream:
            for tag, delta in extractor.push(chunk).items():
                ...
    """

    def __init__(self, tags: Iterable[str]) -> None:
        names = list(tags)
        if not names:
            raise ValueError("TagStreamExtractor needs at least one tag")
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate tag names: {names}")

        self._trackers = {name: TagTracker(name) for name in names}
        self._buffer = ""
        self._active: TagTracker | None = None

    @property
    def tags(self) -> list[str]:
        return list(self._trackers)

    @property
    def buffer(self) -> str:
        """Unconsumed input held back for the next chunk."""
        return self._buffer

    def tracker(self, tag: str) -> TagTracker:
        return self._trackers[tag]

    def text(self, tag: str) -> str:
        return self._trackers[tag].text

    def state(self, tag: str) -> TagState:
        return self._trackers[tag].state

    def push(self, chunk: str) -> dict[str, str]:
        """Append a chunk and return the text newly exposed per tag.

        While a tag is open, a suffix as long as its close marker is held
        back so a marker split across chunks is never exposed as content.

        Args:
            chunk: Next fragment of the stream

        Returns:
            Mapping of tag name to newly extracted text; tags with nothing
            new are omitted
        """
        self._buffer += chunk
        deltas: dict[str, str] = {}

        while True:
            if self._active is not None:
                if not self._scan_close(deltas):
                    break
            elif not self._scan_open():
                break

        return deltas

    def flush(self) -> dict[str, str]:
        """Expose held-back text of an open tag at end of stream.

        A trailing fragment that could still be the start of the close
        marker is dropped rather than exposed.
        """
        tracker = self._active
        if tracker is None:
            return {}

        held = self._buffer
        close = tracker.close_marker
        for size in range(min(len(close) - 1, len(held)), 0, -1):
            if held.endswith(close[:size]):
                held = held[:-size]
                break

        self._buffer = ""
        deltas: dict[str, str] = {}
        self._append(tracker, held, deltas)
        return deltas

    def reset(self, tag: str | None = None) -> None:
        """Return one tracker, or all trackers and the buffer, to WAITING_OPEN."""
        if tag is None:
            for tracker in self._trackers.values():
                tracker.reset()
            self._buffer = ""
            self._active = None
            return

        tracker = self._trackers[tag]
        if self._active is tracker:
            self._active = None
        tracker.reset()

    def _scan_close(self, deltas: dict[str, str]) -> bool:
        tracker = self._active
        close = tracker.close_marker
        index = self._buffer.find(close)

        if index != -1:
            self._append(tracker, self._buffer[:index], deltas)
            self._buffer = self._buffer[index + len(close):]
            tracker.state = TagState.DONE
            self._active = None
            return True

        safe = len(self._buffer) - len(close)
        if safe > 0:
            self._append(tracker, self._buffer[:safe], deltas)
            self._buffer = self._buffer[safe:]
        return False

    def _scan_open(self) -> bool:
        waiting = [t for t in self._trackers.values() if t.state is TagState.WAITING_OPEN]
        if not waiting:
            self._buffer = ""
            return False

        found: tuple[int, TagTracker] | None = None
        for tracker in waiting:
            index = self._buffer.find(tracker.open_marker)
            if index != -1 and (found is None or index < found[0]):
                found = (index, tracker)

        if found is None:
            keep = max(len(t.open_marker) for t in waiting) - 1
            self._buffer = self._buffer[-keep:] if keep else ""
            return False

        index, tracker = found
        self._buffer = self._buffer[index + len(tracker.open_marker):]
        tracker.state = TagState.ACCUMULATING
        self._active = tracker
        return True

    @staticmethod
    def _append(tracker: TagTracker, piece: str, deltas: dict[str, str]) -> None:
        if not piece:
            return
        tracker.text += piece
        deltas[tracker.name] = deltas.get(tracker.name, "") + piece


def parse_actions(value: str) -> list[str]:
    """Split a comma-separated action list into upper-case names."""
    return [action.strip().upper() for action in value.split(",") if action.strip()]


class ResponseStreamExtractor:
    """Streams reply text only when the response is a plain reply.

    Tracks the ``actions`` and ``text`` tags (plus any extra tags) on one
    pass. Text is forwarded once the actions tag has closed and every listed
    action is a pass-through action; text seen before that is withheld and
    flushed on resolution. Any other action suppresses forwarding until
    reset().
    """

    ACTIONS_TAG = "actions"
    TEXT_TAG = "text"

    def __init__(
        self,
        pass_through: Iterable[str] = ("REPLY",),
        extra_tags: Iterable[str] = (),
    ) -> None:
        self._pass_through = frozenset(action.upper() for action in pass_through)
        self._extractor = TagStreamExtractor([self.ACTIONS_TAG, self.TEXT_TAG, *extra_tags])
        self._forwarded = 0

    @property
    def extractor(self) -> TagStreamExtractor:
        return self._extractor

    @property
    def actions(self) -> list[str]:
        return parse_actions(self._extractor.text(self.ACTIONS_TAG))

    @property
    def actions_resolved(self) -> bool:
        return self._extractor.state(self.ACTIONS_TAG) is TagState.DONE

    @property
    def streaming_allowed(self) -> bool:
        actions = self.actions
        return (
            self.actions_resolved
            and bool(actions)
            and all(action in self._pass_through for action in actions)
        )

    @property
    def text(self) -> str:
        """Reply text forwarded so far."""
        return self._extractor.text(self.TEXT_TAG)[:self._forwarded]

    def push(self, chunk: str) -> str:
        """Feed a chunk and return newly forwardable reply text."""
        self._extractor.push(chunk)
        return self._drain()

    def flush(self) -> str:
        """Forward whatever an unterminated text tag still holds."""
        if self._extractor.state(self.TEXT_TAG) is TagState.ACCUMULATING:
            self._extractor.flush()
        return self._drain()

    def reset(self) -> None:
        self._extractor.reset()
        self._forwarded = 0

    def _drain(self) -> str:
        if not self.streaming_allowed:
            return ""
        text = self._extractor.text(self.TEXT_TAG)
        delta = text[self._forwarded:]
        self._forwarded = len(text)
        return delta
