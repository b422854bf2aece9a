"""Remote-stream boundary for agent replies.

Hides the tagged reply format from the UI: chunks go in, display updates
come out.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from .tags import ResponseStreamExtractor

THOUGHT_TAGS = ("thought", "thinking")


@dataclass(frozen=True)
class StreamUpdate:
    """Display-relevant change produced by one chunk."""

    reply_delta: str
    reply_text: str
    thought: str = ""
    actions: list[str] = field(default_factory=list)

    @property
    def has_reply(self) -> bool:
        return bool(self.reply_delta)


class ResponseStream:
    """Tracks one streamed response at a time.

    Call reset() before each new response and finalize() once the
    collaborator reports the full reply.
    """

    def __init__(self, pass_through: Iterable[str] = ("REPLY",)) -> None:
        self._extractor = ResponseStreamExtractor(pass_through, extra_tags=THOUGHT_TAGS)
        self._raw: list[str] = []

    @property
    def reply_text(self) -> str:
        return self._extractor.text

    @property
    def raw_text(self) -> str:
        """Every chunk received since the last reset, concatenated."""
        return "".join(self._raw)

    @property
    def thought(self) -> str:
        extractor = self._extractor.extractor
        return next((extractor.text(tag) for tag in THOUGHT_TAGS if extractor.text(tag)), "")

    def on_chunk(self, chunk: str) -> StreamUpdate:
        self._raw.append(chunk)
        delta = self._extractor.push(chunk)
        return self._update(delta)

    def end_of_stream(self) -> StreamUpdate:
        """Release text held back by an unterminated reply tag."""
        return self._update(self._extractor.flush())

    def finalize(self, fallback: str = "") -> str:
        """Pick the text to show once the response is complete.

        Streamed reply text wins; the fallback (the full reply delivered by
        the collaborator) is used when nothing streamed.
        """
        return (self.reply_text or fallback).strip()

    def reset(self) -> None:
        self._extractor.reset()
        self._raw.clear()

    def _update(self, delta: str) -> StreamUpdate:
        return StreamUpdate(
            reply_delta=delta,
            reply_text=self.reply_text,
            thought=self.thought,
            actions=self._extractor.actions,
        )
