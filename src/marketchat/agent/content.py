"""Agent reply content and parsing of the tagged reply format."""

from pydantic import BaseModel, Field

from ..stream import TagStreamExtractor, parse_actions

REPLY_ACTION = "REPLY"
REPLY_TAGS = ("thought", "thinking", "actions", "text")


class AgentContent(BaseModel):
    """Structured content of one agent reply or action result.

    Attributes:
        text: Text shown to the user
        thought: The model's stated reasoning, if any
        actions: Upper-case action names, in the order given
        source: Who produced the content ('model' or an action name)
    """

    text: str = ""
    thought: str = ""
    actions: list[str] = Field(default_factory=list)
    source: str = "model"

    @property
    def has_text(self) -> bool:
        return bool(self.text.strip())


def parse_response(raw: str) -> AgentContent:
    """Parse a complete model reply.

    A reply without any recognised tag is treated as plain text answered
    with REPLY. A missing actions tag also defaults to REPLY.
    """
    extractor = TagStreamExtractor(REPLY_TAGS)
    extractor.push(raw)
    extractor.flush()

    if not any(extractor.tracker(tag).opened for tag in REPLY_TAGS):
        return AgentContent(text=raw.strip(), actions=[REPLY_ACTION])

    thought = extractor.text("thought") or extractor.text("thinking")
    actions = parse_actions(extractor.text("actions")) or [REPLY_ACTION]
    return AgentContent(
        text=extractor.text("text").strip(),
        thought=thought.strip(),
        actions=actions,
    )
