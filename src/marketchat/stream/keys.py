"""Key event decoding.

Hides how keystrokes are represented on the wire and in Textual's key
names. Every consumer receives the same fixed record: a key name plus a
modifier bitset.
"""

import re
from dataclasses import dataclass
from enum import IntFlag


class Modifier(IntFlag):
    """Modifier keys held while a key was pressed."""

    NONE = 0
    SHIFT = 1
    ALT = 2
    CTRL = 4


_MODIFIER_NAMES = {
    "shift": Modifier.SHIFT,
    "alt": Modifier.ALT,
    "meta": Modifier.ALT,
    "ctrl": Modifier.CTRL,
}

# Textual spells a few keys differently from the names used here
_KEY_ALIASES = {
    "backtab": ("tab", Modifier.SHIFT),
    "return": ("enter", Modifier.NONE),
    "page_up": ("pageup", Modifier.NONE),
    "page_down": ("pagedown", Modifier.NONE),
    "escape": ("escape", Modifier.NONE),
}


@dataclass(frozen=True)
class KeyEvent:
    """A decoded keystroke."""

    name: str
    modifiers: Modifier = Modifier.NONE
    char: str = ""

    @property
    def ctrl(self) -> bool:
        return bool(self.modifiers & Modifier.CTRL)

    @property
    def shift(self) -> bool:
        return bool(self.modifiers & Modifier.SHIFT)

    @property
    def alt(self) -> bool:
        return bool(self.modifiers & Modifier.ALT)

    @property
    def is_printable(self) -> bool:
        return bool(self.char) and self.char.isprintable() and not (self.ctrl or self.alt)

    def __str__(self) -> str:
        parts = [name for name, flag in (("ctrl", Modifier.CTRL), ("alt", Modifier.ALT),
                                         ("shift", Modifier.SHIFT)) if self.modifiers & flag]
        parts.append(self.name)
        return "+".join(parts)


def parse_key(key: str, character: str | None = None) -> KeyEvent:
    """Build a KeyEvent from a Textual key name such as ``ctrl+c``.

    Args:
        key: Key name as reported by ``textual.events.Key.key``
        character: Printable character, if any

    Returns:
        KeyEvent with modifiers split off the name
    """
    *prefixes, name = key.split("+") if key != "+" else ["+"]
    modifiers = Modifier.NONE
    for prefix in prefixes:
        modifiers |= _MODIFIER_NAMES.get(prefix, Modifier.NONE)

    if name in _KEY_ALIASES:
        name, extra = _KEY_ALIASES[name]
        modifiers |= extra

    return KeyEvent(name=name, modifiers=modifiers, char=character or "")


_CSI_TILDE_KEYS = {
    "1": "home",
    "2": "insert",
    "3": "delete",
    "4": "end",
    "5": "pageup",
    "6": "pagedown",
    "7": "home",
    "8": "end",
}

_CSI_LETTER_KEYS = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
}

_CONTROL_PUNCTUATION = {
    0x1b: "left_square_bracket",
    0x1c: "backslash",
    0x1d: "right_square_bracket",
    0x1e: "circumflex_accent",
    0x1f: "underscore",
}

_SGR_MOUSE = re.compile(r"\x1b\[<\d+;\d+;\d+[mM]")
_X10_MOUSE = re.compile(r"\x1b\[M.{3}", re.DOTALL)
_CSI = re.compile(r"\x1b\[([0-9;?<]*)([ -/]*)([@-~])")
_SS3 = re.compile(r"\x1bO([A-DHF])")
_OSC = re.compile(r"\x1b\][^\x07]*(?:\x07|\x1b\\)")


def _xterm_modifiers(param: str | None) -> Modifier:
    """Decode the xterm modifier parameter (1 + bitmask)."""
    if not param or not param.isdigit():
        return Modifier.NONE
    bits = max(0, int(param) - 1)
    return Modifier(bits & (Modifier.SHIFT | Modifier.ALT | Modifier.CTRL))


def _decode_csi(params: str, final: str) -> KeyEvent | None:
    fields = params.split(";") if params else []
    modifiers = _xterm_modifiers(fields[1] if len(fields) > 1 else None)

    if final == "~" and fields:
        name = _CSI_TILDE_KEYS.get(fields[0])
        return KeyEvent(name=name, modifiers=modifiers) if name else None
    if final == "Z":
        return KeyEvent(name="tab", modifiers=modifiers | Modifier.SHIFT)
    name = _CSI_LETTER_KEYS.get(final)
    return KeyEvent(name=name, modifiers=modifiers) if name else None


def _decode_control(char: str) -> KeyEvent:
    if char == "\r":
        return KeyEvent(name="enter")
    if char == "\t":
        return KeyEvent(name="tab")
    if char in ("\x7f", "\x08"):
        return KeyEvent(name="backspace")
    if char == "\x00":
        return KeyEvent(name="space", modifiers=Modifier.CTRL)
    code = ord(char)
    if code <= 26:
        return KeyEvent(name=chr(code + ord("a") - 1), modifiers=Modifier.CTRL)
    return KeyEvent(name=_CONTROL_PUNCTUATION[code], modifiers=Modifier.CTRL)


def decode_keys(text: str) -> list[KeyEvent]:
    """Decode raw terminal input into key events.

    Mouse reports and unrecognized control sequences are skipped; they are
    the mouse decoder's and the scrubber's concern.

    Args:
        text: Input with no incomplete trailing escape sequence

    Returns:
        Key events in input order
    """
    events: list[KeyEvent] = []
    index = 0
    length = len(text)

    while index < length:
        char = text[index]

        if char == "\x1b":
            for skipped in (_SGR_MOUSE, _X10_MOUSE, _OSC):
                match = skipped.match(text, index)
                if match:
                    index = match.end()
                    break
            else:
                match = _CSI.match(text, index)
                if match:
                    event = _decode_csi(match.group(1), match.group(3))
                    if event is not None:
                        events.append(event)
                    index = match.end()
                    continue
                match = _SS3.match(text, index)
                if match:
                    events.append(KeyEvent(name=_CSI_LETTER_KEYS[match.group(1)]))
                    index = match.end()
                    continue
                following = text[index + 1:index + 2]
                if following and following != "\x1b" and following.isprintable():
                    events.append(KeyEvent(name=following.lower(), modifiers=Modifier.ALT, char=following))
                    index += 2
                else:
                    events.append(KeyEvent(name="escape"))
                    index += 1
            continue

        if char == "\n":
            events.append(KeyEvent(name="j", modifiers=Modifier.CTRL))
        elif ord(char) < 0x20 or char == "\x7f":
            events.append(_decode_control(char))
        elif char == " ":
            events.append(KeyEvent(name="space", char=char))
        else:
            events.append(KeyEvent(name=char, char=char))
        index += 1

    return events
