"""Character model - keystrokes, control sequences, styles and decoding."""

from console_kit.chr.char import (
    ABR,
    BEL,
    BS,
    CR,
    DEL,
    EOF,
    ESC,
    FF,
    FS,
    GS,
    LF,
    NBSP,
    NUL,
    RS,
    TAB,
    US,
    VT,
    Char,
    Control,
    Key,
    Unicode,
    codepoint_width,
    escape,
)
from console_kit.chr.reader import CharReader
from console_kit.chr.stream import iterate
from console_kit.chr.style import Style
from console_kit.chr.util import (
    alt,
    clip_width,
    expand_tabs,
    left_just,
    printable_width,
    right_just,
    strip_non_printable,
)

__all__ = [
    "Char",
    "Unicode",
    "Control",
    "Key",
    "Style",
    "CharReader",
    "iterate",
    "codepoint_width",
    "escape",
    "printable_width",
    "expand_tabs",
    "strip_non_printable",
    "clip_width",
    "left_just",
    "right_just",
    "alt",
    "NUL",
    "ABR",
    "EOF",
    "BEL",
    "BS",
    "TAB",
    "LF",
    "VT",
    "FF",
    "CR",
    "ESC",
    "FS",
    "GS",
    "RS",
    "US",
    "DEL",
    "NBSP",
]
