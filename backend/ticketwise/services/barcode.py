"""
Code39 barcode encoder

Each symbol is 9 elements (bar, space, bar, ... 5 bars and 4 spaces),
3 of them wide. Narrow = 1 unit, wide = 3 units.
"""
import re
from typing import List, NamedTuple

NARROW = 1
WIDE = 3
QUIET_ZONE = 10
BARCODE_HEIGHT = 40
SENTINEL = "*"

# n = narrow, w = wide
CODE39 = {
    "0": "nnnwwnwnn", "1": "wnnwnnnnw", "2": "nnwwnnnnw", "3": "wnwwnnnnn",
    "4": "nnnwwnnnw", "5": "wnnwwnnnn", "6": "nnwwwnnnn", "7": "nnnwnnwnw",
    "8": "wnnwnnwnn", "9": "nnwwnnwnn",
    "A": "wnnnnwnnw", "B": "nnwnnwnnw", "C": "wnwnnwnnn", "D": "nnnnwwnnw",
    "E": "wnnnwwnnn", "F": "nnwnwwnnn", "G": "nnnnnwwnw", "H": "wnnnnwwnn",
    "I": "nnwnnwwnn", "J": "nnnnwwwnn", "K": "wnnnnnnww", "L": "nnwnnnnww",
    "M": "wnwnnnnwn", "N": "nnnnwnnww", "O": "wnnnwnnwn", "P": "nnwnwnnwn",
    "Q": "nnnnnnwww", "R": "wnnnnnwwn", "S": "nnwnnnwwn", "T": "nnnnwnwwn",
    "U": "wwnnnnnnw", "V": "nwwnnnnnw", "W": "wwwnnnnnn", "X": "nwnnwnnnw",
    "Y": "wwnnwnnnn", "Z": "nwwnwnnnn",
    "-": "nwnnnnwnw", ".": "wwnnnnwnn", " ": "nwwnnnwnn", "$": "nwnwnwnnn",
    "/": "nwnwnnnwn", "+": "nwnnnwnwn", "%": "nnnwnwnwn",
    "*": "nwnnwnwnn",
}

_UNSUPPORTED = re.compile(r"[^0-9A-Z. \-$/+%]")


class BarElement(NamedTuple):
    position: int
    width: int
    is_bar: bool


class Code39Barcode(NamedTuple):
    text: str                  # encoded text, sentinels included
    elements: List[BarElement]
    total_width: int
    height: int

    @property
    def bars(self) -> List[BarElement]:
        return [e for e in self.elements if e.is_bar]


def _upper(char: str) -> str:
    upper = char.upper()
    return upper if len(upper) == 1 else char


def normalize(value: str) -> str:
    """
    Uppercases character by character and replaces every unsupported one
    with '-'. The result has the length of the input: 'ß' becomes '-',
    never 'SS'.
    """
    return _UNSUPPORTED.sub("-", "".join(_upper(c) for c in (value or "")))


def encode(value: str) -> Code39Barcode:
    """
    Encodes `value` as Code39.

    Elements cover the whole strip in order: leading quiet zone, the
    9 elements of each symbol, one narrow gap between symbols, trailing
    quiet zone. Widths always add up to total_width.

        encode("P-25001").text  ->  "*P-25001*"
    """
    text = f"{SENTINEL}{normalize(value)}{SENTINEL}"

    elements = [BarElement(0, QUIET_ZONE, False)]
    position = QUIET_ZONE

    for index, char in enumerate(text):
        for k, unit in enumerate(CODE39[char]):
            width = WIDE if unit == "w" else NARROW
            elements.append(BarElement(position, width, k % 2 == 0))
            position += width
        # inter-character gap, not after the last symbol
        if index < len(text) - 1:
            elements.append(BarElement(position, NARROW, False))
            position += NARROW

    elements.append(BarElement(position, QUIET_ZONE, False))
    position += QUIET_ZONE

    return Code39Barcode(text=text, elements=elements, total_width=position, height=BARCODE_HEIGHT)


def to_svg_rects(
    value: str,
    x: float,
    y: float,
    width: float,
    height: float,
    margin: float = 0.5,
    fill: str = "#111827"
) -> str:
    """
    SVG <rect> elements drawing the barcode of `value` inside the box.
    Units are stretched to the box width; bar height fills the box height.
    """
    barcode = encode(value)
    box_w = max(0.0, width - margin * 2)
    box_h = max(0.0, height - margin * 2)
    unit = box_w / barcode.total_width

    rects = [
        f'<rect x="{x + margin + bar.position * unit:.3f}" y="{y + margin:.3f}" '
        f'width="{bar.width * unit:.3f}" height="{box_h:.3f}" fill="{fill}" />'
        for bar in barcode.bars
    ]
    return "".join(rects)


def to_svg(value: str, fill: str = "#111827") -> str:
    """
    Standalone SVG strip of the barcode. preserveAspectRatio="none" lets it
    stretch to any container; bars carry no information in their height.
    """
    barcode = encode(value)
    rects = "".join(
        f'<rect x="{bar.position}" y="0" width="{bar.width}" height="{barcode.height}" fill="{fill}" />'
        for bar in barcode.bars
    )
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {barcode.total_width} {barcode.height}" '
        f'preserveAspectRatio="none">{rects}</svg>'
    )
