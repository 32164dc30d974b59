"""
Clausewitz script parser for melted (plain text) EU4 saves.
Parses the Paradox script format into Python data structures.

Binary and zip compressed saves must be melted by an external tool first.
"""

from pathlib import Path
from typing import Any

TEXT_HEADER = 'EU4txt'


class ParseError(ValueError):
    """Raised when a save file is not in the melted text format."""


class Block(dict):
    """A parsed key=value block.

    Repeated keys are merged into lists in the mapping, which loses their
    interleaving. `pairs` keeps every assignment in source order for logs
    where that order matters.
    """

    def __init__(self):
        super().__init__()
        self.pairs: list[tuple[str, Any]] = []


class ClausewitzParser:
    """Parser for Paradox script format (used in EU4 melted saves)."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.length = len(text)

    def skip_whitespace(self):
        """Skip whitespace and comments."""
        while self.pos < self.length:
            c = self.text[self.pos]
            if c in ' \t\n\r':
                self.pos += 1
            elif c == '#':
                while self.pos < self.length and self.text[self.pos] != '\n':
                    self.pos += 1
            else:
                break

    def parse_string(self) -> str:
        """Parse a quoted string."""
        self.pos += 1
        chunks = []
        start = self.pos
        while self.pos < self.length and self.text[self.pos] != '"':
            if self.text[self.pos] == '\\' and self.pos + 1 < self.length:
                chunks.append(self.text[start:self.pos])
                chunks.append(self.text[self.pos + 1])
                self.pos += 2
                start = self.pos
            else:
                self.pos += 1
        chunks.append(self.text[start:self.pos])
        self.pos += 1
        return ''.join(chunks)

    def parse_token(self) -> str:
        """Parse an unquoted key or value."""
        start = self.pos
        while self.pos < self.length:
            if self.text[self.pos] in ' \t\n\r={}#"':
                break
            self.pos += 1
        return self.text[start:self.pos]

    def parse_value(self) -> Any:
        """Parse a value (string, number, boolean, date string, dict, or list)."""
        self.skip_whitespace()
        if self.pos >= self.length:
            return None

        c = self.text[self.pos]
        if c == '"':
            return self.parse_string()
        if c == '{':
            return self.parse_block()
        return coerce_scalar(self.parse_token())

    def parse_block(self) -> dict | list:
        """Parse a block, deciding between dict and list by looking for '='."""
        self.pos += 1
        self.skip_whitespace()

        if self.pos >= self.length or self.text[self.pos] == '}':
            self.pos += 1
            return {}

        if self._block_has_assignment():
            return self.parse_dict_contents()
        return self.parse_list_contents()

    def _block_has_assignment(self) -> bool:
        depth = 0
        scan = self.pos
        while scan < self.length:
            c = self.text[scan]
            if c == '{':
                depth += 1
            elif c == '}':
                if depth == 0:
                    return False
                depth -= 1
            elif c == '=' and depth == 0:
                return True
            elif c == '"':
                scan += 1
                while scan < self.length and self.text[scan] != '"':
                    if self.text[scan] == '\\':
                        scan += 1
                    scan += 1
            elif c == '#':
                while scan < self.length and self.text[scan] != '\n':
                    scan += 1
            scan += 1
        return False

    def parse_dict_contents(self) -> Block:
        """Parse key=value pairs until the closing brace (or end of input)."""
        result = Block()
        repeated = set()

        while True:
            self.skip_whitespace()
            if self.pos >= self.length or self.text[self.pos] == '}':
                if self.pos < self.length:
                    self.pos += 1
                break

            if self.text[self.pos] == '"':
                key = self.parse_string()
            elif self.text[self.pos] == '{':
                # Anonymous block inside an object; nothing can address it
                self.parse_block()
                continue
            else:
                key = self.parse_token()

            self.skip_whitespace()
            if self.pos < self.length and self.text[self.pos] == '=':
                self.pos += 1
            else:
                # Bare token such as the EU4txt header
                continue

            value = self.parse_value()
            result.pairs.append((key, value))

            # Repeated keys (active_war, battle, leader...) collect into lists
            if key in result:
                if key not in repeated:
                    result[key] = [result[key]]
                    repeated.add(key)
                result[key].append(value)
            else:
                result[key] = value

        return result

    def parse_list_contents(self) -> list:
        """Parse list contents until closing brace."""
        result = []

        while True:
            self.skip_whitespace()
            if self.pos >= self.length or self.text[self.pos] == '}':
                if self.pos < self.length:
                    self.pos += 1
                break
            result.append(self.parse_value())

        return result

    def parse(self) -> dict:
        """Parse the entire text as a dictionary."""
        return self.parse_dict_contents()


def coerce_scalar(token: str) -> Any:
    if token == 'yes':
        return True
    if token == 'no':
        return False
    try:
        if '.' in token:
            return float(token)
        return int(token)
    except ValueError:
        # Dates like 1444.11.11 stay strings
        return token


def parse_clausewitz(text: str) -> dict:
    """Parse Clausewitz script text into a Python dictionary."""
    return ClausewitzParser(text).parse()


def parse_save_file(filepath: Path) -> dict:
    """Read and parse a melted EU4 save."""
    with open(filepath, 'r', encoding='latin-1') as f:
        text = f.read()
    if text.startswith('PK'):
        raise ParseError(f"{filepath} is a compressed save; melt it first")
    if not text.lstrip().startswith(TEXT_HEADER):
        raise ParseError(f"{filepath} is not a melted EU4 save (missing {TEXT_HEADER} header)")
    return parse_clausewitz(text)
