"""Section parser for Picasa's per-directory `.picasa.ini` files.

The file is read line by line. A line like ``[name]`` starts the rules of
the photo `name`; every other line is one rule of the current photo.
"""

from __future__ import annotations

from collections.abc import Iterable

LegacyRules = list[str]
"""The rules of one photo, in file order."""

LegacyData = dict[str, LegacyRules]
"""Photo name -> rules, parsed from one `.picasa.ini`."""

ORIGINALS_DIRECTORY_NAMES = (".picasaoriginals", "Originals")


def parse_section_start(line: str) -> str | None:
    """Return the section name if `line` is a section header, else None."""
    if len(line) >= 2 and line[0] == "[" and line[-1] == "]":
        return line[1:-1]
    return None


class LegacySectionParser:
    """Collects rule sections from lines fed one at a time.

    If `edited_data` is given (the data of the directory holding the edited
    versions of the originals parsed here), its rules are appended to the
    rules of the section with the same name.
    """

    def __init__(self, edited_data: LegacyData | None = None) -> None:
        self._edited_data = edited_data
        self._data: LegacyData = {}
        self._section_key: str | None = None
        self._section_rules: LegacyRules = []

    def feed(self, line: str) -> None:
        section_key = parse_section_start(line)
        if section_key is not None:
            self._flush_section()
            self._section_key = section_key
        else:
            self._section_rules.append(line)

    def close(self) -> LegacyData:
        """Flush the last section and return the parsed data."""
        self._flush_section()
        return self._data

    def _flush_section(self) -> None:
        if self._section_key:
            if self._edited_data:
                self._section_rules.extend(self._edited_data.get(self._section_key, []))
            self._data[self._section_key] = self._section_rules
        self._section_key = None
        self._section_rules = []


def parse_sections(lines: Iterable[str], edited_data: LegacyData | None = None) -> LegacyData:
    """Parse all `lines` of a `.picasa.ini` at once."""
    parser = LegacySectionParser(edited_data)
    for line in lines:
        parser.feed(line)
    return parser.close()
