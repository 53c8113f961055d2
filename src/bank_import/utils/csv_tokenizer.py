"""Line and field splitting for delimited bank exports."""

import re
import unicodedata
from typing import List, Sequence

DEFAULT_DELIMITERS = (',', ';', '\t', '|')

_LINE_BREAK = re.compile(r'\r?\n')


def split_lines(text: str) -> List[str]:
    """Split text into logical rows, dropping blank lines.

    ``\\r\\n`` and ``\\n`` are equivalent terminators. A leading BOM
    character left by an upstream decoder is removed.
    """
    if text.startswith('\ufeff'):
        text = text[1:]
    return [line for line in _LINE_BREAK.split(text) if line.strip()]


def split_fields(line: str, delimiter: str = ';') -> List[str]:
    """Split one CSV row into trimmed fields.

    Fields may be wrapped in double quotes. Inside quotes a doubled quote is
    a literal quote and the delimiter does not split.
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        char = line[i]

        if char == '"':
            if in_quotes and i + 1 < length and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append(''.join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1

    fields.append(''.join(current).strip())
    return fields


def detect_delimiter(line: str, candidates: Sequence[str] = DEFAULT_DELIMITERS) -> str:
    """Pick the candidate delimiter occurring most often in a header line.

    Ties go to the earliest candidate; ``,`` when none occurs at all.
    """
    best = ','
    best_count = 0

    for delimiter in candidates:
        count = line.count(delimiter)
        if count > best_count:
            best_count = count
            best = delimiter

    return best


def normalize_header(name: str) -> str:
    """Normalize a column name for comparison.

    Case, surrounding whitespace, accents and a stray BOM are ignored, so
    "Débit", "DEBIT" and " debit " all compare equal.
    """
    name = name.replace('\ufeff', '').strip().lower()
    decomposed = unicodedata.normalize('NFKD', name)
    return ''.join(c for c in decomposed if not unicodedata.combining(c))
