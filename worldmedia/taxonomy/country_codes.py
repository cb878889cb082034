"""
Country code resolution between the map dataset and the channel directories.

The map dataset and the scraped directories disagree on whether a country
folder is named with its alpha-2 or alpha-3 code, so a lookup has to probe
both forms:

  "FR"  -> ["FR", "FRA"]
  "fra" -> ["FR", "FRA"]
  "ZZ"  -> ["ZZ"]
"""

from __future__ import annotations

import re
from typing import Optional

# Countries whose folders exist under both forms
ISO2_TO_ISO3 = {
    'FR': 'FRA',
    'PT': 'PRT',
    'NO': 'NOR',
    'DE': 'DEU',
    'GB': 'GBR',
    'US': 'USA',
}

ISO3_TO_ISO2 = {iso3: iso2 for iso2, iso3 in ISO2_TO_ISO3.items()}

# Map features that ship without usable code columns
NAME_TO_ISO = {
    'France': ('FRA', 'FR'),
    'Portugal': ('PRT', 'PT'),
    'Norway': ('NOR', 'NO'),
}

NUMERIC_RE = re.compile(r'^-?\d+$')


def resolve_codes(code: Optional[str]) -> list[str]:
    """
    Return the on-disk codes to query for a user-facing country code.

    2-letter (canonical) first, then the 3-letter form when it is known and
    distinct. Anything that is not 2 or 3 characters yields no candidates.
    """
    code = (code or '').strip().upper()
    if len(code) not in (2, 3):
        return []

    if len(code) == 2:
        iso2 = code
        iso3 = ISO2_TO_ISO3.get(code)
    else:
        iso2 = ISO3_TO_ISO2.get(code, code)
        iso3 = code

    candidates = [iso2]
    if iso3 and iso3 != iso2:
        candidates.append(iso3)
    return candidates


def to_map_iso2(code: Optional[str]) -> str:
    """Map a 2- or 3-letter code to the 2-letter code the map is keyed by."""
    code = (code or '').strip().upper()
    if len(code) == 3:
        return ISO3_TO_ISO2.get(code, code)
    return code


def is_invalid_iso(value: object) -> bool:
    """Map datasets use '-99' and numeric ids for territories without a code."""
    text = str(value if value is not None else '').strip()
    return not text or text == '-99' or bool(NUMERIC_RE.match(text))


def normalize_iso2(iso2: Optional[str], iso3: Optional[str], name: Optional[str]) -> str:
    """Best 2-letter code for a map feature, or '' when none can be found."""
    code = (iso2 or '').strip()
    if len(code) == 2 and not is_invalid_iso(code):
        return code

    from_iso3 = ISO3_TO_ISO2.get((iso3 or '').strip().upper())
    if from_iso3:
        return from_iso3

    from_name = NAME_TO_ISO.get(name or '')
    return from_name[1] if from_name else ''


def normalize_iso_display(iso3: Optional[str], iso2: Optional[str], name: Optional[str]) -> str:
    """Code shown next to a country name: alpha-3 preferred, then alpha-2."""
    a3 = (iso3 or '').strip()
    a2 = (iso2 or '').strip()
    if a3 and not is_invalid_iso(a3):
        return a3
    if len(a2) == 2 and not is_invalid_iso(a2):
        return a2

    from_name = NAME_TO_ISO.get(name or '')
    return from_name[0] if from_name else ''
