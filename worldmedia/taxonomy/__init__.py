"""Country code tables and resolution"""

from .country_codes import ISO2_TO_ISO3, ISO3_TO_ISO2, normalize_iso2, normalize_iso_display, resolve_codes, to_map_iso2

__all__ = [
    "ISO2_TO_ISO3",
    "ISO3_TO_ISO2",
    "normalize_iso2",
    "normalize_iso_display",
    "resolve_codes",
    "to_map_iso2",
]
