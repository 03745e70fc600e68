from typing import Final

TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%dT%H:%M:%S"
EXPIRY_YEAR_MIN: Final[int] = 1950
EXPIRY_YEAR_MAX: Final[int] = 2100
MAX_LOADED_FILMS: Final[int] = 5

# Physical formats: raw value -> display name
ROLL_FORMATS: Final[dict[str, str]] = {
    "35": "35mm",
    "120": "120",
    "110": "110",
    "127": "127",
    "220": "220",
}
SHEET_FORMATS: Final[dict[str, str]] = {
    "4x5": "4x5",
    "5x7": "5x7",
    "8x10": "8x10",
}
OTHER_FORMAT: Final[str] = "Other"

FILM_TYPES: Final[dict[str, str]] = {
    "BW": "B&W",
    "Color": "Color",
    "Slide": "Slide",
    "Instant": "Instant",
}

# (label, lowest speed, highest speed) - inclusive bounds
SPEED_RANGES: Final[list[tuple[str, int, int]]] = [
    ("<100", 0, 99),
    ("100", 100, 199),
    ("200", 200, 300),
    ("400", 301, 400),
    (">400", 401, 10 ** 9),
]

DEFAULT_MANUFACTURERS: Final[list[str]] = [
    "Adox", "Agfa", "Bergger", "CineStill", "Foma", "Fujifilm", "Harman",
    "Ilford", "Kentmere", "Kodak", "Lomography", "Polaroid", "Rollei",
]

# Event names published by the inventory service
LEDGER_CHANGED: Final[str] = "ledger.changed"
LOADED_FILMS_CHANGED: Final[str] = "loaded_films.changed"

CSV_INVENTORY_MARKER: Final[str] = "# INVENTORY"
CSV_SUMMARY_MARKER: Final[str] = "# SUMMARY"
CSV_COLUMNS: Final[list[str]] = [
    "Manufacturer", "Film", "Type", "ISO", "Format", "Custom Format", "Qty",
    "Expiry", "Frozen", "Exposures", "Comments", "Added",
]
