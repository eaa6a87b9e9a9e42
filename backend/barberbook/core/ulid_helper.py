"""Primary keys for barberbook rows: 26-character, time-sortable ULIDs."""

import ulid


def generate_ulid() -> str:
    return str(ulid.ULID())
