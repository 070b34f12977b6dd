def format_ticket_code(level, year: int, serial: int) -> str:
    """
    Human readable ticket code: {level}-{yy}{serial:04d}

    Accepts a Level or its letter, and a full or a two digit year.
        format_ticket_code(Level.P, 2025, 1)  ->  "P-250001"
    """
    letter = getattr(level, "value", level)
    return f"{letter}-{year % 100:02d}{serial:04d}"
