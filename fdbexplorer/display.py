"""Human-readable formatting of values shown in the explorer."""

KIBIBYTE = 1024.0
MEBIBYTE = KIBIBYTE * 1024
GIBIBYTE = MEBIBYTE * 1024
TEBIBYTE = GIBIBYTE * 1024

NONE = ""

_UNITS = (
    (KIBIBYTE, 1.0, "B"),
    (MEBIBYTE, KIBIBYTE, "KiB"),
    (GIBIBYTE, MEBIBYTE, "MiB"),
    (TEBIBYTE, GIBIBYTE, "GiB"),
)

_YES_NO = {True: "Yes", False: "No"}


def _is_separator(ch):
    if ch.isascii():
        return not (ch.isalnum() or ch == "_")
    if ch.isalpha() or ch.isdigit():
        return False
    return ch.isspace()


def titlify(s):
    """Replace underscores with spaces and capitalise the start of each word."""
    text = s.replace("_", " ")
    return "".join(
        ch.upper() if _is_separator(prev) else ch for prev, ch in zip(" " + text, text)
    )


def boolify(b):
    """Render a boolean as Yes or No."""
    return _YES_NO[bool(b)]


def convert(v, dp=1, per_unit=NONE):
    """Format a byte count with a binary unit, optionally as a rate per ``per_unit``."""
    suffix = f"/{per_unit}" if per_unit != NONE else ""
    for limit, divisor, unit in _UNITS:
        if v < limit:
            return f"{v / divisor:.{dp}f} {unit}{suffix}"
    return f"{v / TEBIBYTE:.{dp}f} TiB{suffix}"


def format_duration(seconds):
    """Format whole seconds as hours, minutes and seconds, e.g. ``1h2m3s``."""
    total = int(seconds)
    sign = "-" if total < 0 else ""
    hours, rest = divmod(abs(total), 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{sign}{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{sign}{minutes}m{secs}s"
    return f"{sign}{secs}s"