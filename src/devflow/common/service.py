import re
import unicodedata


def slugify(value: str) -> str:
    """
    Lowercase, ascii, dash separated. Anything that isn't a letter, digit,
    space or dash is dropped.
    """
    value = (
        unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    )
    value = re.sub(r"[^a-z0-9\s-]", "", value.lower())
    value = re.sub(r"[\s-]+", "-", value)
    return value.strip("-")


def offset(page: int, page_size: int) -> int:
    return (page - 1) * page_size
