"""Language code utilities for Lyric Studio."""

LANGUAGE_NAMES: dict[str, str] = {
    "zh": "Chinese",
    "en": "English",
    "ja": "Japanese",
    "fr": "French",
    "ru": "Russian",
    "de": "German",
}

TRANSLATION_TARGET = "zh"


def normalize_language_code(code: str) -> str:
    """Normalize a language code for lookup.

    - Strip surrounding whitespace
    - Lowercase
    """
    return code.strip().lower()


def language_name(code: str) -> str:
    """Resolve a language code to its English name.

    Unknown codes are returned unchanged so the model still sees them.
    """
    return LANGUAGE_NAMES.get(normalize_language_code(code), code)


def language_list(codes: list[str]) -> str:
    """Render codes as a human-readable, comma-separated list of names."""
    return ", ".join(language_name(code) for code in codes)


def join_language_codes(codes: list[str]) -> str:
    """Join codes into the comma-separated storage form.

    Empty entries are dropped and duplicates removed, keeping first-seen order.
    """
    seen: list[str] = []
    for code in codes:
        normalized = normalize_language_code(code)
        if normalized and normalized not in seen:
            seen.append(normalized)
    return ",".join(seen)


def split_language_codes(languages: str) -> list[str]:
    """Split the comma-separated storage form back into codes."""
    return [normalize_language_code(code) for code in languages.split(",") if code.strip()]


def needs_translation(codes: list[str]) -> bool:
    """Check whether lyrics in these languages get a Chinese translation."""
    return TRANSLATION_TARGET not in {normalize_language_code(code) for code in codes}
