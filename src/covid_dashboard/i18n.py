"""
Internationalization (i18n) module for the dashboard.

Provides translations for all user-facing messages in German (de) and English (en).
"""

from typing import Optional


# Supported languages
SUPPORTED_LANGUAGES = frozenset({"de", "en"})
DEFAULT_LANGUAGE = "en"


# Translation dictionary with all messages
# Structure: {message_key: {language_code: translated_message}}
TRANSLATIONS: dict[str, dict[str, str]] = {
    # Stage errors shown inline on the dashboard
    "error.fetch_countries": {
        "de": "Fehler beim Laden der Länder. Bitte später erneut versuchen.",
        "en": "Error fetching countries. Please try again later.",
    },
    "error.fetch_historical": {
        "de": "Fehler beim Laden der historischen Daten. Bitte später erneut versuchen.",
        "en": "Error fetching historical data. Please try again later.",
    },
    "error.invalid_date": {
        "de": "Ungültiges Datum: {value}",
        "en": "Invalid date: {value}",
    },

    # Chart labels
    "chart.total_cases": {
        "de": "Fälle gesamt",
        "en": "Total Cases",
    },
    "chart.deaths": {
        "de": "Todesfälle",
        "en": "Deaths",
    },
    "chart.recovered": {
        "de": "Genesen",
        "en": "Recovered",
    },
    "chart.cases": {
        "de": "Fälle",
        "en": "Cases",
    },
    "chart.trend_title": {
        "de": "COVID-19 Verlauf",
        "en": "COVID-19 Historical Trend",
    },
    "chart.distribution_title": {
        "de": "COVID-19 Verteilung",
        "en": "COVID-19 Distribution",
    },

    # CLI output
    "cli.title": {
        "de": "COVID-19 Dashboard",
        "en": "COVID-19 Dashboard",
    },
    "cli.country": {
        "de": "Land: {country}",
        "en": "Country: {country}",
    },
    "cli.window": {
        "de": "Zeitraum: {start} bis {end}",
        "en": "Date range: {start} to {end}",
    },
    "cli.unbounded": {
        "de": "offen",
        "en": "open",
    },
    "cli.days": {
        "de": "{count} Tage im Zeitraum",
        "en": "{count} days in range",
    },
    "cli.no_data": {
        "de": "Keine Daten im gewählten Zeitraum.",
        "en": "No data in the selected date range.",
    },
    "cli.countries_loaded": {
        "de": "{count} Länder geladen",
        "en": "{count} countries loaded",
    },
    "cli.unknown_country": {
        "de": "Unbekannter Ländercode: {code}",
        "en": "Unknown country code: {code}",
    },
}


def get_message(
    key: str,
    language: Optional[str] = None,
    **kwargs,
) -> str:
    """
    Get a translated message by key.

    Args:
        key: The message key (e.g., 'error.fetch_countries')
        language: Language code ('de' or 'en'). Defaults to DEFAULT_LANGUAGE.
        **kwargs: Format arguments for the message template

    Returns:
        The translated and formatted message string.
        If the key is not found, returns the key itself.
        If the language is not found, falls back to DEFAULT_LANGUAGE.

    Examples:
        >>> get_message('chart.deaths', 'en')
        'Deaths'
        >>> get_message('cli.country', 'de', country='Germany')
        'Land: Germany'
    """
    if language is None or language not in SUPPORTED_LANGUAGES:
        language = DEFAULT_LANGUAGE

    translations = TRANSLATIONS.get(key)
    if translations is None:
        return key

    message = translations.get(language)
    if message is None:
        message = translations.get(DEFAULT_LANGUAGE)
    if message is None:
        return key

    if kwargs:
        try:
            message = message.format(**kwargs)
        except KeyError:
            # Missing placeholder values leave the template unformatted
            pass

    return message


def get_all_message_keys() -> set[str]:
    """Get all available message keys."""
    return set(TRANSLATIONS.keys())


def has_translation(key: str, language: str) -> bool:
    """Check if a translation exists for a key and language."""
    translations = TRANSLATIONS.get(key)
    if translations is None:
        return False
    return language in translations


def get_missing_translations(language: str) -> set[str]:
    """Get all message keys that are missing translations for a language."""
    return {
        key
        for key, translations in TRANSLATIONS.items()
        if language not in translations
    }


def validate_translations() -> dict[str, set[str]]:
    """
    Validate that all languages have all translations.

    Returns:
        Dictionary mapping language codes to sets of missing message keys.
        Empty sets indicate complete translations.
    """
    return {
        language: get_missing_translations(language)
        for language in SUPPORTED_LANGUAGES
    }
