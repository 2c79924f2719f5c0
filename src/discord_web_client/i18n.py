"""
Internationalization (i18n) module for the Discord web client.

Provides translations for all user-facing messages in English (en) and
German (de): error banner texts, session drop reasons, login error page
texts and CLI output.
"""

from typing import Optional


SUPPORTED_LANGUAGES = frozenset({"en", "de"})
DEFAULT_LANGUAGE = "en"


# Structure: {message_key: {language_code: translated_message}}
TRANSLATIONS: dict[str, dict[str, str]] = {
    # Error banner texts, keyed by DiscordClientError.code
    "error.missing_credential": {
        "en": "Authentication required",
        "de": "Anmeldung erforderlich",
    },
    "error.invalid_input": {
        "en": "Invalid input: {detail}",
        "de": "Ungültige Eingabe: {detail}",
    },
    "error.unauthorized": {
        "en": "You do not have access to this resource",
        "de": "Kein Zugriff auf diese Ressource",
    },
    "error.not_found": {
        "en": "The requested resource was not found",
        "de": "Die angeforderte Ressource wurde nicht gefunden",
    },
    "error.rate_limited": {
        "en": "Too many requests, please try again later",
        "de": "Zu viele Anfragen, bitte später erneut versuchen",
    },
    "error.rate_limited_retry": {
        "en": "Too many requests, please try again in {seconds:.1f}s",
        "de": "Zu viele Anfragen, bitte in {seconds:.1f}s erneut versuchen",
    },
    "error.server_error": {
        "en": "Discord returned an error, please try again",
        "de": "Discord hat einen Fehler gemeldet, bitte erneut versuchen",
    },
    "error.network_error": {
        "en": "Could not reach Discord, check your connection",
        "de": "Discord nicht erreichbar, bitte Verbindung prüfen",
    },
    "error.parse_error": {
        "en": "Stored data could not be read",
        "de": "Gespeicherte Daten konnten nicht gelesen werden",
    },
    "error.io_error": {
        "en": "Stored data could not be accessed",
        "de": "Auf gespeicherte Daten konnte nicht zugegriffen werden",
    },

    # Operation labels shown in front of banner texts
    "operation.list_guilds": {
        "en": "Loading servers",
        "de": "Server laden",
    },
    "operation.list_channels": {
        "en": "Loading channels",
        "de": "Kanäle laden",
    },
    "operation.list_messages": {
        "en": "Loading messages",
        "de": "Nachrichten laden",
    },
    "operation.send_message": {
        "en": "Sending message",
        "de": "Nachricht senden",
    },
    "operation.join_voice": {
        "en": "Joining voice channel",
        "de": "Sprachkanal beitreten",
    },
    "operation.list_voice_regions": {
        "en": "Loading voice regions",
        "de": "Sprachregionen laden",
    },

    # Reasons for dropping back to unauthenticated
    "session.missing_credential": {
        "en": "Please log in to continue",
        "de": "Bitte melde dich an, um fortzufahren",
    },
    "session.unauthorized": {
        "en": "Your token is no longer valid, please log in again",
        "de": "Dein Token ist nicht mehr gültig, bitte erneut anmelden",
    },
    "session.network_error": {
        "en": "Could not verify your token, please log in again",
        "de": "Token konnte nicht geprüft werden, bitte erneut anmelden",
    },
    "session.rate_limited": {
        "en": "Discord is rate limiting requests, try again shortly",
        "de": "Discord begrenzt Anfragen, bitte gleich erneut versuchen",
    },
    "session.server_error": {
        "en": "Discord is having trouble, try again shortly",
        "de": "Discord hat Probleme, bitte gleich erneut versuchen",
    },
    "session.not_found": {
        "en": "Your account could not be loaded, try again shortly",
        "de": "Dein Konto konnte nicht geladen werden, bitte gleich erneut versuchen",
    },
    "session.invalid_input": {
        "en": "Your stored token could not be used, please log in again",
        "de": "Dein gespeichertes Token ist unbrauchbar, bitte erneut anmelden",
    },
    "session.redirecting": {
        "en": "Redirecting to login in {seconds:.0f}s...",
        "de": "Weiterleitung zur Anmeldung in {seconds:.0f}s...",
    },

    # Login page
    "login.enter_token": {
        "en": "Please enter your Discord token",
        "de": "Bitte gib deinen Discord-Token ein",
    },
    "login.invalid_token": {
        "en": "Invalid Discord token",
        "de": "Ungültiger Discord-Token",
    },
    "login.success": {
        "en": "Logged in as {username}",
        "de": "Angemeldet als {username}",
    },

    # Authentication error page, keyed by the provider's error code
    "login_error.Callback": {
        "en": "Failed to process authentication callback. Please try again.",
        "de": "Authentifizierungs-Callback fehlgeschlagen. Bitte erneut versuchen.",
    },
    "login_error.AccessDenied": {
        "en": "You do not have permission to sign in.",
        "de": "Du hast keine Berechtigung, dich anzumelden.",
    },
    "login_error.OAuthSignin": {
        "en": "Error starting the OAuth sign-in flow. Please try again.",
        "de": "Fehler beim Start der OAuth-Anmeldung. Bitte erneut versuchen.",
    },
    "login_error.OAuthCallback": {
        "en": "Error completing the OAuth sign-in flow. Please try again.",
        "de": "Fehler beim Abschluss der OAuth-Anmeldung. Bitte erneut versuchen.",
    },
    "login_error.OAuthCreateAccount": {
        "en": "Error creating your account. Please try again.",
        "de": "Fehler beim Erstellen deines Kontos. Bitte erneut versuchen.",
    },
    "login_error.OAuthAccountNotLinked": {
        "en": "Email already exists with a different provider.",
        "de": "Diese E-Mail ist bereits mit einem anderen Anbieter verknüpft.",
    },
    "login_error.EmailCreateAccount": {
        "en": "Error creating your account. Please try again.",
        "de": "Fehler beim Erstellen deines Kontos. Bitte erneut versuchen.",
    },
    "login_error.SessionRequired": {
        "en": "You must be signed in to access this page.",
        "de": "Du musst angemeldet sein, um diese Seite zu sehen.",
    },
    "login_error.default": {
        "en": "An unknown error occurred. Please try again.",
        "de": "Ein unbekannter Fehler ist aufgetreten. Bitte erneut versuchen.",
    },

    # CLI output
    "cli.logged_out": {
        "en": "Logged out",
        "de": "Abgemeldet",
    },
    "cli.not_logged_in": {
        "en": "Not logged in. Use 'login TOKEN' first.",
        "de": "Nicht angemeldet. Bitte zuerst 'login TOKEN' ausführen.",
    },
    "cli.guilds_header": {
        "en": "Servers ({count}):",
        "de": "Server ({count}):",
    },
    "cli.channels_header": {
        "en": "Channels ({count}):",
        "de": "Kanäle ({count}):",
    },
    "cli.messages_header": {
        "en": "Messages ({count}):",
        "de": "Nachrichten ({count}):",
    },
    "cli.voice_regions_header": {
        "en": "Voice regions ({count}):",
        "de": "Sprachregionen ({count}):",
    },
    "cli.message_sent": {
        "en": "Message sent ({message_id})",
        "de": "Nachricht gesendet ({message_id})",
    },
    "cli.voice_joined": {
        "en": "Joined voice channel {channel}",
        "de": "Sprachkanal {channel} beigetreten",
    },
    "cli.no_messages_voice": {
        "en": "Voice channels have no messages",
        "de": "Sprachkanäle haben keine Nachrichten",
    },
    "cli.version": {
        "en": "Version: {version}",
        "de": "Version: {version}",
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
        key: The message key (e.g., 'error.not_found')
        language: Language code ('en' or 'de'). Defaults to DEFAULT_LANGUAGE.
        **kwargs: Format arguments for the message template

    Returns:
        The translated and formatted message string.
        If the key is not found, returns the key itself.

    Examples:
        >>> get_message('error.not_found', 'de')
        'Die angeforderte Ressource wurde nicht gefunden'
    """
    if language is None or language not in SUPPORTED_LANGUAGES:
        language = DEFAULT_LANGUAGE

    translations = TRANSLATIONS.get(key)
    if translations is None:
        return key

    message = translations.get(language) or translations.get(DEFAULT_LANGUAGE)
    if message is None:
        return key

    if kwargs:
        try:
            message = message.format(**kwargs)
        except (KeyError, ValueError):
            pass

    return message


def describe_error(error: Exception, language: Optional[str] = None) -> str:
    """User-facing text for a client error or a TransientError banner entry."""
    code = getattr(error, "code", "")
    retry_after = getattr(error, "retry_after", None)
    if code == "rate_limited" and retry_after is not None:
        return get_message("error.rate_limited_retry", language, seconds=retry_after)
    key = f"error.{code}"
    if key not in TRANSLATIONS:
        return getattr(error, "message", str(error))
    return get_message(key, language, detail=getattr(error, "message", ""))


def login_error_message(error_code: Optional[str], language: Optional[str] = None) -> str:
    """Text for the authentication error page; unknown codes get a generic text."""
    key = f"login_error.{error_code}"
    if key not in TRANSLATIONS:
        key = "login_error.default"
    return get_message(key, language)


def get_all_message_keys() -> set[str]:
    return set(TRANSLATIONS.keys())


def get_missing_translations(language: str) -> set[str]:
    """Message keys without a translation for ``language``."""
    return {
        key for key, translations in TRANSLATIONS.items()
        if language not in translations
    }


def validate_translations() -> dict[str, set[str]]:
    """
    Validate that all languages have all translations.

    Returns:
        Dictionary mapping language codes to sets of missing message keys.
    """
    return {language: get_missing_translations(language) for language in SUPPORTED_LANGUAGES}
