"""
Language resolution for command retrieval.

The effective language is picked by strict precedence, first match wins:

1. explicit override (the ``--lang`` flag)
2. project config ``preferred_language``
3. user config ``preferred_language``
4. environment: CLAUDE_CMD_LANG, then the POSIX locale (LC_ALL, LC_MESSAGES, LANG)
5. "en"

A source holding something that isn't a valid language code is skipped and
resolution continues with the next one.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Mapping

from .config import Config, ConfigScope, ConfigStore
from .errors import validation

logger = logging.getLogger(__name__)

FALLBACK_LANGUAGE = "en"
LANGUAGE_ENV_VAR = "CLAUDE_CMD_LANG"
LOCALE_ENV_VARS = ("LC_ALL", "LC_MESSAGES", "LANG")

_LANGUAGE_CODE_RE = re.compile(r"^[a-z]{2,3}$")

LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "fr": "Français",
    "es": "Español",
    "de": "Deutsch",
    "it": "Italiano",
    "pt": "Português",
    "ja": "日本語",
    "ko": "한국어",
    "zh": "中文",
    "ru": "Русский",
    "pl": "Polski",
    "nl": "Nederlands",
    "sv": "Svenska",
    "no": "Norsk",
    "da": "Dansk",
    "fi": "Suomi",
    "tr": "Türkçe",
    "ar": "العربية",
    "he": "עברית",
    "hi": "हिन्दी",
}

# Languages offered by default, in display order
COMMON_LANGUAGES = ("en", "fr", "es", "de", "it", "pt", "ja", "ko", "zh")


def is_valid_language_code(code: str) -> bool:
    """Valid codes are 2-3 lowercase ASCII letters."""
    return bool(_LANGUAGE_CODE_RE.match(code))


def sanitize_language_code(code: str | None) -> str:
    """Normalize case and whitespace; returns "" for anything invalid."""
    if not code:
        return ""
    normalized = code.strip().lower()
    return normalized if is_valid_language_code(normalized) else ""


def parse_locale(locale: str) -> str:
    """Extract the language code from a POSIX locale string.

    "fr_FR.UTF-8@euro" -> "fr"

    Raises:
        ValueError: For empty input, the C/POSIX locales, or a language part
            that isn't a valid code
    """
    trimmed = locale.strip()
    if not trimmed:
        raise ValueError("locale string cannot be empty")
    if trimmed.upper() in ("C", "POSIX"):
        raise ValueError("special locale names 'C' and 'POSIX' are not supported")

    # Drop modifier then encoding
    base = trimmed.split("@", 1)[0].split(".", 1)[0]
    language = re.split(r"[_-]", base, maxsplit=1)[0].lower()

    if not language:
        raise ValueError(f"invalid locale format: {locale!r}")
    if not is_valid_language_code(language):
        raise ValueError(f"invalid language code in locale: {locale!r}")
    return language


def get_language_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code, code.upper())


@dataclass(frozen=True)
class LanguageInfo:
    code: str
    name: str
    available: bool
    command_count: int = 0


@dataclass(frozen=True)
class LanguageStatus:
    """Current language plus what the repository offers.

    Attributes:
        current: Effective language code
        repository: Languages with commands, most commands first
        common: Common languages with no commands yet
    """
    current: str
    repository: list[LanguageInfo] = field(default_factory=list)
    common: list[LanguageInfo] = field(default_factory=list)


class LanguageResolver:
    """Merges config sources and the environment into one effective language.

    Args:
        user_store: User-level config
        project_store: Project-level config
        environ: Environment mapping (defaults to os.environ)
    """

    def __init__(
        self,
        user_store: ConfigStore,
        project_store: ConfigStore,
        environ: Mapping[str, str] | None = None,
    ):
        self.user_store = user_store
        self.project_store = project_store
        self.environ = environ if environ is not None else os.environ

    def get_effective_language(self, override: str | None = None) -> str:
        """Resolve the language to use for this invocation."""
        candidates = [
            ("override", override),
            ("project config", self._preferred_language(self.project_store)),
            ("user config", self._preferred_language(self.user_store)),
            (LANGUAGE_ENV_VAR, self.environ.get(LANGUAGE_ENV_VAR)),
        ]
        for source, value in candidates:
            if not value:
                continue
            code = sanitize_language_code(value)
            if code:
                logger.debug("Language %s from %s", code, source)
                return code
            logger.debug("Skipping invalid language %r from %s", value, source)

        locale = self._locale()
        if locale:
            try:
                code = parse_locale(locale)
            except ValueError as e:
                logger.debug("Cannot use locale %r: %s", locale, e)
            else:
                logger.debug("Language %s from locale %s", code, locale)
                return code

        return FALLBACK_LANGUAGE

    def get_effective_config(self) -> Config:
        """User config overlaid with project config; missing sources count as empty."""
        user = self.user_store.get_config() or Config()
        return user.merged_with(self.project_store.get_config())

    def get_available_languages(self, counts: Mapping[str, int]) -> list[LanguageInfo]:
        """Common languages plus any others the repository reports, with availability.

        The fallback language is always available.
        """
        codes = list(COMMON_LANGUAGES)
        codes += sorted(code for code in counts if code not in COMMON_LANGUAGES)
        return [
            LanguageInfo(
                code=code,
                name=get_language_name(code),
                available=counts.get(code, 0) > 0 or code == FALLBACK_LANGUAGE,
                command_count=counts.get(code, 0),
            )
            for code in codes
        ]

    def get_language_status(
        self,
        counts: Mapping[str, int],
        override: str | None = None,
    ) -> LanguageStatus:
        repository = sorted(
            (
                LanguageInfo(code, get_language_name(code), True, count)
                for code, count in counts.items()
                if count > 0
            ),
            key=lambda info: (-info.command_count, info.code),
        )
        in_repository = {info.code for info in repository}
        common = [
            LanguageInfo(code, get_language_name(code), False, 0)
            for code in COMMON_LANGUAGES
            if code not in in_repository
        ]
        return LanguageStatus(
            current=self.get_effective_language(override),
            repository=repository,
            common=common,
        )

    def set_language(self, code: str, scope: ConfigScope = ConfigScope.USER) -> str:
        """Persist ``code`` as the preferred language for ``scope``.

        Raises:
            CommandError: VALIDATION if the code is malformed
        """
        sanitized = sanitize_language_code(code)
        if not sanitized:
            raise validation(
                f"Invalid language code: {code}. Expected 2-3 letters (e.g. 'en', 'fr')",
                language=code,
            )
        store = self.project_store if scope is ConfigScope.PROJECT else self.user_store
        store.update(preferred_language=sanitized)
        return sanitized

    def _preferred_language(self, store: ConfigStore) -> str | None:
        config = store.get_config()
        return config.preferred_language if config else None

    def _locale(self) -> str:
        for name in LOCALE_ENV_VARS:
            value = self.environ.get(name)
            if value:
                return value
        return ""
