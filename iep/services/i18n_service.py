"""Internationalization service for translations."""

import json
from functools import lru_cache
from pathlib import Path

from iep.config import settings


class I18nService:
    """Service for handling translations.

    Translation files live in ``iep/translations/<lang>/messages.json``.
    """

    def __init__(self, translations_dir: Path | None = None):
        self.translations_dir = translations_dir or Path(__file__).resolve().parent.parent / "translations"
        self.translations: dict[str, dict] = {}
        self._load_translations()

    def _load_translations(self) -> None:
        for lang in settings.supported_languages_list:
            lang_file = self.translations_dir / lang / "messages.json"
            if lang_file.exists():
                with open(lang_file, encoding="utf-8") as f:
                    self.translations[lang] = json.load(f)
            else:
                self.translations[lang] = {}

    def t(self, key: str, lang: str | None = None, **kwargs) -> str:
        """Translate a dot-notation key.

        Args:
            key: Dot-notation key (e.g., 'client_errors.TIMEOUT_ERROR')
            lang: Language code; the default language when omitted
            **kwargs: Variables to interpolate (e.g., timeout_ms=10000)

        Returns:
            Translated string, or the key if translation not found
        """
        lang = lang or settings.default_language
        value = self._get_translation(key, lang)
        if value is None and lang != settings.default_language:
            value = self._get_translation(key, settings.default_language)
        if value is None:
            return key

        for param_key, param_value in kwargs.items():
            value = value.replace(f"{{{{{param_key}}}}}", str(param_value))
        return value

    def _get_translation(self, key: str, lang: str) -> str | None:
        value = self.translations.get(lang, {})
        for k in key.split("."):
            if not isinstance(value, dict):
                return None
            value = value.get(k)
            if value is None:
                return None
        return value if isinstance(value, str) else None

    def get_all_translations(self, lang: str) -> dict:
        """Get all translations for a language."""
        return self.translations.get(lang, self.translations.get(settings.default_language, {}))


@lru_cache
def get_i18n_service() -> I18nService:
    """Get cached i18n service instance."""
    return I18nService()
