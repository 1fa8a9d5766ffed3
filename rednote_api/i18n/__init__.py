import functools
import json
import logging
import os
from typing import Any, Callable, Dict, Optional
from rednote_api.config.settings import config
from rednote_api.utils.locale import get_locale

logger = logging.getLogger(__name__)

LOCALES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "locales")

class I18n:
    """User-facing messages keyed by dotted path ("error.invalid_url")"""
    
    def __init__(self, locales_dir: str = LOCALES_DIR):
        self.locales: Dict[str, Dict[str, Any]] = {}
        self.default_locale = config.i18n.default_locale
        self.load_locales(locales_dir)
    
    def load_locales(self, locales_dir: str):
        if not os.path.isdir(locales_dir):
            logger.warning(f"Locales directory not found at {locales_dir}")
            return

        for filename in sorted(os.listdir(locales_dir)):
            if not filename.endswith(".json"):
                continue
            locale_code = filename[:-5]
            try:
                with open(os.path.join(locales_dir, filename), "r", encoding="utf-8") as f:
                    self.locales[locale_code] = json.load(f)
            except (OSError, ValueError) as e:
                logger.error(f"Error loading locale {locale_code}: {e}")

    def _lookup(self, locale: str, key: str) -> Optional[str]:
        value: Any = self.locales.get(locale)
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return None
            value = value[part]
        return value if isinstance(value, str) else None

    def get(self, key: str, locale: Optional[str] = None, **kwargs) -> str:
        """Message for key in locale, then default locale, then English; else the key itself"""
        for candidate in (locale, self.default_locale, "en"):
            if not candidate:
                continue
            template = self._lookup(candidate, key)
            if template is not None:
                try:
                    return template.format(**kwargs)
                except (KeyError, IndexError):
                    return template
        return key

i18n = I18n()

def translator(accept_language: Optional[str]) -> Callable[..., str]:
    """i18n.get bound to the best supported locale of an Accept-Language header"""
    return functools.partial(i18n.get, locale=get_locale(accept_language))
