"""
Bilingual (English/Arabic) text handling.

Content is stored as explicit pairs (``name`` / ``name_ar``). At response time a
pair is wrapped in LocalizedText and resolved for the caller's locale:

    >>> LocalizedText("Oil change", "تغيير الزيت").resolve("ar")
    'تغيير الزيت'
    >>> LocalizedText("Oil change", "").resolve("ar")
    'Oil change'

The special locale ``all`` returns both variants for back-office editing.
"""

from typing import Any, Optional, Union

from fastapi import Query, Request

DEFAULT_LOCALE = "en"
ARABIC = "ar"
ALL_LOCALES = "all"
RTL_LANGUAGES = ("ar", "he", "fa", "ur", "ku", "dv")


class LocalizedText:
    """A piece of text with a default (English) and an optional Arabic variant"""

    __slots__ = ("default", "ar")

    def __init__(self, default: Optional[str], ar: Optional[str] = None):
        self.default = default
        self.ar = ar

    @classmethod
    def from_model(cls, obj: Any, attr: str) -> "LocalizedText":
        """Build from a model's ``attr`` / ``attr_ar`` column pair"""
        return cls(getattr(obj, attr), getattr(obj, f"{attr}_ar", None))

    @classmethod
    def from_dict(cls, data: Optional[dict], key: str) -> "LocalizedText":
        """Build from a JSON sub-document's ``key`` / ``keyAr`` pair"""
        data = data or {}
        return cls(data.get(key), data.get(f"{key}Ar"))

    def resolve(self, locale: str) -> Union[str, dict, None]:
        if locale == ALL_LOCALES:
            return {"default": self.default, "ar": self.ar}
        if locale == ARABIC and self.ar:
            return self.ar
        return self.default

    def __eq__(self, other):
        if not isinstance(other, LocalizedText):
            return NotImplemented
        return (self.default, self.ar) == (other.default, other.ar)

    def __repr__(self):
        return f"LocalizedText(default={self.default!r}, ar={self.ar!r})"


def localize(obj: Any, attr: str, locale: str):
    return LocalizedText.from_model(obj, attr).resolve(locale)


def localize_entry(data: Optional[dict], key: str, locale: str):
    return LocalizedText.from_dict(data, key).resolve(locale)


def parse_locale(lang: Optional[str], accept_language: Optional[str]) -> str:
    """``?lang=`` wins, then the first Accept-Language tag, then English"""
    raw = lang or ""
    if not raw and accept_language:
        raw = accept_language.split(",")[0].split(";")[0]
    code = raw.strip().split("-")[0].split("_")[0].lower()
    return code or DEFAULT_LOCALE


async def get_locale(
    request: Request,
    lang: Optional[str] = Query(None, description="Response language: en, ar or all"),
) -> str:
    locale = parse_locale(lang, request.headers.get("accept-language"))
    request.state.locale = locale
    return locale


def language_meta(locale: str) -> dict:
    is_rtl = locale in RTL_LANGUAGES
    return {"code": locale, "direction": "rtl" if is_rtl else "ltr", "isRTL": is_rtl}
