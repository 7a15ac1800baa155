"""Languages offered for storybook translation."""

from pydantic import BaseModel, ConfigDict

DEFAULT_LANGUAGE = "en"


class Language(BaseModel):
    """A supported language with its English and native names."""

    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    native_name: str


SUPPORTED_LANGUAGES: list[Language] = [
    Language(code="en", name="English", native_name="English"),
    Language(code="es", name="Spanish", native_name="Español"),
    Language(code="fr", name="French", native_name="Français"),
    Language(code="de", name="German", native_name="Deutsch"),
    Language(code="it", name="Italian", native_name="Italiano"),
    Language(code="pt", name="Portuguese", native_name="Português"),
    Language(code="zh", name="Chinese", native_name="中文"),
    Language(code="ja", name="Japanese", native_name="日本語"),
    Language(code="ko", name="Korean", native_name="한국어"),
    Language(code="ru", name="Russian", native_name="Русский"),
    Language(code="ar", name="Arabic", native_name="العربية"),
    Language(code="hi", name="Hindi", native_name="हिन्दी"),
]


def language_name(code: str) -> str:
    """Return the English name for a language code, or the code itself if unknown."""
    for language in SUPPORTED_LANGUAGES:
        if language.code == code:
            return language.name
    return code
