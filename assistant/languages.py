"""
assistant/languages.py

Closed catalog of supported reply languages.
Unknown or missing codes resolve to English everywhere (prompts and the
/api/chatbot/languages listing the client renders from).
"""

DEFAULT_LANGUAGE = "en"

LANGUAGES: dict[str, str] = {
    "en": "English",
    "es": "Spanish (Español)",
    "fr": "French (Français)",
    "de": "German (Deutsch)",
    "it": "Italian (Italiano)",
    "pt": "Portuguese (Português)",
    "nl": "Dutch (Nederlands)",
    "ja": "Japanese (日本語)",
    "zh": "Chinese (中文)",
    "ko": "Korean (한국어)",
    "ru": "Russian (Русский)",
    "ar": "Arabic (العربية)",
    "sv": "Swedish (Svenska)",
    "no": "Norwegian (Norsk)",
    "da": "Danish (Dansk)",
    "fi": "Finnish (Suomi)",
    "pl": "Polish (Polski)",
    "el": "Greek (Ελληνικά)",
    "cs": "Czech (Čeština)",
    "hu": "Hungarian (Magyar)",
    "ro": "Romanian (Română)",
    "tr": "Turkish (Türkçe)",
    "hi": "Hindi (हिन्दी)",
    "th": "Thai (ไทย)",
    "vi": "Vietnamese (Tiếng Việt)",
    "id": "Indonesian (Bahasa Indonesia)",
    "ms": "Malay (Bahasa Melayu)",
    "tl": "Tagalog (Filipino)",
    "he": "Hebrew (עברית)",
    "uk": "Ukrainian (Українська)",
    "fa": "Persian (فارسی)",
    "bn": "Bengali (বাংলা)",
    "sw": "Swahili (Kiswahili)",
    "ur": "Urdu (اردو)",
}


def normalize_language(code):
    """Return a catalog code for `code`, falling back to English."""
    low = (code or "").strip().lower()
    return low if low in LANGUAGES else DEFAULT_LANGUAGE


def language_name(code):
    """Display name used in prompts; unknown codes get English."""
    return LANGUAGES[normalize_language(code)]
