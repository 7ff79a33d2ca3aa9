from __future__ import annotations

from typing import Final

SUPPORTED_LANGUAGES: Final[set[str]] = {"en", "pt"}

MESSAGES: Final[dict[str, dict[str, str]]] = {
    "en": {
        "unknown_command": "Nothing happened. Unknown command. Use /help to see all commands.",
        "select_subject": "Select a subject first: /pick <subject>",
        "lang_show": "Current language: {code}. Supported: en, pt.\nUse /lang en or /lang pt.",
        "lang_set": "Language set to {code}.",
        "lang_usage": "Usage: /lang <en|pt>",
        "restore_ok": "Data restored.",
        "restore_failed": "Could not restore this file. Check that it is a valid backup.",
        "reset_confirm": "This deletes ALL subjects, sessions and statistics. Are you sure?",
        "reset_done": "All data cleared.",
    },
    "pt": {
        "unknown_command": "Nada aconteceu. Comando desconhecido. Use /help para ver os comandos.",
        "select_subject": "Selecione uma matéria primeiro: /pick <matéria>",
        "lang_show": "Idioma atual: {code}. Suportados: en, pt.\nUse /lang en ou /lang pt.",
        "lang_set": "Idioma alterado para {code}.",
        "lang_usage": "Uso: /lang <en|pt>",
        "restore_ok": "Dados restaurados com sucesso!",
        "restore_failed": "Erro ao restaurar arquivo. Verifique se é um backup válido.",
        "reset_confirm": "Isso apagará TODAS as suas matérias, sessões e estatísticas. Tem certeza?",
        "reset_done": "Todos os dados foram apagados.",
    },
}


def normalize_language_code(raw: str | None, default: str = "en") -> str:
    value = (raw or "").strip().lower()
    if value.startswith("pt"):
        return "pt"
    if value.startswith("en"):
        return "en"
    return default if default in SUPPORTED_LANGUAGES else "en"


def t(key: str, lang: str = "en", **kwargs: object) -> str:
    code = normalize_language_code(lang, default="en")
    template = MESSAGES.get(code, {}).get(key) or MESSAGES["en"].get(key) or key
    try:
        return template.format(**kwargs)
    except (KeyError, IndexError, ValueError):
        return template


def localize(lang: str, en: str, pt: str | None = None, **kwargs: object) -> str:
    code = normalize_language_code(lang, default="en")
    template = pt if code == "pt" and pt is not None else en
    try:
        return template.format(**kwargs)
    except (KeyError, IndexError, ValueError):
        return template
