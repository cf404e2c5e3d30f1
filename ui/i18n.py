"""Internationalization (i18n) for the Nomad RAG Streamlit client."""

from __future__ import annotations

from typing import Callable

TRANSLATIONS: dict[str, dict[str, str]] = {
    # App-level
    "app_title": {
        "en": "Nomad RAG Chat",
        "ru": "Nomad RAG Чат",
    },
    "app_subtitle": {
        "en": "Claude, Grok and Gemini with a shared knowledge base",
        "ru": "Claude, Grok и Gemini с общей базой знаний",
    },

    # Tabs
    "tab_chat": {
        "en": "Chat",
        "ru": "Чат",
    },
    "tab_knowledge": {
        "en": "Knowledge Base",
        "ru": "База знаний",
    },
    "tab_settings": {
        "en": "Settings & Stats",
        "ru": "Настройки",
    },

    # Sidebar
    "sidebar_provider": {
        "en": "Provider",
        "ru": "Провайдер",
    },
    "sidebar_mode": {
        "en": "Nomad mode (exploratory)",
        "ru": "Режим Nomad (исследовательский)",
    },
    "sidebar_use_rag": {
        "en": "Use knowledge base",
        "ru": "Использовать базу знаний",
    },
    "sidebar_system_prompt": {
        "en": "Extra system instructions",
        "ru": "Дополнительные системные инструкции",
    },
    "sidebar_clear_chat": {
        "en": "Clear conversation",
        "ru": "Очистить диалог",
    },

    # Chat tab
    "chat_input": {
        "en": "Ask something...",
        "ru": "Задайте вопрос...",
    },
    "chat_attachments": {
        "en": "Attach files (images, PDF, Word, TXT)",
        "ru": "Прикрепить файлы (изображения, PDF, Word, TXT)",
    },
    "chat_thinking": {
        "en": "Thinking...",
        "ru": "Думаю...",
    },
    "chat_rag_used": {
        "en": "Knowledge base used (confidence {confidence:.1%})",
        "ru": "Использована база знаний (уверенность {confidence:.1%})",
    },
    "chat_degraded": {
        "en": "Provider did not return a usable answer ({kind})",
        "ru": "Провайдер не вернул пригодный ответ ({kind})",
    },

    # Knowledge tab
    "kb_header": {
        "en": "Upload to Knowledge Base",
        "ru": "Загрузка в базу знаний",
    },
    "kb_upload": {
        "en": "Upload a document (PDF, Word, TXT)",
        "ru": "Загрузите документ (PDF, Word, TXT)",
    },
    "kb_button": {
        "en": "Store document",
        "ru": "Сохранить документ",
    },
    "kb_success": {
        "en": "Document uploaded successfully! {chunks} chunks stored.",
        "ru": "Документ загружен! Сохранено чанков: {chunks}.",
    },
    "kb_search": {
        "en": "Test a query against the knowledge base",
        "ru": "Проверить запрос по базе знаний",
    },
    "kb_result": {
        "en": "{status}: confidence {confidence:.1%}, {count} matches",
        "ru": "{status}: уверенность {confidence:.1%}, совпадений {count}",
    },

    # Settings tab
    "settings_header": {
        "en": "Settings & Statistics",
        "ru": "Настройки и статистика",
    },
    "settings_current": {
        "en": "Current Configuration",
        "ru": "Текущая конфигурация",
    },
    "settings_store_stats": {
        "en": "Vector Store",
        "ru": "Векторное хранилище",
    },
    "settings_total_chunks": {
        "en": "Total chunks: {count}",
        "ru": "Всего чанков: {count}",
    },
    "settings_check_providers": {
        "en": "Test API keys",
        "ru": "Проверить API ключи",
    },
    "settings_clear_db": {
        "en": "Clear Database",
        "ru": "Очистить базу",
    },
    "settings_clear_confirm": {
        "en": "Type DELETE to confirm",
        "ru": "Введите DELETE для подтверждения",
    },
    "settings_clear_button": {
        "en": "Delete all chunks",
        "ru": "Удалить все чанки",
    },
    "settings_cleared": {
        "en": "Deleted {count} chunks",
        "ru": "Удалено {count} чанков",
    },

    # Common
    "error": {
        "en": "Error: {msg}",
        "ru": "Ошибка: {msg}",
    },
}


def get_translator(lang: str = "en") -> Callable[..., str]:
    """Return a translator function t(key, **kwargs) for the given language.

    Usage:
        t = get_translator("ru")
        t("kb_success", chunks=23)
    """

    def t(key: str, **kwargs) -> str:
        entry = TRANSLATIONS.get(key)
        if entry is None:
            return key
        text = entry.get(lang, entry.get("en", key))
        if kwargs:
            try:
                return text.format(**kwargs)
            except (KeyError, IndexError):
                return text
        return text

    return t
