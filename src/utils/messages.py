"""
Localized message catalogs for validation and error responses
"""

from typing import Dict, Optional

from config.settings import APP_LOCALE

MESSAGES: Dict[str, Dict[str, str]] = {
    "ru": {
        "validation_error": "Ошибка валидации",
        "malformed_request": "Некорректный JSON запрос",
        "database_error": "Ошибка базы данных",
        "user_not_found": "Пользователь с id {id} не найден",
        "not_found": "Ресурс не найден",
        "internal_error": "Внутренняя ошибка сервера",
        "size": "размер должен находиться в диапазоне от {min} до {max}",
        "not_null": "не должно равняться null",
        "past": "должно содержать прошедшую дату",
        "email": "должно иметь формат адреса электронной почты",
        "email_taken": "адрес электронной почты уже используется",
        "invalid_date": "дата должна быть в формате ГГГГ-ММ-ДД",
        "invalid_type": "недопустимый тип значения",
        "invalid_sort": "Неизвестное свойство сортировки: {field}",
        "body_not_object": "Тело запроса должно быть JSON-объектом, получено: {kind}",
    },
    "en": {
        "validation_error": "Validation error",
        "malformed_request": "Malformed JSON request",
        "database_error": "Database error",
        "user_not_found": "User with id {id} not found",
        "not_found": "Resource not found",
        "internal_error": "Internal server error",
        "size": "size must be between {min} and {max}",
        "not_null": "must not be null",
        "past": "must be a past date",
        "email": "must be a well-formed email address",
        "email_taken": "email address is already in use",
        "invalid_date": "date must be in YYYY-MM-DD format",
        "invalid_type": "invalid value type",
        "invalid_sort": "Unknown sort property: {field}",
        "body_not_object": "Request body must be a JSON object, got: {kind}",
    },
}


def get_message(key: str, locale: Optional[str] = None, **params) -> str:
    """Look up a message for the configured locale and format it with params"""
    catalog = MESSAGES[locale or APP_LOCALE]
    return catalog[key].format(**params)
