"""Исключения движка распознавания чеков."""


class ReceiptOCRError(Exception):
    """Базовое исключение для ошибок распознавания чека."""

    pass


class DecodeError(ReceiptOCRError):
    """Байты не являются распознаваемым растровым изображением."""

    pass


class InvalidConfiguration(ReceiptOCRError):
    """Некорректные пороги нарезки или настройки провайдера."""

    pass


class ExtractionError(ReceiptOCRError):
    """Полоса выходит за границы исходного изображения."""

    pass


class ProviderError(ReceiptOCRError):
    """Сервис распознавания текста вернул ошибку."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ProviderConnectionError(ProviderError):
    """Сервис распознавания недоступен."""

    pass


class ProviderTimeoutError(ProviderError):
    """Превышено время ожидания ответа сервиса."""

    pass


class ProviderServerError(ProviderError):
    """Ошибка на стороне сервиса (5xx)."""

    pass
