"""
Receipt Transcriber - Централизованные метаданные проекта

Этот модуль содержит общую информацию о продукте,
которая используется в библиотеке и HTTP сервере.
"""

__product__ = "Receipt Transcriber"
__version__ = "0.1"
__description__ = "Распознавание длинных чеков через Google Vision с нарезкой на полосы"
__license__ = "MIT"
__status__ = "Alpha"
__python_requires__ = ">=3.10"


def get_version_info():
    """Возвращает полную информацию о версии"""
    return f"{__product__} v{__version__} ({__status__})"
