"""
Настройки проекта Pipelines Demux.

Все значения можно переопределить через переменные окружения PIPELINES_*.
"""

import os
from pathlib import Path

# =============================================================================
# ПУТИ ПРОЕКТА
# =============================================================================
PROJECT_ROOT = Path(__file__).parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"

# YAML с регистрацией body-парсеров (тег -> парсер + алиасы)
BODY_PARSERS_CONFIG = Path(
    os.getenv("PIPELINES_BODY_PARSERS_CONFIG", str(CONFIG_DIR / "body_parsers.yaml"))
)

# =============================================================================
# ГРАММАТИКА ЗАПИСИ
# =============================================================================
# next_id с этим значением означает "нет следующего сообщения"
TERMINAL_NEXT_ID = int(os.getenv("PIPELINES_TERMINAL_NEXT_ID", "0"))

# Скобки тела записи: <id> <tag> [<body>] <next_id>
BODY_OPEN = "["
BODY_CLOSE = "]"

# =============================================================================
# ОБРАБОТКА ОШИБОК
# =============================================================================
# abort-on-first-error | skip-and-continue
DEFAULT_ERROR_POLICY = os.getenv("PIPELINES_ERROR_POLICY", "skip-and-continue")

# =============================================================================
# ЛОГИРОВАНИЕ
# =============================================================================
LOG_LEVEL = os.getenv("PIPELINES_LOG_LEVEL", "WARNING")
LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | <level>{message}</level>"
)


# =============================================================================
# ПРОВЕРКА КОНФИГУРАЦИИ
# =============================================================================
def validate_config():
    """Проверяет корректность конфигурации."""
    errors = []

    if TERMINAL_NEXT_ID < 0:
        errors.append(
            f"PIPELINES_TERMINAL_NEXT_ID должен быть неотрицательным, получено: {TERMINAL_NEXT_ID}"
        )

    if DEFAULT_ERROR_POLICY not in ("abort-on-first-error", "skip-and-continue"):
        errors.append(
            f"Неизвестная политика ошибок: {DEFAULT_ERROR_POLICY}\n"
            "Допустимые значения: abort-on-first-error, skip-and-continue"
        )

    if not BODY_PARSERS_CONFIG.exists():
        errors.append(f"Файл конфигурации body-парсеров не найден: {BODY_PARSERS_CONFIG}")

    if errors:
        raise ValueError("\n".join(errors))

    return True
