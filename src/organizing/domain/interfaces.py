"""
Интерфейсы (абстрактные классы) для домена Organizing.

Домен Organizing отвечает за:
1. Восстановление цепочек по ссылкам id -> next_id
2. Сборку полного прогона (поток -> цепочки + отчёты об ошибках)
"""

from abc import ABC, abstractmethod


class IOrganizer(ABC):
    """Интерфейс для онлайн-организатора сообщений (домен Organizing)."""

    @abstractmethod
    def ingest(self, message) -> None:
        """
        Принимает одно декодированное сообщение в порядке поступления.

        Args:
            message: DecodedMessage

        Raises:
            OrganizingError: Фатальное нарушение инварианта цепочек
        """
        pass

    @abstractmethod
    def finalize(self):
        """
        Завершает организацию.

        Returns:
            OrganizeResult: цепочки в порядке первого поступления + незавершённые цепочки
        """
        pass
