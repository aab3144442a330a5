from abc import ABC, abstractmethod
from typing import Optional
from codepad.database import models

class IUserRepository(ABC):
    @abstractmethod
    def find_by_id(self, user_id: int) -> Optional[models.User]:
        """고유 ID로 특정 사용자를 조회합니다."""
        pass

    @abstractmethod
    def update_theme(self, user: models.User, theme_id: int) -> models.User:
        """사용자의 선호 테마를 변경합니다."""
        pass
