from typing import Dict, Any

from codepad.repositories.interfaces import IUserRepository
from codepad.services.exceptions import ResourceNotFoundError, ValidationError
from codepad.utils.themes import theme_id_for, theme_name_for


class ProfileService:
    """사용자 프로필 조회와 표시 설정(테마) 변경을 제공합니다."""

    def __init__(self, user_repo: IUserRepository):
        self.user_repo = user_repo

    def _get_user(self, user_id: int):
        user = self.user_repo.find_by_id(user_id)
        if not user:
            raise ResourceNotFoundError("User not found.")
        return user

    @staticmethod
    def _to_dict(user) -> Dict[str, Any]:
        return {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "preferred_theme_id": user.preferred_theme_id,
            "theme": theme_name_for(user.preferred_theme_id),
        }

    def get_profile(self, user_id: int) -> Dict[str, Any]:
        return self._to_dict(self._get_user(user_id))

    def update_theme(self, user_id: int, theme: str) -> Dict[str, Any]:
        """
        Raises:
            ValidationError: 'light' / 'dark' 이외의 테마일 때.
            ResourceNotFoundError: 사용자를 찾을 수 없을 때.
        """
        theme_id = theme_id_for(theme)
        if theme_id is None:
            raise ValidationError(f"Unknown theme '{theme}'.")
        user = self._get_user(user_id)
        return self._to_dict(self.user_repo.update_theme(user, theme_id))
