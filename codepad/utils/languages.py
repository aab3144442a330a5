# codepad/utils/languages.py
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from codepad.config import get_settings
from codepad.services.exceptions import UnsupportedLanguageError


@dataclass(frozen=True)
class Language:
    tag: str          # 사용자/에디터에서 쓰는 이름 (예: 'python')
    store_id: int     # DB의 files.language_id 값
    backend_id: int   # Judge0 language_id 값
    extension: str


# 언어 추가는 이 테이블만 수정하면 됩니다.
LANGUAGES: Tuple[Language, ...] = (
    Language(tag="javascript", store_id=1, backend_id=63, extension="js"),
    Language(tag="python", store_id=2, backend_id=71, extension="py"),
    Language(tag="cpp", store_id=3, backend_id=54, extension="cpp"),
    Language(tag="java", store_id=4, backend_id=62, extension="java"),
)

FALLBACK_TAG = "javascript"


class LanguageRegistry:
    """
    에디터 언어 태그, DB 언어 ID, Judge0 언어 ID 사이의 양방향 매핑입니다.

    알 수 없는 태그/ID는 오류 대신 기본 언어로 대체됩니다. (레거시 레코드 호환)
    실행 경로처럼 대체가 허용되지 않는 곳에서는 require()를 사용합니다.
    """

    def __init__(self, languages=LANGUAGES, default_tag: str = FALLBACK_TAG):
        self._by_tag: Dict[str, Language] = {lang.tag: lang for lang in languages}
        self._by_store_id: Dict[int, Language] = {lang.store_id: lang for lang in languages}
        if default_tag not in self._by_tag:
            raise ValueError(f"Default language '{default_tag}' is not registered.")
        self.default = self._by_tag[default_tag]

    @staticmethod
    def _clean(tag) -> str:
        return tag.strip().lower() if isinstance(tag, str) else ""

    def find(self, tag) -> Optional[Language]:
        return self._by_tag.get(self._clean(tag))

    def require(self, tag) -> Language:
        """
        태그에 해당하는 언어를 반환합니다. 기본값으로 대체하지 않습니다.

        Raises:
            UnsupportedLanguageError: 등록되지 않은 태그일 때.
        """
        language = self.find(tag)
        if language is None:
            raise UnsupportedLanguageError(f"Language '{tag}' is not supported.")
        return language

    def resolve(self, tag) -> Language:
        return self.find(tag) or self.default

    def normalize_tag(self, tag) -> str:
        return self.resolve(tag).tag

    def to_backend_id(self, tag) -> int:
        return self.resolve(tag).backend_id

    def to_store_id(self, tag) -> int:
        return self.resolve(tag).store_id

    def from_store_id(self, store_id) -> str:
        try:
            return self._by_store_id[int(store_id)].tag
        except (KeyError, TypeError, ValueError):
            return self.default.tag

    def normalize_store_id(self, store_id) -> int:
        return self.to_store_id(self.from_store_id(store_id))

    def file_extension(self, tag) -> str:
        return self.resolve(tag).extension

    def all_languages(self) -> List[Language]:
        return list(self._by_tag.values())


@lru_cache(maxsize=1)
def get_registry() -> LanguageRegistry:
    """설정(CODEPAD_DEFAULT_LANGUAGE)의 기본 언어를 사용하는 공용 레지스트리."""
    return LanguageRegistry(default_tag=get_settings().default_language)


def default_scratchpad_name(tag, registry: LanguageRegistry = None) -> str:
    """에디터가 스크래치패드 저장 시 기본으로 제안하는 파일 이름 (예: scratchpad.py)."""
    registry = registry or get_registry()
    return f"scratchpad.{registry.file_extension(tag)}"
