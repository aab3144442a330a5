from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class Buffer:
    """
    에디터의 편집 단위입니다. 변경은 항상 새 Buffer를 반환합니다.

    file_id가 없으면 스크래치패드(unattached) 버퍼이며, 저장 시 프로모션 과정을 거칩니다.
    file_id가 있으면(attached) 저장은 해당 파일을 그 자리에서 수정합니다.
    연결된 버퍼의 content/language가 None이면 저장 시 해당 필드는 바꾸지 않습니다.
    """
    content: Optional[str] = ""
    language: Optional[str] = "javascript"
    file_id: Optional[int] = None
    project_id: Optional[int] = None
    file_name: Optional[str] = None

    @property
    def is_attached(self) -> bool:
        return self.file_id is not None

    def attach(self, project_id: int, file_id: int, file_name: Optional[str] = None) -> "Buffer":
        return replace(self, project_id=project_id, file_id=file_id, file_name=file_name or self.file_name)

    def detach(self) -> "Buffer":
        return replace(self, project_id=None, file_id=None, file_name=None)

    def update_content(self, content: str) -> "Buffer":
        return replace(self, content=content)

    def with_language(self, language: str) -> "Buffer":
        return replace(self, language=language)
