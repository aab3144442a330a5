import functools
import logging

from sqlalchemy.exc import SQLAlchemyError

from codepad.services.exceptions import StorageError

logger = logging.getLogger(__name__)


def translate_storage_errors(method):
    """
    리포지토리 메서드에서 발생한 SQLAlchemy 오류를 롤백 후 StorageError로 바꿔 던집니다.
    실패한 문장 이후의 변경은 커밋되지 않습니다.
    """
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as e:
            logger.error("Storage failure in %s.%s: %s", type(self).__name__, method.__name__, e)
            self.db.rollback()
            raise StorageError(f"Storage operation '{method.__name__}' failed.") from e
    return wrapper
