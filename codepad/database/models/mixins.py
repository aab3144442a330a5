from datetime import datetime, timedelta

from sqlalchemy import Column, DateTime

_ONE_TICK = timedelta(microseconds=1)


def next_timestamp(previous=None) -> datetime:
    """
    현재 시각을 반환하되, 이전 값보다 반드시 커지도록 보정합니다.
    시계 해상도가 낮거나 같은 순간에 두 번 수정되어도 updated_at은 항상 증가합니다.
    """
    now = datetime.now()
    if previous is not None and now <= previous:
        return previous + _ONE_TICK
    return now


class TimestampMixin:
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now)

    def touch(self):
        self.updated_at = next_timestamp(self.updated_at)
