from .user import IUserRepository
from .project import IProjectRepository
from .file import IFileRepository

__all__ = ["IUserRepository", "IProjectRepository", "IFileRepository"]
