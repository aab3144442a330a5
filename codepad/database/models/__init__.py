from .user import User
from .project import Project
from .file import File

__all__ = ["User", "Project", "File"]
