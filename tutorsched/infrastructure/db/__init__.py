from . import models  # noqa: F401
from .base import Base
from .session import dispose_engine, get_session_factory, init_models

__all__ = ["Base", "dispose_engine", "get_session_factory", "init_models"]
