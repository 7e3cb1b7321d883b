from tutorsched.infrastructure.repositories.state_repository import StateRepository
from tutorsched.infrastructure.repositories.write_behind import WriteBehindPersister

__all__ = ["StateRepository", "WriteBehindPersister"]
