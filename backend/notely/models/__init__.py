# Importing this package registers every model with Base.metadata
from notely.models.user import User
from notely.models.note import Note

__all__ = ["User", "Note"]
