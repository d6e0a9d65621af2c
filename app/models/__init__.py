from app.models.base import Base
from app.models.place import Place
from app.models.post import Post

__all__ = ["Base", "Place", "Post"]
