from app.models.entity import Entity

__all__ = ["Entity"]
