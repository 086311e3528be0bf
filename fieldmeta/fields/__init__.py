from .field import Field, Group

__all__ = ["Field", "Group"]
