from .messenger import Messenger

__all__ = ["Messenger"]
