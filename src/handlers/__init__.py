# Reexport all handlers

from .list import handle_list_items
from .users import handle_user_operation

__all__ = [
    "handle_list_items",
    "handle_user_operation",
]
