from groupsplit.handlers.basic import basic_router, on_group_error
from groupsplit.handlers.expenses import expenses_router
from groupsplit.handlers.groups import groups_router
from groupsplit.handlers.inline import inline_router

__all__ = ["basic_router", "expenses_router", "groups_router", "inline_router", "on_group_error"]
