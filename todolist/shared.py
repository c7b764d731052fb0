"""Strings shared by the API service and the client view."""

APP_NAME = "Todo List"


# PUBLIC_INTERFACE
def get_greeting() -> str:
    """Greeting shown in the client header and reported by GET /info."""
    return f"Welcome to {APP_NAME}! Stay organized, one task at a time."
