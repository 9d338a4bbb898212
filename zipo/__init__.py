"""Zipo events, todo-collaboration and link-shortening backend."""
