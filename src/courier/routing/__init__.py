"""Routing: routes, middleware, rules, the compiled trie, and versioning.

Routes are registered during setup and compiled into an immutable
lookup structure once, before the first request is matched.
"""
