"""
asyncstate - awaitable transition resolution for finite state machines

Decides whether a trigger may fire from the current state, where it leads,
and whether the attached action has the expected shape. Guards and dynamic
target resolvers may be plain callables or coroutine functions.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
