"""Normalisation of sync and async callables.

Guards, dynamic target resolvers and transition actions may be written as
plain functions or as coroutine functions. They are converted once, when a
representation is built, into a single awaitable callable type so the
evaluator never branches on "is this async?" while resolving a trigger.
"""
from __future__ import annotations

import functools
import inspect
from typing import Any, Awaitable, Callable

AsyncCallable = Callable[..., Awaitable[Any]]


def is_async_callable(fn: Any) -> bool:
    """Return True when calling ``fn`` produces an awaitable.

    Recognises coroutine functions, ``functools.partial`` objects wrapping
    them, and instances whose ``__call__`` is a coroutine function.
    """
    while isinstance(fn, functools.partial):
        fn = fn.func
    if inspect.iscoroutinefunction(fn):
        return True
    call = getattr(fn, "__call__", None)
    return call is not None and inspect.iscoroutinefunction(call)


def as_async(fn: Callable[..., Any]) -> AsyncCallable:
    """Return ``fn`` as a coroutine function.

    Async callables are returned unchanged; sync callables are wrapped so
    the result is returned from a coroutine. A sync callable that hands
    back an awaitable (``lambda: check()`` over a coroutine function) has
    that awaitable awaited.
    """
    if not callable(fn):
        raise TypeError(f"expected a callable, got {type(fn).__name__}")
    if is_async_callable(fn):
        return fn

    async def _call(*args: Any, **kwargs: Any) -> Any:
        result = fn(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result

    # Missing attributes (lambdas, callable instances) are skipped.
    return functools.update_wrapper(_call, fn)


def describe(fn: Any) -> str:
    """Short, stable name for a callable, used in logs and error context."""
    target = inspect.unwrap(fn) if callable(fn) else fn
    name = getattr(target, "__qualname__", None) or getattr(target, "__name__", None)
    return str(name) if name else repr(target)


__all__ = ["AsyncCallable", "is_async_callable", "as_async", "describe"]
