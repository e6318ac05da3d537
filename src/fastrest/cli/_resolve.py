"""Turn ``"module:attribute"`` strings into App instances.

Used by ``fastrest run`` and ``fastrest routes``.
"""

import importlib

from fastrest.app import App


def resolve_app(import_string: str) -> App:
    """Import *import_string* and return the App it names.

    ``"shop"`` means ``shop:app``. If the attribute is a callable other
    than an App it is called once with no arguments and must return one.

    Raises ``ModuleNotFoundError`` or ``AttributeError`` when the target
    cannot be found and ``TypeError`` when it is not an App (or a factory
    that raised or returned something else).
    """
    module_name, _, attribute = import_string.partition(":")
    target = getattr(importlib.import_module(module_name), attribute or "app")

    if not isinstance(target, App) and callable(target):
        try:
            target = target()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if isinstance(target, App):
        return target
    msg = f"{import_string!r} resolved to {type(target).__name__}, not a fastrest.App instance"
    raise TypeError(msg)
