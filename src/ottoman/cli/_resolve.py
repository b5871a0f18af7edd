"""Resolve ``"module:attribute"`` import strings to an ottoman App."""

import importlib

from ottoman.app import App
from ottoman.dispatch import Ottoman


def resolve_app(import_string: str) -> App:
    """Resolve an import string to an ``App``.

    The attribute defaults to ``app``. An ``Ottoman`` instance is wrapped
    in an ``App``; any other callable is treated as a factory and called.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the result is not an App or Ottoman instance.
    """
    module_path, _, attr_name = import_string.partition(":")
    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name or "app")

    if callable(obj) and not isinstance(obj, (App, Ottoman)):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if isinstance(obj, Ottoman):
        return App(obj)
    if not isinstance(obj, App):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not an ottoman App"
        raise TypeError(msg)
    return obj
