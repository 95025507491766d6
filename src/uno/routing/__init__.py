"""Exact-path routing with nested group prefixes."""

from uno.routing.router import PrefixStack, build_path, exact_match, trim_path

__all__ = ["PrefixStack", "build_path", "exact_match", "trim_path"]
