"""
Classification of requests as secure, i.e. requiring authorization.

Rules are taken from :attr:`.GateConfig.secure_routes` and compiled once, when
the classifier is created. A request is secure if any rule matches both its
path and its method. Classification never fails: a method that no rule knows
about simply does not match.
"""

import re
from typing import Iterable, List, NamedTuple, Optional, Tuple

from .domain import SecureRoute
from .exceptions import ConfigurationError


class CompiledRoute(NamedTuple):
    """A :class:`.SecureRoute` ready for matching."""

    pattern: re.Pattern
    methods: Optional[Tuple[str, ...]]

    def matches(self, path: str, method: str) -> bool:
        if not self.pattern.search(path):
            return False
        return self.methods is None or method in self.methods


def compile_route(route: SecureRoute) -> CompiledRoute:
    """
    Compile a route rule to a regular expression.

    Raises
    ------
    :class:`.ConfigurationError`
        Raised if the route has no path rule, or its pattern is not a valid
        regular expression.

    """
    if route.path is not None:
        expression = '^' + re.escape(route.path) + '$'
    elif route.prefix is not None:
        expression = '^' + re.escape(route.prefix)
    elif route.path_pattern is not None:
        expression = route.path_pattern
    else:
        raise ConfigurationError('Secure route has no path rule')
    try:
        pattern = re.compile(expression)
    except re.error as e:
        raise ConfigurationError(
            f'Invalid route regex {expression}: {e}'
        ) from e
    methods = None
    if route.methods is not None:
        methods = tuple(method.upper() for method in route.methods)
    return CompiledRoute(pattern, methods)


class PathClassifier:
    """Decides whether a request path and method are secure."""

    def __init__(self, routes: Iterable[SecureRoute]) -> None:
        self._routes: List[CompiledRoute] = [compile_route(r) for r in routes]

    def is_secure(self, path: str, method: str) -> bool:
        """Check whether a request needs authorization."""
        method = method.upper()
        return any(route.matches(path, method) for route in self._routes)
