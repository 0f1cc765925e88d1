from collections.abc import Awaitable
from typing import Any, Callable

from castrelay.protocols import Transport

# Type definitions
HandlerCallableType = Callable[[Transport, Any], Awaitable[Any]]
