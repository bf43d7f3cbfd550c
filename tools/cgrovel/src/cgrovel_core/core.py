from __future__ import annotations

from ._core_base import *  # noqa: F401,F403
from ._core_reader import *  # noqa: F401,F403
from ._core_context import *  # noqa: F401,F403
from ._core_registry import *  # noqa: F401,F403
from ._core_build import *  # noqa: F401,F403
from ._core_rules import *  # noqa: F401,F403
from ._core_probe import *  # noqa: F401,F403
from ._core_wrapper import *  # noqa: F401,F403
from ._core_emit import *  # noqa: F401,F403
from ._core_orchestration import *  # noqa: F401,F403
