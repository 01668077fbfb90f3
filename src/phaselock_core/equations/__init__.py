"""Circular-statistics primitives for :mod:`phaselock_core`."""

from . import angles as _angles
from . import coherence as _coherence
from . import correction as _correction
from . import drift as _drift
from . import health as _health
from . import interfaces as _interfaces
from . import redistribution as _redistribution

from .angles import *  # noqa: F401,F403
from .coherence import *  # noqa: F401,F403
from .correction import *  # noqa: F401,F403
from .drift import *  # noqa: F401,F403
from .health import *  # noqa: F401,F403
from .interfaces import *  # noqa: F401,F403
from .redistribution import *  # noqa: F401,F403


def _exported(module: object) -> list[str]:
    names = getattr(module, "__all__", None)
    if names is not None:
        return list(names)
    return [name for name in vars(module) if not name.startswith("_")]


__all__ = [
    *_exported(_angles),
    *_exported(_coherence),
    *_exported(_correction),
    *_exported(_drift),
    *_exported(_health),
    *_exported(_interfaces),
    *_exported(_redistribution),
]

__all__ = list(dict.fromkeys(__all__))

del _angles
del _coherence
del _correction
del _drift
del _health
del _interfaces
del _redistribution
