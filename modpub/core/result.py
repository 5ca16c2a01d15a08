"""Ok/Err values for helpers that can fail without being pipeline tasks.

Reading a version file, loading the config or running an external tool all
return a ``Result``. Tasks inspect it and report an ``Err`` through
``Pipeline.fail`` instead of raising:

    match read_assembly_version(paths):
        case Ok(info):
            state.version = info.version
        case Err(error):
            pipeline.fail(error.message)
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Err", "Ok", "Result"]


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T


@dataclass(frozen=True, slots=True)
class Err[E]:
    error: E


type Result[T, E] = Ok[T] | Err[E]
