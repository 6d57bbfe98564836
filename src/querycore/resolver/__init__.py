"""Field resolution: dispatcher, deferred fetch descriptors and batch collector."""

from .batch import BatchCollector
from .deferred import (
    CountFetch,
    DeferredFetch,
    GroupKey,
    Resolution,
    ResolvedValue,
    ScalarListFetch,
    ToManyFetch,
    ToOneFetch,
)
from .dispatcher import FieldResolutionDispatcher

__all__ = (
    "BatchCollector",
    "FieldResolutionDispatcher",
    "ResolvedValue",
    "ScalarListFetch",
    "ToOneFetch",
    "ToManyFetch",
    "CountFetch",
    "DeferredFetch",
    "GroupKey",
    "Resolution",
)
