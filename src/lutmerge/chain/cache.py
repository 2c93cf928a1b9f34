from __future__ import annotations

import logging
from typing import Callable, Protocol

import numpy as np

from lutmerge.lut.sampler import trilinear
from lutmerge.lut.types import LutDocument


logger = logging.getLogger(__name__)


class SamplingResource(Protocol):
    def sample(self, rgb: np.ndarray) -> np.ndarray:
        ...

    def dispose(self) -> None:
        ...


class GridResource:
    """CPU sampling resource: the document's RGB grid prepared once."""

    def __init__(self, document: LutDocument) -> None:
        self.size = document.size
        self.domain_min = document.domain_min
        self.domain_max = document.domain_max
        self._grid: np.ndarray | None = document.rgb_grid()

    @property
    def disposed(self) -> bool:
        return self._grid is None

    def sample(self, rgb: np.ndarray) -> np.ndarray:
        if self._grid is None:
            raise RuntimeError("sampling resource has been disposed")
        return trilinear(self._grid, self.size, self.domain_min, self.domain_max, rgb)

    def dispose(self) -> None:
        self._grid = None


ResourceFactory = Callable[[LutDocument], SamplingResource]


class LutCache:
    """LUT id -> sampling resource. Entries live until ``dispose`` is called.

    Single owner; callers sharing a cache across threads must serialise
    ``get_or_create`` and ``dispose``.
    """

    def __init__(self, factory: ResourceFactory = GridResource) -> None:
        self._factory = factory
        self._resources: dict[str, SamplingResource] = {}

    def __contains__(self, lut_id: object) -> bool:
        return lut_id in self._resources

    def __len__(self) -> int:
        return len(self._resources)

    def get_or_create(self, lut_id: str, document: LutDocument) -> SamplingResource:
        resource = self._resources.get(lut_id)
        if resource is None:
            resource = self._factory(document)
            self._resources[lut_id] = resource
            logger.debug("created sampling resource for lut=%s size=%d", lut_id, document.size)
        return resource

    def dispose(self, lut_id: str) -> None:
        resource = self._resources.pop(lut_id, None)
        if resource is None:
            return
        resource.dispose()
        logger.debug("disposed sampling resource for lut=%s", lut_id)

    def dispose_all(self) -> None:
        for lut_id in list(self._resources):
            self.dispose(lut_id)
