"""
Provider registry: maps a stable provider id to its pinned model version.

Built once at startup and injected into the pipeline. The table is
read-only after construction, so concurrent requests can share it.
"""

import logging
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional

from deepguard.core.errors import UnknownProviderError
from deepguard.schemas.detection import ProviderDescriptor

logger = logging.getLogger(__name__)

FAKE_IMAGE_DETECTION = "bcmi/fake-image-detection"
DEEPFAKE_DETECTION = "wzhouwzhou/deepfake-detection"

MODEL_VERSIONS: Mapping[str, str] = MappingProxyType({
    FAKE_IMAGE_DETECTION: "9b9c0080071a648fdf41d3bb5242579f3975889265f4d36af5628c8c60a1f347",
    DEEPFAKE_DETECTION: "b471be898a2a6b4a67635a252743ac194d56aaaf14e5c21456818f6c9a351c93",
})


class ProviderRegistry:
    def __init__(self, descriptors: Iterable[ProviderDescriptor], default_id: str):
        table = {}
        for descriptor in descriptors:
            if descriptor.id in table:
                raise ValueError(f"Duplicate provider id: {descriptor.id}")
            table[descriptor.id] = descriptor
        if default_id not in table:
            raise ValueError(f"Default provider {default_id!r} is not registered")

        self._table: Mapping[str, ProviderDescriptor] = MappingProxyType(table)
        self.default_id = default_id

    @classmethod
    def from_versions(cls, versions: Mapping[str, str], default_id: str) -> "ProviderRegistry":
        return cls(
            (ProviderDescriptor(id=pid, version_token=token) for pid, token in versions.items()),
            default_id=default_id,
        )

    def resolve(self, provider_id: Optional[str] = None) -> ProviderDescriptor:
        """
        Returns the descriptor for `provider_id`, or the default when it is empty.
        Raises UnknownProviderError for any other unregistered id.
        """
        if not provider_id:
            return self._table[self.default_id]

        descriptor = self._table.get(provider_id) if isinstance(provider_id, str) else None
        if descriptor is None:
            logger.info(f"[REGISTRY] Rejected unknown provider: {provider_id}")
            raise UnknownProviderError(provider_id, self.ids())
        return descriptor

    def ids(self) -> List[str]:
        return list(self._table)

    def descriptors(self) -> List[ProviderDescriptor]:
        return list(self._table.values())

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._table

    def __len__(self) -> int:
        return len(self._table)


def build_default_registry(default_id: str = FAKE_IMAGE_DETECTION) -> ProviderRegistry:
    return ProviderRegistry.from_versions(MODEL_VERSIONS, default_id=default_id)
