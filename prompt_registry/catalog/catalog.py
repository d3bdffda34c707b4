# prompt_registry/catalog/catalog.py
from __future__ import annotations

from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

from ..errors import NotFound
from ..schemas import BlockDefinition, Composition

LIBRARY_CONTEXT_PREFIX = "library-context-"


def library_context_slug(library_id: str) -> str:
    return f"{LIBRARY_CONTEXT_PREFIX}{library_id}"


class BlockCatalog:
    """Read-only set of default blocks, compositions and library contexts.

    Built once per deployment and handed to the registry; tests build their
    own with synthetic blocks.
    """

    def __init__(
        self,
        blocks: Iterable[BlockDefinition],
        compositions: Iterable[Composition] = (),
        library_contexts: Optional[Mapping[str, str]] = None,
        library_ids: Optional[Iterable[str]] = None,
    ):
        self._blocks: Tuple[BlockDefinition, ...] = tuple(blocks)
        self._compositions: Tuple[Composition, ...] = tuple(compositions)

        by_id: dict[str, BlockDefinition] = {}
        for block in self._blocks:
            if block.id in by_id:
                raise ValueError(f"Duplicate block id in catalog: {block.id}")
            by_id[block.id] = block
        self._blocks_by_id = MappingProxyType(by_id)

        comp_by_id: dict[str, Composition] = {}
        for comp in self._compositions:
            if comp.id in comp_by_id:
                raise ValueError(f"Duplicate composition id in catalog: {comp.id}")
            comp_by_id[comp.id] = comp
        self._compositions_by_id = MappingProxyType(comp_by_id)

        contexts = dict(library_contexts or {})
        self._library_contexts = MappingProxyType(contexts)
        ids = list(library_ids) if library_ids is not None else list(contexts)
        # keep configured order, drop repeats
        self._library_ids: Tuple[str, ...] = tuple(dict.fromkeys(ids))

        for lib_id in self._library_ids:
            if library_context_slug(lib_id) in self._blocks_by_id:
                raise ValueError(f"Block id collides with library context: {library_context_slug(lib_id)}")

    # ---------- blocks ----------
    @property
    def blocks(self) -> Tuple[BlockDefinition, ...]:
        return self._blocks

    def get_block(self, block_id: str) -> Optional[BlockDefinition]:
        return self._blocks_by_id.get(block_id)

    def has_block(self, block_id: str) -> bool:
        return block_id in self._blocks_by_id

    # ---------- compositions ----------
    @property
    def compositions(self) -> Tuple[Composition, ...]:
        return self._compositions

    def find_composition(self, composition_id: str) -> Optional[Composition]:
        return self._compositions_by_id.get(composition_id)

    def get_composition(self, composition_id: str) -> Composition:
        comp = self._compositions_by_id.get(composition_id)
        if comp is None:
            available = ", ".join(self._compositions_by_id) or "(none)"
            raise NotFound(f'Unknown composition: "{composition_id}". Available: {available}')
        return comp

    # ---------- library contexts ----------
    @property
    def library_ids(self) -> Tuple[str, ...]:
        return self._library_ids

    def library_context_default(self, library_id: str) -> str:
        return self._library_contexts.get(library_id, "")

    def library_id_for_slug(self, slug: str) -> Optional[str]:
        """Return the library id if ``slug`` names a configured library context."""
        if not slug.startswith(LIBRARY_CONTEXT_PREFIX):
            return None
        lib_id = slug[len(LIBRARY_CONTEXT_PREFIX):]
        return lib_id if lib_id in self._library_ids else None

    def is_reserved(self, slug: str) -> bool:
        return self.has_block(slug) or self.library_id_for_slug(slug) is not None


@lru_cache(maxsize=1)
def default_catalog() -> BlockCatalog:
    from ..settings.config import settings
    from .blocks import CORE_BLOCKS
    from .compositions import DEFAULT_COMPOSITIONS
    from .library_context import LIBRARY_CONTEXT

    return BlockCatalog(
        blocks=CORE_BLOCKS,
        compositions=DEFAULT_COMPOSITIONS,
        library_contexts=LIBRARY_CONTEXT,
        library_ids=settings.LIBRARY_IDS,
    )
