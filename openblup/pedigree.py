"""Lightweight pedigree with topological sorting."""

from __future__ import annotations

from collections import defaultdict, deque
from dataclasses import dataclass, field


def is_unknown(parent: str) -> bool:
    """True if a parent code means "unknown": "0", "" or "NA" (any case)."""
    return parent == "0" or parent == "" or parent.lower() == "na"


@dataclass(frozen=True)
class SortedPedigree:
    """Animals ordered parents-before-offspring, with parent positions."""

    ids: list[str]
    sire_idx: list[int | None]
    dam_idx: list[int | None]

    def __len__(self) -> int:
        return len(self.ids)


@dataclass
class Pedigree:
    """Collection of (animal, sire, dam) records."""

    animals: list[tuple[str, str, str]] = field(default_factory=list)

    def add_animal(self, animal: str, sire: str, dam: str) -> None:
        """Record an animal and its parents; unknown parents use "0", "" or "NA"."""
        self.animals.append((animal, sire, dam))

    def sort(self) -> SortedPedigree:
        """Order animals so that parents precede their offspring.

        Parents not listed as animals are treated as unknown. Animals caught
        in a cycle never become ready and are left out.
        """
        all_ids = {animal for animal, _, _ in self.animals}
        children: dict[str, list[str]] = defaultdict(list)
        in_degree: dict[str, int] = {}

        for animal, sire, dam in self.animals:
            degree = 0
            for parent in (sire, dam):
                if not is_unknown(parent) and parent in all_ids:
                    children[parent].append(animal)
                    degree += 1
            in_degree[animal] = degree

        queue = deque(
            animal for animal, _, _ in self.animals if in_degree.get(animal, 0) == 0
        )

        ids: list[str] = []
        while queue:
            animal = queue.popleft()
            ids.append(animal)
            for child in children.get(animal, ()):
                in_degree[child] -= 1
                if in_degree[child] == 0:
                    queue.append(child)

        position = {animal: i for i, animal in enumerate(ids)}
        parents = {animal: (sire, dam) for animal, sire, dam in self.animals}

        def locate(parent: str) -> int | None:
            return None if is_unknown(parent) else position.get(parent)

        sire_idx: list[int | None] = []
        dam_idx: list[int | None] = []
        for animal in ids:
            sire, dam = parents[animal]
            sire_idx.append(locate(sire))
            dam_idx.append(locate(dam))

        return SortedPedigree(ids=ids, sire_idx=sire_idx, dam_idx=dam_idx)