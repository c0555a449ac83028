"""Data classes for family graph entities."""

from dataclasses import dataclass, field


class PersonNotFoundError(LookupError):
    """A root or anchor identifier does not resolve in the graph."""

    def __init__(self, person_id: str):
        super().__init__(f"Person ID {person_id} not found in graph")
        self.person_id = person_id


@dataclass(frozen=True)
class Person:
    id: str
    name: str
    given_name: str | None = None
    surname: str | None = None
    sex: str | None = None
    birth_date: str | None = None  # verbatim source string
    death_date: str | None = None  # verbatim source string
    father_id: str | None = None
    mother_id: str | None = None
    spouse_ids: tuple[str, ...] = ()
    child_ids: tuple[str, ...] = ()
    collection: str | None = None


@dataclass(frozen=True)
class FamilyEdge:
    from_id: str
    to_id: str
    kind: str  # parent, spouse


@dataclass
class FamilyTree:
    """
    A read-only snapshot of people reachable from (or included with) a root.

    References that do not resolve in `nodes` are treated as missing edges,
    never as errors. All accessors take and return identifiers.
    """

    root_id: str
    nodes: dict[str, Person]
    edges: list[FamilyEdge] = field(default_factory=list)

    @property
    def root(self) -> Person:
        person = self.nodes.get(self.root_id)
        if person is None:
            raise PersonNotFoundError(self.root_id)
        return person

    def __contains__(self, person_id: object) -> bool:
        return person_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def lookup(self, person_id: str | None) -> Person | None:
        if person_id is None:
            return None
        return self.nodes.get(person_id)

    def require(self, person_id: str) -> Person:
        person = self.lookup(person_id)
        if person is None:
            raise PersonNotFoundError(person_id)
        return person

    def name_of(self, person_id: str) -> str:
        person = self.lookup(person_id)
        return person.name if person else "Unknown"

    def father(self, person_id: str) -> str | None:
        person = self.lookup(person_id)
        if person and person.father_id in self.nodes:
            return person.father_id
        return None

    def mother(self, person_id: str) -> str | None:
        person = self.lookup(person_id)
        if person and person.mother_id in self.nodes:
            return person.mother_id
        return None

    def parents(self, person_id: str) -> list[str]:
        """Father then mother, skipping unresolved slots."""
        return [p for p in (self.father(person_id), self.mother(person_id)) if p]

    def spouses(self, person_id: str) -> list[str]:
        person = self.lookup(person_id)
        if person is None:
            return []
        return [s for s in person.spouse_ids if s in self.nodes]

    def children(self, person_id: str) -> list[str]:
        person = self.lookup(person_id)
        if person is None:
            return []
        return [c for c in person.child_ids if c in self.nodes]

    def relatives(self, person_id: str) -> list[tuple[str, str]]:
        """
        Directly connected people as (relationship, id) pairs.

        Order is fixed: father, mother, each child in declaration order,
        then each spouse in declaration order. Path search depends on it.
        """
        related: list[tuple[str, str]] = []
        father = self.father(person_id)
        if father:
            related.append(("father", father))
        mother = self.mother(person_id)
        if mother:
            related.append(("mother", mother))
        related.extend(("child", c) for c in self.children(person_id))
        related.extend(("spouse", s) for s in self.spouses(person_id))
        return related
