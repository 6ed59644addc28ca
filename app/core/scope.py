from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from app.core.models import Expediente, Rol


class ScopeKind(str, Enum):
    ALL = "ALL"
    OWNED_BY = "OWNED_BY"


@dataclass(frozen=True)
class Scope:
    kind: ScopeKind
    owner_id: int | None = None

    @classmethod
    def all(cls) -> Scope:
        return cls(ScopeKind.ALL)

    @classmethod
    def owned_by(cls, agent_id: int) -> Scope:
        return cls(ScopeKind.OWNED_BY, agent_id)

    def apply(self, query):
        if self.kind == ScopeKind.ALL:
            return query
        return query.filter(Expediente.asesor_id == self.owner_id)

    def allows(self, expediente: Expediente) -> bool:
        return self.kind == ScopeKind.ALL or expediente.asesor_id == self.owner_id


def scope_for(identity) -> Scope:
    if identity.rol in {Rol.ADMIN.value, Rol.REVISOR.value}:
        return Scope.all()
    return Scope.owned_by(identity.id)
