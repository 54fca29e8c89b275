"""
Stakeholder personas and their criteria weights.
"""

import logging
from typing import Dict, Iterable, List, Optional

from ..core.models import Persona, PersonaWeights

logger = logging.getLogger(__name__)


class RankingLookupError(KeyError):
    """Requested persona is not in the catalog."""

    def __init__(self, persona_id: str, available: Iterable[str] = ()):
        self.persona_id = persona_id
        self.available = list(available)
        super().__init__(persona_id)

    def __str__(self) -> str:
        options = ", ".join(self.available) or "none"
        return f"Unknown persona '{self.persona_id}' (available: {options})"


class CatalogError(RuntimeError):
    """Persona catalog is missing or empty."""


DEFAULT_PERSONAS: List[Persona] = [
    Persona(
        id="environmentally-conscious",
        name="Environmentally Conscious",
        description="Prioritizes sustainability and renewable energy integration.",
        weights=PersonaWeights(
            energy_efficiency=0.2,
            res_integration=0.267,
            sustainability=0.333,
            user_comfort=0.133,
            financial=0.067,
        ),
    ),
    Persona(
        id="comfort-driven",
        name="Comfort-Driven",
        description="Prioritizes indoor comfort and energy efficiency.",
        weights=PersonaWeights(
            energy_efficiency=0.267,
            res_integration=0.067,
            sustainability=0.133,
            user_comfort=0.333,
            financial=0.2,
        ),
    ),
    Persona(
        id="cost-optimization",
        name="Cost-Optimization Oriented",
        description="Prioritizes financial returns and cost savings.",
        weights=PersonaWeights(
            energy_efficiency=0.267,
            res_integration=0.2,
            sustainability=0.067,
            user_comfort=0.133,
            financial=0.333,
        ),
    ),
]


class PersonaCatalog:
    """Read-only lookup of personas by id."""

    def __init__(self, personas: Optional[Iterable[Persona]] = None):
        items = list(DEFAULT_PERSONAS if personas is None else personas)
        if not items:
            raise CatalogError("persona catalog is empty")
        self._personas: Dict[str, Persona] = {p.id: p for p in items}

    def __len__(self) -> int:
        return len(self._personas)

    def __iter__(self):
        return iter(self._personas.values())

    def __contains__(self, persona_id: object) -> bool:
        return persona_id in self._personas

    @property
    def ids(self) -> List[str]:
        return list(self._personas)

    def find(self, persona_id: str) -> Optional[Persona]:
        return self._personas.get(persona_id)

    def get(self, persona_id: str) -> Persona:
        persona = self._personas.get(persona_id)
        if persona is None:
            raise RankingLookupError(persona_id, self._personas)
        return persona
