"""Domain entities."""

from app.domain.entities.principal import PrincipalEntity

__all__ = ["PrincipalEntity"]
