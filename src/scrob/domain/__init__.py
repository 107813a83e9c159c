"""Domain layer: entities, value objects, exceptions and repository ports."""
