"""Domain layer: value objects, the profile entity and the recalculation engine."""
