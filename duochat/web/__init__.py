"""Web API around the debate engine."""
