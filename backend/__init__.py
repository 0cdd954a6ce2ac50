"""Web API for the proposal engine."""
