"""Web API for the mock test engine."""
