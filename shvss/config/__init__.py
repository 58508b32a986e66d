"""Settings, logging setup and the subscription store."""
