"""Festival drink catalog: fetching, local preferences, filtering and sorting."""
