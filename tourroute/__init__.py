"""Walking-route retrieval for point-of-interest tours."""
