"""Service layer: scraping, flattening and dependency wiring."""
