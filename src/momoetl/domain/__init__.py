"""Domain layer for the momoetl pipeline."""
