"""Domain models and validation rules."""
