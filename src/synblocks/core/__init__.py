"""Core value types and indices for synteny block decompositions."""
