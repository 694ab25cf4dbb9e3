"""SAMIT job board and language school backend."""
