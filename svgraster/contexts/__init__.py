"""Bounded contexts of svgraster."""
