"""CLI module for hookbot."""
