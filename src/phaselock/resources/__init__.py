"""Bundled resources distributed with phaselock."""
