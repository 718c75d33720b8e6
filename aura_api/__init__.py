"""Neuro Aura backend: auth codes, lava.top payments, course access and uploads."""
