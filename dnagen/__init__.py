"""
dnagen - DNA generation service

A genome engine (generation, canonical string codec, latent projection,
similarity, crossover and point mutation) with a small JSON API on top.
"""

__version__ = '0.1.0'
