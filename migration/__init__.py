"""Migrate old Hugo posts into page bundles for the new theme."""
