"""Packaged resource files for csrfmask."""
