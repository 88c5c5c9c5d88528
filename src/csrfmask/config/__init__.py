"""csrfmask configuration properties."""
