"""HTTP surface for reviewguard."""
