"""HTTP surface for Bugwatch Core."""
