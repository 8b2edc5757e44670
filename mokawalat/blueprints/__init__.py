"""Blueprint packages, one per business area."""
