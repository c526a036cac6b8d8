"""Administrative HTTP surface over the pool manager."""
