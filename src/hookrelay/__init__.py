"""Two-hop webhook relay: public validator and private receiver."""
