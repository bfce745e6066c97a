"""Agent wallet sweep and deletion settlement engine."""
