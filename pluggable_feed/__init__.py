"""Pluggable Feed API - personalized feed pages with per-user ranking strategies."""
