"""Botola Pro fantasy football backend: squads, transfers, scoring and mini-leagues."""
