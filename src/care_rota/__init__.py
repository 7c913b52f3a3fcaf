"""Care Rota daily engine.

This package is organized by feature modules (attendance, shifts, daily, stats,
refresh, rota) with a thin Flask controller layer over plain service objects.
"""
