"""Analizadores de anomalías registrados con ``@rule``.

Anomaly analyzers registered through ``@rule``.
"""
