"""Núcleo de simulación y detección de anomalías.

Simulation and anomaly-detection core.
"""
