"""
======================== ÍNDICE / INDEX ========================
1. Descripción general / Overview
2. Componentes principales / Main components
3. Notas de mantenimiento / Maintenance notes

======================== ESPAÑOL ========================
Archivo: `src/votewatch/__init__.py`.
Simulador de monitoreo electoral con detección estadística de anomalías.

Componentes detectados:
  - (sin componentes de nivel de módulo / no top-level components)

Notas:
- Mantener esta cabecera sincronizada con cambios estructurales del archivo.

======================== ENGLISH ========================
File: `src/votewatch/__init__.py`.
Election monitoring simulator with statistical anomaly detection.

Detected components:
  - (sin componentes de nivel de módulo / no top-level components)

Notes:
- Keep this header in sync with structural changes in the file.
"""

__version__ = "0.4.0"
