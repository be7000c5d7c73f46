"""Infraestructura compartida: configuración, BD y liveness."""
