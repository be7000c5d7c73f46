"""API de sensores: ingesta, liveness y control de actuadores."""
