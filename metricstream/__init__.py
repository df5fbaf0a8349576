"""Near-real-time Metricbeat telemetry over HTTP and WebSocket."""
