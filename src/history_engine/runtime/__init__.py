"""Runtime services (telemetry) shared by the history engine."""
