"""Examples: gyroscope tilt integration and the drift guard."""
