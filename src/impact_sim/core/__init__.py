"""Pure simulation core: indicators, orbital kinematics and the frame loop."""
