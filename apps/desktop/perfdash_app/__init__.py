"""PerfDash desktop application entrypoints."""
