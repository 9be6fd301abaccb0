"""HTTP routes for the device emulator."""
