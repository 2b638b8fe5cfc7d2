"""Service layer implementing the volume lifecycle."""
